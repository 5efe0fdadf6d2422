"""Tests for the event intake and listing endpoint."""
import pytest
from datetime import datetime, timezone
from httpx import AsyncClient, ASGITransport
from structlog.testing import capture_logs
from eventlog.main import create_app
from helpers import FailingStore, page_load, add_to_cart


def client_for(app):
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.asyncio
async def test_post_page_load_then_list(app):
    """Test a valid pageLoad is accepted and returned by GET."""
    async with client_for(app) as client:
        response = await client.post("/", json=page_load())
        assert response.status_code == 200
        assert response.text == "Log received"
        assert response.headers["content-type"] == "application/json"
        assert response.headers["access-control-allow-origin"] == "*"

        response = await client.get("/")
        assert response.status_code == 200
        events = response.json()
        assert len(events) == 1
        assert events[0]["event"] == "pageLoad"
        assert events[0]["eventSessionId"] == "s1"
        assert events[0]["data"]["referredFrom"] == "google"
        assert "dateSubmitted" in events[0]


@pytest.mark.asyncio
async def test_add_to_cart_without_selected_items_rejected(app, store):
    async with client_for(app) as client:
        response = await client.post(
            "/",
            json={"event": "addToCart", "eventSessionId": "s2", "data": {"url": "/p/1"}},
        )
        assert response.status_code == 400
        assert response.text == "Request is invalid"
    assert len(store) == 0


@pytest.mark.asyncio
async def test_unknown_event_rejected(app, store):
    async with client_for(app) as client:
        response = await client.post(
            "/", json={"event": "bogus", "eventSessionId": "s3", "data": {}}
        )
        assert response.status_code == 400
    assert len(store) == 0


@pytest.mark.asyncio
async def test_rejected_event_not_logged(app):
    """Test a 400 leaves no application log entry, only the access line."""
    async with client_for(app) as client:
        with capture_logs() as logs:
            response = await client.post(
                "/", json={"event": "addToCart", "eventSessionId": "s2", "data": {"url": "/p/1"}}
            )

    assert response.status_code == 400
    assert [entry for entry in logs if entry["event"] != "http_request"] == []


@pytest.mark.asyncio
async def test_accepted_event_logged(app):
    async with client_for(app) as client:
        with capture_logs() as logs:
            response = await client.post("/", json=page_load())

    assert response.status_code == 200
    logged = [entry for entry in logs if entry["event"] == "event.logging"]
    assert len(logged) == 1
    assert logged[0]["record"]["eventSessionId"] == "s1"


@pytest.mark.asyncio
async def test_rejection_counted(app):
    async with client_for(app) as client:
        await client.post("/", json={"event": "bogus"})

    metrics = app.state.metrics
    assert metrics.registry.get_sample_value("eventlog_events_rejected_total") == 1.0


@pytest.mark.asyncio
async def test_get_empty_store(app):
    async with client_for(app) as client:
        response = await client.get("/")
        assert response.status_code == 200
        assert response.json() == []
        assert response.headers["content-type"] == "application/json"
        assert response.headers["access-control-allow-origin"] == "*"


@pytest.mark.asyncio
async def test_options_preflight(app):
    async with client_for(app) as client:
        response = await client.options("/")
        assert response.status_code == 204
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"
        assert response.headers["access-control-allow-headers"] == "*"


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["DELETE", "PUT", "PATCH"])
async def test_other_methods_not_allowed(app, method):
    async with client_for(app) as client:
        response = await client.request(method, "/")
        assert response.status_code == 405
        assert response.content == b""


@pytest.mark.asyncio
async def test_malformed_json_is_internal_error(app, store):
    """Test unparsable bodies surface as 500, same as store failures."""
    async with client_for(app) as client:
        response = await client.post(
            "/", content=b"{not json", headers={"content-type": "application/json"}
        )
        assert response.status_code == 500
        assert response.text == "Internal server error"
    assert len(store) == 0


@pytest.mark.asyncio
async def test_empty_body_is_internal_error(app):
    async with client_for(app) as client:
        response = await client.post("/", content=b"")
        assert response.status_code == 500


@pytest.mark.asyncio
async def test_store_failure_on_post():
    app = create_app(store=FailingStore())
    async with client_for(app) as client:
        response = await client.post("/", json=page_load())
        assert response.status_code == 500
        assert response.text == "Internal server error"


@pytest.mark.asyncio
async def test_store_failure_on_get():
    app = create_app(store=FailingStore())
    async with client_for(app) as client:
        response = await client.get("/")
        assert response.status_code == 500
        assert response.text == "Internal server error"


@pytest.mark.asyncio
async def test_service_keeps_serving_after_failure(app):
    async with client_for(app) as client:
        response = await client.post("/", content=b"[")
        assert response.status_code == 500

        response = await client.post("/", json=page_load())
        assert response.status_code == 200


@pytest.mark.asyncio
async def test_get_is_idempotent(app):
    async with client_for(app) as client:
        await client.post("/", json=page_load())
        await client.post("/", json=add_to_cart())

        first = await client.get("/")
        second = await client.get("/")
        assert first.json() == second.json()
        assert len(first.json()) == 2


@pytest.mark.asyncio
async def test_round_trip_adds_only_date_submitted(app):
    """Test the stored entry equals the body plus a fresh timestamp."""
    body = add_to_cart()
    body["userAgent"] = "Mozilla/5.0"
    now = datetime.now(timezone.utc)
    start = now.replace(microsecond=now.microsecond // 1000 * 1000)

    async with client_for(app) as client:
        before = (await client.get("/")).json()
        response = await client.post("/", json=body)
        assert response.status_code == 200
        after = (await client.get("/")).json()

    new_entries = [e for e in after if e not in before]
    assert len(new_entries) == 1
    entry = new_entries[0]

    date_submitted = entry.pop("dateSubmitted")
    assert entry == body
    assert date_submitted.endswith("Z")
    submitted = datetime.fromisoformat(date_submitted.replace("Z", "+00:00"))
    assert submitted >= start


@pytest.mark.asyncio
async def test_client_supplied_date_overwritten(app):
    async with client_for(app) as client:
        await client.post("/", json={**page_load(), "dateSubmitted": "1999-01-01T00:00:00.000Z"})
        events = (await client.get("/")).json()

    assert events[0]["dateSubmitted"] != "1999-01-01T00:00:00.000Z"


@pytest.mark.asyncio
async def test_correlation_id_preserved(app):
    async with client_for(app) as client:
        response = await client.post(
            "/", json=page_load(), headers={"X-Correlation-ID": "test-correlation-123"}
        )
        assert response.headers["x-correlation-id"] == "test-correlation-123"
