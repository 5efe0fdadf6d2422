from fastapi import APIRouter, Depends, Request, Response
import orjson
import structlog
from ..services.event_log import EventLog
from ..validation import is_valid

router = APIRouter()
log = structlog.get_logger()

ALLOW_ORIGIN = {"Access-Control-Allow-Origin": "*"}
PREFLIGHT_HEADERS = {
    **ALLOW_ORIGIN,
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "*",
}
JSON_HEADERS = {"content-type": "application/json", **ALLOW_ORIGIN}


def get_event_log(request: Request) -> EventLog:
    return request.app.state.event_log


def internal_error() -> Response:
    return Response("Internal server error", status_code=500, media_type="text/plain")


@router.options("/")
async def preflight():
    return Response(status_code=204, headers=PREFLIGHT_HEADERS)


@router.get("/")
async def list_events(event_log: EventLog = Depends(get_event_log)):
    try:
        events = await event_log.list_all()
        content = orjson.dumps(events)
    except Exception as e:
        log.error("event.list_failed", error=str(e), error_type=type(e).__name__, exc_info=True)
        return internal_error()

    return Response(content, status_code=200, headers=JSON_HEADERS)


@router.post("/")
async def log_event(request: Request, event_log: EventLog = Depends(get_event_log)):
    # Malformed JSON and store failures both surface as an opaque 500
    try:
        body = orjson.loads(await request.body())

        if not is_valid(body):
            event_log.reject()
            return Response("Request is invalid", status_code=400, media_type="text/plain")

        stored = await event_log.record(body)
        log.info("event.logged", event_type=stored.event, date_submitted=stored.dateSubmitted)
    except Exception as e:
        log.error("event.log_failed", error=str(e), error_type=type(e).__name__, exc_info=True)
        return internal_error()

    return Response("Log received", status_code=200, headers=JSON_HEADERS)
