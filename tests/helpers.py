"""Sample event bodies and stores shared by the tests."""
from eventlog.store.base import KVStore


def page_load(session_id: str = "s1", referred_from: str = "google") -> dict:
    return {
        "event": "pageLoad",
        "eventSessionId": session_id,
        "data": {"referredFrom": referred_from},
    }


def add_to_cart(session_id: str = "s2", url: str = "/p/1") -> dict:
    return {
        "event": "addToCart",
        "eventSessionId": session_id,
        "data": {
            "selectedItemsData": [{"sku": "A-1", "qty": 2}],
            "cartContents": {"items": 3},
            "url": url,
        },
    }


class FailingStore(KVStore):
    """Store whose every operation fails."""

    async def put(self, key, value):
        raise RuntimeError("store is down")

    async def scan(self, prefix):
        raise RuntimeError("store is down")

    async def health_check(self):
        return False
