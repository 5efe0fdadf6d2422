"""Shape checks for client-submitted event bodies."""
from typing import Any

from .event_models import EVENT_NAMES, PAGE_LOAD, ADD_TO_CART


def _is_present(value: Any) -> bool:
    # JSON-client truthiness: empty objects and arrays count as present
    if value is None:
        return False
    if isinstance(value, (dict, list)):
        return True
    return bool(value)


def is_valid(body: Any) -> bool:
    """
    Check whether a decoded request body is a loggable event.

    Extra fields anywhere in the body are ignored.

    Args:
        body: Decoded JSON value of the request body

    Returns:
        True if the body can be stored, False otherwise
    """
    if not isinstance(body, dict):
        return False

    event = body.get("event")
    if not isinstance(event, str) or event not in EVENT_NAMES:
        return False

    if not isinstance(body.get("eventSessionId"), str):
        return False

    data = body.get("data")
    if not isinstance(data, dict):
        return False

    if event == PAGE_LOAD:
        if not isinstance(data.get("referredFrom"), str):
            return False
    elif event == ADD_TO_CART:
        if not _is_present(data.get("selectedItemsData")) or not isinstance(data.get("url"), str):
            return False

    return True
