from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Literal
from datetime import datetime, timezone

EVENT_NAMESPACE = "event"
PAGE_LOAD = "pageLoad"
ADD_TO_CART = "addToCart"
EVENT_NAMES = (PAGE_LOAD, ADD_TO_CART)

EventName = Literal["pageLoad", "addToCart"]


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T12:00:00.123Z."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class StoredEvent(BaseModel):
    """An accepted event as persisted. Unknown client fields are carried through."""

    model_config = ConfigDict(extra="allow", frozen=True)

    event: EventName = Field(..., description="Event type discriminator")
    eventSessionId: str = Field(..., description="Client session identifier")
    data: Dict[str, Any] = Field(default_factory=dict)
    dateSubmitted: str = Field(..., description="Server-assigned ISO-8601 timestamp")

    @classmethod
    def stamp(cls, body: Dict[str, Any], date_submitted: str) -> "StoredEvent":
        return cls.model_validate({**body, "dateSubmitted": date_submitted})

    @property
    def key(self) -> tuple[str, str, str]:
        return (EVENT_NAMESPACE, self.event, self.dateSubmitted)
