"""Event log service on top of a pluggable key-value store."""
from datetime import datetime
from typing import Any, Callable, Dict, List
import structlog

from ..config import Settings, get_settings
from ..event_models import EVENT_NAMESPACE, StoredEvent, utc_timestamp
from ..metrics import Metrics
from ..store.base import KVStore, Record
from ..store.memory import MemoryStore
from ..store.redis_kv import RedisStore

log = structlog.get_logger()


class EventLog:
    """
    Stamps accepted events and keeps them in the configured store.

    The store is shared by every request handled by the application.
    """

    def __init__(
        self,
        store: KVStore,
        metrics: Metrics | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize event log.

        Args:
            store: Backend store to write to and scan from
            metrics: Optional Prometheus metrics to update on writes
            clock: Optional source of the current time (UTC)
        """
        self._store = store
        self._metrics = metrics
        self._clock = clock

    @property
    def store(self) -> KVStore:
        return self._store

    async def record(self, body: Dict[str, Any]) -> StoredEvent:
        """
        Stamp a validated body with dateSubmitted and persist it.

        Args:
            body: Request body that already passed validation

        Returns:
            The stored event
        """
        now = self._clock() if self._clock else None
        stored = StoredEvent.stamp(body, utc_timestamp(now))
        record = stored.model_dump()

        log.info("event.logging", record=record)

        await self._store.put(stored.key, record)

        if self._metrics:
            self._metrics.record_event_logged(stored.event)
        return stored

    def reject(self) -> None:
        """Count a submission that failed validation."""
        if self._metrics:
            self._metrics.record_event_rejected()

    async def list_all(self) -> List[Record]:
        """Every stored event, grouped by type and ordered by submission time."""
        return await self._store.scan((EVENT_NAMESPACE,))

    async def health_check(self) -> bool:
        """Check backend store health."""
        return await self._store.health_check()

    async def close(self) -> None:
        await self._store.close()


def create_store(settings: Settings | None = None) -> KVStore:
    """
    Create the store selected by configuration.

    Returns:
        KVStore instance based on the STORE_BACKEND setting
    """
    settings = settings or get_settings()
    if settings.STORE_BACKEND == "redis":
        if not settings.REDIS_URL:
            log.warning(
                "store.fallback",
                requested="redis",
                actual="memory",
                reason="REDIS_URL not configured"
            )
            return MemoryStore()

        log.info("store.selected", type="redis", url=str(settings.REDIS_URL))
        return RedisStore(str(settings.REDIS_URL), key_prefix=settings.REDIS_KEY_PREFIX)
    else:
        log.info("store.selected", type="memory")
        return MemoryStore()
