"""In-memory key-value store."""
import copy
from typing import List
import structlog
from .base import KVStore, Key, Record

log = structlog.get_logger()


class MemoryStore(KVStore):
    """In-memory implementation of the key-value store.

    Values are copied on the way in and out so callers cannot mutate
    what has been stored.
    """

    def __init__(self):
        self._data: dict[Key, Record] = {}

    async def put(self, key: Key, value: Record) -> None:
        self._data[tuple(key)] = copy.deepcopy(value)
        log.debug("store.put", key=list(key), backend="memory")

    async def scan(self, prefix: Key) -> List[Record]:
        prefix = tuple(prefix)
        size = len(prefix)
        return [
            copy.deepcopy(self._data[key])
            for key in sorted(self._data)
            if key[:size] == prefix
        ]

    async def health_check(self) -> bool:
        """In-memory store is always healthy."""
        return True

    def __len__(self) -> int:
        return len(self._data)
