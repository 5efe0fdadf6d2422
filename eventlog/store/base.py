"""Base interface for ordered key-value store backends."""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Tuple

Key = Tuple[str, ...]
Record = Dict[str, Any]


class KVStore(ABC):
    """Abstract interface for ordered key-value store implementations."""

    @abstractmethod
    async def put(self, key: Key, value: Record) -> None:
        """
        Store a record under a key, replacing any existing value.

        Args:
            key: Ordered key parts, e.g. ("event", "pageLoad", "2024-...Z")
            value: JSON-serializable record
        """
        pass

    @abstractmethod
    async def scan(self, prefix: Key) -> List[Record]:
        """
        Return every record whose key starts with the given parts.

        Args:
            prefix: Leading key parts to match

        Returns:
            Records in ascending key order
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the backend is healthy and accessible.

        Returns:
            True if backend is healthy, False otherwise
        """
        pass

    async def close(self) -> None:
        """Release any connections held by the store."""
