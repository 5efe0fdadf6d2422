"""Redis-backed ordered key-value store."""
from typing import List
import structlog
import orjson
from redis.asyncio import Redis
from redis.exceptions import RedisError
from .base import KVStore, Key, Record

log = structlog.get_logger()

KEY_SEPARATOR = b"\x00"


def encode_key(key: Key) -> bytes:
    """Join key parts into a single byte string that sorts like the tuple."""
    return KEY_SEPARATOR.join(part.encode("utf-8") for part in key)


class RedisStore(KVStore):
    """Redis implementation of the key-value store.

    Keys live in a sorted set with every score at 0, so ZRANGEBYLEX walks
    them in byte order. Values live in a hash keyed by the encoded key.
    """

    def __init__(self, redis_url: str, key_prefix: str = "eventlog"):
        """
        Initialize Redis store.

        Args:
            redis_url: Redis connection URL
            key_prefix: Namespace for the index and value keys in Redis
        """
        self.redis_url = redis_url
        self._client: Redis | None = None
        self._index_key = f"{key_prefix}:keys"
        self._values_key = f"{key_prefix}:values"

    def _get_client(self) -> Redis:
        """Get or create Redis client."""
        if self._client is None:
            self._client = Redis.from_url(
                self.redis_url,
                decode_responses=False,  # keys and values are raw bytes
                socket_connect_timeout=5,
                socket_timeout=5
            )
        return self._client

    async def put(self, key: Key, value: Record) -> None:
        """
        Write a record and index its key in one transaction.

        Raises:
            RedisError: If unable to write to Redis
        """
        encoded = encode_key(key)
        try:
            pipe = self._get_client().pipeline(transaction=True)
            pipe.zadd(self._index_key, {encoded: 0})
            pipe.hset(self._values_key, encoded, orjson.dumps(value))
            await pipe.execute()
        except RedisError as e:
            log.error("redis.put_failed", error=str(e), key=list(key))
            raise

    async def scan(self, prefix: Key) -> List[Record]:
        """
        List records under a key prefix in key order.

        Raises:
            RedisError: If unable to read from Redis
        """
        start = encode_key(prefix) + KEY_SEPARATOR if prefix else b""
        try:
            client = self._get_client()
            members = await client.zrangebylex(
                self._index_key,
                b"[" + start if start else b"-",
                b"[" + start + b"\xff" if start else b"+",
            )
            if not members:
                return []

            values = await client.hmget(self._values_key, members)
            return [orjson.loads(raw) for raw in values if raw is not None]

        except RedisError as e:
            log.error("redis.scan_failed", error=str(e), prefix=list(prefix))
            raise

    async def health_check(self) -> bool:
        """
        Check Redis connection health.

        Returns:
            True if Redis is accessible, False otherwise
        """
        try:
            return bool(await self._get_client().ping())
        except Exception as e:
            log.warning("redis.health_check_failed", error=str(e))
            return False

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client:
            await self._client.aclose()
            self._client = None
