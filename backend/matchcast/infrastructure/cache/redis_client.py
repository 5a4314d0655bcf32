"""
Redis Response Store

Optional shared backend for the response cache. Values are stored as JSON
under a common key prefix so several deployments can share one Redis
database. When REDIS_HOST is unset the store stays disabled and every
operation is a no-op.
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Iterator, Optional

import redis

logger = logging.getLogger(__name__)


@dataclass
class RedisConfig:
    """Connection settings, read from the environment when omitted."""
    host: Optional[str] = None
    port: Optional[int] = None
    password: Optional[str] = None
    db: int = 0
    key_prefix: str = "matchcast:"
    socket_timeout: float = 5.0

    def __post_init__(self):
        if self.host is None:
            self.host = os.getenv("REDIS_HOST") or None
        if self.port is None:
            self.port = int(os.getenv("REDIS_PORT", "6379"))
        if self.password is None:
            self.password = os.getenv("REDIS_PASSWORD") or None

    @property
    def enabled(self) -> bool:
        return bool(self.host)


class RedisResponseStore:
    """JSON key/value store on top of redis-py."""

    def __init__(self, config: Optional[RedisConfig] = None, client: Optional[Any] = None):
        """
        Initialize the store.

        Args:
            config: Connection settings
            client: Ready redis.Redis (or compatible) client; built from
                config when omitted
        """
        self.config = config or RedisConfig()
        self._client = client

        if self._client is None and self.config.enabled:
            self._client = self._connect()
        elif self._client is None:
            logger.info("REDIS_HOST not set, response cache is memory-only")

    def _connect(self) -> Optional[redis.Redis]:
        client = redis.Redis(
            host=self.config.host,
            port=self.config.port,
            db=self.config.db,
            password=self.config.password,
            decode_responses=True,
            socket_timeout=self.config.socket_timeout,
            retry_on_timeout=True,
        )
        try:
            client.ping()
        except redis.RedisError as e:
            logger.error(f"Redis at {self.config.host}:{self.config.port} unreachable: {e}")
            return None
        logger.info(f"Response cache backed by Redis at {self.config.host}:{self.config.port}")
        return client

    def _key(self, key: str) -> str:
        return f"{self.config.key_prefix}{key}"

    @property
    def is_connected(self) -> bool:
        if self._client is None:
            return False
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False

    def load(self, key: str) -> Optional[Any]:
        """Return the decoded value for key, or None when absent or unreadable."""
        if self._client is None:
            return None
        try:
            raw = self._client.get(self._key(key))
        except redis.RedisError as e:
            logger.warning(f"Redis read failed for {key}: {e}")
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"Dropping undecodable Redis entry {key}")
            self.discard(key)
            return None

    def store(self, key: str, value: Any, ttl_seconds: int) -> bool:
        """Encode value as JSON and write it with an expiry."""
        if self._client is None:
            return False
        try:
            payload = json.dumps(value, default=str)
        except (TypeError, ValueError) as e:
            logger.warning(f"Value for {key} is not JSON serializable: {e}")
            return False
        try:
            return bool(self._client.set(self._key(key), payload, ex=max(1, int(ttl_seconds))))
        except redis.RedisError as e:
            logger.warning(f"Redis write failed for {key}: {e}")
            return False

    def discard(self, key: str) -> bool:
        if self._client is None:
            return False
        try:
            return bool(self._client.delete(self._key(key)))
        except redis.RedisError as e:
            logger.warning(f"Redis delete failed for {key}: {e}")
            return False

    def iter_keys(self) -> Iterator[str]:
        """Yield the stored keys (prefix stripped)."""
        if self._client is None:
            return
        prefix = self.config.key_prefix
        try:
            for full_key in self._client.scan_iter(match=f"{prefix}*"):
                yield full_key[len(prefix):]
        except redis.RedisError as e:
            logger.warning(f"Redis key scan failed: {e}")

    def purge(self) -> int:
        """Delete every key under the prefix. Returns how many were removed."""
        return sum(1 for key in list(self.iter_keys()) if self.discard(key))


_store_instance: Optional[RedisResponseStore] = None


def get_redis_store() -> RedisResponseStore:
    """Get the process-wide Redis store."""
    global _store_instance
    if _store_instance is None:
        _store_instance = RedisResponseStore()
    return _store_instance
