"""Key-value store clients used by the record service.

The service only needs a handful of primitives against a flat string
namespace; ``KVStore`` names them. ``RedisStore`` talks to a Redis server
through a pooled redis-py client, ``MemoryStore`` keeps everything in
process and backs the test suite and the ``memory`` development backend.
"""

from __future__ import annotations

import fnmatch
import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Dict, List, Optional

import redis

from registry.errors import ConfigError, StoreError

logger = logging.getLogger(__name__)


class KVStore(ABC):
    """Capability set required by the record service."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the value stored at ``key`` or None when absent."""
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def set_if_absent(self, key: str, value: str) -> bool:
        """Create ``key`` only if it does not exist. True when written."""
        raise NotImplementedError

    @abstractmethod
    def set_if_present(self, key: str, value: str) -> bool:
        """Overwrite ``key`` only if it exists. True when written."""
        raise NotImplementedError

    @abstractmethod
    def list_keys(self, pattern: str = '*') -> List[str]:
        raise NotImplementedError

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        pass


def parse_addr(addr: str):
    """Split a ``host:port`` address. Port defaults to 6379."""
    if not addr or not addr.strip():
        raise ConfigError('REDIS_ADDR is not set')
    host, sep, port = addr.strip().rpartition(':')
    if not sep:
        return addr.strip(), 6379
    if not host:
        raise ConfigError(f'REDIS_ADDR {addr!r} has no host')
    try:
        return host, int(port)
    except ValueError as exc:
        raise ConfigError(f'REDIS_ADDR {addr!r} has an invalid port') from exc


class RedisStore(KVStore):
    def __init__(self, client: redis.Redis, scan_count: int = 500):
        self._client = client
        self.scan_count = scan_count

    @classmethod
    def from_config(cls, config) -> 'RedisStore':
        """Build a pooled client from a Flask config mapping.

        ``REDIS_ADDR`` accepts ``host:port`` or a ``redis://`` URL. Every
        call made through the pool is bounded by ``REDIS_TIMEOUT_SEC``.
        """
        addr = config.get('REDIS_ADDR')
        timeout = float(config.get('REDIS_TIMEOUT_SEC', 5))
        password = config.get('REDIS_PASSWORD') or None
        db = int(config.get('REDIS_DB', 0))
        if addr and '://' in addr:
            pool = redis.ConnectionPool.from_url(
                addr,
                password=password,
                db=db,
                socket_timeout=timeout,
                socket_connect_timeout=timeout,
                decode_responses=True,
            )
        else:
            host, port = parse_addr(addr)
            pool = redis.ConnectionPool(
                host=host,
                port=port,
                password=password,
                db=db,
                socket_timeout=timeout,
                socket_connect_timeout=timeout,
                decode_responses=True,
            )
        logger.info("Configured redis store at %s (db=%s, timeout=%ss)", addr, db, timeout)
        return cls(redis.Redis(connection_pool=pool), scan_count=int(config.get('REDIS_SCAN_COUNT', 500)))

    @contextmanager
    def _call(self, op: str, key: str):
        try:
            yield
        except redis.exceptions.TimeoutError as exc:
            raise StoreError(f'redis {op} {key!r} timed out') from exc
        except redis.exceptions.RedisError as exc:
            raise StoreError(f'redis {op} {key!r} failed: {exc}') from exc

    def get(self, key):
        with self._call('GET', key):
            return self._client.get(key)

    def set(self, key, value):
        with self._call('SET', key):
            self._client.set(key, value)

    def set_if_absent(self, key, value):
        with self._call('SET NX', key):
            return bool(self._client.set(key, value, nx=True))

    def set_if_present(self, key, value):
        with self._call('SET XX', key):
            return bool(self._client.set(key, value, xx=True))

    def list_keys(self, pattern='*'):
        # SCAN walks the keyspace in batches instead of blocking the server like KEYS
        with self._call('SCAN', pattern):
            return list(self._client.scan_iter(match=pattern, count=self.scan_count))

    def ping(self):
        try:
            return bool(self._client.ping())
        except redis.exceptions.RedisError as exc:
            logger.warning("redis ping failed: %s", exc)
            return False

    def close(self):
        self._client.close()
        self._client.connection_pool.disconnect()


class MemoryStore(KVStore):
    """In-process store. Conditional writes are atomic under a lock."""

    def __init__(self, data: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(data or {})
        self._lock = threading.Lock()

    def get(self, key):
        with self._lock:
            return self._data.get(key)

    def set(self, key, value):
        with self._lock:
            self._data[key] = value

    def set_if_absent(self, key, value):
        with self._lock:
            if key in self._data:
                return False
            self._data[key] = value
            return True

    def set_if_present(self, key, value):
        with self._lock:
            if key not in self._data:
                return False
            self._data[key] = value
            return True

    def list_keys(self, pattern='*'):
        with self._lock:
            return [k for k in self._data if fnmatch.fnmatchcase(k, pattern)]


def build_store(config) -> KVStore:
    backend = (config.get('STORE_BACKEND') or 'redis').lower()
    if backend == 'memory':
        logger.warning("Using in-memory store; records are lost on restart")
        return MemoryStore()
    if backend == 'redis':
        return RedisStore.from_config(config)
    raise ConfigError(f'unknown STORE_BACKEND {backend!r}')
