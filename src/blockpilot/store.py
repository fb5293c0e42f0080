# blockpilot/store.py
# AI-Mind (C) 2025 by Martin Bukowski is licensed under CC BY-NC-SA 4.0
"""Key-value persistence for the trust lists and conversation log.

Values are JSON documents. Reads never fail: a missing or unreadable
entry returns the caller's default. Writes are full rewrites.
"""

from abc import ABC, abstractmethod
import contextlib
import json
import logging
import os
from pathlib import Path
import tempfile
from typing import Any, Optional

import redis

from .config import BotConfig

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    @abstractmethod
    def load(self, key: str, default: Any = None) -> Any:
        """Return the stored value for ``key``, or ``default``."""
        pass

    @abstractmethod
    def save(self, key: str, value: Any) -> bool:
        """Replace the value for ``key``. Returns False if the write failed."""
        pass


class MemoryStore(KeyValueStore):
    """Process-local store, used when nothing should touch disk."""

    def __init__(self):
        self.data: dict[str, Any] = {}

    def load(self, key: str, default: Any = None) -> Any:
        if key not in self.data:
            return default
        return json.loads(self.data[key])

    def save(self, key: str, value: Any) -> bool:
        self.data[key] = json.dumps(value)
        return True


class JsonFileStore(KeyValueStore):
    """One JSON file per key under ``data_dir`` (``trusted`` -> ``trusted.json``)."""

    def __init__(self, data_dir: str):
        self.data_dir = Path(data_dir)

    def path_for(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def load(self, key: str, default: Any = None) -> Any:
        path = self.path_for(key)
        if not path.exists():
            return default
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read {path}, using default: {e}")
            return default

    def save(self, key: str, value: Any) -> bool:
        path = self.path_for(key)
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{key}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(value, fh, indent=2)
            os.replace(tmp_name, path)
            tmp_name = None
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to write {path}: {e}")
            return False
        finally:
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)


class RedisStore(KeyValueStore):
    """JSON values under namespaced Redis keys.

    If Redis is unreachable at startup the store degrades to returning
    defaults and dropping writes, like the cache it is modelled on.
    """

    def __init__(self, url: str, namespace: str = "blockpilot:", client: Optional[redis.Redis] = None):
        self.namespace = namespace
        if client is not None:
            self.redis = client
            return
        try:
            self.redis = redis.Redis.from_url(
                url,
                decode_responses=True,
                socket_timeout=5,
                socket_connect_timeout=5,
                health_check_interval=30,
            )
            self.redis.ping()
            logger.info(f"Connected to Redis store at {url}")
        except redis.ConnectionError as e:
            logger.warning(f"Failed to connect to Redis store: {e}")
            self.redis = None

    def _make_key(self, key: str) -> str:
        return f"{self.namespace}{key}"

    def load(self, key: str, default: Any = None) -> Any:
        if not self.redis:
            return default
        try:
            raw = self.redis.get(self._make_key(key))
        except redis.RedisError as e:
            logger.warning(f"Redis store get error: {e}")
            return default
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Corrupt value at {self._make_key(key)}, using default: {e}")
            return default

    def save(self, key: str, value: Any) -> bool:
        if not self.redis:
            return False
        try:
            return bool(self.redis.set(self._make_key(key), json.dumps(value)))
        except redis.RedisError as e:
            logger.warning(f"Redis store set error: {e}")
            return False


def build_store(config: BotConfig) -> KeyValueStore:
    """Create the store selected by ``config.store_backend``."""
    backend = config.store_backend.lower()
    if backend == "redis":
        return RedisStore(config.redis_url, config.redis_namespace)
    if backend == "memory":
        return MemoryStore()
    if backend != "file":
        logger.warning(f"Unknown store backend {config.store_backend!r}, using file")
    return JsonFileStore(config.data_dir)
