"""Small thread-safe TTL cache for read endpoints."""

import threading
import time
from typing import Any, Dict, Optional, Tuple


class TTLCache:
    """Key/value cache whose entries expire ``ttl`` seconds after being set."""

    def __init__(self, default_ttl: float = 3600, clock=time.monotonic):
        self.default_ttl = default_ttl
        self.clock = clock
        self._lock = threading.Lock()
        self._items: Dict[str, Tuple[float, Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            item = self._items.get(key)
            if item is None:
                return None
            expires_at, value = item
            if self.clock() >= expires_at:
                del self._items[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        with self._lock:
            self._items[key] = (self.clock() + ttl, value)

    def clear_prefix(self, prefix: str) -> int:
        """Drop every key starting with ``prefix``; returns how many were dropped."""
        with self._lock:
            keys = [k for k in self._items if k.startswith(prefix)]
            for key in keys:
                del self._items[key]
            return len(keys)
