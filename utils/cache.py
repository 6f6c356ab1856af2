# utils/cache.py
"""
In-process TTL cache used for dashboard statistics and exchange rates.

Entries live in a dict guarded by a lock; expired entries are dropped on
read and by cleanup().
"""
import threading
import time
from typing import Any, Callable, Optional

DEFAULT_TTL_SECONDS = 300


class TTLCache:
     def __init__(self, default_ttl: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
          self.default_ttl = default_ttl
          self._clock = clock
          self._entries: dict[str, tuple[Any, float]] = {}
          self._lock = threading.Lock()

     def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
          expires_at = self._clock() + (self.default_ttl if ttl is None else ttl)
          with self._lock:
               self._entries[key] = (value, expires_at)

     def get(self, key: str) -> Optional[Any]:
          with self._lock:
               entry = self._entries.get(key)
               if entry is None:
                    return None
               value, expires_at = entry
               if self._clock() > expires_at:
                    del self._entries[key]
                    return None
               return value

     def delete(self, key: str) -> None:
          with self._lock:
               self._entries.pop(key, None)

     def clear(self) -> None:
          with self._lock:
               self._entries.clear()

     def cleanup(self) -> int:
          """Drop expired entries and return how many were removed."""
          now = self._clock()
          with self._lock:
               expired = [key for key, (_, expires_at) in self._entries.items() if now > expires_at]
               for key in expired:
                    del self._entries[key]
          return len(expired)

     def stats(self) -> dict:
          with self._lock:
               return {"size": len(self._entries), "keys": list(self._entries)}

     def get_or_set(self, key: str, factory: Callable[[], Any], ttl: Optional[float] = None) -> Any:
          value = self.get(key)
          if value is None:
               value = factory()
               self.set(key, value, ttl)
          return value


def generate_cache_key(prefix: str, **params) -> str:
     """
     Build a stable key from a prefix and keyword params.

     generate_cache_key("stats", user=3, role="landlord") -> "stats:role:landlord|user:3"
     """
     if not params:
          return prefix
     joined = "|".join(f"{key}:{params[key]}" for key in sorted(params))
     return f"{prefix}:{joined}"
