"""Cache store: request-keyed byte payloads with optional expiry.

The pipeline only asks a store two questions: "is there an entry for this
exact request?" and "what are its payload bytes?". Freshness and eviction are
the store's own business.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import threading
import time
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from assetcache.errors import ConfigurationError
from assetcache.request import AssetRequest  # noqa: TC001 - used at runtime

if TYPE_CHECKING:
    from collections.abc import Awaitable


class CachedResponse(BaseModel):
    """A stored response: status, headers and raw payload bytes."""

    model_config = ConfigDict(frozen=True)

    status_code: int = Field(ge=100, le=599)
    headers: dict[str, str] = Field(default_factory=dict)
    payload: bytes
    stored_at: float = Field(default_factory=time.time)


@runtime_checkable
class CacheStore(Protocol):
    """Minimal store protocol: lookup and best-effort store.

    ``lookup`` may return the entry directly or an awaitable resolving to it.
    Stores may additionally expose ``remove(request)`` so that entries whose
    payload no longer decodes can be invalidated.
    """

    def lookup(
        self, request: AssetRequest
    ) -> CachedResponse | None | Awaitable[CachedResponse | None]:
        """Return the entry stored for *request*, if any."""
        ...

    def store(self, request: AssetRequest, response: CachedResponse) -> object:
        """Store *response* under *request*."""
        ...


@dataclass
class MemoryCacheStore:
    """In-process store keyed by exact request, with optional TTL.

    Expired entries are treated as absent and dropped on lookup. There is no
    size bound; clear the store or use a TTL to release memory.
    """

    ttl_seconds: float | None = None
    _entries: dict[AssetRequest, CachedResponse] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self) -> None:
        """Validate the TTL."""
        if self.ttl_seconds is not None and self.ttl_seconds < 0:
            raise ConfigurationError(
                f"MemoryCacheStore.ttl_seconds must be >= 0, got {self.ttl_seconds}",
                hint="Pass None to keep entries until they are removed.",
            )

    def lookup(self, request: AssetRequest) -> CachedResponse | None:
        """Get the entry if it exists and has not expired."""
        with self._lock:
            entry = self._entries.get(request)
            if entry is None:
                return None
            if self._is_expired(entry):
                del self._entries[request]
                return None
            return entry

    def store(self, request: AssetRequest, response: CachedResponse) -> None:
        """Store *response*, replacing any previous entry for *request*."""
        with self._lock:
            self._entries[request] = response

    def remove(self, request: AssetRequest) -> None:
        """Drop the entry for *request* if present."""
        with self._lock:
            self._entries.pop(request, None)

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, request: object) -> bool:
        if not isinstance(request, AssetRequest):
            return False
        return self.lookup(request) is not None

    def _is_expired(self, entry: CachedResponse) -> bool:
        if self.ttl_seconds is None:
            return False
        return time.time() >= entry.stored_at + self.ttl_seconds
