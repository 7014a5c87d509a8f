"""Process-wide default collaborators for loaders that are not given any.

Loaders resolve these only when constructed without an explicit cache store or
transport. Tests and applications can swap them with ``set_default_cache_store``
and ``set_default_transport``; ``aclose_defaults`` releases the shared HTTP
client. The defaults serve one event loop at a time.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from assetcache.config import Config
from assetcache.store import MemoryCacheStore
from assetcache.transport import HttpxTransport

if TYPE_CHECKING:
    from assetcache.store import CacheStore
    from assetcache.transport import Transport

_lock = threading.Lock()
_cache_store: CacheStore | None = None
_transport: Transport | None = None


def default_cache_store() -> CacheStore:
    """Return the shared cache store, creating it from ``Config()`` on first use."""
    global _cache_store
    with _lock:
        if _cache_store is None:
            _cache_store = MemoryCacheStore(ttl_seconds=Config().cache_ttl_seconds)
        return _cache_store


def default_transport() -> Transport:
    """Return the shared transport, creating it from ``Config()`` on first use."""
    global _transport
    with _lock:
        if _transport is None:
            _transport = HttpxTransport(config=Config())
        return _transport


def set_default_cache_store(store: CacheStore | None) -> None:
    """Replace the shared cache store; *None* recreates it lazily."""
    global _cache_store
    with _lock:
        _cache_store = store


def set_default_transport(transport: Transport | None) -> Transport | None:
    """Replace the shared transport; *None* recreates it lazily.

    Returns the replaced transport, which is not closed here; pass it to
    ``aclose()`` (or use ``aclose_defaults``) when it owns a client.
    """
    global _transport
    with _lock:
        previous, _transport = _transport, transport
        return previous


async def aclose_defaults() -> None:
    """Close the shared transport and forget both defaults.

    The default ``HttpxTransport`` keeps an ``httpx.AsyncClient`` bound to the
    event loop it was first used on. Call this before that loop ends (for
    example at the end of the coroutine given to ``asyncio.run``); the next
    use then creates fresh defaults on the new loop.
    """
    global _cache_store
    previous = set_default_transport(None)
    with _lock:
        _cache_store = None
    aclose = getattr(previous, "aclose", None)
    if aclose is not None:
        await aclose()
