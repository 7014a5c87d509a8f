"""Cache-or-fetch: prefer a cached payload, else fetch, decode and store.

Every loader shares this procedure; loaders differ only in their decode step.

Payloads are decoded before they are stored, so a response that does not
decode is never cached. A cached entry that no longer decodes is removed from
stores that support removal.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING, TypeVar

from assetcache.errors import InvalidPayloadError, InvalidResponseError
from assetcache.store import CachedResponse
from assetcache.transport import wrap_transport_error

if TYPE_CHECKING:
    from collections.abc import Callable

    from assetcache.request import AssetRequest
    from assetcache.store import CacheStore
    from assetcache.transport import Transport

T = TypeVar("T")

logger = logging.getLogger(__name__)


def is_success_status(status_code: int) -> bool:
    """Return True for 2xx status codes."""
    return 200 <= status_code <= 299


async def cache_or_fetch(
    request: AssetRequest,
    *,
    cache: CacheStore,
    transport: Transport,
    decode: Callable[[bytes], T],
) -> T:
    """Return the decoded asset for *request*, consulting *cache* first.

    Args:
        request: Exact outbound request; also the cache key.
        cache: Store consulted before, and populated after, the network.
        transport: Used only on a cache miss.
        decode: Turns payload bytes into the asset.

    Raises:
        InvalidResponseError: Non-2xx status or transport failure.
        InvalidPayloadError: The payload could not be decoded.
    """
    entry = await _lookup(cache, request)
    if entry is not None:
        logger.debug("Cache hit for %s %s", request.method, request.url)
        try:
            return _decode(decode, entry.payload, url=request.url)
        except InvalidPayloadError:
            await _invalidate(cache, request)
            raise

    logger.debug("Cache miss for %s %s", request.method, request.url)
    try:
        response = await transport.fetch(request)
    except (asyncio.CancelledError, InvalidResponseError):
        raise
    except Exception as e:
        raise wrap_transport_error(e, url=request.url) from e

    if not is_success_status(response.status_code):
        raise InvalidResponseError(
            f"Fetching {request.url} returned status {response.status_code}",
            url=request.url,
            status_code=response.status_code,
        )

    asset = _decode(decode, response.payload, url=request.url)
    await _store(cache, request, response.status_code, response.headers, response.payload)
    return asset


async def _lookup(cache: CacheStore, request: AssetRequest) -> CachedResponse | None:
    entry = cache.lookup(request)
    if inspect.isawaitable(entry):
        entry = await entry
    return entry


async def _store(
    cache: CacheStore,
    request: AssetRequest,
    status_code: int,
    headers: dict[str, str],
    payload: bytes,
) -> None:
    """Store the response; failures are logged, never raised."""
    try:
        result = cache.store(
            request,
            CachedResponse(status_code=status_code, headers=headers, payload=payload),
        )
        if inspect.isawaitable(result):
            await result
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.warning("Cache store failed for %s: %s", request.url, exc)


async def _invalidate(cache: CacheStore, request: AssetRequest) -> None:
    remove = getattr(cache, "remove", None)
    if not callable(remove):
        return
    try:
        result = remove(request)
        if inspect.isawaitable(result):
            await result
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.warning("Cache invalidation failed for %s: %s", request.url, exc)
    else:
        logger.debug("Invalidated undecodable cache entry for %s", request.url)


def _decode(decode: Callable[[bytes], T], payload: bytes, *, url: str) -> T:
    try:
        return decode(payload)
    except InvalidPayloadError as e:
        if e.url is None:
            e.url = url
        raise
    except Exception as e:
        raise InvalidPayloadError(
            f"Payload from {url} could not be decoded: {type(e).__name__}: {e}",
            url=url,
        ) from e
