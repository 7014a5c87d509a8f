"""Network transport: fetch one request and hand back status, headers and bytes.

Transports do not judge the status code; ``cache_or_fetch`` does. They only
turn transport-level failures into ``InvalidResponseError``.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import httpx

from assetcache.config import Config
from assetcache.errors import InvalidResponseError, exception_chain

if TYPE_CHECKING:
    from assetcache.request import AssetRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    """Raw response as received from the network."""

    status_code: int
    payload: bytes
    headers: dict[str, str] = field(default_factory=dict)


@runtime_checkable
class Transport(Protocol):
    """Minimal transport protocol: a single async fetch."""

    async def fetch(self, request: AssetRequest) -> TransportResponse:
        """Perform *request* and return the raw response."""
        ...


def status_code_of(exc: BaseException) -> int | None:
    """Find the HTTP status behind a failure raised by a custom transport.

    ``HttpxTransport`` returns non-2xx responses as data, so this only applies
    to transports that raise, for example via ``response.raise_for_status()``.
    """
    for e in exception_chain(exc):
        if isinstance(e, httpx.HTTPStatusError):
            return e.response.status_code
        value = getattr(e, "status_code", None)
        if isinstance(value, int) and 100 <= value <= 599:
            return value
    return None


def _transport_hint(exc: BaseException) -> str | None:
    for e in exception_chain(exc):
        if isinstance(e, httpx.TimeoutException):
            return "The request timed out (raise Config.timeout_s or ASSETCACHE_TIMEOUT_S)."
        if isinstance(e, httpx.ConnectError):
            return "Could not connect to the host; check the URL and network access."
        if isinstance(e, httpx.TooManyRedirects):
            return "Too many redirects; the resource URL may be misconfigured."
    return None


def wrap_transport_error(
    exc: BaseException,
    *,
    url: str | None,
    message: str | None = None,
) -> InvalidResponseError:
    """Map a transport exception into ``InvalidResponseError``.

    ``asyncio.CancelledError`` is re-raised unchanged: cancellation is not a
    load failure.
    """
    if isinstance(exc, asyncio.CancelledError):
        raise exc

    # Already wrapped; fill in missing context only.
    if isinstance(exc, InvalidResponseError):
        if exc.url is None:
            exc.url = url
        return exc

    status_code = status_code_of(exc)
    status_note = f" (status={status_code})" if isinstance(status_code, int) else ""
    msg = message or f"Fetching {url} failed"
    cause = str(exc) or type(exc).__name__
    return InvalidResponseError(
        f"{msg}{status_note}: {cause}",
        hint=_transport_hint(exc),
        url=url,
        status_code=status_code,
    )


class HttpxTransport:
    """Transport backed by ``httpx.AsyncClient``.

    When no client is given one is created lazily from *config* and owned by
    this transport; ``aclose()`` closes only an owned client.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        config: Config | None = None,
    ) -> None:
        """Initialize with an optional client and configuration."""
        self.config = config or Config()
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        """Lazily initialize and return the httpx client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout_s),
                follow_redirects=bool(self.config.follow_redirects),
                headers={"User-Agent": str(self.config.user_agent)},
            )
            self._owns_client = True
        return self._client

    async def fetch(self, request: AssetRequest) -> TransportResponse:
        """Send *request* and read the full body."""
        client = self._get_client()
        try:
            response = await client.request(
                request.method,
                request.url,
                headers=request.header_dict,
            )
        except asyncio.CancelledError:
            raise
        except httpx.HTTPError as e:
            raise wrap_transport_error(e, url=request.url) from e

        logger.debug(
            "Fetched %s %s status=%d bytes=%d",
            request.method,
            request.url,
            response.status_code,
            len(response.content),
        )
        return TransportResponse(
            status_code=response.status_code,
            payload=response.content,
            headers=dict(response.headers),
        )

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HttpxTransport:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
