"""Request descriptors: the exact outbound request, used as the cache key."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from assetcache.errors import InvalidResourceError

if TYPE_CHECKING:
    from collections.abc import Mapping

_SUPPORTED_SCHEMES = frozenset({"http", "https"})


@dataclass(frozen=True)
class AssetRequest:
    """Method, URL and request headers of one outbound request.

    Headers are stored as a sorted tuple of ``(lower-cased name, value)``
    pairs so that equal requests hash equally regardless of input order.
    """

    url: str
    method: str = "GET"
    headers: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_url(
        cls,
        url: str | None,
        *,
        headers: Mapping[str, str] | None = None,
        method: str = "GET",
    ) -> AssetRequest:
        """Build a request for *url*, failing fast when it is unusable.

        Raises:
            InvalidResourceError: If *url* is missing, empty, not http(s), or
                has no host.
        """
        if url is None:
            raise InvalidResourceError(
                "Resource URL is missing",
                hint="Pass url='https://...' when constructing the loader.",
            )
        if not isinstance(url, str) or not url.strip():
            raise InvalidResourceError(
                f"Resource URL is empty or not a string: {url!r}",
                url=url if isinstance(url, str) else None,
            )

        url = url.strip()
        try:
            parts = urlsplit(url)
        except ValueError as e:
            raise InvalidResourceError(f"Malformed resource URL: {url!r}", url=url) from e

        if parts.scheme.lower() not in _SUPPORTED_SCHEMES:
            raise InvalidResourceError(
                f"Unsupported URL scheme {parts.scheme!r} in {url!r}",
                hint="Only http:// and https:// resources can be fetched.",
                url=url,
            )
        if not parts.hostname:
            raise InvalidResourceError(f"Resource URL has no host: {url!r}", url=url)
        if any(ch.isspace() or not ch.isprintable() for ch in parts.netloc):
            raise InvalidResourceError(
                f"Resource URL host contains whitespace or control characters: {url!r}",
                url=url,
            )
        try:
            parts.port
        except ValueError as e:
            raise InvalidResourceError(
                f"Invalid port in resource URL: {url!r}", url=url
            ) from e

        return cls(
            url=url,
            method=method.upper(),
            headers=normalize_headers(headers),
        )

    @property
    def header_dict(self) -> dict[str, str]:
        """Return headers as a plain dict for transports."""
        return dict(self.headers)


def normalize_headers(
    headers: Mapping[str, str] | tuple[tuple[str, str], ...] | None,
) -> tuple[tuple[str, str], ...]:
    """Return headers as a sorted, lower-cased tuple of pairs."""
    if not headers:
        return ()
    items = headers.items() if hasattr(headers, "items") else headers
    return tuple(sorted((str(k).lower(), str(v)) for k, v in items))
