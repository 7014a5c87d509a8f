"""Asset loaders: one capability, several asset kinds.

A loader is a frozen value. Its identity (URL, request headers and any
kind-specific parameters such as ``scale``) decides whether a controller
restarts; the injected cache store and transport never take part in it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from assetcache.decoders import DocumentAsset, ImageAsset, decode_document, decode_image
from assetcache.defaults import default_cache_store, default_transport
from assetcache.errors import ConfigurationError
from assetcache.fetch import cache_or_fetch
from assetcache.request import AssetRequest, normalize_headers

if TYPE_CHECKING:
    from assetcache.store import CacheStore
    from assetcache.transport import Transport


@runtime_checkable
class AssetLoader[T](Protocol):
    """Anything that can asynchronously produce an asset.

    Implementations must be hashable values with value equality, and
    ``load_asset`` must be safe to call repeatedly and concurrently.
    """

    async def load_asset(self) -> T:
        """Load the asset, raising a ``LoadError`` subclass on failure."""
        ...


@dataclass(frozen=True)
class CachedLoader[T]:
    """Shared shell for loaders backed by cache-or-fetch.

    Subclasses supply ``decode``; everything else (request construction,
    cache consultation, fetching, storing) happens here.
    """

    url: str | None
    headers: tuple[tuple[str, str], ...] = field(default=(), kw_only=True)
    cache: CacheStore | None = field(
        default=None, compare=False, repr=False, kw_only=True
    )
    transport: Transport | None = field(
        default=None, compare=False, repr=False, kw_only=True
    )

    def __post_init__(self) -> None:
        """Normalize headers so equal header sets compare equal."""
        object.__setattr__(self, "headers", normalize_headers(self.headers))

    def request(self) -> AssetRequest:
        """Build the outbound request (raises ``InvalidResourceError``)."""
        return AssetRequest.from_url(self.url, headers=dict(self.headers))

    def decode(self, payload: bytes) -> T:
        """Turn payload bytes into the asset."""
        raise NotImplementedError

    async def load_asset(self) -> T:
        """Return the asset from the cache, or fetch, decode and cache it."""
        request = self.request()
        cache = self.cache if self.cache is not None else default_cache_store()
        transport = self.transport if self.transport is not None else default_transport()
        return await cache_or_fetch(
            request,
            cache=cache,
            transport=transport,
            decode=self.decode,
        )


@dataclass(frozen=True)
class ImageLoader(CachedLoader[ImageAsset]):
    """Load an image, decoding with Pillow.

    Example:
        loader = ImageLoader("https://example.test/a.png", scale=2.0)
        asset = await loader.load_asset()
    """

    scale: float = 1.0

    def __post_init__(self) -> None:
        """Validate scale."""
        super().__post_init__()
        if not self.scale > 0:
            raise ConfigurationError(
                f"scale must be > 0, got {self.scale}",
                hint="Use 1.0 for 1x assets, 2.0 for @2x assets.",
            )

    def decode(self, payload: bytes) -> ImageAsset:
        return decode_image(payload, scale=self.scale)


@dataclass(frozen=True)
class DocumentLoader(CachedLoader[DocumentAsset]):
    """Load a PDF document, decoding with pypdf."""

    def decode(self, payload: bytes) -> DocumentAsset:
        return decode_document(payload)
