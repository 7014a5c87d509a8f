"""assetcache: cache-first, cancellable async asset loading.

Public API:
    - ImageLoader / DocumentLoader: identity-comparable loader values
    - LoadController: drives a loader through Empty -> Success | Failure
    - AssetView / render_phase: presentation binding
    - MemoryCacheStore / HttpxTransport: default collaborators
    - Config: configuration dataclass
    - aclose_defaults: release the shared HTTP client before the loop ends
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version
import logging

from assetcache.config import Config
from assetcache.controller import LoadController
from assetcache.decoders import DocumentAsset, ImageAsset, decode_document, decode_image
from assetcache.defaults import (
    aclose_defaults,
    default_cache_store,
    default_transport,
    set_default_cache_store,
    set_default_transport,
)
from assetcache.errors import (
    AssetCacheError,
    ConfigurationError,
    InvalidPayloadError,
    InvalidResourceError,
    InvalidResponseError,
    LoadError,
)
from assetcache.fetch import cache_or_fetch
from assetcache.loaders import AssetLoader, CachedLoader, DocumentLoader, ImageLoader
from assetcache.phase import EMPTY, AsyncPhase, Empty, Failure, Success, is_settled
from assetcache.request import AssetRequest
from assetcache.store import CachedResponse, CacheStore, MemoryCacheStore
from assetcache.transport import HttpxTransport, Transport, TransportResponse
from assetcache.view import AssetView, DocumentDisplay, ImageDisplay, render_phase

try:
    __version__ = version("assetcache")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("assetcache").addHandler(logging.NullHandler())


async def load[T](loader: AssetLoader[T]) -> T:
    """Load a single asset without a controller.

    Example:
        asset = await assetcache.load(ImageLoader("https://example.test/a.png"))
    """
    return await loader.load_asset()


async def load_phase[T](loader: AssetLoader[T]) -> AsyncPhase[T]:
    """Run one attempt for *loader* and return its settled phase."""
    async with LoadController(loader) as controller:
        return await controller.wait()


__all__ = [
    "EMPTY",
    "AssetCacheError",
    "AssetLoader",
    "AssetRequest",
    "AssetView",
    "AsyncPhase",
    "CacheStore",
    "CachedLoader",
    "CachedResponse",
    "Config",
    "ConfigurationError",
    "DocumentAsset",
    "DocumentDisplay",
    "DocumentLoader",
    "Empty",
    "Failure",
    "HttpxTransport",
    "ImageAsset",
    "ImageDisplay",
    "ImageLoader",
    "InvalidPayloadError",
    "InvalidResourceError",
    "InvalidResponseError",
    "LoadController",
    "LoadError",
    "MemoryCacheStore",
    "Success",
    "Transport",
    "TransportResponse",
    "aclose_defaults",
    "cache_or_fetch",
    "decode_document",
    "decode_image",
    "default_cache_store",
    "default_transport",
    "is_settled",
    "load",
    "load_phase",
    "render_phase",
    "set_default_cache_store",
    "set_default_transport",
]
