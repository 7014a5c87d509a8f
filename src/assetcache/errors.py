"""Exception hierarchy for assetcache."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class AssetCacheError(Exception):
    """Base exception for all assetcache errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(AssetCacheError):
    """Configuration validation or resolution failed."""


class LoadError(AssetCacheError):
    """A load attempt failed.

    Every failure a loader reports to a controller is a ``LoadError``
    subclass; the controller stores it unchanged in ``Failure``.
    """

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.url = url


class InvalidResourceError(LoadError):
    """The loader's resource identifier is absent or malformed.

    Raised before any cache or network I/O happens.
    """


class InvalidResponseError(LoadError):
    """The transport returned a non-2xx status or failed at the transport level."""

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, hint=hint, url=url)
        self.status_code = status_code


class InvalidPayloadError(LoadError):
    """Fetched or cached bytes could not be decoded into the target asset."""


def exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc*, then what it was raised from, stopping at a repeat."""
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__
