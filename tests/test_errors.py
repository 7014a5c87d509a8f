from __future__ import annotations

import pytest

from assetcache.errors import (
    AssetCacheError,
    ConfigurationError,
    InvalidPayloadError,
    InvalidResourceError,
    InvalidResponseError,
    LoadError,
    exception_chain,
)

pytestmark = pytest.mark.unit


def test_invalid_response_error_structured_metadata() -> None:
    err = InvalidResponseError(
        "boom",
        hint="do this",
        url="https://example.test/a.png",
        status_code=404,
    )

    assert str(err) == "boom"
    assert err.hint == "do this"
    assert err.url == "https://example.test/a.png"
    assert err.status_code == 404


def test_load_error_defaults_to_none() -> None:
    err = InvalidResponseError("fail")
    assert err.hint is None
    assert err.url is None
    assert err.status_code is None


def test_subclass_hierarchy() -> None:
    """Every load failure is catchable as LoadError and AssetCacheError."""
    for cls in (InvalidResourceError, InvalidResponseError, InvalidPayloadError):
        err = cls("x")
        assert isinstance(err, LoadError)
        assert isinstance(err, AssetCacheError)

    assert not isinstance(ConfigurationError("x"), LoadError)


def test_exception_chain_follows_causes_and_stops_at_a_cycle() -> None:
    root = ValueError("root")
    middle = KeyError("middle")
    middle.__cause__ = root
    top = RuntimeError("top")
    top.__context__ = middle
    root.__context__ = top  # cycle

    seen = list(exception_chain(top))

    assert seen[0] is top
    assert seen == [top, middle, root]
