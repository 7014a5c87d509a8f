"""Pytest configuration and fixtures.

Provides environment isolation, logging configuration, test doubles for the
cache store and transport, and small valid/invalid asset payloads.
"""

from __future__ import annotations

from contextlib import suppress
from dataclasses import dataclass, field
import io
import logging
import os

from PIL import Image
from pypdf import PdfWriter
import pytest

from assetcache import defaults
from assetcache.request import AssetRequest  # noqa: TC001 - used at runtime
from assetcache.store import CachedResponse, MemoryCacheStore
from assetcache.transport import TransportResponse

# =============================================================================
# Test Doubles
# =============================================================================


@dataclass
class FakeTransport:
    """Transport test double.

    Returns scripted responses (or raises scripted exceptions) in order and
    records every request it was asked to fetch. When the script runs out the
    last item is repeated.
    """

    script: list[TransportResponse | BaseException] = field(default_factory=list)
    requests: list[AssetRequest] = field(default_factory=list)

    @property
    def fetch_calls(self) -> int:
        return len(self.requests)

    async def fetch(self, request: AssetRequest) -> TransportResponse:
        self.requests.append(request)
        if not self.script:
            raise AssertionError(f"unexpected fetch of {request.url}")
        item = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(item, BaseException):
            raise item
        return item


@dataclass
class RecordingStore(MemoryCacheStore):
    """MemoryCacheStore that counts calls and can be told to fail on store."""

    lookups: int = 0
    stores: int = 0
    removals: int = 0
    fail_store: bool = False

    def lookup(self, request: AssetRequest) -> CachedResponse | None:
        self.lookups += 1
        return super().lookup(request)

    def store(self, request: AssetRequest, response: CachedResponse) -> None:
        self.stores += 1
        if self.fail_store:
            raise OSError("disk full")
        super().store(request, response)

    def remove(self, request: AssetRequest) -> None:
        self.removals += 1
        super().remove(request)


def ok(payload: bytes, status_code: int = 200) -> TransportResponse:
    """Build a transport response with a content-type header."""
    return TransportResponse(
        status_code=status_code,
        payload=payload,
        headers={"content-type": "application/octet-stream"},
    )


# =============================================================================
# Payload Fixtures
# =============================================================================


@pytest.fixture(scope="session")
def png_bytes() -> bytes:
    """A valid 4x2 PNG."""
    buf = io.BytesIO()
    Image.new("RGB", (4, 2), color=(200, 10, 10)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture(scope="session")
def pdf_bytes() -> bytes:
    """A valid two-page PDF."""
    writer = PdfWriter()
    writer.add_blank_page(width=72, height=72)
    writer.add_blank_page(width=72, height=72)
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()


@pytest.fixture
def corrupt_bytes() -> bytes:
    return b"\x00\x01this is not an image or a pdf"


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_assetcache_env(request, monkeypatch):
    """Clear ASSETCACHE_* env vars so configuration tests start clean.

    Opt-out: @pytest.mark.allow_env_pollution
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return
    for key in list(os.environ.keys()):
        if key.startswith("ASSETCACHE_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def reset_default_collaborators():
    """Never let a test reach the process-wide store or a real network."""
    defaults.set_default_cache_store(None)
    defaults.set_default_transport(FakeTransport())
    yield
    defaults.set_default_cache_store(None)
    defaults.set_default_transport(None)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Suppress noisy third-party loggers."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)
    logging.getLogger("pypdf").setLevel(logging.WARNING)
