"""Test helpers (small, reusable doubles).

Keep this file tiny and purpose-built: it exists to prevent test suites from
growing lots of one-off transport subclasses as coverage expands.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from assetcache.request import AssetRequest  # noqa: TC001 - used at runtime
from assetcache.transport import TransportResponse
from tests.conftest import FakeTransport


@dataclass
class GateTransport(FakeTransport):
    """FakeTransport that holds each URL's fetch until released.

    ``responses`` maps URL to the response served once its gate opens, so
    tests can decide in which order concurrent attempts complete.
    """

    responses: dict[str, TransportResponse | BaseException] = field(
        default_factory=dict
    )
    gates: dict[str, asyncio.Event] = field(default_factory=dict)
    started: dict[str, asyncio.Event] = field(default_factory=dict)
    cancelled: list[str] = field(default_factory=list)

    def gate(self, url: str) -> asyncio.Event:
        return self.gates.setdefault(url, asyncio.Event())

    def started_event(self, url: str) -> asyncio.Event:
        return self.started.setdefault(url, asyncio.Event())

    def release(self, url: str) -> None:
        self.gate(url).set()

    async def fetch(self, request: AssetRequest) -> TransportResponse:
        self.requests.append(request)
        self.started_event(request.url).set()
        try:
            await self.gate(request.url).wait()
        except asyncio.CancelledError:
            self.cancelled.append(request.url)
            raise
        item = self.responses[request.url]
        if isinstance(item, BaseException):
            raise item
        return item


@dataclass
class StubbornLoader:
    """Loader that ignores cancellation and always returns its value.

    Used to prove that stale results are discarded even when a loader does
    not cooperate with cancellation.
    """

    url: str
    value: str
    release: asyncio.Event = field(default_factory=asyncio.Event, compare=False)

    def __hash__(self) -> int:
        return hash((self.url, self.value))

    async def load_asset(self) -> str:
        while not self.release.is_set():
            try:
                await self.release.wait()
            except asyncio.CancelledError:
                continue
        return self.value
