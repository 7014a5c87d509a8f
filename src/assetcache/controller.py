"""Load controller: drives one loader through the AsyncPhase state machine.

The controller owns at most one in-flight attempt. Handing it a loader that
differs (by value) from the current one cancels the in-flight attempt, resets
the phase to ``Empty`` and starts a new attempt. Results of superseded
attempts are discarded: the last *requested* loader wins, not the last one to
finish.

All phase writes happen on the event loop the controller was first driven
from; ``set_loader`` must be called from that loop. Attempts are started
immediately with ``create_task`` since their result blocks what the user sees.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from assetcache.errors import AssetCacheError
from assetcache.phase import EMPTY, Empty, Failure, Success

if TYPE_CHECKING:
    from collections.abc import Callable

    from assetcache.loaders import AssetLoader
    from assetcache.phase import AsyncPhase

logger = logging.getLogger(__name__)


def _describe(loader: object) -> str:
    url = getattr(loader, "url", None)
    return str(url) if url is not None else type(loader).__name__


class LoadController[T]:
    """Own the phase of one on-screen asset.

    Example:
        controller = LoadController(ImageLoader(url), on_change=render)
        phase = await controller.wait()
    """

    def __init__(
        self,
        loader: AssetLoader[T] | None = None,
        *,
        on_change: Callable[[AsyncPhase[T]], None] | None = None,
    ) -> None:
        """Create the controller and start loading *loader*, if given.

        Starting a load requires a running event loop.
        """
        self._loader: AssetLoader[T] | None = None
        self._phase: AsyncPhase[T] = EMPTY
        self._task: asyncio.Task[None] | None = None
        self._generation = 0
        self._loop: asyncio.AbstractEventLoop | None = None
        self._subscribers: list[Callable[[AsyncPhase[T]], None]] = []
        self._closed = False
        if on_change is not None:
            self.subscribe(on_change)
        if loader is not None:
            self.set_loader(loader)

    @property
    def phase(self) -> AsyncPhase[T]:
        """The current phase; replaced wholesale on every transition."""
        return self._phase

    @property
    def loader(self) -> AssetLoader[T] | None:
        return self._loader

    @property
    def generation(self) -> int:
        """Number of attempts started so far."""
        return self._generation

    def set_loader(self, loader: AssetLoader[T] | None, *, force: bool = False) -> bool:
        """Reconcile against *loader*; return True when the loader was replaced.

        An equal loader is a no-op unless *force* is set. ``None`` cancels any
        in-flight attempt and leaves the phase ``Empty``.
        """
        if self._closed:
            raise RuntimeError("LoadController is closed")
        if not force and loader == self._loader and (
            loader is None or self._task is not None
        ):
            return False

        loop = self._bind_loop()
        self._cancel_inflight()
        self._loader = loader
        self._generation += 1
        generation = self._generation
        self._task = None
        self._set_phase(EMPTY)

        # A subscriber may have replaced the loader while handling Empty.
        if generation != self._generation or loader is None:
            return True

        logger.debug("Starting attempt %d for %s", generation, _describe(loader))
        self._task = loop.create_task(
            self._run(loader, generation),
            name=f"assetcache.load:{_describe(loader)}",
        )
        return True

    def reload(self) -> bool:
        """Start a fresh attempt for the current loader."""
        if self._loader is None:
            return False
        return self.set_loader(self._loader, force=True)

    def subscribe(
        self, callback: Callable[[AsyncPhase[T]], None]
    ) -> Callable[[], None]:
        """Call *callback* with every new phase; returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            try:
                self._subscribers.remove(callback)
            except ValueError:
                pass

        return unsubscribe

    async def wait(self) -> AsyncPhase[T]:
        """Wait for the newest attempt to settle and return the phase.

        If the loader is replaced while waiting, waits for the replacement.
        """
        while self._task is not None and not self._task.done():
            await asyncio.wait({self._task})
        return self._phase

    def close(self) -> None:
        """Cancel in-flight work and stop accepting loaders."""
        self._closed = True
        self._cancel_inflight()
        self._subscribers.clear()

    async def aclose(self) -> None:
        """Cancel in-flight work and wait for the task to unwind."""
        task = self._task
        self.close()
        if task is not None and not task.done():
            await asyncio.wait({task})

    async def __aenter__(self) -> LoadController[T]:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # --- internals -------------------------------------------------------

    def _bind_loop(self) -> asyncio.AbstractEventLoop:
        loop = asyncio.get_running_loop()
        if self._loop is None:
            self._loop = loop
        elif self._loop is not loop:
            raise RuntimeError("LoadController is bound to a different event loop")
        return loop

    def _cancel_inflight(self) -> None:
        task = self._task
        if task is not None and not task.done():
            logger.debug("Cancelling attempt %d", self._generation)
            task.cancel()

    async def _run(self, loader: AssetLoader[T], generation: int) -> None:
        outcome: AsyncPhase[T]
        try:
            asset = await loader.load_asset()
        except asyncio.CancelledError:
            raise
        except AssetCacheError as e:
            logger.debug("Attempt %d failed: %s", generation, e)
            outcome = Failure(e)
        except Exception as e:
            logger.warning(
                "Loader %s raised an unexpected error", _describe(loader), exc_info=True
            )
            outcome = Failure(e)
        else:
            outcome = Success(asset)

        if generation != self._generation:
            logger.debug(
                "Discarding stale result of attempt %d (current %d)",
                generation,
                self._generation,
            )
            return
        self._set_phase(outcome)

    def _set_phase(self, phase: AsyncPhase[T]) -> None:
        if isinstance(phase, Empty) and isinstance(self._phase, Empty):
            return
        self._phase = phase
        for callback in list(self._subscribers):
            try:
                callback(phase)
            except Exception:
                logger.warning("Phase subscriber %r failed", callback, exc_info=True)
