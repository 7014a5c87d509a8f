"""Presentation binding: map phases onto placeholder, content and error renderers.

Display options here are presentation-only. They never take part in loader
identity or cache keys, so changing them never triggers a reload.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Literal, get_args

from assetcache.errors import ConfigurationError
from assetcache.phase import Empty, Failure, Success

if TYPE_CHECKING:
    from collections.abc import Callable

    from pypdf import PageObject

    from assetcache.controller import LoadController
    from assetcache.decoders import DocumentAsset
    from assetcache.phase import AsyncPhase

ContentMode = Literal["fit", "fill"]
DisplayMode = Literal[
    "single_page", "single_page_continuous", "two_up", "two_up_continuous"
]
DisplayDirection = Literal["horizontal", "vertical"]


def render_phase[T, R](
    phase: AsyncPhase[T],
    *,
    content: Callable[[T], R],
    placeholder: Callable[[], R],
    error: Callable[[BaseException], R],
) -> R:
    """Call exactly one renderer for *phase* and return its result."""
    match phase:
        case Empty():
            return placeholder()
        case Success(value=value):
            return content(value)
        case Failure(error=exc):
            return error(exc)
        case _:
            raise TypeError(f"Unknown phase variant: {phase!r}")


class AssetView[T, R]:
    """Keep a rendered value in sync with a controller's phase.

    ``rendered`` always holds the output of the renderer matching the current
    phase; *on_render* (if given) is called after every re-render.
    """

    def __init__(
        self,
        controller: LoadController[T],
        *,
        content: Callable[[T], R],
        placeholder: Callable[[], R],
        error: Callable[[BaseException], R],
        on_render: Callable[[R], None] | None = None,
    ) -> None:
        self._content = content
        self._placeholder = placeholder
        self._error = error
        self._on_render = on_render
        self.render_count = 0
        self.rendered: R = self._render(controller.phase)
        self._unsubscribe = controller.subscribe(self._handle_phase)

    def _render(self, phase: AsyncPhase[T]) -> R:
        self.render_count += 1
        return render_phase(
            phase,
            content=self._content,
            placeholder=self._placeholder,
            error=self._error,
        )

    def _handle_phase(self, phase: AsyncPhase[T]) -> None:
        self.rendered = self._render(phase)
        if self._on_render is not None:
            self._on_render(self.rendered)

    def detach(self) -> None:
        """Stop following the controller."""
        self._unsubscribe()


@dataclass(frozen=True)
class ImageDisplay:
    """How a loaded image is laid out; ``None`` content mode keeps natural size."""

    resizable: bool = False
    content_mode: ContentMode | None = None

    def __post_init__(self) -> None:
        mode = self.content_mode
        if mode is not None and mode not in get_args(ContentMode):
            raise ConfigurationError(
                f"Unknown content_mode: {mode!r}",
                hint="Use 'fit', 'fill' or None for the natural size.",
            )

    def with_resizable(self, resizable: bool = True) -> ImageDisplay:
        return replace(self, resizable=resizable)

    def scaled_to_fit(self) -> ImageDisplay:
        return replace(self, resizable=True, content_mode="fit")

    def scaled_to_fill(self) -> ImageDisplay:
        return replace(self, resizable=True, content_mode="fill")


@dataclass(frozen=True)
class DocumentDisplay:
    """How a loaded PDF is presented.

    Defaults match a paged, horizontally scrolling reader that scales pages
    to fit. ``current_page`` is 1-based.
    """

    auto_scale: bool = True
    display_mode: DisplayMode = "single_page_continuous"
    display_direction: DisplayDirection = "horizontal"
    current_page: int | None = None

    def __post_init__(self) -> None:
        """Reject unknown modes and page numbers early."""
        if self.display_mode not in get_args(DisplayMode):
            raise ConfigurationError(
                f"Unknown display_mode: {self.display_mode!r}",
                hint=f"Supported modes: {', '.join(get_args(DisplayMode))}",
            )
        if self.display_direction not in get_args(DisplayDirection):
            raise ConfigurationError(
                f"Unknown display_direction: {self.display_direction!r}",
                hint="Use 'horizontal' or 'vertical'.",
            )
        if self.current_page is not None and self.current_page < 1:
            raise ConfigurationError(
                f"current_page must be >= 1, got {self.current_page}"
            )

    def with_auto_scale(self, auto_scale: bool) -> DocumentDisplay:
        return replace(self, auto_scale=auto_scale)

    def with_display_mode(self, mode: DisplayMode) -> DocumentDisplay:
        return replace(self, display_mode=mode)

    def with_display_direction(self, direction: DisplayDirection) -> DocumentDisplay:
        return replace(self, display_direction=direction)

    def with_current_page(self, page: int | None) -> DocumentDisplay:
        return replace(self, current_page=page)

    def total_pages(self, asset: DocumentAsset) -> int:
        return asset.page_count

    def page(self, asset: DocumentAsset) -> PageObject:
        """Return the current page (the first page when unset).

        Raises:
            ConfigurationError: If ``current_page`` is past the last page.
        """
        number = self.current_page or 1
        if number > asset.page_count:
            raise ConfigurationError(
                f"current_page {number} is out of range (document has "
                f"{asset.page_count} pages)"
            )
        return asset.reader.pages[number - 1]
