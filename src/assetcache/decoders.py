"""Payload decoders: raw bytes into displayable assets."""

from __future__ import annotations

from dataclasses import dataclass
import io

from PIL import Image, UnidentifiedImageError
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from assetcache.errors import ConfigurationError, InvalidPayloadError


@dataclass(frozen=True, eq=False)
class ImageAsset:
    """A decoded image plus the display scale it was requested at."""

    image: Image.Image
    scale: float = 1.0

    @property
    def size(self) -> tuple[int, int]:
        """Pixel size of the decoded image."""
        return self.image.size

    @property
    def point_size(self) -> tuple[float, float]:
        """Logical size: pixel size divided by scale."""
        width, height = self.image.size
        return (width / self.scale, height / self.scale)


@dataclass(frozen=True, eq=False)
class DocumentAsset:
    """A parsed PDF document."""

    reader: PdfReader

    @property
    def page_count(self) -> int:
        return len(self.reader.pages)


def decode_image(payload: bytes, *, scale: float = 1.0) -> ImageAsset:
    """Decode *payload* into an image.

    The image data is fully loaded here so truncated or corrupt payloads fail
    now rather than at render time.

    Raises:
        InvalidPayloadError: If the bytes are not a readable image.
    """
    if scale <= 0:
        raise ConfigurationError(f"scale must be > 0, got {scale}")
    if not payload:
        raise InvalidPayloadError("Image payload is empty")
    try:
        image = Image.open(io.BytesIO(payload))
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError) as e:
        raise InvalidPayloadError(f"Payload is not a valid image: {e}") from e
    except (OSError, SyntaxError, ValueError) as e:
        raise InvalidPayloadError(f"Image payload could not be decoded: {e}") from e
    return ImageAsset(image=image, scale=scale)


def decode_document(payload: bytes) -> DocumentAsset:
    """Decode *payload* into a PDF document.

    Raises:
        InvalidPayloadError: If the bytes are not a readable PDF.
    """
    if not payload:
        raise InvalidPayloadError("Document payload is empty")
    try:
        reader = PdfReader(io.BytesIO(payload))
        # Page tree parsing is lazy; force it so broken documents fail here.
        _ = len(reader.pages)
    except PyPdfError as e:
        raise InvalidPayloadError(f"Payload is not a valid PDF: {e}") from e
    except (OSError, ValueError, KeyError) as e:
        raise InvalidPayloadError(f"PDF payload could not be decoded: {e}") from e
    return DocumentAsset(reader=reader)
