from __future__ import annotations

"""Profile photo downscaling and base64 encoding."""
import base64
import io
import logging

from PIL import Image, UnidentifiedImageError

LOGGER = logging.getLogger(__name__)


class ImageDecodeError(Exception):
    """Raised when uploaded bytes cannot be decoded as an image."""


class ImageEncoder:
    PREVIEW_WIDTH = 150
    QUALITY = 50

    def __init__(self, *, width: int = PREVIEW_WIDTH, quality: int = QUALITY, wrap_lines: bool = True) -> None:
        self._width = width
        self._quality = quality
        self._wrap_lines = wrap_lines

    def preview_size(self, width: int, height: int) -> tuple[int, int]:
        # Integer division truncates, as the platform arithmetic does.
        return self._width, max(1, height * self._width // width)

    def decode(self, raw: bytes) -> Image.Image:
        try:
            image = Image.open(io.BytesIO(raw))
            image.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise ImageDecodeError(f"Unreadable image payload ({len(raw)} bytes)") from exc
        return image

    def encode(self, image: Image.Image) -> str:
        preview = image.resize(self.preview_size(image.width, image.height), Image.NEAREST)
        if preview.mode != "RGB":
            preview = preview.convert("RGB")
        buffer = io.BytesIO()
        preview.save(buffer, format="JPEG", quality=self._quality)
        payload = buffer.getvalue()
        LOGGER.debug("Encoded %sx%s preview into %d JPEG bytes", preview.width, preview.height, len(payload))
        if self._wrap_lines:
            return base64.encodebytes(payload).decode("ascii")
        return base64.b64encode(payload).decode("ascii")

    def encode_bytes(self, raw: bytes) -> str:
        return self.encode(self.decode(raw))
