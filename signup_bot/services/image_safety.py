from __future__ import annotations

"""Checks an uploaded profile photo before and after decoding."""
from dataclasses import dataclass

from PIL import Image


@dataclass
class ImageSafetyReport:
    ok: bool
    reason: str | None = None


class ImageSafetyService:
    MIN_BYTES = 64
    MAX_BYTES = 8 * 1024 * 1024
    # A preview narrower than this would be upscaled into the 150 px avatar.
    MIN_DIMENSION = 32
    MAX_ASPECT_RATIO = 10.0

    def __init__(self, max_size: int = MAX_BYTES, *, min_dimension: int = MIN_DIMENSION) -> None:
        self._max_size = max_size
        self._min_dimension = min_dimension

    @property
    def min_dimension(self) -> int:
        return self._min_dimension

    def validate(self, image_bytes: bytes) -> ImageSafetyReport:
        size = len(image_bytes)
        if size < self.MIN_BYTES:
            return ImageSafetyReport(False, "too_small")
        if size > self._max_size:
            return ImageSafetyReport(False, "too_large")
        return ImageSafetyReport(True, None)

    def validate_dimensions(self, image: Image.Image) -> ImageSafetyReport:
        width, height = image.size
        if min(width, height) < self._min_dimension:
            return ImageSafetyReport(False, "low_resolution")
        if max(width, height) / min(width, height) > self.MAX_ASPECT_RATIO:
            return ImageSafetyReport(False, "bad_aspect_ratio")
        return ImageSafetyReport(True, None)
