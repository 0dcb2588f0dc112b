"""Deterministic image preprocessing applied before model extraction.

Steps (order matters):
- EXIF orientation fix (phone photos are often stored rotated).
- Grayscale.
- Levels normalization via auto-contrast.
- Unsharp-mask sharpening.
- Resize to a fixed width keeping aspect ratio (small photos are upscaled).
- Re-encode as JPEG.
"""
from __future__ import annotations

import io
import logging

from PIL import Image, ImageFilter, ImageOps, UnidentifiedImageError

from ..config import PipelineConfig
from ..exceptions import EnhancementError
from ..models import RawImage

logger = logging.getLogger(__name__)

OUTPUT_CONTENT_TYPE = "image/jpeg"


class ImageEnhancer:
    """Turn a raw photo into a normalized grayscale JPEG."""

    def __init__(self, config: PipelineConfig) -> None:
        self.target_width = max(1, config.enhance_target_width)
        self.jpeg_quality = config.enhance_jpeg_quality

    def enhance(self, raw: RawImage) -> RawImage:
        if not raw.data:
            raise EnhancementError("Empty image payload")
        try:
            with Image.open(io.BytesIO(raw.data)) as src:
                src.load()
                image = ImageOps.exif_transpose(src)
                image = image.convert("L")
                image = ImageOps.autocontrast(image, cutoff=1)
                image = image.filter(ImageFilter.UnsharpMask(radius=2, percent=150, threshold=3))
                image = self._resize(image)
                out = io.BytesIO()
                image.save(out, format="JPEG", quality=self.jpeg_quality, optimize=True)
        except (UnidentifiedImageError, OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
            raise EnhancementError(f"Unreadable image ({raw.content_type or 'unknown type'}): {exc}") from exc

        data = out.getvalue()
        logger.debug("Enhanced image: %d -> %d bytes, width=%d", len(raw.data), len(data), image.width)
        return RawImage(data=data, content_type=OUTPUT_CONTENT_TYPE)

    def _resize(self, image: Image.Image) -> Image.Image:
        if image.width == self.target_width:
            return image
        height = max(1, round(image.height * self.target_width / image.width))
        return image.resize((self.target_width, height), Image.Resampling.LANCZOS)
