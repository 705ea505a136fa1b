"""Image to text boundary.

The extraction engine only consumes strings; this module defines what a
recognizer must provide and ships a Tesseract based implementation.
"""

from __future__ import annotations

import io
import logging
from typing import Optional, Protocol

import pytesseract
from PIL import Image, ImageEnhance, ImageOps, UnidentifiedImageError

from .settings import Settings, settings as default_settings

logger = logging.getLogger("textevents.recognizer")

TESSERACT_CONFIG = "--oem 3 --psm 6 -c preserve_interword_spaces=1"
SMALL_IMAGE_PIXELS = 600_000


class TextRecognitionError(Exception):
    """Base class for failures of an image text recognizer."""


class InvalidImageDataError(TextRecognitionError):
    """The payload could not be decoded as an image."""


class NoTextFoundError(TextRecognitionError):
    """The image decoded fine but contained no recognizable text."""


class RecognizerFailureError(TextRecognitionError):
    """The recognition engine is missing or crashed."""


class TextRecognizer(Protocol):
    def recognize_text(self, image_data: bytes) -> str:
        ...


class TesseractTextRecognizer:
    def __init__(self, config: Optional[Settings] = None) -> None:
        self.config = config or default_settings

    def recognize_text(self, image_data: bytes) -> str:
        image = _load_image(image_data)
        try:
            working = _prepare_for_ocr(image, max_dimension=self.config.ocr_max_dimension)
            try:
                processed = _preprocess_image(working)
                try:
                    raw = self._run(processed)
                finally:
                    processed.close()
            finally:
                working.close()
        finally:
            image.close()

        lines = [line.strip() for line in raw.splitlines() if line.strip()]
        if not lines:
            raise NoTextFoundError("No text found in image")
        logger.info("Recognized %d line(s) of text", len(lines))
        return "\n".join(lines)

    def _run(self, image: Image.Image) -> str:
        try:
            return pytesseract.image_to_string(
                image,
                lang=self.config.ocr_language,
                config=TESSERACT_CONFIG,
                timeout=self.config.ocr_timeout_seconds,
            )
        except pytesseract.TesseractNotFoundError as exc:
            logger.warning("Tesseract binary not available: %s", exc)
            raise RecognizerFailureError("Tesseract is not installed") from exc
        except (pytesseract.TesseractError, RuntimeError) as exc:
            logger.warning("Tesseract failed: %s", exc)
            raise RecognizerFailureError(f"Text recognition failed: {exc}") from exc


def _load_image(image_data: bytes) -> Image.Image:
    if not image_data:
        raise InvalidImageDataError("Empty image payload")
    try:
        image = Image.open(io.BytesIO(image_data))
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise InvalidImageDataError("Image could not be decoded") from exc
    return image


def _prepare_for_ocr(image: Image.Image, *, max_dimension: int) -> Image.Image:
    """Downscale so the longest side fits ``max_dimension``."""
    width, height = image.size
    longest = max(width, height)
    if longest <= max_dimension:
        return image.copy()

    scale = max_dimension / float(longest)
    new_size = (max(1, int(width * scale)), max(1, int(height * scale)))
    return image.resize(new_size, Image.Resampling.LANCZOS)


def _preprocess_image(image: Image.Image) -> Image.Image:
    grayscale = ImageOps.exif_transpose(image).convert("L")
    contrasted = ImageOps.autocontrast(grayscale)
    width, height = contrasted.size
    factor = 1.2 if width * height < SMALL_IMAGE_PIXELS else 1.3
    return ImageEnhance.Contrast(contrasted).enhance(factor)
