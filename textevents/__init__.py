"""Offline extraction of calendar events from OCR and pasted text."""

from .models import DateCandidate, Event, NaturalDateCandidate, TimeCandidate
from .pipeline import EventExtractor, extract_events, extract_events_from_image
from .recognizer import (
    InvalidImageDataError,
    NoTextFoundError,
    RecognizerFailureError,
    TesseractTextRecognizer,
    TextRecognitionError,
    TextRecognizer,
)
from .settings import Settings, configure_logging, settings

__all__ = [
    "DateCandidate",
    "Event",
    "EventExtractor",
    "InvalidImageDataError",
    "NaturalDateCandidate",
    "NoTextFoundError",
    "RecognizerFailureError",
    "Settings",
    "TesseractTextRecognizer",
    "TextRecognitionError",
    "TextRecognizer",
    "TimeCandidate",
    "configure_logging",
    "extract_events",
    "extract_events_from_image",
    "settings",
]
