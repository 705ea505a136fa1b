from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import List, Optional, Union

from .date_recognizer import PatternDateRecognizer
from .models import Event
from .naming import NameExtractor
from .natural_language import NaturalLanguageDateRecognizer, SearchFunction
from .pattern_stage import PatternStage
from .patterns import DEFAULT_RULES, RuleSet
from .recognizer import TextRecognizer
from .resolver import CrossStageResolver
from .settings import Settings, settings as default_settings
from .text_cleaner import normalise_input_text
from .time_recognizer import TimeRecognizer

logger = logging.getLogger("textevents.pipeline")

ReferenceDate = Union[datetime, date, None]


def coerce_reference(reference: ReferenceDate) -> datetime:
    if reference is None:
        return datetime.now()
    if isinstance(reference, datetime):
        return reference
    return datetime.combine(reference, time())


class EventExtractor:
    """Runs the pattern stage, then the natural-language stage, and merges them.

    The natural-language stage needs the complete pattern-stage output to
    avoid duplicating it, so the order is fixed.
    """

    def __init__(
        self,
        rules: RuleSet = DEFAULT_RULES,
        config: Optional[Settings] = None,
        search: Optional[SearchFunction] = None,
    ) -> None:
        self.config = config or default_settings
        dates = PatternDateRecognizer(rules)
        times = TimeRecognizer(rules.time_rules)
        names = NameExtractor(dates, times, self.config)
        self.pattern_stage = PatternStage(dates, times, names, self.config)
        self.natural_language = NaturalLanguageDateRecognizer(search, times, self.config)
        self.resolver = CrossStageResolver(times, names, self.config)

    def extract(self, text: str, reference: ReferenceDate = None) -> List[Event]:
        now = coerce_reference(reference)
        cleaned = normalise_input_text(text)
        if not cleaned.strip():
            return []

        events, matched_spans = self.pattern_stage.scan(cleaned, now)
        candidates = self.natural_language.candidates(cleaned, now, known_dates=bool(events))
        additions = self.resolver.resolve(candidates, events, cleaned, now, matched_spans)

        logger.info(
            "Extracted %d event(s): %d from patterns, %d from natural language",
            len(events) + len(additions),
            len(events),
            len(additions),
        )
        return events + additions


def extract_events(text: str, reference: ReferenceDate = None) -> List[Event]:
    """Extract candidate events from ``text``.

    ``reference`` supplies the year for dates printed without one and the
    creation timestamp of the events; it defaults to now.
    """
    return EventExtractor().extract(text, reference)


def extract_events_from_image(
    image_data: bytes,
    recognizer: TextRecognizer,
    reference: ReferenceDate = None,
    extractor: Optional[EventExtractor] = None,
) -> List[Event]:
    """Recognize text in ``image_data`` and attach the image to every event.

    Recognition errors propagate to the caller.
    """
    text = recognizer.recognize_text(image_data)
    events = (extractor or EventExtractor()).extract(text, reference)
    return [event.model_copy(update={"image_data": image_data}) for event in events]
