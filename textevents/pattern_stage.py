from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Optional, Set, Tuple

from .date_recognizer import PatternDateRecognizer
from .deadline import reclassify_from_context
from .models import Event
from .naming import NameExtractor
from .settings import Settings, settings as default_settings
from .time_recognizer import TimeRecognizer, apply_time, blank_span

logger = logging.getLogger("textevents.pattern_stage")


class PatternStage:
    """Line-by-line extraction with the deterministic rule tables."""

    def __init__(
        self,
        date_recognizer: Optional[PatternDateRecognizer] = None,
        time_recognizer: Optional[TimeRecognizer] = None,
        names: Optional[NameExtractor] = None,
        config: Optional[Settings] = None,
    ) -> None:
        self.config = config or default_settings
        self.dates = date_recognizer or PatternDateRecognizer()
        self.times = time_recognizer or TimeRecognizer()
        self.names = names or NameExtractor(self.dates, self.times, self.config)

    def extract(self, text: str, reference: datetime) -> List[Event]:
        return self.scan(text, reference)[0]

    def scan(self, text: str, reference: datetime) -> Tuple[List[Event], List[Tuple[int, int]]]:
        """Events plus the offsets in ``text`` of every date the rules matched."""
        lines = text.split("\n")
        seen_days: Set[date] = set()
        events: List[Event] = []
        matched: List[Tuple[int, int]] = []
        line_start = 0

        for index, raw_line in enumerate(lines):
            offset = line_start + len(raw_line) - len(raw_line.lstrip())
            line_start += len(raw_line) + 1
            line = raw_line.strip()
            if not line:
                continue

            candidate = self.dates.recognize(line, reference)
            if candidate is None:
                continue
            matched.append((offset + candidate.span[0], offset + candidate.span[1]))
            if candidate.day in seen_days:
                logger.debug("Skipping %r on line %d, day already taken", candidate.text, index)
                continue
            seen_days.add(candidate.day)

            candidate = reclassify_from_context(candidate, lines, index)
            time_candidate = self.times.recognize(blank_span(line, candidate.span))
            moment = apply_time(candidate.moment, time_candidate)

            spans = [candidate.span]
            if time_candidate is not None:
                spans.append(time_candidate.span)
            name = self.names.name_for_line(lines, index, spans, reference)
            notes = self.names.notes_for_line(lines, index, reference)

            events.append(
                Event.build(
                    name or self.config.default_event_name,
                    moment,
                    is_deadline=candidate.is_deadline,
                    notes=notes,
                    created_at=reference,
                )
            )

        logger.debug("Pattern stage produced %d event(s)", len(events))
        return events, matched
