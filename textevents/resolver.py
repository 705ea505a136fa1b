from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from .models import Event, NaturalDateCandidate, TimeCandidate
from .naming import NameExtractor, remove_spans
from .settings import Settings, settings as default_settings
from .time_recognizer import TimeRecognizer, apply_time

logger = logging.getLogger("textevents.resolver")


def overlaps(span: Tuple[int, int], others: Iterable[Tuple[int, int]]) -> bool:
    start, end = span
    return any(start < other_end and other_start < end for other_start, other_end in others)


def event_days(events: Iterable[Event]) -> Set[date]:
    days: Set[date] = set()
    for event in events:
        days.add(event.date.date())
        if event.deadline is not None:
            days.add(event.deadline.date())
    return days


class CrossStageResolver:
    """Turns natural-language candidates into events the pattern stage missed.

    Already accepted events are authoritative: they are never changed, and a
    candidate falling on one of their days is dropped.
    """

    def __init__(
        self,
        time_recognizer: Optional[TimeRecognizer] = None,
        names: Optional[NameExtractor] = None,
        config: Optional[Settings] = None,
    ) -> None:
        self.config = config or default_settings
        self.times = time_recognizer or TimeRecognizer()
        self.names = names or NameExtractor(time_recognizer=self.times, config=self.config)

    def resolve(
        self,
        candidates: Sequence[NaturalDateCandidate],
        accepted: Sequence[Event],
        text: str,
        reference: datetime,
        matched_spans: Sequence[Tuple[int, int]] = (),
    ) -> List[Event]:
        """Events for the candidates no earlier stage covered.

        ``matched_spans`` are offsets of dates an earlier stage already read;
        a candidate overlapping one is the same text read another way.
        """
        lines = text.split("\n")
        flattened = text.replace("\n", " ")
        taken = event_days(accepted)
        claimed: Set[date] = set()
        resolved: List[Event] = []

        ordered = sorted(candidates, key=lambda candidate: (-candidate.priority, candidate.span[0]))
        for candidate in ordered:
            day = candidate.day
            if overlaps(candidate.span, matched_spans):
                logger.debug("Dropping %r, its text was already read as a date", candidate.text)
                continue
            if day in taken:
                logger.debug("Dropping %r, %s already covered by an earlier stage", candidate.text, day)
                continue
            if day in claimed:
                logger.debug("Dropping %r, %s claimed by a higher priority match", candidate.text, day)
                continue
            claimed.add(day)

            time_candidate = self._time_for(candidate, flattened)
            if time_candidate is None:
                moment = candidate.moment.replace(hour=self.config.fallback_hour, minute=0, second=0, microsecond=0)
            else:
                moment = apply_time(candidate.moment, time_candidate)

            name = self._name_for(candidate, text, lines, reference)
            resolved.append(
                Event.build(
                    name or self.config.default_event_name,
                    moment,
                    is_deadline=candidate.is_deadline,
                    created_at=reference,
                )
            )

        logger.debug("Resolver accepted %d of %d candidate(s)", len(resolved), len(candidates))
        return resolved

    def _time_for(self, candidate: NaturalDateCandidate, flattened: str) -> Optional[TimeCandidate]:
        start, end = candidate.span
        window = self.config.context_window
        for scope in (candidate.text, flattened[end : end + window], candidate.context):
            found = self.times.recognize(scope)
            if found is not None:
                return found
        return None

    def _name_for(
        self,
        candidate: NaturalDateCandidate,
        text: str,
        lines: Sequence[str],
        reference: datetime,
    ) -> str:
        start, end = candidate.span
        index = text.count("\n", 0, start)
        line_start = text.rfind("\n", 0, start) + 1
        line = lines[index]
        local_start = start - line_start
        local_end = min(len(line), end - line_start)
        remainder = remove_spans(line, [(local_start, local_end)])
        found = self.times.recognize(remainder)
        if found is not None:
            remainder = remove_spans(remainder, [found.span])
        return self.names.name_near(lines, index, remainder, reference)
