from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Tuple

from .models import TimeCandidate
from .patterns import TIME_RULES, TimeRule

logger = logging.getLogger("textevents.time_recognizer")


class TimeRecognizer:
    def __init__(self, rules: Tuple[TimeRule, ...] = TIME_RULES) -> None:
        self.rules = rules

    def recognize(self, text: str) -> Optional[TimeCandidate]:
        for rule in self.rules:
            match = rule.pattern.search(text)
            if match is None:
                continue
            hour = int(match.group("hour"))
            minute = int(match.groupdict().get("minute") or 0)
            meridiem = (match.groupdict().get("meridiem") or "").lower()
            if meridiem == "a":
                hour = 0 if hour == 12 else hour
            elif meridiem == "p":
                hour = 12 if hour == 12 else hour + 12
            logger.debug("Time rule %s matched %r", rule.name, match.group())
            return TimeCandidate(hour=hour, minute=minute, text=match.group(), span=match.span())
        return None


def apply_time(moment: datetime, candidate: Optional[TimeCandidate]) -> datetime:
    """Replace the time of day, keeping year, month and day."""
    if candidate is None:
        return moment
    return moment.replace(hour=candidate.hour, minute=candidate.minute, second=0, microsecond=0)


def blank_span(text: str, span: Tuple[int, int]) -> str:
    """Overwrite ``span`` with spaces so offsets stay valid."""
    start, end = span
    return text[:start] + " " * (end - start) + text[end:]
