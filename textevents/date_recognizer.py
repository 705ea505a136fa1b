from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Dict, Iterable, Optional

from .models import DateCandidate
from .patterns import DEFAULT_RULES, DateLayout, DateRule, RuleSet

logger = logging.getLogger("textevents.date_recognizer")


def expand_year(raw: Optional[str], reference: date) -> int:
    """Two digit years live in 2000+YY, missing years take the reference year."""
    if not raw:
        return reference.year
    year = int(raw)
    if len(raw) <= 2:
        return 2000 + year
    return year


def _safe_datetime(year: int, month: int, day: int) -> Optional[datetime]:
    try:
        return datetime(year, month, day)
    except ValueError:
        return None


class PatternDateRecognizer:
    """Applies an ordered rule set to a single line; the first valid match wins."""

    def __init__(self, rules: RuleSet = DEFAULT_RULES) -> None:
        self.rules = rules

    def recognize(self, line: str, reference: date) -> Optional[DateCandidate]:
        for rule in self.rules:
            candidate = self._apply(rule, line, reference)
            if candidate is not None:
                logger.debug("Rule %s matched %r", rule.name, candidate.text)
                return candidate
        return None

    def contains_date(self, line: str, reference: date) -> bool:
        return self.recognize(line, reference) is not None

    def _apply(self, rule: DateRule, line: str, reference: date) -> Optional[DateCandidate]:
        for match in rule.pattern.finditer(line):
            parts = _parts_for(rule.layout, match.groups())
            moment = _safe_datetime(
                expand_year(parts.get("y"), reference),
                int(parts["m"]),
                int(parts["d"]),
            )
            if moment is None:
                logger.debug("Rule %s matched invalid date %r", rule.name, match.group())
                continue
            return DateCandidate(
                moment=moment,
                is_deadline=rule.is_deadline,
                text=match.group(),
                span=match.span(),
            )
        return None


def _parts_for(layout: DateLayout, groups: Iterable[Optional[str]]) -> Dict[str, str]:
    captured = [group for group in groups if group is not None]
    return dict(zip(layout.parts, captured))
