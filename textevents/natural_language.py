"""Second-stage date detection over the whole text.

A general purpose date searcher (``dateparser``) finds dates the rule tables
do not cover, such as "21. Januar 2026" or "Starting on 13 Jan 2026". Its raw
matches are filtered hard: only matches whose text really carries a month and
a day survive, bare times only count while no date is known, and vague words
("tomorrow", a lone weekday) are dropped. Surviving candidates get a priority
score from the text around them.
"""

from __future__ import annotations

import logging
from datetime import datetime, time
from typing import Callable, List, Optional, Sequence, Tuple

from dateparser.search import search_dates

from .deadline import has_deadline_context
from .models import NaturalDateCandidate
from .patterns import (
    BARE_WEEKDAY_PATTERN,
    EXPLICIT_YEAR_PATTERN,
    MONTH_DAY_PATTERN,
    MONTH_NAME_PATTERN,
    MONTH_NUMBERS,
    NUMERIC_DATE_PATTERN,
    RELATIVE_DAY_PATTERN,
    STARTING_ON_PATTERN,
    SUBSCRIPTION_PATTERN,
    WEEKDAY_PREFIX_PATTERN,
)
from .settings import Settings, settings as default_settings
from .time_recognizer import TimeRecognizer

logger = logging.getLogger("textevents.natural_language")

SearchFunction = Callable[..., Optional[Sequence[Tuple[str, datetime]]]]

STARTING_ON_BONUS = 10
SUBSCRIPTION_BONUS = 5
DEADLINE_BONUS = 3
WEEKDAY_PENALTY = -5


def flatten_text(text: str) -> str:
    """Join lines with spaces and title-case shouted month names.

    Every replacement keeps the length, so offsets into the result are
    offsets into ``text``.
    """
    flattened = text.replace("\n", " ")

    def _normalise(match) -> str:
        token = match.group()
        return token.capitalize() if token.isupper() else token

    return MONTH_NAME_PATTERN.sub(_normalise, flattened)


def month_number(name: str) -> Optional[int]:
    return MONTH_NUMBERS.get(name.lower()[:3])


def numeric_pair_matches(match, parsed: datetime) -> bool:
    """Read a numeric date the way the pattern rules read it.

    Slashes are month/day unless a two digit year follows (``05/03/25``);
    dots and dashes are day/month; four digits up front mean year-month-day.
    """
    first, separator, second, third = match.group("first", "separator", "second", "third")
    if len(first) == 4:
        return bool(third) and int(second) == parsed.month and int(third) == parsed.day
    if separator == "/" and not (third and len(third) == 2):
        month, day = int(first), int(second)
    else:
        day, month = int(first), int(second)
    return (month, day) == (parsed.month, parsed.day)


def has_date_evidence(text: str, parsed: datetime) -> bool:
    """Whether ``text`` spells out the month and day that ``parsed`` claims."""
    for match in MONTH_DAY_PATTERN.finditer(text):
        day = match.group("day_first") or match.group("day_last")
        name = match.group("month_after") or match.group("month_before")
        if int(day) == parsed.day and month_number(name) == parsed.month:
            return True
    return any(numeric_pair_matches(match, parsed) for match in NUMERIC_DATE_PATTERN.finditer(text))


def is_vague(text: str) -> bool:
    """Relative days and weekdays without a calendar date carry nothing to schedule."""
    stripped = text.strip()
    if RELATIVE_DAY_PATTERN.search(stripped):
        return True
    if BARE_WEEKDAY_PATTERN.match(stripped):
        return True
    return bool(WEEKDAY_PREFIX_PATTERN.match(stripped))


def has_explicit_year(text: str) -> bool:
    return bool(EXPLICIT_YEAR_PATTERN.search(text))


def score_priority(context: str, matched: str, is_deadline: bool) -> int:
    score = 0
    if STARTING_ON_PATTERN.search(context):
        score += STARTING_ON_BONUS
    if SUBSCRIPTION_PATTERN.search(context):
        score += SUBSCRIPTION_BONUS
    if is_deadline:
        score += DEADLINE_BONUS
    if WEEKDAY_PREFIX_PATTERN.match(matched.strip()):
        score += WEEKDAY_PENALTY
    return score


class NaturalLanguageDateRecognizer:
    def __init__(
        self,
        search: Optional[SearchFunction] = None,
        time_recognizer: Optional[TimeRecognizer] = None,
        config: Optional[Settings] = None,
    ) -> None:
        self.search = search or search_dates
        self.times = time_recognizer or TimeRecognizer()
        self.config = config or default_settings

    def candidates(
        self,
        text: str,
        reference: datetime,
        known_dates: bool = False,
    ) -> List[NaturalDateCandidate]:
        """Candidates for ``text`` sorted by priority, highest first.

        ``known_dates`` tells the recognizer that an earlier stage already
        found a date, which silences bare times as well.
        """
        flattened = flatten_text(text)
        dates: List[NaturalDateCandidate] = []
        times: List[NaturalDateCandidate] = []
        cursor = 0

        for matched, parsed in self._search(flattened, reference):
            start = flattened.find(matched, cursor)
            if start < 0:
                start = flattened.find(matched)
            if start < 0 or not matched.strip():
                continue
            end = start + len(matched)
            cursor = end

            if has_date_evidence(matched, parsed):
                moment = self._resolve_year(matched, parsed, reference)
                if moment is None:
                    continue
                time_only = False
            elif is_vague(matched):
                logger.debug("Dropping vague match %r", matched)
                continue
            elif self.times.recognize(matched) is not None:
                moment = datetime.combine(reference.date(), time())
                time_only = True
            else:
                logger.debug("Dropping match without month and day %r", matched)
                continue

            window = self.config.context_window
            context = flattened[max(0, start - window) : end + window]
            is_deadline = has_deadline_context(context)
            candidate = NaturalDateCandidate(
                moment=moment,
                is_deadline=is_deadline,
                text=matched,
                span=(start, end),
                context=context,
                priority=score_priority(context, matched, is_deadline),
                time_only=time_only,
            )
            (times if time_only else dates).append(candidate)

        if dates or known_dates:
            if times:
                logger.debug("Discarding %d bare time(s), a date is present", len(times))
            times = []

        found = dates + times
        found.sort(key=lambda candidate: (-candidate.priority, candidate.span[0]))
        logger.debug("Natural-language stage produced %d candidate(s)", len(found))
        return found

    def _search(self, flattened: str, reference: datetime) -> Sequence[Tuple[str, datetime]]:
        search_settings = {
            "RELATIVE_BASE": reference,
            "PREFER_DATES_FROM": "current_period",
            "DATE_ORDER": "DMY",
            "RETURN_AS_TIMEZONE_AWARE": False,
        }
        try:
            results = self.search(
                flattened,
                languages=list(self.config.languages),
                settings=search_settings,
            )
        except Exception as exc:  # third-party parser; extraction fails open
            logger.warning("Date search failed: %s", exc)
            return []
        return results or []

    @staticmethod
    def _resolve_year(matched: str, parsed: datetime, reference: datetime) -> Optional[datetime]:
        moment = datetime(parsed.year, parsed.month, parsed.day)
        if has_explicit_year(matched):
            return moment
        try:
            return moment.replace(year=reference.year)
        except ValueError:
            logger.debug("No %s in %d for %r", moment.strftime("%d.%m"), reference.year, matched)
            return None
