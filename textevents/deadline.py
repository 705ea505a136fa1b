"""Deadline classification and reminder date arithmetic."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional, Sequence, Tuple

from .models import DateCandidate
from .patterns import DEADLINE_VOCABULARY_PATTERN, EXPIRY_CONTEXT_PATTERN

logger = logging.getLogger("textevents.deadline")

LOOKBACK_LINES = 3
REMINDER_OFFSET = timedelta(days=1)


def line_indicates_deadline(line: str) -> bool:
    """True for expiry / best-before wording or a trailing ``by:`` / ``bis:`` label."""
    return bool(EXPIRY_CONTEXT_PATTERN.search(line.strip()))


def reclassify_from_context(
    candidate: DateCandidate,
    lines: Sequence[str],
    index: int,
    lookback: int = LOOKBACK_LINES,
) -> DateCandidate:
    """Upgrade a plain date to a deadline when a label above it says so.

    Food labels and receipts often print "MINDESTENS HALTBAR BIS:" on one
    line and the date on the next.
    """
    if candidate.is_deadline:
        return candidate
    for offset in range(1, lookback + 1):
        position = index - offset
        if position < 0:
            break
        if line_indicates_deadline(lines[position]):
            logger.debug("Line %d marks %r as a deadline", position, candidate.text)
            return replace(candidate, is_deadline=True)
    return candidate


def has_deadline_context(window: str) -> bool:
    return bool(DEADLINE_VOCABULARY_PATTERN.search(window))


def split_event_and_deadline(moment: datetime, is_deadline: bool) -> Tuple[datetime, Optional[datetime]]:
    if is_deadline:
        return moment - REMINDER_OFFSET, moment
    return moment, None
