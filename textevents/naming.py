from __future__ import annotations

import re
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple

from .date_recognizer import PatternDateRecognizer
from .patterns import (
    BATCH_CODE_PATTERN,
    METADATA_LABEL_PATTERN,
    MONTH_DAY_PATTERN,
    NAME_STRIP_CHARS,
    NUMERIC_DATE_PATTERN,
    PRICE_OR_WEIGHT_PATTERN,
    PRICE_TOKEN_PATTERN,
)
from .settings import Settings, settings as default_settings
from .time_recognizer import TimeRecognizer

MIN_NAME_LENGTH = 3
MIN_LABEL_LETTERS = 3
MIN_NOTE_LENGTH = 5
MAX_NAME_LINES = 3
WHITESPACE_PATTERN = re.compile(r"\s+")
LETTER_PATTERN = re.compile(r"[^\W\d_]")
# "Einlass: ," left behind once the time after the label is gone
EMPTY_FIELD_PATTERN = re.compile(
    r"[^\W\d_][\w.-]*\s*:\s*(?=[,;•|·])|(?<=[,;•|·])\s*[^\W\d_][\w.-]*\s*:\s*$"
)
SEPARATOR_RUN_PATTERN = re.compile(r"\s*([,;•|·])(?:\s*[,;•|·])+")


def remove_spans(text: str, spans: Iterable[Tuple[int, int]]) -> str:
    result = text
    for start, end in sorted(spans, reverse=True):
        result = result[:start] + " " + result[end:]
    return result


def clean_label(text: str) -> str:
    candidate = WHITESPACE_PATTERN.sub(" ", text)
    candidate = EMPTY_FIELD_PATTERN.sub("", candidate)
    candidate = SEPARATOR_RUN_PATTERN.sub(r" \1", candidate)
    candidate = WHITESPACE_PATTERN.sub(" ", candidate).strip(NAME_STRIP_CHARS)
    if not candidate:
        return ""
    return candidate[0].upper() + candidate[1:]


def looks_like_date(line: str) -> bool:
    """Month names with a day, or any numeric day/month pair."""
    return bool(MONTH_DAY_PATTERN.search(line) or NUMERIC_DATE_PATTERN.search(line))


class NameExtractor:
    """Derives event labels and notes from the lines around a date."""

    def __init__(
        self,
        date_recognizer: Optional[PatternDateRecognizer] = None,
        time_recognizer: Optional[TimeRecognizer] = None,
        config: Optional[Settings] = None,
    ) -> None:
        self.dates = date_recognizer or PatternDateRecognizer()
        self.times = time_recognizer or TimeRecognizer()
        self.config = config or default_settings

    def is_valid_context_line(self, line: str, reference: date) -> bool:
        stripped = line.strip()
        if len(stripped) < MIN_NAME_LENGTH:
            return False
        if len(LETTER_PATTERN.findall(stripped)) < MIN_LABEL_LETTERS:
            return False
        if METADATA_LABEL_PATTERN.search(stripped):
            return False
        if PRICE_OR_WEIGHT_PATTERN.search(stripped):
            return False
        if BATCH_CODE_PATTERN.match(stripped):
            return False
        if self.times.recognize(stripped) is not None:
            return False
        if looks_like_date(stripped):
            return False
        return not self.dates.contains_date(stripped, reference)

    def own_label(self, remainder: str) -> str:
        """Label from the date's own line once the date is cut out.

        Times and amounts are removed token by token instead of discarding
        the whole line, so "Doors open 19:30" still reads "Doors open".
        """
        text = remainder
        found = self.times.recognize(text)
        while found is not None:
            text = remove_spans(text, [found.span])
            found = self.times.recognize(text)
        label = clean_label(PRICE_TOKEN_PATTERN.sub(" ", text))
        if len(label) < MIN_NAME_LENGTH or len(LETTER_PATTERN.findall(label)) < MIN_LABEL_LETTERS:
            return ""
        return label

    def name_for_line(
        self,
        lines: Sequence[str],
        index: int,
        spans: Iterable[Tuple[int, int]],
        reference: date,
    ) -> str:
        """Name for a pattern-stage date found on ``lines[index]``.

        ``spans`` are the date and time spans inside the stripped line.
        """
        remainder = self.own_label(remove_spans(lines[index].strip(), spans))
        if remainder:
            context = self._first_context_line(lines, index, reference)
            if context:
                combined = f"{context} {remainder}"
                if len(combined) <= self.config.max_name_length:
                    return clean_label(combined)
            return remainder

        positions = self._valid_positions(self._before_then_after(index, len(lines)), lines, reference)
        return self._join(lines, sorted(positions))

    def name_near(self, lines: Sequence[str], index: int, remainder: str, reference: date) -> str:
        """Name for a natural-language match, ranked purely by line distance.

        ``remainder`` is the match line with the match and its time removed; it
        counts as distance zero.
        """
        parts: List[str] = []
        own = self.own_label(remainder)
        if own:
            parts.append(own)
        radius = max(self.config.name_lines_before, self.config.name_lines_after)
        order: List[int] = []
        for distance in range(1, radius + 1):
            order.extend((index - distance, index + distance))
        limit = MAX_NAME_LINES - len(parts)
        positions = self._valid_positions(order, lines, reference, limit=limit)
        parts.extend(clean_label(lines[position]) for position in positions)
        return self._join_parts(parts)

    def notes_for_line(self, lines: Sequence[str], index: int, reference: date) -> Optional[str]:
        notes: List[str] = []
        for position in (index - 1, index + 1):
            if not 0 <= position < len(lines):
                continue
            line = lines[position].strip()
            if len(line) >= MIN_NOTE_LENGTH and not self.dates.contains_date(line, reference):
                notes.append(line)
        return " ".join(notes) or None

    def _before_then_after(self, index: int, count: int) -> List[int]:
        before = [index - offset for offset in range(1, self.config.name_lines_before + 1)]
        after = [index + offset for offset in range(1, self.config.name_lines_after + 1)]
        return [position for position in before + after if 0 <= position < count]

    def _first_context_line(self, lines: Sequence[str], index: int, reference: date) -> Optional[str]:
        positions = self._valid_positions(self._before_then_after(index, len(lines)), lines, reference, limit=1)
        if not positions:
            return None
        return clean_label(lines[positions[0]])

    def _valid_positions(
        self,
        order: Iterable[int],
        lines: Sequence[str],
        reference: date,
        limit: int = MAX_NAME_LINES,
    ) -> List[int]:
        found: List[int] = []
        for position in order:
            if len(found) >= limit:
                break
            if not 0 <= position < len(lines):
                continue
            if self.is_valid_context_line(lines[position], reference):
                found.append(position)
        return found

    def _join(self, lines: Sequence[str], positions: Iterable[int]) -> str:
        return self._join_parts(clean_label(lines[position]) for position in positions)

    def _join_parts(self, parts: Iterable[str]) -> str:
        name = ""
        for part in parts:
            candidate = f"{name} {part}" if name else part
            if len(candidate) > self.config.max_name_length:
                if not name:
                    name = part[: self.config.max_name_length].rstrip(NAME_STRIP_CHARS)
                continue
            name = candidate
        return name
