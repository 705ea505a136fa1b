"""Ordered rule tables and keyword vocabularies used by the recognizers.

Rules are plain data: a compiled pattern, a layout telling which capture
group holds which date part, and a default deadline flag. Order inside a
:class:`RuleSet` is precedence; the first rule that yields a valid date wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Pattern, Tuple


class DateLayout(str, Enum):
    DMY = "dmy"
    MDY = "mdy"
    YMD = "ymd"
    DM = "dm"
    MD = "md"

    @property
    def parts(self) -> Tuple[str, ...]:
        return tuple(self.value)

    @property
    def has_year(self) -> bool:
        return "y" in self.value


@dataclass(frozen=True)
class DateRule:
    name: str
    pattern: Pattern[str]
    layout: DateLayout
    is_deadline: bool = False


@dataclass(frozen=True)
class TimeRule:
    """Time pattern with named groups ``hour`` and optional ``minute``/``meridiem``."""

    name: str
    pattern: Pattern[str]


@dataclass(frozen=True)
class RuleSet:
    date_rules: Tuple[DateRule, ...]
    time_rules: Tuple[TimeRule, ...]

    def __iter__(self) -> Iterator[DateRule]:
        return iter(self.date_rules)

    def __len__(self) -> int:
        return len(self.date_rules)


def _compile(source: str) -> Pattern[str]:
    return re.compile(source, re.IGNORECASE)


# Building blocks --------------------------------------------------------------

DAY = r"(\d{1,2})"
MONTH = r"(\d{1,2})"
YEAR4 = r"(\d{4})"
YEAR2 = r"(\d{2})"
# dd.mm or dd.mm. that is not followed by a year
DOT_DM = rf"{DAY}\.{MONTH}(?!\.?\d)\.?"

GERMAN_DEADLINE_PREFIX = (
    r"(?:\bbis\s+(?:zum\s+)?"
    r"|\bfällig\s+(?:am\s+)?"
    r"|\b(?:return|rücksendung)\s+(?:by|bis)\s+"
    r"|\b(?:pay|zahlen)\s+(?:until|bis)\s+)"
)
ENGLISH_DEADLINE_PREFIX = r"\b(?:deadline|due(?:\s+date|\s+by|\s+on)?|pay\s+by)\s*:?\s*"
BEST_BEFORE_PREFIX = (
    r"(?:\bmhd\b"
    r"|\bmindestens\s+haltbar\s+bis\b"
    r"|\bzu\s+verbrauchen\s+bis\b"
    r"|\bverbrauchen\s+bis\b"
    r"|\bhaltbar\s+bis\b"
    r"|\bbest\s+before(?:\s+end)?\b"
    r"|\bbest\s+by\b"
    r"|\buse\s+by\b"
    r"|\bexpires?\b(?:\s+on\b)?"
    r"|\bexp\.)"
    r"\s*:?\s*"
)

DATE_RULES: Tuple[DateRule, ...] = (
    # 1. keyword deadlines with a four digit year
    DateRule(
        "german_deadline_dmy",
        _compile(rf"{GERMAN_DEADLINE_PREFIX}{DAY}\.{MONTH}\.{YEAR4}\b"),
        DateLayout.DMY,
        True,
    ),
    DateRule(
        "english_deadline_mdy",
        _compile(rf"{ENGLISH_DEADLINE_PREFIX}{MONTH}/{DAY}/{YEAR4}\b"),
        DateLayout.MDY,
        True,
    ),
    # 2. best-before / use-by forms, two or four digit year
    DateRule(
        "best_before_dmy",
        _compile(rf"{BEST_BEFORE_PREFIX}{DAY}\.{MONTH}\.(\d{{4}}|\d{{2}})\b"),
        DateLayout.DMY,
        True,
    ),
    # 3. keyword deadlines without a year
    DateRule(
        "german_deadline_dm",
        _compile(rf"{GERMAN_DEADLINE_PREFIX}{DOT_DM}"),
        DateLayout.DM,
        True,
    ),
    DateRule(
        "best_before_dm",
        _compile(rf"{BEST_BEFORE_PREFIX}{DOT_DM}"),
        DateLayout.DM,
        True,
    ),
    # 4. numeric dates with an explicit year
    DateRule("dotted_dmy", _compile(rf"\b{DAY}\.{MONTH}\.{YEAR4}\b"), DateLayout.DMY),
    DateRule("dotted_dmy_short", _compile(rf"\b{DAY}\.{MONTH}\.{YEAR2}\b"), DateLayout.DMY),
    DateRule("us_slash_mdy", _compile(rf"\b{MONTH}/{DAY}/{YEAR4}\b"), DateLayout.MDY),
    DateRule("eu_slash_dmy_short", _compile(rf"\b{DAY}/{MONTH}/{YEAR2}\b"), DateLayout.DMY),
    DateRule("iso_ymd", _compile(rf"\b{YEAR4}-{MONTH}-{DAY}\b"), DateLayout.YMD),
    # 5. english keyword deadlines without a year
    DateRule(
        "english_deadline_md",
        _compile(rf"{ENGLISH_DEADLINE_PREFIX}{MONTH}/{DAY}(?!/?\d)"),
        DateLayout.MD,
        True,
    ),
    # 6. bare dates without a year, checked last
    DateRule("bare_dotted_dm", _compile(rf"(?<![\d.]){DOT_DM}"), DateLayout.DM),
    DateRule("bare_slash_md", _compile(rf"(?<![\d/]){MONTH}/{DAY}(?!/?\d)"), DateLayout.MD),
)

TIME_RULES: Tuple[TimeRule, ...] = (
    TimeRule("uhr_hm", _compile(r"\b(?P<hour>[01]?\d|2[0-3])[:.](?P<minute>[0-5]\d)\s*uhr\b")),
    TimeRule("uhr_h", _compile(r"\b(?P<hour>[01]?\d|2[0-3])\s*uhr\b")),
    TimeRule(
        "meridiem",
        _compile(r"\b(?P<hour>1[0-2]|0?[1-9])(?::(?P<minute>[0-5]\d))?\s*(?P<meridiem>[ap])\.?m\b\.?"),
    ),
    TimeRule("clock_24h", _compile(r"\b(?P<hour>[01]?\d|2[0-3]):(?P<minute>[0-5]\d)\b")),
)

DEFAULT_RULES = RuleSet(date_rules=DATE_RULES, time_rules=TIME_RULES)


# Vocabularies -------------------------------------------------------------------

# Lines above a date that turn it into a deadline.
EXPIRY_CONTEXT_PATTERN = _compile(
    r"(?:\bmhd\b|\bbest\s+before\b|\bbest\s+by\b|\buse\s+by\b|\bexpir(?:es|y|ation)\b|\bexp\."
    r"|\bhaltbar\b|\bverbrauchen\b|\bablauf(?:datum)?\b|\bverfällt\b|\bgültig\s+bis\b"
    r"|\bvalid\s+until\b|\bdue\b|\bfällig\b)"
    r"|\b(?:by|bis)\s*:\s*$"
)

# Natural-language context that marks a due date.
DEADLINE_VOCABULARY_PATTERN = _compile(
    r"\b(?:renew(?:al|s|ed)?|due|deadline|expir(?:es|y|ation|e)|valid\s+until|cancel\s+by"
    r"|next\s+(?:payment|billing|charge)|verlängerung|verlängert|nächste\s+zahlung"
    r"|fällig|ablauf|läuft\s+ab|gültig\s+bis|kündig(?:en|ung)\s+bis|mhd|haltbar)\b"
)
STARTING_ON_PATTERN = _compile(
    r"\b(?:starting\s+on|starts\s+on|starting|beginning\s+on|ab\s+dem|ab\s+(?=\d)|beginnt\s+am)\b"
)
SUBSCRIPTION_PATTERN = _compile(
    r"\b(?:subscriptions?|abo(?:nnement)?s?|membership|mitgliedschaft|renew(?:al|s)?|continues"
    r"|trial|probe(?:zeitraum|abo)|per\s+(?:year|month)|pro\s+(?:jahr|monat)|monthly|yearly"
    r"|annual(?:ly)?|monatlich|jährlich|billing|verlängerung)\b"
)

MONTH_NAMES = (
    "january|february|march|april|may|june|july|august|september|october|november|december"
    "|januar|jänner|februar|märz|maerz|mai|juni|juli|oktober|dezember"
    "|jan|feb|mar|apr|jun|jul|aug|sep|sept|oct|nov|dec|jän|mrz|okt|dez"
)
# keyed by the first three letters of every name above
MONTH_NUMBERS = {
    "jan": 1, "jän": 1, "feb": 2, "mar": 3, "mär": 3, "mae": 3, "mrz": 3, "apr": 4,
    "may": 5, "mai": 5, "jun": 6, "jul": 7, "aug": 8, "sep": 9, "oct": 10, "okt": 10,
    "nov": 11, "dec": 12, "dez": 12,
}
MONTH_NAME_PATTERN = _compile(rf"\b(?:{MONTH_NAMES})\b\.?")
MONTH_DAY_PATTERN = _compile(
    rf"(?:\b(?P<day_first>\d{{1,2}})(?:st|nd|rd|th)?\.?\s*(?:of\s+)?(?P<month_after>{MONTH_NAMES})\b"
    rf"|\b(?P<month_before>{MONTH_NAMES})\b\.?\s*(?P<day_last>\d{{1,2}})(?!\d))"
)
NUMERIC_DATE_PATTERN = re.compile(
    r"(?<!\d)(?P<first>\d{1,4})(?P<separator>[./-])(?P<second>\d{1,2})"
    r"(?:[./-](?P<third>\d{1,4}))?(?!\d)"
)
EXPLICIT_YEAR_PATTERN = re.compile(
    r"(?<!\d)(?:19|20)\d{2}(?!\d)|(?<!\d)\d{1,2}[./]\d{1,2}[./]\d{2}(?!\d)|'\d{2}\b"
)

WEEKDAY_NAMES = (
    "monday|tuesday|wednesday|thursday|friday|saturday|sunday"
    "|montag|dienstag|mittwoch|donnerstag|freitag|samstag|sonnabend|sonntag"
    "|mon|tue|tues|wed|thu|thur|thurs|fri|sat|sun|mo|di|mi|do|fr|sa|so"
)
WEEKDAY_PREFIX_PATTERN = _compile(rf"^\W*(?:{WEEKDAY_NAMES})\b\.?,?")
BARE_WEEKDAY_PATTERN = _compile(rf"^\W*(?:(?:next|this|nächsten?|diesen?)\s+)?(?:{WEEKDAY_NAMES})\b\W*$")
RELATIVE_DAY_PATTERN = _compile(
    r"\b(?:today|tomorrow|tonight|yesterday|now|heute|morgen|übermorgen|gestern|jetzt)\b"
)

# Lines that never make a good event label.
METADATA_LABEL_PATTERN = _compile(
    r"(?::\s*$)|^(?:preis|price|total|summe|gesamt|mwst|ust|vat|tel|fax|kasse|bon|beleg|zutaten"
    r"|ingredients|nutri-score|festgewicht|nettogewicht|net\s*wt|inhalt|einlass|beginn|doors)\b"
    r"|https?://|www\.|\.(?:de|com|net|org)(?:/|\b)"
)
PRICE_OR_WEIGHT_PATTERN = _compile(
    r"\d+[.,]\d{2}\s*(?:€|eur\b|\$|£)|(?:€|\$|£)\s*\d|€\s*/\s*kg"
    r"|^\W*e?\d+(?:[.,]\d+)?\s*(?:g|kg|mg|ml|l|%)?\W*$"
    r"|\b\d+(?:[.,]\d+)?\s*(?:kg|mg|ml)\b"
)
# Amounts inside a label line, removed rather than rejecting the line.
PRICE_TOKEN_PATTERN = _compile(
    r"\d+(?:[.,]\d+)?\s*(?:€|eur\b|\$|£)(?:\s*/\s*kg\b)?|(?:€|\$|£)\s*\d+(?:[.,]\d+)?"
)
BATCH_CODE_PATTERN = _compile(
    r"^(?:(?:l|los|lot|pn|ch|charge|batch|ean)\b[\s.:#-]*)?[a-z]{0,3}[\s-]?\d[\w./-]*$"
)

NAME_STRIP_CHARS = " \t:-–,;.!?•|/·*"
