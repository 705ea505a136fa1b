from __future__ import annotations

from datetime import datetime

import pytest

from .deadline import (
    has_deadline_context,
    line_indicates_deadline,
    reclassify_from_context,
    split_event_and_deadline,
)
from .models import DateCandidate


@pytest.mark.parametrize(
    "line",
    [
        "MINDESTENS HALTBAR BIS:",
        "bei max. +4°C zu verbrauchen bis:",
        "Best before",
        "Pay by:",
        "Gültig bis",
    ],
)
def test_expiry_labels(line):
    assert line_indicates_deadline(line)


@pytest.mark.parametrize("line", ["Festgewicht", "Cinestar Berlin", "The Batman", "Bye"])
def test_ordinary_lines(line):
    assert not line_indicates_deadline(line)


def _plain(moment: datetime) -> DateCandidate:
    return DateCandidate(moment=moment, is_deadline=False, text="23.01.")


def test_label_above_marks_deadline():
    lines = ["MINDESTENS HALTBAR BIS:", "23.01."]
    result = reclassify_from_context(_plain(datetime(2025, 1, 23)), lines, 1)
    assert result.is_deadline


def test_label_within_three_lines():
    lines = ["zu verbrauchen bis:", "Festgewicht", ". €/kg", "30.12.25"]
    assert reclassify_from_context(_plain(datetime(2025, 12, 30)), lines, 3).is_deadline


def test_label_too_far_above_is_ignored():
    lines = ["zu verbrauchen bis:", "a", "b", "c", "30.12.25"]
    assert not reclassify_from_context(_plain(datetime(2025, 12, 30)), lines, 4).is_deadline


def test_label_below_is_ignored():
    lines = ["23.01.", "MINDESTENS HALTBAR BIS:"]
    assert not reclassify_from_context(_plain(datetime(2025, 1, 23)), lines, 0).is_deadline


def test_reclassify_returns_new_candidate():
    original = _plain(datetime(2025, 1, 23))
    reclassify_from_context(original, ["MHD:", "23.01."], 1)
    assert not original.is_deadline


def test_deadline_vocabulary():
    assert has_deadline_context("Renewal Date 21 January 2026")
    assert has_deadline_context("Nächste Zahlung 21. Januar 2026")
    assert not has_deadline_context("Konzert 20 Juni 2026")


def test_split_event_and_deadline():
    moment = datetime(2024, 12, 25, 15, 0)
    assert split_event_and_deadline(moment, True) == (datetime(2024, 12, 24, 15, 0), moment)
    assert split_event_and_deadline(moment, False) == (moment, None)
