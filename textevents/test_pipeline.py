from __future__ import annotations

from datetime import date, datetime

import pytest

from .pattern_stage import PatternStage
from .pipeline import EventExtractor, coerce_reference, extract_events, extract_events_from_image
from .recognizer import NoTextFoundError

REFERENCE = datetime(2025, 3, 1, 12, 0)


def fixed_search(*results):
    def search(text, languages=None, settings=None):
        return list(results)

    return search


def patterns_only():
    return EventExtractor(search=fixed_search())


@pytest.mark.parametrize(
    "text",
    ["", "   \n\n   \t   ", "This is just some random text without any dates"],
)
def test_text_without_dates_gives_no_events(text):
    assert extract_events(text, REFERENCE) == []


def test_plain_date_is_midnight_without_deadline():
    [event] = extract_events("Meeting on 31.01.2025", REFERENCE)
    assert event.date == datetime(2025, 1, 31)
    assert event.deadline is None
    assert "Meeting" in event.name
    assert event.created_at == REFERENCE


def test_return_by_is_a_deadline():
    [event] = extract_events("Return by 25.12.2024", REFERENCE)
    assert event.deadline == datetime(2024, 12, 25)
    assert event.date == datetime(2024, 12, 24)


def test_best_before_with_short_year():
    [event] = extract_events("MHD: 31.12.24", REFERENCE)
    assert event.deadline == datetime(2024, 12, 31)


def test_same_day_is_reported_once():
    events = extract_events("Event on 25.12.2024\nAnother event 25.12.2024", REFERENCE)
    assert len(events) == 1


def test_several_lines_several_events():
    text = "Amazon subscription 15.01.2025\nNetflix payment 20.01.2025\nGym membership bis zum 31.01.2025"
    events = extract_events(text, REFERENCE)
    assert [event.deadline is not None for event in events] == [False, False, True]
    assert events[0].name == "Amazon subscription"
    assert events[1].name == "Netflix payment"
    assert events[2].name == "Gym membership"
    assert events[2].deadline == datetime(2025, 1, 31)


def test_pattern_classification_wins_over_natural_language():
    extractor = EventExtractor(search=fixed_search(("21.01.2026", datetime(2026, 1, 21))))
    [event] = extractor.extract("Renewal 21.01.2026", REFERENCE)
    assert event.date == datetime(2026, 1, 21)
    assert event.deadline is None


def test_extraction_is_idempotent():
    text = "The Batman\n18.05.2026 19:00\nCinestar Berlin\nReturn by 25.12.2024"
    assert extract_events(text, REFERENCE) == extract_events(text, REFERENCE)


def test_missing_year_is_never_advanced():
    [event] = extract_events("Zahlung fällig am 15.03.", datetime(2025, 6, 1))
    assert event.deadline == datetime(2025, 3, 15)


def test_reference_may_be_a_date():
    [event] = extract_events("Zahlung fällig am 15.03.", date(2031, 1, 1))
    assert event.deadline == datetime(2031, 3, 15)
    assert event.created_at == datetime(2031, 1, 1)


def test_keyword_deadline_without_year_with_time():
    [event] = extract_events("BLACK DEAL nur bis zum 02.12. 11 Uhr", REFERENCE)
    assert event.deadline == datetime(2025, 12, 2, 11, 0)
    assert event.date == datetime(2025, 12, 1, 11, 0)
    assert "BLACK DEAL" in event.name
    assert "11 Uhr" not in event.name
    assert "02.12" not in event.name


@pytest.mark.parametrize(
    "text, expected, is_deadline",
    [
        ("Meeting 15.03.2025 14:30 Uhr", datetime(2025, 3, 15, 14, 30), False),
        ("Zahlung fällig 25.12.2024 14.30 Uhr", datetime(2024, 12, 25, 14, 30), True),
        ("Meeting deadline 12/25/2024 3pm", datetime(2024, 12, 25, 15, 0), True),
        ("Deadline 6/15 3:30pm", datetime(2025, 6, 15, 15, 30), True),
        ("Meeting 12/25/2024 9am", datetime(2024, 12, 25, 9, 0), False),
        ("Concert 25.12.2024 14:30", datetime(2024, 12, 25, 14, 30), False),
        ("Event 25.12.2024 12am", datetime(2024, 12, 25, 0, 0), False),
        ("Lunch 25.12.2024 12pm", datetime(2024, 12, 25, 12, 0), False),
    ],
)
def test_times_on_the_date_line(text, expected, is_deadline):
    [event] = patterns_only().extract(text, REFERENCE)
    if is_deadline:
        assert event.deadline == expected
    else:
        assert event.date == expected
        assert event.deadline is None


def test_food_label_with_expiry_label_above():
    text = "\n".join(
        [
            "Hähnchen-Innenfilet frisch",
            "bei max. +4°C zu verbrauchen bis:",
            "Festgewicht",
            ". €/kg",
            "30.12.25",
            "e400g",
            "12,4",
            "Preis",
            "4,99",
        ]
    )
    [event] = extract_events(text, REFERENCE)
    assert event.deadline == datetime(2025, 12, 30)
    assert event.date == datetime(2025, 12, 29)


def test_egg_carton_without_year():
    text = "MINDESTENS HALTBAR BIS:\n23.01.\nPN DE-1201\nGeu.Kl.:\n11417231075\nM"
    [event] = extract_events(text, REFERENCE)
    assert event.deadline == datetime(2025, 1, 23)
    assert event.name == "Reminder"


def test_cheese_label_short_year():
    text = "26.02.26\nLOS329\nNUTRI-SCORE\nA B\nDE\nedeka.de/nutri-score\nWeidechart"
    [event] = extract_events(text, REFERENCE)
    assert event.date == datetime(2026, 2, 26)
    assert event.deadline is None


def test_can_with_batch_code():
    [event] = extract_events("21.08.2026 L04", REFERENCE)
    assert event.date == datetime(2026, 8, 21)


def test_cinema_ticket_name_from_line_above():
    [event] = extract_events("The Batman\n18.05.2026 19:00\nCinestar Berlin", REFERENCE)
    assert "The Batman" in event.name
    assert event.date == datetime(2026, 5, 18, 19, 0)


def test_concert_poster_title_above_date():
    [event] = extract_events("Radiohead\nLive in Concert\n25.07.2026 20:00\nWaldbühne Berlin", REFERENCE)
    assert "Radiohead" in event.name
    assert event.date == datetime(2026, 7, 25, 20, 0)


def test_instagram_story_with_emoji():
    events = patterns_only().extract("TierPark Sessions 21.06.2025 \U0001f4c5 7PM Doors \U0001f556", REFERENCE)
    assert events[0].date == datetime(2025, 6, 21, 19, 0)


def test_first_time_on_ticket_line():
    events = extract_events("18.05.26 in Berlin • Einlass: 19:00, Beginn: 20:00", REFERENCE)
    assert events[0].date == datetime(2026, 5, 18, 19, 0)
    assert events[0].name == "In Berlin"


def test_numeric_start_date_is_not_a_deadline():
    [event] = extract_events("38,99 € pro Jahr Ab dem 13.01.2026", REFERENCE)
    assert event.date == datetime(2026, 1, 13)
    assert event.deadline is None


def test_natural_language_start_date():
    extractor = EventExtractor(search=fixed_search(("13 Jan 2026", datetime(2026, 1, 13))))
    [event] = extractor.extract("38,99 € per year Starting on 13 Jan 2026", REFERENCE)
    assert event.date == datetime(2026, 1, 13, 9, 0)
    assert event.deadline is None
    assert event.name == "Per year Starting on"


def test_german_natural_language_payment():
    extractor = EventExtractor(search=fixed_search(("21. Januar 2026", datetime(2026, 1, 21))))
    [event] = extractor.extract("Nächste Zahlung 21. Januar 2026", REFERENCE)
    assert event.deadline == datetime(2026, 1, 21, 9, 0)
    assert event.date == datetime(2026, 1, 20, 9, 0)
    assert event.name == "Nächste Zahlung"


def test_eventim_listing():
    text = "20 Juni 2026\nSa. 16:00\nBERLIN\nDie Schlagernacht des Jahres 2026 - DAS ORIGINAL\nWaldbühne Berlin"
    extractor = EventExtractor(
        search=fixed_search(("20 Juni 2026", datetime(2026, 6, 20)), ("16:00", datetime(2025, 3, 1, 16)))
    )
    [event] = extractor.extract(text, REFERENCE)
    assert event.date == datetime(2026, 6, 20, 16, 0)
    assert event.deadline is None
    assert "16:00" not in event.name
    assert "Sa." not in event.name
    assert "BERLIN" in event.name


def test_renewal_date_with_dateparser():
    [event] = extract_events("Renewal Date 21 January 2026", REFERENCE)
    assert event.deadline == datetime(2026, 1, 21, 9, 0)
    assert event.date == datetime(2026, 1, 20, 9, 0)
    assert "Renewal" in event.name


def test_day_month_without_year_with_dateparser():
    [event] = extract_events("Continues 6 April", REFERENCE)
    assert event.date == datetime(2025, 4, 6, 9, 0)
    assert event.deadline is None


class StaticRecognizer:
    def __init__(self, text):
        self.text = text
        self.calls = []

    def recognize_text(self, image_data):
        self.calls.append(image_data)
        return self.text


class BlankRecognizer:
    def recognize_text(self, image_data):
        raise NoTextFoundError("No text found in image")


def test_image_is_attached_to_events():
    recognizer = StaticRecognizer("Return by 25.12.2024")
    [event] = extract_events_from_image(b"png-bytes", recognizer, REFERENCE, extractor=patterns_only())
    assert recognizer.calls == [b"png-bytes"]
    assert event.image_data == b"png-bytes"
    assert event.deadline == datetime(2024, 12, 25)


def test_recognition_errors_propagate():
    with pytest.raises(NoTextFoundError):
        extract_events_from_image(b"png-bytes", BlankRecognizer(), REFERENCE)


def test_coerce_reference():
    assert coerce_reference(date(2025, 3, 1)) == datetime(2025, 3, 1)
    assert coerce_reference(REFERENCE) is REFERENCE
    assert isinstance(coerce_reference(None), datetime)


def test_slash_date_is_read_once_across_stages():
    extractor = EventExtractor(search=fixed_search(("1/2", datetime(2025, 2, 1))))
    [event] = extractor.extract("Order shipped 1/2", REFERENCE)
    assert event.date == datetime(2025, 1, 2)
    assert event.name == "Order shipped"


def test_slash_date_with_dateparser():
    [event] = extract_events("Order shipped 1/2", REFERENCE)
    assert event.date == datetime(2025, 1, 2)


def test_names_leave_out_lines_with_other_dates():
    extractor = EventExtractor(
        search=fixed_search(("May 5", datetime(2025, 5, 5)), ("5 May 2025", datetime(2025, 5, 5)))
    )
    [event] = extractor.extract("Team lunch May 5\nDentist 5 May 2025", REFERENCE)
    assert event.name == "Team lunch"
    assert event.date == datetime(2025, 5, 5, 9, 0)


def test_pattern_scan_reports_offsets_in_the_whole_text():
    text = "Hi there\n  Meeting 31.01.2025"
    events, spans = PatternStage().scan(text, REFERENCE)
    assert len(events) == 1
    [(start, end)] = spans
    assert text[start:end] == "31.01.2025"
