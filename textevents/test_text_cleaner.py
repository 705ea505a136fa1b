from __future__ import annotations

from .text_cleaner import normalise_input_text


def test_line_endings_are_unified():
    assert normalise_input_text("a\r\nb\rc\u2028d") == "a\nb\nc\nd"


def test_blank_lines_are_kept():
    assert normalise_input_text("MHD:\n\n23.01.") == "MHD:\n\n23.01."


def test_spaces_are_collapsed_per_line():
    assert normalise_input_text("  Amazon \t Prime\u00a0 payment  ") == "Amazon Prime payment"


def test_fullwidth_digits_and_invisible_characters():
    assert normalise_input_text("２５．１２．２０２４\u200b") == "25.12.2024"


def test_html_entities():
    assert normalise_input_text("Tom &amp; Jerry") == "Tom & Jerry"


def test_empty():
    assert normalise_input_text("") == ""
