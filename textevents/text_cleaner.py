from __future__ import annotations

import html
import re

ZERO_WIDTH_PATTERN = re.compile("[\u200b\u200c\u200d\u2060\ufeff]")
ODD_SPACE_PATTERN = re.compile("[\u00a0\u2007\u202f\u2009\u3000]")
MULTI_SPACE_PATTERN = re.compile(r"[ \t]+")
LINE_BREAK_PATTERN = re.compile("\r\n?|[\u2028\u2029\x0b\x0c]")

FULLWIDTH_TABLE = str.maketrans({
    "０": "0",
    "１": "1",
    "２": "2",
    "３": "3",
    "４": "4",
    "５": "5",
    "６": "6",
    "７": "7",
    "８": "8",
    "９": "9",
    "：": ":",
    "．": ".",
    "／": "/",
    "－": "-",
})


def normalise_input_text(text: str) -> str:
    """Tidy OCR output and pasted text without changing its line structure.

    Line positions matter for naming and deadline lookback, so blank lines
    are kept.
    """
    if not text:
        return ""

    text = html.unescape(text)
    text = LINE_BREAK_PATTERN.sub("\n", text)
    text = ZERO_WIDTH_PATTERN.sub("", text)
    text = ODD_SPACE_PATTERN.sub(" ", text)
    text = text.translate(FULLWIDTH_TABLE)
    lines = [MULTI_SPACE_PATTERN.sub(" ", line).strip() for line in text.split("\n")]
    return "\n".join(lines)
