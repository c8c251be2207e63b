"""Character-level helpers shared by the converter and the discovery side.

This module focuses on three small operations:

1. Normalise orthographic variants through a synonym table before matching.
2. Classify kanji, using the ideograph block for the converter and the
   narrower scanner set for discovering runs in documents.
3. Fold katakana to hiragana for the optional output filter.

All functions are pure and operate on code points, so surrogate pairs are
never split.
"""

from __future__ import annotations

import re
from typing import Iterator, Mapping, Tuple

import jaconv


# Ranges matched when scanning documents for runs to annotate.
KANJI_RUN_PATTERN = re.compile("[㐀-䶵一-鿋豈-頻]+")

_KANJI_FIRST = 0x4E00
_KANJI_LAST = 0x9FFF


def normalize(text: str, synonyms: Mapping[str, str]) -> str:
    """Replace every character with its canonical form from ``synonyms``."""

    if not text:
        return ""
    return "".join(synonyms.get(char, char) for char in text)


def is_kanji(char: str) -> bool:
    """Return True for characters in the CJK Unified Ideographs block."""

    if len(char) != 1:
        return False
    return _KANJI_FIRST <= ord(char) <= _KANJI_LAST


def find_kanji_runs(text: str) -> Iterator[Tuple[int, str]]:
    """Yield ``(start, run)`` for every maximal kanji run in ``text``."""

    if not text:
        return
    for match in KANJI_RUN_PATTERN.finditer(text):
        yield match.start(), match.group(0)


def katakana_to_hiragana(text: str) -> str:
    """Convert every full-width katakana syllable to hiragana."""

    return jaconv.kata2hira(text or "")
