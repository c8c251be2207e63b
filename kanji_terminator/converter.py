"""Kanji to hiragana conversion by greedy longest match."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Mapping, Optional

from kanji_terminator.dictionary import KanjiDictionary, load_dictionary, load_synonyms
from kanji_terminator.text_simplifier import is_kanji, katakana_to_hiragana, normalize


_DATA_DIR = Path(__file__).parent / "data"
DICTIONARY_PATH = Path(os.getenv("KANJI_DICT_PATH", _DATA_DIR / "kanwa.json"))
SYNONYMS_PATH = Path(os.getenv("KANJI_SYNONYMS_PATH", _DATA_DIR / "synonyms.json"))


class KanjiConverter:
    """Convert phrases using a shared, read-only dictionary and synonym table."""

    def __init__(
        self,
        dictionary: KanjiDictionary,
        synonyms: Optional[Mapping[str, str]] = None,
        *,
        katakana: bool = False,
    ) -> None:
        self.dictionary = dictionary
        self.synonyms: Mapping[str, str] = synonyms if synonyms is not None else {}
        self.katakana = katakana

    def with_katakana(self, katakana: bool) -> "KanjiConverter":
        """Return a converter sharing the same tables with another filter mode."""

        if katakana == self.katakana:
            return self
        return KanjiConverter(self.dictionary, self.synonyms, katakana=katakana)

    def convert(self, text: str) -> str:
        text = normalize(text, self.synonyms)
        pieces: list[str] = []
        index = 0
        while index < len(text):
            char = text[index]
            if is_kanji(char):
                match = self.dictionary.longest_match(text, index)
                if match.length > 0:
                    pieces.append(match.reading)
                    index += match.length
                    continue
            pieces.append(char)
            index += 1

        converted = "".join(pieces)
        if self.katakana:
            converted = katakana_to_hiragana(converted)
        return converted

    __call__ = convert


@lru_cache(maxsize=1)
def get_converter() -> KanjiConverter:
    """Load the configured dictionary once and cache the converter."""

    return KanjiConverter(load_dictionary(DICTIONARY_PATH), load_synonyms(SYNONYMS_PATH))
