"""Compound dictionary and synonym table used by the converter.

Both tables are loaded once from UTF-8 JSON objects and never mutated
afterwards. Loading problems raise :class:`DictionaryLoadError`; the server
treats them as fatal because it cannot convert anything without its data.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional

import jaconv


LOGGER = logging.getLogger(__name__)


class DictionaryLoadError(Exception):
    """Raised when a dictionary or synonym file cannot be used."""


@dataclass(frozen=True)
class Match:
    reading: str
    length: int


NO_MATCH = Match(reading="", length=0)


class KanjiDictionary(Mapping[str, str]):
    """Read-only compound -> hiragana reading table with longest-match lookup."""

    def __init__(self, entries: Mapping[str, str]) -> None:
        table: Dict[str, str] = {}
        longest_by_head: Dict[str, int] = {}
        for compound, reading in entries.items():
            if not isinstance(compound, str) or not compound:
                raise DictionaryLoadError(f"Invalid compound key: {compound!r}")
            if not isinstance(reading, str):
                raise DictionaryLoadError(f"Reading for {compound!r} must be a string")
            table[compound] = jaconv.kata2hira(reading)
            head = compound[0]
            if len(compound) > longest_by_head.get(head, 0):
                longest_by_head[head] = len(compound)

        self._entries = MappingProxyType(table)
        self._longest_by_head = MappingProxyType(longest_by_head)
        self._max_length = max(longest_by_head.values(), default=0)

    @property
    def max_length(self) -> int:
        return self._max_length

    def __getitem__(self, compound: str) -> str:
        return self._entries[compound]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def longest_match(self, text: str, start: int = 0) -> Match:
        """Return the longest compound that is a prefix of ``text[start:]``.

        Candidate lengths are tried from the longest key sharing the first
        character down to one, so a shorter key never shadows a longer one.
        ``length == 0`` means nothing matched.
        """

        if start < 0 or start >= len(text):
            return NO_MATCH
        limit = min(self._longest_by_head.get(text[start], 0), len(text) - start)
        for length in range(limit, 0, -1):
            reading = self._entries.get(text[start:start + length])
            if reading is not None:
                return Match(reading=reading, length=length)
        return NO_MATCH


class SynonymTable(Mapping[str, str]):
    """Read-only variant -> canonical character mapping."""

    def __init__(self, entries: Mapping[str, str]) -> None:
        table: Dict[str, str] = {}
        for variant, canonical in entries.items():
            if not (isinstance(variant, str) and len(variant) == 1):
                raise DictionaryLoadError(f"Synonym key must be one character: {variant!r}")
            if not (isinstance(canonical, str) and len(canonical) == 1):
                raise DictionaryLoadError(f"Synonym for {variant!r} must be one character")
            table[variant] = canonical
        self._entries = MappingProxyType(table)

    def __getitem__(self, variant: str) -> str:
        return self._entries[variant]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def _read_json_object(path: Path, kind: str) -> Mapping[str, str]:
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise DictionaryLoadError(f"Missing {kind} file: {path}") from exc
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DictionaryLoadError(f"Unreadable {kind} file {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise DictionaryLoadError(f"{kind.capitalize()} file {path} must contain a JSON object")
    return payload


def load_dictionary(path: Path | str) -> KanjiDictionary:
    """Load a ``{compound: reading}`` JSON file."""

    dictionary = KanjiDictionary(_read_json_object(Path(path), "dictionary"))
    LOGGER.info("Loaded %d compounds (max length %d) from %s", len(dictionary), dictionary.max_length, path)
    return dictionary


def load_synonyms(path: Optional[Path | str]) -> SynonymTable:
    """Load a ``{variant: canonical}`` JSON file; ``None`` yields an empty table."""

    if path is None:
        return SynonymTable({})
    synonyms = SynonymTable(_read_json_object(Path(path), "synonym"))
    LOGGER.info("Loaded %d synonyms from %s", len(synonyms), path)
    return synonyms
