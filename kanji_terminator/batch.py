"""Convert many phrases at once, converting each distinct phrase only once."""

from __future__ import annotations

import logging
import os
from typing import Callable, Dict, List, Sequence


LOGGER = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = int(os.getenv("KANJI_BATCH_CHUNK_SIZE", "20"))


def process_batch(
    phrases: Sequence[str],
    convert: Callable[[str], str],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> List[str]:
    """Return one reading per phrase, aligned with ``phrases`` by position.

    Duplicate phrases are converted once. A phrase whose conversion raises is
    logged and yields an empty string; the rest of the batch carries on.
    Chunks only bound the work done per pass and never affect the output.
    """

    if chunk_size < 1:
        raise ValueError("chunk_size must be positive")

    unique_phrases = list(dict.fromkeys(phrases))
    results: Dict[str, str] = {}

    for offset in range(0, len(unique_phrases), chunk_size):
        chunk = unique_phrases[offset:offset + chunk_size]
        LOGGER.debug("Converting phrases %d-%d of %d", offset + 1, offset + len(chunk), len(unique_phrases))
        for phrase in chunk:
            results[phrase] = _convert_phrase(phrase, convert)

    return [results.get(phrase, "") for phrase in phrases]


def _convert_phrase(phrase: str, convert: Callable[[str], str]) -> str:
    if not phrase or not phrase.strip():
        return ""
    try:
        return convert(phrase)
    except Exception:  # noqa: BLE001 - one bad phrase must not sink the batch
        LOGGER.exception("Error processing %r", phrase)
        return ""
