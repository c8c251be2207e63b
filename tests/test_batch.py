import logging

import pytest

from kanji_terminator.batch import process_batch


def test_duplicates_converted_once(converter):
    calls = []

    def convert(phrase):
        calls.append(phrase)
        return converter.convert(phrase)

    assert process_batch(["火曜日", "", "火曜日"], convert) == ["かようび", "", "かようび"]
    assert calls == ["火曜日"]


def test_order_and_length_preserved_across_chunks(converter):
    phrases = ["日本", "語", "漢字", "日本", "鬱", "語"] * 5
    result = process_batch(phrases, converter.convert, chunk_size=2)
    assert len(result) == len(phrases)
    assert result == [converter.convert(phrase) for phrase in phrases]


def test_chunk_size_does_not_change_output(converter):
    phrases = ["漢字{}".format(i) for i in range(45)] + ["日本"]
    assert process_batch(phrases, converter.convert, chunk_size=1) == process_batch(
        phrases, converter.convert, chunk_size=20
    )


def test_failing_phrase_maps_to_empty(caplog):
    def convert(phrase):
        if phrase == "壊":
            raise RuntimeError("boom")
        return phrase.upper()

    with caplog.at_level(logging.ERROR, logger="kanji_terminator.batch"):
        result = process_batch(["a", "壊", "b", "壊"], convert)

    assert result == ["A", "", "B", ""]
    assert "壊" in caplog.text


def test_blank_phrases_skip_engine():
    def convert(phrase):
        raise AssertionError("should not be called")

    assert process_batch(["", "  "], convert) == ["", ""]


def test_empty_batch(converter):
    assert process_batch([], converter.convert) == []


def test_invalid_chunk_size(converter):
    with pytest.raises(ValueError):
        process_batch(["日本"], converter.convert, chunk_size=0)
