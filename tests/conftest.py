from concurrent.futures import Future

import pytest

from kanji_terminator.converter import KanjiConverter
from kanji_terminator.dictionary import KanjiDictionary, SynonymTable


ENTRIES = {
    "日": "ひ",
    "日本": "にほん",
    "語": "ご",
    "火曜日": "かようび",
    "曜日": "ようび",
    "漢字": "かんじ",
    "高校": "こうこう",
    "時間": "ジカン",
}

SYNONYMS = {"髙": "高", "國": "国"}


@pytest.fixture
def dictionary():
    return KanjiDictionary(ENTRIES)


@pytest.fixture
def converter(dictionary):
    return KanjiConverter(dictionary, SynonymTable(SYNONYMS))


class InlineExecutor:
    """Executor stand-in that runs submitted work immediately."""

    def __init__(self):
        self.submitted = []

    def submit(self, fn, *args, **kwargs):
        future = Future()
        self.submitted.append(args)
        try:
            future.set_result(fn(*args, **kwargs))
        except BaseException as exc:  # pragma: no cover - surfaced through the future
            future.set_exception(exc)
        return future

    def shutdown(self, wait=True):
        pass


@pytest.fixture
def inline_executor():
    return InlineExecutor()
