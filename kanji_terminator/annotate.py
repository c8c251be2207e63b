"""Plain-text discovery collaborator: readings rendered as ``漢字《かんじ》``."""

from __future__ import annotations

from typing import List, Optional, Union

from kanji_terminator.session import FuriganaSession
from kanji_terminator.text_simplifier import find_kanji_runs


class Annotation:
    """Sink for one occurrence of a kanji run."""

    def __init__(self, run: str) -> None:
        self.run = run
        self.reading: Optional[str] = None

    def __call__(self, reading: str) -> None:
        self.reading = reading

    def render(self) -> str:
        if self.reading:
            return f"{self.run}《{self.reading}》"
        return self.run


def annotate(text: str, session: FuriganaSession, timeout: Optional[float] = None) -> str:
    """Queue every kanji run in ``text``, flush the session and render the result."""

    pieces: List[Union[str, Annotation]] = []
    last = 0
    for start, run in find_kanji_runs(text):
        pieces.append(text[last:start])
        annotation = Annotation(run)
        session.discover(run, annotation)
        pieces.append(annotation)
        last = start + len(run)
    pieces.append(text[last:])

    session.flush(timeout=timeout)
    return "".join(piece.render() if isinstance(piece, Annotation) else piece for piece in pieces)
