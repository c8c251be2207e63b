from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from kanji_terminator.batch import process_batch
from kanji_terminator.converter import KanjiConverter, get_converter


LOGGER = logging.getLogger(__name__)


class ConvertRequest(BaseModel):
    text: Optional[str] = None
    texts: Optional[List[str]] = None
    katakana: bool = False


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    # Dictionary errors propagate here and abort startup.
    get_converter()
    yield


app = FastAPI(title="Kanji Terminator", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


def _split_phrases(text: str) -> List[str]:
    return text.split("\n")


def _respond(phrases: List[str], converter: KanjiConverter) -> dict[str, str]:
    results = process_batch(phrases, converter.convert)
    return {"data": "\n".join(results)}


@app.get("/api/ping")
async def ping() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/")
async def convert_query(
    text: str | None = Query(default=None),
    katakana: bool = Query(default=False),
    converter: KanjiConverter = Depends(get_converter),
) -> dict[str, str]:
    if not text:
        raise HTTPException(status_code=400, detail="Text parameter is required")
    return _respond(_split_phrases(text), converter.with_katakana(katakana))


@app.post("/")
async def convert_body(
    payload: ConvertRequest,
    converter: KanjiConverter = Depends(get_converter),
) -> dict[str, str]:
    if payload.text:
        phrases = _split_phrases(payload.text)
    elif payload.texts:
        phrases = list(payload.texts)
    else:
        raise HTTPException(status_code=400, detail="Text or texts array is required")

    LOGGER.debug("Converting %d phrases", len(phrases))
    return _respond(phrases, converter.with_katakana(payload.katakana))
