#!/usr/bin/env python3
"""Annotate kanji runs in a text file with readings from the conversion server.

Each kanji run found in the input becomes one pending entry; repeated runs
share a single request slot. Resolved runs are printed as ``漢字《かんじ》``,
unresolved runs are left bare.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Dict

from kanji_terminator.annotate import annotate
from kanji_terminator.cache import CACHE_DIR, JsonFileStore
from kanji_terminator.client import DEFAULT_API_URL, ReadingClient
from kanji_terminator.session import FuriganaSession


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Add readings to the kanji in a text file")
    parser.add_argument("input", help="UTF-8 text file to annotate")
    parser.add_argument("--output", help="Write the result here instead of stdout")
    parser.add_argument("--api", default=DEFAULT_API_URL, help="Conversion server URL")
    parser.add_argument("--cache-dir", default=str(CACHE_DIR), help="Directory for the persisted reading cache")
    parser.add_argument("--chunk-size", type=int, default=200, help="Kanji runs per request")
    parser.add_argument("--timeout", type=float, default=30.0, help="Seconds to wait for pending requests")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    input_path = Path(args.input).expanduser()
    if not input_path.exists():
        raise FileNotFoundError(f"Input path not found: {input_path}")
    text = input_path.read_text(encoding="utf-8")

    client = ReadingClient(args.api)
    summary: Dict[str, int] = {}
    try:
        with FuriganaSession(client, JsonFileStore(args.cache_dir), chunk_size=args.chunk_size) as session:
            result = annotate(text, session, timeout=args.timeout)
            summary["unresolved"] = len(session.queue)
            summary["cached"] = len(session.cache)
    finally:
        client.close()

    if args.output:
        Path(args.output).write_text(result, encoding="utf-8")
    else:
        print(result, end="")
    logging.info("Done: %(cached)d cached readings, %(unresolved)d kanji runs unresolved", summary)


if __name__ == "__main__":
    main()
