#!/usr/bin/env python3
"""Slugify text from arguments or stdin.

Usage:
    python3 scripts/slugify_text.py "Hello, world!" "déjà vu"
    cat titles.txt | python3 scripts/slugify_text.py --char-map slugify_char_map.json
    python3 scripts/slugify_text.py --transliterate "Жук и щука"
    python3 scripts/slugify_text.py --strip diacritics --json "Συστημάτων Γραφής"

One slug per line on stdout (or JSON records with ``--json``); human
messages go to stderr.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from textslug.char_map import CharMap, default_char_map, load_char_map
from textslug.io_utils import dumps_json
from textslug.slugify import (
    ASCII_DIACRITICS,
    DIACRITICS,
    NON_ASCII,
    NON_WORD,
    SlugifyOptions,
    slugify,
)

log = logging.getLogger("slugify_text")

STRIP_PATTERNS = {
    "non-word": NON_WORD,
    "diacritics": DIACRITICS,
    "ascii-diacritics": ASCII_DIACRITICS,
    "non-ascii": NON_ASCII,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Convert text into URL slugs.")
    parser.add_argument("text", nargs="*", help="Text to slugify (default: stdin lines)")
    parser.add_argument(
        "--char-map", default=None,
        help="Serialized char map JSON; enables transliteration",
    )
    parser.add_argument(
        "--transliterate", action="store_true",
        help="Transliterate with the bundled char map (or $TEXTSLUG_CHAR_MAP)",
    )
    parser.add_argument(
        "--strip", choices=sorted(STRIP_PATTERNS), default=None,
        help="Stripping pattern (default: non-ascii with --char-map, else non-word)",
    )
    parser.add_argument("--json", action="store_true", help="Emit JSON records")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    char_map: CharMap | None = None
    if args.char_map or args.transliterate:
        try:
            if args.char_map:
                char_map = load_char_map(Path(args.char_map))
            else:
                char_map = default_char_map()
        except (OSError, ValueError) as e:
            log.error("cannot load char map: %s", e)
            return 1
        log.debug("loaded %d char map entries", len(char_map))

    options = SlugifyOptions(
        char_map=char_map,
        strip=STRIP_PATTERNS[args.strip] if args.strip else None,
    )
    inputs = args.text or [line.rstrip("\n") for line in sys.stdin]

    records = [{"input": t, "slug": slugify(t, options)} for t in inputs]
    if args.json:
        sys.stdout.buffer.write(dumps_json(records))
    else:
        for r in records:
            print(r["slug"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
