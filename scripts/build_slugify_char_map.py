#!/usr/bin/env python3
"""Compile the slugify char map from ICU transliteration rule files.

The rule directory is an ICU ``icu4c/source/data/translit`` checkout
(https://github.com/unicode-org/icu/tree/main/icu4c/source/data/translit).

Usage:
    python3 scripts/build_slugify_char_map.py --icu-dir ~/icu/icu4c/source/data/translit \
      --output /tmp/slugify_char_map.json

    # Rebuild the bundled table (src/textslug/data/slugify_char_map.json):
    python3 scripts/build_slugify_char_map.py --icu-dir ~/icu/icu4c/source/data/translit

    # ICU_DIR from the environment, summary only:
    ICU_DIR=~/icu/icu4c/source/data/translit \
      python3 scripts/build_slugify_char_map.py --dry-run

Structured JSON summary goes to stdout; human messages go to stderr.
Nothing is written unless the whole compilation succeeds.
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from textslug.char_map import DEFAULT_CHAR_MAP_PATH
from textslug.char_map_compiler import (
    DEFAULT_EXCLUDED_FILES,
    CharMapBuildError,
    compile_char_map,
    write_serialized_table,
)
from textslug.io_utils import dumps_json

log = logging.getLogger("build_slugify_char_map")

ICU_DIR_ENV = "ICU_DIR"
DEFAULT_OUTPUT = str(DEFAULT_CHAR_MAP_PATH)


def dump_json(obj: object) -> None:
    sys.stdout.buffer.write(dumps_json(obj))
    sys.stdout.buffer.flush()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compile the slugify char map from ICU transliteration rules.",
    )
    parser.add_argument(
        "--icu-dir", default=os.environ.get(ICU_DIR_ENV),
        help=f"ICU translit rule directory (default: ${ICU_DIR_ENV})",
    )
    parser.add_argument(
        "--output", default=DEFAULT_OUTPUT,
        help="Serialized char map path (default: the table bundled with textslug)",
    )
    parser.add_argument(
        "--exclude", action="append", default=None, metavar="FILE",
        help="Rule file to skip; repeatable (default: Ancient Greek rules)",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Compile and print the summary without writing the table",
    )
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    if not args.icu_dir:
        parser.error(f"--icu-dir or ${ICU_DIR_ENV} must be set")

    exclude = tuple(args.exclude) if args.exclude else DEFAULT_EXCLUDED_FILES
    try:
        result = compile_char_map(Path(args.icu_dir).expanduser(), exclude=exclude)
    except CharMapBuildError as e:
        log.error("%s", e)
        return 1

    summary = result.summary()
    if args.dry_run:
        summary["output"] = None
    else:
        output = Path(args.output)
        write_serialized_table(result.serialized, output)
        log.info("wrote %d roots to %s", len(result.serialized), output)
        summary["output"] = str(output)

    dump_json(summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
