"""I/O utilities for JSON char-map artifacts.

Serialized char maps are written as an indented JSON object whose key
order is significant (the compiler sorts roots before writing), so keys are
never re-sorted on output. Non-ASCII text is written raw as UTF-8.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson


def load_json(path: Path) -> Any:
    """Load JSON from a file."""
    return orjson.loads(path.read_bytes())


def dumps_json(obj: Any, *, pretty: bool = True) -> bytes:
    """Encode an object as JSON bytes, preserving key order.

    Pretty output is 2-space indented and ends with a newline, so files
    written from the same object are byte-identical.
    """
    if pretty:
        return orjson.dumps(obj, option=orjson.OPT_INDENT_2) + b"\n"
    return orjson.dumps(obj)


def save_json(obj: Any, path: Path, *, pretty: bool = True) -> None:
    """Save an object as JSON, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(dumps_json(obj, pretty=pretty))
