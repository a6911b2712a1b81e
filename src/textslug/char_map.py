"""Runtime char map: load a serialized table into a source -> root lookup."""
from __future__ import annotations

import os
import threading
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Any

from textslug.char_map_compiler import invert_table
from textslug.io_utils import load_json

# Written by scripts/build_slugify_char_map.py; shipped as package data.
DEFAULT_CHAR_MAP_PATH = Path(__file__).resolve().parent / "data" / "slugify_char_map.json"
CHAR_MAP_ENV = "TEXTSLUG_CHAR_MAP"


class CharMapFormatError(ValueError):
    """Raised when a serialized char map is not a flat string mapping."""


class CharMap(Mapping[str, str]):
    """Immutable mapping from source strings to ASCII roots.

    Instances hash by identity and are weakly referenceable, so slugify can
    cache one compiled transliteration pattern per instance.
    """

    __slots__ = ("_entries", "__weakref__")

    def __init__(self, entries: Mapping[str, str] | None = None) -> None:
        self._entries: dict[str, str] = dict(entries or {})

    def __getitem__(self, key: str) -> str:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            return dict(self.items()) == dict(other.items())
        return NotImplemented

    __hash__ = object.__hash__

    def __repr__(self) -> str:
        return f"CharMap({len(self._entries)} entries)"


def expand_serialized(serialized: Mapping[str, Any]) -> CharMap:
    """Expand ``{root: "src1,src2,..."}`` into a ``CharMap``.

    Raises CharMapFormatError on non-string roots or source lists.
    """
    entries: dict[str, str] = {}
    for root, sources in serialized.items():
        if not isinstance(root, str) or not isinstance(sources, str):
            raise CharMapFormatError(
                f"expected string root and source list, got {root!r}: {sources!r}",
            )
        for source in sources.split(","):
            if source:
                entries[source] = root
    return CharMap(entries)


def serialize_char_map(char_map: Mapping[str, str]) -> dict[str, str]:
    """Re-derive the serialized (reverse-grouped, sorted) form of a char map."""
    return invert_table(char_map)


def load_char_map(path: Path) -> CharMap:
    """Load a serialized char map JSON file."""
    data = load_json(path)
    if not isinstance(data, dict):
        raise CharMapFormatError(f"{path}: top level must be a JSON object")
    return expand_serialized(data)


_default: CharMap | None = None
_default_lock = threading.Lock()


def default_char_map() -> CharMap:
    """Return the compiled char map, loaded once per process.

    Reads ``$TEXTSLUG_CHAR_MAP`` if set, else the table bundled with the
    package. The same instance is returned on every call, so slugify
    reuses one compiled pattern for it.

    Raises FileNotFoundError if no table has been built.
    """
    global _default
    with _default_lock:
        if _default is None:
            path = Path(os.environ.get(CHAR_MAP_ENV) or DEFAULT_CHAR_MAP_PATH)
            if not path.is_file():
                raise FileNotFoundError(
                    f"char map not found: {path} "
                    "(build it with scripts/build_slugify_char_map.py)",
                )
            _default = load_char_map(path)
        return _default


def reset_default_char_map() -> None:
    """Forget the loaded default char map; the next call reloads it."""
    global _default
    with _default_lock:
        _default = None
