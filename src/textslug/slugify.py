"""Convert arbitrary text into URL-safe slugs.

``slugify`` is a pure, total function of its arguments::

    >>> slugify("Hello, world!")
    'hello-world'
    >>> slugify("Συστημάτων Γραφής")
    'συστημάτων-γραφής'
    >>> slugify("A B C", char_map={"a": "x", "b": "y", "c": "z"})
    'x-y-z'

Without a char map, characters that are not letters, marks, numbers or
hyphens are stripped (``NON_WORD``). With a char map (even an empty one),
words are transliterated and everything outside ``[0-9a-zA-Z-]`` is
stripped (``NON_ASCII``). Either default can be overridden with ``strip``.
"""
from __future__ import annotations

import threading
import unicodedata
import weakref
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TypeAlias

import regex

from textslug.segmenter import WordSegmenter

StripPattern: TypeAlias = str | regex.Pattern[str]

NON_WORD = regex.compile(r"[^\p{L}\p{M}\p{N}\-]+")
"""Strips non-word characters: ``déjà-vu`` stays ``déjà-vu``."""

DIACRITICS = regex.compile(r"[^\p{L}\p{N}\-]+")
"""Strips diacritics as well: ``déjà-vu`` becomes ``deja-vu``."""

ASCII_DIACRITICS = regex.compile(r"(?<=[a-zA-Z])\p{M}+|[^\p{L}\p{M}\p{N}\-]+")
"""Strips diacritics from ASCII letters only (Greek keeps its accents)."""

NON_ASCII = regex.compile(r"[^0-9a-zA-Z\-]")
"""Strips everything outside ``[0-9a-zA-Z-]``."""

_HYPHEN_RUN_RE = regex.compile(r"-{2,}")
_EDGE_HYPHEN_RE = regex.compile(r"\A-|-\Z")
# Never matches: transliteration pattern for an empty char map.
_MATCH_NOTHING = regex.compile(r"[^\s\S]")

_word_segmenter = WordSegmenter("en-US")


@dataclass(frozen=True, slots=True)
class SlugifyOptions:
    """Options for ``slugify``.

    ``char_map`` enables transliteration when not None. ``strip`` overrides
    the stripping pattern (default ``NON_ASCII`` when transliterating,
    ``NON_WORD`` otherwise).
    """

    char_map: Mapping[str, str] | None = None
    strip: StripPattern | None = None


# ---------------------------------------------------------------------------
# Transliteration pattern cache
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class _Transliterator:
    pattern: regex.Pattern[str]
    lookup: dict[str, str]

    def convert(self, word: str) -> str:
        return self.pattern.sub(lambda m: self.lookup.get(m.group(), m.group()), word)


_cache: dict[int, _Transliterator] = {}
_cache_lock = threading.RLock()


def _normalize_key(key: str) -> str:
    return unicodedata.normalize("NFD", key).lower()


def _build_transliterator(char_map: Mapping[str, str]) -> _Transliterator:
    # Keys are matched against decomposed, lowercased input.
    lookup: dict[str, str] = {}
    for key, value in char_map.items():
        norm = _normalize_key(key)
        if norm:
            lookup.setdefault(norm, value)
    if not lookup:
        return _Transliterator(_MATCH_NOTHING, lookup)
    # Longest keys first so multi-character sequences beat their prefixes.
    keys = sorted(lookup, key=len, reverse=True)
    pattern = regex.compile("|".join(regex.escape(k) for k in keys))
    return _Transliterator(pattern, lookup)


def _evict(key: int) -> None:
    with _cache_lock:
        _cache.pop(key, None)


def _get_transliterator(char_map: Mapping[str, str]) -> _Transliterator:
    """Return the compiled pattern for ``char_map``, cached by identity.

    Only weakly referenceable maps are cached; the entry is dropped when
    the map is collected. Other mappings get a fresh pattern per call.
    """
    key = id(char_map)
    with _cache_lock:
        cached = _cache.get(key)
    if cached is not None:
        return cached

    translit = _build_transliterator(char_map)
    try:
        weakref.finalize(char_map, _evict, key)
    except TypeError:
        return translit

    with _cache_lock:
        # A concurrent first use may have won; both patterns are equivalent.
        return _cache.setdefault(key, translit)


def clear_transliteration_cache() -> None:
    """Drop every cached transliteration pattern."""
    with _cache_lock:
        _cache.clear()


# ---------------------------------------------------------------------------
# Slug pipeline
# ---------------------------------------------------------------------------


def _compile_strip(strip: StripPattern) -> regex.Pattern[str]:
    if isinstance(strip, str):
        return regex.compile(strip)
    return strip


def slugify(
    text: str,
    options: SlugifyOptions | None = None,
    *,
    char_map: Mapping[str, str] | None = None,
    strip: StripPattern | None = None,
) -> str:
    """Convert ``text`` into a slug.

    Args:
        text: Any text; may be empty, mix scripts or contain controls.
        options: Options object; keyword arguments take precedence.
        char_map: Source -> ASCII root map enabling transliteration.
        strip: Pattern of characters to remove.

    Returns:
        A lowercase, hyphen-delimited slug; ``"-"`` if nothing survives.
    """
    if options is not None:
        char_map = char_map if char_map is not None else options.char_map
        strip = strip if strip is not None else options.strip

    translit = _get_transliterator(char_map) if char_map is not None else None
    if strip is None:
        strip = NON_ASCII if translit is not None else NON_WORD
    strip_re = _compile_strip(strip)

    words: list[str] = []
    normalized = unicodedata.normalize("NFD", text.strip()).lower()
    for seg in _word_segmenter.segment(normalized):
        if seg.is_word_like:
            words.append(seg.segment)
        elif seg.segment:
            words.append("-")

    if translit is not None:
        joined = "-".join(translit.convert(w) for w in words)
    else:
        joined = "".join(words)

    slug = strip_re.sub("", joined)
    slug = unicodedata.normalize("NFC", slug)
    slug = _HYPHEN_RUN_RE.sub("-", slug)
    slug = _EDGE_HYPHEN_RE.sub("", slug)
    return slug or "-"
