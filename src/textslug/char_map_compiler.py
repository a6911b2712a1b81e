"""Compile a slugify char map from a directory of ICU transliteration rules.

The compiled table maps non-ASCII characters and sequences to ASCII roots.
It is built by composing three buckets of rule files into one forward map:

1. ``*_InterIndic.txt`` -- Indic scripts to the InterIndic intermediate script
2. ``*_Latn.txt`` / ``*_Latin.txt`` / ``*_Latn_BGN.txt`` -- scripts to Latin
3. ``Latin_ASCII.txt`` -- Latin to ASCII (required)

Conceptually text flows 1 -> 2 -> 3 (e.g. Devanagari -> InterIndic ->
Latin -> ASCII). Each inserted mapping is rewritten on insert when its
target is already a key of the map, so the buckets are inserted from the
end of the chain backwards and every later stage is already present when
an earlier one is read.

Public API:

* ``compile_char_map(icu_dir)`` -- run the whole job, return ``CompileResult``.
* ``ForwardMapBuilder`` / ``build_forward_map`` -- chained composition.
* ``filter_forward_map(forward)`` -- canonical ASCII-only table.
* ``invert_table(table)`` -- reverse-grouped serialized form.
* ``write_serialized_table(table, path)`` -- write the JSON artifact.
"""
from __future__ import annotations

import logging
import re
import unicodedata
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

import regex

from textslug.io_utils import save_json
from textslug.rules import RuleRecord, expand_record, parse_rules

log = logging.getLogger(__name__)

ASCII_FILE_NAME = "Latin_ASCII.txt"

BUCKET_INTERINDIC = "interindic"
BUCKET_LATIN = "latin"
BUCKET_ASCII = "ascii"

# Conceptual chain order.
BUCKET_ORDER: tuple[str, ...] = (BUCKET_INTERINDIC, BUCKET_LATIN, BUCKET_ASCII)

BUCKET_PATTERNS: dict[str, re.Pattern[str]] = {
    BUCKET_INTERINDIC: re.compile(r"_InterIndic\.txt$"),
    BUCKET_LATIN: re.compile(r"(?:_Latn|_Latin|_Latn_BGN)\.txt$"),
    BUCKET_ASCII: re.compile(rf"^{re.escape(ASCII_FILE_NAME)}$"),
}

# Ancient Greek rules; the Modern Greek BGN rules are preferred.
DEFAULT_EXCLUDED_FILES: tuple[str, ...] = (
    "Grek_Latn.txt",
    "Grek_Latin.txt",
    "Grek_Latn_BGN.txt",
)

# Characters with structural meaning in the rule grammar.
_STRUCTURAL_SOURCE_RE = re.compile(r"[$()\[\]\-+*?{},]")
_NON_ASCII_ALNUM_RE = re.compile(r"[^a-zA-Z0-9\-']")
_NON_LETTER_NUMBER_RE = regex.compile(r"[^\p{L}\p{N}]+")


class CharMapBuildError(RuntimeError):
    """Raised when the rule corpus cannot be compiled (fatal, no output)."""


def normalize_rule_text(text: str) -> str:
    """Trim, decompose (NFD) and lowercase a rule source or target."""
    return unicodedata.normalize("NFD", text.strip()).lower()


def collation_key(text: str) -> tuple[str, str]:
    """Alphabetical sort key: case-insensitive, ties broken by code point."""
    return (text.casefold(), text)


# ---------------------------------------------------------------------------
# File selection
# ---------------------------------------------------------------------------


def classify_rule_file(
    name: str,
    *,
    exclude: Iterable[str] = DEFAULT_EXCLUDED_FILES,
) -> str | None:
    """Return the bucket a rule file belongs to, or None.

    A file matching no bucket, more than one bucket, or listed in
    ``exclude`` is not processed.
    """
    if name in set(exclude):
        return None
    matched = [b for b in BUCKET_ORDER if BUCKET_PATTERNS[b].search(name)]
    if len(matched) != 1:
        return None
    return matched[0]


def select_rule_files(
    icu_dir: Path,
    *,
    exclude: Iterable[str] = DEFAULT_EXCLUDED_FILES,
) -> dict[str, list[Path]]:
    """Partition the rule files of ``icu_dir`` into ordered buckets.

    Raises CharMapBuildError if the directory or the ASCII-folding file
    is missing.
    """
    if not icu_dir.is_dir():
        raise CharMapBuildError(f"rule directory not found: {icu_dir}")

    excluded = set(exclude)
    buckets: dict[str, list[Path]] = {b: [] for b in BUCKET_ORDER}
    entries = sorted(
        (p for p in icu_dir.iterdir() if p.is_file()),
        key=lambda p: collation_key(p.name),
    )
    for path in entries:
        bucket = classify_rule_file(path.name, exclude=excluded)
        if bucket is None:
            if path.name in excluded:
                log.info("excluded %s", path.name)
            continue
        buckets[bucket].append(path)

    if not buckets[BUCKET_ASCII]:
        raise CharMapBuildError(
            f"{ASCII_FILE_NAME} not found in {icu_dir} "
            "(expected an ICU icu4c/source/data/translit checkout)",
        )
    return buckets


# ---------------------------------------------------------------------------
# Forward map composition
# ---------------------------------------------------------------------------


@dataclass
class ForwardMapBuilder:
    """Accumulates a forward map with rewrite-if-already-mapped chaining."""

    forward: dict[str, str] = field(default_factory=dict)
    records_seen: int = 0

    def add_record(self, record: RuleRecord) -> None:
        """Insert one parsed record, expanding bracket sources first."""
        for elementary in expand_record(record):
            self.records_seen += 1
            source = normalize_rule_text(elementary.sources[0])
            target = normalize_rule_text(elementary.target)
            if not source:
                continue
            self.forward[source] = target
            # Follow one link when a later stage already maps the target.
            if target in self.forward:
                self.forward[source] = self.forward[target]

    def add_rules_text(self, text: str) -> None:
        for record in parse_rules(text):
            self.add_record(record)

    def add_file(self, path: Path) -> None:
        log.info("reading %s", path.name)
        self.add_rules_text(path.read_text(encoding="utf-8"))


def build_forward_map(files_by_bucket: Mapping[str, list[Path]]) -> ForwardMapBuilder:
    """Compose all bucket files into one forward map.

    Buckets are inserted in reverse chain order; files inside a bucket are
    inserted in the given order, later files overwriting earlier ones.
    """
    builder = ForwardMapBuilder()
    for bucket in reversed(BUCKET_ORDER):
        for path in files_by_bucket.get(bucket, []):
            builder.add_file(path)
    return builder


# ---------------------------------------------------------------------------
# Filtering and inversion
# ---------------------------------------------------------------------------


def canonical_target(target: str) -> str:
    """Compatibility-decompose a target and keep only letters and numbers."""
    return _NON_LETTER_NUMBER_RE.sub("", unicodedata.normalize("NFKD", target))


def filter_forward_map(forward: Mapping[str, str]) -> dict[str, str]:
    """Reduce a forward map to the canonical ASCII-only table.

    Drops no-op entries (both sides already ASCII), sources carrying rule
    syntax, and entries whose target has no ASCII letter/number form.
    """
    table: dict[str, str] = {}
    for source, target in forward.items():
        if not _NON_ASCII_ALNUM_RE.search(source) and not _NON_ASCII_ALNUM_RE.search(target):
            continue
        if not source or _STRUCTURAL_SOURCE_RE.search(source):
            continue
        root = canonical_target(target)
        if not root or _NON_ASCII_ALNUM_RE.search(root):
            continue
        table[source] = root
    return table


def invert_table(table: Mapping[str, str]) -> dict[str, str]:
    """Group sources by root into the serialized, sorted form."""
    grouped: dict[str, set[str]] = {}
    for source, root in table.items():
        grouped.setdefault(root, set()).add(source)
    return {
        root: ",".join(sorted(grouped[root], key=collation_key))
        for root in sorted(grouped, key=collation_key)
    }


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CompileResult:
    """Serialized table plus statistics for one compilation run."""

    serialized: dict[str, str]
    files_by_bucket: dict[str, list[str]]
    records_seen: int
    forward_entries: int
    table_entries: int

    def summary(self) -> dict[str, object]:
        return {
            "files": self.files_by_bucket,
            "records_seen": self.records_seen,
            "forward_entries": self.forward_entries,
            "table_entries": self.table_entries,
            "roots": len(self.serialized),
        }


def compile_char_map(
    icu_dir: Path,
    *,
    exclude: Iterable[str] = DEFAULT_EXCLUDED_FILES,
) -> CompileResult:
    """Compile the serialized char map from an ICU transliteration directory."""
    files = select_rule_files(icu_dir, exclude=exclude)
    builder = build_forward_map(files)
    table = filter_forward_map(builder.forward)
    serialized = invert_table(table)
    log.info(
        "compiled %d records -> %d forward entries -> %d table entries (%d roots)",
        builder.records_seen, len(builder.forward), len(table), len(serialized),
    )
    return CompileResult(
        serialized=serialized,
        files_by_bucket={b: [p.name for p in files[b]] for b in BUCKET_ORDER},
        records_seen=builder.records_seen,
        forward_entries=len(builder.forward),
        table_entries=len(table),
    )


def write_serialized_table(serialized: Mapping[str, str], path: Path) -> None:
    """Write a serialized table as indented UTF-8 JSON with a final newline."""
    save_json(dict(serialized), path)
