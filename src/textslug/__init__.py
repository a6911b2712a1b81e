"""Unicode slug generation with compiled transliteration tables."""

from textslug.char_map import (
    CharMap,
    CharMapFormatError,
    default_char_map,
    expand_serialized,
    load_char_map,
    serialize_char_map,
)
from textslug.char_map_compiler import (
    CharMapBuildError,
    CompileResult,
    compile_char_map,
    write_serialized_table,
)
from textslug.rules import RuleRecord, expand_record, parse_rules
from textslug.segmenter import Segment, WordSegmenter
from textslug.slugify import (
    ASCII_DIACRITICS,
    DIACRITICS,
    NON_ASCII,
    NON_WORD,
    SlugifyOptions,
    slugify,
)

__all__ = [
    "ASCII_DIACRITICS",
    "CharMap",
    "CharMapBuildError",
    "CharMapFormatError",
    "CompileResult",
    "DIACRITICS",
    "NON_ASCII",
    "NON_WORD",
    "RuleRecord",
    "Segment",
    "SlugifyOptions",
    "WordSegmenter",
    "compile_char_map",
    "default_char_map",
    "expand_record",
    "expand_serialized",
    "load_char_map",
    "parse_rules",
    "serialize_char_map",
    "slugify",
    "write_serialized_table",
]
