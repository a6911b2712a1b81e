"""Word segmentation for slug generation.

Splits text into spans tagged word-like or not, covering the input
exactly. Default rules, not tailored per locale:

* letters, marks, numbers and connector punctuation form words; one
  mid-word character (apostrophe, full stop, middle dot) between two
  letters keeps them together, so ``what's`` and ``example.com`` are
  single words while ``3.14`` is not;
* each Han ideograph and each Hiragana character is a word of its own,
  while a Katakana run is one word;
* every other maximal run (spaces, punctuation, symbols, controls) is a
  non-word span.

Scripts normally segmented with a dictionary (Thai, Lao, Khmer, Burmese)
come out as one word per run.
"""
from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

import regex

DEFAULT_LOCALE = "en-US"

_SEGMENT_RE = regex.compile(
    r"""
    (?P<ideo>(?=[\p{L}\p{N}])[\p{Han}\p{Hiragana}]\p{M}*)
    | (?P<kana>(?:(?=[\p{L}\p{M}])[\p{Katakana}ー])+\p{M}*)
    | (?P<word>
        (?:(?![\p{Han}\p{Hiragana}\p{Katakana}])[\p{L}\p{M}\p{N}\p{Pc}])+
        (?:
          (?<=\p{L}\p{M}*)
          ['\u2018\u2019.\u00b7\u0387\u055f\u05f4\u2024\u2027\ufe52\uff07\uff0e]
          (?=(?![\p{Han}\p{Hiragana}\p{Katakana}])\p{L})
          (?:(?![\p{Han}\p{Hiragana}\p{Katakana}])[\p{L}\p{M}\p{N}\p{Pc}])+
        )*
      )
    | (?P<other>(?:(?![\p{L}\p{M}\p{N}\p{Pc}])\X)+)
    | (?P<stray>\X)
    """,
    regex.VERBOSE,
)


_WORD_GROUPS = frozenset({"ideo", "kana", "word", "stray"})


@dataclass(frozen=True, slots=True)
class Segment:
    """One span of segmented text."""

    segment: str
    index: int
    is_word_like: bool


class WordSegmenter:
    """Locale-tagged word segmenter."""

    def __init__(self, locale: str = DEFAULT_LOCALE) -> None:
        self.locale = locale

    def segment(self, text: str) -> Iterator[Segment]:
        for m in _SEGMENT_RE.finditer(text):
            yield Segment(
                segment=m.group(),
                index=m.start(),
                is_word_like=m.lastgroup in _WORD_GROUPS,
            )

    def __repr__(self) -> str:
        return f"WordSegmenter(locale={self.locale!r})"
