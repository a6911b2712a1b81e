"""Tests for textslug.char_map: loading and re-serializing char maps."""
from __future__ import annotations

import weakref
from collections.abc import Iterator
from pathlib import Path

import pytest

from textslug.char_map import (
    CharMap,
    CharMapFormatError,
    default_char_map,
    expand_serialized,
    load_char_map,
    reset_default_char_map,
    serialize_char_map,
)
from textslug.io_utils import dumps_json

SERIALIZED: dict[str, str] = {
    "a": "à,á,α",
    "ae": "æ,ӕ",
    "sch": "щ",
    "zh": "ж",
}


class TestExpandSerialized:
    def test_one_entry_per_source(self) -> None:
        char_map = expand_serialized(SERIALIZED)
        assert len(char_map) == 7
        assert char_map["α"] == "a"
        assert char_map["ӕ"] == "ae"
        assert char_map["ж"] == "zh"

    def test_empty_items_skipped(self) -> None:
        assert dict(expand_serialized({"x": "ж,,щ,"})) == {"ж": "x", "щ": "x"}

    def test_non_string_values_rejected(self) -> None:
        with pytest.raises(CharMapFormatError):
            expand_serialized({"a": ["à"]})


class TestRoundTrip:
    def test_reserialize_is_byte_identical(self) -> None:
        again = serialize_char_map(expand_serialized(SERIALIZED))
        assert again == SERIALIZED
        assert dumps_json(again) == dumps_json(SERIALIZED)

    def test_load_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "map.json"
        path.write_bytes(dumps_json(SERIALIZED))
        char_map = load_char_map(path)
        assert isinstance(char_map, CharMap)
        assert dumps_json(serialize_char_map(char_map)) == path.read_bytes()

    def test_top_level_must_be_object(self, tmp_path: Path) -> None:
        path = tmp_path / "map.json"
        path.write_text('["a", "b"]', encoding="utf-8")
        with pytest.raises(CharMapFormatError, match="JSON object"):
            load_char_map(path)


class TestCharMap:
    def test_immutable(self) -> None:
        char_map = CharMap({"ж": "zh"})
        with pytest.raises(TypeError):
            char_map["ж"] = "j"  # type: ignore[index]

    def test_equality_and_identity_hash(self) -> None:
        one = CharMap({"ж": "zh"})
        two = CharMap({"ж": "zh"})
        assert one == two
        assert one == {"ж": "zh"}
        assert len({one, two}) == 2

    def test_weakly_referenceable(self) -> None:
        char_map = CharMap()
        ref = weakref.ref(char_map)
        assert ref() is char_map
        assert len(char_map) == 0


@pytest.fixture
def fresh_default() -> Iterator[None]:
    reset_default_char_map()
    yield
    reset_default_char_map()


@pytest.mark.usefixtures("fresh_default")
class TestDefaultCharMap:
    def test_loads_from_environment_once(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        path = tmp_path / "char_map.json"
        path.write_bytes(dumps_json({"zh": "ж"}))
        monkeypatch.setenv("TEXTSLUG_CHAR_MAP", str(path))

        char_map = default_char_map()

        assert char_map == {"ж": "zh"}
        assert default_char_map() is char_map

    def test_missing_table(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TEXTSLUG_CHAR_MAP", str(tmp_path / "nope.json"))
        with pytest.raises(FileNotFoundError, match="build_slugify_char_map"):
            default_char_map()
