"""Tests for scripts/build_slugify_char_map.py."""
from __future__ import annotations

from pathlib import Path

import orjson
import pytest

from scripts.build_slugify_char_map import main

RULES: dict[str, str] = {
    "Latin_ASCII.txt": "æ → ae ;\nß → ss ;\n",
    "Cyrl_Latn.txt": "ж → ž ;\nӕ → æ ;\n",
}


def _write_rules(root: Path) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    for name, text in RULES.items():
        (root / name).write_text(text, encoding="utf-8")
    return root


class TestMain:
    def test_writes_table_and_summary(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        icu_dir = _write_rules(tmp_path / "translit")
        output = tmp_path / "out" / "char_map.json"

        assert main(["--icu-dir", str(icu_dir), "--output", str(output)]) == 0

        table = orjson.loads(output.read_bytes())
        assert table == {"ae": "æ,ӕ", "ss": "ß", "z": "ж"}
        summary = orjson.loads(capsys.readouterr().out)
        assert summary["output"] == str(output)
        assert summary["roots"] == 3
        assert summary["files"]["ascii"] == ["Latin_ASCII.txt"]
        assert summary["files"]["latin"] == ["Cyrl_Latn.txt"]

    def test_dry_run_writes_nothing(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        icu_dir = _write_rules(tmp_path / "translit")
        output = tmp_path / "char_map.json"

        assert main(["--icu-dir", str(icu_dir), "--output", str(output), "--dry-run"]) == 0

        assert not output.exists()
        summary = orjson.loads(capsys.readouterr().out)
        assert summary["output"] is None
        assert summary["table_entries"] == 4

    def test_icu_dir_from_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        icu_dir = _write_rules(tmp_path / "translit")
        output = tmp_path / "char_map.json"
        monkeypatch.setenv("ICU_DIR", str(icu_dir))

        assert main(["--output", str(output)]) == 0
        assert output.exists()

    def test_exclude_overrides_defaults(self, tmp_path: Path) -> None:
        icu_dir = _write_rules(tmp_path / "translit")
        output = tmp_path / "char_map.json"

        rc = main([
            "--icu-dir", str(icu_dir), "--output", str(output),
            "--exclude", "Cyrl_Latn.txt",
        ])

        assert rc == 0
        assert orjson.loads(output.read_bytes()) == {"ae": "æ", "ss": "ß"}

    def test_missing_ascii_rules_fails(self, tmp_path: Path) -> None:
        icu_dir = tmp_path / "translit"
        icu_dir.mkdir()
        (icu_dir / "Cyrl_Latn.txt").write_text("ж → ž ;\n", encoding="utf-8")
        output = tmp_path / "char_map.json"

        assert main(["--icu-dir", str(icu_dir), "--output", str(output)]) == 1
        assert not output.exists()

    def test_missing_directory_fails(self, tmp_path: Path) -> None:
        assert main(["--icu-dir", str(tmp_path / "nope"), "--dry-run"]) == 1

    def test_no_directory_configured(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ICU_DIR", raising=False)
        with pytest.raises(SystemExit) as exc:
            main(["--dry-run"])
        assert exc.value.code == 2
