"""
Integration tests: the scripts/preview_file.py command line.
"""

from __future__ import annotations

import pytest

from scripts import preview_file


@pytest.mark.integration
class TestPreviewScript:
    """Tests for preview_file.main()."""

    def test_csv_preview_prints_table(self, tmp_path, capsys):
        path = tmp_path / "orders.csv"
        path.write_text("id,name\n1,Alice\n2,Bob\n", encoding="utf-8")
        assert preview_file.main([str(path), "--format", "CSV"]) == 0
        out = capsys.readouterr().out
        assert "Alice" in out
        assert "Bob" in out

    def test_tsv_implies_tab_delimiter(self, tmp_path, capsys):
        path = tmp_path / "orders.tsv"
        path.write_text("id\tname\n1\tAlice, Jr\n", encoding="utf-8")
        assert preview_file.main([str(path), "--format", "tsv"]) == 0
        assert "Alice, Jr" in capsys.readouterr().out

    def test_jsonl_implies_line_mode(self, tmp_path, capsys):
        path = tmp_path / "events.jsonl"
        path.write_text('{"event": "signup"}\n{"event": "login"}\n', encoding="utf-8")
        assert preview_file.main([str(path), "--format", "JSONL"]) == 0
        out = capsys.readouterr().out
        assert "signup" in out
        assert "login" in out

    def test_config_file(self, tmp_path, capsys):
        path = tmp_path / "data.csv"
        path.write_text("1;2\n", encoding="utf-8")
        cfg = tmp_path / "data.yaml"
        cfg.write_text("delimiter: ';'\nhasHeader: false\n", encoding="utf-8")
        assert preview_file.main([str(path), "--format", "CSV", "--config", str(cfg)]) == 0
        assert "Col2" in capsys.readouterr().out

    def test_unsupported_format_exit_code(self, tmp_path):
        path = tmp_path / "data.ini"
        path.write_text("[section]\n", encoding="utf-8")
        assert preview_file.main([str(path), "--format", "INI"]) == 1

    def test_missing_file_exit_code(self, tmp_path):
        assert preview_file.main([str(tmp_path / "nope.csv"), "--format", "CSV"]) == 1
