"""Tests for the CLI implementation."""

import base64
import json
import logging

import pytest
from typer.testing import CliRunner

from zipsplit.cli import app

SIG = b"PK\x07\x08"


class TestCLI:
    """Test the CLI functionality."""

    @pytest.fixture
    def runner(self):
        """CLI test runner."""
        return CliRunner()

    @pytest.fixture
    def archive(self, tmp_path):
        """A three part split archive."""
        (tmp_path / "arc.z01").write_bytes(SIG + b"first")
        (tmp_path / "arc.z02").write_bytes(SIG + b"second")
        terminal = tmp_path / "arc.zip"
        terminal.write_bytes(SIG + b"terminal")
        return terminal

    def test_info_single_source(self, runner, archive):
        result = runner.invoke(app, ["info", str(archive)])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["success"] is True
        assert payload["segment_count"] == 3
        assert payload["size"] == 9 + 10 + 12
        assert [s["start"] for s in payload["segments"]] == [0, 9, 19]
        assert payload["segments"][-1]["name"].endswith("arc.zip")

    def test_info_jsonl(self, runner, archive):
        result = runner.invoke(app, ["info", "--jsonl", str(archive), str(archive)])

        assert result.exit_code == 0
        lines = result.stdout.strip().splitlines()
        assert len(lines) == 2
        for line in lines:
            assert json.loads(line)["success"] is True

    def test_info_output_file(self, runner, archive, tmp_path):
        out = tmp_path / "out.json"
        result = runner.invoke(app, ["info", "-o", str(out), str(archive)])

        assert result.exit_code == 0
        assert json.loads(out.read_text())["segment_count"] == 3

    def test_info_malformed(self, runner, archive, tmp_path):
        (tmp_path / "arc.z02").write_bytes(b"PK\x03\x04broken")
        result = runner.invoke(app, ["info", str(archive)])

        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert payload["success"] is False
        assert "No.2" in payload["error"]

    def test_info_wrong_extension(self, runner, tmp_path):
        path = tmp_path / "arc.rar"
        path.write_bytes(b"Rar!")
        result = runner.invoke(app, ["info", "--jsonl", str(path)])

        # a non-.zip file is opened as a single, unvalidated segment
        assert result.exit_code == 0
        assert json.loads(result.stdout)["segment_count"] == 1

    def test_peek(self, runner, archive):
        result = runner.invoke(app, ["peek", str(archive), "--disk", "1", "--offset", "4", "--length", "6"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["position"] == 13
        assert base64.b64decode(payload["peek_bytes_b64"]) == b"second"
        assert payload["bytes_fetched"] == 6

    def test_peek_out_of_range(self, runner, archive):
        result = runner.invoke(app, ["peek", str(archive), "--disk", "5"])

        assert result.exit_code == 1
        assert json.loads(result.stdout)["success"] is False

    def test_peek_missing(self, runner, tmp_path):
        result = runner.invoke(app, ["peek", str(tmp_path / "nope.zip")])

        assert result.exit_code == 1
        assert json.loads(result.stdout)["success"] is False

    def test_verbose_flag(self, runner, archive):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        try:
            result = runner.invoke(app, ["-v", "info", str(archive)])
            assert result.exit_code == 0
        finally:
            for handler in root.handlers[:]:
                if handler not in handlers:
                    root.removeHandler(handler)
            root.setLevel(level)
