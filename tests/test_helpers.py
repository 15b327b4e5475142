# -*- coding: utf-8 -*-
"""Tests for helper functions."""

import subprocess

import pytest

from debsweep.errors import ValidationError
from debsweep.helpers import (
    capture,
    confirm,
    format_size,
    human_bytes,
    is_root,
    parse_journal_usage_bytes,
    parse_size_to_bytes,
    parse_threshold,
    run,
    validate_journal_age,
    which,
)


class TestHumanBytes:
    """Test human_bytes function."""

    def test_bytes(self):
        assert human_bytes(0) == "0B"
        assert human_bytes(500) == "500B"
        assert human_bytes(1023) == "1023B"

    def test_kibibytes(self):
        assert human_bytes(1024) == "1.0KiB"
        assert human_bytes(1536) == "1.5KiB"

    def test_larger_units(self):
        assert human_bytes(1024 ** 2) == "1.0MiB"
        assert human_bytes(1024 ** 3) == "1.0GiB"
        assert human_bytes(1024 ** 4) == "1.0TiB"


class TestFormatSize:
    def test_none(self):
        assert format_size(None) == "size unavailable"

    def test_unknown_suffix(self):
        assert format_size(1024, unknown=True) == "1.0KiB+"


class TestParseSize:
    @pytest.mark.parametrize("text,expected", [
        ("100", 100),
        ("100M", 100 * 1024 ** 2),
        ("1G", 1024 ** 3),
        ("1.5K", 1536),
        ("512MiB", 512 * 1024 ** 2),
        ("1.2GB", 1_200_000_000),
        ("10kB", 10_000),
        (" 2M ", 2 * 1024 ** 2),
    ])
    def test_valid(self, text, expected):
        assert parse_size_to_bytes(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", "10X", "M", "-5M"])
    def test_invalid(self, text):
        assert parse_size_to_bytes(text) is None

    def test_threshold_rejects_garbage(self):
        with pytest.raises(ValidationError):
            parse_threshold("lots")

    def test_threshold(self):
        assert parse_threshold("100M") == 100 * 1024 ** 2


class TestJournal:
    @pytest.mark.parametrize("age", ["7d", "2w", "1month", "12h", "30"])
    def test_valid_age(self, age):
        assert validate_journal_age(age) == age

    @pytest.mark.parametrize("age", ["", "d7", "7 days", "-1d"])
    def test_invalid_age(self, age):
        with pytest.raises(ValidationError):
            validate_journal_age(age)

    def test_usage_line(self):
        out = "Archived and active journals take up 1.5G in the file system."
        assert parse_journal_usage_bytes(out) == int(1.5 * 1024 ** 3)

    def test_usage_unparseable(self):
        assert parse_journal_usage_bytes("No journal files were found.") is None


class TestConfirm:
    def test_assume_yes(self, mocker):
        mock_input = mocker.patch("builtins.input")
        assert confirm("Go?", assume_yes=True) is True
        mock_input.assert_not_called()

    @pytest.mark.parametrize("answer,expected", [("y", True), ("YES", True), ("", False), ("n", False)])
    def test_answers(self, mocker, answer, expected):
        mocker.patch("builtins.input", return_value=answer)
        assert confirm("Go?") is expected

    def test_eof_is_no(self, mocker):
        mocker.patch("builtins.input", side_effect=EOFError)
        assert confirm("Go?") is False


class TestProcesses:
    def test_which(self, mocker):
        mocker.patch("shutil.which", return_value="/usr/bin/docker")
        assert which("docker") == "/usr/bin/docker"

    def test_is_root(self, mock_root_user):
        assert is_root() is True

    def test_is_not_root(self, mock_non_root_user):
        assert is_root() is False

    def test_run_dry_run_does_not_execute(self, mock_subprocess, mock_console):
        result = run(["apt-get", "clean"], dry_run=True)
        mock_subprocess["run"].assert_not_called()
        assert result.returncode == 0

    def test_run_executes(self, mock_subprocess):
        run(["apt-get", "clean"], dry_run=False)
        mock_subprocess["run"].assert_called_once()
        assert mock_subprocess["run"].call_args[0][0] == ["apt-get", "clean"]

    def test_capture(self, mock_subprocess):
        mock_subprocess["check_output"].return_value = "  out \n"
        assert capture(["echo"]) == "out"

    def test_capture_failure_propagates(self, mocker):
        mocker.patch("subprocess.check_output", side_effect=subprocess.CalledProcessError(1, "x"))
        with pytest.raises(subprocess.CalledProcessError):
            capture(["false"])
