"""Tests for Pony file discovery."""

import logging
from pathlib import Path

import pytest

from ponyfmt.core.files import collect_pony_files, is_pony_file


class TestIsPonyFile:
    def test_pony_file(self) -> None:
        assert is_pony_file(Path("main.pony")) is True

    def test_other_file(self) -> None:
        assert is_pony_file(Path("main.py")) is False

    def test_no_extension(self) -> None:
        assert is_pony_file(Path("Makefile")) is False


class TestCollectPonyFiles:
    def test_directory_is_searched_recursively(self, tmp_path: Path) -> None:
        (tmp_path / "pkg" / "sub").mkdir(parents=True)
        (tmp_path / "b.pony").write_text("")
        (tmp_path / "pkg" / "a.pony").write_text("")
        (tmp_path / "pkg" / "sub" / "c.pony").write_text("")
        (tmp_path / "notes.txt").write_text("")

        assert collect_pony_files([tmp_path]) == [
            tmp_path / "b.pony",
            tmp_path / "pkg" / "a.pony",
            tmp_path / "pkg" / "sub" / "c.pony",
        ]

    def test_dependency_directories_are_skipped(self, tmp_path: Path) -> None:
        (tmp_path / "_corral" / "dep").mkdir(parents=True)
        (tmp_path / "_corral" / "dep" / "x.pony").write_text("")
        (tmp_path / "main.pony").write_text("")

        assert collect_pony_files([tmp_path]) == [tmp_path / "main.pony"]

    def test_duplicates_are_collapsed(self, tmp_path: Path) -> None:
        target = tmp_path / "main.pony"
        target.write_text("")

        assert collect_pony_files([target, tmp_path, str(target)]) == [target]

    def test_explicit_non_pony_file_is_ignored(self, tmp_path: Path) -> None:
        target = tmp_path / "README.md"
        target.write_text("")

        assert collect_pony_files([target]) == []

    def test_missing_path_is_reported(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="ponyfmt.core.files"):
            assert collect_pony_files([tmp_path / "nope"]) == []
        assert "no such file or directory" in caplog.text

    def test_defaults_to_current_directory(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "main.pony").write_text("")
        monkeypatch.chdir(tmp_path)

        assert collect_pony_files([]) == [Path("main.pony")]
