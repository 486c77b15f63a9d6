"""Tests for line-range file reading and editing."""

from pathlib import Path

import pytest

from avd.shared.files import modify_lines, read_lines


@pytest.fixture
def text_file(tmp_path: Path) -> Path:
    path = tmp_path / "sample.txt"
    path.write_text("a\nb\nc\nd\ne")
    return path


class TestReadLines:
    def test_inclusive_range(self, text_file: Path) -> None:
        assert read_lines(text_file, 2, 4) == "b\nc\nd"

    def test_single_line(self, text_file: Path) -> None:
        assert read_lines(text_file, 1, 1) == "a"

    def test_clamped_to_file(self, text_file: Path) -> None:
        assert read_lines(text_file, 0, 99) == "a\nb\nc\nd\ne"
        assert read_lines(text_file, 10, 12) == ""

    def test_directory_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            read_lines(tmp_path, 1, 2)


class TestModifyLines:
    def test_replace_range(self, text_file: Path) -> None:
        message = modify_lines(text_file, 2, 3, "X")
        assert text_file.read_text() == "a\nX\nd\ne"
        assert message == f"Successfully modified {text_file} from line 2 to 3"

    def test_replacement_can_grow(self, text_file: Path) -> None:
        modify_lines(text_file, 5, 5, "e\nf\ng")
        assert read_lines(text_file, 5, 7) == "e\nf\ng"

    def test_past_end_appends(self, text_file: Path) -> None:
        modify_lines(text_file, 9, 9, "z")
        assert text_file.read_text() == "a\nb\nc\nd\ne\nz"

    def test_reversed_range(self, text_file: Path) -> None:
        with pytest.raises(ValueError, match="before startLine"):
            modify_lines(text_file, 3, 2, "X")
        assert text_file.read_text() == "a\nb\nc\nd\ne"
