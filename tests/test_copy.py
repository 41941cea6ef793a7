"""Tests for copy_dir_with_pattern()."""

import tempfile
from pathlib import Path

import pytest

from toolbelt import FileError, copy_dir_with_pattern


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdirname:
        yield Path(tmpdirname)


@pytest.fixture
def my_files(temp_dir):
    """Create the source tree used by the copy tests."""
    source = temp_dir / "my_files"
    (source / "more_files").mkdir(parents=True)
    (source / "file1.txt").write_text("first file")
    (source / "file2.csv").write_text("a,b,c\n1,2,3\n")
    (source / "image.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\x01")
    (source / "more_files" / "file3.md").write_text("# third")
    (source / "more_files" / "skip.log").write_text("not copied")
    return source


class TestCopyDirWithPattern:
    """Tests for the glob driven directory copier."""

    def test_copy_with_brace_pattern(self, my_files, temp_dir):
        """Test copying with a brace pattern into a missing destination."""
        destination = temp_dir / "target" / "dest_files"

        copy_dir_with_pattern(my_files, destination, "*.{txt,csv,md}")

        assert (destination / "file1.txt").exists()
        assert (destination / "file2.csv").exists()
        assert (destination / "more_files" / "file3.md").exists()

    def test_non_matching_files_not_copied(self, my_files, temp_dir):
        destination = temp_dir / "dest"

        copy_dir_with_pattern(my_files, destination, "*.{txt,csv,md}")

        assert not (destination / "image.png").exists()
        assert not (destination / "more_files" / "skip.log").exists()

    def test_copies_are_byte_identical(self, my_files, temp_dir):
        destination = temp_dir / "dest"

        copied = copy_dir_with_pattern(my_files, destination, "**/*")

        assert len(copied) == 5
        for target in copied:
            source = my_files / target.relative_to(destination)
            assert target.read_bytes() == source.read_bytes()

    def test_returns_destination_paths(self, my_files, temp_dir):
        destination = temp_dir / "dest"

        copied = copy_dir_with_pattern(my_files, destination, "*.md")

        assert copied == [destination / "more_files" / "file3.md"]

    def test_anchored_pattern(self, my_files, temp_dir):
        """Test that a pattern with a directory only matches below it."""
        destination = temp_dir / "dest"
        (my_files / "file4.md").write_text("top level")

        copy_dir_with_pattern(my_files, destination, "more_files/*.md")

        assert (destination / "more_files" / "file3.md").exists()
        assert not (destination / "file4.md").exists()

    def test_literal_pattern(self, my_files, temp_dir):
        destination = temp_dir / "dest"

        copy_dir_with_pattern(my_files, destination, "file1.txt")

        assert (destination / "file1.txt").read_text() == "first file"

    def test_no_match_copies_nothing(self, my_files, temp_dir):
        destination = temp_dir / "dest"

        copied = copy_dir_with_pattern(my_files, destination, "*.xyz")

        assert copied == []
        assert not destination.exists()

    def test_preserves_permissions(self, my_files, temp_dir):
        script = my_files / "run.sh"
        script.write_text("#!/bin/sh\n")
        script.chmod(0o755)
        destination = temp_dir / "dest"

        copy_dir_with_pattern(my_files, destination, "*.sh")

        mode = (destination / "run.sh").stat().st_mode & 0o777
        assert mode == 0o755

    def test_overwrites_existing_files(self, my_files, temp_dir):
        destination = temp_dir / "dest"
        destination.mkdir()
        (destination / "file1.txt").write_text("stale")

        copy_dir_with_pattern(my_files, destination, "file1.txt")

        assert (destination / "file1.txt").read_text() == "first file"

    def test_destination_inside_source(self, my_files):
        """Test that files copied into the source are not picked up again."""
        destination = my_files / "out"

        copied = copy_dir_with_pattern(my_files, destination, "**/*")

        assert len(copied) == 5
        assert not (destination / "out").exists()

    def test_missing_source_raises(self, temp_dir):
        with pytest.raises(FileError, match="does not exist"):
            copy_dir_with_pattern(temp_dir / "missing", temp_dir / "dest", "*")

    def test_uncreatable_destination_raises(self, my_files, temp_dir):
        """Test that a file in place of the destination is a FileError."""
        blocker = temp_dir / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(FileError, match="Cannot create directory"):
            copy_dir_with_pattern(my_files, blocker, "*.txt")

    def test_dry_run_copies_nothing(self, my_files, temp_dir):
        destination = temp_dir / "dest"

        copied = copy_dir_with_pattern(
            my_files, destination, "*.txt", dry_run=True
        )

        assert copied == [destination / "file1.txt"]
        assert not destination.exists()

    def test_accepts_string_paths(self, my_files, temp_dir):
        destination = temp_dir / "dest"

        copy_dir_with_pattern(str(my_files), str(destination), "*.csv")

        assert (destination / "file2.csv").exists()
