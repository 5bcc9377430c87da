"""Tests for write confinement."""
from __future__ import annotations

import os
import stat

import pytest

from coda_tools.confinement import (
    WriteRefused,
    authorize_write,
    is_within,
    normalize,
    write_file,
)


def _snapshot(root):
    return sorted(str(p.relative_to(root)) for p in root.rglob("*"))


class TestNormalize:
    def test_collapses_parent_references(self, tmp_path):
        assert normalize(f"{tmp_path}/a/../b") == tmp_path / "b"

    def test_relative_uses_base(self, tmp_path):
        assert normalize("sub/file.txt", base=tmp_path) == tmp_path / "sub" / "file.txt"

    def test_absolute_ignores_base(self, tmp_path):
        assert normalize("/etc/passwd", base=tmp_path) == normalize("/etc/passwd")


class TestIsWithin:
    def test_root_itself(self, tmp_path):
        assert is_within(tmp_path, tmp_path)

    def test_descendant(self, tmp_path):
        assert is_within(tmp_path / "a" / "b", tmp_path)

    def test_sibling_with_shared_prefix(self, tmp_path):
        assert not is_within(tmp_path.parent / (tmp_path.name + "-other"), tmp_path)


class TestAuthorizeWrite:
    """Tests for confinement checks before writing."""

    def test_accepts_path_inside_root(self, tmp_path):
        target = authorize_write(str(tmp_path / "file.txt"), tmp_path)
        assert target == tmp_path / "file.txt"

    def test_accepts_relative_path(self, tmp_path):
        assert authorize_write("file.txt", tmp_path) == tmp_path / "file.txt"

    def test_refuses_parent_traversal(self, tmp_path):
        root = tmp_path / "project"
        root.mkdir()
        with pytest.raises(WriteRefused, match="outside configured directory"):
            authorize_write(f"{root}/../secrets.txt", root)

    def test_refuses_traversal_even_if_target_exists(self, tmp_path):
        root = tmp_path / "project"
        root.mkdir()
        (tmp_path / "secrets.txt").write_text("keep")
        with pytest.raises(WriteRefused):
            authorize_write(f"{root}/../secrets.txt", root)

    def test_refuses_shared_prefix_sibling(self, tmp_path):
        root = tmp_path / "project"
        sibling = tmp_path / "project-evil"
        root.mkdir()
        sibling.mkdir()
        with pytest.raises(WriteRefused):
            authorize_write(str(sibling / "x.txt"), root)

    def test_refuses_absolute_path_elsewhere(self, tmp_path):
        with pytest.raises(WriteRefused):
            authorize_write("/etc/passwd", tmp_path)

    def test_refuses_missing_parent(self, tmp_path):
        with pytest.raises(WriteRefused, match="Directory does not exist"):
            authorize_write(str(tmp_path / "missing" / "file.txt"), tmp_path)
        assert not (tmp_path / "missing").exists()


class TestWriteFile:
    """Tests for the soft-fail write operation."""

    def test_writes_file(self, tmp_path):
        target = tmp_path / "test.txt"
        result = write_file(str(target), "Hello, World!", tmp_path)
        assert result == f"File written successfully to {target}"
        assert target.read_text(encoding="utf-8") == "Hello, World!"

    def test_overwrites_existing_file(self, tmp_path):
        target = tmp_path / "test.txt"
        target.write_text("old")
        write_file(str(target), "new", tmp_path)
        assert target.read_text() == "new"

    def test_new_file_mode_follows_umask(self, tmp_path):
        umask = os.umask(0o027)
        os.umask(umask)
        target = tmp_path / "new.txt"
        write_file(str(target), "content", tmp_path)
        assert stat.S_IMODE(target.stat().st_mode) == 0o666 & ~umask

    def test_existing_file_keeps_mode(self, tmp_path):
        target = tmp_path / "script.sh"
        target.write_text("old")
        target.chmod(0o750)
        write_file(str(target), "new", tmp_path)
        assert stat.S_IMODE(target.stat().st_mode) == 0o750

    def test_leaves_no_temporary_files(self, tmp_path):
        write_file("a.txt", "content", tmp_path)
        assert _snapshot(tmp_path) == ["a.txt"]

    def test_missing_directory_is_reported(self, tmp_path):
        result = write_file(str(tmp_path / "nonexistent" / "test.txt"), "test", tmp_path)
        assert result.startswith("Error writing file")
        assert _snapshot(tmp_path) == []

    def test_escape_is_reported_without_touching_files(self, tmp_path):
        root = tmp_path / "project"
        root.mkdir()
        (tmp_path / "secrets.txt").write_text("keep")
        before = _snapshot(tmp_path)

        result = write_file(f"{root}/../secrets.txt", "pwned", root)

        assert result == f"Error writing file: Cannot write outside configured directory {root}"
        assert (tmp_path / "secrets.txt").read_text() == "keep"
        assert _snapshot(tmp_path) == before

    @pytest.mark.skipif(
        not hasattr(os, "geteuid") or os.geteuid() == 0,
        reason="root ignores directory permissions",
    )
    def test_permission_error_is_reported(self, tmp_path):
        read_only = tmp_path / "readonly"
        read_only.mkdir(mode=0o555)
        try:
            result = write_file(str(read_only / "test.txt"), "test", tmp_path)
        finally:
            read_only.chmod(0o755)
        assert result.startswith("Error writing file")
        assert not (read_only / "test.txt").exists()

    def test_target_is_directory(self, tmp_path):
        (tmp_path / "dir").mkdir()
        result = write_file(str(tmp_path / "dir"), "x", tmp_path)
        assert result.startswith("Error writing file")
        assert (tmp_path / "dir").is_dir()
        assert _snapshot(tmp_path) == ["dir"]
