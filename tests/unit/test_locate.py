"""Tests for manifest discovery."""

import pytest

from cargo_edit.errors import ManifestIOError, MissingManifest
from cargo_edit.locate import MANIFEST_FILENAME, find, search


class TestFind:
    """Test locating Cargo.toml from a hint or working directory."""

    def test_file_hint_is_returned_as_is(self, manifest_file):
        assert find(manifest_file) == manifest_file

    def test_file_hint_with_other_name(self, tmp_path):
        """Should accept any existing file, not only Cargo.toml."""
        other = tmp_path / "Other.toml"
        other.write_text("[package]\n")
        assert find(str(other)) == other

    def test_directory_hint_is_searched(self, manifest_file):
        assert find(manifest_file.parent) == manifest_file.absolute()

    def test_walks_up_to_parent(self, manifest_file):
        nested = manifest_file.parent / "src" / "bin"
        nested.mkdir(parents=True)
        assert find(nested) == manifest_file.absolute()

    def test_nearest_manifest_wins(self, workspace):
        root, members = workspace
        src = members[0].parent / "src"
        src.mkdir()
        assert find(None, cwd=src) == members[0].absolute()

    def test_defaults_to_working_directory(self, manifest_file):
        assert find(cwd=manifest_file.parent) == manifest_file.absolute()

    def test_missing_hint_path_fails(self, tmp_path):
        with pytest.raises(ManifestIOError):
            find(tmp_path / "does-not-exist")

    def test_needs_hint_or_cwd(self):
        with pytest.raises(MissingManifest):
            find()

    def test_repeated_calls_are_deterministic(self, manifest_file):
        assert find(manifest_file.parent) == find(manifest_file.parent)


class TestSearch:
    """Test the upward directory walk."""

    def test_missing_manifest(self, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        with pytest.raises(MissingManifest):
            search(empty)

    def test_manifest_filename(self):
        assert MANIFEST_FILENAME == "Cargo.toml"
