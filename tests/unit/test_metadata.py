"""Tests for the `cargo metadata` query."""

import json
import subprocess
from unittest.mock import patch

import pytest

from cargo_edit.errors import MetadataError
from cargo_edit.metadata import fetch_packages

METADATA = {
    "packages": [
        {
            "name": "one",
            "version": "0.1.0",
            "id": "one 0.1.0 (path+file:///ws/one)",
            "manifest_path": "/ws/one/Cargo.toml",
            "dependencies": [],
        },
        {
            "name": "two",
            "version": "0.2.0",
            "id": "two 0.2.0 (path+file:///ws/two)",
            "manifest_path": "/ws/two/Cargo.toml",
            "dependencies": [],
        },
    ],
    "workspace_members": [],
    "version": 1,
}


def completed(stdout: str, returncode: int = 0) -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=["cargo"], returncode=returncode, stdout=stdout, stderr="")


class TestFetchPackages:
    """Test running and decoding `cargo metadata`."""

    def test_lists_packages_in_order(self):
        with patch("cargo_edit.metadata.subprocess.run") as mock_run:
            mock_run.return_value = completed(json.dumps(METADATA))
            packages = fetch_packages("/ws/Cargo.toml")

        assert [package.name for package in packages] == ["one", "two"]
        assert packages[1].version == "0.2.0"
        assert packages[0].manifest_path == "/ws/one/Cargo.toml"

    def test_command_line(self):
        with patch("cargo_edit.metadata.subprocess.run") as mock_run:
            mock_run.return_value = completed(json.dumps(METADATA))
            fetch_packages("/ws/Cargo.toml", cargo="/opt/bin/cargo")

        cmd = mock_run.call_args[0][0]
        assert cmd == [
            "/opt/bin/cargo",
            "metadata",
            "--format-version",
            "1",
            "--no-deps",
            "--manifest-path",
            "/ws/Cargo.toml",
        ]
        assert mock_run.call_args[1]["check"] is True

    def test_without_manifest_path(self):
        with patch("cargo_edit.metadata.subprocess.run") as mock_run:
            mock_run.return_value = completed(json.dumps(METADATA))
            fetch_packages()

        assert "--manifest-path" not in mock_run.call_args[0][0]

    def test_failed_command(self):
        with patch("cargo_edit.metadata.subprocess.run") as mock_run:
            mock_run.side_effect = subprocess.CalledProcessError(
                101, ["cargo"], output="", stderr="error: could not find `Cargo.toml`"
            )
            with pytest.raises(MetadataError) as exc_info:
                fetch_packages("/nowhere/Cargo.toml")

        assert "could not find" in str(exc_info.value)

    def test_missing_cargo(self):
        with patch("cargo_edit.metadata.subprocess.run") as mock_run:
            mock_run.side_effect = FileNotFoundError("cargo")
            with pytest.raises(MetadataError):
                fetch_packages()

    def test_unreadable_output(self):
        with patch("cargo_edit.metadata.subprocess.run") as mock_run:
            mock_run.return_value = completed("warning: not json")
            with pytest.raises(MetadataError):
                fetch_packages()
