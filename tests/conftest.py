"""Pytest configuration and fixtures."""

import pytest

from cargo_edit.models import Package


@pytest.fixture
def sample_manifest():
    """A package manifest with an unsorted dependency table."""
    return """# Demo manifest
[package]
name = "demo"
version = "0.1.0"

[dependencies]
zeta = "1"
alpha = "1"
mu = "1"

[dev-dependencies]
# test helpers
pretty_assertions = "1"
"""


@pytest.fixture
def manifest_file(tmp_path, sample_manifest):
    """Write the sample manifest to a temporary Cargo.toml."""
    manifest = tmp_path / "Cargo.toml"
    manifest.write_text(sample_manifest)
    return manifest


@pytest.fixture
def workspace(tmp_path):
    """A virtual workspace root with member packages `one` and `two`."""
    root = tmp_path / "workspace"
    root.mkdir()
    (root / "Cargo.toml").write_text('[workspace]\nmembers = ["one", "two"]\n')

    members = []
    for name in ("one", "two"):
        member = root / name
        member.mkdir()
        (member / "Cargo.toml").write_text(
            f'[package]\nname = "{name}"\nversion = "0.1.0"\n\n'
            '[dependencies]\nserde = "1.0"\nanyhow = "1.0"\n'
        )
        members.append(member / "Cargo.toml")
    return root, members


@pytest.fixture
def workspace_packages(workspace):
    """Packages as `cargo metadata` would report them for the workspace fixture."""
    _, members = workspace
    return [
        Package(
            name=path.parent.name,
            version="0.1.0",
            id=f"{path.parent.name} 0.1.0 (path+file://{path.parent})",
            manifest_path=str(path),
        )
        for path in members
    ]
