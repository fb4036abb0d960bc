"""Test that project structure is correct and modules can be imported."""

import cargo_edit.document
import cargo_edit.errors
import cargo_edit.locate
import cargo_edit.manifest
import cargo_edit.manifests
import cargo_edit.metadata
import cargo_edit.models
from cargo_edit.models import Dependency, Package


def test_core_modules_importable():
    """Ensure core modules can be imported."""
    assert hasattr(cargo_edit.manifest, "Manifest")
    assert hasattr(cargo_edit.manifest, "LocalManifest")
    assert hasattr(cargo_edit.manifests, "Manifests")
    assert hasattr(cargo_edit.locate, "find")
    assert hasattr(cargo_edit.metadata, "fetch_packages")
    assert issubclass(cargo_edit.errors.MissingManifest, cargo_edit.errors.ManifestError)


def test_model_creation():
    """Test that basic models can be instantiated."""
    dep = Dependency(name="serde", version="1.0")
    assert dep.name == "serde"
    assert dep.name_in_manifest == "serde"

    package = Package(name="demo", version="0.1.0", id="demo 0.1.0", manifest_path="/tmp/demo/Cargo.toml")
    assert package.manifest_path.endswith("Cargo.toml")
