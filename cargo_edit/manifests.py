"""Selecting one manifest or every manifest of a workspace."""

import logging
from pathlib import Path

from .errors import VirtualManifest
from .locate import find
from .manifest import LocalManifest
from .metadata import fetch_packages
from .models import Package

logger = logging.getLogger(__name__)


class Manifests:
    """A collection of (LocalManifest, Package) pairs."""

    def __init__(self, entries: list[tuple[LocalManifest, Package]]):
        self.entries = entries

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @classmethod
    def get_all(
        cls,
        manifest_path: Path | str | None = None,
        cwd: Path | str | None = None,
        cargo: str = "cargo",
    ) -> "Manifests":
        """Get all manifests in the workspace enclosing ``manifest_path`` (or ``cwd``)."""
        packages = fetch_packages(find(manifest_path, cwd), cargo=cargo)
        return cls([(LocalManifest.try_new(package.manifest_path), package) for package in packages])

    @classmethod
    def get_local_one(
        cls,
        manifest_path: Path | str | None = None,
        cwd: Path | str | None = None,
        cargo: str = "cargo",
    ) -> "Manifests":
        """Get the manifest for ``manifest_path`` (or ``cwd``) with its package metadata."""
        resolved = find(manifest_path, cwd)
        manifest = LocalManifest.try_new(resolved)

        packages = fetch_packages(resolved, cargo=cargo)
        resolved = resolved.resolve()
        for package in packages:
            if Path(package.manifest_path).resolve() == resolved:
                return cls([(manifest, package)])

        # Metadata came back, but no package owns this manifest: it is a virtual
        # workspace root.
        logger.debug("No package in the workspace has manifest %s", resolved)
        raise VirtualManifest(str(resolved))
