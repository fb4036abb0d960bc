"""Manifest discovery by walking up the directory tree."""

import logging
import stat
from pathlib import Path

from .errors import ManifestIOError, MissingManifest

MANIFEST_FILENAME = "Cargo.toml"

logger = logging.getLogger(__name__)


def find(hint: Path | str | None = None, cwd: Path | str | None = None) -> Path:
    """Find the manifest a command should operate on.

    A hint naming a file is returned as is. A hint naming a directory, or the
    working directory when there is no hint, is searched upwards.

    Args:
        hint: Path to a manifest file, or a directory to start searching from
        cwd: Directory to start from when no hint is given

    Returns:
        Path of the manifest file
    """
    if hint is None:
        if cwd is None:
            raise MissingManifest()
        return search(Path(cwd))

    path = Path(hint)
    try:
        mode = path.stat().st_mode
    except OSError as e:
        raise ManifestIOError(f"Failed to get cargo file metadata for {path}: {e}") from e
    if stat.S_ISREG(mode):
        return path
    return search(path)


def search(directory: Path) -> Path:
    """Search for Cargo.toml in this directory and up the tree until one is found."""
    directory = Path(directory).absolute()
    for candidate_dir in (directory, *directory.parents):
        manifest = candidate_dir / MANIFEST_FILENAME
        logger.debug("Looking for %s", manifest)
        if manifest.exists():
            return manifest
    raise MissingManifest(str(directory))
