"""Workspace package listing through `cargo metadata`."""

import json
import logging
import subprocess
from pathlib import Path

from .errors import MetadataError
from .models import Package

logger = logging.getLogger(__name__)


def fetch_packages(manifest_path: Path | str | None = None, cargo: str = "cargo") -> list[Package]:
    """List the packages of the workspace enclosing a manifest.

    Dependencies are not resolved (``--no-deps``), only workspace members are
    reported.

    Args:
        manifest_path: Manifest to query; cargo searches from its cwd when None
        cargo: Cargo executable to run

    Returns:
        Packages in the order cargo reports them
    """
    cmd = [cargo, "metadata", "--format-version", "1", "--no-deps"]
    if manifest_path is not None:
        cmd += ["--manifest-path", str(manifest_path)]
    logger.debug("Running %s", " ".join(cmd))

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=True)
    except FileNotFoundError as e:
        raise MetadataError(f"Failed to get workspace metadata: {cargo} not found") from e
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        raise MetadataError(f"Failed to get workspace metadata: {stderr or e}") from e

    try:
        metadata = json.loads(result.stdout)
        return [
            Package(
                name=package["name"],
                version=package["version"],
                id=package["id"],
                manifest_path=package["manifest_path"],
            )
            for package in metadata["packages"]
        ]
    except (ValueError, KeyError, TypeError) as e:
        raise MetadataError(f"Failed to read workspace metadata: {e}") from e
