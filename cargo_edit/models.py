"""Core data models for cargo-tidy."""

from dataclasses import dataclass

import tomlkit
from tomlkit.items import InlineTable

from .errors import InvalidDependency


@dataclass
class Dependency:
    """A package reference to be written into a manifest."""

    name: str
    version: str | None = None
    path: str | None = None
    git: str | None = None
    rename: str | None = None  # key used in the manifest when it differs from name
    features: list[str] | None = None
    optional: bool = False
    default_features: bool = True

    @property
    def name_in_manifest(self) -> str:
        return self.rename or self.name

    def is_simple(self) -> bool:
        """Whether this dependency is written as a bare version string."""
        return (
            self.version is not None
            and self.path is None
            and self.git is None
            and self.rename is None
            and self.features is None
            and not self.optional
            and self.default_features
        )

    def to_toml(self) -> tuple[str, str | InlineTable]:
        """Return the manifest key and the value to store under it.

        Only a version gives a bare string (``serde = "1.0"``); anything else
        is an inline table (``serde = { version = "1.0", features = ["derive"] }``).
        """
        if self.is_simple():
            return self.name_in_manifest, self.version

        data = tomlkit.inline_table()
        if self.version is not None:
            data["version"] = self.version
        if self.path is not None:
            data["path"] = self.path
        if self.git is not None:
            data["git"] = self.git
        if not self.default_features:
            data["default-features"] = False
        if self.features is not None:
            data["features"] = list(self.features)
        if self.optional:
            data["optional"] = True
        if self.rename is not None:
            data["package"] = self.name
        return self.name_in_manifest, data


@dataclass
class Package:
    """A workspace member as reported by `cargo metadata`."""

    name: str
    version: str
    id: str
    manifest_path: str


def parse_dependency(spec: str, **options) -> Dependency:
    """Parse ``name`` or ``name@version`` into a Dependency.

    Args:
        spec: The dependency as typed on the command line
        **options: Extra Dependency fields (path, git, rename, features, ...)

    Returns:
        Dependency built from the spec
    """
    name, sep, version = spec.strip().partition("@")
    if not name:
        raise InvalidDependency(f"Invalid dependency `{spec}`: missing name")
    if sep and not version:
        raise InvalidDependency(f"Invalid dependency `{spec}`: missing version after `@`")
    return Dependency(name=name, version=version or None, **options)
