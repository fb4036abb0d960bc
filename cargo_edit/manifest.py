"""Cargo manifest editing: table lookup, dependency insert/merge/remove, sorting."""

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import BinaryIO

import tomlkit
from rich.console import Console
from rich.text import Text
from tomlkit import TOMLDocument
from tomlkit.items import InlineTable, Table

from .document import format_inline_table, is_str, is_table_like, parse_document, snapshot, sort_table_values
from .errors import (
    InvalidManifest,
    ManifestIOError,
    MissingVersion,
    NonExistentDependency,
    NonExistentTable,
    UnexpectedRootManifest,
)
from .locate import find
from .models import Dependency

DEPENDENCY_KINDS = ("dev-dependencies", "build-dependencies", "dependencies")

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def _is_simple_entry(entry) -> bool:
    """A bare string or a table with a single key: safe to overwrite wholesale."""
    return is_str(entry) or (is_table_like(entry) and len(entry) == 1)


def merge_dependencies(table, key: str, new: Dependency) -> None:
    """Merge a new dependency into the existing entry ``table[key]``.

    Simple entries are replaced by the new representation. Structured entries
    lose the source keys (version, path, git) the new one does not have and take
    the new values in place, keeping hand-written keys such as features or optional.
    """
    old = table[key]
    new_toml = new.to_toml()[1]

    if _is_simple_entry(old):
        table[key] = new_toml
    elif is_table_like(old):
        new_fields = {"version": new_toml} if is_str(new_toml) else new_toml.unwrap()
        for source_key in ("version", "path", "git"):
            if source_key in old and source_key not in new_fields:
                del old[source_key]
        for field_name, value in new_fields.items():
            old[field_name] = value
    else:
        raise AssertionError(f"Invalid old dependency type: {type(old).__name__}")

    if isinstance(table[key], InlineTable):
        table[key] = format_inline_table(table[key])


def print_upgrade_if_necessary(name: str, old, new_version) -> None:
    """Print a notice if the new dependency version differs from the old one."""
    if _is_simple_entry(old):
        old_version = old
    elif is_table_like(old):
        old_version = old.get("version")
        if old_version is None:
            raise MissingVersion(name)
    else:
        raise AssertionError(f"Invalid old dependency type: {type(old).__name__}")

    if not (is_str(old_version) and is_str(new_version)):
        return
    if str(old_version) == str(new_version):
        return
    console.print(
        Text.assemble(("    Upgrading ", "bold green"), f"{name} v{old_version} -> v{new_version}"),
        soft_wrap=True,
    )


class Manifest:
    """A Cargo manifest held as a format-preserving TOML document."""

    def __init__(self, data: TOMLDocument | None = None):
        self.data = data if data is not None else tomlkit.document()

    @classmethod
    def parse(cls, content: str, source: str = "Cargo.toml") -> "Manifest":
        """Read manifest data from a string."""
        return cls(parse_document(content, source))

    @staticmethod
    def find_file(hint: Path | str | None = None, cwd: Path | str | None = None) -> BinaryIO:
        """Open the manifest found from ``hint`` (or ``cwd``) for reading and writing."""
        path = find(hint, cwd)
        try:
            return open(path, "r+b")
        except OSError as e:
            raise ManifestIOError(f"Failed to open {path}: {e}") from e

    @classmethod
    def open(cls, hint: Path | str | None = None, cwd: Path | str | None = None) -> "Manifest":
        """Find, read and parse the manifest for a path (or the working directory)."""
        with cls.find_file(hint, cwd) as file:
            try:
                content = file.read().decode("utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise ManifestIOError(f"Failed to read manifest contents: {e}") from e
            return cls.parse(content, file.name)

    def __str__(self) -> str:
        return self.data.as_string()

    def get_table(self, table_path: Sequence[str]):
        """Get the table at ``table_path``, creating missing tables along the way."""
        node = self.data
        for segment in table_path:
            if segment not in node:
                node[segment] = tomlkit.table()
            node = node[segment]
            if not is_table_like(node):
                raise NonExistentTable(segment)
        return node

    def get_sections(self) -> list[tuple[list[str], dict]]:
        """Get all sections in the manifest that exist and might contain dependencies.

        The tables are returned as detached copies; use get_table to edit one.
        """
        sections = []
        target = self.data.get("target")
        for kind in DEPENDENCY_KINDS:
            if is_table_like(self.data.get(kind)):
                sections.append(([kind], snapshot(self.data[kind])))

            if not is_table_like(target):
                continue
            for target_name, target_table in target.items():
                if not is_table_like(target_table):
                    continue
                dependency_table = target_table.get(kind)
                if is_table_like(dependency_table):
                    sections.append((["target", str(target_name), kind], snapshot(dependency_table)))
        return sections

    def write_to_file(self, file: BinaryIO) -> None:
        """Overwrite an open manifest file with the document contents."""
        if "package" not in self.data and "project" not in self.data:
            if "workspace" in self.data:
                raise UnexpectedRootManifest()
            raise InvalidManifest()

        new_contents = self.data.as_string().encode("utf-8")
        try:
            # Truncate first so a shorter document leaves no stale bytes behind.
            file.seek(0)
            file.truncate(len(new_contents))
            file.write(new_contents)
            file.flush()
        except OSError as e:
            raise ManifestIOError(f"Failed to write updated Cargo.toml: {e}") from e
        logger.debug("Wrote %d bytes to %s", len(new_contents), getattr(file, "name", file))

    def insert_into_table(self, table_path: Sequence[str], dep: Dependency) -> None:
        """Add a dependency to a table, merging with an existing entry."""
        table = self.get_table(table_path)

        if dep.name not in table and dep.name_in_manifest not in table:
            name, value = dep.to_toml()
            table[name] = value
            return

        # A renamed dependency moves an existing `name = ...` entry to the new key
        # before merging, e.g. `a = "0.1"` becomes `alias = { version = "0.2", package = "a" }`.
        if dep.rename is not None and dep.name in table:
            entry = table[dep.name]
            del table[dep.name]
            table[dep.rename] = entry
        merge_dependencies(table, dep.name_in_manifest, dep)

        if isinstance(table, InlineTable) and table_path:
            parent = self.get_table(table_path[:-1])
            parent[table_path[-1]] = format_inline_table(table)

    def update_table_entry(self, table_path: Sequence[str], dep: Dependency, dry_run: bool = False) -> None:
        """Update an existing dependency in a table."""
        self.update_table_named_entry(table_path, dep.name_in_manifest, dep, dry_run)

    def update_table_named_entry(
        self, table_path: Sequence[str], item_name: str, dep: Dependency, dry_run: bool = False
    ) -> None:
        """Update the entry stored under ``item_name``; absent entries are left alone."""
        table = self.get_table(table_path)
        if item_name not in table:
            return

        try:
            print_upgrade_if_necessary(dep.name, table[item_name], dep.to_toml()[1])
        except MissingVersion as e:
            err_console.print(f"Error while displaying upgrade message, {e}")
        if dry_run:
            return

        merge_dependencies(table, item_name, dep)
        if isinstance(table, InlineTable) and table_path:
            parent = self.get_table(table_path[:-1])
            parent[table_path[-1]] = format_inline_table(table)

    def remove_from_table(self, table: str, name: str) -> None:
        """Remove a dependency from a top-level table, dropping the table once empty."""
        if not is_table_like(self.data.get(table)):
            raise NonExistentTable(table)
        dependencies = self.data[table]
        if name not in dependencies:
            raise NonExistentDependency(name, table)

        del dependencies[name]
        if not dependencies:
            del self.data[table]

    def add_deps(self, table_path: Sequence[str], deps: Sequence[Dependency]) -> None:
        """Add several dependencies; stops at the first failure without rolling back."""
        for dep in deps:
            self.insert_into_table(table_path, dep)

    def sort_table(self, table_path: Sequence[str]) -> None:
        """Sort a table using its natural order. Inline tables are left as they are."""
        table = self.get_table(table_path)
        if isinstance(table, Table):
            sort_table_values(table)


class LocalManifest(Manifest):
    """A Cargo manifest backed by a file on disk."""

    def __init__(self, path: Path | str, data: TOMLDocument):
        super().__init__(data)
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    @classmethod
    def find(cls, hint: Path | str | None = None, cwd: Path | str | None = None) -> "LocalManifest":
        """Locate the manifest for ``hint`` (or ``cwd``) and load it."""
        return cls.try_new(find(hint, cwd))

    @classmethod
    def try_new(cls, path: Path | str) -> "LocalManifest":
        """Load the manifest at ``path``."""
        return cls(path, Manifest.open(path).data)

    def __repr__(self) -> str:
        return f"LocalManifest(path={str(self.path)!r})"

    def write(self) -> None:
        """Rewrite the backing file with the current document."""
        with Manifest.find_file(self.path) as file:
            self.write_to_file(file)

    def upgrade(self, dependency: Dependency, dry_run: bool = False) -> None:
        """Upgrade every entry of ``dependency`` across all sections, then rewrite the file.

        Entries are matched by package name, so a renamed entry
        (``alias = { package = "name", ... }``) is upgraded in place under its own key.
        """
        for table_path, table in self.get_sections():
            for name, entry in table.items():
                package = entry.get("package") if isinstance(entry, dict) else None
                dep_name = package if isinstance(package, str) else name
                if dep_name == dependency.name:
                    self.update_table_named_entry(table_path, name, dependency, dry_run)

        self.write()
