"""Errors raised while locating, reading, editing and writing manifests."""


class ManifestError(Exception):
    """Base class for every failure the manifest engine reports."""


class MissingManifest(ManifestError):
    def __init__(self, start: str | None = None):
        self.start = start
        message = "Unable to find Cargo.toml"
        if start:
            message += f" in {start} or any parent directory"
        super().__init__(message)


class NonExistentTable(ManifestError):
    def __init__(self, table: str):
        self.table = table
        super().__init__(f"The table `{table}` could not be found.")


class NonExistentDependency(ManifestError):
    def __init__(self, name: str, table: str):
        self.name = name
        self.table = table
        super().__init__(f"The dependency `{name}` could not be found in `{table}`.")


class InvalidManifest(ManifestError):
    def __init__(self):
        super().__init__("Cargo.toml missing expected `package` or `project` fields")


class UnexpectedRootManifest(ManifestError):
    def __init__(self):
        super().__init__(
            "Found virtual manifest, but this command requires running against an "
            "actual package in this workspace."
        )


class VirtualManifest(ManifestError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(
            f"Found virtual manifest at {path}, but this command requires running "
            "against an actual package in this workspace. Try adding `--all`."
        )


class MissingVersion(ManifestError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Missing version field for `{name}`")


class ManifestParseError(ManifestError):
    """The manifest text is not valid TOML."""


class ManifestIOError(ManifestError):
    """Reading or writing a manifest file failed."""


class MetadataError(ManifestError):
    """The `cargo metadata` query failed or returned unusable output."""


class InvalidDependency(ManifestError):
    """A dependency specification given on the command line is malformed."""
