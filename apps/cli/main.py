"""CLI application for cargo-tidy."""

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from cargo_edit.errors import InvalidDependency, ManifestError
from cargo_edit.manifest import LocalManifest
from cargo_edit.manifest import console as notice_console
from cargo_edit.manifests import Manifests
from cargo_edit.models import Dependency, parse_dependency

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name="cargo-tidy",
    help="cargo-tidy - Edit Cargo.toml manifests without losing their formatting",
    add_completion=False,
)

ManifestPathOption = typer.Option(
    None, "--manifest-path", help="Path to Cargo.toml, or a directory to search upwards from"
)
QuietOption = typer.Option(False, "--quiet", "-q", help="Do not print any output in case of success")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Print debug logging to stderr")
CargoOption = typer.Option("cargo", "--cargo", envvar="CARGO", help="Cargo executable used for workspace metadata")


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_time=False, show_path=False)],
        force=True,
    )


def dependency_table(dev: bool, build: bool, target: str | None) -> list[str]:
    """Table path that a dependency kind lives in."""
    if dev and build:
        raise InvalidDependency("--dev and --build cannot be combined")
    kind = "dev-dependencies" if dev else "build-dependencies" if build else "dependencies"
    return ["target", target, kind] if target else [kind]


def select_manifests(manifest_path: Path | None, all_packages: bool, cargo: str) -> Manifests:
    if all_packages:
        return Manifests.get_all(manifest_path, cwd=Path.cwd(), cargo=cargo)
    return Manifests.get_local_one(manifest_path, cwd=Path.cwd(), cargo=cargo)


def report_error(error: Exception) -> None:
    err_console.print(f"Error: {error}", style="red", markup=False, soft_wrap=True)


@app.command()
def tidy(
    manifest_path: Path | None = ManifestPathOption,
    all_packages: bool = typer.Option(False, "--all", help="Reformat all packages in the workspace"),
    quiet: bool = QuietOption,
    verbose: bool = VerboseOption,
    cargo: str = CargoOption,
) -> None:
    """Sort the dependency tables of a Cargo.toml manifest."""
    configure_logging(verbose)
    try:
        if all_packages:
            manifests = [manifest for manifest, _ in Manifests.get_all(manifest_path, cwd=Path.cwd(), cargo=cargo)]
        else:
            manifests = [LocalManifest.find(manifest_path, cwd=Path.cwd())]

        for manifest in manifests:
            for table_path, _ in manifest.get_sections():
                manifest.sort_table(table_path)
            manifest.write()
            if not quiet:
                console.print(f"[bold green]      Tidied[/bold green] {manifest.path}", soft_wrap=True)
    except ManifestError as e:
        report_error(e)
        raise typer.Exit(1)


@app.command()
def add(
    crates: list[str] = typer.Argument(help="Dependencies to add, as name@version"),
    dev: bool = typer.Option(False, "--dev", "-D", help="Add as a development dependency"),
    build: bool = typer.Option(False, "--build", "-B", help="Add as a build dependency"),
    target: str | None = typer.Option(None, "--target", help="Add as a dependency of the given target platform"),
    rename: str | None = typer.Option(None, "--rename", help="Key to use for the dependency in the manifest"),
    path: str | None = typer.Option(None, "--path", help="Local path of the dependency"),
    git: str | None = typer.Option(None, "--git", help="Git repository of the dependency"),
    features: list[str] | None = typer.Option(None, "--features", help="Features to enable"),
    optional: bool = typer.Option(False, "--optional", help="Mark the dependency as optional"),
    no_default_features: bool = typer.Option(False, "--no-default-features", help="Disable default features"),
    manifest_path: Path | None = ManifestPathOption,
    quiet: bool = QuietOption,
    verbose: bool = VerboseOption,
) -> None:
    """Add dependencies to a Cargo.toml manifest."""
    configure_logging(verbose)
    try:
        table_path = dependency_table(dev, build, target)
        if rename and len(crates) > 1:
            raise InvalidDependency("--rename can only be used with a single dependency")

        deps: list[Dependency] = []
        for spec in crates:
            dep = parse_dependency(
                spec,
                path=path,
                git=git,
                rename=rename,
                features=features or None,
                optional=optional,
                default_features=not no_default_features,
            )
            if dep.version is None and dep.path is None and dep.git is None:
                raise InvalidDependency(f"`{spec}` needs a version (name@version), --path or --git")
            deps.append(dep)

        manifest = LocalManifest.find(manifest_path, cwd=Path.cwd())
        manifest.add_deps(table_path, deps)
        manifest.write()
        if not quiet:
            for dep in deps:
                console.print(
                    f"[bold green]      Adding[/bold green] {dep.name_in_manifest} to {'.'.join(table_path)}",
                    soft_wrap=True,
                )
    except ManifestError as e:
        report_error(e)
        raise typer.Exit(1)


@app.command()
def rm(
    names: list[str] = typer.Argument(help="Dependencies to remove"),
    dev: bool = typer.Option(False, "--dev", "-D", help="Remove from dev-dependencies"),
    build: bool = typer.Option(False, "--build", "-B", help="Remove from build-dependencies"),
    manifest_path: Path | None = ManifestPathOption,
    quiet: bool = QuietOption,
    verbose: bool = VerboseOption,
) -> None:
    """Remove dependencies from a Cargo.toml manifest."""
    configure_logging(verbose)
    try:
        (table,) = dependency_table(dev, build, None)
        manifest = LocalManifest.find(manifest_path, cwd=Path.cwd())
        for name in names:
            manifest.remove_from_table(table, name)
        manifest.write()
        if not quiet:
            for name in names:
                console.print(f"[bold green]    Removing[/bold green] {name} from {table}", soft_wrap=True)
    except ManifestError as e:
        report_error(e)
        raise typer.Exit(1)


@app.command()
def upgrade(
    crates: list[str] = typer.Argument(help="Dependencies to upgrade, as name@version"),
    all_packages: bool = typer.Option(False, "--all", help="Upgrade all packages in the workspace"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print changes without applying them"),
    manifest_path: Path | None = ManifestPathOption,
    quiet: bool = QuietOption,
    verbose: bool = VerboseOption,
    cargo: str = CargoOption,
) -> None:
    """Upgrade dependencies to the given versions in every section they appear in."""
    configure_logging(verbose)
    notice_console.quiet = quiet
    try:
        deps = [parse_dependency(spec) for spec in crates]
        for dep in deps:
            if dep.version is None:
                raise InvalidDependency(f"`{dep.name}` needs a version to upgrade to (name@version)")

        for manifest, package in select_manifests(manifest_path, all_packages, cargo):
            for dep in deps:
                manifest.upgrade(dep, dry_run=dry_run)
            if dry_run and not quiet:
                console.print(f"[yellow]warning:[/yellow] dry run, {package.name} was not changed", soft_wrap=True)
    except ManifestError as e:
        report_error(e)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
