"""Command line interface for cargo-bin."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cargobin.config import AppConfig
from cargobin.errors import CargoBinError, InvalidArgumentError, OutOfTreeError
from cargobin.manifest.store import ManifestStore
from cargobin.manifest.tidy import Tidier
from cargobin.parsing.entry import file_has_entry_point
from cargobin.utils.files import find_project_root, write_scaffold
from cargobin.utils.naming import derive_bin_name, relative_bin_path

LOGGER = logging.getLogger(__name__)

console = Console()
app = typer.Typer(help="cargo-bin - manage the bin targets of a Cargo manifest")


@dataclass(slots=True)
class CliState:
    verbose: bool = False
    dry_run: bool = False
    config: AppConfig = field(default_factory=AppConfig)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


@contextmanager
def _reporting_errors() -> Iterator[None]:
    try:
        yield
    except CargoBinError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


def _open_manifest(config: AppConfig, cwd: Path) -> tuple[Path, ManifestStore]:
    root = find_project_root(cwd, config.manifest_name)
    LOGGER.debug("Project root: %s", root)
    store = ManifestStore.load(root / config.manifest_name, bin_key=config.bin_key)
    return root, store


def _bin_for(path: Path, root: Path, config: AppConfig) -> tuple[str, str]:
    name = derive_bin_name(
        path,
        root,
        default_dir=config.default_dir,
        extension=config.source_extension,
        delimiter=config.name_delimiter,
    )
    return name, relative_bin_path(path, root)


def _commit(store: ManifestStore, state: CliState) -> None:
    if state.dry_run:
        LOGGER.info("Dry run: %s left untouched", store.path)
        console.print(store.dumps(), markup=False, highlight=False, end="")
        return
    store.save()
    console.print(f"Updated [bold]{escape(str(store.path))}[/bold]")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Compute and print the result without writing files"
    ),
) -> None:
    """Manage the bin targets declared in Cargo.toml."""
    _setup_logging(verbose)
    ctx.obj = CliState(verbose=verbose, dry_run=dry_run, config=AppConfig())


@app.command()
def new(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Source file to create"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
    from_root: bool = typer.Option(
        False, "--from-root", "--from_root", help="Resolve PATH against the project root"
    ),
) -> None:
    """Create a source file with fn main and register it as a bin."""
    state: CliState = ctx.obj
    config = state.config
    with _reporting_errors():
        cwd = Path.cwd().resolve()
        root, store = _open_manifest(config, cwd)
        target = config.with_extension(
            config.resolve_target(path, root=root, cwd=cwd, from_root=from_root)
        )
        name, bin_path = _bin_for(target, root, config)

        if state.dry_run:
            if target.exists() and not force:
                raise InvalidArgumentError(f"File already exists: {target} (use --force to overwrite it)")
            LOGGER.info("Dry run: would create %s", target)
        else:
            write_scaffold(target, force=force)

        store.bins.add(name, bin_path)
        console.print(f"Added bin [bold]{escape(name)}[/bold] ({escape(bin_path)})")
        _commit(store, state)


@app.command()
def add(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Existing source file to register"),
    force: bool = typer.Option(
        False, "--force", "-f", help="Register the file even if it has no fn main"
    ),
) -> None:
    """Register an existing source file as a bin."""
    state: CliState = ctx.obj
    config = state.config
    with _reporting_errors():
        cwd = Path.cwd().resolve()
        root, store = _open_manifest(config, cwd)
        target = config.resolve_target(path, root=root, cwd=cwd)

        if force:
            if not target.is_file():
                raise InvalidArgumentError(f"Not a file: {target}")
        elif not file_has_entry_point(target):
            raise InvalidArgumentError(f"No fn main in {target} (use --force to add it anyway)")

        name, bin_path = _bin_for(target, root, config)
        store.bins.add(name, bin_path)
        console.print(f"Added bin [bold]{escape(name)}[/bold] ({escape(bin_path)})")
        _commit(store, state)


@app.command()
def remove(
    ctx: typer.Context,
    target: str = typer.Argument(..., help="Bin name or source path"),
) -> None:
    """Remove the first bin whose name or path matches TARGET."""
    state: CliState = ctx.obj
    config = state.config
    with _reporting_errors():
        cwd = Path.cwd().resolve()
        root, store = _open_manifest(config, cwd)
        try:
            bin_path = relative_bin_path(config.resolve_target(Path(target), root=root, cwd=cwd), root)
        except OutOfTreeError:
            bin_path = target

        if not store.bins.remove(target, bin_path):
            console.print(f"[yellow]No bin matches {escape(target)}.[/yellow]")
            return
        console.print(f"Removed bin matching [bold]{escape(target)}[/bold]")
        _commit(store, state)


@app.command()
def tidy(ctx: typer.Context) -> None:
    """Drop bins whose file is gone and add untracked files with fn main."""
    state: CliState = ctx.obj
    config = state.config
    with _reporting_errors():
        root, store = _open_manifest(config, Path.cwd().resolve())
        stats = Tidier(store.bins, root, config=config).tidy()

        for record in stats.removed:
            console.print(f"[red]-[/red] {escape(record.name)} ({escape(record.path)})")
        for record in stats.added:
            console.print(f"[green]+[/green] {escape(record.name)} ({escape(record.path)})")
        console.print(
            f"Removed: {len(stats.removed)}, added: {len(stats.added)}, "
            f"unchanged: {stats.unchanged}"
        )
        if not stats.changed:
            console.print("[green]Nothing to tidy.[/green]")
            return
        _commit(store, state)


@app.command("list")
def list_bins(ctx: typer.Context) -> None:
    """Show the bins declared in the manifest."""
    state: CliState = ctx.obj
    config = state.config
    with _reporting_errors():
        root, store = _open_manifest(config, Path.cwd().resolve())
        records = store.bins.records()
        if not records:
            console.print("[yellow]No bins declared.[/yellow]")
            return

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Name")
        table.add_column("Path")
        table.add_column("Status")
        for record in records:
            status = "ok" if (root / record.path).is_file() else "[red]missing[/red]"
            table.add_row(escape(record.name), escape(record.path), status)
        console.print(table)


def run() -> None:
    """Console-script entry point, also reachable as ``cargo bin``."""
    args = sys.argv[1:]
    # cargo passes the subcommand name through as the first argument
    if args[:1] == ["bin"]:
        args = args[1:]
    app(args=args, prog_name="cargo-bin")
