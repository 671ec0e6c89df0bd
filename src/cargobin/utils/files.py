"""Utility helpers for locating the project and walking its sources."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, Iterator

from cargobin.errors import FileIOError, InvalidArgumentError, NotFoundError
from cargobin.parsing.entry import file_has_entry_point

LOGGER = logging.getLogger(__name__)

SCAFFOLD_TEMPLATE = 'fn main() {\n    println!("Hello, world!");\n}\n'


def search_manifest_from(start_dir: Path, file_name: str) -> Path:
    """Search ``start_dir`` and its ancestors for ``file_name``.

    Returns the absolute path of the first match.
    """
    start = Path(start_dir).absolute()
    for directory in (start, *start.parents):
        candidate = directory / file_name
        if candidate.is_file():
            return candidate.resolve()
    raise NotFoundError(f"{file_name} not found searching upward from {start}")


def find_project_root(start_dir: Path, manifest_name: str) -> Path:
    """Return the absolute directory holding the nearest manifest."""
    return search_manifest_from(start_dir, manifest_name).parent


def iter_source_paths(
    root: Path, *, extension: str, ignored: Iterable[Path] = ()
) -> Iterator[Path]:
    """Yield source files below ``root``, skipping ignored directories."""
    ignored_dirs = {Path(path) for path in ignored}

    def walk(directory: Path) -> Iterator[Path]:
        if directory in ignored_dirs:
            LOGGER.debug("Skipping ignored directory %s", directory)
            return
        try:
            children = sorted(directory.iterdir())
        except OSError as exc:
            raise FileIOError(f"Failed to list {directory}: {exc}") from exc
        for child in children:
            if child.is_dir():
                yield from walk(child)
            elif child.is_file() and child.suffix == extension:
                yield child

    root = Path(root)
    if root.is_dir():
        yield from walk(root)


def find_main_files(
    root: Path,
    *,
    extension: str = ".rs",
    ignored: Iterable[Path] = (),
    oracle: Callable[[Path], bool] = file_has_entry_point,
) -> list[Path]:
    """Find source files under ``root`` that define an entry point."""
    found = [
        path
        for path in iter_source_paths(root, extension=extension, ignored=ignored)
        if oracle(path)
    ]
    LOGGER.debug("Found %d source file(s) with an entry point under %s", len(found), root)
    return found


def write_scaffold(path: Path, *, force: bool = False) -> None:
    """Create a source file holding an empty ``fn main``."""
    path = Path(path)
    if path.exists() and not force:
        raise InvalidArgumentError(f"File already exists: {path} (use --force to overwrite it)")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(SCAFFOLD_TEMPLATE, encoding="utf-8")
    except OSError as exc:
        raise FileIOError(f"Failed to create {path}: {exc}") from exc
    LOGGER.info("Created %s", path)
