"""Helpers mapping source file paths to bin names and manifest paths."""

from __future__ import annotations

from pathlib import Path, PurePath

from cargobin.errors import OutOfTreeError


def _relative_parts(file_path: Path, root: Path) -> tuple[str, ...]:
    try:
        relative = PurePath(file_path).relative_to(PurePath(root))
    except ValueError as exc:
        raise OutOfTreeError(f"{file_path} is not under project root {root}") from exc
    if not relative.parts:
        raise OutOfTreeError(f"{file_path} is the project root, not a source file")
    return relative.parts


def relative_bin_path(file_path: Path, root: Path) -> str:
    """Return the root-relative path stored in the manifest.

    Directories and the extension are kept as-is; separators are written
    as ``/`` because Cargo reads manifest paths that way on every platform.
    """
    return "/".join(_relative_parts(file_path, root))


def derive_bin_name(
    file_path: Path,
    root: Path,
    *,
    default_dir: str = "src",
    extension: str = ".rs",
    delimiter: str = "-",
) -> str:
    """Derive the canonical bin name of a source file.

    ``/p/src/a/b.rs`` under root ``/p`` becomes ``a-b``: the leading
    default directory is dropped, the extension stripped and the remaining
    segments joined with ``delimiter``.
    """
    parts = list(_relative_parts(file_path, root))
    if len(parts) > 1 and parts[0] == default_dir:
        parts = parts[1:]

    last = parts[-1]
    if extension and last.endswith(extension) and len(last) > len(extension):
        parts[-1] = last[: -len(extension)]

    return delimiter.join(parts)
