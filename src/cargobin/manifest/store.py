"""Format-preserving persistence of the Cargo manifest."""

from __future__ import annotations

import logging
from pathlib import Path

import tomlkit
from tomlkit import TOMLDocument
from tomlkit.exceptions import TOMLKitError
from tomlkit.items import AoT

from cargobin.errors import FileIOError, InvalidArgumentError, NotFoundError, ParseError
from cargobin.manifest.section import BinSection

LOGGER = logging.getLogger(__name__)


def _check_bin_shape(document: TOMLDocument, key: str, source: str) -> None:
    if key in document and not isinstance(document[key], AoT):
        raise InvalidArgumentError(
            f"'{key}' must be an array of tables, "
            f"found {type(document[key]).__name__} in {source}"
        )


class ManifestStore:
    """Owner of a parsed manifest document and the file it came from."""

    def __init__(self, document: TOMLDocument, path: Path | None = None, *, bin_key: str = "bin") -> None:
        self.document = document
        self.path = Path(path) if path is not None else None
        self.bin_key = bin_key
        self._bins: BinSection | None = None

    @classmethod
    def from_string(cls, text: str, path: Path | None = None, *, bin_key: str = "bin") -> ManifestStore:
        source = str(path) if path is not None else "<string>"
        try:
            document = tomlkit.parse(text)
        except TOMLKitError as exc:
            raise ParseError(f"Failed to parse {source}: {exc}") from exc
        _check_bin_shape(document, bin_key, source)
        return cls(document, path, bin_key=bin_key)

    @classmethod
    def load(cls, path: Path, *, bin_key: str = "bin") -> ManifestStore:
        """Read and parse a manifest, keeping its formatting and line endings."""
        path = Path(path)
        LOGGER.debug("Loading manifest %s", path)
        if not path.is_file():
            raise NotFoundError(f"Manifest not found: {path}")
        try:
            with path.open("r", encoding="utf-8", newline="") as handle:
                text = handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise FileIOError(f"Failed to read {path}: {exc}") from exc
        return cls.from_string(text, path, bin_key=bin_key)

    @property
    def bins(self) -> BinSection:
        if self._bins is None:
            self._bins = BinSection(self.document, key=self.bin_key)
        return self._bins

    def dumps(self) -> str:
        return tomlkit.dumps(self.document)

    def save(self, path: Path | None = None) -> Path:
        """Overwrite the manifest with the rendered document."""
        target = Path(path) if path is not None else self.path
        if target is None:
            raise InvalidArgumentError("No manifest path to save to")
        text = self.dumps()
        try:
            with target.open("w", encoding="utf-8", newline="") as handle:
                handle.write(text)
        except OSError as exc:
            raise FileIOError(f"Failed to write {target}: {exc}") from exc
        LOGGER.info("Saved manifest %s", target)
        return target
