"""The ``[[bin]]`` array of tables of a Cargo manifest.

Records are ``{name, path}`` tables kept in insertion order. Two records
collide when their names OR their paths are equal. ``add`` evicts every
colliding record before appending, while ``remove`` deletes only the first
match; callers rely on that asymmetry.

Usage:
    section = BinSection(document)
    section.add("bin1", "src/b1.rs")
    section.exists("bin1", "")   # True
    section.remove("bin1", "")   # True
"""

from __future__ import annotations

import logging
from typing import Callable, Iterator

import tomlkit
from tomlkit import TOMLDocument
from tomlkit.items import AoT, Table

from cargobin.errors import InvalidArgumentError
from cargobin.models import BinRecord

LOGGER = logging.getLogger(__name__)

KEY_NAME = "name"
KEY_PATH = "path"


def _string_field(table: Table, key: str) -> str | None:
    value = table.get(key)
    if isinstance(value, str) and value:
        return str(value)
    return None


def _as_record(table: Table) -> BinRecord | None:
    name = _string_field(table, KEY_NAME)
    path = _string_field(table, KEY_PATH)
    if name is None or path is None:
        return None
    return BinRecord(name=name, path=path)


class BinSection:
    """Array-of-records view over one top-level key of a manifest document."""

    def __init__(self, document: TOMLDocument, *, key: str = "bin") -> None:
        self.document = document
        self.key = key

    def _tables(self) -> AoT:
        """Return the array of tables, materializing an empty one if absent."""
        if self.key not in self.document:
            self.document[self.key] = tomlkit.aot()
        tables = self.document[self.key]
        if not isinstance(tables, AoT):
            raise InvalidArgumentError(
                f"'{self.key}' must be an array of tables, found {type(tables).__name__}"
            )
        return tables

    def _matching_indices(self, name: str, path: str) -> Iterator[int]:
        for index, table in enumerate(self._tables()):
            record = _as_record(table)
            if record is not None and record.matches(name, path):
                yield index

    def __len__(self) -> int:
        return len(self._tables())

    def __iter__(self) -> Iterator[BinRecord]:
        for index, table in enumerate(self._tables()):
            record = _as_record(table)
            if record is None:
                LOGGER.warning(
                    "Skipping malformed %s entry #%d: '%s' and '%s' must be non-empty strings",
                    self.key,
                    index,
                    KEY_NAME,
                    KEY_PATH,
                )
                continue
            yield record

    def records(self) -> list[BinRecord]:
        return list(self)

    def for_each(self, callback: Callable[[str, str], None]) -> None:
        """Call ``callback(name, path)`` for every record in insertion order."""
        for record in self.records():
            callback(record.name, record.path)

    def find_index(self, name: str, path: str) -> int | None:
        """Return the index of the first record matching name OR path."""
        return next(self._matching_indices(name, path), None)

    def exists(self, name: str, path: str) -> bool:
        return self.find_index(name, path) is not None

    def add(self, name: str, path: str) -> None:
        """Upsert a record.

        Every record whose name equals ``name`` or whose path equals
        ``path`` is removed, then ``{name, path}`` is appended at the end.

        Raises:
            InvalidArgumentError: If ``name`` or ``path`` is empty.
        """
        if not name:
            raise InvalidArgumentError(f"{self.key}.{KEY_NAME} cannot be empty")
        if not path:
            raise InvalidArgumentError(f"{self.key}.{KEY_PATH} cannot be empty")

        tables = self._tables()
        collisions = list(self._matching_indices(name, path))
        for index in reversed(collisions):
            LOGGER.debug("Evicting %s entry #%d colliding with %s (%s)", self.key, index, name, path)
            del tables[index]

        table = tomlkit.table()
        table.add(KEY_NAME, name)
        table.add(KEY_PATH, path)
        tables.append(table)
        LOGGER.debug("Added %s entry %s (%s)", self.key, name, path)

    def remove(self, name: str, path: str) -> bool:
        """Remove the first record matching name OR path."""
        index = self.find_index(name, path)
        if index is None:
            return False
        del self._tables()[index]
        LOGGER.debug("Removed %s entry #%d matching %s (%s)", self.key, index, name, path)
        return True

    def discard(self, record: BinRecord) -> bool:
        """Remove the first record equal to ``record`` in both name and path."""
        for index, table in enumerate(self._tables()):
            if _as_record(table) == record:
                del self._tables()[index]
                LOGGER.debug("Discarded %s entry #%d %s (%s)", self.key, index, record.name, record.path)
                return True
        return False
