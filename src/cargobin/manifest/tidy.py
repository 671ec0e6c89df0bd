"""Reconcile the bin section with the source files on disk."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from cargobin.config import AppConfig
from cargobin.manifest.section import BinSection
from cargobin.models import BinRecord
from cargobin.utils.files import find_main_files
from cargobin.utils.naming import derive_bin_name, relative_bin_path

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class TidyStats:
    removed: list[BinRecord] = field(default_factory=list)
    added: list[BinRecord] = field(default_factory=list)
    unchanged: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.removed or self.added)


class Tidier:
    """Prunes stale bin records and registers untracked entry points."""

    def __init__(
        self,
        section: BinSection,
        root: Path,
        *,
        config: AppConfig | None = None,
        finder: Callable[[Path], list[Path]] | None = None,
    ) -> None:
        self.section = section
        self.root = Path(root)
        self.config = config or AppConfig()
        self.finder = finder or self._find_main_files

    def _find_main_files(self, root: Path) -> list[Path]:
        return find_main_files(
            root,
            extension=self.config.source_extension,
            ignored=self.config.ignored_paths(root),
        )

    def prune(self) -> list[BinRecord]:
        """Remove records whose path no longer names a file under root."""
        stale = [record for record in self.section if not (self.root / record.path).is_file()]
        for record in stale:
            LOGGER.info("Removing stale bin %s (%s)", record.name, record.path)
            self.section.discard(record)
        return stale

    def discover(self) -> tuple[list[BinRecord], int]:
        """Add a record for every untracked source file with an entry point.

        Returns the added records and the number of files already tracked.
        """
        added: list[BinRecord] = []
        unchanged = 0
        for path in self.finder(self.root):
            record = BinRecord(
                name=derive_bin_name(
                    path,
                    self.root,
                    default_dir=self.config.default_dir,
                    extension=self.config.source_extension,
                    delimiter=self.config.name_delimiter,
                ),
                path=relative_bin_path(path, self.root),
            )
            if self.section.exists(record.name, record.path):
                LOGGER.debug("Already tracked: %s (%s)", record.name, record.path)
                unchanged += 1
                continue
            LOGGER.info("Adding bin %s (%s)", record.name, record.path)
            self.section.add(record.name, record.path)
            added.append(record)
        return added, unchanged

    def tidy(self) -> TidyStats:
        """Run the prune pass, then the discover pass, in memory."""
        stats = TidyStats()
        stats.removed = self.prune()
        stats.added, stats.unchanged = self.discover()
        return stats
