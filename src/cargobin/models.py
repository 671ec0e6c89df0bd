"""Core cargo-bin data models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class BinRecord:
    """A single ``[[bin]]`` target of the manifest."""

    name: str
    path: str

    def matches(self, name: str, path: str) -> bool:
        """Return True when either the name or the path is equal."""
        return self.name == name or self.path == path
