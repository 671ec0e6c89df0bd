"""Exceptions raised by cargo-bin."""

from __future__ import annotations


class CargoBinError(Exception):
    """Base exception for manifest and project operations."""


class NotFoundError(CargoBinError):
    """Raised when the manifest or a source file does not exist."""


class ParseError(CargoBinError):
    """Raised when a manifest or source file cannot be parsed."""


class InvalidArgumentError(CargoBinError, ValueError):
    """Raised for empty record fields or a malformed bin section."""


class OutOfTreeError(CargoBinError, ValueError):
    """Raised when a path is not located under the project root."""


class FileIOError(CargoBinError):
    """Raised when reading, writing or creating a file fails."""
