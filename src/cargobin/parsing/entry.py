"""Entry-point detection for Rust sources using tree-sitter.

A file defines an entry point when one of its top-level items is a
function named ``main``. The decision is made on the syntax tree, so
``fn main`` appearing in a string literal, a comment or a nested module
does not count.

Usage:
    from cargobin.parsing.entry import has_entry_point

    has_entry_point('fn main() { println!("hi"); }')  # True
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING

from tree_sitter_language_pack import get_parser

from cargobin.errors import FileIOError, NotFoundError, ParseError

if TYPE_CHECKING:
    from tree_sitter import Node, Parser

LOGGER = logging.getLogger(__name__)

TREE_SITTER_NAME = "rust"
ENTRY_POINT_NAME = "main"


@lru_cache(maxsize=None)
def _get_parser(tree_sitter_name: str = TREE_SITTER_NAME) -> "Parser":
    """Get the tree-sitter parser for a grammar (loaded once)."""
    return get_parser(tree_sitter_name)


def _first_error_line(node: "Node") -> int | None:
    """Return the 1-based line of the first ERROR or MISSING node."""
    if node.type == "ERROR" or node.is_missing:
        return node.start_point[0] + 1
    for child in node.children:
        if child.has_error:
            return _first_error_line(child)
    return None


def _is_entry_point(node: "Node", source: bytes) -> bool:
    if node.type != "function_item":
        return False
    name = node.child_by_field_name("name")
    if name is None:
        return False
    return source[name.start_byte : name.end_byte].decode("utf-8") == ENTRY_POINT_NAME


def has_entry_point(contents: str) -> bool:
    """Return True if the Rust source defines a top-level ``fn main``.

    Raises:
        ParseError: If the source is not syntactically valid Rust.
    """
    source = contents.encode("utf-8")
    tree = _get_parser().parse(source)
    root = tree.root_node

    if root.has_error:
        line = _first_error_line(root)
        where = f" near line {line}" if line is not None else ""
        raise ParseError(f"invalid Rust syntax{where}")

    return any(_is_entry_point(child, source) for child in root.children)


def file_has_entry_point(path: Path) -> bool:
    """Read a source file and check it for a top-level ``fn main``."""
    path = Path(path)
    if not path.is_file():
        raise NotFoundError(f"Source file not found: {path}")
    try:
        contents = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise FileIOError(f"Failed to read {path}: {exc}") from exc

    try:
        found = has_entry_point(contents)
    except ParseError as exc:
        raise ParseError(f"Failed to parse {path}: {exc}") from exc

    LOGGER.debug("Entry point %s in %s", "found" if found else "not found", path)
    return found
