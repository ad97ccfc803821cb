"""Loading of parsers registered as entry points."""

from collections.abc import Sequence
from importlib.metadata import entry_points
from typing import Any

from bdd_reconciler.parsers.base import ResultParser
from bdd_reconciler.parsers.manifest import ParserManifest

ENTRY_POINT_GROUP = "bdd_reconciler.parsers"


class ParserNotFoundError(Exception):
    """Raised when no parser is registered under a key."""


def parser_key(name: str) -> str:
    """Entry-point key for a parser name.

    Report formats are spelled with underscores (``cucumber_json``) while
    entry points use hyphens (``cucumber-json``); both name the same parser.
    """
    return name.strip().lower().replace("_", "-")


def available_parser_keys() -> Sequence[str]:
    """Keys of every registered parser, sorted."""
    return sorted(entry.name for entry in entry_points(group=ENTRY_POINT_GROUP))


def load_parser_manifest(key: str) -> ParserManifest[Any]:
    """Load a parser manifest by key.

    Args:
        key: The parser key as registered in pyproject.toml
             (e.g., "nunit3", "cucumber-json") or the report format name
             (e.g., "cucumber_json")

    Returns:
        The parser manifest instance

    Raises:
        ParserNotFoundError: If no parser with the given key is found

    """
    wanted = parser_key(key)
    for entry in entry_points(group=ENTRY_POINT_GROUP):
        if entry.name == wanted:
            manifest: ParserManifest[Any] = entry.load()
            return manifest

    raise ParserNotFoundError(
        f"Parser '{key}' not found. Available parsers: {available_parser_keys()}"
    )


def load_parser(key: str) -> ResultParser:
    """Create the parser registered under ``key``."""
    return load_parser_manifest(key).create()
