"""Load specification trees dumped by the markup parser."""

import asyncio
from pathlib import Path

import yaml
from pydantic import ValidationError

from bdd_reconciler.models.specification import Specification


async def load_specification(path: Path) -> Specification:
    """Load a specification tree from a YAML (or JSON) file.

    Args:
        path: Path to the specification dump

    Returns:
        The validated specification tree

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If YAML is invalid or doesn't match schema

    """
    if not path.is_file():
        raise FileNotFoundError(f"Specification file not found: {path}")

    content = await asyncio.to_thread(path.read_text, encoding="utf-8")

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        raise ValueError(f"Empty specification file: {path}")

    try:
        return Specification.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid specification schema in {path}: {e}") from e
