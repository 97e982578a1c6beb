"""
Base dictionary storage.

The base table is a build artifact: a JSON object of typo -> correction,
lowercase, sorted by key, produced by `safecorrect.build`. A default table
ships inside the package at safecorrect/data/base_safe.json.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from importlib import resources
from pathlib import Path

from safecorrect.engine.filter import Rules
from safecorrect.exceptions import DictionaryLoadError

logger = logging.getLogger(__name__)

PACKAGED_DICTIONARY = "base_safe.json"


def packaged_dictionary_path() -> Path:
    """Path of the base table shipped with the package."""
    return Path(str(resources.files("safecorrect") / "data" / PACKAGED_DICTIONARY))


def _coerce_rules(data: object, source: str) -> Rules:
    """Validate a decoded JSON value as a rule table."""
    if not isinstance(data, dict):
        raise DictionaryLoadError(f"{source}: expected a JSON object, got {type(data).__name__}")

    rules: Rules = {}
    for typo, correction in data.items():
        if not isinstance(correction, str):
            logger.debug("%s: skipping non-string correction for %r", source, typo)
            continue
        typo = typo.strip().lower()
        correction = correction.strip().lower()
        if typo and correction and typo != correction:
            rules[typo] = correction
    return rules


def load_rules(path: Path | str) -> Rules:
    """
    Load a base rule table from a JSON file.

    Args:
        path: JSON file written by save_rules().

    Returns:
        Rule table.

    Raises:
        DictionaryLoadError: If the file is missing, unreadable or not a
            JSON object.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        raise DictionaryLoadError(f"Failed to load dictionary {path}: {e}") from e

    rules = _coerce_rules(data, str(path))
    logger.info("Loaded %d rules from %s", len(rules), path)
    return rules


def load_base_rules(path: Path | None = None) -> Rules:
    """
    Load the base table, falling back to an empty table on failure.

    An empty table means "no corrections", never an error.
    """
    if path is None:
        path = packaged_dictionary_path()

    try:
        return load_rules(path)
    except DictionaryLoadError as e:
        logger.warning("%s; continuing with an empty base table", e)
        return {}


def save_rules(rules: Mapping[str, str], path: Path | str) -> None:
    """
    Write a rule table as sorted, indented JSON.

    Raises:
        OSError: If the file cannot be written.
    """
    path = Path(path)
    ordered = {typo: rules[typo] for typo in sorted(rules)}

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(ordered, f, indent=2, ensure_ascii=False)
            f.write("\n")
        logger.info("Saved %d rules to %s", len(ordered), path)
    except OSError as e:
        logger.error("Failed to save rules: %s", e)
        raise
