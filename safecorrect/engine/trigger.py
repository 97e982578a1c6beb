"""
Trigger detection: did the user just finish a word?

Runs on every keystroke or poll tick, before any lookup work, so it must
stay a constant-time character test.
"""

from __future__ import annotations

from safecorrect.wordlists import BOUNDARY_PUNCTUATION


def is_boundary(char: str) -> bool:
    """True if a single character ends a word (whitespace or punctuation)."""
    return char.isspace() or char in BOUNDARY_PUNCTUATION


def should_trigger(last_input: str | None) -> bool:
    """
    Check whether the last character of `last_input` is a word boundary.

    Example:
        >>> should_trigger("teh ")
        True
        >>> should_trigger("teh")
        False
        >>> should_trigger("")
        False
    """
    if not last_input:
        return False
    return is_boundary(last_input[-1])
