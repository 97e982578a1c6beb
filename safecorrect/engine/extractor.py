"""
Word extraction and safety filtering.

Given the full text of the block being edited and a cursor offset, find the
word that was just completed, look it up in the effective rule table, and
decide whether replacing it is safe.

The safety checks here repeat those applied when the table was built: a
personal or remote rule can reintroduce anything, so provenance is never
trusted.

Code spans are detected by counting the code delimiter (a backtick by
default) before the cursor. This is a best-effort heuristic; nested or
mismatched delimiters can make it miss a correction, which is the safe
direction to fail in.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from safecorrect.engine.trigger import is_boundary
from safecorrect.wordlists import (
    DEFAULT_CODE_DELIMITER,
    MIN_SAFE_LENGTH,
    is_ambiguous,
    is_dialect_protected,
    is_whitelisted_short_typo,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CorrectionCandidate:
    """A word before the cursor that has a safe correction."""

    original_word: str  # As typed, original casing
    correction: str  # Lowercase, as stored in the rule table
    start_offset: int
    end_offset: int


def in_code_span(text: str, offset: int, delimiter: str | None = DEFAULT_CODE_DELIMITER) -> bool:
    """
    Check whether `offset` sits inside an open code span.

    Counts delimiter characters from the start of the text up to the offset;
    an odd count means a span is open.

    Example:
        >>> in_code_span("run `git stauts ", 16)
        True
        >>> in_code_span("run `ls` then teh ", 18)
        False
    """
    if not delimiter:
        return False
    return text.count(delimiter, 0, offset) % 2 == 1


def word_start(text: str, end: int) -> int:
    """Scan left from end - 1 to the first boundary; return the word start."""
    i = end - 1
    while i >= 0 and not is_boundary(text[i]):
        i -= 1
    return i + 1


def looks_like_identifier(word: str) -> bool:
    """Words with digits or underscores are code, not prose."""
    return "_" in word or any(ch.isdigit() for ch in word)


def is_safe_correction(
    word: str,
    correction: str,
    min_length: int = MIN_SAFE_LENGTH,
) -> bool:
    """
    Final safety check for a word and its proposed correction.

    Args:
        word: The typed word (any case).
        correction: The proposed correction (any case).
        min_length: Words shorter than this need a short-typo exception.

    Returns:
        True if the replacement may be applied.
    """
    word_lower = word.lower()
    correction_lower = correction.lower()

    if is_dialect_protected(word_lower):
        return False

    if is_ambiguous(word_lower) or is_ambiguous(correction_lower):
        return False

    if len(word_lower) < min_length:
        return is_whitelisted_short_typo(word_lower, correction_lower)

    return True


def find_candidate(
    text: str,
    offset: int,
    rules: Mapping[str, str],
    code_delimiter: str | None = DEFAULT_CODE_DELIMITER,
    min_length: int = MIN_SAFE_LENGTH,
) -> CorrectionCandidate | None:
    """
    Find a correctable word ending at (or one trigger character before) offset.

    `offset` may be either the position right after the word or right after
    the boundary character that completed it; in the second case the single
    trigger character is stepped over. Only that one character is skipped.

    Args:
        text: Full text of the block being edited.
        offset: Cursor offset.
        rules: Effective rule table (lowercase typo -> lowercase correction).
        code_delimiter: Inline code delimiter, None to disable the check.
        min_length: Minimum word length without a short-typo exception.

    Returns:
        CorrectionCandidate, or None if there is nothing safe to correct.

    Example:
        >>> find_candidate("I typed teh ", 12, {"teh": "the"})
        CorrectionCandidate(original_word='teh', correction='the', start_offset=8, end_offset=11)
    """
    if not text or offset <= 0 or offset > len(text):
        return None

    if in_code_span(text, offset, code_delimiter):
        logger.debug("Offset %d is inside a code span; skipping", offset)
        return None

    end = offset
    if is_boundary(text[end - 1]):
        end -= 1

    start = word_start(text, end)
    word = text[start:end]
    if not word:
        return None

    if looks_like_identifier(word):
        return None

    word_lower = word.lower()
    correction = rules.get(word_lower)
    if not correction or correction == word_lower:
        return None

    if not is_safe_correction(word_lower, correction, min_length):
        logger.debug("Rule %r -> %r rejected by safety filter", word_lower, correction)
        return None

    return CorrectionCandidate(
        original_word=word,
        correction=correction,
        start_offset=start,
        end_offset=end,
    )
