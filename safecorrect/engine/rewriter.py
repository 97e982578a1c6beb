"""
Case-preserving rewriter.

Applies a CorrectionCandidate to the text, matching the casing pattern of
what the user typed, and computes where the cursor should land. Touches no
host state; the caller hands the result to the editor.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from safecorrect.engine.extractor import CorrectionCandidate, find_candidate
from safecorrect.wordlists import DEFAULT_CODE_DELIMITER, MIN_SAFE_LENGTH

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReplacementResult:
    """New text and cursor offset after a correction."""

    new_text: str
    new_cursor_offset: int


def preserve_case(original: str, replacement: str) -> str:
    """
    Give `replacement` the casing pattern of `original`.

    Example:
        >>> preserve_case("TEH", "the")
        'THE'
        >>> preserve_case("Teh", "the")
        'The'
        >>> preserve_case("teh", "the")
        'the'
    """
    if not replacement:
        return replacement

    if original.isupper():
        # isupper() is False without at least one cased character
        return replacement.upper()

    if original[:1].isupper():
        return replacement[0].upper() + replacement[1:]

    return replacement


def apply_candidate(
    text: str,
    candidate: CorrectionCandidate,
    cursor_offset: int | None = None,
) -> ReplacementResult | None:
    """
    Splice a cased correction into the text.

    Args:
        text: Text the candidate was extracted from.
        candidate: Word span and its correction.
        cursor_offset: Current cursor; defaults to the end of the word.

    Returns:
        ReplacementResult, or None if the candidate would change nothing.
    """
    if cursor_offset is None:
        cursor_offset = candidate.end_offset

    original = text[candidate.start_offset : candidate.end_offset]
    if original != candidate.original_word:
        logger.debug("Candidate span no longer matches text; skipping")
        return None

    if candidate.correction.lower() == original.lower():
        return None

    corrected = preserve_case(original, candidate.correction)
    new_text = text[: candidate.start_offset] + corrected + text[candidate.end_offset :]
    new_cursor_offset = cursor_offset + (len(corrected) - len(original))

    return ReplacementResult(new_text=new_text, new_cursor_offset=new_cursor_offset)


def replace_word_before_cursor(
    text: str,
    cursor_offset: int,
    rules: Mapping[str, str],
    code_delimiter: str | None = DEFAULT_CODE_DELIMITER,
    min_length: int = MIN_SAFE_LENGTH,
) -> ReplacementResult | None:
    """
    Correct the word just before the cursor, if there is a safe rule for it.

    Example:
        >>> replace_word_before_cursor("I typed teh ", 12, {"teh": "the"})
        ReplacementResult(new_text='I typed the ', new_cursor_offset=12)
    """
    candidate = find_candidate(
        text,
        cursor_offset,
        rules,
        code_delimiter=code_delimiter,
        min_length=min_length,
    )
    if candidate is None:
        return None

    return apply_candidate(text, candidate, cursor_offset)
