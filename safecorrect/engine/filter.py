"""
Dictionary filter for noisy typo sources.

Turns codespell-style lines:

    abandonned->abandoned
    accesories->accessories
    analize->analyse, analyze

into a conservative rule table. A rule survives only if it is unambiguous,
points toward the preferred (UK) spelling, and is either long enough to be a
safe guess or explicitly whitelisted as a short typo.

The filter is pure: the same input always yields the same table.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from safecorrect.wordlists import (
    MIN_SAFE_LENGTH,
    is_ambiguous,
    is_dialect_protected,
    is_whitelisted_short_typo,
)

logger = logging.getLogger(__name__)

Rules = dict[str, str]

RULE_SEPARATOR = "->"
CANDIDATE_SEPARATOR = ","
COMMENT_PREFIX = "#"


# =============================================================================
# DATA STRUCTURES
# =============================================================================


@dataclass
class FilterStats:
    """Counters for one filtering pass."""

    lines_read: int = 0
    rules_kept: int = 0
    malformed: int = 0
    dialect_typo: int = 0
    no_op: int = 0
    ambiguous: int = 0
    too_short: int = 0

    @property
    def rules_discarded(self) -> int:
        """Rules parsed successfully but rejected by a safety rule."""
        return self.dialect_typo + self.no_op + self.ambiguous + self.too_short


# =============================================================================
# PARSING
# =============================================================================


def parse_source_line(line: str) -> tuple[str, list[str]] | None:
    """
    Parse one `typo->correction[,correction2,...]` line.

    Args:
        line: Raw source line.

    Returns:
        (typo, candidates) lowercased, or None for blank, comment or
        malformed lines.

    Example:
        >>> parse_source_line("analize->Analyse, analyze")
        ('analize', ['analyse', 'analyze'])
        >>> parse_source_line("# comment") is None
        True
    """
    stripped = line.strip()
    if not stripped or stripped.startswith(COMMENT_PREFIX):
        return None

    typo, sep, right = stripped.partition(RULE_SEPARATOR)
    if not sep:
        return None

    typo = typo.strip().lower()
    candidates = [c.strip().lower() for c in right.split(CANDIDATE_SEPARATOR)]
    candidates = [c for c in candidates if c]

    if not typo or not candidates:
        return None

    return typo, candidates


def choose_correction(candidates: list[str]) -> str:
    """
    Pick one correction from an ordered candidate list.

    The first UK spelling wins; otherwise the first candidate in source
    order. Several UK candidates also resolve to the first in source order.
    """
    for candidate in candidates:
        if is_dialect_protected(candidate):
            return candidate
    return candidates[0]


# =============================================================================
# FILTERING
# =============================================================================


def rejection_reason(
    typo: str,
    correction: str,
    min_length: int = MIN_SAFE_LENGTH,
) -> str | None:
    """
    Decide whether a (typo, correction) pair may enter the rule table.

    Returns:
        None if the rule is safe, otherwise the name of the FilterStats
        counter describing why it was rejected.
    """
    if is_dialect_protected(typo):
        # Never treat a UK spelling as a typo, nor cross from UK to US
        return "dialect_typo"

    if correction == typo:
        return "no_op"

    if is_ambiguous(typo) or is_ambiguous(correction):
        return "ambiguous"

    if len(typo) < min_length and not is_whitelisted_short_typo(typo, correction):
        return "too_short"

    return None


def filter_lines(
    lines: Iterable[str],
    min_length: int = MIN_SAFE_LENGTH,
    stats: FilterStats | None = None,
) -> Rules:
    """
    Filter codespell-format lines into a safe rule table.

    Malformed lines are skipped, never fatal. On duplicate typos the
    last parsed line wins.

    Args:
        lines: Source lines.
        min_length: Minimum typo length unless whitelisted.
        stats: Optional FilterStats to accumulate counters into.

    Returns:
        Rule table mapping lowercase typo to lowercase correction.
    """
    if stats is None:
        stats = FilterStats()

    rules: Rules = {}
    for line in lines:
        stats.lines_read += 1

        parsed = parse_source_line(line)
        if parsed is None:
            stripped = line.strip()
            if stripped and not stripped.startswith(COMMENT_PREFIX):
                stats.malformed += 1
                logger.debug("Skipping malformed dictionary line: %r", stripped)
            continue

        typo, candidates = parsed
        if is_dialect_protected(typo):
            stats.dialect_typo += 1
            continue

        correction = choose_correction(candidates)
        reason = rejection_reason(typo, correction, min_length)
        if reason is not None:
            setattr(stats, reason, getattr(stats, reason) + 1)
            continue

        rules[typo] = correction

    stats.rules_kept = len(rules)
    return rules


def filter_source(
    content: str,
    min_length: int = MIN_SAFE_LENGTH,
    stats: FilterStats | None = None,
) -> Rules:
    """
    Filter a whole codespell-format document.

    Example:
        >>> filter_source("recieve->receive\\nteh->the\\ncolour->color\\n")
        {'recieve': 'receive', 'teh': 'the'}
    """
    return filter_lines(content.splitlines(), min_length=min_length, stats=stats)


def merge_tables(tables: Iterable[Rules]) -> Rules:
    """Merge rule tables; later tables override earlier ones on key collision."""
    merged: Rules = {}
    for table in tables:
        merged.update(table)
    return merged
