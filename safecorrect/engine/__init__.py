"""
Correction-decision engine.

Pure, synchronous components, leaf first:
- filter: raw codespell lines -> conservative rule table
- composer: base < remote < personal precedence, atomic table swap
- trigger: is this character a word boundary
- extractor: word before the cursor, lookup and safety filter
- rewriter: case-preserving splice and cursor math

Example:
    >>> from safecorrect.engine import replace_word_before_cursor
    >>> replace_word_before_cursor("Teh ", 4, {"teh": "the"})
    ReplacementResult(new_text='The ', new_cursor_offset=4)
"""

from safecorrect.engine.composer import (
    RuleComposer,
    RuleTableSnapshot,
    compose_rules,
    parse_personal_rules,
)
from safecorrect.engine.extractor import (
    CorrectionCandidate,
    find_candidate,
    in_code_span,
    is_safe_correction,
)
from safecorrect.engine.filter import (
    FilterStats,
    Rules,
    choose_correction,
    filter_lines,
    filter_source,
    merge_tables,
    parse_source_line,
)
from safecorrect.engine.rewriter import (
    ReplacementResult,
    apply_candidate,
    preserve_case,
    replace_word_before_cursor,
)
from safecorrect.engine.trigger import is_boundary, should_trigger

__all__ = [
    # Filter
    "Rules",
    "FilterStats",
    "parse_source_line",
    "choose_correction",
    "filter_lines",
    "filter_source",
    "merge_tables",
    # Composer
    "RuleComposer",
    "RuleTableSnapshot",
    "compose_rules",
    "parse_personal_rules",
    # Trigger
    "is_boundary",
    "should_trigger",
    # Extractor
    "CorrectionCandidate",
    "find_candidate",
    "in_code_span",
    "is_safe_correction",
    # Rewriter
    "ReplacementResult",
    "apply_candidate",
    "preserve_case",
    "replace_word_before_cursor",
]
