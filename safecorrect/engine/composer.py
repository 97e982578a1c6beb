"""
Rule composer: one effective rule table from three sources.

Precedence, lowest to highest (later wins on key collision):

    filtered base table < remote table < personal table

The composer owns the only mutable state in the engine: a reference to the
current RuleTableSnapshot. Every rebuild produces a new immutable snapshot
and swaps that single reference, so a lookup sees either the old table or
the new one, never a half-built table.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from safecorrect.engine.filter import Rules
from safecorrect.wordlists import is_ambiguous, is_dialect_protected

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "#"

_EMPTY_RULES: Mapping[str, str] = MappingProxyType({})


# =============================================================================
# PERSONAL RULES
# =============================================================================


def _parse_structured_rules(text: str) -> Rules | None:
    """Parse a JSON object of typo -> correction, or None if not one."""
    try:
        data = json.loads(text)
    except (ValueError, RecursionError):
        return None

    if not isinstance(data, dict):
        return None

    rules: Rules = {}
    for typo, correction in data.items():
        if not isinstance(correction, str):
            continue
        rules[typo.strip().lower()] = correction.strip().lower()
    return rules


def _parse_line_rules(text: str) -> Rules:
    """Parse `typo correction...` lines; the correction may span several words."""
    rules: Rules = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith(COMMENT_PREFIX):
            continue

        parts = stripped.split()
        if len(parts) < 2:
            continue

        rules[parts[0].lower()] = " ".join(parts[1:]).lower()
    return rules


def parse_personal_rules(text: str | None) -> Rules:
    """
    Parse user-authored rules in either supported shape.

    A trimmed input wrapped in braces is tried as a JSON object first; if
    that fails the whole input is parsed as lines instead. Results from the
    two parsers are never mixed.

    Args:
        text: Personal rules setting, may be None or empty.

    Returns:
        Rule table with lowercase keys and values, identity rules dropped.

    Example:
        >>> parse_personal_rules("teh the\\n# comment\\nbtw by the way")
        {'teh': 'the', 'btw': 'by the way'}
        >>> parse_personal_rules('{"Recieve": "Receive"}')
        {'recieve': 'receive'}
    """
    if not text:
        return {}

    trimmed = text.strip()
    rules: Rules | None = None
    if trimmed.startswith("{") and trimmed.endswith("}"):
        rules = _parse_structured_rules(trimmed)
        if rules is None:
            logger.debug("Personal rules look like JSON but do not parse; using line format")

    if rules is None:
        rules = _parse_line_rules(trimmed)

    return {typo: fix for typo, fix in rules.items() if typo and fix and typo != fix}


# =============================================================================
# COMPOSITION
# =============================================================================


def is_composable(typo: str, correction: str) -> bool:
    """Whether a merged rule may appear in the effective table."""
    if not typo or not correction or typo == correction:
        return False
    if is_dialect_protected(typo) or is_ambiguous(typo):
        return False
    if is_ambiguous(correction):
        return False
    return True


def compose_rules(
    base: Mapping[str, str] | None,
    remote: Mapping[str, str] | None = None,
    personal: Mapping[str, str] | None = None,
) -> Rules:
    """
    Merge the three rule sources into one table.

    Later sources override earlier ones. Rules keyed by a protected or
    ambiguous word, or pointing at an ambiguous word, are excluded whatever
    their source.

    Example:
        >>> compose_rules({"recieve": "recieve", "wierd": "weird"}, None, {"wierd": "wired"})
        {'wierd': 'wired'}
    """
    merged: Rules = {}
    for source in (base, remote, personal):
        if source:
            merged.update(source)

    return {typo: fix for typo, fix in merged.items() if is_composable(typo, fix)}


@dataclass(frozen=True)
class RuleTableSnapshot:
    """An immutable effective rule table plus where it came from."""

    rules: Mapping[str, str] = field(default_factory=lambda: _EMPTY_RULES)
    version: int = 0
    base_size: int = 0
    remote_size: int = 0
    personal_size: int = 0

    def __len__(self) -> int:
        return len(self.rules)

    def __contains__(self, typo: object) -> bool:
        return typo in self.rules


class RuleComposer:
    """
    Holds the current effective rule table and rebuilds it on change.

    Readers use `rules` or `snapshot` without locking; the attribute read is
    a single reference load. Writers are serialized by a lock so two
    concurrent rebuilds cannot interleave their sources.

    Attributes:
        snapshot: The current RuleTableSnapshot.

    Example:
        >>> composer = RuleComposer()
        >>> len(composer.rules)
        0
        >>> composer.update_base({"recieve": "receive"})
        >>> composer.update_personal("teh the")
        >>> sorted(composer.rules.items())
        [('recieve', 'receive'), ('teh', 'the')]
    """

    def __init__(
        self,
        base: Mapping[str, str] | None = None,
        remote: Mapping[str, str] | None = None,
        personal_text: str | None = None,
    ):
        """
        Initialize the composer.

        Args:
            base: Filtered base table (empty until the deferred load completes).
            remote: Remote table, if one is cached.
            personal_text: Raw personal rules setting.
        """
        self._lock = threading.Lock()
        self._base: Rules = dict(base or {})
        self._remote: Rules = dict(remote or {})
        self._personal_text = personal_text or ""
        self._personal: Rules = parse_personal_rules(self._personal_text)
        self.snapshot = RuleTableSnapshot()
        self._rebuild_locked()

    @property
    def rules(self) -> Mapping[str, str]:
        """The current effective table (read-only)."""
        return self.snapshot.rules

    @property
    def version(self) -> int:
        """Monotonic counter, bumped on each rebuild."""
        return self.snapshot.version

    def update_base(self, base: Mapping[str, str] | None) -> None:
        """Replace the base table (e.g. after the deferred load) and rebuild."""
        with self._lock:
            self._base = dict(base or {})
            self._rebuild_locked()

    def update_remote(self, remote: Mapping[str, str] | None) -> None:
        """Replace the remote table (e.g. after a refresh) and rebuild."""
        with self._lock:
            self._remote = dict(remote or {})
            self._rebuild_locked()

    def update_personal(self, personal_text: str | None) -> bool:
        """
        Re-parse the personal rules setting and rebuild if it changed.

        Returns:
            True if a rebuild happened.
        """
        personal_text = personal_text or ""
        with self._lock:
            if personal_text == self._personal_text:
                return False
            self._personal_text = personal_text
            self._personal = parse_personal_rules(personal_text)
            self._rebuild_locked()
            return True

    def _rebuild_locked(self) -> None:
        """Build a new snapshot and swap it in. Caller holds the lock."""
        rules = compose_rules(self._base, self._remote, self._personal)
        self.snapshot = RuleTableSnapshot(
            rules=MappingProxyType(rules),
            version=self.snapshot.version + 1,
            base_size=len(self._base),
            remote_size=len(self._remote),
            personal_size=len(self._personal),
        )
        logger.info(
            "Rule table v%d: %d rules (base=%d, remote=%d, personal=%d)",
            self.snapshot.version,
            len(rules),
            len(self._base),
            len(self._remote),
            len(self._personal),
        )
