"""
Autocorrect session: the seam between the engine and a host editor.

The host tells us, unreliably, that the user may have finished a word:
through an input event, a key event, or a periodic poll. Signals can
arrive late, twice, or for the same edit through several paths. The session
turns all of them into one idempotent attempt:

1. Read text, cursor and block identity from the host.
2. Cheap trigger check on the character before the cursor.
3. Dedup guard: skip if this exact (block, text) state was already corrected.
4. Look up and rewrite against the current rule table snapshot.
5. Hand the result back to the host.

Loading the base dictionary and refreshing the remote table are deferred
to a background worker; until they finish, lookups simply see a smaller
(possibly empty) table.
"""

from __future__ import annotations

import hashlib
import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Protocol

from safecorrect.config import AutocorrectConfig
from safecorrect.dictionary import load_base_rules
from safecorrect.engine.composer import RuleComposer
from safecorrect.engine.rewriter import ReplacementResult, replace_word_before_cursor
from safecorrect.engine.trigger import is_boundary
from safecorrect.remote import RemoteRulesClient

logger = logging.getLogger(__name__)

# Keys whose insertion completes a word
TRIGGER_KEYS = frozenset({" ", "Enter"})


# =============================================================================
# HOST CONTRACT
# =============================================================================


class HostEditor(Protocol):
    """What the session needs from the surrounding editor integration."""

    def get_current_text(self) -> str | None:
        """Text of the block being edited, or None if nothing is being edited."""
        ...

    def get_cursor_offset(self) -> int | None:
        """Cursor offset within that text, or None if unknown."""
        ...

    def get_location_id(self) -> str | None:
        """Stable identity of the block being edited (e.g. a block UUID)."""
        ...

    def apply_replacement(self, new_text: str, new_cursor_offset: int) -> None:
        """Replace the block text and restore the cursor."""
        ...


# =============================================================================
# DEDUP GUARD
# =============================================================================


def text_signature(location_id: str, text: str) -> tuple[str, str]:
    """Identity of a (block, content) state."""
    return location_id, hashlib.sha1(text.encode("utf-8")).hexdigest()


@dataclass
class DedupGuard:
    """
    Suppresses a second correction of the same observed text state.

    Keyed by content identity, not time: a duplicate or delayed signal for a
    state that was already corrected is ignored however late it arrives.
    """

    last_signature: tuple[str, str] | None = None

    def is_duplicate(self, location_id: str, text: str) -> bool:
        return self.last_signature == text_signature(location_id, text)

    def record(self, location_id: str, text: str) -> None:
        self.last_signature = text_signature(location_id, text)

    def reset(self) -> None:
        self.last_signature = None


# =============================================================================
# SESSION
# =============================================================================


class AutocorrectSession:
    """
    Drives autocorrection for one host editor.

    Attributes:
        host: HostEditor implementation.
        config: AutocorrectConfig.
        composer: RuleComposer holding the effective rule table.
        remote_client: RemoteRulesClient for remote updates.
        guard: DedupGuard shared by all trigger paths.

    Example:
        >>> session = AutocorrectSession(host)
        >>> session.start()            # returns immediately
        >>> session.handle_key_event(" ")
        True
    """

    def __init__(
        self,
        host: HostEditor,
        config: AutocorrectConfig | None = None,
        composer: RuleComposer | None = None,
        remote_client: RemoteRulesClient | None = None,
        executor: Executor | None = None,
    ):
        self.host = host
        self.config = config or AutocorrectConfig()
        self.composer = composer or RuleComposer(personal_text=self.config.personal_rules)
        self.remote_client = remote_client or RemoteRulesClient(self.config.remote)
        self.guard = DedupGuard()

        self._executor = executor
        self._owns_executor = executor is None

        # Poll change detection
        self._poll_location: str | None = None
        self._poll_text: str | None = None

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def start(self) -> list[Future]:
        """
        Schedule the base dictionary load and remote refresh in the background.

        Returns:
            Futures for the two tasks (mainly for tests and shutdown).
        """
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="safecorrect")

        # Single worker: the refresh always runs after the base load
        return [
            self._executor.submit(self._load_local_sources),
            self._executor.submit(self._refresh_remote),
        ]

    def _load_local_sources(self) -> None:
        base = load_base_rules(self.config.dictionary_path)
        cached = self.remote_client.load_cached()
        if cached is not None:
            self.composer.update_remote(cached)
        self.composer.update_base(base)
        logger.info("Background loading complete: %d rules", len(self.composer.rules))

    def _refresh_remote(self) -> None:
        refreshed = self.remote_client.maybe_refresh()
        if refreshed is not None:
            self.composer.update_remote(refreshed)

    def reload(self) -> int:
        """
        Re-read the base dictionary and cached remote table synchronously.

        Returns:
            Number of rules in the rebuilt table.
        """
        self._load_local_sources()
        return len(self.composer.rules)

    def update_personal_rules(self, personal_text: str | None) -> bool:
        """Apply an edited personal rules setting."""
        self.config.personal_rules = personal_text or ""
        return self.composer.update_personal(personal_text)

    def close(self) -> None:
        """Shut down the background worker if this session created it."""
        if self._executor is not None and self._owns_executor:
            self._executor.shutdown(wait=False)
        self._executor = None

    def describe(self) -> dict[str, Any]:
        """Diagnostic summary of the current state."""
        snapshot = self.composer.snapshot
        return {
            "enabled": self.config.enabled,
            "rule_count": len(snapshot),
            "has_teh": "teh" in snapshot,
            "version": snapshot.version,
            "base_size": snapshot.base_size,
            "remote_size": snapshot.remote_size,
            "personal_size": snapshot.personal_size,
            "remote_enabled": self.config.remote.is_active,
        }

    # -------------------------------------------------------------------------
    # Trigger paths
    # -------------------------------------------------------------------------

    def handle_input_event(self) -> bool:
        """Host reported an input/selection change."""
        return self._attempt("input")

    def handle_key_event(self, key: str | None) -> bool:
        """Host reported a key press, after the key was inserted."""
        if key not in TRIGGER_KEYS:
            return False
        return self._attempt("key")

    def poll(self) -> bool:
        """
        Periodic check for a finished word.

        Only acts when the block content changed since the previous poll.
        The first poll of a new block just records it.
        """
        try:
            location_id = self.host.get_location_id()
            text = self.host.get_current_text()
        except Exception:
            logger.exception("Host error while polling")
            return False

        if location_id is None or not isinstance(text, str):
            return False

        if location_id != self._poll_location:
            self._poll_location = location_id
            self._poll_text = text
            return False

        if text == self._poll_text:
            return False
        self._poll_text = text

        return self._attempt("poll")

    # -------------------------------------------------------------------------
    # Core attempt
    # -------------------------------------------------------------------------

    def _attempt(self, path: str) -> bool:
        """One correction attempt. Never raises into the host."""
        if not self.config.enabled:
            return False

        try:
            return self._attempt_unguarded(path)
        except Exception:
            logger.exception("Autocorrect attempt via %s failed", path)
            return False

    def _attempt_unguarded(self, path: str) -> bool:
        location_id = self.host.get_location_id()
        text = self.host.get_current_text()
        if location_id is None or not isinstance(text, str) or not text:
            logger.debug("[%s] No block being edited", path)
            return False

        cursor = self.host.get_cursor_offset()
        if not isinstance(cursor, int) or cursor <= 0 or cursor > len(text):
            logger.debug("[%s] No usable cursor (%r)", path, cursor)
            return False

        if not is_boundary(text[cursor - 1]):
            return False

        if self.guard.is_duplicate(location_id, text):
            logger.debug("[%s] Already corrected this state; skipping", path)
            return False

        result = self.correct(text, cursor)
        if result is None:
            return False

        logger.debug("[%s] Replacing text, cursor %d -> %d", path, cursor, result.new_cursor_offset)
        self.host.apply_replacement(result.new_text, result.new_cursor_offset)
        self.guard.record(location_id, text)

        if location_id == self._poll_location:
            self._poll_text = result.new_text
        return True

    def correct(self, text: str, cursor: int) -> ReplacementResult | None:
        """Pure lookup against the current snapshot; no host interaction."""
        return replace_word_before_cursor(
            text,
            cursor,
            self.composer.rules,
            code_delimiter=self.config.code_delimiter,
            min_length=self.config.min_safe_length,
        )
