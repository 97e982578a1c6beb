"""
Remote dictionary updates.

Fetches a JSON object of typo -> correction from a configured URL, at most
once per check interval, using the ETag from the previous response for a
conditional GET. The last good table is cached (on disk when a cache path
is configured) so it survives restarts.

Every failure mode resolves to "no update": a 304, a non-2xx status, a
timeout, a connection error or a malformed body all leave the cached table
in place until the next interval.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from contextlib import AbstractContextManager, nullcontext
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import requests

from safecorrect.config import RemoteConfig
from safecorrect.engine.filter import Rules
from safecorrect.exceptions import RemoteFetchError

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 60 * 60
MIN_CHECK_INTERVAL_HOURS = 1


# =============================================================================
# DATA STRUCTURES
# =============================================================================


@dataclass
class RemoteCacheState:
    """What is remembered between refreshes."""

    etag: str = ""
    last_checked: float = 0.0
    rules: Rules | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "etag": self.etag,
            "last_checked": self.last_checked,
            "rules": self.rules,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RemoteCacheState:
        """Create from dictionary, tolerating missing or bad fields."""
        rules = data.get("rules")
        try:
            last_checked = float(data.get("last_checked", 0) or 0)
        except (TypeError, ValueError):
            last_checked = 0.0
        return cls(
            etag=str(data.get("etag") or ""),
            last_checked=last_checked,
            rules=normalize_remote_rules(rules) if isinstance(rules, dict) else None,
        )


@dataclass
class FetchResult:
    """Outcome of one HTTP round trip."""

    status_code: int
    rules: Rules | None = None
    etag: str = ""

    @property
    def not_modified(self) -> bool:
        return self.status_code == 304


def normalize_remote_rules(data: dict[str, Any]) -> Rules:
    """Lowercase a decoded remote table, dropping non-string and identity rules."""
    rules: Rules = {}
    for typo, correction in data.items():
        if not isinstance(correction, str):
            continue
        typo = str(typo).strip().lower()
        correction = correction.strip().lower()
        if typo and correction and typo != correction:
            rules[typo] = correction
    return rules


def http_session(
    session: requests.Session | None = None,
) -> AbstractContextManager[requests.Session]:
    """The injected session left open, or a fresh one closed on exit."""
    if session is not None:
        return nullcontext(session)
    return requests.Session()


# =============================================================================
# CLIENT
# =============================================================================


@dataclass
class RemoteRulesClient:
    """
    Rate-limited, conditional fetcher for the remote rule table.

    Attributes:
        config: RemoteConfig with URL, interval, timeout and cache path.
        session: requests.Session used for HTTP (created on demand).
        clock: Returns the current time in seconds (patched in tests).

    Example:
        >>> client = RemoteRulesClient(RemoteConfig(enabled=True, url="https://example.com/r.json"))
        >>> rules = client.maybe_refresh()  # None unless a new table arrived
        >>> cached = client.load_cached()
    """

    config: RemoteConfig
    session: requests.Session | None = None
    clock: Callable[[], float] = time.time
    state: RemoteCacheState = field(default_factory=RemoteCacheState)

    def __post_init__(self) -> None:
        """Load the persisted cache state, if any."""
        if self.config.cache_path and self.config.cache_path.exists():
            self._load_state()

    # -------------------------------------------------------------------------
    # Cache
    # -------------------------------------------------------------------------

    def _load_state(self) -> None:
        path = self.config.cache_path
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Failed to load remote cache %s: %s", path, e)
            return

        if not isinstance(data, dict):
            logger.warning("Ignoring malformed remote cache %s", path)
            return

        self.state = RemoteCacheState.from_dict(data)
        logger.debug(
            "Loaded remote cache: %d rules, etag=%r",
            len(self.state.rules or {}),
            self.state.etag,
        )

    def _save_state(self) -> None:
        path = self.config.cache_path
        if not path:
            return

        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(self.state.to_dict(), f)
        except OSError as e:
            # A lost cache only costs a re-download next session
            logger.warning("Failed to save remote cache %s: %s", path, e)

    def load_cached(self) -> Rules | None:
        """The last good remote table, or None if there is none."""
        if self.state.rules is None:
            return None
        return dict(self.state.rules)

    # -------------------------------------------------------------------------
    # Refresh
    # -------------------------------------------------------------------------

    @property
    def interval_seconds(self) -> float:
        hours = max(MIN_CHECK_INTERVAL_HOURS, self.config.check_interval_hours)
        return hours * SECONDS_PER_HOUR

    def is_due(self) -> bool:
        """Whether the check interval has elapsed since the last attempt."""
        return self.clock() - self.state.last_checked >= self.interval_seconds

    def fetch(self, etag: str = "") -> FetchResult:
        """
        Perform one conditional GET.

        Args:
            etag: Validator from the previous response, sent as If-None-Match.

        Returns:
            FetchResult. `rules` is set only for a 2xx response with a JSON
            object body.

        Raises:
            RemoteFetchError: On transport errors or an unparseable body.
        """
        headers = {"Accept": "application/json"}
        if etag:
            headers["If-None-Match"] = etag

        try:
            with http_session(self.session) as http:
                response = http.get(
                    self.config.url,
                    headers=headers,
                    timeout=self.config.timeout_seconds,
                )
        except requests.RequestException as e:
            raise RemoteFetchError(f"Request to {self.config.url} failed: {e}") from e

        if response.status_code == 304 or not response.ok:
            return FetchResult(status_code=response.status_code)

        try:
            data = json.loads(response.text)
        except json.JSONDecodeError as e:
            raise RemoteFetchError(f"Remote rules are not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise RemoteFetchError("Remote rules must be a JSON object")

        return FetchResult(
            status_code=response.status_code,
            rules=normalize_remote_rules(data),
            etag=response.headers.get("ETag", ""),
        )

    def maybe_refresh(self) -> Rules | None:
        """
        Refresh the remote table if enabled and due.

        Never raises. The check time is recorded whatever the outcome, so a
        failing endpoint is retried only after the next interval.

        Returns:
            The new table if one was downloaded, otherwise None.
        """
        if not self.config.is_active:
            return None

        if not self.is_due():
            logger.debug("Remote rules checked recently; skipping refresh")
            return None

        try:
            result = self.fetch(self.state.etag)
        except RemoteFetchError as e:
            logger.warning("%s; keeping cached remote rules", e)
            self.state.last_checked = self.clock()
            self._save_state()
            return None

        self.state.last_checked = self.clock()

        if result.rules is None:
            if result.not_modified:
                logger.debug("Remote rules not modified")
            else:
                logger.warning(
                    "Remote rules request returned HTTP %d; keeping cached rules",
                    result.status_code,
                )
            self._save_state()
            return None

        self.state.etag = result.etag
        self.state.rules = result.rules
        self._save_state()
        logger.info("Fetched %d remote rules", len(result.rules))
        return dict(result.rules)
