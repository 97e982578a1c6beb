"""
Tests for the autocorrect session (host integration, dedup, deferred loading).
"""

from concurrent.futures import wait
from unittest.mock import MagicMock

import pytest

from safecorrect.config import AutocorrectConfig, RemoteConfig
from safecorrect.engine.composer import RuleComposer
from safecorrect.remote import RemoteRulesClient
from safecorrect.session import AutocorrectSession, DedupGuard, text_signature

RULES = {"recieve": "receive", "wierd": "weird", "accomodate": "accommodate"}


@pytest.fixture
def composer():
    return RuleComposer(base=RULES, personal_text="teh the")


@pytest.fixture
def session(host, composer):
    return AutocorrectSession(host, AutocorrectConfig(), composer=composer)


class TestDedupGuard:
    """Tests for content-identity suppression."""

    def test_fresh_guard(self):
        assert not DedupGuard().is_duplicate("block-1", "teh ")

    def test_same_state_is_duplicate(self):
        guard = DedupGuard()
        guard.record("block-1", "teh ")
        assert guard.is_duplicate("block-1", "teh ")

    def test_other_block_or_text_is_not(self):
        guard = DedupGuard()
        guard.record("block-1", "teh ")
        assert not guard.is_duplicate("block-2", "teh ")
        assert not guard.is_duplicate("block-1", "teh teh ")

    def test_reset(self):
        guard = DedupGuard()
        guard.record("block-1", "teh ")
        guard.reset()
        assert not guard.is_duplicate("block-1", "teh ")

    def test_signature_hashes_content(self):
        location, digest = text_signature("b", "some text")
        assert location == "b"
        assert len(digest) == 40


class TestCorrectionPaths:
    """Tests for the three trigger paths."""

    def test_key_event_corrects(self, session, host):
        host.type("I typed teh ")

        assert session.handle_key_event(" ") is True
        assert host.text == "I typed the "
        assert host.cursor == len("I typed the ")

    def test_key_event_ignores_other_keys(self, session, host):
        host.type("teh ")
        assert session.handle_key_event("a") is False
        assert session.handle_key_event(None) is False
        assert host.replacements == []

    def test_enter_key(self, session, host):
        host.type("recieve\n")
        assert session.handle_key_event("Enter") is True
        assert host.text == "receive\n"

    def test_input_event_punctuation(self, session, host):
        host.type("It was Wierd.")
        assert session.handle_input_event() is True
        assert host.text == "It was Weird."

    def test_no_trigger_character(self, session, host):
        host.type("teh")
        assert session.handle_input_event() is False

    def test_cursor_shift_applied(self, session, host):
        host.type("accomodate ")
        session.handle_input_event()
        assert host.text == "accommodate "
        assert host.cursor == len("accommodate ")

    def test_mid_text_cursor(self, session, make_host):
        host = make_host("recieve  tail", cursor=8)
        session.host = host

        assert session.handle_input_event() is True
        assert host.text == "receive  tail"
        assert host.cursor == 8

    def test_protected_words_untouched(self, session, host):
        session.update_personal_rules("colour color\nfrom form")
        for word in ("colour ", "from "):
            host.text, host.cursor = word, len(word)
            assert session.handle_input_event() is False
        assert host.replacements == []

    def test_disabled(self, host, composer):
        session = AutocorrectSession(host, AutocorrectConfig(enabled=False), composer=composer)
        host.type("teh ")
        assert session.handle_key_event(" ") is False


class TestIdempotence:
    """Duplicate and late signals must not correct twice."""

    def test_duplicate_signals(self, session, host):
        host.type("teh ")
        original = host.text

        assert session.handle_key_event(" ") is True
        assert session.handle_input_event() is False
        assert session.poll() is False
        assert len(host.replacements) == 1

        # A late signal that still sees the pre-correction text is suppressed
        host.text, host.cursor = original, len(original)
        assert session.handle_input_event() is False
        assert len(host.replacements) == 1

    def test_same_word_again_later_is_corrected(self, session, host):
        host.type("teh ")
        session.handle_key_event(" ")
        host.type("and teh ")

        assert session.handle_key_event(" ") is True
        assert host.text == "the and the "

    def test_same_text_in_other_block_is_corrected(self, session, make_host):
        session.host = make_host("teh ", location_id="a")
        assert session.handle_input_event() is True

        session.host = make_host("teh ", location_id="b")
        assert session.handle_input_event() is True


class TestPolling:
    """Tests for the poll-based fallback."""

    def test_first_poll_only_records(self, session, host):
        host.type("teh ")
        assert session.poll() is False
        assert host.replacements == []

    def test_poll_after_change(self, session, host):
        host.type("I typed ")
        session.poll()

        host.type("teh ")
        assert session.poll() is True
        assert host.text == "I typed the "

        # No change since the correction
        assert session.poll() is False

    def test_poll_unchanged_text(self, session, host):
        host.type("teh")
        session.poll()
        assert session.poll() is False

    def test_poll_new_block_resets(self, session, host, make_host):
        host.type("hello ")
        session.poll()

        session.host = make_host("teh ", location_id="block-2")
        assert session.poll() is False


class TestHostFailures:
    """Host problems abort the attempt silently."""

    def test_missing_cursor(self, session, make_host):
        session.host = make_host("teh ")
        session.host.cursor = None
        assert session.handle_input_event() is False

    def test_missing_text(self, session, make_host):
        host = make_host("")
        host.text = None
        session.host = host
        assert session.handle_input_event() is False
        assert session.poll() is False

    def test_missing_location(self, session, make_host):
        session.host = make_host("teh ", location_id=None)
        assert session.handle_input_event() is False

    def test_host_exception_is_contained(self, session):
        host = MagicMock()
        host.get_location_id.return_value = "b"
        host.get_current_text.return_value = "teh "
        host.get_cursor_offset.return_value = 4
        host.apply_replacement.side_effect = RuntimeError("editor went away")
        session.host = host

        assert session.handle_input_event() is False

    def test_poll_host_exception_is_contained(self, session):
        host = MagicMock()
        host.get_location_id.side_effect = RuntimeError("boom")
        session.host = host
        assert session.poll() is False


class TestLoading:
    """Tests for deferred loading, reload and diagnostics."""

    def test_lookups_before_load_find_nothing(self, host):
        session = AutocorrectSession(host, AutocorrectConfig(personal_rules=""))
        host.type("recieve ")
        assert session.handle_input_event() is False

    def test_start_loads_base_in_background(self, host, tmp_path):
        dictionary = tmp_path / "base.json"
        dictionary.write_text('{"recieve": "receive"}', encoding="utf-8")
        config = AutocorrectConfig(dictionary_path=dictionary, personal_rules="")
        session = AutocorrectSession(host, config)

        try:
            futures = session.start()
            wait(futures, timeout=10)
        finally:
            session.close()

        assert session.composer.rules == {"recieve": "receive"}
        host.type("recieve ")
        assert session.handle_input_event() is True

    def test_start_applies_cached_and_refreshed_remote(self, host, tmp_path):
        dictionary = tmp_path / "base.json"
        dictionary.write_text('{"wierd": "wired"}', encoding="utf-8")
        config = AutocorrectConfig(
            dictionary_path=dictionary,
            personal_rules="",
            remote=RemoteConfig(enabled=True, url="https://example.com/r.json"),
        )
        remote_client = MagicMock(spec=RemoteRulesClient)
        remote_client.load_cached.return_value = {"wierd": "weird"}
        remote_client.maybe_refresh.return_value = {"realy": "really"}

        session = AutocorrectSession(host, config, remote_client=remote_client)
        try:
            wait(session.start(), timeout=10)
        finally:
            session.close()

        # The refreshed table replaces the cached one wholesale
        assert session.composer.rules == {"wierd": "wired", "realy": "really"}
        remote_client.maybe_refresh.assert_called_once()

    def test_failed_refresh_keeps_cached_remote(self, host, tmp_path):
        dictionary = tmp_path / "base.json"
        dictionary.write_text('{"wierd": "wired"}', encoding="utf-8")
        config = AutocorrectConfig(dictionary_path=dictionary, personal_rules="")
        remote_client = MagicMock(spec=RemoteRulesClient)
        remote_client.load_cached.return_value = {"wierd": "weird"}
        remote_client.maybe_refresh.return_value = None

        session = AutocorrectSession(host, config, remote_client=remote_client)
        try:
            wait(session.start(), timeout=10)
        finally:
            session.close()

        assert session.composer.rules == {"wierd": "weird"}

    def test_missing_dictionary_means_no_corrections(self, host, tmp_path):
        config = AutocorrectConfig(dictionary_path=tmp_path / "missing.json", personal_rules="")
        session = AutocorrectSession(host, config)
        assert session.reload() == 0

    def test_reload(self, host, tmp_path):
        dictionary = tmp_path / "base.json"
        dictionary.write_text('{"recieve": "receive"}', encoding="utf-8")
        session = AutocorrectSession(
            host, AutocorrectConfig(dictionary_path=dictionary, personal_rules="teh the")
        )

        assert session.reload() == 2

    def test_update_personal_rules(self, session, host):
        assert session.update_personal_rules("btw by the way") is True
        host.type("Btw ")
        assert session.handle_input_event() is False  # too short, no exception

        session.update_personal_rules("definately definitely")
        host.type("definately ")
        assert session.handle_input_event() is True
        assert host.text == "Btw definitely "

    def test_non_string_personal_values_never_reach_text(self, session, host):
        session.update_personal_rules('{"definately": ["definitely"]}')
        host.type("I definately ")
        assert session.handle_input_event() is False
        assert host.text == "I definately "

    def test_describe(self, session):
        info = session.describe()
        assert info["enabled"] is True
        assert info["has_teh"] is True
        assert info["rule_count"] == 4
        assert info["remote_enabled"] is False
