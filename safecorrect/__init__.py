"""
SafeCorrect: conservative as-you-type autocorrection for UK English.

Corrects common typos the moment a word is finished, using a filtered
codespell-derived table plus remote and personal rules, while refusing to
touch UK spellings, easily confused words, very short words and inline code.

Example:
    >>> import safecorrect
    >>> safecorrect.replace_word_before_cursor("I typed teh ", 12, {"teh": "the"})
    ReplacementResult(new_text='I typed the ', new_cursor_offset=12)

    >>> # Inside an editor integration
    >>> session = safecorrect.AutocorrectSession(host)
    >>> session.start()
    >>> session.handle_key_event(" ")
"""

from safecorrect.config import AutocorrectConfig, RemoteConfig
from safecorrect.dictionary import load_base_rules, load_rules, save_rules
from safecorrect.engine import (
    CorrectionCandidate,
    ReplacementResult,
    RuleComposer,
    RuleTableSnapshot,
    Rules,
    compose_rules,
    filter_source,
    find_candidate,
    parse_personal_rules,
    preserve_case,
    replace_word_before_cursor,
    should_trigger,
)
from safecorrect.exceptions import (
    ConfigurationError,
    DictionaryLoadError,
    RemoteFetchError,
    SafeCorrectError,
)
from safecorrect.remote import RemoteRulesClient
from safecorrect.session import AutocorrectSession, DedupGuard, HostEditor

__version__ = "0.1.0"
__all__ = [
    # Main API
    "AutocorrectSession",
    "HostEditor",
    "DedupGuard",
    "replace_word_before_cursor",
    "find_candidate",
    "should_trigger",
    "preserve_case",
    # Rule tables
    "Rules",
    "RuleComposer",
    "RuleTableSnapshot",
    "compose_rules",
    "filter_source",
    "parse_personal_rules",
    "load_rules",
    "load_base_rules",
    "save_rules",
    "RemoteRulesClient",
    # Results
    "CorrectionCandidate",
    "ReplacementResult",
    # Configuration
    "AutocorrectConfig",
    "RemoteConfig",
    # Exceptions
    "SafeCorrectError",
    "ConfigurationError",
    "DictionaryLoadError",
    "RemoteFetchError",
]
