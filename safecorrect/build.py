"""
Build the base rule table from codespell-format sources.

Downloads (or reads) one or more `typo->correction[,...]` sources, filters
each one, appends the short-typo exceptions, merges them (later sources win)
and writes the sorted result as JSON.

Usage:
    uv run safecorrect-build-dict
    uv run safecorrect-build-dict --no-download --source dictionaries/codespell.txt
    uv run python scripts/build_dictionary.py --output safecorrect/data/base_safe.json

Dictionary data from codespell is licensed CC BY-SA 3.0.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import requests

from safecorrect.dictionary import packaged_dictionary_path, save_rules
from safecorrect.engine.filter import FilterStats, Rules, filter_source, merge_tables
from safecorrect.exceptions import DictionaryLoadError
from safecorrect.remote import http_session
from safecorrect.wordlists import MIN_SAFE_LENGTH, SAFE_SHORT_TYPOS

try:
    from spellchecker import SpellChecker
except ImportError:
    SpellChecker = None  # type: ignore

logger = logging.getLogger(__name__)

CODESPELL_URLS = (
    "https://raw.githubusercontent.com/codespell-project/codespell/master/codespell_lib/data/dictionary.txt",
    "https://raw.githubusercontent.com/codespell-project/codespell/master/codespell_lib/data/uk.txt",
)

LOCAL_SOURCES = (
    Path("dictionaries") / "codespell.txt",
    Path("dictionaries") / "codespell-uk.txt",
)

DOWNLOAD_TIMEOUT = (10, 60)  # (connect, read) seconds


# =============================================================================
# DATA STRUCTURES
# =============================================================================


@dataclass
class BuildReport:
    """Outcome of a dictionary build."""

    sources_used: list[str] = field(default_factory=list)
    sources_failed: list[str] = field(default_factory=list)
    per_source: dict[str, FilterStats] = field(default_factory=dict)
    unknown_corrections_dropped: int = 0
    total_rules: int = 0


# =============================================================================
# SOURCES
# =============================================================================


def is_url(source: str) -> bool:
    """True for http(s) sources."""
    return source.startswith(("http://", "https://"))


def read_source(source: str, session: requests.Session | None = None) -> str:
    """
    Read a codespell source from a URL or a local path.

    Raises:
        DictionaryLoadError: On any download or read failure.
    """
    if is_url(source):
        try:
            with http_session(session) as http:
                response = http.get(source, timeout=DOWNLOAD_TIMEOUT)
                response.raise_for_status()
        except requests.RequestException as e:
            raise DictionaryLoadError(f"Failed to download {source}: {e}") from e
        # raw.githubusercontent serves text/plain without a charset
        return response.content.decode("utf-8", errors="replace")

    try:
        return Path(source).read_text(encoding="utf-8")
    except OSError as e:
        raise DictionaryLoadError(f"Failed to read {source}: {e}") from e


def default_sources(download: bool = True) -> list[str]:
    """Codespell URLs (if downloading) plus any local copies that exist."""
    sources = list(CODESPELL_URLS) if download else []
    sources.extend(str(path) for path in LOCAL_SOURCES if path.exists())
    return sources


# =============================================================================
# BUILD
# =============================================================================


def drop_unknown_corrections(rules: Rules, spell: SpellChecker) -> tuple[Rules, int]:
    """
    Keep only rules whose correction words are all known to the spellchecker.

    Returns:
        (kept rules, number dropped)
    """
    kept: Rules = {}
    for typo, correction in rules.items():
        words = correction.replace("-", " ").split()
        if words and not spell.unknown(words):
            kept[typo] = correction
    return kept, len(rules) - len(kept)


def build_rules(
    sources: Iterable[str],
    min_length: int = MIN_SAFE_LENGTH,
    require_known_correction: bool = False,
    session: requests.Session | None = None,
) -> tuple[Rules, BuildReport]:
    """
    Build a merged, filtered base table from several sources.

    Failing sources are logged and skipped. The short-typo exceptions are
    merged last, so they always win.

    Args:
        sources: URLs or paths, in increasing precedence.
        min_length: Minimum typo length unless whitelisted.
        require_known_correction: Drop rules whose correction is not a
            known English word (needs pyspellchecker).
        session: Optional requests session for downloads.

    Returns:
        (rules, report)
    """
    report = BuildReport()
    tables: list[Rules] = []

    for source in sources:
        logger.info("Reading %s", source)
        try:
            content = read_source(source, session=session)
        except DictionaryLoadError as e:
            logger.warning("%s", e)
            report.sources_failed.append(source)
            continue

        stats = FilterStats()
        table = filter_source(content, min_length=min_length, stats=stats)
        logger.info(
            "  Parsed %d rules (%d discarded, %d malformed)",
            stats.rules_kept,
            stats.rules_discarded,
            stats.malformed,
        )
        report.sources_used.append(source)
        report.per_source[source] = stats
        tables.append(table)

    rules = merge_tables(tables)

    if require_known_correction:
        if SpellChecker is None:
            logger.warning("pyspellchecker not installed; skipping known-correction check")
        else:
            rules, dropped = drop_unknown_corrections(rules, SpellChecker())
            report.unknown_corrections_dropped = dropped
            logger.info("  Dropped %d rules with unknown corrections", dropped)

    logger.info("Adding %d safe short typos", len(SAFE_SHORT_TYPOS))
    rules = merge_tables([rules, SAFE_SHORT_TYPOS])
    rules = {typo: rules[typo] for typo in sorted(rules)}

    report.total_rules = len(rules)
    return rules, report


# =============================================================================
# CLI
# =============================================================================


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build the UK English safe autocorrect dictionary.",
    )
    parser.add_argument(
        "--source",
        action="append",
        dest="sources",
        metavar="URL_OR_PATH",
        help="codespell-format source (repeatable; later sources win)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=packaged_dictionary_path(),
        help="output JSON path (default: packaged base_safe.json)",
    )
    parser.add_argument(
        "--no-download",
        action="store_true",
        help="only use local sources when --source is not given",
    )
    parser.add_argument(
        "--min-length",
        type=int,
        default=MIN_SAFE_LENGTH,
        help=f"minimum typo length unless whitelisted (default: {MIN_SAFE_LENGTH})",
    )
    parser.add_argument(
        "--require-known-correction",
        action="store_true",
        help="drop rules whose correction is not a known word (needs pyspellchecker)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    sources = args.sources or default_sources(download=not args.no_download)
    if not sources:
        logger.error("No dictionary sources available")
        return 1

    logger.info("Building UK English autocorrect dictionary...")
    rules, report = build_rules(
        sources,
        min_length=args.min_length,
        require_known_correction=args.require_known_correction,
    )

    if not report.sources_used:
        logger.error("All sources failed; not overwriting %s", args.output)
        return 1

    try:
        save_rules(rules, args.output)
    except OSError:
        return 1

    logger.info("Dictionary built: %d rules -> %s", report.total_rules, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
