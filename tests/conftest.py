"""
Pytest configuration and fixtures for SafeCorrect tests.
"""

from pathlib import Path

import pytest


@pytest.fixture(scope="session")
def fixtures_dir() -> Path:
    """Return path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def codespell_sample() -> str:
    """A small codespell-format source with every kind of line."""
    return "\n".join(
        [
            "# codespell sample",
            "",
            "recieve->receive",
            "accomodate->accommodate",
            "analize->analyze, analyse",
            "colour->color",
            "teh->the",
            "tthe->the",
            "fomr->form, from",
            "thier->their",
            "taht->tact",
            "broken line without arrow",
            "->nothing",
            "empty->",
            "wierd->weird",
        ]
    )


@pytest.fixture
def sample_rules() -> dict[str, str]:
    """A composed rule table for extractor and rewriter tests."""
    return {
        "teh": "the",
        "siad": "said",
        "wierd": "weird",
        "recieve": "receive",
        "accomodate": "accommodate",
        "realy": "really",
    }


class FakeHost:
    """In-memory HostEditor for session tests."""

    def __init__(self, text="", cursor=None, location_id="block-1"):
        self.text = text
        self.cursor = len(text) if cursor is None else cursor
        self.location_id = location_id
        self.replacements: list[tuple[str, int]] = []

    def type(self, chars: str) -> None:
        """Insert characters at the cursor."""
        self.text = self.text[: self.cursor] + chars + self.text[self.cursor :]
        self.cursor += len(chars)

    def get_current_text(self):
        return self.text

    def get_cursor_offset(self):
        return self.cursor

    def get_location_id(self):
        return self.location_id

    def apply_replacement(self, new_text, new_cursor_offset):
        self.replacements.append((new_text, new_cursor_offset))
        self.text = new_text
        self.cursor = new_cursor_offset


@pytest.fixture
def host() -> FakeHost:
    """An empty fake editor block."""
    return FakeHost()


@pytest.fixture
def make_host():
    """Factory for fake editor blocks with given text and cursor."""
    return FakeHost
