"""
Protected word lists and thresholds for safe autocorrection.

These lists encode what must NEVER be auto-corrected:
- UK English spellings (correct in the preferred dialect)
- Ambiguous words (valid words commonly confused with other valid words)

They also hold the short-word exception list: typos shorter than
MIN_SAFE_LENGTH that are common enough to correct anyway.

All sets are lowercase and immutable. Both the dictionary filter (build time)
and the safety filter (lookup time) consult them.
"""

# =============================================================================
# CONSTANTS
# =============================================================================

# Words shorter than this are only corrected when whitelisted below
MIN_SAFE_LENGTH = 5

# Characters that end a word (in addition to any whitespace)
BOUNDARY_PUNCTUATION = frozenset(".,;:!?()[]{}\"'")

# Inline code delimiter (markdown backtick)
DEFAULT_CODE_DELIMITER = "`"

# Supported dialect preferences
SUPPORTED_DIALECTS = ("uk",)


# =============================================================================
# DIALECT-PROTECTED WORDS
# =============================================================================

# UK English words that are correct and must never be "corrected"
UK_ENGLISH_WORDS = frozenset(
    {
        # -our
        "colour",
        "colours",
        "coloured",
        "colouring",
        "favour",
        "favours",
        "favoured",
        "favouring",
        "favourite",
        "favourites",
        "behaviour",
        "behaviours",
        "behavioural",
        "honour",
        "honours",
        "honoured",
        "honouring",
        "honourable",
        "labour",
        "labours",
        "laboured",
        "labouring",
        "labourer",
        "labourers",
        # -ise / -isation
        "organise",
        "organises",
        "organised",
        "organising",
        "organisation",
        "organisations",
        "realise",
        "realises",
        "realised",
        "realising",
        "realisation",
        "realisations",
        "recognise",
        "recognises",
        "recognised",
        "recognising",
        "recognition",
        # -yse
        "analyse",
        "analyses",
        "analysed",
        "analysing",
        "analysis",
        # -re
        "centre",
        "centres",
        "centred",
        "centring",
        "metre",
        "metres",
        "theatre",
        "theatres",
        "theatrical",
        # -ence / noun-verb pairs
        "defence",
        "defences",
        "licence",
        "licences",
        "licenced",
        "licencing",
        "practice",
        "practise",
        "practised",
        "practising",
        "programme",
        "programmes",
        # doubled consonants
        "travelled",
        "travelling",
        "traveller",
        "travellers",
        "cancelled",
        "cancelling",
        "cancellation",
    }
)


# =============================================================================
# AMBIGUOUS WORDS
# =============================================================================

# Valid words too easily confused with another valid word to correct
# in either direction
AMBIGUOUS_WORDS = frozenset(
    {
        "from",
        "form",
        "for",
        "far",
        "fora",
        "to",
        "too",
        "two",
        "there",
        "their",
        "they're",
        "its",
        "it's",
        "your",
        "you're",
        "were",
        "we're",
        "than",
        "then",
        "affect",
        "effect",
        "accept",
        "except",
        "advice",
        "advise",
        "loose",
        "lose",
        "passed",
        "past",
        "principal",
        "principle",
        "stationary",
        "stationery",
        "weather",
        "whether",
        "who",
        "whom",
        "which",
        "witch",
    }
)


# =============================================================================
# SHORT-WORD EXCEPTIONS
# =============================================================================

# Very common short typos that are safe to correct despite MIN_SAFE_LENGTH
SAFE_SHORT_TYPOS: dict[str, str] = {
    "teh": "the",
    "adn": "and",
    "taht": "that",
    "thsi": "this",
    "woudl": "would",
    "wolud": "would",
    "coudl": "could",
    "shoudl": "should",
    "waht": "what",
    "hwat": "what",
}


def is_dialect_protected(word: str) -> bool:
    """Check if a lowercase word is a protected UK spelling."""
    return word in UK_ENGLISH_WORDS


def is_ambiguous(word: str) -> bool:
    """Check if a lowercase word is too ambiguous to correct."""
    return word in AMBIGUOUS_WORDS


def is_whitelisted_short_typo(typo: str, correction: str) -> bool:
    """Check if (typo, correction) exactly matches the short-word exceptions."""
    return SAFE_SHORT_TYPOS.get(typo) == correction
