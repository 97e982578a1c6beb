"""
Exception classes for SafeCorrect.

All SafeCorrect exceptions inherit from SafeCorrectError,
making it easy to catch all library errors.

None of these ever reach the user while typing: the session layer turns
every failure into "no correction happened". They exist for the build
tooling, configuration loading and the low-level remote client.

Example:
    >>> try:
    ...     config = AutocorrectConfig.from_yaml("settings.yaml")
    ... except safecorrect.ConfigurationError as e:
    ...     print(f"Bad settings: {e}")
"""


class SafeCorrectError(Exception):
    """
    Base exception for all SafeCorrect errors.

    Catch this to handle any SafeCorrect-specific error.
    """

    pass


class ConfigurationError(SafeCorrectError):
    """
    Raised for an unreadable or invalid configuration file.

    Example:
        >>> AutocorrectConfig.from_dict({"colour_mode": True})
        ConfigurationError: Unknown configuration key(s): colour_mode
    """

    pass


class DictionaryLoadError(SafeCorrectError):
    """
    Raised when a base dictionary file cannot be read or parsed.

    Runtime loading catches this and falls back to an empty table.
    """

    pass


class RemoteFetchError(SafeCorrectError):
    """
    Raised by the low-level remote fetch on transport or payload failure.

    RemoteRulesClient.maybe_refresh() catches this and keeps the cached table.
    """

    pass
