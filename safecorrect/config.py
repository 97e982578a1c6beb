"""
Configuration for SafeCorrect autocorrection.

Settings storage belongs to the host editor; these dataclasses are the
in-process view of those settings. They can also be loaded from a YAML
file for standalone use and testing.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Literal

import yaml

from safecorrect.exceptions import ConfigurationError
from safecorrect.wordlists import DEFAULT_CODE_DELIMITER, MIN_SAFE_LENGTH, SUPPORTED_DIALECTS

DEFAULT_PERSONAL_RULES = "teh the\nwoudl would\nhelath health"


@dataclass
class RemoteConfig:
    """
    Configuration for remote dictionary updates.

    Remote updates are DISABLED by default. When enabled, the remote table
    is re-checked at most once per check interval.

    Example:
        >>> config = AutocorrectConfig(
        ...     remote=RemoteConfig(enabled=True, url="https://example.com/rules.json")
        ... )
    """

    enabled: bool = False
    url: str = ""
    check_interval_hours: float = 24
    timeout_seconds: float = 10.0

    # Where the last good remote table, ETag and check time are kept
    cache_path: Path | None = None

    def __post_init__(self):
        """Validate configuration."""
        if self.check_interval_hours <= 0:
            raise ValueError(
                f"check_interval_hours must be > 0, got {self.check_interval_hours}"
            )
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")
        if self.cache_path is not None and not isinstance(self.cache_path, Path):
            self.cache_path = Path(self.cache_path)

    @property
    def is_active(self) -> bool:
        """Whether remote refresh should run at all."""
        return self.enabled and bool(self.url)


@dataclass
class AutocorrectConfig:
    """
    Configuration for the autocorrect session.

    All options have sensible defaults. Create a config only
    if you need to customize behavior.

    Example:
        >>> config = AutocorrectConfig(
        ...     personal_rules="recieve receive",
        ...     code_delimiter=None,
        ... )
        >>> session = AutocorrectSession(host, config)
    """

    enabled: bool = True

    # "expanded" is accepted for settings compatibility; it corrects like "safe"
    mode: Literal["safe", "expanded"] = "safe"
    dialect: Literal["uk"] = "uk"

    min_safe_length: int = MIN_SAFE_LENGTH
    code_delimiter: str | None = DEFAULT_CODE_DELIMITER

    # Raw personal rules text, JSON object or "typo correction" lines
    personal_rules: str = DEFAULT_PERSONAL_RULES

    # None = packaged base_safe.json
    dictionary_path: Path | None = None

    remote: RemoteConfig = field(default_factory=RemoteConfig)

    def __post_init__(self):
        """Validate configuration."""
        valid_modes = ("safe", "expanded")
        if self.mode not in valid_modes:
            raise ValueError(f"mode must be one of {valid_modes}, got {self.mode!r}")

        if self.dialect not in SUPPORTED_DIALECTS:
            raise ValueError(
                f"dialect must be one of {SUPPORTED_DIALECTS}, got {self.dialect!r}"
            )

        if self.min_safe_length < 1:
            raise ValueError(f"min_safe_length must be >= 1, got {self.min_safe_length}")

        if self.code_delimiter is not None and len(self.code_delimiter) != 1:
            raise ValueError(
                f"code_delimiter must be a single character or None, "
                f"got {self.code_delimiter!r}"
            )

        if self.dictionary_path is not None and not isinstance(self.dictionary_path, Path):
            self.dictionary_path = Path(self.dictionary_path)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AutocorrectConfig:
        """
        Build a config from a plain mapping (e.g. parsed settings).

        Args:
            data: Mapping of option names to values. A nested "remote"
                mapping configures RemoteConfig.

        Returns:
            Validated AutocorrectConfig.

        Raises:
            ConfigurationError: If the mapping has unknown keys.
            ValueError: If a value fails validation.
        """
        data = dict(data)
        remote_data = data.pop("remote", None) or {}
        if not isinstance(remote_data, dict):
            raise ConfigurationError("remote must be a mapping")

        _check_keys(cls, data)
        _check_keys(RemoteConfig, remote_data, prefix="remote.")

        return cls(**data, remote=RemoteConfig(**remote_data))

    @classmethod
    def from_yaml(cls, path: Path | str) -> AutocorrectConfig:
        """
        Load a config from a YAML file.

        Raises:
            ConfigurationError: If the file is unreadable, not valid YAML,
                or not a mapping.
        """
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot load configuration from {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration in {path} must be a mapping")

        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a YAML/JSON friendly dictionary."""
        data = asdict(self)
        data["dictionary_path"] = str(self.dictionary_path) if self.dictionary_path else None
        cache_path = self.remote.cache_path
        data["remote"]["cache_path"] = str(cache_path) if cache_path else None
        return data


def _check_keys(config_cls: type, data: dict[str, Any], prefix: str = "") -> None:
    """Reject keys that are not fields of config_cls."""
    known = {f.name for f in fields(config_cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        names = ", ".join(prefix + key for key in unknown)
        raise ConfigurationError(f"Unknown configuration key(s): {names}")
