# src/digeststore/core/config.py
"""
Configuration schema and loading for digeststore.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

import re
from pathlib import Path
from typing import Any, Literal, Self

from pydantic import BaseModel, Field, ValidationError, field_validator

from digeststore.contracts.errors import ConfigurationError
from digeststore.core.hashing import DEFAULT_ALGORITHM, resolve_algorithm
from digeststore.core.nhash import DEFAULT_LEVELS, validate_levels

# Read/write/execute bits only; setuid, setgid and sticky are never applied
_MAX_MODE = 0o777

_OCTAL_PATTERN = re.compile(r"^0[oO]?([0-7]+)$")
_DECIMAL_PATTERN = re.compile(r"^[1-9][0-9]*$")


def parse_mode(value: int | str) -> int:
    """Parse a permission mask from config.

    Integers pass through. Strings with a leading "0" or "0o" are octal
    ("0750", "0o750"); other digit strings are decimal ("488").

    Raises:
        ValueError: If value is malformed or outside 0..0o777
    """
    if isinstance(value, bool):
        raise ValueError(f"Permission mask must be an integer or string, got {value!r}")

    if isinstance(value, int):
        mode = value
    elif isinstance(value, str):
        text = value.strip()
        if text == "0":
            mode = 0
        elif match := _OCTAL_PATTERN.match(text):
            mode = int(match.group(1), 8)
        elif _DECIMAL_PATTERN.match(text):
            mode = int(text, 10)
        else:
            raise ValueError(
                f"Permission mask {value!r} is not a number; "
                "use octal with a leading zero, e.g. '0750'"
            )
    else:
        raise ValueError(
            f"Permission mask must be an integer or string, got {type(value).__name__}"
        )

    if not 0 <= mode <= _MAX_MODE:
        raise ValueError(
            f"Permission mask {oct(mode)} is outside 0..0o777; "
            "quote octal masks in YAML, e.g. '0750'"
        )
    return mode


def parse_levels(value: Any) -> tuple[int, ...]:
    """Parse bucket widths from config.

    Accepts a sequence of ints or a comma-separated string ("8,256").

    Raises:
        ValueError: If the list is empty or holds a non-positive width
    """
    if isinstance(value, str):
        parts = [part.strip() for part in value.split(",") if part.strip()]
        try:
            value = [int(part) for part in parts]
        except ValueError:
            raise ValueError(f"Storage levels must be comma-separated integers, got {value!r}") from None

    try:
        return validate_levels(value)
    except ConfigurationError as e:
        raise ValueError(str(e)) from e


class StoreSettings(BaseModel):
    """Digest store configuration.

    Example YAML:
        store:
          root: /var/lib/digeststore
          levels: [8, 256]
          algorithm: sha512
          dir_mask: "0750"
          file_mask: "0640"
    """

    model_config = {"frozen": True, "extra": "forbid"}

    root: Path = Field(description="Base directory for stored objects (created if absent)")
    levels: tuple[int, ...] = Field(
        default=DEFAULT_LEVELS,
        description="Number of directory names at each depth, outermost first",
    )
    algorithm: str = Field(
        default=DEFAULT_ALGORITHM,
        description="Digest algorithm (hashlib name, e.g. sha512)",
    )
    dir_mask: int = Field(
        default=0o777,
        description="Directory creation mode, merged with the umask",
    )
    file_mask: int = Field(
        default=0o666,
        description="File creation mode, merged with the umask",
    )
    io_mode: Literal["binary"] = Field(
        default="binary",
        description="I/O mode; content is always read and written byte-exact",
    )

    @field_validator("root", mode="before")
    @classmethod
    def validate_root_not_empty(cls, v: Any) -> Any:
        """Root is required and cannot be blank."""
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("root cannot be empty")
        return v

    @field_validator("levels", mode="before")
    @classmethod
    def validate_levels_not_empty(cls, v: Any) -> tuple[int, ...]:
        """At least one positive level is required."""
        return parse_levels(v)

    @field_validator("algorithm")
    @classmethod
    def validate_algorithm(cls, v: str) -> str:
        """Resolve the algorithm now so unknown names fail at load time."""
        try:
            return resolve_algorithm(v)
        except ConfigurationError as e:
            raise ValueError(str(e)) from e

    @field_validator("dir_mask", "file_mask", mode="before")
    @classmethod
    def validate_mask(cls, v: Any) -> int:
        """Accept octal strings as well as integers."""
        return parse_mode(v)

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> Self:
        """Create settings from dict with clear error on validation failure.

        Raises:
            ConfigurationError: If configuration is invalid.
        """
        try:
            return cls(**config)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid store configuration: {e}") from e


class LoggingSettings(BaseModel):
    """Logging configuration."""

    model_config = {"frozen": True}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Minimum log level",
    )
    json_output: bool = Field(
        default=False,
        description="Render JSON lines instead of console output",
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v


class DigestStoreSettings(BaseModel):
    """Top-level digeststore configuration file."""

    model_config = {"frozen": True}

    store: StoreSettings = Field(description="Store layout and permissions")
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )


def load_settings(config_path: Path) -> DigestStoreSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (DIGESTSTORE_*) - highest priority
    2. Config file
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: DIGESTSTORE_STORE__ROOT for nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated DigestStoreSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Explicit check for file existence (Dynaconf silently accepts missing files)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="DIGESTSTORE",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; convert to lowercase for Pydantic
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {
        k.lower(): _lower_keys(v)
        for k, v in dynaconf_settings.as_dict().items()
        if k not in internal_keys
    }
    return DigestStoreSettings(**raw_config)


def _lower_keys(value: Any) -> Any:
    """Lowercase nested mapping keys (env overrides arrive uppercase)."""
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value
