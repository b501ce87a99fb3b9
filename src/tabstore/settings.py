"""
Configuration for tabstore.

StoreSettings is a frozen dataclass validated at construction. Settings are
normally passed explicitly; when an operation is called without them it uses
the process-wide default from get_settings(), which reads TABSTORE_*
environment variables (optionally loaded from a .env file) on first use.
"""

import codecs
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from tabstore.codec import NumericCodec
from tabstore.errors import ConfigError


_TRUE_VALUES = ("true", "1", "yes")


@dataclass(frozen=True)
class StoreSettings:
    """
    Knobs shared by import, export, row encoding and statistics.

    Attributes:
        quant_format: struct code of the quantitative numeric representation.
        delimiter: single-character field separator for delimited text.
        encoding: text encoding for categorical values; widths are in encoded bytes.
        skip_header: whether schema-given imports skip the first line.
    """
    quant_format: str = "d"
    delimiter: str = ","
    encoding: str = "utf-8"
    skip_header: bool = True

    def __post_init__(self):
        """Validate settings after initialization."""
        # Raises ConfigError for unknown formats.
        NumericCodec(self.quant_format)
        if len(self.delimiter) != 1 or self.delimiter in "\r\n\0":
            raise ConfigError(f"Delimiter must be a single printable character, got {self.delimiter!r}")
        try:
            codecs.lookup(self.encoding)
        except LookupError:
            raise ConfigError(f"Unknown text encoding {self.encoding!r}")

    @property
    def numeric(self) -> NumericCodec:
        return NumericCodec(self.quant_format)

    @classmethod
    def from_env(cls) -> "StoreSettings":
        """
        Build settings from environment variables.

        Reads TABSTORE_QUANT_FORMAT, TABSTORE_DELIMITER, TABSTORE_ENCODING and
        TABSTORE_SKIP_HEADER; unset variables keep the dataclass defaults.
        """
        return cls(
            quant_format=os.getenv("TABSTORE_QUANT_FORMAT", "d"),
            delimiter=os.getenv("TABSTORE_DELIMITER", ","),
            encoding=os.getenv("TABSTORE_ENCODING", "utf-8"),
            skip_header=os.getenv("TABSTORE_SKIP_HEADER", "true").lower() in _TRUE_VALUES,
        )


_default_settings: Optional[StoreSettings] = None


def get_settings(env_file: Optional[str] = None) -> StoreSettings:
    """
    Return the process-wide default settings, loading them on first call.

    Args:
        env_file: Optional .env file to load before reading the environment.
                  Passing one forces a reload.
    """
    global _default_settings

    if env_file is not None:
        load_dotenv(dotenv_path=env_file, override=True)
        _default_settings = None
    if _default_settings is None:
        _default_settings = StoreSettings.from_env()
    return _default_settings


def reset_settings() -> None:
    """Forget the cached default settings (used by tests)."""
    global _default_settings
    _default_settings = None


def resolve_settings(settings: Optional[StoreSettings]) -> StoreSettings:
    return settings if settings is not None else get_settings()


__all__ = ["StoreSettings", "get_settings", "reset_settings", "resolve_settings"]
