"""Error definitions for the i18n extractor."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Optional


class ErrorCategory(Enum):
    """Categorises handled errors for the run report."""

    FILE_IO = auto()
    FORMAT = auto()
    BACKUP = auto()
    OTHER = auto()


class I18nExtractError(Exception):
    """Base exception for all custom errors."""


class ConfigurationError(I18nExtractError):
    """Raised when settings are missing or invalid."""


class UnsupportedFileTypeError(I18nExtractError):
    """Raised when a given file extension is not supported."""


class DocumentFormatError(I18nExtractError):
    """Raised when a document cannot be split into its regions."""


class DictionaryFormatError(I18nExtractError):
    """Raised when an existing dictionary file is not a flat string mapping."""


class KeyNamingError(I18nExtractError):
    """Raised when a key-naming provider cannot be built."""


class BackupError(I18nExtractError):
    """Raised when a document could not be copied before modification."""


@dataclass
class ErrorRecord:
    """Stores context for a handled error."""

    category: ErrorCategory
    message: str
    path: Optional[Path] = None
    details: Optional[str] = None
