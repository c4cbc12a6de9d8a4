"""Error definitions and policy helpers for the i18n codemod."""

from __future__ import annotations

import pathlib
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional


class ErrorCategory(Enum):
    """Categorises per-file failures to apply policy thresholds."""

    PARSE = auto()
    FILE_IO = auto()
    FORMAT = auto()
    OTHER = auto()


class CodemodError(Exception):
    """Base exception for all custom errors."""


class AbortRequested(CodemodError):
    """Raised when the user elects to abort processing."""


class NonInteractiveAbort(CodemodError):
    """Raised when non-interactive policy dictates termination."""


class UnsupportedFileTypeError(CodemodError):
    """Raised when a given file extension is not supported."""


class SourceParseError(CodemodError):
    """Raised when a source file cannot be parsed into a syntax tree."""

    def __init__(self, message: str, *, line: Optional[int] = None) -> None:
        super().__init__(message)
        self.line = line


class CodemodConfigurationError(CodemodError):
    """Raised when the codemod settings are invalid."""


@dataclass(frozen=True)
class ErrorRecord:
    """One file that failed to transform."""

    path: Optional[pathlib.Path]
    category: ErrorCategory
    message: str

    def describe(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.path}: {self.message}"


@dataclass
class ErrorTracker:
    """Counts failed files in a row and over the whole run.

    A file that transforms cleanly breaks the run of failures; the total is
    never reset.
    """

    consecutive_limit: int = 3
    total_limit: int = 10
    records: List[ErrorRecord] = field(default_factory=list)
    consecutive: int = 0

    @property
    def total(self) -> int:
        return len(self.records)

    def register(self, record: ErrorRecord) -> bool:
        """Store ``record`` and report whether a limit has been hit."""

        self.records.append(record)
        self.consecutive += 1
        return self.limit_reached

    @property
    def limit_reached(self) -> bool:
        return self.consecutive >= self.consecutive_limit or self.total >= self.total_limit

    def clear_streak(self) -> None:
        self.consecutive = 0
