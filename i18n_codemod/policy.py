"""What a codemod run does after a file fails to transform."""

from __future__ import annotations

import pathlib
from enum import Enum
from typing import Callable, List, Optional, TextIO

from .errors import (
    AbortRequested,
    ErrorCategory,
    ErrorRecord,
    ErrorTracker,
    NonInteractiveAbort,
)


class Decision(Enum):
    CONTINUE = "continue"
    RETRY = "retry"


_ANSWERS = {
    "c": Decision.CONTINUE,
    "continue": Decision.CONTINUE,
    "r": Decision.RETRY,
    "retry": Decision.RETRY,
}


class ErrorPolicy:
    """Reports failed files and stops the run once failures pile up.

    Every failure is printed and kept as an ``ErrorRecord``. Below the
    tracker's limits the run simply moves on to the next file. At a limit an
    interactive run asks whether to continue, retry the file, or abort; a
    non-interactive run stops with ``NonInteractiveAbort``.
    """

    def __init__(
        self,
        *,
        interactive: bool,
        tracker: Optional[ErrorTracker] = None,
        ask: Callable[[str], str] = input,
        stream: Optional[TextIO] = None,
    ) -> None:
        self.interactive = interactive
        self.tracker = tracker or ErrorTracker()
        self.ask = ask
        self.stream = stream

    @property
    def records(self) -> List[ErrorRecord]:
        return self.tracker.records

    def record_success(self) -> None:
        self.tracker.clear_streak()

    def handle_error(
        self,
        path: Optional[pathlib.Path],
        category: ErrorCategory,
        message: str,
    ) -> Decision:
        record = ErrorRecord(path=path, category=category, message=message)
        print(f"Could not transform {record.describe()} (file left untouched)", file=self.stream)

        if not self.tracker.register(record):
            return Decision.CONTINUE
        if not self.interactive:
            raise NonInteractiveAbort(
                f"Stopping after {self.tracker.total} failed files "
                "(run interactively to decide per failure)."
            )
        return self._prompt()

    def _prompt(self) -> Decision:
        tracker = self.tracker
        if tracker.consecutive >= tracker.consecutive_limit:
            question = f"{tracker.consecutive} files in a row failed."
        else:
            question = f"{tracker.total} files failed so far."
        while True:
            answer = self.ask(f"{question} Continue, retry, or abort? [c/r/a] ").strip().lower()
            if answer in {"a", "abort"}:
                raise AbortRequested("Abort requested by user.")
            if answer in _ANSWERS:
                return _ANSWERS[answer]
            print("Please answer c (continue), r (retry) or a (abort).", file=self.stream)
