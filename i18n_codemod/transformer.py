"""High-level orchestration of the codemod."""

from __future__ import annotations

import json
import pathlib
import sys
import time
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Sequence

from .engine import rewrite_literals
from .errors import (
    CodemodError,
    ErrorCategory,
    SourceParseError,
    UnsupportedFileTypeError,
)
from .imports import add_i18n_import
from .keys import stable_key
from .policy import Decision, ErrorPolicy
from .source import SUPPORTED_SUFFIXES, SourceDocument, detect_grammar
from .structures import CodemodOptions, KeyDeriver, TransformResult
from .wiring import apply_wiring, plan_wiring

IGNORED_DIR_NAMES = {
    ".git",
    ".hg",
    ".svn",
    ".next",
    ".cache",
    "build",
    "coverage",
    "dist",
    "node_modules",
}


def is_test_file(path: pathlib.Path | str, suffixes: Sequence[str]) -> bool:
    return str(path).endswith(tuple(suffixes))


def transform_source(
    source: str,
    *,
    path: pathlib.Path | None = None,
    options: CodemodOptions | None = None,
    key_deriver: KeyDeriver = stable_key,
) -> TransformResult:
    """Transform one file's source text.

    ``result.output`` holds the rewritten text, or ``None`` when no literal
    qualified and the file should be left untouched.
    """

    options = options or CodemodOptions()
    document = SourceDocument(source, grammar=detect_grammar(path), path=path)
    result = rewrite_literals(document, options=options, key_deriver=key_deriver)
    if not result.usage:
        return result

    plan = plan_wiring(document)
    result.wiring = apply_wiring(document, plan, options.print_options)
    result.import_added = add_i18n_import(document, result.wiring, options.print_options)
    result.output = document.render()
    return result


def transform_file(
    path: pathlib.Path,
    *,
    options: CodemodOptions | None = None,
    key_deriver: KeyDeriver = stable_key,
) -> TransformResult:
    """Transform a file on disk without writing it back.

    Test files are passed through before any parsing happens.
    """

    options = options or CodemodOptions()
    if is_test_file(path, options.test_suffixes):
        return TransformResult(skipped_reason="test file")
    source = path.read_bytes().decode("utf-8")
    return transform_source(source, path=path, options=options, key_deriver=key_deriver)


def discover_files(paths: Iterable[pathlib.Path]) -> List[pathlib.Path]:
    """Expand directories into supported source files, keeping explicit files."""

    files: List[pathlib.Path] = []
    seen: set[pathlib.Path] = set()

    def add(candidate: pathlib.Path) -> None:
        real = candidate.resolve()
        if real not in seen:
            seen.add(real)
            files.append(candidate)

    for root in paths:
        if root.is_file():
            add(root)
            continue
        if not root.is_dir():
            raise FileNotFoundError(f"Path not found: {root}")
        for candidate in sorted(root.rglob("*")):
            if any(part in IGNORED_DIR_NAMES for part in candidate.parts):
                continue
            if not candidate.is_file() or candidate.suffix.lower() not in SUPPORTED_SUFFIXES:
                continue
            if candidate.name.endswith(".d.ts"):
                continue
            add(candidate)
    return files


@dataclass
class CodemodSummary:
    """Report returned after processing a set of files."""

    files_scanned: int = 0
    files_changed: int = 0
    files_unchanged: int = 0
    files_excluded: int = 0
    files_failed: int = 0
    literals_rewritten: int = 0
    hooks_injected: int = 0
    wrappers_added: int = 0
    imports_added: int = 0
    dry_run: bool = False
    elapsed_seconds: float = 0.0
    changed_files: List[pathlib.Path] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)
    error_messages: List[str] = field(default_factory=list)


class CodemodRunner:
    """Coordinates discovery, transformation, and writing of many files."""

    def __init__(
        self,
        *,
        paths: Sequence[pathlib.Path],
        options: CodemodOptions,
        dry_run: bool,
        to_stdout: bool,
        interactive: bool,
        verbose: bool,
        debug: bool = False,
        key_deriver: KeyDeriver = stable_key,
    ) -> None:
        self.paths = list(paths)
        self.options = options
        self.dry_run = dry_run or to_stdout
        self.to_stdout = to_stdout
        self.verbose = verbose
        self.debug = debug
        self.key_deriver = key_deriver

        self.error_policy = ErrorPolicy(
            interactive=interactive,
            stream=sys.stderr if to_stdout else None,
        )

    def run(self) -> CodemodSummary:
        start_time = time.time()
        files = discover_files(self.paths)
        if self.verbose:
            self._progress(f"Found {len(files)} source files.")

        summary = CodemodSummary(dry_run=self.dry_run)
        for path in files:
            summary.files_scanned += 1
            result = self._process_file(path)
            if result is None:
                summary.files_failed += 1
                continue
            self._record(path, result, summary)

        summary.elapsed_seconds = time.time() - start_time
        summary.error_messages = [record.describe() for record in self.error_policy.records]
        return summary

    def _process_file(self, path: pathlib.Path) -> TransformResult | None:
        while True:
            try:
                result = transform_file(path, options=self.options, key_deriver=self.key_deriver)
                if result.changed and not self.dry_run:
                    path.write_bytes(result.output.encode("utf-8"))  # type: ignore[union-attr]
                self.error_policy.record_success()
                return result
            except SourceParseError as exc:
                category, message = ErrorCategory.PARSE, str(exc)
            except UnsupportedFileTypeError as exc:
                category, message = ErrorCategory.FORMAT, str(exc)
            except UnicodeDecodeError:
                category, message = ErrorCategory.FILE_IO, "not valid UTF-8."
            except OSError as exc:
                category, message = ErrorCategory.FILE_IO, str(exc)
            except CodemodError as exc:
                category, message = ErrorCategory.OTHER, str(exc)

            if self.error_policy.handle_error(path, category, message) is not Decision.RETRY:
                return None

    def _record(
        self,
        path: pathlib.Path,
        result: TransformResult,
        summary: CodemodSummary,
    ) -> None:
        if result.skipped_reason:
            summary.files_excluded += 1
            if self.verbose:
                self._progress(f"Skipped {path} ({result.skipped_reason}).")
            return
        if not result.changed:
            summary.files_unchanged += 1
            return

        summary.files_changed += 1
        summary.changed_files.append(path)
        summary.literals_rewritten += len(result.sites)
        summary.hooks_injected += int(result.wiring.hook_in_use)
        summary.wrappers_added += int(result.wiring.wrapper_in_use)
        summary.imports_added += int(result.import_added)

        if result.wiring.import_requirement is None and not result.wiring.already_wired:
            summary.notes.append(
                f"{path}: the default export could not be wired; "
                "add the translation function manually."
            )

        self._log_debug(
            f"sites {path}",
            [
                {"shape": site.shape.name, "line": site.line, "text": site.text}
                for site in result.sites
            ],
        )
        if self.verbose:
            wiring = (
                "hook"
                if result.wiring.hook_in_use
                else "wrapper" if result.wiring.wrapper_in_use else "no wiring"
            )
            self._progress(f"Rewrote {len(result.sites)} literals in {path} ({wiring}).")
        if self.to_stdout:
            print(f"// {path}")
            print(result.output, end="")

    def _progress(self, message: str) -> None:
        # Rewritten sources own stdout in --stdout mode.
        print(message, file=sys.stderr if self.to_stdout else None)

    def _log_debug(self, label: str, payload: Any) -> None:
        """Emit structured debug information when enabled."""

        if not self.debug:
            return
        try:
            if isinstance(payload, (dict, list)):
                message = json.dumps(payload, ensure_ascii=False, indent=2)
            else:
                message = str(payload)
        except (TypeError, ValueError):
            message = repr(payload)
        print(f"[i18n-codemod][debug] {label}:\n{message}", file=sys.stderr)

