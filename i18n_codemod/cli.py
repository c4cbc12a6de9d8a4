"""Command line interface for the i18n codemod."""

from __future__ import annotations

import argparse
import pathlib
import sys
from typing import Iterable, Optional, Sequence

from .configuration import build_options, get_settings
from .errors import (
    AbortRequested,
    CodemodConfigurationError,
    CodemodError,
    NonInteractiveAbort,
)
from .structures import CodemodOptions
from .transformer import CodemodRunner, CodemodSummary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="i18n-codemod",
        description=(
            "Replace user-facing string literals in React components with "
            "react-i18next translation calls."
        ),
    )
    parser.add_argument(
        "paths",
        nargs="+",
        help="Files or directories to transform (.js, .jsx, .ts, .tsx).",
    )
    parser.add_argument(
        "-n",
        "--dry-run",
        action="store_true",
        help="Report what would change without writing any file.",
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print rewritten sources instead of writing them (implies --dry-run).",
    )
    parser.add_argument(
        "-q",
        "--quote",
        choices=("single", "double"),
        help="Quote style of generated translation keys (default: single).",
    )
    parser.add_argument(
        "--line-terminator",
        choices=("lf", "crlf"),
        help="Line terminator for inserted lines (default: lf).",
    )
    parser.add_argument(
        "--trailing-comma",
        action="store_true",
        default=None,
        help="Accepted for compatibility with printer options.",
    )
    parser.add_argument(
        "--ignore-callee",
        action="append",
        default=[],
        metavar="NAME",
        help="Leave string arguments of this callee alone (repeatable).",
    )
    parser.add_argument(
        "--non-interactive",
        action="store_true",
        help="Disable prompts and stop automatically when too many files fail (suitable for CI).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show per-file progress.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print every rewritten literal to stderr.",
    )
    return parser


def execute_codemod(
    *,
    paths: Sequence[str],
    options: CodemodOptions,
    dry_run: bool,
    to_stdout: bool,
    non_interactive: bool,
    verbose: bool,
    debug: bool,
) -> tuple[int, CodemodSummary | None, str | None]:
    """Execute a codemod run and return the exit code, summary, and message."""

    resolved = [pathlib.Path(path).expanduser() for path in paths]
    runner = CodemodRunner(
        paths=resolved,
        options=options,
        dry_run=dry_run,
        to_stdout=to_stdout,
        interactive=not non_interactive,
        verbose=verbose,
        debug=debug,
    )

    try:
        summary = runner.run()
    except FileNotFoundError as exc:
        return 1, None, str(exc)
    except NonInteractiveAbort as exc:
        return 2, None, str(exc)
    except AbortRequested:
        return 2, None, "Codemod aborted at your request."
    except CodemodError as exc:
        return 1, None, str(exc)
    except KeyboardInterrupt:
        return 2, None, "Codemod interrupted by user."

    exit_code = 1 if summary.files_failed else 0
    return exit_code, summary, None


def print_summary(summary: CodemodSummary, *, stream=None) -> None:
    """Output a friendly report once processing completes."""

    out = stream or sys.stdout
    heading = "Dry run complete." if summary.dry_run else "Codemod complete."
    print(f"\n{heading}", file=out)
    print(f"  Files scanned:   {summary.files_scanned}", file=out)
    print(
        "  Files:           "
        f"{summary.files_changed} changed / {summary.files_unchanged} unchanged "
        f"({summary.files_excluded} excluded, {summary.files_failed} failed)",
        file=out,
    )
    print(f"  Literals:        {summary.literals_rewritten} rewritten", file=out)
    print(
        f"  Wiring:          {summary.hooks_injected} hooks, "
        f"{summary.wrappers_added} wrappers, {summary.imports_added} imports",
        file=out,
    )
    print(f"  Elapsed time:    {summary.elapsed_seconds:.2f} seconds", file=out)
    if summary.notes or summary.error_messages:
        print("  Notes:", file=out)
        for message in summary.notes + summary.error_messages:
            print(f"    - {message}", file=out)


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        settings = get_settings()
        options = build_options(
            settings,
            quote=args.quote,
            trailing_comma=args.trailing_comma,
            line_terminator=args.line_terminator,
            ignored_callees=args.ignore_callee,
        )
    except CodemodConfigurationError as exc:
        print(exc)
        return 1

    exit_code, summary, message = execute_codemod(
        paths=args.paths,
        options=options,
        dry_run=args.dry_run,
        to_stdout=args.stdout,
        non_interactive=args.non_interactive,
        verbose=args.verbose or settings.I18N_CODEMOD_VERBOSE,
        debug=args.debug or settings.I18N_CODEMOD_DEBUG,
    )

    if message:
        print(message, file=sys.stderr if args.stdout else None)
    if summary:
        # Keep stdout clean for the rewritten sources.
        print_summary(summary, stream=sys.stderr if args.stdout else None)
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
