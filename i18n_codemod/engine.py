"""Rewrite engine: applies every literal matcher to one document."""

from __future__ import annotations

from typing import Optional

from .keys import stable_key
from .matchers import build_matchers
from .source import SourceDocument
from .structures import CodemodOptions, KeyDeriver, TransformResult


def rewrite_literals(
    document: SourceDocument,
    *,
    options: CodemodOptions,
    key_deriver: KeyDeriver = stable_key,
    result: Optional[TransformResult] = None,
) -> TransformResult:
    """Run the matchers once each, in order, recording edits on ``document``.

    Later matchers see the same tree as earlier ones; a site an earlier
    matcher already replaced is classified as rewritten and skipped.
    """

    result = result if result is not None else TransformResult()
    matchers = build_matchers(
        key_deriver=key_deriver,
        print_options=options.print_options,
        ignored_callees=options.ignored_callees,
    )
    for matcher in matchers:
        matcher.apply(document, result)
    return result
