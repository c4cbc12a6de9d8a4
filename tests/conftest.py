"""Shared fixtures for the codemod test suite."""

import pathlib

import pytest

from helpers import dedent
from i18n_codemod.source import SourceDocument
from i18n_codemod.structures import CodemodOptions, TransformResult


@pytest.fixture
def options() -> CodemodOptions:
    return CodemodOptions()

@pytest.fixture
def document():
    """Build a ``SourceDocument`` from dedented source text."""

    def _build(source: str, grammar: str = "tsx") -> SourceDocument:
        return SourceDocument(dedent(source), grammar=grammar)

    return _build

@pytest.fixture
def result() -> TransformResult:
    return TransformResult()

@pytest.fixture
def write_source(tmp_path: pathlib.Path):
    """Write dedented source to a file under ``tmp_path`` and return its path."""

    def _write(relative: str, source: str) -> pathlib.Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dedent(source), encoding="utf-8")
        return path

    return _write
