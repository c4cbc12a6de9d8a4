"""Plain helpers shared by several test modules."""

import textwrap
from types import SimpleNamespace

from i18n_codemod.structures import DEFAULT_TEST_SUFFIXES


def dedent(source: str) -> str:
    return textwrap.dedent(source).lstrip("\n")


def make_settings(**overrides):
    """Stand-in for the validated settings model with every default filled in."""

    values = dict(
        I18N_CODEMOD_QUOTE="single",
        I18N_CODEMOD_TRAILING_COMMA=False,
        I18N_CODEMOD_LINE_TERMINATOR="lf",
        I18N_CODEMOD_TEST_SUFFIXES=",".join(DEFAULT_TEST_SUFFIXES),
        I18N_CODEMOD_IGNORED_CALLEES="require,import",
        I18N_CODEMOD_VERBOSE=False,
        I18N_CODEMOD_DEBUG=False,
    )
    values.update(overrides)
    return SimpleNamespace(**values)
