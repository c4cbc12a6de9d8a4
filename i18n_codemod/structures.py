"""Core data structures shared by the rewrite stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, List, Optional


KeyDeriver = Callable[[str], str]

TRANSLATION_FUNCTION = "t"
HOOK_NAME = "useTranslation"
WRAPPER_NAME = "withTranslation"
LEGACY_WRAPPER_NAMES = ("withTranslate",)
I18N_MODULE = "react-i18next"

IMPORT_STATEMENTS = {
    "hook": f"import {{ {HOOK_NAME} }} from '{I18N_MODULE}';",
    "wrapper": f"import {{ {WRAPPER_NAME} }} from '{I18N_MODULE}';",
    "both": f"import {{ {HOOK_NAME}, {WRAPPER_NAME} }} from '{I18N_MODULE}';",
}


class LiteralShape(Enum):
    """Syntactic position a translatable literal was found in."""

    MARKUP_TEXT = auto()
    ATTRIBUTE_LITERAL = auto()
    EXPRESSION_CONTAINER = auto()
    CALL_ARGUMENT = auto()


class SiteState(Enum):
    """Whether a site still holds a literal or already holds a translation call."""

    LITERAL = auto()
    REWRITTEN = auto()


@dataclass(frozen=True)
class LiteralSite:
    """A location in the tree holding a candidate user-facing string."""

    shape: LiteralShape
    start: int
    end: int
    text: str
    state: SiteState = SiteState.LITERAL
    line: int = 0

    @property
    def eligible(self) -> bool:
        return self.state is SiteState.LITERAL and bool(self.text.strip())


@dataclass(frozen=True)
class Edit:
    """A byte-range replacement; ``start == end`` marks an insertion."""

    start: int
    end: int
    text: str
    sequence: int

    @property
    def is_insertion(self) -> bool:
        return self.start == self.end


class ImportRequirement(Enum):
    """Which react-i18next bindings the file needs."""

    HOOK_ONLY = "hook"
    WRAPPER_ONLY = "wrapper"
    BOTH = "both"

    @property
    def statement(self) -> str:
        return IMPORT_STATEMENTS[self.value]


@dataclass
class WiringState:
    """Outcome of wiring the default export to the translation function."""

    hook_in_use: bool = False
    wrapper_in_use: bool = False
    already_wired: bool = False

    @property
    def import_requirement(self) -> Optional[ImportRequirement]:
        if self.hook_in_use and self.wrapper_in_use:
            return ImportRequirement.BOTH
        if self.hook_in_use:
            return ImportRequirement.HOOK_ONLY
        if self.wrapper_in_use:
            return ImportRequirement.WRAPPER_ONLY
        return None


@dataclass(frozen=True)
class PrintOptions:
    """Formatting policy applied to generated code."""

    quote: str = "single"
    trailing_comma: bool = False
    line_terminator: str = "\n"

    @property
    def quote_char(self) -> str:
        return '"' if self.quote == "double" else "'"


DEFAULT_TEST_SUFFIXES = (
    ".spec.js",
    ".test.js",
    ".spec.jsx",
    ".test.jsx",
    ".spec.ts",
    ".test.ts",
    ".spec.tsx",
    ".test.tsx",
)


@dataclass(frozen=True)
class CodemodOptions:
    """Resolved settings for one codemod run."""

    print_options: PrintOptions = field(default_factory=PrintOptions)
    test_suffixes: tuple[str, ...] = DEFAULT_TEST_SUFFIXES
    ignored_callees: tuple[str, ...] = ("require", "import")


@dataclass
class TransformResult:
    """Everything one file transform produced.

    ``usage`` is set the first time a literal is rewritten and gates the
    wiring and import stages. ``output`` is ``None`` when the file should be
    left untouched.
    """

    usage: bool = False
    sites: List[LiteralSite] = field(default_factory=list)
    wiring: WiringState = field(default_factory=WiringState)
    import_added: bool = False
    output: Optional[str] = None
    skipped_reason: Optional[str] = None

    @property
    def changed(self) -> bool:
        return self.output is not None

    def record_rewrite(self, site: LiteralSite) -> None:
        self.sites.append(site)
        self.usage = True
