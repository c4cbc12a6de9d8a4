"""Parsing and printing of component sources.

Sources are parsed with tree-sitter into an immutable concrete syntax tree.
Rewrites never touch the tree itself: each change is recorded as an ``Edit``
against the original bytes, and ``SourceDocument.render`` splices every
recorded edit into the text in one pass. Node offsets therefore stay valid for
the whole transform.
"""

from __future__ import annotations

import html
import pathlib
import re
from functools import lru_cache
from typing import Iterator, List, Optional

from tree_sitter import Language, Node, Parser

from .errors import CodemodError, SourceParseError, UnsupportedFileTypeError
from .structures import Edit

TSX_SUFFIXES = {".js", ".jsx", ".mjs", ".cjs", ".tsx"}
TYPESCRIPT_SUFFIXES = {".ts", ".mts", ".cts"}
SUPPORTED_SUFFIXES = TSX_SUFFIXES | TYPESCRIPT_SUFFIXES

_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}
ESCAPE_PATTERN = re.compile(
    r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|.)",
    re.DOTALL,
)


def _import_typescript_grammar():
    try:
        import tree_sitter_typescript  # type: ignore
    except ImportError as exc:  # pragma: no cover - import guard
        raise CodemodError(
            "tree-sitter-typescript is required to parse component sources. "
            "Install it with `pip install tree-sitter-typescript`."
        ) from exc
    return tree_sitter_typescript


@lru_cache(maxsize=None)
def load_language(grammar: str) -> Language:
    """Return the tree-sitter language for ``tsx`` or ``typescript``."""

    module = _import_typescript_grammar()
    if grammar == "typescript":
        return Language(module.language_typescript())
    if grammar == "tsx":
        return Language(module.language_tsx())
    raise CodemodError(f"Unknown grammar '{grammar}'.")


def detect_grammar(path: pathlib.Path | None) -> str:
    """Select the grammar for a file; plain TypeScript cannot contain JSX."""

    if path is None:
        return "tsx"
    suffix = path.suffix.lower()
    if suffix in TYPESCRIPT_SUFFIXES:
        return "typescript"
    if suffix in TSX_SUFFIXES:
        return "tsx"
    raise UnsupportedFileTypeError(
        f"{path.name}: unsupported file type, expected one of "
        + ", ".join(sorted(SUPPORTED_SUFFIXES))
        + "."
    )


def _first_error(node: Node) -> Optional[Node]:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current
        if current.has_error:
            stack.extend(reversed(current.children))
    return None


def parse_source(data: bytes, grammar: str = "tsx"):
    """Parse source bytes, raising ``SourceParseError`` on syntax errors."""

    parser = Parser(load_language(grammar))
    tree = parser.parse(data)
    if tree.root_node.has_error:
        bad = _first_error(tree.root_node)
        line = bad.start_point[0] + 1 if bad is not None else None
        location = f" near line {line}" if line else ""
        raise SourceParseError(f"Source could not be parsed{location}.", line=line)
    return tree


def _decode_escape(match: re.Match[str]) -> str:
    body = match.group(1)
    if body in {"\n", "\r\n"}:
        # Line continuation.
        return ""
    if body.startswith("u{"):
        digits = body[2:-1]
    elif body.startswith("u") and len(body) == 5:
        digits = body[1:]
    elif body.startswith("x") and len(body) == 3:
        digits = body[1:]
    else:
        return _ESCAPES.get(body, body)
    try:
        return chr(int(digits, 16))
    except ValueError:
        raise SourceParseError(f"Invalid escape sequence '\\{body}' in string literal.") from None


def unescape_js(raw: str) -> str:
    """Decode JS escapes; ``\\uD83D\\uDE00`` style surrogate pairs become one character."""

    decoded = ESCAPE_PATTERN.sub(_decode_escape, raw)
    return decoded.encode("utf-16", "surrogatepass").decode("utf-16", "surrogatepass")


def is_string_literal(node: Optional[Node]) -> bool:
    return node is not None and node.type == "string"


def is_identifier(node: Optional[Node]) -> bool:
    return node is not None and node.type == "identifier"


def named_children(node: Node) -> List[Node]:
    """Named children without comments."""

    return [child for child in node.named_children if child.type != "comment"]


class SourceDocument:
    """One parsed source file plus the edits recorded against it."""

    def __init__(
        self,
        source: str,
        *,
        grammar: str = "tsx",
        path: pathlib.Path | None = None,
    ) -> None:
        self.source = source
        self.data = source.encode("utf-8")
        self.grammar = grammar
        self.path = path
        self.tree = parse_source(self.data, grammar)
        self.edits: List[Edit] = []

    @classmethod
    def from_path(cls, path: pathlib.Path, source: str) -> "SourceDocument":
        return cls(source, grammar=detect_grammar(path), path=path)

    @property
    def root(self) -> Node:
        return self.tree.root_node

    @property
    def changed(self) -> bool:
        return bool(self.edits)

    def text(self, node: Node) -> str:
        return self.data[node.start_byte:node.end_byte].decode("utf-8")

    def slice(self, start: int, end: int) -> str:
        return self.data[start:end].decode("utf-8")

    def string_value(self, node: Node, *, jsx: bool = False) -> str:
        """Return the runtime value of a string literal node."""

        raw = self.text(node)[1:-1]
        if jsx:
            return html.unescape(raw)
        return unescape_js(raw)

    def iter_nodes(self, *types: str) -> Iterator[Node]:
        """Yield nodes in document order, optionally filtered by type."""

        wanted = set(types)
        stack = [self.root]
        while stack:
            node = stack.pop()
            if not wanted or node.type in wanted:
                yield node
            stack.extend(reversed(node.children))

    # --- Edits -----------------------------------------------------------

    def replace(self, start: int, end: int, text: str) -> None:
        self.edits.append(Edit(start=start, end=end, text=text, sequence=len(self.edits)))

    def replace_node(self, node: Node, text: str) -> None:
        self.replace(node.start_byte, node.end_byte, text)

    def insert(self, offset: int, text: str) -> None:
        self.replace(offset, offset, text)

    def is_rewritten(self, start: int, end: int) -> bool:
        """True when a replacement already covers part of the range."""

        for edit in self.edits:
            if edit.is_insertion:
                continue
            if edit.start < end and start < edit.end:
                return True
        return False

    def line_indent(self, offset: int) -> str:
        """Leading whitespace of the line containing ``offset``."""

        line_start = self.data.rfind(b"\n", 0, offset) + 1
        cursor = line_start
        while cursor < len(self.data) and self.data[cursor:cursor + 1] in (b" ", b"\t"):
            cursor += 1
        return self.slice(line_start, cursor)

    def render(self) -> str:
        """Apply all recorded edits and return the new source text."""

        ordered = sorted(self.edits, key=lambda edit: (edit.start, edit.end, edit.sequence))
        pieces: List[bytes] = []
        cursor = 0
        for edit in ordered:
            if edit.start < cursor:
                raise CodemodError(
                    f"Overlapping rewrites at byte {edit.start}; refusing to print."
                )
            pieces.append(self.data[cursor:edit.start])
            pieces.append(edit.text.encode("utf-8"))
            cursor = edit.end
        pieces.append(self.data[cursor:])
        return b"".join(pieces).decode("utf-8")
