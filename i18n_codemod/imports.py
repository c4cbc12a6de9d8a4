"""Import synthesis for the react-i18next bindings."""

from __future__ import annotations

from typing import List, Optional

from tree_sitter import Node

from .source import SourceDocument
from .structures import I18N_MODULE, PrintOptions, WiringState


def top_level_imports(document: SourceDocument) -> List[Node]:
    return [node for node in document.root.named_children if node.type == "import_statement"]


def imports_module(document: SourceDocument, statement: Node, module: str) -> bool:
    source = statement.child_by_field_name("source")
    return source is not None and document.string_value(source) == module


def has_module_import(document: SourceDocument, module: str = I18N_MODULE) -> bool:
    return any(
        imports_module(document, statement, module)
        for statement in top_level_imports(document)
    )


def add_i18n_import(
    document: SourceDocument,
    wiring: WiringState,
    options: PrintOptions,
) -> bool:
    """Insert the import the wiring needs; return whether one was added.

    An existing import from the module is left as it is, even when it does not
    name every binding.
    """

    requirement = wiring.import_requirement
    if requirement is None or has_module_import(document):
        return False

    statement = requirement.statement
    newline = options.line_terminator
    imports = top_level_imports(document)
    if imports:
        document.insert(imports[-1].end_byte, newline + statement)
        return True

    anchor = _prologue_end(document)
    if anchor is not None:
        document.insert(anchor.end_byte, newline + statement)
    else:
        document.insert(0, statement + newline)
    return True


def _is_directive(node: Node) -> bool:
    inner = [child for child in node.named_children if child.type != "comment"]
    return node.type == "expression_statement" and len(inner) == 1 and inner[0].type == "string"


def _prologue_end(document: SourceDocument) -> Optional[Node]:
    """Last hashbang line or directive (such as 'use client') at the top of the file."""

    anchor = None
    for node in document.root.named_children:
        if node.type == "comment":
            continue
        if node.type == "hash_bang_line" or _is_directive(node):
            anchor = node
            continue
        break
    return anchor
