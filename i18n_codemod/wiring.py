"""Export wiring: bring ``t`` into scope for the default-exported component.

Resolution is split into a pure planning step over the export's shape and an
apply step that records the edits. The hook is always preferred; the wrapper
is only planned when no exported function can receive the hook.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Dict, List, Optional

from tree_sitter import Node

from .source import SourceDocument, is_identifier, named_children
from .structures import (
    HOOK_NAME,
    LEGACY_WRAPPER_NAMES,
    TRANSLATION_FUNCTION,
    WRAPPER_NAME,
    PrintOptions,
    WiringState,
)

HOOK_STATEMENT = f"const {{ {TRANSLATION_FUNCTION} }} = {HOOK_NAME}();"
INDENT_STEP = "  "

FUNCTION_DECLARATIONS = {"function_declaration", "generator_function_declaration"}
FUNCTION_EXPRESSIONS = {
    "function_expression",
    "function",
    "arrow_function",
    "generator_function",
}


class ExportShape(Enum):
    """Recognised forms of ``export default <value>``."""

    IDENTIFIER = auto()
    CALL = auto()
    OTHER = auto()


class WiringAction(Enum):
    HOOK = auto()
    WRAP = auto()
    NONE = auto()


@dataclass
class WiringPlan:
    """What the resolver decided to do with the default export."""

    shape: ExportShape
    action: WiringAction
    target: Optional[Node] = None
    functions: List[Node] = field(default_factory=list)
    already_wired: bool = False


def find_default_export(document: SourceDocument) -> Optional[Node]:
    """Return the value expression of ``export default <expr>``, if any."""

    for statement in document.root.named_children:
        if statement.type != "export_statement":
            continue
        if not any(child.type == "default" for child in statement.children):
            continue
        return statement.child_by_field_name("value")
    return None


def classify_export(value: Optional[Node]) -> ExportShape:
    if value is None:
        return ExportShape.OTHER
    if value.type == "identifier":
        return ExportShape.IDENTIFIER
    if value.type == "call_expression":
        return ExportShape.CALL
    return ExportShape.OTHER


def find_functions(document: SourceDocument, name: str) -> List[Node]:
    """Functions declared as ``name`` or assigned to a variable called ``name``."""

    matches: List[Node] = []
    for node in document.iter_nodes(*(FUNCTION_DECLARATIONS | FUNCTION_EXPRESSIONS)):
        if node.type in FUNCTION_DECLARATIONS:
            identifier = node.child_by_field_name("name")
            if identifier is not None and document.text(identifier) == name:
                matches.append(node)
            continue
        parent = node.parent
        if parent is None or parent.type != "variable_declarator":
            continue
        declared = parent.child_by_field_name("name")
        value = parent.child_by_field_name("value")
        if not is_identifier(declared) or document.text(declared) != name:
            continue
        if value is not None and value.start_byte == node.start_byte and value.end_byte == node.end_byte:
            matches.append(node)
    return matches


def callee_head(document: SourceDocument, call: Node) -> Optional[str]:
    """Name at the root of a (possibly curried) call chain.

    ``withTranslation()(Comp)`` and ``withTranslation(Comp)`` both yield
    ``withTranslation``.
    """

    callee = call.child_by_field_name("function")
    while callee is not None and callee.type == "call_expression":
        callee = callee.child_by_field_name("function")
    if callee is None:
        return None
    return document.text(callee)


def _plan_identifier(document: SourceDocument, value: Node) -> WiringPlan:
    functions = find_functions(document, document.text(value))
    if functions:
        return WiringPlan(
            shape=ExportShape.IDENTIFIER,
            action=WiringAction.HOOK,
            target=value,
            functions=functions[:1],
        )
    return WiringPlan(shape=ExportShape.IDENTIFIER, action=WiringAction.WRAP, target=value)


def _plan_call(document: SourceDocument, value: Node) -> WiringPlan:
    if callee_head(document, value) in (WRAPPER_NAME, *LEGACY_WRAPPER_NAMES):
        return WiringPlan(
            shape=ExportShape.CALL,
            action=WiringAction.NONE,
            target=value,
            already_wired=True,
        )

    arguments = value.child_by_field_name("arguments")
    candidates = named_children(arguments) if arguments is not None else []
    for argument in candidates:
        if not is_identifier(argument):
            continue
        functions = find_functions(document, document.text(argument))
        if functions:
            return WiringPlan(
                shape=ExportShape.CALL,
                action=WiringAction.HOOK,
                target=value,
                functions=functions[:1],
            )
    return WiringPlan(shape=ExportShape.CALL, action=WiringAction.WRAP, target=value)


def _plan_other(document: SourceDocument, value: Optional[Node]) -> WiringPlan:
    return WiringPlan(shape=ExportShape.OTHER, action=WiringAction.NONE, target=value)


_PLANNERS: Dict[ExportShape, Callable[[SourceDocument, Node], WiringPlan]] = {
    ExportShape.IDENTIFIER: _plan_identifier,
    ExportShape.CALL: _plan_call,
    ExportShape.OTHER: _plan_other,
}


def plan_wiring(document: SourceDocument) -> WiringPlan:
    """Decide how the default export gets access to ``t`` without editing anything."""

    value = find_default_export(document)
    return _PLANNERS[classify_export(value)](document, value)


def binds_translation(document: SourceDocument, pattern: Optional[Node]) -> bool:
    """True for ``{ t }``, ``{ t: t }``, ``{ x: t }`` and ``[t]`` patterns."""

    if pattern is None:
        return False
    if pattern.type == "array_pattern":
        elements = named_children(pattern)
        return bool(elements) and is_identifier(elements[0]) and (
            document.text(elements[0]) == TRANSLATION_FUNCTION
        )
    if pattern.type != "object_pattern":
        return False
    for prop in named_children(pattern):
        if prop.type == "shorthand_property_identifier_pattern":
            bound: Optional[Node] = prop
        elif prop.type == "pair_pattern":
            bound = prop.child_by_field_name("value")
            if not is_identifier(bound):
                continue
        else:
            continue
        if document.text(bound) == TRANSLATION_FUNCTION:
            return True
    return False


def has_hook_binding(document: SourceDocument, body: Node) -> bool:
    """True when the block already takes ``t`` from the hook."""

    for statement in named_children(body):
        if statement.type not in {"lexical_declaration", "variable_declaration"}:
            continue
        for declarator in named_children(statement):
            if declarator.type != "variable_declarator":
                continue
            initial = declarator.child_by_field_name("value")
            if initial is None or initial.type != "call_expression":
                continue
            callee = initial.child_by_field_name("function")
            if callee is None or document.text(callee) != HOOK_NAME:
                continue
            if binds_translation(document, declarator.child_by_field_name("name")):
                return True
    return False


def inject_hook(document: SourceDocument, function: Node, options: PrintOptions) -> None:
    """Make the hook binding the first statement of ``function``'s body."""

    body = function.child_by_field_name("body")
    if body is None:
        return
    newline = options.line_terminator

    if body.type == "statement_block":
        if has_hook_binding(document, body):
            return
        brace_end = body.start_byte + 1
        statements = named_children(body)
        if not statements:
            indent = document.line_indent(body.start_byte)
            document.insert(
                brace_end,
                newline + indent + INDENT_STEP + HOOK_STATEMENT + newline + indent,
            )
            return
        first = statements[0]
        if first.start_point[0] == body.start_point[0]:
            document.insert(brace_end, " " + HOOK_STATEMENT)
            return
        indent = document.line_indent(first.start_byte)
        document.insert(brace_end, newline + indent + HOOK_STATEMENT)
        return

    # Expression body: turn it into a block that returns the expression.
    indent = document.line_indent(body.start_byte)
    inner = indent + INDENT_STEP
    document.insert(
        body.start_byte,
        "{" + newline + inner + HOOK_STATEMENT + newline + inner + "return ",
    )
    document.insert(body.end_byte, ";" + newline + indent + "}")


def wrap_export(document: SourceDocument, target: Node) -> None:
    """``X`` becomes ``withTranslation()(X)``."""

    document.insert(target.start_byte, f"{WRAPPER_NAME}()(")
    document.insert(target.end_byte, ")")


def apply_wiring(
    document: SourceDocument,
    plan: WiringPlan,
    options: PrintOptions,
) -> WiringState:
    """Record the edits a plan calls for and report which pattern is in use."""

    state = WiringState(already_wired=plan.already_wired)
    if plan.action is WiringAction.HOOK:
        for function in plan.functions:
            inject_hook(document, function, options)
        state.hook_in_use = True
    elif plan.action is WiringAction.WRAP and plan.target is not None:
        wrap_export(document, plan.target)
        state.wrapper_in_use = True
    return state
