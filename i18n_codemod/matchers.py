"""Literal matchers: one predicate and rewrite pair per syntactic shape."""

from __future__ import annotations

import html
from abc import ABC, abstractmethod
from typing import Iterable, Iterator, Sequence

from tree_sitter import Node

from .source import SourceDocument, is_string_literal, named_children
from .structures import (
    TRANSLATION_FUNCTION,
    KeyDeriver,
    LiteralShape,
    LiteralSite,
    PrintOptions,
    SiteState,
    TransformResult,
)

STRUCTURAL_JSX_CHILDREN = {
    "jsx_element",
    "jsx_self_closing_element",
    "jsx_expression",
}


def render_translation_call(key: str, options: PrintOptions) -> str:
    """Render ``t('<key>')`` using the configured quote style."""

    quote = options.quote_char
    escaped = key.replace("\\", "\\\\").replace(quote, "\\" + quote)
    return f"{TRANSLATION_FUNCTION}({quote}{escaped}{quote})"


def _line_of(document: SourceDocument, offset: int) -> int:
    return document.data.count(b"\n", 0, offset) + 1


class LiteralMatcher(ABC):
    """Finds literal sites of one shape and rewrites them into translation calls."""

    shape: LiteralShape

    def __init__(self, *, key_deriver: KeyDeriver, print_options: PrintOptions) -> None:
        self.key_deriver = key_deriver
        self.print_options = print_options

    @abstractmethod
    def find_sites(self, document: SourceDocument) -> Iterator[LiteralSite]:
        """Yield every candidate site of this matcher's shape."""

    def render(self, call: str) -> str:
        """Text that replaces the site's byte range."""

        return call

    def site(
        self,
        document: SourceDocument,
        start: int,
        end: int,
        text: str,
        *,
        rewritten: bool = False,
    ) -> LiteralSite:
        state = (
            SiteState.REWRITTEN
            if rewritten or document.is_rewritten(start, end)
            else SiteState.LITERAL
        )
        return LiteralSite(
            shape=self.shape,
            start=start,
            end=end,
            text=text,
            state=state,
            line=_line_of(document, start),
        )

    def string_site(
        self,
        document: SourceDocument,
        node: Node,
        *,
        jsx: bool = False,
        rewritten: bool = False,
    ) -> LiteralSite:
        return self.site(
            document,
            node.start_byte,
            node.end_byte,
            document.string_value(node, jsx=jsx),
            rewritten=rewritten,
        )

    def apply(self, document: SourceDocument, result: TransformResult) -> int:
        """Rewrite every eligible site and return how many were rewritten."""

        count = 0
        for site in list(self.find_sites(document)):
            if not site.eligible:
                continue
            key = self.key_deriver(site.text)
            call = render_translation_call(key, self.print_options)
            document.replace(site.start, site.end, self.render(call))
            result.record_rewrite(site)
            count += 1
        return count


class MarkupTextMatcher(LiteralMatcher):
    """``<span>Hello</span>`` becomes ``<span>{t('hello')}</span>``.

    The text between two structural children (or between a child and a tag)
    is one site, including its surrounding whitespace, and is replaced as a
    whole.
    """

    shape = LiteralShape.MARKUP_TEXT

    def render(self, call: str) -> str:
        return "{" + call + "}"

    def find_sites(self, document: SourceDocument) -> Iterator[LiteralSite]:
        for element in document.iter_nodes("jsx_element"):
            children = element.children
            if len(children) < 2:
                continue
            open_tag, close_tag = children[0], children[-1]
            if open_tag.type != "jsx_opening_element" or close_tag.type != "jsx_closing_element":
                continue
            cursor = open_tag.end_byte
            boundaries = [
                child for child in children[1:-1] if child.type in STRUCTURAL_JSX_CHILDREN
            ]
            for boundary in boundaries + [close_tag]:
                if boundary.start_byte > cursor:
                    raw = document.slice(cursor, boundary.start_byte)
                    yield self.site(document, cursor, boundary.start_byte, html.unescape(raw))
                cursor = boundary.end_byte


class AttributeLiteralMatcher(LiteralMatcher):
    """``<Comp name="Awesome" />`` becomes ``<Comp name={t('awesome')} />``."""

    shape = LiteralShape.ATTRIBUTE_LITERAL

    def render(self, call: str) -> str:
        return "{" + call + "}"

    def find_sites(self, document: SourceDocument) -> Iterator[LiteralSite]:
        for attribute in document.iter_nodes("jsx_attribute"):
            children = attribute.children
            if len(children) < 3 or children[1].type != "=":
                continue
            value = children[2]
            if is_string_literal(value):
                yield self.string_site(document, value, jsx=True)


class ExpressionContainerMatcher(LiteralMatcher):
    """``<Comp name={'Awesome'} />`` becomes ``<Comp name={t('awesome')} />``."""

    shape = LiteralShape.EXPRESSION_CONTAINER

    def find_sites(self, document: SourceDocument) -> Iterator[LiteralSite]:
        for container in document.iter_nodes("jsx_expression"):
            inner = named_children(container)
            if len(inner) == 1 and is_string_literal(inner[0]):
                yield self.string_site(document, inner[0])


class CallArgumentMatcher(LiteralMatcher):
    """String arguments of any call, and string values of object arguments.

    ``Yup.string().required('this field is required')`` and
    ``showSnackbar({ message: 'ok' })`` are both rewritten. Matching is by
    shape, not by callee, apart from the deny list and calls to the
    translation function itself.
    """

    shape = LiteralShape.CALL_ARGUMENT

    def __init__(
        self,
        *,
        key_deriver: KeyDeriver,
        print_options: PrintOptions,
        ignored_callees: Iterable[str] = (),
    ) -> None:
        super().__init__(key_deriver=key_deriver, print_options=print_options)
        self.ignored_callees = frozenset(ignored_callees)

    def find_sites(self, document: SourceDocument) -> Iterator[LiteralSite]:
        for call in document.iter_nodes("call_expression"):
            callee = call.child_by_field_name("function")
            arguments = call.child_by_field_name("arguments")
            if callee is None or arguments is None or arguments.type != "arguments":
                continue
            callee_name = document.text(callee)
            if callee_name in self.ignored_callees:
                continue
            rewritten = callee_name == TRANSLATION_FUNCTION
            for argument in named_children(arguments):
                if is_string_literal(argument):
                    yield self.string_site(document, argument, rewritten=rewritten)
                elif argument.type == "object":
                    yield from self._object_sites(document, argument, rewritten)

    def _object_sites(
        self,
        document: SourceDocument,
        obj: Node,
        rewritten: bool,
    ) -> Iterator[LiteralSite]:
        for prop in named_children(obj):
            if prop.type != "pair":
                continue
            key = prop.child_by_field_name("key")
            value = prop.child_by_field_name("value")
            if key is None or key.type == "computed_property_name":
                continue
            if is_string_literal(value):
                yield self.string_site(document, value, rewritten=rewritten)


def build_matchers(
    *,
    key_deriver: KeyDeriver,
    print_options: PrintOptions,
    ignored_callees: Sequence[str] = (),
) -> list[LiteralMatcher]:
    """Matchers in the order the rewrite engine applies them."""

    return [
        MarkupTextMatcher(key_deriver=key_deriver, print_options=print_options),
        AttributeLiteralMatcher(key_deriver=key_deriver, print_options=print_options),
        ExpressionContainerMatcher(key_deriver=key_deriver, print_options=print_options),
        CallArgumentMatcher(
            key_deriver=key_deriver,
            print_options=print_options,
            ignored_callees=ignored_callees,
        ),
    ]
