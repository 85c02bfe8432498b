"""
Completion engine for ArkType type expressions.

Two independent sources feed the suggestion list:

- when the word being typed has no dot: every root keyword from the catalog,
  then every alias visible in the enclosing scope
- when the type expression under the cursor has a dot: the catalog children
  of everything before the last dot (``string.date.`` -> ``iso``, ``parse``)

The sources look at different text (the word vs. the whole expression back to
the previous delimiter), so both can contribute to the same result.
"""

from __future__ import annotations

import logging
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from arklens.core.catalog import DEFAULT_CATALOG, TypeCatalog
from arklens.core.errors import check_offset
from arklens.core.scope import aliases_visible_at
from arklens.core.tokenizer import is_identifier_part

logger = logging.getLogger(__name__)

EXPRESSION_DELIMITERS = frozenset(" \t\r\n\"'`,{[(")


class SuggestionCategory(StrEnum):
    BUILTIN_TYPE = "builtin type"
    UTILITY_KEYWORD = "utility keyword"
    ALIAS = "alias"
    SUBTYPE = "subtype"


class Suggestion(BaseModel):
    """
    A single completion proposal.

    Attributes:
        text: Text to insert
        category: Where the proposal came from
        detail: Human-readable category label
        chain: The editor should append a dot and complete again after
            inserting, because the result has refinements of its own
    """

    text: str
    category: SuggestionCategory
    detail: str
    chain: bool = False

    model_config = ConfigDict(frozen=True)


def completion_prefix(buffer: str, cursor: int) -> str:
    """The identifier-and-dot run that ends at ``cursor``."""
    start = cursor
    while start > 0 and (is_identifier_part(buffer[start - 1]) or buffer[start - 1] == "."):
        start -= 1
    return buffer[start:cursor]


def current_type_expression(buffer: str, cursor: int) -> str:
    """Text from the last expression delimiter up to ``cursor``."""
    start = cursor
    while start > 0 and buffer[start - 1] not in EXPRESSION_DELIMITERS:
        start -= 1
    return buffer[start:cursor]


def root_suggestions(catalog: TypeCatalog = DEFAULT_CATALOG) -> list[Suggestion]:
    suggestions = []
    for keyword in catalog.root_keywords:
        if catalog.is_builtin_type(keyword):
            category = SuggestionCategory.BUILTIN_TYPE
            detail = "TypeScript type"
        else:
            category = SuggestionCategory.UTILITY_KEYWORD
            detail = "ArkType keyword"
        suggestions.append(
            Suggestion(
                text=keyword,
                category=category,
                detail=detail,
                chain=catalog.has_children(keyword),
            )
        )
    return suggestions


def subtype_suggestions(
    parent_path: str, catalog: TypeCatalog = DEFAULT_CATALOG
) -> list[Suggestion]:
    """Children of ``parent_path``; empty for paths the catalog does not know."""
    return [
        Suggestion(
            text=child,
            category=SuggestionCategory.SUBTYPE,
            detail=f"Subtype of {parent_path}",
            chain=catalog.has_children(f"{parent_path}.{child}"),
        )
        for child in catalog.children(parent_path)
    ]


def complete(
    buffer: str,
    cursor_offset: int,
    host_text: str | None = None,
    host_offset: int | None = None,
    catalog: TypeCatalog = DEFAULT_CATALOG,
) -> list[Suggestion]:
    """
    Compute completion proposals at a cursor inside a type expression.

    Args:
        buffer: The type expression (DSL-local text)
        cursor_offset: Cursor position in ``buffer``
        host_text: Full host file text, used to find scope aliases
        host_offset: Cursor position translated to host coordinates
        catalog: Keyword/subtype catalog

    Returns:
        Builtins in catalog order, then aliases in declaration order, then
        subtypes; possibly empty

    Raises:
        OffsetError: If an offset lies outside its text
    """
    check_offset(cursor_offset, buffer, "cursor offset")

    suggestions: list[Suggestion] = []
    prefix = completion_prefix(buffer, cursor_offset)

    if "." not in prefix:
        suggestions.extend(root_suggestions(catalog))
        if host_text is not None and host_offset is not None:
            for alias in aliases_visible_at(host_text, host_offset, catalog):
                suggestions.append(
                    Suggestion(text=alias.name, category=SuggestionCategory.ALIAS, detail="Type alias")
                )

    expression = current_type_expression(buffer, cursor_offset)
    if "." in expression:
        parent_path = expression.rsplit(".", 1)[0]
        suggestions.extend(subtype_suggestions(parent_path, catalog))

    logger.debug(
        f"Completion at {cursor_offset}: prefix={prefix!r} expression={expression!r} "
        f"-> {len(suggestions)} suggestions"
    )
    return suggestions
