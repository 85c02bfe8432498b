"""
Scope extraction: which type aliases are visible at a host offset.

A scope is declared in host text as

    const coolScope = scope({
        Id: "string",
        User: { id: "Id", friends: "Id[]" },
    })

Aliases are the top-level keys of the scope object, in declaration order.
Definitions built from a scope (``const group = coolScope.type({ ... })``) see
the aliases of that scope; the dependent definition's own keys are not added.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict

from arklens.core.catalog import DEFAULT_CATALOG, TypeCatalog
from arklens.core.errors import check_offset
from arklens.core.scanning import (
    ALIAS_RE,
    BINDING_KEYWORDS,
    Block,
    balance,
    iter_dependent_blocks,
    iter_scope_headers,
    top_level_mask,
)

logger = logging.getLogger(__name__)

PRIVATE_MARKER = "#"


class ScopeRegion(BaseModel):
    """
    Brace-balanced body of a scope declaration.

    Attributes:
        name: Variable the scope is bound to
        host_start: Offset just past the opening brace
        host_end: Offset of the closing brace (text length when unbalanced)
        closed: Whether the closing brace was found
        raw_content: ``host_text[host_start:host_end]``
    """

    name: str
    host_start: int
    host_end: int
    closed: bool
    raw_content: str

    model_config = ConfigDict(frozen=True)

    @property
    def block(self) -> Block:
        return Block(self.host_start, self.host_end, self.closed)

    def contains(self, host_offset: int) -> bool:
        return self.block.contains(host_offset)


class AliasSymbol(BaseModel):
    """A type alias declared in a scope."""

    name: str
    declaring_offset: int

    model_config = ConfigDict(frozen=True)


def find_scope_regions(host_text: str) -> Iterator[ScopeRegion]:
    """Yield every scope declaration in ``host_text``, in textual order."""
    for header in iter_scope_headers(host_text):
        block = balance(host_text, header.header_end)
        yield ScopeRegion(
            name=header.name,
            host_start=block.start,
            host_end=block.end,
            closed=block.closed,
            raw_content=block.content(host_text),
        )


def is_alias_name(name: str, catalog: TypeCatalog = DEFAULT_CATALOG) -> bool:
    """Whether a key may name an alias (not private, not a keyword)."""
    return not (
        name.startswith(PRIVATE_MARKER)
        or name in BINDING_KEYWORDS
        or catalog.is_keyword(name)
        or catalog.is_subtype(name)
    )


def extract_aliases(
    region: ScopeRegion, catalog: TypeCatalog = DEFAULT_CATALOG
) -> list[AliasSymbol]:
    """
    Top-level ``name:`` keys of a scope body.

    Keys nested inside alias definitions (``User: { id: ... }``) are
    properties, not aliases, and are skipped. Duplicate names keep their first
    declaration.
    """
    content = region.raw_content
    mask = top_level_mask(content)
    aliases: dict[str, AliasSymbol] = {}
    for match in ALIAS_RE.finditer(content):
        name = match.group(1)
        if not mask[match.start(1)] or name in aliases:
            continue
        # \w does not match the marker, so look one character back
        if match.start(1) > 0 and content[match.start(1) - 1] == PRIVATE_MARKER:
            continue
        if not is_alias_name(name, catalog):
            continue
        aliases[name] = AliasSymbol(
            name=name, declaring_offset=region.host_start + match.start(1)
        )
    return list(aliases.values())


def active_scope_at(host_text: str, host_offset: int) -> ScopeRegion | None:
    """
    The scope whose aliases are visible at ``host_offset``.

    The first scope that either contains the offset or has a dependent
    ``.type({...})`` definition containing it wins; enclosing scopes are not
    merged.
    """
    for region in find_scope_regions(host_text):
        if region.contains(host_offset):
            logger.debug(f"Offset {host_offset} is inside scope '{region.name}'")
            return region
        for block in iter_dependent_blocks(host_text, region.name):
            if block.contains(host_offset):
                logger.debug(
                    f"Offset {host_offset} is inside a definition built from scope '{region.name}'"
                )
                return region
    return None


def aliases_visible_at(
    host_text: str, host_offset: int, catalog: TypeCatalog = DEFAULT_CATALOG
) -> list[AliasSymbol]:
    """
    Aliases visible at ``host_offset``, in declaration order.

    Args:
        host_text: Full text of the host file
        host_offset: Position in host coordinates
        catalog: Catalog whose keywords are never treated as aliases

    Returns:
        Alias symbols; empty when the offset is not in any scope

    Raises:
        OffsetError: If the offset lies outside the host text
    """
    check_offset(host_offset, host_text, "host offset")
    region = active_scope_at(host_text, host_offset)
    if region is None:
        return []
    return extract_aliases(region, catalog)
