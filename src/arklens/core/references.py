"""
Reference extraction and resolution for alias names used in type expressions.

A string such as ``"User[] | Id"`` refers to the aliases ``User`` and ``Id``.
Resolution maps each name back to its declaration in the host file. Sources
are tried in order and the first one that knows the name wins:

1. :class:`HostPropertySource` - object-literal keys found by the host
   scanner; among several, the one nearest the reference is chosen
2. :class:`ScopeTextSource` - textual search through scope bodies, used when
   the host scanner found nothing

Not finding a declaration is a normal outcome and yields ``None``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Protocol

from pydantic import BaseModel, ConfigDict

from arklens.core.catalog import DEFAULT_CATALOG, TypeCatalog
from arklens.core.errors import PreconditionError, check_offset
from arklens.core.host import HostScan, scan_host
from arklens.core.mapping import OffsetMapping
from arklens.core.scanning import (
    DEFAULT_MAX_DEPTH,
    Block,
    build_region_tree,
    iter_dependent_blocks,
)
from arklens.core.scope import find_scope_regions
from arklens.core.tokenizer import Token, TokenKind, is_identifier_part, is_identifier_start, token_at

logger = logging.getLogger(__name__)

REFERENCE_SEPARATORS = frozenset("|&, <>()[].")

ARRAY_BASE_RE = re.compile(r"([a-zA-Z_][a-zA-Z0-9_]*)\[\]")

REFERENCE_KINDS = frozenset({TokenKind.STRING, TokenKind.IDENTIFIER, TokenKind.SUBTYPE})


class Reference(BaseModel):
    """
    A candidate alias name inside a token.

    Attributes:
        name: The identifier text
        start: DSL-local offset of the first character
        end: DSL-local offset just past the name
    """

    name: str
    start: int
    end: int

    model_config = ConfigDict(frozen=True)

    def contains(self, offset: int) -> bool:
        return self.start <= offset <= self.end


class ResolvedDeclaration(BaseModel):
    """
    Where a name is declared in the host file.

    Attributes:
        name: The resolved name
        host_offset: Host offset of the declaration
        host_end: Host offset just past the declared key
        host_text: Declared key exactly as written in the host file
    """

    name: str
    host_offset: int
    host_end: int
    host_text: str

    model_config = ConfigDict(frozen=True)


def _leading_identifier(text: str) -> str:
    end = 1
    while end < len(text) and is_identifier_part(text[end]):
        end += 1
    return text[:end]


def _string_content_bounds(text: str) -> tuple[int, int]:
    """Offsets of a string token's content inside the token text."""
    quote = text[0]
    if len(text) >= 2 and text[-1] == quote:
        return 1, len(text) - 1
    return 1, len(text)


def extract_references(token: Token) -> list[Reference]:
    """
    Candidate references in a token.

    String tokens are split on type separators; every part starting with an
    identifier character contributes its leading identifier. Array forms
    (``Name[]``) contribute ``Name`` when the split did not already produce a
    reference at the same offset. Identifier and subtype tokens are one
    reference each; other kinds have none.
    """
    if token.kind not in REFERENCE_KINDS or not token.text:
        return []
    if token.kind != TokenKind.STRING:
        return [Reference(name=token.text, start=token.start, end=token.end)]

    text = token.text
    content_start, content_end = _string_content_bounds(text)
    references: list[Reference] = []

    part_start = content_start
    for pos in range(content_start, content_end + 1):
        if pos < content_end and text[pos] not in REFERENCE_SEPARATORS:
            continue
        part = text[part_start:pos]
        stripped = part.strip()
        if stripped and is_identifier_start(stripped[0]):
            name = _leading_identifier(stripped)
            offset = token.start + part_start + part.index(stripped)
            references.append(Reference(name=name, start=offset, end=offset + len(name)))
        part_start = pos + 1

    seen = {ref.start for ref in references}
    for match in ARRAY_BASE_RE.finditer(text, content_start, content_end):
        offset = token.start + match.start(1)
        if offset not in seen:
            seen.add(offset)
            references.append(
                Reference(name=match.group(1), start=offset, end=token.start + match.end(1))
            )

    return references


def reference_at(
    buffer: str, offset: int, catalog: TypeCatalog = DEFAULT_CATALOG
) -> Reference | None:
    """The reference under ``offset`` in a DSL buffer, if any."""
    check_offset(offset, buffer)
    token = token_at(buffer, offset, catalog)
    if token is None:
        return None
    for reference in extract_references(token):
        if reference.contains(offset):
            return reference
    return None


def reference_name(text: str) -> str:
    """Name referred to by an occurrence's text (``Id[]`` -> ``Id``)."""
    match = ARRAY_BASE_RE.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


class DeclarationSource(Protocol):
    """Anything that can list declarations of a name in the host file."""

    def resolves(self, name: str) -> list[ResolvedDeclaration]: ...


class HostPropertySource:
    """Declarations from object-literal keys in the host file."""

    def __init__(self, host_text: str, scan: HostScan | None = None) -> None:
        self.host_text = host_text
        self.scan = scan if scan is not None else scan_host(host_text)

    def resolves(self, name: str) -> list[ResolvedDeclaration]:
        return [
            ResolvedDeclaration(
                name=name, host_offset=key.start, host_end=key.end, host_text=key.raw
            )
            for key in self.scan.properties_named(name)
        ]


class ScopeTextSource:
    """
    Declarations found by searching scope bodies as plain text.

    First every scope body (and every ``scope.type({...})`` body) is searched
    for ``name:``. If that fails, nested blocks are searched, down to
    ``max_depth`` levels, for quoted or optional keys (``"name":``,
    ``name?:``). At most one declaration is reported.
    """

    def __init__(self, host_text: str, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        self.host_text = host_text
        self.max_depth = max_depth

    def regions(self) -> list[Block]:
        blocks = []
        for region in find_scope_regions(self.host_text):
            blocks.append(region.block)
            blocks.extend(iter_dependent_blocks(self.host_text, region.name))
        return blocks

    def resolves(self, name: str) -> list[ResolvedDeclaration]:
        regions = self.regions()
        direct = re.compile(r"\b" + re.escape(name) + r"\s*:")
        for block in regions:
            match = direct.search(self.host_text, block.start, block.end)
            if match:
                return [self._declaration(name, match.start(), match.start() + len(name))]

        shaped = re.compile(
            r"""(["'`]?)(?<![\w$])""" + re.escape(name) + r"""\??\1\s*:"""
        )
        for block in regions:
            tree = build_region_tree(self.host_text, block, self.max_depth)
            for node in tree.walk():
                for start, end in node.own_spans():
                    match = shaped.search(self.host_text, start, end)
                    if match:
                        key_end = match.end() - 1
                        while self.host_text[key_end - 1].isspace():
                            key_end -= 1
                        return [self._declaration(name, match.start(), key_end)]
        return []

    def _declaration(self, name: str, start: int, end: int) -> ResolvedDeclaration:
        return ResolvedDeclaration(
            name=name, host_offset=start, host_end=end, host_text=self.host_text[start:end]
        )


class ReferenceResolver:
    """
    Resolve alias names against one host file.

    Args:
        host_text: Full text of the host file
        sources: Declaration sources in priority order; defaults to host
            property keys, then scope text search
        max_depth: Nesting bound for the scope text search
    """

    def __init__(
        self,
        host_text: str,
        sources: Sequence[DeclarationSource] | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.host_text = host_text
        if sources is None:
            sources = (HostPropertySource(host_text), ScopeTextSource(host_text, max_depth))
        self.sources = tuple(sources)

    def resolve_name(self, name: str, host_offset: int) -> ResolvedDeclaration | None:
        """
        Declaration of ``name`` nearest to ``host_offset``.

        Sources are consulted in order; the first that reports any declaration
        decides the result.
        """
        for source in self.sources:
            candidates = source.resolves(name)
            if not candidates:
                continue
            best = min(candidates, key=lambda decl: abs(decl.host_offset - host_offset))
            logger.debug(
                f"Resolved '{name}' via {type(source).__name__}: "
                f"{len(candidates)} candidates, nearest at {best.host_offset}"
            )
            return best
        logger.debug(f"No declaration found for '{name}'")
        return None


def resolve(
    host_text: str,
    dsl_buffer: str,
    occurrence: tuple[int, int],
    mapping: OffsetMapping,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> ResolvedDeclaration | None:
    """
    Resolve the name occupying ``occurrence`` in a DSL buffer.

    Args:
        host_text: Full text of the host file
        dsl_buffer: The injected type expression
        occurrence: ``(start, end)`` of the name, DSL-local
        mapping: DSL-to-host offset mapping of the injection; the
            occurrence is translated through it before the nearest
            declaration is chosen
        max_depth: Nesting bound for the scope text search

    Returns:
        The declaration, or ``None`` when the name is not declared

    Raises:
        PreconditionError: If the occurrence is not a range inside the buffer,
            or the mapping places it outside the host text
    """
    start, end = occurrence
    check_offset(start, dsl_buffer, "occurrence start")
    check_offset(end, dsl_buffer, "occurrence end")
    if end < start:
        raise PreconditionError(f"occurrence range ({start}, {end}) is inverted")

    name = reference_name(dsl_buffer[start:end])
    if not name:
        return None
    host_offset = mapping.to_host(start)
    check_offset(host_offset, host_text, "mapped occurrence")
    return ReferenceResolver(host_text, max_depth=max_depth).resolve_name(name, host_offset)
