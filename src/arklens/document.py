"""
Host document analysis.

Ties the analysis core to a concrete host file: finds the ArkType expression
under a host offset, translates offsets through its mapping, and answers
completion, definition, hover and highlighting queries in host coordinates.
Used by both the CLI and the language server.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cached_property

from arklens.core.completion import Suggestion, complete
from arklens.core.config import ArklensConfig
from arklens.core.documentation import alias_doc, describe
from arklens.core.errors import check_offset
from arklens.core.host import HostScan, scan_host
from arklens.core.references import (
    HostPropertySource,
    Reference,
    ReferenceResolver,
    ResolvedDeclaration,
    ScopeTextSource,
    reference_at,
)
from arklens.core.scope import AliasSymbol, aliases_visible_at
from arklens.core.tokenizer import TokenKind, token_at, tokenize
from arklens.injection import InjectedExpression, InjectionMatcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HostToken:
    """A type-expression token positioned in host coordinates."""

    kind: TokenKind
    host_start: int
    host_end: int
    text: str


class HostDocument:
    """
    Analysis queries against one snapshot of a host file.

    The snapshot is immutable; create a new instance after every edit.
    """

    def __init__(self, text: str, config: ArklensConfig | None = None) -> None:
        self.text = text
        self.config = config or ArklensConfig()
        self.catalog = self.config.build_catalog()
        self.matcher = InjectionMatcher.from_config(self.config.injection)

    @cached_property
    def scan(self) -> HostScan:
        return scan_host(self.text)

    @cached_property
    def resolver(self) -> ReferenceResolver:
        depth = self.config.resolver.max_search_depth
        return ReferenceResolver(
            self.text,
            sources=(HostPropertySource(self.text, self.scan), ScopeTextSource(self.text, depth)),
        )

    def expressions(self) -> list[InjectedExpression]:
        return self.matcher.expressions(self.text, self.scan)

    def expression_at(self, host_offset: int) -> InjectedExpression | None:
        check_offset(host_offset, self.text, "host offset")
        return self.matcher.expression_at(self.text, host_offset, self.scan)

    def aliases_at(self, host_offset: int) -> list[AliasSymbol]:
        return aliases_visible_at(self.text, host_offset, self.catalog)

    def complete(self, host_offset: int) -> list[Suggestion]:
        """Completion proposals; empty outside ArkType expressions."""
        expression = self.expression_at(host_offset)
        if expression is None:
            return []
        cursor = expression.mapping.to_dsl(host_offset)
        return complete(expression.buffer, cursor, self.text, host_offset, self.catalog)

    def reference_at(self, host_offset: int) -> tuple[InjectedExpression, Reference] | None:
        expression = self.expression_at(host_offset)
        if expression is None:
            return None
        cursor = expression.mapping.to_dsl(host_offset)
        reference = reference_at(expression.buffer, cursor, self.catalog)
        if reference is None:
            return None
        return expression, reference

    def definition(self, host_offset: int) -> ResolvedDeclaration | None:
        """Declaration of the alias referenced at ``host_offset``."""
        found = self.reference_at(host_offset)
        if found is None:
            return None
        expression, reference = found
        return self.resolver.resolve_name(
            reference.name, expression.mapping.to_host(reference.start)
        )

    def hover(self, host_offset: int) -> str | None:
        """Markdown for the keyword, subtype or alias under ``host_offset``."""
        expression = self.expression_at(host_offset)
        if expression is None:
            return None
        cursor = expression.mapping.to_dsl(host_offset)
        token = token_at(expression.buffer, cursor, self.catalog)
        if token is None:
            return None
        if token.kind in (TokenKind.KEYWORD, TokenKind.SUBTYPE):
            return describe(token.text, self.catalog)
        declaration = self.definition(host_offset)
        if declaration is None:
            return None
        return alias_doc(declaration, self.text)

    def tokens(self) -> list[HostToken]:
        """Classified tokens of every expression, whitespace excluded."""
        result = []
        expressions = self.expressions()
        for expression in expressions:
            to_host = expression.mapping.to_host
            for token in tokenize(expression.buffer, catalog=self.catalog):
                if token.kind == TokenKind.WHITESPACE:
                    continue
                result.append(
                    HostToken(token.kind, to_host(token.start), to_host(token.end), token.text)
                )
        logger.debug(f"Classified {len(result)} tokens in {len(expressions)} expressions")
        return result
