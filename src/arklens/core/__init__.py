"""
Analysis core for ArkType type expressions embedded in host source files.

Modules:
- tokenizer: classify the characters of a type expression
- catalog: keywords, subtypes and the subtype hierarchy
- scope: aliases visible at a host offset
- completion: completion proposals
- references: alias references and their host declarations
"""

from arklens.core.catalog import DEFAULT_CATALOG, TypeCatalog
from arklens.core.completion import Suggestion, SuggestionCategory, complete
from arklens.core.errors import ArklensError, ConfigError, OffsetError, PreconditionError
from arklens.core.mapping import LinearOffsetMapping, OffsetMapping
from arklens.core.references import (
    Reference,
    ReferenceResolver,
    ResolvedDeclaration,
    extract_references,
    resolve,
)
from arklens.core.scope import AliasSymbol, ScopeRegion, aliases_visible_at
from arklens.core.tokenizer import Lexer, Token, TokenKind, tokenize

__all__ = [
    "DEFAULT_CATALOG",
    "TypeCatalog",
    "Lexer",
    "Token",
    "TokenKind",
    "tokenize",
    "AliasSymbol",
    "ScopeRegion",
    "aliases_visible_at",
    "Suggestion",
    "SuggestionCategory",
    "complete",
    "Reference",
    "ReferenceResolver",
    "ResolvedDeclaration",
    "extract_references",
    "resolve",
    "LinearOffsetMapping",
    "OffsetMapping",
    "ArklensError",
    "ConfigError",
    "OffsetError",
    "PreconditionError",
]
