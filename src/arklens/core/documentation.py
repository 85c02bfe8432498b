"""
Quick documentation for keywords, subtypes and aliases.
"""

from __future__ import annotations

from arklens.core.catalog import DEFAULT_CATALOG, TypeCatalog
from arklens.core.references import ResolvedDeclaration


def _format(title: str, kind: str, body: str) -> str:
    return f"**{title}** _{kind}_\n\n{body}"


def keyword_doc(keyword: str, catalog: TypeCatalog = DEFAULT_CATALOG) -> str:
    definition = catalog.keyword_docs.get(keyword, f"ArkType keyword: {keyword}")
    kind = "TypeScript type" if catalog.is_builtin_type(keyword) else "ArkType keyword"
    return _format(keyword, kind, definition)


def subtype_doc(subtype: str, catalog: TypeCatalog = DEFAULT_CATALOG) -> str:
    definition = catalog.subtype_docs.get(subtype, f"ArkType subtype: {subtype}")
    return _format(subtype, "subtype", definition)


def describe(word: str, catalog: TypeCatalog = DEFAULT_CATALOG) -> str | None:
    """
    Markdown documentation for a catalog word.

    Root keywords take precedence over subtypes. Returns ``None`` for words
    the catalog does not know.
    """
    if catalog.is_keyword(word):
        return keyword_doc(word, catalog)
    if catalog.is_subtype(word):
        return subtype_doc(word, catalog)
    return None


def alias_doc(declaration: ResolvedDeclaration, host_text: str) -> str:
    """Documentation for an alias: the host line that declares it."""
    line_start = host_text.rfind("\n", 0, declaration.host_offset) + 1
    line_end = host_text.find("\n", declaration.host_offset)
    if line_end == -1:
        line_end = len(host_text)
    line = host_text[line_start:line_end].strip()
    line_no = host_text.count("\n", 0, declaration.host_offset) + 1
    return _format(declaration.name, "type alias", f"```ts\n{line}\n```\n\nDeclared on line {line_no}.")
