"""
Keyword and subtype catalog for ArkType type expressions.

The catalog is a frozen value built once and handed to the tokenizer,
completion engine and scope extractor. Substitute catalogs (for example one
extended from ``arklens.toml``) are built with :meth:`TypeCatalog.extended`
rather than by mutating the default.

Hierarchy keys are dotted paths such as ``string.date``; the value is the
ordered list of refinements allowed after the next dot:

    string          -> date
    string.date     -> iso, parse
    string.date.iso -> parse
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

BUILTIN_TYPES: tuple[str, ...] = (
    "string",
    "number",
    "boolean",
    "object",
    "array",
    "Date",
    "null",
    "undefined",
)

UTILITY_KEYWORDS: tuple[str, ...] = (
    "Record",
    "Partial",
    "Required",
    "Pick",
    "Omit",
    "Exclude",
    "Extract",
)

SUBTYPES: tuple[str, ...] = (
    "date",
    "iso",
    "parse",
    "root",
    "integer",
    "positive",
    "negative",
    "min",
    "max",
    "range",
    "true",
    "false",
    "keys",
    "values",
    "entries",
    "length",
    "items",
)

HIERARCHY: dict[str, tuple[str, ...]] = {
    "string": ("date",),
    "string.date": ("iso", "parse"),
    "string.date.iso": ("parse",),
    "number": ("integer", "positive", "negative", "min", "max", "range"),
    "boolean": ("true", "false"),
    "object": ("keys", "values", "entries"),
    "array": ("min", "max", "length", "items"),
    "Date": ("min", "max", "range"),
}

KEYWORD_DOCS: dict[str, str] = {
    "string": "Validates that a value is a string.",
    "number": "Validates that a value is a number.",
    "boolean": "Validates that a value is a boolean.",
    "object": "Validates that a value is an object.",
    "array": "Validates that a value is an array.",
    "Date": "Validates that a value is a Date object.",
    "null": "Validates that a value is null.",
    "undefined": "Validates that a value is undefined.",
    "Record": "Creates a type with specified keys and values.",
    "Partial": "Makes all properties in a type optional.",
    "Required": "Makes all properties in a type required.",
    "Pick": "Constructs a type by picking the specified properties from a type.",
    "Omit": "Constructs a type by omitting the specified properties from a type.",
    "Exclude": (
        "Constructs a type by excluding from a union type all types "
        "that are assignable to the specified type."
    ),
    "Extract": (
        "Constructs a type by extracting from a union type all types "
        "that are assignable to the specified type."
    ),
}

SUBTYPE_DOCS: dict[str, str] = {
    "date": "Validates that a string is a valid date format.",
    "iso": "Validates that a string is in ISO date format.",
    "parse": "Transforms a string into a Date object.",
    "root": "Gets the base type of a subtyped module.",
    "integer": "Validates that a number is an integer.",
    "positive": "Validates that a number is positive.",
    "negative": "Validates that a number is negative.",
    "min": "Validates that a number is greater than or equal to a minimum value.",
    "max": "Validates that a number is less than or equal to a maximum value.",
    "range": "Validates that a number is within a specified range.",
    "true": "Validates that a boolean is true.",
    "false": "Validates that a boolean is false.",
    "keys": "Gets the keys of an object type.",
    "values": "Gets the values of an object type.",
    "entries": "Gets the entries of an object type.",
    "length": "Validates the length of an array.",
    "items": "Validates the items of an array.",
}


def _merge(base: Iterable[str], extra: Iterable[str]) -> tuple[str, ...]:
    """Append ``extra`` to ``base`` keeping first occurrences only."""
    seen: dict[str, None] = dict.fromkeys(base)
    for name in extra:
        seen.setdefault(name, None)
    return tuple(seen)


class TypeCatalog(BaseModel):
    """
    Static tables of root keywords, subtypes and the subtype hierarchy.

    Attributes:
        builtin_types: TypeScript-style base types, in declaration order
        utility_keywords: Compositional utility names (Record, Pick, ...)
        subtypes: Refinement keywords usable after a dot
        hierarchy: Dotted parent path -> ordered legal child refinements
        keyword_docs: One-line descriptions of root keywords
        subtype_docs: One-line descriptions of subtypes
    """

    builtin_types: tuple[str, ...] = BUILTIN_TYPES
    utility_keywords: tuple[str, ...] = UTILITY_KEYWORDS
    subtypes: tuple[str, ...] = SUBTYPES
    hierarchy: Mapping[str, tuple[str, ...]] = Field(
        default_factory=lambda: dict(HIERARCHY), validate_default=True
    )
    keyword_docs: Mapping[str, str] = Field(
        default_factory=lambda: dict(KEYWORD_DOCS), validate_default=True
    )
    subtype_docs: Mapping[str, str] = Field(
        default_factory=lambda: dict(SUBTYPE_DOCS), validate_default=True
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("hierarchy", "keyword_docs", "subtype_docs")
    @classmethod
    def _read_only(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        # Tables are read-only views over private copies.
        return MappingProxyType(dict(value))

    @property
    def root_keywords(self) -> tuple[str, ...]:
        """Builtin types followed by utility keywords."""
        return self.builtin_types + self.utility_keywords

    def is_keyword(self, word: str) -> bool:
        return word in self.builtin_types or word in self.utility_keywords

    def is_builtin_type(self, word: str) -> bool:
        return word in self.builtin_types

    def is_subtype(self, word: str) -> bool:
        return word in self.subtypes

    def children(self, path: str) -> tuple[str, ...]:
        """Legal refinements after ``path``; unknown paths give ``()``."""
        return self.hierarchy.get(path, ())

    def has_children(self, path: str) -> bool:
        return bool(self.hierarchy.get(path))

    def orphan_paths(self) -> list[str]:
        """Hierarchy keys whose parent path is neither a root keyword nor a key."""
        orphans = []
        for path in self.hierarchy:
            if "." not in path:
                continue
            parent = path.rsplit(".", 1)[0]
            if not self.is_keyword(parent) and parent not in self.hierarchy:
                orphans.append(path)
        return orphans

    def extended(
        self,
        builtin_types: Iterable[str] = (),
        utility_keywords: Iterable[str] = (),
        subtypes: Iterable[str] = (),
        hierarchy: Mapping[str, Iterable[str]] | None = None,
    ) -> TypeCatalog:
        """
        Return a new catalog with additional entries.

        Extra children are appended after the existing ones for a path;
        duplicates are dropped.
        """
        merged = dict(self.hierarchy)
        for path, children in (hierarchy or {}).items():
            merged[path] = _merge(merged.get(path, ()), children)
        return TypeCatalog(
            builtin_types=_merge(self.builtin_types, builtin_types),
            utility_keywords=_merge(self.utility_keywords, utility_keywords),
            subtypes=_merge(self.subtypes, subtypes),
            hierarchy=merged,
            keyword_docs=dict(self.keyword_docs),
            subtype_docs=dict(self.subtype_docs),
        )


DEFAULT_CATALOG = TypeCatalog()
