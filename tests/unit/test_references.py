"""Tests for reference extraction and resolution."""

from __future__ import annotations

import pytest

from arklens.core.errors import OffsetError, PreconditionError
from arklens.core.mapping import LinearOffsetMapping
from arklens.core.references import (
    HostPropertySource,
    Reference,
    ReferenceResolver,
    ScopeTextSource,
    extract_references,
    reference_at,
    reference_name,
    resolve,
)
from arklens.core.tokenizer import Token, TokenKind


def string_token(text: str, start: int = 0) -> Token:
    return Token(TokenKind.STRING, start, start + len(text), text)


class TestExtractReferences:
    def test_array_suffix(self) -> None:
        refs = extract_references(string_token('"User[]"', 10))
        assert refs == [Reference(name="User", start=11, end=15)]

    def test_union_members_have_own_offsets(self) -> None:
        refs = extract_references(string_token('"Id | User"'))
        assert [(r.name, r.start, r.end) for r in refs] == [("Id", 1, 3), ("User", 6, 10)]

    def test_generic_arguments(self) -> None:
        refs = extract_references(string_token('"Record<string, User>"'))
        assert [r.name for r in refs] == ["Record", "string", "User"]

    def test_parts_not_starting_with_identifier_are_dropped(self) -> None:
        refs = extract_references(string_token('"3 | Id | #x"'))
        assert [r.name for r in refs] == ["Id"]

    def test_repeated_name_is_reported_per_occurrence(self) -> None:
        refs = extract_references(string_token('"Id | Id[]"'))
        assert [(r.name, r.start) for r in refs] == [("Id", 1), ("Id", 6)]

    def test_unterminated_string(self) -> None:
        refs = extract_references(string_token('"User'))
        assert refs == [Reference(name="User", start=1, end=5)]

    def test_identifier_token_is_one_reference(self) -> None:
        token = Token(TokenKind.IDENTIFIER, 4, 8, "User")
        assert extract_references(token) == [Reference(name="User", start=4, end=8)]

    def test_other_kinds_have_none(self) -> None:
        assert extract_references(Token(TokenKind.OPERATOR, 0, 1, "|")) == []
        assert extract_references(Token(TokenKind.KEYWORD, 0, 6, "string")) == []

    def test_reference_name(self) -> None:
        assert reference_name("Id[]") == "Id"
        assert reference_name(" User ") == "User"


class TestReferenceAt:
    def test_identifier_under_cursor(self) -> None:
        assert reference_at("Id | User", 6) == Reference(name="User", start=5, end=9)

    def test_cursor_inside_array_base(self) -> None:
        assert reference_at("User[]", 2) == Reference(name="User", start=0, end=4)

    def test_cursor_at_end_before_whitespace(self) -> None:
        assert reference_at("User | Id", 4) == Reference(name="User", start=0, end=4)

    def test_cursor_at_end_before_array_suffix(self) -> None:
        assert reference_at("User[]", 4) == Reference(name="User", start=0, end=4)

    def test_keyword_is_not_a_reference(self) -> None:
        assert reference_at("string", 2) is None

    def test_out_of_range(self) -> None:
        with pytest.raises(OffsetError):
            reference_at("User", 5)


TWO_SCOPES = """\
const a = scope({ Id: "string" })
const b = scope({ Id: "number", X: "Id" })
"""


class TestHostPropertySource:
    def test_lists_every_key(self) -> None:
        found = HostPropertySource(TWO_SCOPES).resolves("Id")
        assert [d.host_offset for d in found] == [
            TWO_SCOPES.index("Id:"),
            TWO_SCOPES.index("Id:", TWO_SCOPES.index("Id:") + 1),
        ]
        assert all(d.host_text == "Id" for d in found)

    def test_interface_members_are_not_declarations(self) -> None:
        text = 'interface Shape { Id: number }\nconst s = scope({ Id: "string", X: "Id" })'
        found = HostPropertySource(text).resolves("Id")
        assert [d.host_offset for d in found] == [text.index("Id:", text.index("scope"))]

    def test_nearest_declaration_wins(self) -> None:
        resolver = ReferenceResolver(TWO_SCOPES)
        second = TWO_SCOPES.index("Id:", TWO_SCOPES.index("Id:") + 1)
        use = TWO_SCOPES.rindex('"Id"') + 1
        assert resolver.resolve_name("Id", use).host_offset == second
        assert resolver.resolve_name("Id", 0).host_offset == TWO_SCOPES.index("Id:")


class TestScopeTextSource:
    def test_direct_key(self, simple_scope: str) -> None:
        (decl,) = ScopeTextSource(simple_scope).resolves("User")
        assert decl.host_offset == simple_scope.index("User:")
        assert decl.host_text == "User"

    def test_quoted_key_in_nested_block(self) -> None:
        text = 'const s = scope({ Outer: { "Inner": "string" } })'
        (decl,) = ScopeTextSource(text).resolves("Inner")
        assert decl.host_offset == text.index('"Inner"')
        assert decl.host_text == '"Inner"'

    def test_optional_key(self) -> None:
        text = 'const s = scope({ Outer: { Maybe?: "string" } })'
        (decl,) = ScopeTextSource(text).resolves("Maybe")
        assert decl.host_text == "Maybe?"

    def test_dependent_definition_is_searched(self) -> None:
        text = 'const s = scope({ A: "x" })\nconst g = s.type({ Local: "string" })'
        (decl,) = ScopeTextSource(text).resolves("Local")
        assert decl.host_offset == text.index("Local:")

    def test_outside_scopes_is_not_searched(self) -> None:
        text = 'const o = { Loose: "string" }\nconst s = scope({ A: "x" })'
        assert ScopeTextSource(text).resolves("Loose") == []

    def test_suffix_does_not_match(self) -> None:
        text = 'const s = scope({ Outer: { "MyId": "string" } })'
        assert ScopeTextSource(text).resolves("Id") == []


class TestResolver:
    def test_falls_back_to_scope_text(self) -> None:
        text = 'const s = scope({ Outer: { Maybe?: "string" }, B: "Maybe" })'
        decl = ReferenceResolver(text).resolve_name("Maybe", text.rindex("Maybe"))
        assert decl is not None
        assert decl.host_offset == text.index("Maybe?")

    def test_custom_sources(self) -> None:
        text = 'const o = { Loose: "string" }'
        resolver = ReferenceResolver(text, sources=[ScopeTextSource(text)])
        assert resolver.resolve_name("Loose", 0) is None

    def test_missing_name_is_absent(self, scope_source: str) -> None:
        assert ReferenceResolver(scope_source).resolve_name("Nowhere", 0) is None


class TestResolve:
    def test_array_occurrence_through_mapping(self, simple_scope: str) -> None:
        content_start = simple_scope.index('"Id[]"') + 1
        mapping = LinearOffsetMapping(content_start, 4)
        decl = resolve(simple_scope, "Id[]", (0, 4), mapping)
        assert decl is not None
        assert decl.name == "Id"
        assert decl.host_offset == simple_scope.index("Id:")

    def test_nearest_declaration_uses_mapped_offset(self) -> None:
        content_start = TWO_SCOPES.rindex('"Id"') + 1
        decl = resolve(TWO_SCOPES, "Id", (0, 2), LinearOffsetMapping(content_start, 2))
        second = TWO_SCOPES.index("Id:", TWO_SCOPES.index("Id:") + 1)
        assert decl is not None
        assert decl.host_offset == second

    def test_mapping_decides_between_declarations(self) -> None:
        decl = resolve(TWO_SCOPES, "Id", (0, 2), LinearOffsetMapping(0, 2))
        assert decl is not None
        assert decl.host_offset == TWO_SCOPES.index("Id:")

    def test_mapping_outside_host_text(self) -> None:
        with pytest.raises(OffsetError):
            resolve(TWO_SCOPES, "Id", (0, 2), LinearOffsetMapping(len(TWO_SCOPES) + 10, 2))

    def test_no_match_is_not_an_error(self, simple_scope: str) -> None:
        assert resolve(simple_scope, "Missing", (0, 7), LinearOffsetMapping(0, 7)) is None

    def test_empty_occurrence(self, simple_scope: str) -> None:
        assert resolve(simple_scope, "Id", (1, 1), LinearOffsetMapping(0, 2)) is None

    def test_inverted_range(self, simple_scope: str) -> None:
        with pytest.raises(PreconditionError):
            resolve(simple_scope, "User", (3, 1), LinearOffsetMapping(0, 4))

    def test_range_past_buffer(self, simple_scope: str) -> None:
        with pytest.raises(OffsetError):
            resolve(simple_scope, "User", (0, 9), LinearOffsetMapping(0, 4))
