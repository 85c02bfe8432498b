"""Tests for the completion engine."""

from __future__ import annotations

import pytest

from arklens.core.catalog import DEFAULT_CATALOG
from arklens.core.completion import (
    SuggestionCategory,
    complete,
    completion_prefix,
    current_type_expression,
)
from arklens.core.errors import OffsetError


def texts_at_end(buffer: str) -> list[str]:
    return [s.text for s in complete(buffer, len(buffer))]


class TestContext:
    def test_prefix_stops_at_operators(self) -> None:
        assert completion_prefix("string | num", 12) == "num"
        assert completion_prefix("string.da", 9) == "string.da"
        assert completion_prefix("", 0) == ""

    def test_expression_stops_at_delimiters(self) -> None:
        assert current_type_expression("Record<string, number.in", 24) == "number.in"
        assert current_type_expression("(string.date", 12) == "string.date"
        assert current_type_expression("a|b.c", 5) == "a|b.c"


class TestRootProposals:
    def test_empty_prefix_lists_every_root_once(self) -> None:
        texts = texts_at_end("")
        assert texts == list(DEFAULT_CATALOG.root_keywords)
        assert len(texts) == len(set(texts))

    def test_after_operator(self) -> None:
        assert texts_at_end("string | ") == list(DEFAULT_CATALOG.root_keywords)

    def test_categories_and_details(self) -> None:
        by_text = {s.text: s for s in complete("", 0)}
        assert by_text["string"].category == SuggestionCategory.BUILTIN_TYPE
        assert by_text["string"].detail == "TypeScript type"
        assert by_text["Record"].category == SuggestionCategory.UTILITY_KEYWORD
        assert by_text["Record"].detail == "ArkType keyword"

    def test_chain_flag_follows_hierarchy(self) -> None:
        by_text = {s.text: s for s in complete("", 0)}
        assert by_text["string"].chain
        assert by_text["Date"].chain
        assert not by_text["null"].chain
        assert not by_text["Record"].chain


class TestSubtypeProposals:
    def test_string_date(self) -> None:
        assert texts_at_end("string.date.") == ["iso", "parse"]
        assert texts_at_end("string.date.i") == ["iso", "parse"]

    def test_string_date_iso(self) -> None:
        assert texts_at_end("string.date.iso.") == ["parse"]

    def test_number(self) -> None:
        assert texts_at_end("number.") == [
            "integer",
            "positive",
            "negative",
            "min",
            "max",
            "range",
        ]

    def test_details_and_chain(self) -> None:
        suggestions = complete("string.date.", 12)
        assert all(s.category == SuggestionCategory.SUBTYPE for s in suggestions)
        assert all(s.detail == "Subtype of string.date" for s in suggestions)
        assert [s.chain for s in suggestions] == [True, False]

    def test_unknown_path_gives_nothing(self) -> None:
        assert texts_at_end("foo.") == []
        assert texts_at_end("string.nope.") == []

    def test_inside_generic_argument(self) -> None:
        assert texts_at_end("Record<string, number.") == [
            "integer",
            "positive",
            "negative",
            "min",
            "max",
            "range",
        ]

    def test_both_sources_can_fire(self) -> None:
        texts = texts_at_end("string.date|st")
        assert texts[: len(DEFAULT_CATALOG.root_keywords)] == list(DEFAULT_CATALOG.root_keywords)
        assert texts[len(DEFAULT_CATALOG.root_keywords) :] == ["date"]

    def test_cursor_mid_buffer(self) -> None:
        suggestions = complete("number. | x", 7)
        assert [s.text for s in suggestions][0] == "integer"


class TestAliases:
    def test_aliases_follow_roots(self, simple_scope: str) -> None:
        host_offset = simple_scope.index('"Id"') + 1
        suggestions = complete("Id", 0, simple_scope, host_offset)
        roots = len(DEFAULT_CATALOG.root_keywords)
        aliases = suggestions[roots:]
        assert [s.text for s in aliases] == ["Id", "User"]
        assert all(s.category == SuggestionCategory.ALIAS for s in aliases)
        assert all(s.detail == "Type alias" for s in aliases)
        assert not any(s.chain for s in aliases)

    def test_no_aliases_after_dot(self, simple_scope: str) -> None:
        host_offset = simple_scope.index('"Id"') + 1
        texts = [s.text for s in complete("number.", 7, simple_scope, host_offset)]
        assert "Id" not in texts

    def test_no_host_means_no_aliases(self) -> None:
        assert all(s.category != SuggestionCategory.ALIAS for s in complete("", 0))

    def test_substituted_catalog(self) -> None:
        catalog = DEFAULT_CATALOG.extended(subtypes=["email"], hierarchy={"string": ["email"]})
        texts = [s.text for s in complete("string.", 7, catalog=catalog)]
        assert texts == ["date", "email"]


class TestPreconditions:
    @pytest.mark.parametrize("cursor", [-1, 4])
    def test_cursor_outside_buffer(self, cursor: int) -> None:
        with pytest.raises(OffsetError):
            complete("abc", cursor)

    def test_host_offset_outside_host(self, simple_scope: str) -> None:
        with pytest.raises(OffsetError):
            complete("", 0, simple_scope, len(simple_scope) + 5)
