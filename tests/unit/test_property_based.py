"""
Property-based tests using Hypothesis.

These tests check invariants of the tokenizer, scope extraction, completion
and resolution over a wide range of inputs, including malformed host text.
"""

from __future__ import annotations

from hypothesis import assume, given, settings
from hypothesis import strategies as st

from arklens.core.catalog import DEFAULT_CATALOG
from arklens.core.completion import Suggestion, complete
from arklens.core.mapping import LinearOffsetMapping
from arklens.core.references import ResolvedDeclaration, reference_at, resolve
from arklens.core.scope import aliases_visible_at, find_scope_regions, is_alias_name
from arklens.core.tokenizer import TokenKind, token_at, tokenize

# Pieces of plausible (and broken) host source, so generated text often
# contains scopes, keys and dependent definitions.
HOST_FRAGMENTS = [
    "const ",
    "s",
    "g",
    " = ",
    "scope(",
    "s.type(",
    "type(",
    "{",
    "}",
    "(",
    ")",
    "Id",
    "User",
    "#Secret",
    ": ",
    "?: ",
    '"',
    "'",
    '"Id[]"',
    '"string"',
    ", ",
    "\n",
    " | ",
    "interface ",
    "type ",
    "// ",
    "/*",
    "*/",
]

host_text = st.lists(st.sampled_from(HOST_FRAGMENTS), max_size=60).map("".join)
identifier = st.from_regex(r"[A-Za-z_$][A-Za-z0-9_$]{0,15}", fullmatch=True)


# =============================================================================
# Tokenizer Property Tests
# =============================================================================


class TestTokenizerProperties:
    """Property-based tests for the type-expression tokenizer."""

    @given(st.text(min_size=0, max_size=1000))
    @settings(max_examples=200)
    def test_tokens_cover_buffer(self, buffer: str) -> None:
        """Invariant: tokens are non-empty, contiguous and rebuild the buffer."""
        tokens = list(tokenize(buffer))
        position = 0
        for token in tokens:
            assert token.start == position
            assert token.end > token.start
            assert token.text == buffer[token.start : token.end]
            position = token.end
        assert position == len(buffer)

    @given(st.text(min_size=0, max_size=500))
    @settings(max_examples=100)
    def test_tokenize_is_deterministic(self, buffer: str) -> None:
        """Invariant: tokenizing the same buffer twice gives the same tokens."""
        assert list(tokenize(buffer)) == list(tokenize(buffer))

    @given(st.text(min_size=1, max_size=300), st.data())
    @settings(max_examples=100)
    def test_restart_at_token_boundary(self, buffer: str, data: st.DataObject) -> None:
        """Invariant: lexing from any token start yields the remaining tokens."""
        tokens = list(tokenize(buffer))
        index = data.draw(st.integers(min_value=0, max_value=len(tokens) - 1))
        assert list(tokenize(buffer, start=tokens[index].start)) == tokens[index:]

    @given(st.sampled_from(DEFAULT_CATALOG.root_keywords))
    def test_root_keyword_classification(self, word: str) -> None:
        """Invariant: every root keyword lexes as a single KEYWORD token."""
        (token,) = tokenize(word)
        assert token.kind == TokenKind.KEYWORD
        assert token.text == word

    @given(st.sampled_from(DEFAULT_CATALOG.subtypes))
    def test_subtype_classification(self, word: str) -> None:
        """Invariant: a subtype that is not also a keyword lexes as SUBTYPE."""
        assume(not DEFAULT_CATALOG.is_keyword(word))
        (token,) = tokenize(word)
        assert token.kind == TokenKind.SUBTYPE

    @given(identifier)
    @settings(max_examples=200)
    def test_other_words_are_identifiers(self, word: str) -> None:
        """Invariant: a word outside the catalog lexes as one IDENTIFIER."""
        assume(not DEFAULT_CATALOG.is_keyword(word))
        assume(not DEFAULT_CATALOG.is_subtype(word))
        (token,) = tokenize(word)
        assert token.kind == TokenKind.IDENTIFIER

    @given(st.text(min_size=0, max_size=300), st.data())
    @settings(max_examples=200)
    def test_token_at_touches_offset(self, buffer: str, data: st.DataObject) -> None:
        """Invariant: token_at returns a token touching the offset, or None."""
        offset = data.draw(st.integers(min_value=0, max_value=len(buffer)))
        token = token_at(buffer, offset)
        if buffer:
            assert token is not None
            assert token.start <= offset <= token.end
        else:
            assert token is None

    @given(st.text(min_size=0, max_size=300), st.data())
    @settings(max_examples=200)
    def test_reference_at_contains_offset(self, buffer: str, data: st.DataObject) -> None:
        """Invariant: a reference under the cursor spans the cursor."""
        offset = data.draw(st.integers(min_value=0, max_value=len(buffer)))
        reference = reference_at(buffer, offset)
        if reference is not None:
            assert reference.start <= offset <= reference.end
            assert buffer[reference.start : reference.end] == reference.name


# =============================================================================
# Scope Property Tests
# =============================================================================


class TestScopeProperties:
    """Property-based tests for alias visibility."""

    @given(host_text, st.data())
    @settings(max_examples=200)
    def test_aliases_visible_at_never_crashes(self, text: str, data: st.DataObject) -> None:
        """Invariant: every valid offset yields unique, non-private alias names."""
        offset = data.draw(st.integers(min_value=0, max_value=len(text)))
        aliases = aliases_visible_at(text, offset)
        names = [a.name for a in aliases]
        assert len(names) == len(set(names))
        assert all(is_alias_name(name) for name in names)
        assert all(0 <= a.declaring_offset < len(text) for a in aliases)

    @given(st.text(min_size=0, max_size=500), st.data())
    @settings(max_examples=100)
    def test_aliases_visible_at_arbitrary_text(self, text: str, data: st.DataObject) -> None:
        """Invariant: arbitrary text never makes alias lookup raise."""
        offset = data.draw(st.integers(min_value=0, max_value=len(text)))
        assert isinstance(aliases_visible_at(text, offset), list)

    @given(host_text, st.data())
    @settings(max_examples=100)
    def test_alias_lookup_is_idempotent(self, text: str, data: st.DataObject) -> None:
        """Invariant: repeating a lookup on the same snapshot gives the same answer."""
        offset = data.draw(st.integers(min_value=0, max_value=len(text)))
        assert aliases_visible_at(text, offset) == aliases_visible_at(text, offset)

    @given(host_text)
    @settings(max_examples=100)
    def test_region_bounds(self, text: str) -> None:
        """Invariant: scope bodies lie inside the host text."""
        for region in find_scope_regions(text):
            assert 0 < region.host_start <= region.host_end <= len(text)
            assert region.raw_content == text[region.host_start : region.host_end]


# =============================================================================
# Completion and Resolution Property Tests
# =============================================================================


class TestCompletionProperties:
    """Property-based tests for completion."""

    @given(st.text(min_size=0, max_size=200), host_text, st.data())
    @settings(max_examples=200)
    def test_complete_never_crashes(self, buffer: str, text: str, data: st.DataObject) -> None:
        """Invariant: any valid cursor and host offset yields a suggestion list."""
        cursor = data.draw(st.integers(min_value=0, max_value=len(buffer)))
        host_offset = data.draw(st.integers(min_value=0, max_value=len(text)))
        suggestions = complete(buffer, cursor, text, host_offset)
        assert all(isinstance(s, Suggestion) for s in suggestions)

    @given(st.text(min_size=0, max_size=200), st.data())
    @settings(max_examples=100)
    def test_complete_is_idempotent(self, buffer: str, data: st.DataObject) -> None:
        """Invariant: completion has no hidden state between calls."""
        cursor = data.draw(st.integers(min_value=0, max_value=len(buffer)))
        assert complete(buffer, cursor) == complete(buffer, cursor)


class TestResolveProperties:
    """Property-based tests for declaration resolution."""

    @given(host_text, st.text(min_size=0, max_size=100), host_text, st.data())
    @settings(max_examples=200)
    def test_resolve_never_crashes(
        self, before: str, buffer: str, after: str, data: st.DataObject
    ) -> None:
        """Invariant: any occurrence inside an injected buffer resolves or gives None."""
        text = f'{before}"{buffer}"{after}'
        mapping = LinearOffsetMapping(len(before) + 1, len(buffer))
        start = data.draw(st.integers(min_value=0, max_value=len(buffer)))
        end = data.draw(st.integers(min_value=start, max_value=len(buffer)))
        declaration = resolve(text, buffer, (start, end), mapping)
        if declaration is not None:
            assert isinstance(declaration, ResolvedDeclaration)
            assert 0 <= declaration.host_offset < len(text)
