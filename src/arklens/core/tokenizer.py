"""
Tokenizer for ArkType type expressions.

Converts the text of an embedded type expression into a flat sequence of
classified tokens. Tokenization never fails: every character of the input is
covered by exactly one token, and characters the language does not know
become single-character ``INVALID`` tokens.

Usage:
    from arklens.core.tokenizer import tokenize

    kinds = [t.kind for t in tokenize("string.date | User[]")]
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum, auto

from arklens.core.catalog import DEFAULT_CATALOG, TypeCatalog


class TokenKind(StrEnum):
    """Token types for type expressions."""

    KEYWORD = auto()
    SUBTYPE = auto()
    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()
    OPERATOR = auto()
    DOT = auto()
    WHITESPACE = auto()
    INVALID = auto()


OPERATOR_CHARS = frozenset("<>=+-*/?!&|^[]{}(),:;")
QUOTE_CHARS = frozenset("\"'`")

WORD_KINDS = frozenset(
    {TokenKind.KEYWORD, TokenKind.SUBTYPE, TokenKind.IDENTIFIER, TokenKind.STRING, TokenKind.NUMBER}
)


def is_identifier_start(ch: str) -> bool:
    return ch.isalpha() or ch == "_" or ch == "$"


def is_identifier_part(ch: str) -> bool:
    return ch.isalnum() or ch == "_" or ch == "$"


@dataclass(frozen=True)
class Token:
    """
    A single token.

    Attributes:
        kind: Classification of the token
        start: Offset of the first character, relative to the buffer
        end: Offset one past the last character
        text: The token's source text
    """

    kind: TokenKind
    start: int
    end: int
    text: str

    def __len__(self) -> int:
        return self.end - self.start


class Lexer:
    """
    Restartable, lazy lexer over ``buffer[start:end]``.

    Call :meth:`advance` repeatedly; it returns ``None`` once the end of the
    range is reached. Calling :meth:`reset` starts over and reproduces the same
    sequence for the same input.
    """

    def __init__(
        self,
        buffer: str,
        start: int = 0,
        end: int | None = None,
        catalog: TypeCatalog = DEFAULT_CATALOG,
    ) -> None:
        self.buffer = buffer
        self.start = start
        self.end = len(buffer) if end is None else min(end, len(buffer))
        self.catalog = catalog
        self.pos = start

    def reset(self) -> None:
        self.pos = self.start

    def __iter__(self) -> Iterator[Token]:
        while (token := self.advance()) is not None:
            yield token

    def advance(self) -> Token | None:
        """Emit the next token, or ``None`` at end of input."""
        if self.pos >= self.end:
            return None

        begin = self.pos
        ch = self.buffer[begin]

        if ch.isspace():
            kind = TokenKind.WHITESPACE
            stop = self._scan_while(begin, str.isspace)
        elif ch == ".":
            kind, stop = TokenKind.DOT, begin + 1
        elif ch in OPERATOR_CHARS:
            kind, stop = TokenKind.OPERATOR, begin + 1
        elif ch in QUOTE_CHARS:
            kind, stop = TokenKind.STRING, self._scan_string(begin)
        elif ch.isdigit():
            kind, stop = TokenKind.NUMBER, self._scan_number(begin)
        elif is_identifier_start(ch):
            stop = self._scan_while(begin, is_identifier_part)
            kind = self._classify(self.buffer[begin:stop])
        else:
            kind, stop = TokenKind.INVALID, begin + 1

        self.pos = stop
        return Token(kind, begin, stop, self.buffer[begin:stop])

    def _scan_while(self, pos: int, predicate) -> int:
        pos += 1
        while pos < self.end and predicate(self.buffer[pos]):
            pos += 1
        return pos

    def _scan_string(self, pos: int) -> int:
        # Unterminated strings run to the end of the range.
        quote = self.buffer[pos]
        pos += 1
        while pos < self.end and self.buffer[pos] != quote:
            if self.buffer[pos] == "\\" and pos + 1 < self.end:
                pos += 2
            else:
                pos += 1
        if pos < self.end:
            pos += 1
        return pos

    def _scan_number(self, pos: int) -> int:
        seen_dot = False
        pos += 1
        while pos < self.end:
            ch = self.buffer[pos]
            if ch.isdigit():
                pos += 1
            elif (
                ch == "."
                and not seen_dot
                and pos + 1 < self.end
                and self.buffer[pos + 1].isdigit()
            ):
                seen_dot = True
                pos += 1
            else:
                break
        return pos

    def _classify(self, word: str) -> TokenKind:
        if self.catalog.is_keyword(word):
            return TokenKind.KEYWORD
        if self.catalog.is_subtype(word):
            return TokenKind.SUBTYPE
        return TokenKind.IDENTIFIER


def tokenize(
    buffer: str,
    start: int = 0,
    end: int | None = None,
    catalog: TypeCatalog = DEFAULT_CATALOG,
) -> Iterator[Token]:
    """
    Lazily tokenize ``buffer[start:end]``.

    Args:
        buffer: Text containing the type expression
        start: First offset to tokenize
        end: Offset to stop at (defaults to the end of the buffer)
        catalog: Catalog used to classify keywords and subtypes

    Returns:
        Iterator of tokens covering the range without gaps or overlaps
    """
    return iter(Lexer(buffer, start, end, catalog))


def token_at(
    buffer: str, offset: int, catalog: TypeCatalog = DEFAULT_CATALOG
) -> Token | None:
    """
    Return the token containing ``offset``.

    An offset that sits exactly at the end of a token (the usual cursor
    position while typing) belongs to that token when the next token is
    whitespace, or when the ending token is a word and the next one is not
    (``User|[]`` gives ``User``).
    """
    previous = None
    for token in tokenize(buffer, catalog=catalog):
        if token.start <= offset < token.end:
            if token.start == offset and previous is not None:
                if token.kind == TokenKind.WHITESPACE or (
                    previous.kind in WORD_KINDS and token.kind not in WORD_KINDS
                ):
                    return previous
            return token
        if token.start >= offset:
            break
        previous = token
    if previous is not None and previous.end == offset:
        return previous
    return None
