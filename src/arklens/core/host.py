"""
Lightweight scanner for host (JavaScript/TypeScript) source text.

This is not a parser. It walks the text once, skipping comments and string
bodies, and records two things the analysis needs:

- object-literal property keys (``Id: "string"``, ``"Id": ...``), used by the
  reference resolver as the strict declaration source; members of
  interface, class and type-literal bodies are not recorded
- string literals together with the calls that enclose them, used to decide
  which strings hold ArkType expressions

Regular-expression literals are not recognised; a quote inside one can
desynchronise the scan for the rest of the line's literal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from arklens.core.tokenizer import QUOTE_CHARS, is_identifier_part, is_identifier_start

logger = logging.getLogger(__name__)

# Words that are followed by "(" without being calls.
_NON_CALL_WORDS = frozenset(
    {"if", "for", "while", "switch", "catch", "function", "return", "typeof", "await"}
)

# Words whose next brace opens a declaration body rather than an object literal.
_TYPE_BODY_WORDS = frozenset({"interface", "class"})


@dataclass(frozen=True)
class PropertyKey:
    """
    An object-literal key followed by a colon.

    Attributes:
        name: Key name with any quotes removed
        start: Host offset of the raw key (including an opening quote)
        end: Host offset just past the raw key
        raw: Key exactly as written
    """

    name: str
    start: int
    end: int
    raw: str


@dataclass(frozen=True)
class CallSite:
    """A call whose argument list encloses some position."""

    name: str
    qualified: bool
    open_paren: int


@dataclass(frozen=True)
class StringLiteral:
    """
    A quoted string in host text.

    ``calls`` lists every enclosing call, outermost first.
    """

    start: int
    end: int
    quote: str
    terminated: bool
    calls: tuple[CallSite, ...] = ()

    @property
    def content_start(self) -> int:
        return self.start + 1

    @property
    def content_end(self) -> int:
        return self.end - 1 if self.terminated else self.end

    def contains(self, offset: int) -> bool:
        """True when ``offset`` lies inside the quotes (either edge included)."""
        return self.content_start <= offset <= self.content_end


@dataclass(frozen=True)
class HostScan:
    properties: tuple[PropertyKey, ...]
    strings: tuple[StringLiteral, ...]

    def properties_named(self, name: str) -> list[PropertyKey]:
        return [p for p in self.properties if p.name == name]

    def string_at(self, offset: int) -> StringLiteral | None:
        for literal in self.strings:
            if literal.contains(offset):
                return literal
            if literal.start > offset:
                break
        return None


class _Frame:
    __slots__ = ("bracket", "call", "typed")

    def __init__(self, bracket: str, call: CallSite | None, typed: bool = False) -> None:
        self.bracket = bracket
        self.call = call
        # Interface, class or type-literal body: its keys are not properties.
        self.typed = typed


class HostScanner:
    """Single-pass scanner producing a :class:`HostScan`."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.stack: list[_Frame] = []
        self.properties: list[PropertyKey] = []
        self.strings: list[StringLiteral] = []
        # Previous significant token: ("word", name, qualified) or ("punct", ch)
        self.prev: tuple = ("punct", "")
        self.expect_key = False
        # "body" after interface/class, "type" after `type Name`, "type=" once
        # its "=" is read; the next brace is then a type body.
        self.pending_body: str | None = None

    def scan(self) -> HostScan:
        text = self.text
        n = len(text)
        while self.pos < n:
            ch = text[self.pos]
            if ch.isspace():
                self.pos += 1
            elif text.startswith("//", self.pos):
                newline = text.find("\n", self.pos)
                self.pos = n if newline == -1 else newline + 1
            elif text.startswith("/*", self.pos):
                close = text.find("*/", self.pos + 2)
                self.pos = n if close == -1 else close + 2
            elif ch in QUOTE_CHARS:
                self._read_string()
            elif is_identifier_start(ch) or ch.isdigit():
                self._read_word()
            else:
                self._read_punct(ch)
        return HostScan(tuple(self.properties), tuple(self.strings))

    def _in_object(self) -> bool:
        return bool(self.stack) and self.stack[-1].bracket == "{" and not self.stack[-1].typed

    def _opens_type_body(self) -> bool:
        if self.pending_body in ("body", "type="):
            return True
        # `x: {` outside an object literal is an annotation, inside one a value.
        return self.prev == ("punct", ":") and not self._in_object()

    def _colon_follows(self, pos: int) -> bool:
        n = len(self.text)
        while pos < n and self.text[pos].isspace():
            pos += 1
        return pos < n and self.text[pos] == ":"

    def _read_string(self) -> None:
        text = self.text
        n = len(text)
        start = self.pos
        quote = text[start]
        pos = start + 1
        while pos < n and text[pos] != quote:
            pos += 2 if text[pos] == "\\" else 1
        terminated = pos < n
        end = min(pos + 1, n) if terminated else n
        calls = tuple(f.call for f in self.stack if f.call is not None)
        self.strings.append(StringLiteral(start, end, quote, terminated, calls))

        if self.expect_key and quote != "`" and terminated and self._colon_follows(end):
            raw = text[start:end]
            self.properties.append(PropertyKey(raw[1:-1], start, end, raw))

        self.pos = end
        self.prev = ("string", quote)
        self.expect_key = False
        if self.pending_body in ("type", "type="):
            self.pending_body = None

    def _read_word(self) -> None:
        text = self.text
        n = len(text)
        start = self.pos
        pos = start + 1
        while pos < n and is_identifier_part(text[pos]):
            pos += 1
        word = text[start:pos]

        is_key = self.expect_key and self._colon_follows(pos)
        if is_key:
            self.properties.append(PropertyKey(word, start, pos, word))

        qualified = self.prev == ("punct", ".")
        if self.pending_body == "type=" or (self.pending_body == "type" and self.prev[0] == "word"):
            self.pending_body = None
        if not (is_key or qualified):
            if word in _TYPE_BODY_WORDS:
                self.pending_body = "body"
            elif self.prev == ("word", "type", False) and is_identifier_start(word[0]):
                self.pending_body = "type"
        self.pos = pos
        self.prev = ("word", word, qualified)
        self.expect_key = False

    def _read_punct(self, ch: str) -> None:
        self.pos += 1
        if ch == "{":
            self.stack.append(_Frame(ch, None, typed=self._opens_type_body()))
            self.pending_body = None
        elif ch in "([":
            call = None
            if ch == "(" and self.prev[0] == "word" and self.prev[1] not in _NON_CALL_WORDS:
                call = CallSite(self.prev[1], self.prev[2], self.pos - 1)
            self.stack.append(_Frame(ch, call))
        elif ch in ")}]":
            # Unbalanced closers are ignored rather than treated as errors.
            if self.stack:
                self.stack.pop()
        if ch == "=" and self.pending_body == "type":
            self.pending_body = "type="
        elif ch == ";" or (self.pending_body == "type=" and ch not in "|&{"):
            self.pending_body = None
        self.prev = ("punct", ch)
        self.expect_key = ch in "{," and self._in_object()


def scan_host(text: str) -> HostScan:
    """Scan host source text for property keys and string literals."""
    scan = HostScanner(text).scan()
    logger.debug(
        f"Scanned host text: {len(scan.properties)} property keys, {len(scan.strings)} strings"
    )
    return scan
