"""
Text-scanning primitives shared by the scope extractor and reference resolver.

Brace balancing here is textual: ``{`` and ``}`` inside string
literals or comments are counted like any other brace. A scope such as
``scope({ Weird: "{" })`` therefore runs past its real end. The behaviour is
pinned by tests; callers that need exact boundaries should use
:mod:`arklens.core.host` instead.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field

# const coolScope = scope({   /   let s = type.scope({
SCOPE_HEADER_RE = re.compile(r"(const|let|var)\s+(\w+)\s*=\s*(scope|type\.scope)\s*\(\s*\{")

ALIAS_RE = re.compile(r"\b(\w+)\s*:")

BINDING_KEYWORDS = frozenset({"const", "let", "var"})

DEFAULT_MAX_DEPTH = 10


def dependent_header_re(scope_name: str) -> re.Pattern[str]:
    """Pattern for ``const x = <scope_name>.type({``."""
    return re.compile(r"const\s+\w+\s*=\s*" + re.escape(scope_name) + r"\.type\s*\(\s*\{")


def find_block_end(text: str, start: int) -> int:
    """
    Return the offset of the ``}`` closing a block whose body starts at ``start``.

    ``start`` is just past the opening brace. When the braces never balance the
    length of the text is returned.
    """
    depth = 1
    pos = start
    n = len(text)
    while pos < n:
        ch = text[pos]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return pos
        pos += 1
    return n


@dataclass(frozen=True)
class Block:
    """
    Body of a brace-delimited block in host text.

    Attributes:
        start: Offset just past the opening brace
        end: Offset of the closing brace, or the text length if unbalanced
        closed: Whether a closing brace was found
    """

    start: int
    end: int
    closed: bool

    @property
    def extent_end(self) -> int:
        """Last offset that still counts as inside the block (the closing brace is)."""
        return self.end + 1 if self.closed else self.end

    def contains(self, offset: int) -> bool:
        return self.start <= offset <= self.extent_end

    def content(self, text: str) -> str:
        return text[self.start : self.end]


def balance(text: str, start: int) -> Block:
    end = find_block_end(text, start)
    return Block(start, end, end < len(text))


@dataclass(frozen=True)
class ScopeHeader:
    """A matched ``const name = scope({`` header."""

    name: str
    header_start: int
    header_end: int


def iter_scope_headers(text: str) -> Iterator[ScopeHeader]:
    for match in SCOPE_HEADER_RE.finditer(text):
        yield ScopeHeader(match.group(2), match.start(), match.end())


def iter_dependent_blocks(text: str, scope_name: str) -> Iterator[Block]:
    """Blocks of every ``const x = <scope_name>.type({ ... })`` in ``text``."""
    for match in dependent_header_re(scope_name).finditer(text):
        yield balance(text, match.end())


def top_level_mask(content: str) -> list[bool]:
    """Per character of ``content``: True when outside any nested braces."""
    mask = []
    depth = 0
    for ch in content:
        if ch == "{":
            mask.append(depth == 0)
            depth += 1
        elif ch == "}":
            depth = max(depth - 1, 0)
            mask.append(depth == 0)
        else:
            mask.append(depth == 0)
    return mask


@dataclass
class RegionNode:
    """
    A block in a tree of nested blocks.

    Children are the blocks nested directly inside this one, in textual order.
    """

    block: Block
    depth: int = 0
    children: list[RegionNode] = field(default_factory=list)

    def walk(self) -> Iterator[RegionNode]:
        """Pre-order traversal."""
        yield self
        for child in self.children:
            yield from child.walk()

    def own_spans(self) -> Iterator[tuple[int, int]]:
        """Spans of this block's body not covered by any child block."""
        pos = self.block.start
        for child in self.children:
            # child.block.start is just past the child's "{"
            yield pos, child.block.start - 1
            pos = child.block.extent_end
        yield pos, self.block.end


def build_region_tree(
    text: str, block: Block, max_depth: int = DEFAULT_MAX_DEPTH, depth: int = 0
) -> RegionNode:
    """
    Build the nesting tree under ``block``.

    Nesting deeper than ``max_depth`` is not expanded, which bounds the work
    done on deeply nested or unbalanced input.
    """
    node = RegionNode(block, depth)
    if depth >= max_depth:
        return node
    pos = block.start
    while pos < block.end:
        if text[pos] == "{":
            child = balance(text, pos + 1)
            # An unbalanced child cannot extend past its parent.
            if child.end > block.end:
                child = Block(child.start, block.end, False)
            node.children.append(build_region_tree(text, child, max_depth, depth + 1))
            pos = child.extent_end
        else:
            pos += 1
    return node
