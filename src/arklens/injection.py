"""
Locate ArkType expressions inside host source.

A string or template literal holds an ArkType expression when one of the
calls enclosing it is an ArkType definition function (``type(...)``,
``scope(...)``, ``arkSomething(...)``) or a qualified chained method
(``User.and(...)``, ``t.or(...)``). The literal's interior becomes the DSL
buffer; its position in the host file gives the offset mapping.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from arklens.core.config import DEFAULT_CHAINED_METHODS, DEFAULT_DEFINITION_FUNCTIONS, InjectionConfig
from arklens.core.host import HostScan, StringLiteral, scan_host
from arklens.core.mapping import LinearOffsetMapping


@dataclass(frozen=True)
class InjectedExpression:
    """An ArkType expression embedded in a host string literal."""

    literal: StringLiteral
    buffer: str
    mapping: LinearOffsetMapping


class InjectionMatcher:
    """Decide which host string literals are ArkType expressions."""

    def __init__(
        self,
        definition_functions: str = DEFAULT_DEFINITION_FUNCTIONS,
        chained_methods: str = DEFAULT_CHAINED_METHODS,
    ) -> None:
        self.definition_re = re.compile(definition_functions)
        self.chained_re = re.compile(chained_methods)

    @classmethod
    def from_config(cls, config: InjectionConfig) -> InjectionMatcher:
        return cls(config.definition_functions, config.chained_methods)

    def is_expression(self, literal: StringLiteral) -> bool:
        for call in literal.calls:
            if self.definition_re.fullmatch(call.name):
                return True
            if call.qualified and self.chained_re.fullmatch(call.name):
                return True
        return False

    def expressions(self, host_text: str, scan: HostScan | None = None) -> list[InjectedExpression]:
        """All ArkType expressions in ``host_text``, in textual order."""
        if scan is None:
            scan = scan_host(host_text)
        return [
            _inject(host_text, literal) for literal in scan.strings if self.is_expression(literal)
        ]

    def expression_at(
        self, host_text: str, host_offset: int, scan: HostScan | None = None
    ) -> InjectedExpression | None:
        """The ArkType expression whose quotes enclose ``host_offset``."""
        if scan is None:
            scan = scan_host(host_text)
        literal = scan.string_at(host_offset)
        if literal is None or not self.is_expression(literal):
            return None
        return _inject(host_text, literal)


def _inject(host_text: str, literal: StringLiteral) -> InjectedExpression:
    buffer = host_text[literal.content_start : literal.content_end]
    return InjectedExpression(
        literal=literal,
        buffer=buffer,
        mapping=LinearOffsetMapping(literal.content_start, len(buffer)),
    )
