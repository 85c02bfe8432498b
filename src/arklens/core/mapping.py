"""
Offset mapping between an injected type expression and its host file.

The embedding layer owns the mapping; analysis code only consumes it. Every
offset handed back to a caller is a host offset.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from arklens.core.errors import make_offset_error


class OffsetMapping(Protocol):
    """Bidirectional mapping between DSL-local and host offsets."""

    def to_host(self, dsl_offset: int) -> int: ...

    def to_dsl(self, host_offset: int) -> int: ...


@dataclass(frozen=True)
class LinearOffsetMapping:
    """
    Mapping for a DSL buffer copied verbatim out of one contiguous host span.

    Attributes:
        host_start: Host offset of the first DSL character
        length: Length of the DSL buffer
    """

    host_start: int
    length: int

    @property
    def host_end(self) -> int:
        return self.host_start + self.length

    def to_host(self, dsl_offset: int) -> int:
        if dsl_offset < 0 or dsl_offset > self.length:
            raise make_offset_error(
                f"DSL offset {dsl_offset} is outside the injected range",
                dsl_offset,
                self.length,
            )
        return self.host_start + dsl_offset

    def to_dsl(self, host_offset: int) -> int:
        if not self.covers(host_offset):
            raise make_offset_error(
                f"host offset {host_offset} is outside the injected range "
                f"{self.host_start}..{self.host_end}",
                host_offset,
                self.host_end,
            )
        return host_offset - self.host_start

    def covers(self, host_offset: int) -> bool:
        return self.host_start <= host_offset <= self.host_end

