"""
arklens - editor assistance for ArkType type expressions.

Tokenizes type expressions embedded in TypeScript/JavaScript string literals,
completes keywords, subtypes and scope aliases, and resolves alias references
back to their declarations in the host file.
"""

from __future__ import annotations

from ._version import get_version
from .core.errors import ArklensError, ConfigError, OffsetError, PreconditionError

__version__ = get_version()

__all__ = [
    "__version__",
    "ArklensError",
    "ConfigError",
    "OffsetError",
    "PreconditionError",
]
