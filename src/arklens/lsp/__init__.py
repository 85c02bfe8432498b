"""
arklens Language Server Protocol implementation.

Provides IDE features for ArkType expressions in TypeScript/JavaScript:
- Completion (keywords, scope aliases, subtypes)
- Go-to-definition for aliases
- Hover documentation
- Semantic tokens
"""

from .server import start_server

__all__ = ["start_server"]
