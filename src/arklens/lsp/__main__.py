"""
Entry point for the arklens LSP server.

Usage:
    python -m arklens.lsp
"""

from .server import start_server

if __name__ == "__main__":
    start_server()
