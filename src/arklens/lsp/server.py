"""
arklens Language Server implementation using pygls.

Serves completion, go-to-definition, hover and semantic tokens for ArkType
expressions embedded in TypeScript/JavaScript documents. Each request
analyses the current document text from scratch.
"""

import logging
from pathlib import Path

from lsprotocol.types import (
    INITIALIZE,
    TEXT_DOCUMENT_COMPLETION,
    TEXT_DOCUMENT_DEFINITION,
    TEXT_DOCUMENT_HOVER,
    TEXT_DOCUMENT_SEMANTIC_TOKENS_FULL,
    Command,
    CompletionItem,
    CompletionItemKind,
    CompletionList,
    CompletionOptions,
    CompletionParams,
    DefinitionParams,
    Hover,
    HoverParams,
    InitializeParams,
    Location,
    MarkupContent,
    MarkupKind,
    Position,
    Range,
    SemanticTokens,
    SemanticTokensLegend,
    SemanticTokensParams,
)
from pygls import uris
from pygls.lsp.server import LanguageServer

from arklens import __version__
from arklens.core.completion import Suggestion, SuggestionCategory
from arklens.core.config import ArklensConfig, discover_config
from arklens.core.errors import ArklensError
from arklens.core.tokenizer import TokenKind
from arklens.document import HostDocument, HostToken

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

TOKEN_TYPES = ["keyword", "type", "string", "number", "operator", "variable"]

_TOKEN_TYPE_INDEX = {
    TokenKind.KEYWORD: TOKEN_TYPES.index("keyword"),
    TokenKind.SUBTYPE: TOKEN_TYPES.index("type"),
    TokenKind.STRING: TOKEN_TYPES.index("string"),
    TokenKind.NUMBER: TOKEN_TYPES.index("number"),
    TokenKind.OPERATOR: TOKEN_TYPES.index("operator"),
    TokenKind.DOT: TOKEN_TYPES.index("operator"),
    TokenKind.IDENTIFIER: TOKEN_TYPES.index("variable"),
}

_COMPLETION_KINDS = {
    SuggestionCategory.BUILTIN_TYPE: CompletionItemKind.Keyword,
    SuggestionCategory.UTILITY_KEYWORD: CompletionItemKind.Function,
    SuggestionCategory.ALIAS: CompletionItemKind.Class,
    SuggestionCategory.SUBTYPE: CompletionItemKind.Property,
}

TRIGGER_SUGGEST = Command(title="Suggest subtypes", command="editor.action.triggerSuggest")


class ArklensLanguageServer(LanguageServer):
    """Language server holding the workspace configuration."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.workspace_root: Path | None = None
        self.config = ArklensConfig()

    def document(self, uri: str) -> HostDocument:
        source = self.workspace.get_text_document(uri).source
        return HostDocument(source, self.config)


server = ArklensLanguageServer("arklens-lsp", f"v{__version__}")


@server.feature(INITIALIZE)
def initialize(ls: ArklensLanguageServer, params: InitializeParams) -> None:
    """Load workspace configuration."""
    if not params.root_uri:
        return
    root = uris.to_fs_path(params.root_uri)
    if root is None:
        return
    ls.workspace_root = Path(root)
    logger.info(f"Workspace root: {ls.workspace_root}")
    try:
        ls.config = discover_config(ls.workspace_root)
    except ArklensError as e:
        logger.error(f"Failed to load config, using defaults: {e}")
        ls.config = ArklensConfig()
    logging.getLogger("arklens").setLevel(ls.config.logging.level)


@server.feature(TEXT_DOCUMENT_COMPLETION, CompletionOptions(trigger_characters=["."]))
def completion(ls: ArklensLanguageServer, params: CompletionParams) -> CompletionList | None:
    """Provide keyword, alias and subtype completions."""
    document = ls.document(params.text_document.uri)
    offset = _position_to_offset(document.text, params.position)
    try:
        suggestions = document.complete(offset)
    except ArklensError as e:
        logger.error(f"Completion failed: {e}")
        return None
    if not suggestions:
        return None
    return CompletionList(is_incomplete=False, items=[_completion_item(s) for s in suggestions])


@server.feature(TEXT_DOCUMENT_DEFINITION)
def definition(ls: ArklensLanguageServer, params: DefinitionParams) -> Location | None:
    """Jump from an alias reference to its declaration."""
    document = ls.document(params.text_document.uri)
    offset = _position_to_offset(document.text, params.position)
    try:
        declaration = document.definition(offset)
    except ArklensError as e:
        logger.error(f"Definition lookup failed: {e}")
        return None
    if declaration is None:
        return None
    return Location(
        uri=params.text_document.uri,
        range=_offsets_to_range(document.text, declaration.host_offset, declaration.host_end),
    )


@server.feature(TEXT_DOCUMENT_HOVER)
def hover(ls: ArklensLanguageServer, params: HoverParams) -> Hover | None:
    """Show documentation for keywords, subtypes and aliases."""
    document = ls.document(params.text_document.uri)
    offset = _position_to_offset(document.text, params.position)
    try:
        content = document.hover(offset)
    except ArklensError as e:
        logger.error(f"Hover failed: {e}")
        return None
    if content is None:
        return None
    return Hover(contents=MarkupContent(kind=MarkupKind.Markdown, value=content))


@server.feature(
    TEXT_DOCUMENT_SEMANTIC_TOKENS_FULL,
    SemanticTokensLegend(token_types=TOKEN_TYPES, token_modifiers=[]),
)
def semantic_tokens(ls: ArklensLanguageServer, params: SemanticTokensParams) -> SemanticTokens:
    """Classify the tokens of every ArkType expression in the document."""
    document = ls.document(params.text_document.uri)
    return SemanticTokens(data=_encode_semantic_tokens(document.text, document.tokens()))


# Helper functions


def _completion_item(suggestion: Suggestion) -> CompletionItem:
    item = CompletionItem(
        label=suggestion.text,
        kind=_COMPLETION_KINDS[suggestion.category],
        detail=suggestion.detail,
    )
    if suggestion.chain:
        item.insert_text = f"{suggestion.text}."
        item.command = TRIGGER_SUGGEST
    return item


def _position_to_offset(text: str, position: Position) -> int:
    """Convert a line/character position to an offset, clamped to the text."""
    lines = text.split("\n")
    if position.line >= len(lines):
        return len(text)
    offset = sum(len(line) + 1 for line in lines[: position.line])
    return offset + min(position.character, len(lines[position.line]))


def _offset_to_position(text: str, offset: int) -> Position:
    line = text.count("\n", 0, offset)
    line_start = text.rfind("\n", 0, offset) + 1
    return Position(line=line, character=offset - line_start)


def _offsets_to_range(text: str, start: int, end: int) -> Range:
    return Range(start=_offset_to_position(text, start), end=_offset_to_position(text, end))


def _encode_semantic_tokens(text: str, tokens: list[HostToken]) -> list[int]:
    """
    Encode tokens in the LSP relative format.

    Tokens spanning a line break and kinds without a legend entry are skipped.
    """
    data: list[int] = []
    prev_line = 0
    prev_char = 0
    for token in sorted(tokens, key=lambda t: t.host_start):
        type_index = _TOKEN_TYPE_INDEX.get(token.kind)
        if type_index is None or "\n" in token.text:
            continue
        position = _offset_to_position(text, token.host_start)
        delta_line = position.line - prev_line
        delta_char = position.character - prev_char if delta_line == 0 else position.character
        data.extend([delta_line, delta_char, token.host_end - token.host_start, type_index, 0])
        prev_line = position.line
        prev_char = position.character
    return data


def start_server() -> None:
    """Start the arklens LSP server."""
    logger.info("Starting arklens Language Server...")
    server.start_io()


if __name__ == "__main__":
    start_server()
