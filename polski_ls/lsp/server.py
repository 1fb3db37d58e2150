from __future__ import annotations

import logging
from typing import Any

from lsprotocol import types
from pydantic import BaseModel, Field, ValidationError
from pygls.lsp.server import LanguageServer

from polski_ls.common.config import Settings, settings
from polski_ls.spellcheck.dictionary import InvalidWordError
from polski_ls.spellcheck.loader import LoadError, load_dictionary
from polski_ls.text.positions import Position

from .code_actions import CodeAction
from .diagnostics import Diagnostic
from .documents import NotOpenError, TextChange
from .service import CompletionResult, SpellService

logger = logging.getLogger(__name__)

SERVER_NAME = "polski-ls"
SERVER_VERSION = "0.1.0"
CMD_ADD_TO_DICTIONARY = "polski-ls.addToDictionary"
TRIGGER_CHARACTERS = "aąbcćdeęfghijklłmnńoópqrsśtuvwxyzźżAĄBCĆDEĘFGHIJKLŁMNŃOÓPQRSŚTUVWXYZŹŻ"


class AddWordCommand(BaseModel):
    word: str = Field(..., min_length=1)
    uri: str | None = None


class PolskiLanguageServer(LanguageServer):
    def __init__(self) -> None:
        super().__init__(
            SERVER_NAME,
            SERVER_VERSION,
            text_document_sync_kind=types.TextDocumentSyncKind.Incremental,
        )
        self.service: SpellService | None = None

    def attach(self, service: SpellService) -> None:
        self.service = service

    def publish(self, uri: str, _version: int | None, diagnostics: list[Diagnostic]) -> None:
        # internal versions do not match the client's, so none is sent
        self.text_document_publish_diagnostics(
            types.PublishDiagnosticsParams(uri=uri, diagnostics=[to_lsp_diagnostic(d) for d in diagnostics])
        )


server = PolskiLanguageServer()


def to_position(position: types.Position) -> Position:
    return Position(line=position.line, character=position.character)


def to_lsp_position(position: Position) -> types.Position:
    return types.Position(line=position.line, character=position.character)


def to_lsp_range(start: Position, end: Position) -> types.Range:
    return types.Range(start=to_lsp_position(start), end=to_lsp_position(end))


def to_lsp_diagnostic(diagnostic: Diagnostic) -> types.Diagnostic:
    return types.Diagnostic(
        range=to_lsp_range(diagnostic.start, diagnostic.end),
        message=diagnostic.message,
        severity=types.DiagnosticSeverity(diagnostic.severity),
        source=diagnostic.source,
        data={"word": diagnostic.related_word},
    )


def to_text_change(change: Any) -> TextChange:
    change_range = getattr(change, "range", None)
    if change_range is None:
        return TextChange(text=change.text)
    return TextChange(
        text=change.text,
        start=to_position(change_range.start),
        end=to_position(change_range.end),
    )


def to_completion_list(result: CompletionResult) -> types.CompletionList:
    edit_range = to_lsp_range(result.start, result.end)
    items = [
        types.CompletionItem(
            label=candidate.word,
            kind=types.CompletionItemKind.Text,
            detail="Polish",
            text_edit=types.TextEdit(range=edit_range, new_text=candidate.word),
            filter_text=result.prefix,
            sort_text=f"{idx:05d}",
        )
        for idx, candidate in enumerate(result.candidates, start=1)
    ]
    return types.CompletionList(is_incomplete=True, items=items)


def add_word_action(uri: str, diagnostic: Diagnostic) -> types.CodeAction:
    title = f"Add '{diagnostic.related_word}' to dictionary"
    return types.CodeAction(
        title=title,
        kind=types.CodeActionKind.QuickFix,
        diagnostics=[to_lsp_diagnostic(diagnostic)],
        command=types.Command(
            title=title,
            command=CMD_ADD_TO_DICTIONARY,
            arguments=[{"word": diagnostic.related_word, "uri": uri}],
        ),
    )


def to_lsp_code_action(uri: str, diagnostic: Diagnostic, action: CodeAction) -> types.CodeAction:
    edit = types.TextEdit(range=to_lsp_range(action.start, action.end), new_text=action.new_text)
    return types.CodeAction(
        title=action.title,
        kind=types.CodeActionKind.QuickFix,
        diagnostics=[to_lsp_diagnostic(diagnostic)],
        edit=types.WorkspaceEdit(changes={uri: [edit]}),
    )


def _service(ls: PolskiLanguageServer) -> SpellService:
    if ls.service is None:
        raise RuntimeError("polski-ls session is not started")
    return ls.service


@server.feature(types.INITIALIZED)
def initialized(ls: PolskiLanguageServer, params: types.InitializedParams) -> None:
    logger.info("initialized - server ready")
    ls.window_log_message(types.LogMessageParams(type=types.MessageType.Info, message=f"{SERVER_NAME} initialized!"))


@server.feature(types.TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: PolskiLanguageServer, params: types.DidOpenTextDocumentParams) -> None:
    logger.info("did_open: %s", params.text_document.uri)
    _service(ls).open(params.text_document.uri, params.text_document.text)


@server.feature(types.TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: PolskiLanguageServer, params: types.DidChangeTextDocumentParams) -> None:
    uri = params.text_document.uri
    logger.debug("did_change: %s version=%s", uri, params.text_document.version)
    if not params.content_changes:
        return
    try:
        _service(ls).change(uri, [to_text_change(change) for change in params.content_changes])
    except NotOpenError as exc:
        logger.warning("rejected change: %s", exc)


@server.feature(types.TEXT_DOCUMENT_DID_CLOSE)
def did_close(ls: PolskiLanguageServer, params: types.DidCloseTextDocumentParams) -> None:
    logger.info("did_close: %s", params.text_document.uri)
    _service(ls).close(params.text_document.uri)


@server.feature(
    types.TEXT_DOCUMENT_COMPLETION,
    types.CompletionOptions(
        trigger_characters=list(TRIGGER_CHARACTERS),
        all_commit_characters=[" "],
        resolve_provider=False,
    ),
)
def completion(ls: PolskiLanguageServer, params: types.CompletionParams) -> types.CompletionList | None:
    position = params.position
    logger.debug("completion: pos=%s:%s", position.line, position.character)
    result = _service(ls).completions(params.text_document.uri, to_position(position))
    if result is None:
        return None
    logger.debug("returning %s completions, top: %s", len(result.candidates), [c.word for c in result.candidates[:5]])
    return to_completion_list(result)


@server.feature(
    types.TEXT_DOCUMENT_CODE_ACTION,
    types.CodeActionOptions(code_action_kinds=[types.CodeActionKind.QuickFix]),
)
def code_action(ls: PolskiLanguageServer, params: types.CodeActionParams) -> list[types.CodeAction] | None:
    uri = params.text_document.uri
    found = _service(ls).code_actions(uri, to_position(params.range.start), to_position(params.range.end))

    actions: list[types.CodeAction] = []
    for diagnostic, replacements in found:
        actions.append(add_word_action(uri, diagnostic))
        actions.extend(to_lsp_code_action(uri, diagnostic, action) for action in replacements)

    logger.debug("returning %s code actions for %s", len(actions), uri)
    return actions or None


def _command_payload(args: tuple[Any, ...]) -> Any:
    payload = args[0] if args else None
    # the arguments array may arrive as a single parameter
    if isinstance(payload, list):
        payload = payload[0] if payload else None
    return payload


@server.command(CMD_ADD_TO_DICTIONARY)
def add_to_dictionary(ls: PolskiLanguageServer, *args: Any) -> None:
    try:
        command = AddWordCommand.model_validate(_command_payload(args))
    except ValidationError as exc:
        logger.warning("invalid %s payload: %s", CMD_ADD_TO_DICTIONARY, exc)
        ls.window_show_message(
            types.ShowMessageParams(type=types.MessageType.Error, message="Invalid add-to-dictionary request")
        )
        return None

    try:
        refreshes = _service(ls).add_word(command.word)
    except InvalidWordError as exc:
        logger.warning("rejected dictionary word: %s", exc)
        ls.window_show_message(
            types.ShowMessageParams(type=types.MessageType.Error, message=f"Cannot add to dictionary: {exc}")
        )
        return None
    except LoadError as exc:
        logger.error("failed to add %r to dictionary: %s", command.word, exc)
        ls.window_show_message(
            types.ShowMessageParams(type=types.MessageType.Error, message=f"Failed to add word to dictionary: {exc}")
        )
        return None

    if refreshes is None:
        ls.window_show_message(
            types.ShowMessageParams(type=types.MessageType.Info, message=f"'{command.word}' is already in dictionary")
        )
        return None

    ls.window_show_message(
        types.ShowMessageParams(type=types.MessageType.Info, message=f"Added '{command.word}' to dictionary")
    )
    return None


def build_service(ls: PolskiLanguageServer, config: Settings = settings) -> SpellService:
    return SpellService(load_dictionary(config), ls.publish, config)


def start(config: Settings = settings) -> None:
    service = build_service(server, config)
    server.attach(service)
    try:
        server.start_io()
    finally:
        service.shutdown()
