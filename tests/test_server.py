import logging
from concurrent.futures import Future
from pathlib import Path
from types import SimpleNamespace

from lsprotocol import types

from polski_ls.__main__ import main
from polski_ls.common.config import Settings
from polski_ls.lsp import server
from polski_ls.lsp.diagnostics import Diagnostic
from polski_ls.lsp.service import CompletionResult, SpellService
from polski_ls.spellcheck.completion import CompletionCandidate
from polski_ls.spellcheck.dictionary import DictionaryStore
from polski_ls.spellcheck.loader import LoadError
from polski_ls.text.positions import Position

URI = "file:///tmp/list.txt"


class _InlineExecutor:
    def submit(self, fn, *args):
        future: Future = Future()
        future.set_result(fn(*args))
        return future

    def shutdown(self, wait: bool = True) -> None:
        return None


class _FakeServer:
    def __init__(self, service=None) -> None:
        self.service = service
        self.messages: list[types.ShowMessageParams] = []
        self.published: list[tuple[str, int | None, list[Diagnostic]]] = []

    def window_show_message(self, params: types.ShowMessageParams) -> None:
        self.messages.append(params)

    def publish(self, uri, version, diagnostics) -> None:
        self.published.append((uri, version, diagnostics))


def _fake_server(words: str, tmp_path: Path | None = None) -> _FakeServer:
    ls = _FakeServer()
    config = Settings(config_dir=str(tmp_path) if tmp_path else "")
    ls.service = SpellService(DictionaryStore.load([words]), ls.publish, config, executor=_InlineExecutor())
    return ls


def test_to_lsp_diagnostic_is_a_hint() -> None:
    diagnostic = Diagnostic(Position(1, 2), Position(1, 6), "Unknown word: 'rybę'", "rybę")

    converted = server.to_lsp_diagnostic(diagnostic)

    assert converted.severity == types.DiagnosticSeverity.Hint
    assert converted.source == "polski-ls"
    assert converted.message == "Unknown word: 'rybę'"
    assert converted.range == types.Range(
        start=types.Position(line=1, character=2),
        end=types.Position(line=1, character=6),
    )


def test_to_text_change_handles_full_and_ranged_events() -> None:
    full = server.to_text_change(SimpleNamespace(text="kot"))
    ranged = server.to_text_change(
        SimpleNamespace(
            text="pies",
            range=types.Range(start=types.Position(line=0, character=0), end=types.Position(line=0, character=3)),
        )
    )

    assert (full.text, full.start, full.end) == ("kot", None, None)
    assert (ranged.start, ranged.end) == (Position(0, 0), Position(0, 3))


def test_to_completion_list_replaces_typed_prefix() -> None:
    result = CompletionResult(
        prefix="Ko",
        start=Position(0, 0),
        end=Position(0, 2),
        candidates=[CompletionCandidate("Kot", 135.0), CompletionCandidate("Kotek", 100.0)],
    )

    completion_list = server.to_completion_list(result)

    assert completion_list.is_incomplete
    assert [item.label for item in completion_list.items] == ["Kot", "Kotek"]
    assert [item.sort_text for item in completion_list.items] == ["00001", "00002"]
    first = completion_list.items[0]
    assert first.filter_text == "Ko"
    assert first.text_edit.new_text == "Kot"
    assert first.text_edit.range.end == types.Position(line=0, character=2)


def test_code_action_offers_add_word_then_replacements() -> None:
    ls = _fake_server("dom")
    ls.service.open(URI, "Dim dom")
    params = SimpleNamespace(
        text_document=SimpleNamespace(uri=URI),
        range=types.Range(start=types.Position(line=0, character=1), end=types.Position(line=0, character=1)),
    )

    actions = server.code_action(ls, params)

    assert [a.title for a in actions] == ["Add 'Dim' to dictionary", "Change to 'Dom'"]
    assert actions[0].command.command == server.CMD_ADD_TO_DICTIONARY
    assert actions[0].command.arguments == [{"word": "Dim", "uri": URI}]
    (edit,) = actions[1].edit.changes[URI]
    assert edit.new_text == "Dom"


def test_code_action_outside_diagnostics_returns_none() -> None:
    ls = _fake_server("dom")
    ls.service.open(URI, "Dim dom")
    params = SimpleNamespace(
        text_document=SimpleNamespace(uri=URI),
        range=types.Range(start=types.Position(line=0, character=5), end=types.Position(line=0, character=5)),
    )

    assert server.code_action(ls, params) is None


def test_did_change_for_unknown_document_is_logged(caplog) -> None:
    ls = _fake_server("dom")
    params = SimpleNamespace(
        text_document=SimpleNamespace(uri=URI, version=3),
        content_changes=[SimpleNamespace(text="dim")],
    )

    with caplog.at_level(logging.WARNING):
        server.did_change(ls, params)

    assert "rejected change" in caplog.text
    assert ls.published == []


def test_did_open_and_close_publish(tmp_path: Path) -> None:
    ls = _fake_server("dom", tmp_path)
    server.did_open(ls, SimpleNamespace(text_document=SimpleNamespace(uri=URI, text="dim")))
    server.did_close(ls, SimpleNamespace(text_document=SimpleNamespace(uri=URI)))

    assert [d.related_word for d in ls.published[0][2]] == ["dim"]
    assert ls.published[-1] == (URI, None, [])


def test_add_to_dictionary_command(tmp_path: Path) -> None:
    ls = _fake_server("dom", tmp_path)
    ls.service.open(URI, "dim")

    server.add_to_dictionary(ls, {"word": "dim", "uri": URI})

    assert ls.service.dictionary.contains("dim")
    assert ls.published[-1] == (URI, 0, [])
    assert ls.messages[-1].type == types.MessageType.Info
    assert "dim" in ls.messages[-1].message


def test_add_to_dictionary_accepts_wrapped_arguments(tmp_path: Path) -> None:
    ls = _fake_server("dom", tmp_path)

    server.add_to_dictionary(ls, [{"word": "kotek"}])

    assert ls.service.dictionary.contains("kotek")


def test_add_to_dictionary_reports_known_word(tmp_path: Path) -> None:
    ls = _fake_server("dom", tmp_path)

    server.add_to_dictionary(ls, {"word": "Dom"})

    assert ls.messages[-1].type == types.MessageType.Info
    assert "already" in ls.messages[-1].message
    assert not (tmp_path / "slownik.txt").exists()


def test_add_to_dictionary_rejects_multi_line_word(tmp_path: Path) -> None:
    ls = _fake_server("dom", tmp_path)

    server.add_to_dictionary(ls, {"word": "*kot\n#x"})

    assert ls.messages[-1].type == types.MessageType.Error
    assert not ls.service.dictionary.contains("kot")
    assert not (tmp_path / "slownik.txt").exists()


def test_add_to_dictionary_rejects_bad_payload(tmp_path: Path) -> None:
    ls = _fake_server("dom", tmp_path)

    server.add_to_dictionary(ls, {"uri": URI})
    server.add_to_dictionary(ls)

    assert [m.type for m in ls.messages] == [types.MessageType.Error, types.MessageType.Error]


def test_add_to_dictionary_reports_write_failure(monkeypatch) -> None:
    ls = _fake_server("dom")

    def _fail(_word):
        raise LoadError(Path("/nowhere/slownik.txt"), "read-only file system")

    monkeypatch.setattr(ls.service, "add_word", _fail)

    server.add_to_dictionary(ls, {"word": "dim", "uri": URI})

    assert ls.messages[-1].type == types.MessageType.Error
    assert "read-only" in ls.messages[-1].message


def test_main_requires_stdio(capsys) -> None:
    assert main([]) == 2
    assert "--stdio" in capsys.readouterr().err
