from __future__ import annotations

from dataclasses import dataclass

from polski_ls.spellcheck.dictionary import DictionaryStore
from polski_ls.spellcheck.engine import MAX_EDIT_DISTANCE, MAX_SUGGESTIONS, apply_case, suggest
from polski_ls.text.positions import Position

from .diagnostics import Diagnostic
from .documents import Document

QUICKFIX = "quickfix"


@dataclass(frozen=True)
class CodeAction:
    title: str
    new_text: str
    start: Position
    end: Position
    kind: str = QUICKFIX


def build_actions(
    document: Document,
    diagnostic: Diagnostic,
    dictionary: DictionaryStore,
    max_results: int = MAX_SUGGESTIONS,
) -> list[CodeAction]:
    """One replacement of the diagnostic's span per suggestion, best first.

    A diagnostic that no longer lines up with a token of ``document`` (the
    text changed underneath it) yields no actions.
    """
    if not any(
        token.start == diagnostic.start and token.end == diagnostic.end and token.text == diagnostic.related_word
        for token in document.tokens
    ):
        return []

    word = diagnostic.related_word
    suggestions = suggest(word, dictionary, max_distance=MAX_EDIT_DISTANCE, max_results=max_results)

    actions: list[CodeAction] = []
    for suggestion in suggestions:
        replacement = apply_case(word, suggestion.word)
        actions.append(
            CodeAction(
                title=f"Change to '{replacement}'",
                new_text=replacement,
                start=diagnostic.start,
                end=diagnostic.end,
            )
        )
    return actions
