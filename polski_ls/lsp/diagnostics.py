from __future__ import annotations

from dataclasses import dataclass

from polski_ls.spellcheck.dictionary import DictionaryStore
from polski_ls.text.positions import Position

from .documents import Document

DIAGNOSTIC_SOURCE = "polski-ls"
SEVERITY_HINT = 4


@dataclass(frozen=True)
class Diagnostic:
    start: Position
    end: Position
    message: str
    related_word: str
    severity: int = SEVERITY_HINT
    source: str = DIAGNOSTIC_SOURCE

    def overlaps(self, start: Position, end: Position) -> bool:
        return self.start <= end and start <= self.end


def unknown_word_message(word: str) -> str:
    return f"Unknown word: '{word}'"


def diagnose(document: Document, dictionary: DictionaryStore) -> list[Diagnostic]:
    return [
        Diagnostic(
            start=token.start,
            end=token.end,
            message=unknown_word_message(token.text),
            related_word=token.text,
        )
        for token in document.tokens
        if not dictionary.contains(token.text)
    ]
