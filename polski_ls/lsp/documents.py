from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Iterable

from polski_ls.text.positions import LineIndex, Position
from polski_ls.text.tokenizer import Token, tokenize

logger = logging.getLogger(__name__)


class NotOpenError(KeyError):
    """A state-changing call named a document that is not open."""

    def __init__(self, uri: str) -> None:
        super().__init__(uri)
        self.uri = uri

    def __str__(self) -> str:
        return f"document is not open: {self.uri}"


@dataclass(frozen=True)
class TextChange:
    text: str
    start: Position | None = None
    end: Position | None = None


@dataclass(frozen=True)
class Document:
    uri: str
    version: int
    text: str
    tokens: tuple[Token, ...]
    line_index: LineIndex

    @classmethod
    def build(cls, uri: str, version: int, text: str) -> Document:
        line_index = LineIndex(text)
        return cls(
            uri=uri,
            version=version,
            text=text,
            tokens=tuple(tokenize(text, line_index)),
            line_index=line_index,
        )


def apply_text_change(text: str, change: TextChange) -> str:
    if change.start is None or change.end is None:
        return change.text
    line_index = LineIndex(text)
    start = line_index.offset_at(change.start)
    end = line_index.offset_at(change.end)
    if end < start:
        start, end = end, start
    return text[:start] + change.text + text[end:]


class DocumentStateManager:
    """Owns one Document per open URI.

    Documents are immutable snapshots; every open or change replaces the
    snapshot with a fully re-tokenized one under a bumped version.
    """

    def __init__(self) -> None:
        self._documents: dict[str, Document] = {}
        self._lock = threading.Lock()

    def open(self, uri: str, text: str) -> int:
        document = Document.build(uri, 0, text or "")
        with self._lock:
            self._documents[uri] = document
        logger.debug("opened %s tokens=%s", uri, len(document.tokens))
        return document.version

    def apply_change(self, uri: str, changes: TextChange | Iterable[TextChange]) -> int:
        if isinstance(changes, TextChange):
            changes = [changes]
        with self._lock:
            current = self._documents.get(uri)
            if current is None:
                raise NotOpenError(uri)
            text = current.text
            for change in changes:
                text = apply_text_change(text, change)
            document = Document.build(uri, current.version + 1, text)
            self._documents[uri] = document
        logger.debug("changed %s version=%s tokens=%s", uri, document.version, len(document.tokens))
        return document.version

    def get(self, uri: str) -> Document:
        with self._lock:
            document = self._documents.get(uri)
        if document is None:
            raise NotOpenError(uri)
        return document

    def current_tokens(self, uri: str) -> tuple[Token, ...]:
        return self.get(uri).tokens

    def is_current(self, uri: str, version: int) -> bool:
        with self._lock:
            document = self._documents.get(uri)
        return document is not None and document.version == version

    def is_latest(self, document: Document) -> bool:
        with self._lock:
            return self._documents.get(document.uri) is document

    def close(self, uri: str) -> None:
        with self._lock:
            removed = self._documents.pop(uri, None)
        if removed is None:
            logger.debug("close for unknown document %s", uri)

    def uris(self) -> list[str]:
        with self._lock:
            return list(self._documents)

    def __contains__(self, uri: object) -> bool:
        with self._lock:
            return uri in self._documents
