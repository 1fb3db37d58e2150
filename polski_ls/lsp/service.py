from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from polski_ls.common.config import Settings
from polski_ls.spellcheck.completion import CompletionCandidate, complete
from polski_ls.spellcheck.dictionary import DictionaryStore, parse_user_word
from polski_ls.spellcheck.engine import apply_case
from polski_ls.spellcheck.loader import append_user_word, user_dictionary_dir
from polski_ls.text.positions import Position
from polski_ls.text.tokenizer import word_bounds

from .code_actions import CodeAction, build_actions
from .diagnostics import Diagnostic, diagnose
from .documents import Document, DocumentStateManager, NotOpenError, TextChange

logger = logging.getLogger(__name__)

Publisher = Callable[[str, Optional[int], list[Diagnostic]], None]


@dataclass(frozen=True)
class CompletionResult:
    prefix: str
    start: Position
    end: Position
    candidates: list[CompletionCandidate]


class SpellService:
    """One editing session: documents, dictionary and diagnostic publishing.

    State changes happen in call order on the caller's thread. Diagnostics
    are computed on a worker pool from immutable document snapshots and are
    only published while their snapshot is still the current version.
    """

    def __init__(
        self,
        dictionary: DictionaryStore,
        publish: Publisher,
        settings: Settings | None = None,
        *,
        executor: Executor | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.dictionary = dictionary
        self.documents = DocumentStateManager()
        self._publish = publish
        self._publish_lock = threading.Lock()
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max(1, self.settings.diagnostic_workers),
            thread_name_prefix="polski-ls-diagnostics",
        )

    def open(self, uri: str, text: str) -> Future:
        self.documents.open(uri, text)
        return self.refresh_diagnostics(uri)

    def change(self, uri: str, changes: TextChange | Iterable[TextChange]) -> Future:
        self.documents.apply_change(uri, changes)
        return self.refresh_diagnostics(uri)

    def close(self, uri: str) -> None:
        self.documents.close(uri)
        with self._publish_lock:
            self._publish(uri, None, [])

    def refresh_diagnostics(self, uri: str) -> Future:
        snapshot = self.documents.get(uri)
        return self._executor.submit(self._diagnose_and_publish, snapshot, self.dictionary)

    def _diagnose_and_publish(self, snapshot: Document, dictionary: DictionaryStore) -> list[Diagnostic]:
        diagnostics = diagnose(snapshot, dictionary)
        with self._publish_lock:
            stale = dictionary is not self.dictionary or not self.documents.is_latest(snapshot)
            if stale:
                logger.debug("discarding stale diagnostics for %s version=%s", snapshot.uri, snapshot.version)
                return diagnostics
            self._publish(snapshot.uri, snapshot.version, diagnostics)
        logger.info("published %s diagnostics for %s", len(diagnostics), snapshot.uri)
        return diagnostics

    def diagnostics(self, uri: str) -> list[Diagnostic]:
        return diagnose(self.documents.get(uri), self.dictionary)

    def completions(self, uri: str, position: Position) -> CompletionResult | None:
        try:
            document = self.documents.get(uri)
        except NotOpenError:
            return None
        # the client can ask before its didChange arrives
        if document.line_index.is_out_of_bounds(position):
            return None

        cursor = document.line_index.offset_at(position)
        start, _ = word_bounds(document.text, cursor)
        prefix = document.text[start:cursor]
        candidates = complete(prefix, self.dictionary, max_results=self.settings.max_completions)
        if not candidates:
            logger.debug("no completions for prefix %r", prefix)
            return None

        cased = [CompletionCandidate(word=apply_case(prefix, c.word), score=c.score) for c in candidates]
        return CompletionResult(
            prefix=prefix,
            start=document.line_index.position_at(start),
            end=position,
            candidates=cased,
        )

    def code_actions(self, uri: str, start: Position, end: Position) -> list[tuple[Diagnostic, list[CodeAction]]]:
        try:
            document = self.documents.get(uri)
        except NotOpenError:
            return []
        dictionary = self.dictionary
        return [
            (diagnostic, build_actions(document, diagnostic, dictionary, max_results=self.settings.max_suggestions))
            for diagnostic in diagnose(document, dictionary)
            if diagnostic.overlaps(start, end)
        ]

    def add_word(self, word: str) -> list[Future] | None:
        """Persist `word` to the user dictionary and re-check every open document.

        Raises InvalidWordError unless `word` is a single plain entry. Returns
        None, writing nothing, when the dictionary already has the word.
        """
        canonical = parse_user_word(word)
        if self.dictionary.contains(canonical):
            logger.info("%r is already in the dictionary", canonical)
            return None
        append_user_word(user_dictionary_dir(self.settings), canonical)
        with self._publish_lock:
            self.dictionary = self.dictionary.with_words([canonical])
        return [self.refresh_diagnostics(uri) for uri in self.documents.uris()]

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)
