from __future__ import annotations

import logging
import unicodedata
from dataclasses import dataclass
from typing import Iterable, Iterator

logger = logging.getLogger(__name__)

COMMENT_MARKER = "#"
COMMON_MARKER = "*"


class InvalidWordError(ValueError):
    def __init__(self, word: str) -> None:
        super().__init__(f"not a single dictionary word: {word!r}")
        self.word = word


@dataclass(frozen=True)
class DictionaryEntry:
    word: str
    is_common: bool = False


def canonical_form(word: str) -> str:
    return unicodedata.normalize("NFC", (word or "").strip()).lower()


def parse_line(line: str) -> DictionaryEntry | None:
    """Parse one line of a word list.

    Returns None for blank lines, comments and malformed lines. A leading
    ``*`` marks the word as common. A line that still holds whitespace after
    trimming is malformed and skipped. The plain word-list format would keep
    it as one word, but since the tokenizer never yields inner whitespace
    such an entry could only ever come back as a suggestion (``foo bar`` for
    ``foobar``).
    """
    trimmed = line.strip()
    if not trimmed or trimmed.startswith(COMMENT_MARKER):
        return None

    is_common = trimmed.startswith(COMMON_MARKER)
    if is_common:
        trimmed = trimmed[len(COMMON_MARKER):].strip()

    word = canonical_form(trimmed)
    if not word or any(ch.isspace() for ch in word):
        logger.debug("skipping malformed dictionary line: %r", line)
        return None

    return DictionaryEntry(word=word, is_common=is_common)


def parse_word_list(content: str) -> Iterator[DictionaryEntry]:
    for line in (content or "").splitlines():
        entry = parse_line(line)
        if entry is not None:
            yield entry


def parse_user_word(word: str) -> str:
    """Canonical form of a word added at runtime.

    The word must read back from a word list as exactly one plain entry.
    """
    lines = (word or "").splitlines()
    entry = parse_line(lines[0]) if len(lines) == 1 else None
    if entry is None or entry.is_common:
        raise InvalidWordError(word)
    return entry.word


class DictionaryStore:
    """Merged word set, read-only once built.

    Insertion order is preserved and the first occurrence of a canonical
    form wins, so loading the same sources in the same order always gives
    the same store.
    """

    def __init__(self, entries: Iterable[DictionaryEntry] = ()) -> None:
        words: dict[str, bool] = {}
        for entry in entries:
            if entry.word not in words:
                words[entry.word] = entry.is_common
        self._words = words

    @classmethod
    def load(cls, sources: Iterable[str]) -> DictionaryStore:
        def _entries() -> Iterator[DictionaryEntry]:
            for content in sources:
                yield from parse_word_list(content)

        store = cls(_entries())
        logger.info("loaded dictionary with %s words", len(store))
        return store

    def contains(self, word: str) -> bool:
        return canonical_form(word) in self._words

    def is_common(self, word: str) -> bool:
        return self._words.get(canonical_form(word), False)

    def all_words(self) -> Iterator[DictionaryEntry]:
        for word, is_common in self._words.items():
            yield DictionaryEntry(word=word, is_common=is_common)

    def with_words(self, words: Iterable[str]) -> DictionaryStore:
        additions = (DictionaryEntry(word=canonical_form(word)) for word in words)
        return DictionaryStore([*self.all_words(), *(entry for entry in additions if entry.word)])

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and self.contains(word)

    def __iter__(self) -> Iterator[DictionaryEntry]:
        return self.all_words()

    def __len__(self) -> int:
        return len(self._words)
