from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from nltk.tokenize import WhitespaceTokenizer

from .positions import LineIndex, Position, utf16_length

# combining diacritical marks, so decomposed Polish letters stay in one word
COMBINING_MARKS = ("\u0300", "\u036f")
MASK_CHAR = " "
MIN_TOKEN_LENGTH = 3

word_tokenizer = WhitespaceTokenizer()


@dataclass(frozen=True)
class Token:
    text: str
    start: Position
    end: Position
    length: int
    offset: int
    end_offset: int


def is_word_char(ch: str) -> bool:
    """Unicode letters and combining marks; digits, numerics and ``_`` are not."""
    if len(ch) != 1:
        return False
    return ch.isalpha() or COMBINING_MARKS[0] <= ch <= COMBINING_MARKS[1]


def word_spans(text: str) -> Iterator[tuple[int, int]]:
    # one mask char per input char, so spans index the original text
    masked = "".join(ch if is_word_char(ch) else MASK_CHAR for ch in text)
    return word_tokenizer.span_tokenize(masked)


def is_candidate(word: str) -> bool:
    if len(word) < MIN_TOKEN_LENGTH:
        return False
    # word runs never hold digits today; keep the guard if the class widens
    if word.isdigit():
        return False
    return True


def tokenize(text: str, line_index: LineIndex | None = None) -> list[Token]:
    text = text or ""
    line_index = line_index or LineIndex(text)

    tokens: list[Token] = []
    for start, end in word_spans(text):
        word = text[start:end]
        if not is_candidate(word):
            continue
        tokens.append(
            Token(
                text=word,
                start=line_index.position_at(start),
                end=line_index.position_at(end),
                length=utf16_length(word),
                offset=start,
                end_offset=end,
            )
        )
    return tokens


def word_bounds(text: str, offset: int) -> tuple[int, int]:
    """Expand ``offset`` to the word run around it; empty span if none."""
    offset = max(0, min(offset, len(text)))
    start = offset
    while start > 0 and is_word_char(text[start - 1]):
        start -= 1
    end = offset
    while end < len(text) and is_word_char(text[end]):
        end += 1
    return start, end
