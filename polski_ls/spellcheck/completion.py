from __future__ import annotations

from dataclasses import dataclass

from .dictionary import DictionaryStore
from .engine import MAX_EDIT_DISTANCE, levenshtein_distance, normalize_word

MIN_PREFIX_LENGTH = 2
MAX_COMPLETIONS = 50

PREFIX_MATCH_SCORE = 100.0
FUZZY_MATCH_SCORE = 60.0
DISTANCE_PENALTY = 20.0
COMMON_WORD_BOOST = 35.0


@dataclass(frozen=True)
class CompletionCandidate:
    word: str
    score: float

    @property
    def sort_key(self) -> tuple[float, int, str]:
        return (-self.score, len(self.word), self.word)


def completion_score(prefix: str, word: str, is_common: bool) -> float | None:
    """Score ``word`` as a completion of an already normalized ``prefix``.

    Returns None when the word is neither a prefix match nor within
    MAX_EDIT_DISTANCE of the prefix.
    """
    if word.startswith(prefix):
        score = PREFIX_MATCH_SCORE
    else:
        distance = levenshtein_distance(prefix, word, max_distance=MAX_EDIT_DISTANCE)
        if distance is None:
            return None
        score = FUZZY_MATCH_SCORE - DISTANCE_PENALTY * distance

    if is_common:
        score += COMMON_WORD_BOOST
    return score


def complete(prefix: str, dictionary: DictionaryStore, max_results: int = MAX_COMPLETIONS) -> list[CompletionCandidate]:
    normalized = normalize_word(prefix)
    if len(normalized) < MIN_PREFIX_LENGTH or max_results <= 0:
        return []

    candidates: list[CompletionCandidate] = []
    for entry in dictionary.all_words():
        score = completion_score(normalized, entry.word, entry.is_common)
        if score is not None:
            candidates.append(CompletionCandidate(word=entry.word, score=score))

    candidates.sort(key=lambda candidate: candidate.sort_key)
    return candidates[:max_results]
