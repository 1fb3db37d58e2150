from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .dictionary import DictionaryEntry, DictionaryStore, canonical_form

MAX_EDIT_DISTANCE = 2
MAX_SUGGESTIONS = 10


@dataclass(frozen=True)
class Suggestion:
    word: str
    distance: int
    is_common: bool = False

    @property
    def sort_key(self) -> tuple[int, bool, str]:
        return (self.distance, not self.is_common, self.word)


class SpellCheckerEngine:
    def normalize_word(self, word: str) -> str:
        return canonical_form(word)

    def levenshtein_distance(self, source: str, target: str, max_distance: int = MAX_EDIT_DISTANCE) -> int | None:
        if source == target:
            return 0
        if not source or not target:
            distance = max(len(source), len(target))
            return distance if distance <= max_distance else None
        if abs(len(source) - len(target)) > max_distance:
            return None

        previous = list(range(len(target) + 1))
        for i in range(1, len(source) + 1):
            current = [i] + [0] * len(target)
            row_min = i
            for j in range(1, len(target) + 1):
                cost = 0 if source[i - 1] == target[j - 1] else 1
                value = min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + cost,
                )
                current[j] = value
                if value < row_min:
                    row_min = value

            # every later cell descends from some cell of this row
            if row_min > max_distance:
                return None
            previous = current

        distance = previous[-1]
        return distance if distance <= max_distance else None

    def rank_suggestions(
        self,
        word: str,
        entries: Iterable[DictionaryEntry],
        *,
        max_distance: int = MAX_EDIT_DISTANCE,
        max_results: int = MAX_SUGGESTIONS,
    ) -> list[Suggestion]:
        normalized_word = self.normalize_word(word)
        if max_results <= 0:
            return []

        suggestions: list[Suggestion] = []
        for entry in entries:
            distance = self.levenshtein_distance(normalized_word, entry.word, max_distance=max_distance)
            if distance is None:
                continue
            suggestions.append(Suggestion(word=entry.word, distance=distance, is_common=entry.is_common))

        suggestions.sort(key=lambda suggestion: suggestion.sort_key)
        return suggestions[:max_results]

    def suggest(
        self,
        word: str,
        dictionary: DictionaryStore,
        *,
        max_distance: int = MAX_EDIT_DISTANCE,
        max_results: int = MAX_SUGGESTIONS,
    ) -> list[Suggestion]:
        return self.rank_suggestions(
            word,
            dictionary.all_words(),
            max_distance=max_distance,
            max_results=max_results,
        )

    def apply_case(self, original: str, replacement: str) -> str:
        if len(original) > 1 and original.isupper():
            return replacement.upper()
        if original[:1].isupper():
            return replacement[:1].upper() + replacement[1:]
        return replacement


spellchecker_engine = SpellCheckerEngine()


def normalize_word(word: str) -> str:
    return spellchecker_engine.normalize_word(word)


def levenshtein_distance(source: str, target: str, max_distance: int = MAX_EDIT_DISTANCE) -> int | None:
    return spellchecker_engine.levenshtein_distance(source, target, max_distance=max_distance)


def suggest(
    word: str,
    dictionary: DictionaryStore,
    *,
    max_distance: int = MAX_EDIT_DISTANCE,
    max_results: int = MAX_SUGGESTIONS,
) -> list[Suggestion]:
    return spellchecker_engine.suggest(
        word,
        dictionary,
        max_distance=max_distance,
        max_results=max_results,
    )


def apply_case(original: str, replacement: str) -> str:
    return spellchecker_engine.apply_case(original, replacement)
