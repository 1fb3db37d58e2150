from .completion import CompletionCandidate, complete
from .dictionary import (
    DictionaryEntry,
    DictionaryStore,
    InvalidWordError,
    canonical_form,
    parse_user_word,
    parse_word_list,
)
from .engine import (
    MAX_EDIT_DISTANCE,
    SpellCheckerEngine,
    Suggestion,
    apply_case,
    levenshtein_distance,
    normalize_word,
    suggest,
)

__all__ = [
    "MAX_EDIT_DISTANCE",
    "CompletionCandidate",
    "DictionaryEntry",
    "DictionaryStore",
    "InvalidWordError",
    "SpellCheckerEngine",
    "Suggestion",
    "apply_case",
    "canonical_form",
    "complete",
    "levenshtein_distance",
    "normalize_word",
    "parse_user_word",
    "parse_word_list",
    "suggest",
]
