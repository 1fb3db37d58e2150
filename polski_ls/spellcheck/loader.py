from __future__ import annotations

import logging
import os
from importlib import resources
from pathlib import Path

from polski_ls.common.config import Settings
from polski_ls.spellcheck.dictionary import DictionaryStore

logger = logging.getLogger(__name__)

APP_DIR_NAME = "polski-ls"
BASELINE_RESOURCE = "slowa.txt"
USER_DICTIONARY_NAME = "slownik.txt"
USER_DICTIONARY_GLOB = "*.txt"


class LoadError(Exception):
    """A dictionary source could not be read or written."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


def baseline_source() -> str:
    return resources.files("polski_ls.spellcheck").joinpath(BASELINE_RESOURCE).read_text(encoding="utf-8")


def user_dictionary_dir(settings: Settings) -> Path:
    if settings.config_dir:
        return Path(settings.config_dir).expanduser()
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / APP_DIR_NAME
    return Path.home() / ".config" / APP_DIR_NAME


def discover_user_dictionaries(directory: Path) -> list[Path]:
    if not directory.is_dir():
        return []
    return sorted(path for path in directory.glob(USER_DICTIONARY_GLOB) if path.is_file())


def read_source(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise LoadError(path, str(exc)) from exc


def read_sources(paths: list[Path]) -> list[str]:
    sources: list[str] = []
    for path in paths:
        try:
            sources.append(read_source(path))
        except LoadError as exc:
            logger.warning("skipping user dictionary %s: %s", exc.path, exc.reason)
            continue
        logger.info("loaded user dictionary %s", path)
    return sources


def load_dictionary(settings: Settings) -> DictionaryStore:
    directory = user_dictionary_dir(settings)
    user_paths = discover_user_dictionaries(directory)
    logger.info("user dictionary directory=%s files=%s", directory, len(user_paths))
    return DictionaryStore.load([baseline_source(), *read_sources(user_paths)])


def append_user_word(directory: Path, word: str) -> Path:
    path = directory / USER_DICTIONARY_NAME
    try:
        directory.mkdir(parents=True, exist_ok=True)
        needs_newline = path.exists() and path.stat().st_size > 0 and not path.read_bytes().endswith(b"\n")
        with path.open("a", encoding="utf-8") as handle:
            if needs_newline:
                handle.write("\n")
            handle.write(f"{word}\n")
    except OSError as exc:
        raise LoadError(path, str(exc)) from exc
    logger.info("added %r to user dictionary %s", word, path)
    return path
