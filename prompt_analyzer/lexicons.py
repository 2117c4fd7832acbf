"""
Lexicon Module
Loads the heuristic word lists every analysis stage relies on.
The YAML file is read once per process and exposed as immutable collections.
"""

import os
import logging
import threading
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

import yaml
from spacy.lang.en.stop_words import STOP_WORDS

logger = logging.getLogger(__name__)

DEFAULT_LEXICON_PATH = os.path.join(os.path.dirname(__file__), 'config', 'lexicons.yaml')

# spaCy's English stop-word list; static data, no model download required.
STOP_WORD_SET: FrozenSet[str] = frozenset(STOP_WORDS)


def is_stop_word(word: str) -> bool:
    """Case-insensitive stop-word lookup."""
    return word.lower() in STOP_WORD_SET


class Lexicons:
    """
    Class-level cache of the heuristic dictionaries.

    Lists are returned as tuples (ordered phrases) or frozensets (membership
    lookups) and mappings as read-only proxies, so no caller can mutate the
    shared data between requests.
    """

    _data: Optional[Dict[str, Any]] = None
    _path: str = DEFAULT_LEXICON_PATH
    _lock = threading.Lock()

    @classmethod
    def load(cls, path: Optional[str] = None) -> None:
        """Load the lexicon file if it has not been loaded yet."""
        if cls._data is not None and (path is None or path == cls._path):
            return
        with cls._lock:
            if cls._data is not None and (path is None or path == cls._path):
                return
            cls._path = path or cls._path
            cls._data = cls._read(cls._path)

    @staticmethod
    def _read(path: str) -> Dict[str, Any]:
        logger.debug(f"Loading lexicons from {path}")
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
            if not isinstance(data, dict):
                logger.error(f"Lexicon file {path} is not a mapping; using empty lexicons")
                return {}
            return data
        except FileNotFoundError:
            logger.error(f"Lexicon file not found: {path}")
            return {}
        except yaml.YAMLError as e:
            logger.error(f"Error parsing lexicon YAML: {e}")
            return {}

    @classmethod
    def _lookup(cls, section: str, name: Optional[str] = None) -> Any:
        cls.load()
        node = cls._data.get(section) if cls._data else None
        if name is not None:
            node = node.get(name) if isinstance(node, dict) else None
        return node

    @classmethod
    def phrases(cls, section: str, name: Optional[str] = None) -> Tuple[str, ...]:
        """Ordered entries of a list section."""
        entries = cls._lookup(section, name) or []
        return tuple(str(entry).lower() for entry in entries)

    @classmethod
    def words(cls, section: str, name: Optional[str] = None) -> FrozenSet[str]:
        """Membership set of a list section."""
        return frozenset(cls.phrases(section, name))

    @classmethod
    def mapping(cls, section: str, name: Optional[str] = None) -> Mapping[str, Any]:
        """Read-only view of a mapping section."""
        entries = cls._lookup(section, name) or {}
        return MappingProxyType({str(k): v for k, v in entries.items()})

    @classmethod
    def reset(cls) -> None:
        """Drop the cache so the next access re-reads the file."""
        with cls._lock:
            cls._data = None
            cls._path = DEFAULT_LEXICON_PATH
