"""
Base Types Module
Shared types, enums, and numeric helpers for the prompt analysis stages.
"""

import math
import re
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, List, Optional


class TokenType(Enum):
    """Token categories, listed in the order they are tried at one offset."""
    URL = "url"
    EMAIL = "email"
    HASHTAG = "hashtag"
    MENTION = "mention"
    NUMBER = "number"
    CONTRACTION = "contraction"
    ABBREVIATION = "abbreviation"
    WORD = "word"
    PUNCTUATION = "punctuation"
    SYMBOL = "symbol"
    WHITESPACE = "whitespace"


class TaskType(Enum):
    ACTION = "action"
    REQUIREMENT = "requirement"
    GOAL = "goal"
    QUESTION = "question"
    NEED = "need"


class Priority(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Effort(Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class RelationType(Enum):
    DEPENDS_ON = "depends_on"
    BLOCKS = "blocks"
    RELATED = "related"
    SUBTASK = "subtask"
    PARALLEL = "parallel"


@dataclass(frozen=True)
class Metric:
    """A self-describing measurement: the value plus how to read it."""
    value: Any
    scale: str
    help_text: str
    practical_application: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'value': self.value,
            'scale': self.scale,
            'help_text': self.help_text,
            'practical_application': self.practical_application,
        }


def make_metric(value: Any, scale: str, help_text: str, practical_application: str = "") -> Metric:
    """Wrap a value in a metric envelope, rounding floats to two decimals."""
    if isinstance(value, float):
        value = round_half_up(value)
    return Metric(value=value, scale=scale, help_text=help_text,
                  practical_application=practical_application)


@dataclass
class Token:
    text: str
    type: TokenType
    position: int
    length: int
    syllables: int = 0
    frequency: int = 0
    is_stop_word: bool = False
    lemma: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['type'] = self.type.value
        return data


WORD_PATTERN = re.compile(r"\b[a-zA-Z]+(?:'[a-zA-Z]+)?\b")
SENTENCE_SPLIT_PATTERN = re.compile(r'[.!?]+\s+')
SENTENCE_BOUNDARY_PATTERN = re.compile(r'(?<=[.!?])\s+')
VOWELS = "aeiou"


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Division that returns ``default`` instead of raising on a zero denominator."""
    if not denominator:
        return default
    return numerator / denominator


def clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    return max(lower, min(upper, value))


def round_half_up(value: float, digits: int = 2) -> float:
    """Round half away from zero; ``round()`` uses banker's rounding."""
    factor = 10 ** digits
    return math.copysign(math.floor(abs(value) * factor + 0.5), value) / factor


def mean(values: List[float]) -> float:
    return safe_divide(sum(values), len(values))


def variance(values: List[float]) -> float:
    """Population variance; 0.0 for fewer than two values."""
    if len(values) < 2:
        return 0.0
    avg = mean(values)
    return sum((v - avg) ** 2 for v in values) / len(values)


def split_sentences(text: str) -> List[str]:
    """Split on terminal punctuation followed by whitespace, dropping the delimiter."""
    return [s.strip() for s in SENTENCE_SPLIT_PATTERN.split(text) if s.strip()]


def segment_sentences(text: str) -> List[str]:
    """Split on whitespace after terminal punctuation, keeping the punctuation."""
    return [s.strip() for s in SENTENCE_BOUNDARY_PATTERN.split(text) if s.strip()]


def extract_words(text: str) -> List[str]:
    return [w.lower() for w in WORD_PATTERN.findall(text)]


def count_syllables(word: str) -> int:
    """Vowel-group count with a silent trailing 'e' correction, never below 1."""
    word = word.lower()
    count = 0
    previous_vowel = False
    for char in word:
        is_vowel = char in VOWELS
        if is_vowel and not previous_vowel:
            count += 1
        previous_vowel = is_vowel
    if word.endswith('e') and count > 1:
        count -= 1
    return max(count, 1)


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit - 3] + "..."


def jaccard(first: set, second: set) -> float:
    union = first | second
    return safe_divide(len(first & second), len(union))


def title_case(word: str) -> str:
    return word[:1].upper() + word[1:] if word else word


def first_word(text: str) -> Optional[str]:
    parts = text.split()
    return parts[0].lower().strip(".,;:!?\"'()") if parts else None


def strip_leading_phrases(text: str, phrases) -> str:
    """Repeatedly remove any of ``phrases`` (and trailing commas) from the start of ``text``."""
    remaining = text.strip()
    changed = True
    while changed and remaining:
        changed = False
        lower = remaining.lower()
        for phrase in phrases:
            if lower.startswith(phrase) and (len(lower) == len(phrase) or not lower[len(phrase)].isalnum()):
                remaining = remaining[len(phrase):].lstrip(" ,;:-")
                changed = True
                break
    return remaining


def significant_terms(text: str, stop_words) -> List[str]:
    """Lowercased alphanumeric words longer than three characters that are not stop words."""
    terms = []
    for raw in text.lower().split():
        word = re.sub(r'[^\w]', '', raw)
        if len(word) > 3 and word not in stop_words:
            terms.append(word)
    return terms
