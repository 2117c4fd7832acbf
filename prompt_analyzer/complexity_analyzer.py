"""
Complexity Analyzer Module
Readability indices and sentence/word/syllable statistics computed from surface counts.
Every formula is guarded so empty or very short text yields zero-valued metrics.
"""

import math
import logging
from typing import Any, Callable, Dict, List

import textstat

from .base_types import (
    Metric, make_metric, safe_divide, mean, variance, round_half_up,
    split_sentences, extract_words, count_syllables
)
from .lexicons import Lexicons

logger = logging.getLogger(__name__)

SMOG_MIN_SENTENCES = 30
RARE_WORD_MIN_LENGTH = 8
COMMON_WORD_LENGTHS = range(3, 7)


def safe_textstat_call(func: Callable[[str], float], text: str) -> float:
    """Call a textstat scorer, returning 0.0 for empty text or a scorer failure."""
    if not text.strip():
        return 0.0
    try:
        return float(func(text))
    except Exception as e:
        logger.warning(f"textstat call {getattr(func, '__name__', func)} failed: {e}")
        return 0.0


def sentence_complexity(sentence: str) -> float:
    """0.3 per word + 0.2 per syllable, plus 1.0 for a comma and 1.5 for a semicolon."""
    words = extract_words(sentence)
    syllables = sum(count_syllables(w) for w in words)
    score = 0.3 * len(words) + 0.2 * syllables
    if ',' in sentence:
        score += 1.0
    if ';' in sentence:
        score += 1.5
    return score


class ComplexityAnalyzer:
    """Computes the complexity stage of the analysis result."""

    def __init__(self):
        self.complex_markers = Lexicons.phrases('sentence_structure', 'complex_markers')
        self.compound_markers = Lexicons.phrases('sentence_structure', 'compound_markers')

    def analyze(self, text: str) -> Dict[str, Metric]:
        sentences = split_sentences(text)
        words = extract_words(text)
        syllable_counts = [count_syllables(w) for w in words]

        num_sentences = len(sentences)
        num_words = len(words)
        num_syllables = sum(syllable_counts)
        characters = sum(1 for c in text if c.isalnum())
        letters = sum(1 for c in text if c.isalpha())
        complex_words = sum(1 for s in syllable_counts if s >= 3)
        polysyllables = sum(1 for s in syllable_counts if s > 2)

        logger.debug(f"Complexity counts: sentences={num_sentences} words={num_words} syllables={num_syllables}")

        indices = self._readability_indices(
            num_sentences, num_words, num_syllables, characters, letters, complex_words
        )
        smog_value, smog_scale = self._smog_index(num_sentences, polysyllables)
        avg_complexity = mean([sentence_complexity(s) for s in sentences])

        return {
            'flesch_kincaid_grade_level': make_metric(
                indices['flesch_kincaid'], "0-18+ (US grade)",
                "Estimated US school grade needed to understand the text: 0.39·W/S + 11.8·Y/W − 15.59.",
                "Most prompts read best at grade 8-10; higher values call for shorter sentences and simpler words."
            ),
            'flesch_reading_ease': make_metric(
                indices['flesch_ease'], "0-100 (higher is easier)",
                "Reading ease from sentence length and syllables: 206.835 − 1.015·W/S − 84.6·Y/W.",
                "Aim for 60 or above; below 30 the text is very difficult to read."
            ),
            'automated_readability_index': make_metric(
                indices['ari'], "0-14+ (US grade)",
                "Grade level from characters per word and words per sentence: 4.71·C/W + 0.5·W/S − 21.43.",
                "Useful for technical prompts because it ignores syllables."
            ),
            'coleman_liau_index': make_metric(
                indices['coleman_liau'], "0-16+ (US grade)",
                "Grade level from letters and sentences per 100 words.",
                "Cross-check against Flesch-Kincaid; large gaps suggest unusual word lengths."
            ),
            'gunning_fog_index': make_metric(
                indices['gunning_fog'], "6-20 (years of education)",
                "Years of formal education needed: 0.4·(W/S + 100·complex words/W).",
                "Values above 12 indicate text that is hard for a general audience."
            ),
            'smog_index': make_metric(
                smog_value, smog_scale,
                "Grade level from polysyllabic words; only defined for 30 or more sentences.",
                "Use for longer prompts to estimate the education level required."
            ),
            'dale_chall_readability': make_metric(
                safe_textstat_call(textstat.dale_chall_readability_score, text), "0-10+ (lower is easier)",
                "Dale-Chall score based on the share of words outside a familiar-word list.",
                "Scores above 9 mean many unfamiliar words; swap jargon for common terms."
            ),
            'lexical_diversity': make_metric(
                safe_divide(len(set(words)), num_words), "0-1",
                "Type-token ratio: unique words divided by total words.",
                "Very low values mean repetition; very high values can mean scattered vocabulary."
            ),
            'sentence_complexity_average': make_metric(
                avg_complexity, "0-∞ (typical 2-8)",
                "Average per-sentence score from word count, syllables, commas and semicolons.",
                "Averages above 5 suggest splitting long sentences."
            ),
            'word_complexity_distribution': make_metric(
                self._word_complexity_distribution(words), "word counts per bucket",
                "Words bucketed as simple, moderate, complex or very complex by length and syllables.",
                "A large very_complex share is a signal to simplify vocabulary."
            ),
            'syllable_stats': make_metric(
                self._syllable_stats(words, syllable_counts), "syllable counts",
                "Total, average and variance of syllables per word plus the longest-sounding word.",
                "High averages drive readability scores down."
            ),
            'sentence_stats': make_metric(
                self._sentence_stats(sentences, num_words), "sentence counts",
                "Sentence count, words per sentence, length variance, and complex/compound sentence counts.",
                "Keep sentence lengths consistent and under about 20 words."
            ),
            'word_stats': make_metric(
                self._word_stats(words), "word counts",
                "Word totals, length statistics, and rare versus common word counts.",
                "Many rare words raise the reading level of the prompt."
            ),
        }

    @staticmethod
    def _readability_indices(sentences: int, words: int, syllables: int,
                             characters: int, letters: int, complex_words: int) -> Dict[str, float]:
        indices = {'flesch_kincaid': 0.0, 'flesch_ease': 0.0, 'ari': 0.0,
                   'coleman_liau': 0.0, 'gunning_fog': 0.0}
        if sentences == 0 or words == 0:
            return indices

        words_per_sentence = words / sentences
        syllables_per_word = syllables / words

        indices['flesch_kincaid'] = 0.39 * words_per_sentence + 11.8 * syllables_per_word - 15.59
        indices['flesch_ease'] = 206.835 - 1.015 * words_per_sentence - 84.6 * syllables_per_word
        indices['ari'] = 4.71 * (characters / words) + 0.5 * words_per_sentence - 21.43
        indices['coleman_liau'] = (0.0588 * (letters / words * 100)
                                   - 0.296 * (sentences / words * 100) - 15.8)
        indices['gunning_fog'] = 0.4 * (words_per_sentence + 100 * complex_words / words)
        return indices

    @staticmethod
    def _smog_index(sentences: int, polysyllables: int):
        if sentences < SMOG_MIN_SENTENCES:
            return 0.0, "N/A (Requires 30+ sentences)"
        value = 1.043 * math.sqrt(polysyllables * 30 / sentences) + 3.1291
        return value, "0-18+ (US grade)"

    @staticmethod
    def _word_complexity_distribution(words: List[str]) -> Dict[str, int]:
        distribution = {'simple': 0, 'moderate': 0, 'complex': 0, 'very_complex': 0}
        for word in words:
            length = len(word)
            syllables = count_syllables(word)
            if length <= 4 and syllables <= 1:
                distribution['simple'] += 1
            elif length <= 7 and syllables <= 2:
                distribution['moderate'] += 1
            elif length <= 10 and syllables <= 3:
                distribution['complex'] += 1
            else:
                distribution['very_complex'] += 1
        distribution['total'] = len(words)
        return distribution

    @staticmethod
    def _syllable_stats(words: List[str], counts: List[int]) -> Dict[str, Any]:
        max_word, max_count = "", 0
        for word, count in zip(words, counts):
            if count > max_count:
                max_word, max_count = word, count
        return {
            'total_syllables': sum(counts),
            'average_syllables_per_word': round_half_up(mean(counts)),
            'syllable_variance': round_half_up(variance(counts)),
            'max_syllables_word': max_word,
            'max_syllable_count': max_count,
        }

    def _sentence_stats(self, sentences: List[str], num_words: int) -> Dict[str, Any]:
        lengths = [len(s.split()) for s in sentences]
        longest = shortest = ""
        if sentences:
            longest = sentences[lengths.index(max(lengths))]
            shortest = sentences[lengths.index(min(lengths))]

        complex_count = compound_count = 0
        for sentence in sentences:
            lowered = set(extract_words(sentence))
            if any(marker in lowered for marker in self.complex_markers):
                complex_count += 1
            if any(marker in lowered for marker in self.compound_markers):
                compound_count += 1

        return {
            'total_sentences': len(sentences),
            'average_words_per_sentence': round_half_up(safe_divide(num_words, len(sentences))),
            'sentence_length_variance': round_half_up(variance(lengths)),
            'longest_sentence': longest,
            'shortest_sentence': shortest,
            'complex_sentences': complex_count,
            'compound_sentences': compound_count,
        }

    @staticmethod
    def _word_stats(words: List[str]) -> Dict[str, Any]:
        lengths = [len(w) for w in words]
        longest = shortest = ""
        if words:
            longest = words[lengths.index(max(lengths))]
            shortest = words[lengths.index(min(lengths))]
        return {
            'total_words': len(words),
            'unique_words': len(set(words)),
            'average_word_length': round_half_up(mean(lengths)),
            'word_length_variance': round_half_up(variance(lengths)),
            'longest_word': longest,
            'shortest_word': shortest,
            'rare_words': sum(1 for n in lengths if n >= RARE_WORD_MIN_LENGTH),
            'common_words': sum(1 for n in lengths if n in COMMON_WORD_LENGTHS),
        }
