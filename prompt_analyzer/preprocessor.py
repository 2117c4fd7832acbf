"""
Preprocessor Module
Cleans and normalizes the input, logs each transformation, and extracts
surface information (URLs, dates, acronyms) plus lightweight quality signals.
"""

import re
import logging
import unicodedata
from typing import Any, Dict, List

from .base_types import (
    Metric, make_metric, safe_divide, segment_sentences, truncate
)
from .lexicons import Lexicons, is_stop_word
from .tokenizer import get_lemma

logger = logging.getLogger(__name__)

LOG_PREVIEW_LENGTH = 100
KEPT_CATEGORIES = ('L', 'N', 'P', 'S')

WHITESPACE_RUN = re.compile(r'\s+')
PARAGRAPH_BREAK = re.compile(r'\n\s*\n')
QUOTE_CHARS = re.compile('[‘’‚‛“”„‟‹›«»"]')
DASH_CHARS = re.compile('[\u2013\u2014\u2212]')
DIGIT_RUN = re.compile(r'\d+')
END_PUNCTUATION = re.compile(r'[.!?]\s*$')
NON_WORD = re.compile(r'[^\w]')

EXTRACTION_PATTERNS = {
    'urls': re.compile(r'https?://[^\s]+'),
    'emails': re.compile(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}'),
    'phones': re.compile(r'\+?[\d\s\-()]{10,}'),
    'dates': re.compile(r'\d{1,2}[/-]\d{1,2}[/-]\d{2,4}'),
    'times': re.compile(r'\d{1,2}:\d{2}(?::\d{2})?(?:\s?[AaPp][Mm])?'),
    'numbers': re.compile(r'\b\d+(?:\.\d+)?\b'),
    'acronyms': re.compile(r'\b[A-Z]{2,}\b'),
    'hashtags': re.compile(r'#\w+'),
    'mentions': re.compile(r'@\w+'),
    'emoticons': re.compile(r'[:;]-?[)(\[\]{}|\\/pP]'),
}

DOUBLE_NEGATIVE = re.compile(r"\b(don't|won't|can't|shouldn't)\s+(no|nothing|nobody|never)\b", re.IGNORECASE)
PASSIVE_VOICE = re.compile(r'\b(was|were|is|are)\s+\w+ed\b', re.IGNORECASE)


def clean_text(text: str) -> str:
    """Flatten line breaks, collapse whitespace, and drop control/format characters."""
    text = WHITESPACE_RUN.sub(' ', text)
    kept = ''.join(
        c for c in text
        if c.isspace() or unicodedata.category(c)[0] in KEPT_CATEGORIES
    )
    return kept.strip()


def normalize_text(text: str) -> str:
    text = unicodedata.normalize('NFC', text)
    chars = [' ' if c.isspace() else c for c in text if c.isspace() or c.isprintable()]
    return WHITESPACE_RUN.sub(' ', ''.join(chars)).strip()


def stem_word(word: str) -> str:
    """Crude suffix stemmer: ies/ied → y, then -ing, -ed, -er, -est, and plural -s."""
    word = word.lower()
    if (word.endswith('ies') or word.endswith('ied')) and len(word) > 3:
        return word[:-3] + 'y'
    for suffix in ('ing', 'ed', 'er', 'est'):
        if word.endswith(suffix) and len(word) > len(suffix):
            return word[:-len(suffix)]
    if word.endswith('s') and len(word) > 1 and not word.endswith('ss'):
        return word[:-1]
    return word


class Preprocessor:
    """Produces the preprocessing stage of the analysis result."""

    def __init__(self):
        self.coherence_indicators = Lexicons.phrases('preprocessing', 'coherence_indicators')
        self.language_markers = Lexicons.mapping('preprocessing', 'language_markers')
        self.misspellings = Lexicons.mapping('preprocessing', 'misspellings')
        self.accents = Lexicons.mapping('preprocessing', 'accents')

    def process(self, text: str) -> Dict[str, Metric]:
        cleaned = clean_text(text)
        normalized = normalize_text(cleaned)
        lowercase = normalized.lower()
        without_stop_words = ' '.join(w for w in lowercase.split() if not is_stop_word(w))
        stemmed = ' '.join(stem_word(w) for w in without_stop_words.split())
        lemmatized = ' '.join(get_lemma(w) for w in without_stop_words.split())

        log = [
            self._log_step('original', '', text, "Original input text"),
            self._log_step('cleaning', text, cleaned, "Removed unwanted characters and normalized whitespace"),
            self._log_step('normalization', cleaned, normalized, "Applied Unicode normalization and character standardization"),
            self._log_step('lowercase', normalized, lowercase, "Converted to lowercase"),
            self._log_step('stop_words_removal', lowercase, without_stop_words, "Removed common stop words"),
            self._log_step('stemming', without_stop_words, stemmed, "Applied word stemming"),
            self._log_step('lemmatization', without_stop_words, lemmatized, "Applied word lemmatization"),
        ]

        return {
            'cleaned_text': make_metric(
                cleaned, "text", "Input with line breaks flattened and control characters removed.",
                "This is the text the other stages effectively see."
            ),
            'normalized_text': make_metric(
                normalized, "text", "Unicode-normalized text with only printable characters.",
                "Compare with the original to spot hidden characters."
            ),
            'processed_text': make_metric(
                {'lowercase': lowercase, 'without_stop_words': without_stop_words,
                 'stemmed': stemmed, 'lemmatized': lemmatized},
                "text variants", "Successive reductions of the text used for keyword matching.",
                "The stop-word-free variant shows the content words carrying the prompt."
            ),
            'transformation_log': make_metric(
                log, "ordered steps", "Each preprocessing step with before/after previews.",
                "Trace how the raw prompt was transformed."
            ),
            'text_statistics': make_metric(
                self._text_statistics(text, cleaned), "counts and ratios (0-1)",
                "Length, line and paragraph counts plus character-class ratios.",
                "High special-character ratios often come from pasted markup."
            ),
            'language_detection': make_metric(
                self._detect_language(text), "language code + confidence (0-1)",
                "Primary language voted by very common function words.",
                "Analyses assume English; other languages reduce accuracy."
            ),
            'encoding_info': make_metric(
                self._analyze_encoding(text), "encoding flags",
                "UTF-8 validity, byte-order mark, and non-ASCII character count.",
                "Encoding problems can corrupt prompts sent to other systems."
            ),
            'normalization': make_metric(
                self._normalization_views(text), "text variants",
                "Whitespace, case, punctuation, number and accent normalized views of the input.",
                "Use the punctuation view to avoid smart quotes in code-oriented prompts."
            ),
            'extracted_entities': make_metric(
                self._extract_information(text), "lists of matches",
                "URLs, emails, phone numbers, dates, times, numbers, acronyms, hashtags, mentions and emoticons.",
                "Concrete references like these make prompts more specific."
            ),
            'quality': make_metric(
                self._assess_quality(text), "scores (0-1) + issue lists",
                "Readability, coherence and completeness heuristics with detected issues.",
                "Fix listed issues first; they are cheap wins."
            ),
        }

    @staticmethod
    def _log_step(step: str, before: str, after: str, description: str) -> Dict[str, str]:
        return {
            'step': step,
            'before': truncate(before, LOG_PREVIEW_LENGTH),
            'after': truncate(after, LOG_PREVIEW_LENGTH),
            'description': description,
        }

    @staticmethod
    def _text_statistics(original: str, cleaned: str) -> Dict[str, Any]:
        length = len(original)
        whitespace = punctuation = digits = uppercase = non_ascii = 0
        for char in original:
            if char.isspace():
                whitespace += 1
            elif unicodedata.category(char).startswith('P'):
                punctuation += 1
            elif char.isdigit():
                digits += 1
            elif char.isupper():
                uppercase += 1
            if ord(char) > 127:
                non_ascii += 1

        has_content = bool(original.strip())
        special = length - whitespace - punctuation - digits - sum(1 for c in original if c.isalpha())
        return {
            'original_length': length,
            'cleaned_length': len(cleaned),
            'compression_ratio': safe_divide(len(cleaned), length),
            'whitespace_ratio': safe_divide(whitespace, length),
            'punctuation_ratio': safe_divide(punctuation, length),
            'digit_ratio': safe_divide(digits, length),
            'uppercase_ratio': safe_divide(uppercase, length),
            'special_char_ratio': safe_divide(max(special, 0), length),
            'unicode_char_count': non_ascii,
            'ascii_char_count': length - non_ascii,
            'word_count': len(original.split()),
            'sentence_count': len(segment_sentences(original)),
            'line_count': original.count('\n') + 1 if has_content else 0,
            'paragraph_count': len([p for p in PARAGRAPH_BREAK.split(original) if p.strip()]),
        }

    def _detect_language(self, text: str) -> Dict[str, Any]:
        words = text.lower().split()
        votes: Dict[str, int] = {}
        for word in words:
            lang = self.language_markers.get(word)
            if lang:
                votes[lang] = votes.get(lang, 0) + 1

        if not votes:
            return {'primary_language': 'unknown' if not words else 'en',
                    'confidence': 0.1 if words else 0.0,
                    'alternative_languages': [], 'script': 'Latin', 'direction': 'ltr'}

        # Highest vote wins; ties go to the language seen first.
        primary = max(votes, key=lambda lang: votes[lang])
        alternatives = sorted(
            ({'language': lang, 'confidence': safe_divide(count, len(words))}
             for lang, count in votes.items() if lang != primary),
            key=lambda alt: -alt['confidence']
        )
        return {
            'primary_language': primary,
            'confidence': max(safe_divide(votes[primary], len(words)), 0.1),
            'alternative_languages': alternatives,
            'script': 'Latin',
            'direction': 'ltr',
        }

    @staticmethod
    def _analyze_encoding(text: str) -> Dict[str, Any]:
        problems: List[str] = []
        try:
            text.encode('utf-8')
            is_valid = True
        except UnicodeEncodeError:
            is_valid = False
            problems.append("Invalid UTF-8 encoding detected")
        return {
            'detected_encoding': 'UTF-8',
            'is_valid_utf8': is_valid,
            'has_bom': text.startswith('\ufeff'),
            'non_ascii_count': sum(1 for c in text if ord(c) > 127),
            'problems': problems,
        }

    def _normalization_views(self, text: str) -> Dict[str, str]:
        punctuation = DASH_CHARS.sub('-', QUOTE_CHARS.sub("'", text))
        return {
            'unicode_normalized': unicodedata.normalize('NFC', text),
            'whitespace_normalized': WHITESPACE_RUN.sub(' ', text).strip(),
            'case_normalized': text.lower(),
            'punctuation_normalized': punctuation,
            'numbers_normalized': DIGIT_RUN.sub('<NUM>', text),
            'accents_removed': ''.join(self.accents.get(c, c) for c in text),
        }

    @staticmethod
    def _extract_information(text: str) -> Dict[str, List[str]]:
        extracted = {name: pattern.findall(text) for name, pattern in EXTRACTION_PATTERNS.items()}
        extracted['phones'] = [p.strip() for p in extracted['phones'] if sum(c.isdigit() for c in p) >= 7]
        extracted['abbreviations'] = list(extracted['acronyms'])
        extracted['special_tokens'] = []
        return extracted

    def _assess_quality(self, text: str) -> Dict[str, Any]:
        words = text.split()
        sentences = segment_sentences(text)
        return {
            'readability_score': self._readability_score(words, sentences),
            'coherence_score': self._coherence_score(sentences),
            'completeness_score': self._completeness_score(words, sentences),
            'issues': self._find_quality_issues(text),
            'misspellings': self._find_misspellings(words),
            'grammar_issues': [
                {'text': m.group(0), 'position': m.start(), 'length': len(m.group(0)),
                 'rule': 'double_negative', 'description': "Double negative construction detected",
                 'suggestion': "Consider using a positive construction"}
                for m in DOUBLE_NEGATIVE.finditer(text)
            ],
            'style_suggestions': [
                {'text': m.group(0), 'position': m.start(), 'length': len(m.group(0)),
                 'suggestion': "Consider using active voice",
                 'reason': "Active voice is generally more direct and engaging"}
                for m in PASSIVE_VOICE.finditer(text)
            ],
        }

    @staticmethod
    def _readability_score(words: List[str], sentences: List[str]) -> float:
        if not words or not sentences:
            return 0.0
        avg = len(words) / len(sentences)
        if avg < 10:
            return 0.9
        if avg < 20:
            return 0.7
        if avg < 30:
            return 0.5
        return 0.3

    def _coherence_score(self, sentences: List[str]) -> float:
        if len(sentences) <= 1:
            return 1.0
        linked = sum(
            1 for s in sentences
            if any(marker in s.lower() for marker in self.coherence_indicators)
        )
        return linked / len(sentences)

    @staticmethod
    def _completeness_score(words: List[str], sentences: List[str]) -> float:
        if len(words) < 10:
            return 0.2
        if len(sentences) < 2:
            return 0.4
        if len(words) < 50:
            return 0.6
        return 0.8

    @staticmethod
    def _find_quality_issues(text: str) -> List[Dict[str, Any]]:
        issues = []
        if not text.strip():
            return issues
        if '  ' in text:
            issues.append({'type': 'formatting', 'description': "Multiple consecutive spaces found",
                           'severity': 'low', 'position': text.index('  '), 'length': 2})
        if not END_PUNCTUATION.search(text):
            issues.append({'type': 'punctuation', 'description': "Text does not end with proper punctuation",
                           'severity': 'medium', 'position': len(text) - 1, 'length': 1})
        return issues

    def _find_misspellings(self, words: List[str]) -> List[Dict[str, Any]]:
        found = []
        position = 0
        for word in words:
            key = NON_WORD.sub('', word).lower()
            if key in self.misspellings:
                found.append({'word': word, 'position': position,
                              'suggestions': list(self.misspellings[key])})
            position += len(word) + 1
        return found
