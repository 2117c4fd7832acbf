"""
Tokenizer Module
Splits text into typed tokens and derives lexical, syntactic, and character statistics.
All classification is lexicon based; nothing here loads a statistical model.
"""

import re
import logging
import unicodedata
from collections import Counter
from typing import Dict, List, Any, Tuple, Pattern

from .base_types import (
    Token, TokenType, Metric, make_metric, safe_divide, count_syllables,
    segment_sentences
)
from .lexicons import Lexicons, is_stop_word

logger = logging.getLogger(__name__)

# Tried in this order at every offset; the first anchored match wins.
TOKEN_PATTERNS: Tuple[Tuple[TokenType, Pattern], ...] = (
    (TokenType.URL, re.compile(r'https?://[^\s]+')),
    (TokenType.EMAIL, re.compile(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}')),
    (TokenType.HASHTAG, re.compile(r'#\w+')),
    (TokenType.MENTION, re.compile(r'@\w+')),
    (TokenType.NUMBER, re.compile(r'\d+\.?\d*')),
    (TokenType.CONTRACTION, re.compile(r"\w+'\w+")),
    (TokenType.ABBREVIATION, re.compile(r'[A-Z]{2,}\.|[A-Z]\.[A-Z]\.')),
    (TokenType.WORD, re.compile(r'[a-zA-Z]+')),
    (TokenType.PUNCTUATION, re.compile(r'[.!?;:,\'"()\[\]{}\-]')),
    (TokenType.SYMBOL, re.compile(r'[^a-zA-Z0-9\s.!?;:,\'"()\[\]{}\-]')),
    (TokenType.WHITESPACE, re.compile(r'\s+')),
)

ENTITY_PATTERN = re.compile(r'\b[A-Z][a-z]+\b')
LEMMA_SUFFIXES = ('ing', 'ed', 's')
NGRAM_NAMES = ('unigrams', 'bigrams', 'trigrams', 'fourgrams')
SYLLABLE_TYPES = (TokenType.WORD, TokenType.CONTRACTION)


def extract_tokens(text: str) -> List[Token]:
    """
    Scan ``text`` left to right producing non-overlapping tokens ordered by position.

    At each offset the patterns in ``TOKEN_PATTERNS`` are tried in order; an
    offset no pattern matches is skipped one character at a time.
    """
    tokens: List[Token] = []
    position = 0
    length = len(text)

    while position < length:
        matched = None
        for token_type, pattern in TOKEN_PATTERNS:
            match = pattern.match(text, position)
            if match and match.end() > position:
                matched = (token_type, match.group(0))
                break

        if matched is None:
            position += 1
            continue

        token_type, token_text = matched
        if token_type == TokenType.WHITESPACE:
            position += len(token_text)
            continue
        tokens.append(Token(
            text=token_text,
            type=token_type,
            position=position,
            length=len(token_text),
            syllables=count_syllables(token_text) if token_type in SYLLABLE_TYPES else 0,
            is_stop_word=token_type == TokenType.WORD and is_stop_word(token_text),
            lemma=get_lemma(token_text) if token_type == TokenType.WORD else token_text.lower(),
        ))
        position += len(token_text)

    frequencies = Counter(token.text.lower() for token in tokens)
    for token in tokens:
        token.frequency = frequencies[token.text.lower()]

    return tokens


def get_lemma(word: str) -> str:
    """Suffix-stripping lemma: drops -ing, -ed or -s when a 3+ letter stem remains."""
    lower = word.lower()
    for suffix in LEMMA_SUFFIXES:
        if lower.endswith(suffix) and len(lower) - len(suffix) >= 3:
            return lower[:-len(suffix)]
    return lower


class Tokenizer:
    """Produces the token stage of the analysis result."""

    def __init__(self):
        lex = Lexicons
        self.nouns = lex.words('pos', 'nouns')
        self.verbs = lex.words('pos', 'verbs')
        self.adjectives = lex.words('pos', 'adjectives')
        self.positive_words = lex.words('sentiment', 'positive')
        self.negative_words = lex.words('sentiment', 'negative')
        self.topics = lex.phrases('topics')

    def tokenize(self, text: str) -> Dict[str, Metric]:
        tokens = extract_tokens(text)
        word_tokens = [t.text.lower() for t in tokens if t.type == TokenType.WORD]
        logger.debug(f"Extracted {len(tokens)} tokens ({len(word_tokens)} words)")

        return {
            'tokens': make_metric(
                tokens, "list of tokens",
                "Every token found in the text with its type, character offset and lexical features.",
                "Inspect how the prompt is segmented; unexpected symbols often signal formatting noise."
            ),
            'token_counts': make_metric(
                self._count_tokens(tokens), "counts (0-∞)",
                "Totals per token type plus length and frequency distributions.",
                "A high punctuation or symbol share suggests the prompt may be hard to parse."
            ),
            'ngrams': make_metric(
                self._generate_ngrams(word_tokens), "n-gram → count",
                "Case-folded word sequences of length one to four and how often they occur.",
                "Repeated bigrams and trigrams reveal the phrases the prompt leans on."
            ),
            'pos_tags': make_metric(
                self._tag_parts_of_speech(word_tokens), "word lists + distribution",
                "Dictionary-based part-of-speech tags; words outside the lexicon are 'unknown'.",
                "A verb-heavy prompt reads as a set of instructions; a noun-heavy one as a description."
            ),
            'syntax': make_metric(
                self._analyze_syntax(text), "sentence and clause type counts",
                "Declarative, interrogative and exclamatory sentences; simple, compound and complex clauses.",
                "Many complex clauses make a prompt harder to follow."
            ),
            'semantics': make_metric(
                self._analyze_semantics(text, word_tokens), "entities + sentiment (-1 to 1)",
                "Capitalized words tagged as named entities (a heuristic, not true NER) and lexicon sentiment.",
                "Use sentiment to check the tone matches the intent of the prompt."
            ),
            'character_analysis': make_metric(
                self._analyze_characters(text), "character counts",
                "Letters, digits, whitespace, punctuation and non-ASCII characters in the raw text.",
                "Unexpected non-ASCII characters can come from copy-pasting and may confuse downstream tools."
            ),
        }

    def _count_tokens(self, tokens: List[Token]) -> Dict[str, Any]:
        type_frequency: Dict[str, int] = {}
        length_distribution: Counter = Counter()
        frequency_distribution: Dict[str, int] = {}
        counts = {TokenType.WORD: 0, TokenType.PUNCTUATION: 0, TokenType.NUMBER: 0, TokenType.SYMBOL: 0}

        for token in tokens:
            type_frequency[token.type.value] = type_frequency.get(token.type.value, 0) + 1
            length_distribution[token.length] += 1
            key = token.text.lower()
            frequency_distribution[key] = frequency_distribution.get(key, 0) + 1
            if token.type in counts:
                counts[token.type] += 1

        return {
            'total': len(tokens),
            'unique': len(frequency_distribution),
            'words': counts[TokenType.WORD],
            'punctuation': counts[TokenType.PUNCTUATION],
            'numbers': counts[TokenType.NUMBER],
            'symbols': counts[TokenType.SYMBOL],
            'type_frequency': type_frequency,
            'length_distribution': {str(k): v for k, v in sorted(length_distribution.items())},
            'frequency_distribution': frequency_distribution,
        }

    @staticmethod
    def _generate_ngrams(words: List[str]) -> Dict[str, Dict[str, int]]:
        ngrams = {}
        for size, name in enumerate(NGRAM_NAMES, start=1):
            grams: Dict[str, int] = {}
            for i in range(len(words) - size + 1):
                gram = ' '.join(words[i:i + size])
                grams[gram] = grams.get(gram, 0) + 1
            ngrams[name] = grams
        return ngrams

    def _tag_parts_of_speech(self, words: List[str]) -> Dict[str, Any]:
        tagged = {'nouns': [], 'verbs': [], 'adjectives': [], 'adverbs': []}
        distribution: Dict[str, int] = {}
        for word in words:
            if word in self.nouns:
                tag, bucket = 'noun', 'nouns'
            elif word in self.verbs:
                tag, bucket = 'verb', 'verbs'
            elif word in self.adjectives:
                tag, bucket = 'adjective', 'adjectives'
            elif word.endswith('ly'):
                tag, bucket = 'adverb', 'adverbs'
            else:
                tag, bucket = 'unknown', None
            if bucket:
                tagged[bucket].append(word)
            distribution[tag] = distribution.get(tag, 0) + 1
        tagged['distribution'] = distribution
        return tagged

    @staticmethod
    def _analyze_syntax(text: str) -> Dict[str, Dict[str, int]]:
        sentence_types = {'declarative': 0, 'interrogative': 0, 'exclamatory': 0}
        clause_types = {'simple': 0, 'compound': 0, 'complex': 0}

        for sentence in segment_sentences(text):
            if sentence.endswith('?'):
                sentence_types['interrogative'] += 1
            elif sentence.endswith('!'):
                sentence_types['exclamatory'] += 1
            else:
                sentence_types['declarative'] += 1

            lower = f" {sentence.lower()} "
            if ' and ' in lower and ',' in sentence:
                clause_types['compound'] += 1
            elif ' because ' in lower or ' although ' in lower:
                clause_types['complex'] += 1
            else:
                clause_types['simple'] += 1

        return {'sentence_types': sentence_types, 'clause_types': clause_types}

    def _analyze_semantics(self, text: str, words: List[str]) -> Dict[str, Any]:
        entities = [
            {'text': m.group(0), 'label': 'PERSON', 'start': m.start(), 'end': m.end()}
            for m in ENTITY_PATTERN.finditer(text)
        ]

        positive = sum(1 for w in words if w in self.positive_words)
        negative = sum(1 for w in words if w in self.negative_words)
        total = len(words)
        sentiment = {
            'positive': safe_divide(positive, total),
            'negative': safe_divide(negative, total),
            'neutral': safe_divide(total - positive - negative, total),
            'overall': safe_divide(positive - negative, total),
        }

        return {
            'entities': entities,
            'sentiment': sentiment,
            'topic_distribution': {topic: 0.1 for topic in self.topics},
        }

    @staticmethod
    def _analyze_characters(text: str) -> Dict[str, Any]:
        stats = {'total': len(text), 'letters': 0, 'digits': 0, 'whitespace': 0,
                 'punctuation': 0, 'unicode': 0, 'special': 0}
        frequency: Dict[str, int] = {}

        for char in text:
            if char.isalpha():
                stats['letters'] += 1
            elif char.isdigit():
                stats['digits'] += 1
            elif char.isspace():
                stats['whitespace'] += 1
            elif unicodedata.category(char).startswith('P'):
                stats['punctuation'] += 1
            else:
                stats['special'] += 1
            if ord(char) > 127:
                stats['unicode'] += 1
            if not char.isspace():
                key = char.lower()
                frequency[key] = frequency.get(key, 0) + 1

        stats['char_frequency'] = frequency
        stats['encoding'] = 'UTF-8'
        stats['detected_languages'] = ['en']
        return stats
