"""
Unit tests for the Tokenizer.

Covers the fixed pattern priority at each offset, token offsets, and the
lexical statistics derived from the token stream.
"""

import pytest

from prompt_analyzer.base_types import TokenType
from prompt_analyzer.tokenizer import Tokenizer, extract_tokens, get_lemma


@pytest.fixture(scope="module")
def tokenizer():
    return Tokenizer()


def types_of(text):
    return [(t.text, t.type) for t in extract_tokens(text)]


class TestTokenPriority:
    """The first matching pattern at an offset wins."""

    def test_url_beats_word(self):
        tokens = types_of("Visit https://example.com/docs today")
        assert ("https://example.com/docs", TokenType.URL) in tokens
        assert ("https", TokenType.WORD) not in tokens

    def test_email_beats_mention(self):
        tokens = types_of("mail bob@example.com")
        assert tokens[-1] == ("bob@example.com", TokenType.EMAIL)

    def test_hashtag_and_mention(self):
        tokens = types_of("#python @alice")
        assert tokens == [("#python", TokenType.HASHTAG), ("@alice", TokenType.MENTION)]

    def test_contraction_beats_word(self):
        tokens = types_of("don't stop")
        assert tokens[0] == ("don't", TokenType.CONTRACTION)

    def test_abbreviations(self):
        tokens = types_of("NASA. and U.S. teams")
        assert ("NASA.", TokenType.ABBREVIATION) in tokens
        assert ("U.S.", TokenType.ABBREVIATION) in tokens

    def test_number_punctuation_and_symbol(self):
        tokens = types_of("$5 , 3.14")
        assert tokens == [
            ("$", TokenType.SYMBOL),
            ("5", TokenType.NUMBER),
            (",", TokenType.PUNCTUATION),
            ("3.14", TokenType.NUMBER),
        ]

    def test_whitespace_is_not_emitted(self):
        tokens = extract_tokens("  spaced \n\t out  ")
        assert [t.text for t in tokens] == ["spaced", "out"]
        assert all(t.type != TokenType.WHITESPACE for t in tokens)


class TestTokenFeatures:

    def test_positions_are_character_offsets(self):
        tokens = extract_tokens("Hi, you.")
        assert [(t.text, t.position, t.length) for t in tokens] == [
            ("Hi", 0, 2), (",", 2, 1), ("you", 4, 3), (".", 7, 1)
        ]

    def test_tokens_do_not_overlap(self):
        tokens = extract_tokens("Email a@b.io or see http://x.y/z, then #ship it!")
        for previous, current in zip(tokens, tokens[1:]):
            assert previous.position + previous.length <= current.position, (
                f"{previous.text!r} overlaps {current.text!r}"
            )

    def test_frequency_is_case_insensitive(self):
        tokens = extract_tokens("Test the test")
        assert [t.frequency for t in tokens] == [2, 1, 2]

    def test_stop_words_flagged(self):
        tokens = {t.text: t for t in extract_tokens("the parser")}
        assert tokens["the"].is_stop_word
        assert not tokens["parser"].is_stop_word

    def test_lemma(self):
        assert get_lemma("tests") == "test"
        assert get_lemma("walked") == "walk"
        assert get_lemma("bed") == "bed"


class TestTokenizerStage:

    def test_token_counts(self, tokenizer):
        counts = tokenizer.tokenize("The cat sat.")['token_counts'].value
        assert counts['total'] == 4
        assert counts['words'] == 3
        assert counts['punctuation'] == 1
        assert counts['unique'] == 4

    def test_ngrams(self, tokenizer):
        ngrams = tokenizer.tokenize("write the tests, write the docs")['ngrams'].value
        assert ngrams['bigrams']['write the'] == 2
        assert ngrams['trigrams']['the tests write'] == 1
        assert set(ngrams) == {'unigrams', 'bigrams', 'trigrams', 'fourgrams'}

    def test_sentence_types(self, tokenizer):
        syntax = tokenizer.tokenize("Is it ready? Yes! It is.")['syntax'].value
        assert syntax['sentence_types'] == {'declarative': 1, 'interrogative': 1, 'exclamatory': 1}

    def test_character_analysis(self, tokenizer):
        chars = tokenizer.tokenize("Ab 1!")['character_analysis'].value
        assert chars['letters'] == 2
        assert chars['digits'] == 1
        assert chars['whitespace'] == 1
        assert chars['punctuation'] == 1

    def test_empty_text(self, tokenizer):
        result = tokenizer.tokenize("")
        assert result['tokens'].value == []
        assert result['token_counts'].value['total'] == 0
        assert result['semantics'].value['sentiment']['overall'] == 0.0
