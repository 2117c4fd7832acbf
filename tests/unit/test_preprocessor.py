"""
Unit tests for the Preprocessor.
"""

import pytest

from prompt_analyzer.preprocessor import Preprocessor, clean_text, normalize_text, stem_word


@pytest.fixture(scope="module")
def preprocessor():
    return Preprocessor()


class TestTextCleaning:
    """Whitespace flattening, control characters and stemming."""

    def test_clean_text_flattens_whitespace(self):
        assert clean_text("Hello\n\nworld\t!") == "Hello world !"

    def test_clean_text_drops_control_characters(self):
        assert clean_text("tab\u0007bell\u200bzero") == "tabbellzero"

    def test_normalize_text_composes_unicode(self):
        assert normalize_text("cafe\u0301") == "caf\u00e9"

    @pytest.mark.parametrize("word,stem", [
        ("studies", "study"),
        ("running", "runn"),
        ("glass", "glass"),
        ("tests", "test"),
    ])
    def test_stem_word(self, word, stem):
        assert stem_word(word) == stem


class TestPreprocessingStage:

    def test_transformation_log_order(self, preprocessor):
        log = preprocessor.process("The Tests are Running.")['transformation_log'].value
        assert [entry['step'] for entry in log] == [
            'original', 'cleaning', 'normalization', 'lowercase',
            'stop_words_removal', 'stemming', 'lemmatization'
        ]

    def test_processed_text_variants(self, preprocessor):
        processed = preprocessor.process("The Tests are Running")['processed_text'].value
        assert processed['lowercase'] == "the tests are running"
        assert processed['without_stop_words'] == "tests running"
        assert processed['stemmed'] == "test runn"

    def test_extracted_entities(self, preprocessor):
        text = "Email ops@example.com about the API by 12/05/2024 at 10:30 #release @sam"
        entities = preprocessor.process(text)['extracted_entities'].value
        assert entities['emails'] == ["ops@example.com"]
        assert entities['dates'] == ["12/05/2024"]
        assert "10:30" in entities['times']
        assert entities['acronyms'] == ["API"]
        assert entities['hashtags'] == ["#release"]
        assert "@sam" in entities['mentions']

    def test_text_statistics(self, preprocessor):
        stats = preprocessor.process("One line.\n\nSecond paragraph.")['text_statistics'].value
        assert stats['line_count'] == 3
        assert stats['paragraph_count'] == 2
        assert stats['sentence_count'] == 2

    def test_encoding_flags_bom(self, preprocessor):
        encoding = preprocessor.process("\ufeffHello")['encoding_info'].value
        assert encoding['has_bom'] is True
        assert encoding['is_valid_utf8'] is True

    def test_quality_issues(self, preprocessor):
        quality = preprocessor.process("no  ending punctuation")['quality'].value
        issue_types = [issue['type'] for issue in quality['issues']]
        assert issue_types == ['formatting', 'punctuation']

    def test_passive_voice_suggestion(self, preprocessor):
        quality = preprocessor.process("The report was approved.")['quality'].value
        assert quality['style_suggestions'][0]['text'] == "was approved"

    def test_empty_text(self, preprocessor):
        result = preprocessor.process("")
        stats = result['text_statistics'].value
        assert stats['original_length'] == 0
        assert stats['line_count'] == 0
        assert result['quality'].value['issues'] == []
        assert result['language_detection'].value['primary_language'] == 'unknown'
