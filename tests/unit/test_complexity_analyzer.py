"""
Unit tests for the Complexity Analyzer.

Readability values are checked against hand-computed formulas on short
sentences so the expected numbers can be verified on paper.
"""

import unittest

from prompt_analyzer.complexity_analyzer import ComplexityAnalyzer, sentence_complexity
from prompt_analyzer.base_types import count_syllables, extract_words, round_half_up


class TestReadabilityIndices(unittest.TestCase):
    """Readability formulas on 'The cat sat on the mat.' (1 sentence, 6 words, 6 syllables)."""

    @classmethod
    def setUpClass(cls):
        cls.result = ComplexityAnalyzer().analyze("The cat sat on the mat.")

    def test_flesch_kincaid_grade(self):
        self.assertAlmostEqual(self.result['flesch_kincaid_grade_level'].value, -1.45, delta=0.01)

    def test_flesch_reading_ease(self):
        self.assertAlmostEqual(self.result['flesch_reading_ease'].value, 116.145, delta=0.01)

    def test_automated_readability_index(self):
        self.assertAlmostEqual(self.result['automated_readability_index'].value, -5.085, delta=0.01)

    def test_coleman_liau_index(self):
        self.assertAlmostEqual(self.result['coleman_liau_index'].value, -4.07, delta=0.01)

    def test_gunning_fog_index(self):
        self.assertAlmostEqual(self.result['gunning_fog_index'].value, 2.4, delta=0.01)

    def test_smog_requires_thirty_sentences(self):
        smog = self.result['smog_index']
        self.assertEqual(smog.value, 0.0)
        self.assertEqual(smog.scale, "N/A (Requires 30+ sentences)")

    def test_every_metric_is_described(self):
        for name, metric in self.result.items():
            self.assertTrue(metric.scale, f"{name} has no scale")
            self.assertTrue(metric.help_text, f"{name} has no help text")


class TestTextStatistics(unittest.TestCase):
    """Sentence, word and syllable statistics."""

    def setUp(self):
        self.analyzer = ComplexityAnalyzer()

    def test_sentence_stats_for_single_sentence(self):
        stats = self.analyzer.analyze("The cat sat on the mat.")['sentence_stats'].value
        self.assertEqual(stats['total_sentences'], 1)
        self.assertEqual(stats['average_words_per_sentence'], 6.0)
        self.assertEqual(stats['sentence_length_variance'], 0.0)

    def test_word_complexity_distribution_of_short_words(self):
        distribution = self.analyzer.analyze("The cat sat on the mat.")['word_complexity_distribution'].value
        self.assertEqual(distribution['simple'], 6)
        self.assertEqual(distribution['very_complex'], 0)
        self.assertEqual(distribution['total'], 6)

    def test_lexical_diversity_is_rounded(self):
        result = self.analyzer.analyze("the the cat")
        self.assertEqual(result['lexical_diversity'].value, 0.67)

    def test_word_stats(self):
        stats = self.analyzer.analyze("Documentation helps everyone.")['word_stats'].value
        self.assertEqual(stats['total_words'], 3)
        self.assertEqual(stats['longest_word'], "documentation")
        self.assertEqual(stats['rare_words'], 2)

    def test_contractions_count_as_one_word(self):
        stats = self.analyzer.analyze("We don't ship today.")['word_stats'].value
        self.assertEqual(stats['total_words'], 4)

    def test_empty_text_yields_zero_metrics(self):
        result = self.analyzer.analyze("")
        for name in ('flesch_kincaid_grade_level', 'flesch_reading_ease', 'automated_readability_index',
                     'coleman_liau_index', 'gunning_fog_index', 'lexical_diversity',
                     'sentence_complexity_average', 'dale_chall_readability'):
            self.assertEqual(result[name].value, 0.0, f"{name} should be 0 for empty text")
        self.assertEqual(result['sentence_stats'].value['total_sentences'], 0)
        self.assertEqual(result['word_stats'].value['total_words'], 0)


class TestHelpers(unittest.TestCase):

    def test_count_syllables(self):
        self.assertEqual(count_syllables("cat"), 1)
        self.assertEqual(count_syllables("make"), 1)
        self.assertEqual(count_syllables("reading"), 2)
        self.assertEqual(count_syllables("rhythm"), 1)

    def test_sentence_complexity_punctuation_bonus(self):
        plain = sentence_complexity("Cats sleep")
        with_comma = sentence_complexity("Cats, sleep")
        with_semicolon = sentence_complexity("Cats; sleep")
        self.assertAlmostEqual(with_comma - plain, 1.0)
        self.assertAlmostEqual(with_semicolon - plain, 1.5)

    def test_extract_words_keeps_contractions(self):
        self.assertEqual(extract_words("Don't stop the user's build"), ["don't", "stop", "the", "user's", "build"])

    def test_round_half_up(self):
        self.assertEqual(round_half_up(0.125), 0.13)
        self.assertEqual(round_half_up(-0.125), -0.13)
        self.assertEqual(round_half_up(2.0), 2.0)


if __name__ == '__main__':
    unittest.main()
