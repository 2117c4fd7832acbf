"""
Unit tests for the lexicon loader.
"""

import unittest
from types import MappingProxyType

from prompt_analyzer.lexicons import Lexicons, is_stop_word


class TestLexicons(unittest.TestCase):

    def tearDown(self):
        Lexicons.reset()

    def test_bundled_lexicons_load(self):
        self.assertIn("build", Lexicons.words('imperative_verbs'))
        self.assertEqual(Lexicons.phrases('tasks', 'blocking_markers')[0], "before that")

    def test_collections_are_read_only(self):
        self.assertIsInstance(Lexicons.words('imperative_verbs'), frozenset)
        self.assertIsInstance(Lexicons.phrases('tasks', 'sequence_markers'), tuple)
        misspellings = Lexicons.mapping('preprocessing', 'misspellings')
        self.assertIsInstance(misspellings, MappingProxyType)
        with self.assertRaises(TypeError):
            misspellings['teh'] = ["the"]

    def test_missing_section_is_empty(self):
        self.assertEqual(Lexicons.phrases('no_such_section'), ())
        self.assertEqual(dict(Lexicons.mapping('no_such_section')), {})

    def test_missing_file_falls_back_to_empty(self):
        with self.assertLogs('prompt_analyzer.lexicons', level='ERROR'):
            Lexicons.load('/nonexistent/lexicons.yaml')
        self.assertEqual(Lexicons.words('imperative_verbs'), frozenset())

    def test_stop_words(self):
        self.assertTrue(is_stop_word("The"))
        self.assertFalse(is_stop_word("parser"))


if __name__ == '__main__':
    unittest.main()
