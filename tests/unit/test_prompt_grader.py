"""
Unit tests for the Prompt Grader.
"""

import unittest

import pytest

from prompt_analyzer.prompt_grader import (
    GradeDimension, PromptGrader, OVERALL_WEIGHTS, build_dimension, describe,
    grade_color, percentile, score_to_grade
)


def dimensions_with(scores):
    """GradeDimensions for every graded key, defaulting to 100 (task complexity to 0)."""
    dimensions = {}
    for key in OVERALL_WEIGHTS:
        graded = key != 'task_complexity'
        score = scores.get(key, 100.0 if graded else 0.0)
        dimensions[key] = GradeDimension(key=key, score=score,
                                         grade=score_to_grade(score) if graded else None,
                                         label="", description="")
    return dimensions


class TestLetterGrades(unittest.TestCase):
    """Boundary behavior of the letter-grade table."""

    def test_boundaries(self):
        cases = [
            (100.0, "A+"), (95.0, "A+"), (94.9, "A"), (90.0, "A"), (89.9, "A-"),
            (87.0, "A-"), (84.0, "B+"), (80.0, "B"), (77.0, "B-"), (74.0, "C+"),
            (70.0, "C"), (67.0, "C-"), (64.0, "D+"), (60.0, "D"), (59.9, "D-"),
            (56.1, "D-"), (56.0, "F"), (0.0, "F"),
        ]
        for score, expected in cases:
            with self.subTest(score=score):
                self.assertEqual(score_to_grade(score), expected)

    def test_grade_color_by_letter(self):
        self.assertEqual(grade_color("A-"), "#4CAF50")
        self.assertEqual(grade_color("F"), "#F44336")

    def test_percentile(self):
        self.assertEqual(percentile(100), 99)
        self.assertEqual(percentile(92), 95)
        self.assertEqual(percentile(65.5), 50)
        self.assertEqual(percentile(50), 40)

    def test_describe_thresholds(self):
        self.assertEqual(describe('clarity', 90), "Exceptionally clear intent and structure")
        self.assertEqual(describe('clarity', 39.9), "Very unclear and confusing")


class TestDimensions(unittest.TestCase):

    def test_factor_values_are_clamped(self):
        dimension = build_dimension('clarity', [("A", 0.5, 150.0), ("B", 0.5, -20.0)])
        self.assertEqual([f.value for f in dimension.factors], [100.0, 0.0])
        self.assertAlmostEqual(dimension.score, 50.0)

    def test_task_complexity_has_no_letter_grade(self):
        dimension = build_dimension('task_complexity', [("Task Count", 1.0, 85.0)], graded=False)
        self.assertIsNone(dimension.grade)
        self.assertEqual(dimension.label, "More Complex")

    def test_overall_grade_from_perfect_dimensions(self):
        overall = PromptGrader.overall_grade(dimensions_with({'task_complexity': 100.0}))
        self.assertEqual(overall['score'], 100.0)
        self.assertEqual(overall['grade'], "A+")
        self.assertEqual(overall['percentile'], 99)

    def test_dimension_grade_uses_rounded_score(self):
        dimension = build_dimension('clarity', [("Only", 1.0, 89.996)])
        self.assertEqual(dimension.score, 90.0)
        self.assertEqual(dimension.grade, "A")
        self.assertEqual(dimension.to_dict()['score'], 90.0)

    def test_overall_grade_uses_rounded_score(self):
        overall = PromptGrader.overall_grade(dimensions_with({key: 89.996 for key in OVERALL_WEIGHTS}))
        self.assertEqual(overall['score'], 90.0)
        self.assertEqual(overall['grade'], "A")
        self.assertTrue(overall['summary'].startswith("Exceptional"))


class TestSuggestions:
    """Suggestion rules fire on threshold gaps and are never dropped."""

    def test_no_suggestions_for_perfect_scores(self):
        assert PromptGrader.suggestions(dimensions_with({})) == []

    def test_priority_follows_gap(self):
        suggestions = PromptGrader.suggestions(dimensions_with({'structure_quality': 45.0}))
        assert len(suggestions) == 1
        assert suggestions[0]['dimension'] == "Structure"
        assert suggestions[0]['priority'] == 'high'

    def test_high_task_complexity_triggers_split_advice(self):
        suggestions = PromptGrader.suggestions(dimensions_with({'task_complexity': 85.0}))
        messages = [s['message'] for s in suggestions]
        assert "Consider breaking this into multiple smaller prompts" in messages
        assert "Reduce task dependencies by making some tasks independent" in messages

    def test_every_suggestion_has_the_same_fields(self):
        scores = {key: 0.0 for key in OVERALL_WEIGHTS}
        scores['task_complexity'] = 100.0
        suggestions = PromptGrader.suggestions(dimensions_with(scores))
        assert suggestions
        for suggestion in suggestions:
            assert set(suggestion) == {'dimension', 'priority', 'message', 'impact', 'example'}
        assert any(s['example'] == "" for s in suggestions)

    def test_sorted_by_priority(self):
        suggestions = PromptGrader.suggestions(dimensions_with({'clarity': 65.0, 'specificity': 30.0}))
        order = {'high': 0, 'medium': 1, 'low': 2}
        ranks = [order[s['priority']] for s in suggestions]
        assert ranks == sorted(ranks)

    @pytest.mark.parametrize("key", [k for k in OVERALL_WEIGHTS if k != 'task_complexity'])
    def test_lowering_a_score_never_removes_suggestions(self, key):
        previous = set()
        for score in (100.0, 80.0, 65.0, 55.0, 35.0, 10.0, 0.0):
            current = {s['message'] for s in PromptGrader.suggestions(dimensions_with({key: score}))}
            assert previous <= current, f"{key} at {score} dropped {previous - current}"
            previous = current


class TestStrengthsAndWeaknesses:

    def test_top_and_bottom_three(self):
        dimensions = dimensions_with({'understandability': 95.0, 'specificity': 40.0,
                                      'clarity': 50.0, 'actionability': 60.0, 'structure_quality': 65.0})
        strengths, weak_areas = PromptGrader.strengths_and_weaknesses(dimensions)
        assert len(strengths) == 3
        assert weak_areas[0].startswith("Specificity")
        assert len(weak_areas) == 3
        assert not any(s.startswith("Task Complexity") for s in strengths + weak_areas)

    def test_placeholders_when_nothing_qualifies(self):
        strengths, weak_areas = PromptGrader.strengths_and_weaknesses(dimensions_with({}))
        assert weak_areas == ["No critical weaknesses identified"]
        assert strengths


if __name__ == '__main__':
    unittest.main()
