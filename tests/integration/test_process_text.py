"""
Integration tests for the single text-processing entry point.

These run the full pipeline (all stages, thread pool included) and check
the JSON contract callers depend on.
"""

import json

import pytest

from prompt_analyzer import PromptAnalyzer, process_text
from prompt_analyzer.pipeline import word_count_summary

LOGIN_PROMPT = "Build a login page. Then add password reset. Finally write tests."

TOP_LEVEL_KEYS = {
    'complexity_metrics', 'tokens', 'preprocessing', 'idea_analysis', 'insights',
    'task_graph', 'prompt_grade', 'grading', 'performance_metrics'
}


@pytest.fixture(scope="module")
def analyzer():
    return PromptAnalyzer(max_workers=4)


def analyze(analyzer, text):
    result = process_text("analyze", text, analyzer=analyzer)
    assert result['success'], result.get('error')
    return json.loads(result['data'])


class TestSimpleOperations:
    """Operations that do not run the analysis pipeline."""

    @pytest.mark.parametrize("operation,text,expected", [
        ("uppercase", "Hello", "HELLO"),
        ("lowercase", "HeLLo", "hello"),
        ("trim", "  padded  ", "padded"),
        ("wordcount", "Hello world.", "2 words • 12 characters • 1 sentences"),
    ])
    def test_operation(self, operation, text, expected):
        assert process_text(operation, text) == {'success': True, 'data': expected}

    def test_wordcount_without_terminal_punctuation(self):
        assert word_count_summary("just words") == "2 words • 10 characters • 1 sentences"

    def test_wordcount_whitespace_only(self):
        assert process_text("wordcount", "   ") == {'success': True, 'data': "0 words • 3 characters • 1 sentences"}

    def test_wordcount_empty(self):
        assert word_count_summary("") == "0 words • 0 characters • 0 sentences"

    def test_unknown_operation(self):
        result = process_text("reverse", "abc")
        assert result == {'success': False, 'error': "Unknown operation: reverse"}

    @pytest.mark.parametrize("args", [(), ("analyze",), ("analyze", "a", "b")])
    def test_wrong_argument_count(self, args):
        result = process_text(*args)
        assert result['success'] is False
        assert "exactly two arguments" in result['error']

    def test_non_string_arguments(self):
        result = process_text("analyze", 42)
        assert result['success'] is False


class TestAnalyze:

    def test_result_shape(self, analyzer):
        data = analyze(analyzer, LOGIN_PROMPT)
        assert set(data) == TOP_LEVEL_KEYS
        metric = data['complexity_metrics']['flesch_reading_ease']
        assert set(metric) == {'value', 'scale', 'help_text', 'practical_application'}

    def test_login_scenario(self, analyzer):
        graph = analyze(analyzer, LOGIN_PROMPT)['task_graph']
        assert graph['total_tasks'] == 3
        assert graph['root_tasks'] == ["task_1"]
        assert graph['critical_path'] == ["task_1", "task_2", "task_3"]
        assert graph['tasks'][0]['type'] == "action"
        assert graph['relationships'][0]['relation_type'] == "depends_on"

    def test_grading(self, analyzer):
        data = analyze(analyzer, LOGIN_PROMPT)
        grade = data['prompt_grade']
        assert grade == data['grading']['prompt_grade']
        assert grade['task_complexity']['grade'] is None
        assert 0 <= grade['overall_grade']['score'] <= 100
        assert data['grading']['overall_score']['value'] == grade['overall_grade']['score']
        for key in ('understandability', 'specificity', 'clarity', 'actionability',
                    'structure_quality', 'context_sufficiency', 'scope_management'):
            assert grade[key]['grade'], f"{key} is missing its letter grade"

    def test_deterministic_apart_from_timing(self, analyzer):
        text = ("Can you refactor the billing module? It must handle refunds. "
                "Then update the docs, because support relies on them.")
        first = analyze(analyzer, text)
        second = analyze(analyzer, text)
        first.pop('performance_metrics')
        second.pop('performance_metrics')
        assert first == second

    def test_single_worker_matches_pool(self, analyzer):
        serial = analyze(PromptAnalyzer(max_workers=1), LOGIN_PROMPT)
        pooled = analyze(analyzer, LOGIN_PROMPT)
        serial.pop('performance_metrics')
        pooled.pop('performance_metrics')
        assert serial == pooled

    def test_empty_text(self, analyzer):
        data = analyze(analyzer, "")
        assert data['tokens']['token_counts']['value']['total'] == 0
        assert data['tokens']['tokens']['value'] == []
        assert data['complexity_metrics']['word_stats']['value']['total_words'] == 0
        assert data['complexity_metrics']['sentence_stats']['value']['total_sentences'] == 0
        assert data['idea_analysis']['unique_ideas']['value'] == 0
        assert data['task_graph']['total_tasks'] == 0
        assert data['task_graph']['tasks'] == []

    def test_performance_metrics(self, analyzer):
        performance = analyze(analyzer, LOGIN_PROMPT)['performance_metrics']
        assert performance['total_duration']['value'] >= 0
        assert performance['request_id']['value'].startswith("req_")
        assert set(performance['sub_operations']['value']) == {
            'task_graph_extraction', 'insight_generation', 'prompt_grade_calculation', 'json_marshaling'
        }

    def test_stage_failure_is_reported(self, analyzer, monkeypatch):
        def explode(text):
            raise RuntimeError("lexicon missing")

        monkeypatch.setattr(analyzer.tokenizer, 'tokenize', explode)
        result = process_text("analyze", "Build it.", analyzer=analyzer)
        assert result == {'success': False, 'error': "analysis failed: lexicon missing"}
