"""
Unit tests for the Insight Generator.
"""

import pytest

from prompt_analyzer.complexity_analyzer import ComplexityAnalyzer
from prompt_analyzer.idea_analyzer import IdeaAnalyzer
from prompt_analyzer.insight_generator import InsightGenerator
from prompt_analyzer.tokenizer import Tokenizer


@pytest.fixture(scope="module")
def stages():
    return ComplexityAnalyzer(), IdeaAnalyzer(), Tokenizer(), InsightGenerator()


def generate(stages, text):
    complexity, ideas, tokenizer, generator = stages
    return generator.generate(complexity.analyze(text), ideas.analyze(text), tokenizer.tokenize(text))


class TestInsightGenerator:

    def test_sections(self, stages):
        insights = generate(stages, "Build a login page. Then add password reset. Finally write tests.")
        assert set(insights) == {'summary', 'main_insights', 'idea_breakdown', 'writing_quality',
                                 'recommendations', 'content_profile'}

    def test_main_insights_sorted_by_priority(self, stages):
        insights = generate(stages, "Build a login page. Then add password reset.")['main_insights'].value
        priorities = [i['priority'] for i in insights]
        assert priorities == sorted(priorities)
        assert {i['type'] for i in insights} == {'readability', 'idea_analysis', 'vocabulary', 'structure'}

    def test_idea_breakdown(self, stages):
        breakdown = generate(stages, "The parser reads tokens. The parser validates tokens.")['idea_breakdown'].value
        assert breakdown['total_ideas'] == 1
        assert breakdown['main_ideas'][0]['summary'].startswith("Parser")
        assert breakdown['main_ideas'][0]['text_mapping'] == [0, 1]
        assert breakdown['idea_distribution'] == {'Beginning': 1}

    def test_coverage_is_share_of_clustered_sentences(self, stages):
        text = ("Build the login page. Build the login page again. Build the login page form. "
                "Deploy the server tonight.")
        main_ideas = generate(stages, text)['idea_breakdown'].value['main_ideas']
        coverages = [idea['coverage'] for idea in main_ideas]
        assert len(coverages) > 1
        assert all(0 < c <= 100 for c in coverages), f"Coverage out of range: {coverages}"
        assert sum(coverages) == pytest.approx(100, abs=0.1)

    def test_formal_tone(self, stages):
        profile = generate(stages, "Therefore the results hold. Thus the claim stands.")['content_profile'].value
        assert profile['tone'] == "Formal"

    def test_conversational_tone(self, stages):
        profile = generate(stages, "Hey, you can really do this. Okay?")['content_profile'].value
        assert profile['tone'] == "Conversational"

    def test_characteristics(self, stages):
        profile = generate(stages, "Build a login page.")['content_profile'].value
        assert profile['characteristics']['word_count'] == "4 words"
        assert profile['characteristics']['sentence_count'] == "1 sentences"

    def test_empty_text(self, stages):
        insights = generate(stages, "")
        assert insights['recommendations'].value == []
        assert "none identified yet" in insights['summary'].value
        assert insights['idea_breakdown'].value['main_ideas'] == []
