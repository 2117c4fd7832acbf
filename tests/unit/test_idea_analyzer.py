"""
Unit tests for sentence classification and idea clustering.
"""

import pytest

from prompt_analyzer.idea_analyzer import (
    IdeaAnalyzer, SentenceClassifier, MAX_SENTENCES, position_label, sample_sentences
)


@pytest.fixture(scope="module")
def classifier():
    return SentenceClassifier()


@pytest.fixture(scope="module")
def analyzer():
    return IdeaAnalyzer()


class TestSentenceClassifier:
    """Each thought type is reachable from its lexical cues."""

    @pytest.mark.parametrize("sentence,thought_type,sub_type", [
        ("What is the deadline?", 'question', 'what-question'),
        ("Build a login page.", 'instruction', 'general-instruction'),
        ("Revenue was 45 percent higher in 2023.", 'fact', 'statistical-fact'),
        ("I think this design is great.", 'opinion', 'moderate'),
        ("Tools such as Redis (a cache): handy.", 'example', 'illustration'),
        ("Sales dropped because prices rose, but demand held.", 'argument', 'causal-argument'),
        ("The room looks large.", 'description', 'descriptive-statement'),
        ("Quiet mornings help.", 'idea', 'general-idea'),
    ])
    def test_classification(self, classifier, sentence, thought_type, sub_type):
        result = classifier.classify(sentence)
        assert result.type == thought_type, f"{sentence!r} classified as {result.type}"
        assert result.sub_type == sub_type

    def test_instruction_after_sequence_marker(self, classifier):
        assert classifier.classify("Then add password reset.").type == 'instruction'

    def test_confidence_is_capped(self, classifier):
        result = classifier.classify("The total was 90 percent of the average in 2020.")
        assert result.type == 'fact'
        assert result.confidence <= 1.0

    def test_imperative_question(self, classifier):
        assert classifier.is_imperative_question("Can you fix the bug?")
        assert not classifier.is_imperative_question("Why is it slow?")


class TestIdeaAnalyzer:

    def test_login_prompt_has_three_ideas(self, analyzer):
        result = analyzer.analyze("Build a login page. Then add password reset. Finally write tests.")
        assert result['unique_ideas'].value == 3
        assert result['idea_density'].value == 1.0
        assert result['idea_progression'].value == "Linear development"
        assert result['topic_transitions'].value == 2

    def test_similar_sentences_share_a_cluster(self, analyzer):
        result = analyzer.analyze("The parser reads tokens. The parser validates tokens.")
        clusters = result['semantic_clusters'].value
        assert len(clusters) == 1
        assert clusters[0].sentence_indices == [0, 1]
        assert clusters[0].main_topic == "Parser"
        assert clusters[0].key_words[:2] == ["parser", "tokens"]
        assert result['idea_progression'].value == "Single idea"

    def test_key_concepts_need_two_occurrences(self, analyzer):
        concepts = analyzer.analyze("The parser reads tokens. The parser validates tokens.")['key_concepts'].value
        names = [c['concept'] for c in concepts]
        assert set(names) == {"parser", "tokens"}
        assert all(c['frequency'] == 2 for c in concepts)

    def test_each_sentence_in_exactly_one_cluster(self, analyzer):
        text = ("Cache the results. Cache invalidation is hard. Write the report. "
                "Review the report carefully. Deploy on Friday.")
        clusters = analyzer.analyze(text)['semantic_clusters'].value
        indices = [i for cluster in clusters for i in cluster.sentence_indices]
        assert sorted(indices) == list(range(5))

    def test_question_analysis(self, analyzer):
        questions = analyzer.analyze("Can you fix the bug? Why is it slow?")['question_analysis'].value
        assert questions['total_questions'] == 2
        assert questions['actionable_questions'] == ["Can you fix the bug?"]
        assert questions['unanswered'] == ["Why is it slow?"]
        assert questions['question_types'] == {'yes-no-question': 1, 'why-question': 1}

    def test_thought_type_distribution(self, analyzer):
        distribution = analyzer.analyze("Build a login page.")['thought_type_distribution'].value
        assert distribution['dominant_type'] == 'instruction'
        assert distribution['counts']['instruction'] == 1
        assert distribution['balance'] == 0.0

    def test_empty_text(self, analyzer):
        result = analyzer.analyze("")
        assert result['unique_ideas'].value == 0
        assert result['semantic_clusters'].value == []
        assert result['idea_progression'].value == "No ideas"
        assert result['factual_content'].value['total_facts'] == 0


class TestHelpers:

    def test_sample_sentences_keeps_order_and_limit(self):
        sentences = [f"Sentence {n}." for n in range(250)]
        sampled = sample_sentences(sentences)
        assert len(sampled) == MAX_SENTENCES
        assert sampled[0] == "Sentence 0."
        assert sampled == sorted(sampled, key=sentences.index)

    def test_position_label(self):
        assert [position_label(i, 3) for i in range(3)] == ["Beginning", "Middle", "End"]
