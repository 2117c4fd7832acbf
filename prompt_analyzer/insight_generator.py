"""
Insight Generator Module
Turns complexity, idea and token metrics into narrative findings: prioritized
insights, an idea breakdown, a writing-quality assessment, recommendations,
a content profile and a one-paragraph summary.
"""

import logging
from typing import Any, Dict, List

from .base_types import Metric, make_metric, safe_divide, clamp, round_half_up, truncate, title_case
from .lexicons import Lexicons

logger = logging.getLogger(__name__)

MAX_PRIMARY_IDEAS = 5
MAX_KEY_POINTS = 3
CONNECTION_THRESHOLD = 0.2
WORDS_PER_MINUTE = 200
PRIORITY_ORDER = {'high': 1, 'medium': 2, 'low': 3}


def metric_value(metrics: Dict[str, Metric], key: str, default: Any = 0):
    metric = metrics.get(key)
    return metric.value if metric is not None else default


class InsightGenerator:
    """Pure function of upstream stage outputs; holds only read-only lexicons."""

    def __init__(self):
        self.formal_markers = Lexicons.words('insights', 'formal_markers')
        self.conversational_markers = Lexicons.words('insights', 'conversational_markers')

    def generate(self, complexity: Dict[str, Metric], ideas: Dict[str, Metric],
                 tokens: Dict[str, Metric]) -> Dict[str, Metric]:
        main_insights = self.main_insights(complexity, ideas)
        breakdown = self.idea_breakdown(ideas)
        quality = self.writing_quality(complexity, ideas)
        recommendations = self.recommendations(complexity, ideas, quality)
        profile = self.content_profile(complexity, ideas, tokens)
        summary = self.summary(breakdown, quality, profile)

        logger.debug(f"Generated {len(main_insights)} insights and {len(recommendations)} recommendations")

        return {
            'summary': make_metric(
                summary, "Executive Summary",
                "High-level overview of the analysis including key findings and characteristics.",
                "Read this first to understand the prompt's main attributes."
            ),
            'main_insights': make_metric(
                main_insights, "Prioritized Insights",
                "Key findings ordered by importance; priority 1 is the most important.",
                "Address high-impact insights before polishing the rest."
            ),
            'idea_breakdown': make_metric(
                breakdown, "Idea Analysis",
                "The main ideas, how much of the text each covers, and how they connect.",
                "Check that the ideas you care about get the most coverage."
            ),
            'writing_quality': make_metric(
                quality, "Quality Metrics (0-1)",
                "Clarity, coherence, depth and originality blended into one quality score.",
                "Keep the strengths and target the listed weaknesses in revisions."
            ),
            'recommendations': make_metric(
                recommendations, "Improvement Suggestions",
                "Actionable advice derived from the same thresholds used for grading.",
                "Start with high-priority, easy changes."
            ),
            'content_profile': make_metric(
                profile, "Content Characteristics",
                "Content type, purpose, audience level, tone and style.",
                "Make sure the profile matches the audience you are writing for."
            ),
        }

    def main_insights(self, complexity: Dict[str, Metric], ideas: Dict[str, Metric]) -> List[Dict[str, Any]]:
        flesch = metric_value(complexity, 'flesch_reading_ease', 0.0)
        sentence_stats = metric_value(complexity, 'sentence_stats', {})
        word_stats = metric_value(complexity, 'word_stats', {})
        idea_count = metric_value(ideas, 'unique_ideas', 0)
        diversity = metric_value(complexity, 'lexical_diversity', 0.0)
        sentence_complexity = metric_value(complexity, 'sentence_complexity_average', 0.0)

        if flesch < 30:
            readability = ("The text is very difficult to read, suitable for university graduates or specialists.",
                           'high', 1)
        elif flesch < 60:
            readability = ("The text has moderate to difficult readability, appropriate for college-level readers.",
                           'medium', 2)
        else:
            readability = ("The text is easy to read, accessible to a general audience.", 'low', 3)

        if idea_count < 3:
            idea = ("The text focuses on a very limited set of ideas, suggesting either focused "
                    "argumentation or lack of depth.", 'high', 1)
        elif idea_count > 10:
            idea = ("The text covers many diverse ideas, which may challenge reader comprehension "
                    "or indicate comprehensive coverage.", 'medium', 2)
        else:
            idea = (f"The text contains {idea_count} distinct ideas with good conceptual balance.", 'low', 3)

        if diversity < 0.3:
            vocabulary = ("Very low vocabulary diversity suggests repetitive language use.", 'high', 1)
        elif diversity > 0.7:
            vocabulary = ("Exceptionally high vocabulary diversity indicates sophisticated or technical language.",
                          'medium', 2)
        else:
            vocabulary = ("Vocabulary diversity is well-balanced for clear communication.", 'low', 3)

        if sentence_complexity > 5:
            structure = ("Highly complex sentence structures may impair readability.", 'high', 1)
        elif sentence_complexity < 2:
            structure = ("Very simple sentence structures might seem choppy or elementary.", 'medium', 2)
        else:
            structure = ("Sentence complexity is appropriate for clear communication.", 'low', 3)

        insights = [
            self._insight('readability', "Readability Assessment", readability, [
                f"Flesch Reading Ease: {flesch:.1f}",
                f"Flesch-Kincaid Grade: {metric_value(complexity, 'flesch_kincaid_grade_level', 0.0):.1f}",
                f"Average words per sentence: {sentence_stats.get('average_words_per_sentence', 0.0):.1f}",
            ]),
            self._insight('idea_analysis', "Conceptual Richness", idea, [
                f"Unique ideas identified: {idea_count}",
                f"Idea density: {metric_value(ideas, 'idea_density', 0.0):.2f} per sentence",
                f"Conceptual coherence: {metric_value(ideas, 'conceptual_coherence', 0.0):.2f}",
            ]),
            self._insight('vocabulary', "Vocabulary Analysis", vocabulary, [
                f"Lexical diversity: {diversity:.2f}",
                f"Unique words: {word_stats.get('unique_words', 0)}",
                f"Average word length: {word_stats.get('average_word_length', 0.0):.1f} characters",
            ]),
            self._insight('structure', "Structural Complexity", structure, [
                f"Average sentence complexity: {sentence_complexity:.1f}",
                f"Complex sentences: {sentence_stats.get('complex_sentences', 0)}",
                f"Topic transitions: {metric_value(ideas, 'topic_transitions', 0)}",
            ]),
        ]
        # sorted() is stable, so equal priorities keep the order above
        return sorted(insights, key=lambda i: i['priority'])

    @staticmethod
    def _insight(kind: str, title: str, rating, evidence: List[str]) -> Dict[str, Any]:
        description, impact, priority = rating
        return {
            'type': kind,
            'title': title,
            'description': description,
            'evidence': evidence,
            'impact': impact,
            'priority': priority,
        }

    def idea_breakdown(self, ideas: Dict[str, Metric]) -> Dict[str, Any]:
        clusters = metric_value(ideas, 'semantic_clusters', [])
        total_ideas = metric_value(ideas, 'unique_ideas', 0)
        clustered = sum(len(c.sentences) for c in clusters)

        ranked = sorted(clusters, key=lambda c: -len(c.sentences))[:MAX_PRIMARY_IDEAS]
        main_ideas = []
        distribution: Dict[str, int] = {}
        for cluster in ranked:
            summary = cluster.main_topic
            if cluster.key_words:
                summary = f"{cluster.main_topic}: {', '.join(cluster.key_words[:3])}"
            main_ideas.append({
                'id': cluster.id,
                'summary': summary,
                'coverage': round_half_up(safe_divide(len(cluster.sentences), clustered) * 100),
                'complexity': round_half_up(cluster.complexity),
                'key_points': [truncate(s, 100) for s in cluster.sentences[:MAX_KEY_POINTS]],
                'text_mapping': list(cluster.sentence_indices),
            })
            distribution[cluster.position_in_text] = distribution.get(cluster.position_in_text, 0) + 1

        connections = []
        for i, first in enumerate(clusters):
            for second in clusters[i + 1:]:
                strength = self._connection_strength(first, second)
                if strength > CONNECTION_THRESHOLD:
                    connections.append({
                        'from_id': first.id,
                        'to_id': second.id,
                        'strength': round_half_up(strength),
                        'type': self._connection_type(first, second),
                    })

        breadth = metric_value(ideas, 'conceptual_breadth', 0.0)
        uniqueness = (breadth + min(1.0, total_ideas / 20.0)) / 2

        return {
            'total_ideas': total_ideas,
            'main_ideas': main_ideas,
            'idea_connections': connections,
            'idea_distribution': distribution,
            'uniqueness_score': round_half_up(uniqueness),
        }

    @staticmethod
    def _connection_strength(first, second) -> float:
        if not first.key_words or not second.key_words:
            return 0.0
        overlap = len(set(first.key_words) & set(second.key_words))
        return overlap / max(len(first.key_words), len(second.key_words))

    @staticmethod
    def _connection_type(first, second) -> str:
        if first.position_in_text == "Beginning" and second.position_in_text == "End":
            return "develops-into"
        if first.complexity < second.complexity:
            return "builds-on"
        return "relates-to"

    def writing_quality(self, complexity: Dict[str, Metric], ideas: Dict[str, Metric]) -> Dict[str, Any]:
        sentence_stats = metric_value(complexity, 'sentence_stats', {})
        word_stats = metric_value(complexity, 'word_stats', {})
        flesch = metric_value(complexity, 'flesch_reading_ease', 0.0)
        diversity = metric_value(complexity, 'lexical_diversity', 0.0)
        avg_words = sentence_stats.get('average_words_per_sentence', 0.0)
        breadth = metric_value(ideas, 'conceptual_breadth', 0.0)
        unique_ideas = metric_value(ideas, 'unique_ideas', 0)
        transitions = metric_value(ideas, 'topic_transitions', 0)

        clarity = flesch / 100.0
        if avg_words > 20:
            clarity *= 0.8
        clarity = clamp(clarity)

        coherence = metric_value(ideas, 'conceptual_coherence', 0.0)

        depth = (metric_value(ideas, 'idea_complexity', 0.0) / 10.0 + breadth) / 2
        if unique_ideas > 5 and coherence > 0.6:
            depth *= 1.2
        depth = min(1.0, depth)

        originality = (diversity + breadth) / 2
        if word_stats.get('rare_words', 0) > word_stats.get('common_words', 0) / 10:
            originality *= 1.1
        originality = min(1.0, originality)

        overall = clarity * 0.3 + coherence * 0.25 + depth * 0.25 + originality * 0.2

        strengths, weaknesses, markers = [], [], {}
        if clarity > 0.7:
            strengths.append("Clear and accessible writing")
            markers['clear_writing'] = True
        if coherence > 0.7:
            strengths.append("Well-connected ideas with strong flow")
            markers['coherent_structure'] = True
        if depth > 0.7:
            strengths.append("Thorough exploration of concepts")
            markers['conceptual_depth'] = True
        if diversity > 0.5:
            strengths.append("Rich vocabulary usage")
            markers['varied_vocabulary'] = True

        if clarity < 0.5:
            weaknesses.append("Unclear or overly complex writing")
        if coherence < 0.5:
            weaknesses.append("Disconnected ideas or poor flow")
        if transitions > 10:
            weaknesses.append("Too many topic shifts")
        if avg_words > 25:
            weaknesses.append("Overly long sentences")

        return {
            'overall_score': round_half_up(overall),
            'clarity': round_half_up(clarity),
            'coherence': round_half_up(coherence),
            'depth': round_half_up(depth),
            'originality': round_half_up(originality),
            'strengths': strengths,
            'weaknesses': weaknesses,
            'quality_markers': markers,
        }

    @staticmethod
    def recommendations(complexity: Dict[str, Metric], ideas: Dict[str, Metric],
                        quality: Dict[str, Any]) -> List[Dict[str, str]]:
        avg_words = metric_value(complexity, 'sentence_stats', {}).get('average_words_per_sentence', 0.0)
        has_text = metric_value(complexity, 'word_stats', {}).get('total_words', 0) > 0
        recommendations = []

        def add(category, suggestion, rationale, priority, difficulty):
            recommendations.append({
                'category': category,
                'suggestion': suggestion,
                'rationale': rationale,
                'priority': priority,
                'difficulty': difficulty,
            })

        if has_text and metric_value(complexity, 'flesch_reading_ease', 0.0) < 30:
            add("Readability", "Simplify sentence structures and use more common vocabulary",
                "Text is very difficult to read for most audiences", 'high', 'moderate')
        if has_text and metric_value(ideas, 'conceptual_coherence', 0.0) < 0.5:
            add("Organization", "Improve transitions between ideas and group related concepts",
                "Ideas appear disconnected or poorly organized", 'high', 'moderate')
        if metric_value(ideas, 'topic_transitions', 0) > 10:
            add("Focus", "Reduce topic shifts and maintain consistent themes",
                "Frequent topic changes may confuse readers", 'medium', 'challenging')
        if has_text and metric_value(complexity, 'lexical_diversity', 0.0) < 0.3:
            add("Vocabulary", "Use more varied vocabulary and reduce word repetition",
                "Limited vocabulary makes text monotonous", 'medium', 'easy')
        if avg_words > 25:
            add("Structure", "Break long sentences into shorter, clearer ones",
                "Long sentences reduce comprehension", 'high', 'easy')
        if has_text and quality['depth'] < 0.5 and metric_value(ideas, 'unique_ideas', 0) < 5:
            add("Content", "Expand on existing ideas and introduce supporting concepts",
                "Content lacks depth and variety", 'medium', 'challenging')

        return sorted(recommendations, key=lambda r: PRIORITY_ORDER[r['priority']])

    def content_profile(self, complexity: Dict[str, Metric], ideas: Dict[str, Metric],
                        tokens: Dict[str, Metric]) -> Dict[str, Any]:
        grade = metric_value(complexity, 'flesch_kincaid_grade_level', 0.0)
        word_stats = metric_value(complexity, 'word_stats', {})
        sentence_stats = metric_value(complexity, 'sentence_stats', {})
        coherence = metric_value(ideas, 'conceptual_coherence', 0.0)
        breadth = metric_value(ideas, 'conceptual_breadth', 0.0)

        if metric_value(ideas, 'idea_progression', "") == "Linear development" and coherence > 0.6:
            content_type = "argumentative"
        elif metric_value(ideas, 'unique_ideas', 0) > 8 and breadth > 0.6:
            content_type = "expository"
        elif metric_value(complexity, 'sentence_complexity_average', 0.0) > 4:
            content_type = "analytical"
        else:
            content_type = "descriptive"

        if grade > 12:
            purpose = "Academic or professional communication"
        elif grade > 8:
            purpose = "General information or education"
        else:
            purpose = "Broad audience communication"

        if grade < 6:
            audience = "Elementary"
        elif grade < 9:
            audience = "Middle school"
        elif grade < 13:
            audience = "High school"
        elif grade < 16:
            audience = "College"
        else:
            audience = "Graduate/Professional"

        if metric_value(ideas, 'thematic_consistency', 0.0) > 0.7:
            style = "Focused and consistent"
        elif breadth > 0.6:
            style = "Comprehensive and varied"
        else:
            style = "Mixed or developing"

        total_words = word_stats.get('total_words', 0)
        concepts = metric_value(ideas, 'key_concepts', [])

        return {
            'type': content_type,
            'purpose': purpose,
            'audience_level': audience,
            'tone': self._tone(complexity, tokens),
            'style': style,
            'key_themes': [title_case(c['concept']) for c in concepts[:5]],
            'characteristics': {
                'word_count': f"{total_words} words",
                'sentence_count': f"{sentence_stats.get('total_sentences', 0)} sentences",
                'reading_time': f"{total_words / WORDS_PER_MINUTE:.1f} minutes",
                'complexity_level': self._complexity_level(complexity),
            },
        }

    def _tone(self, complexity: Dict[str, Metric], tokens: Dict[str, Metric]) -> str:
        words = [t.text.lower() for t in metric_value(tokens, 'tokens', [])]
        formal = sum(1 for w in words if w in self.formal_markers)
        conversational = sum(1 for w in words if w in self.conversational_markers)
        if formal > conversational:
            return "Formal"
        if conversational > formal:
            return "Conversational"

        word_stats = metric_value(complexity, 'word_stats', {})
        avg_words = metric_value(complexity, 'sentence_stats', {}).get('average_words_per_sentence', 0.0)
        if metric_value(complexity, 'lexical_diversity', 0.0) > 0.6 and word_stats.get('average_word_length', 0) > 5:
            return "Formal"
        if avg_words < 15:
            return "Conversational"
        return "Neutral"

    @staticmethod
    def _complexity_level(complexity: Dict[str, Metric]) -> str:
        average = (metric_value(complexity, 'flesch_kincaid_grade_level', 0.0)
                   + metric_value(complexity, 'gunning_fog_index', 0.0)
                   + metric_value(complexity, 'coleman_liau_index', 0.0)) / 3
        if average < 6:
            return "Very Simple"
        if average < 9:
            return "Simple"
        if average < 13:
            return "Moderate"
        if average < 16:
            return "Complex"
        return "Very Complex"

    @staticmethod
    def summary(breakdown: Dict[str, Any], quality: Dict[str, Any], profile: Dict[str, Any]) -> str:
        strengths = quality['strengths'][:2]
        strength_text = " and ".join(strengths) if strengths else "none identified yet"
        return (
            f"This {profile['type']} text contains {breakdown['total_ideas']} unique ideas with an overall "
            f"quality score of {quality['overall_score']:.1f}/1.0. The content is suitable for "
            f"{profile['audience_level'].lower()} readers and demonstrates {profile['style'].lower()}. "
            f"Key strengths include: {strength_text}. The text follows a {profile['type']} pattern "
            f"with {profile['tone'].lower()} tone."
        )
