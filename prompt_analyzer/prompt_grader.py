"""
Prompt Grader Module
Scores a prompt on eight dimensions, combines them into an overall letter
grade, and turns low (or, for task complexity, high) scores into prioritized
improvement suggestions.

Every dimension is a fixed weighted sum of named factors, each already
normalized to 0-100. Letter grades are assigned on the unrounded score.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .base_types import Metric, safe_divide, clamp, mean, round_half_up
from .lexicons import Lexicons
from .task_graph import TaskGraph

logger = logging.getLogger(__name__)

# (letter, inclusive lower bound); D- is the only strict bound, see score_to_grade
GRADE_CUTOFFS: Tuple[Tuple[str, float], ...] = (
    ("A+", 95), ("A", 90), ("A-", 87), ("B+", 84), ("B", 80), ("B-", 77),
    ("C+", 74), ("C", 70), ("C-", 67), ("D+", 64), ("D", 60),
)

GRADE_COLORS = {
    'A': "#4CAF50",
    'B': "#8BC34A",
    'C': "#FFC107",
    'D': "#FF9800",
    'F': "#F44336",
}

OVERALL_WEIGHTS = {
    'understandability': 0.20,
    'specificity': 0.15,
    'task_complexity': 0.15,
    'clarity': 0.15,
    'actionability': 0.15,
    'structure_quality': 0.10,
    'context_sufficiency': 0.05,
    'scope_management': 0.05,
}

DIMENSION_NAMES = {
    'understandability': "Understandability",
    'specificity': "Specificity",
    'task_complexity': "Task Complexity",
    'clarity': "Clarity",
    'actionability': "Actionability",
    'structure_quality': "Structure",
    'context_sufficiency': "Context",
    'scope_management': "Scope",
}

DESCRIPTIONS = {
    'understandability': ("Crystal clear and easy to understand", "Clear with minor complexity",
                          "Some areas need simplification", "Difficult to understand, needs revision",
                          "Very difficult to understand, major revision needed"),
    'specificity': ("Highly specific and unambiguous", "Mostly specific with minor ambiguity",
                    "Some vague areas need clarification", "Too vague, needs more specificity",
                    "Extremely vague and ambiguous"),
    'task_complexity': ("Highly complex with many interdependent tasks", "Complex with multiple dependencies",
                        "Moderate complexity with some dependencies", "Simple with few tasks",
                        "Very simple with minimal tasks"),
    'clarity': ("Exceptionally clear intent and structure", "Clear with good logical flow",
                "Mostly clear with some confusion", "Unclear in several areas", "Very unclear and confusing"),
    'actionability': ("Highly actionable with clear steps", "Actionable with good direction",
                      "Somewhat actionable but needs clarity", "Limited actionability",
                      "Not actionable, needs complete restructuring"),
    'structure_quality': ("Excellent organization and flow", "Well-structured with good progression",
                          "Adequate structure with room for improvement", "Poor structure affecting comprehension",
                          "Very poor organization"),
    'context_sufficiency': ("Complete context provided", "Good context with minor gaps",
                            "Adequate context but needs more detail", "Insufficient context provided",
                            "Severely lacking context"),
    'scope_management': ("Well-scoped and focused", "Good scope with minor adjustments needed",
                         "Scope needs some refinement", "Scope too broad or narrow", "Scope severely misaligned"),
}
DESCRIPTION_THRESHOLDS = (90, 75, 60, 40)

PROGRESSION_SCORES = {
    "Linear development": 90.0,
    "Concentrated development": 75.0,
    "Circular progression": 50.0,
}

# (dimension key, direction, threshold, message, impact, example)
SUGGESTION_RULES = (
    ('understandability', 'below', 60, "Simplify sentences - aim for 15-20 words per sentence",
     "Improve readability by 20-30 points",
     "Break: 'The complex system that we need to implement...' "
     "Into: 'We need to implement a system. The system will...'"),
    ('understandability', 'below', 40, "Replace complex words with simpler alternatives",
     "Make prompt accessible to wider audience", ""),
    ('specificity', 'below', 70, "Replace pronouns (it, this, that) with specific nouns",
     "Reduce ambiguity by 15-25%",
     "Change: 'Update it to handle this' To: 'Update the authentication system to handle OAuth tokens'"),
    ('specificity', 'below', 50, "Add concrete examples to abstract concepts",
     "Improve clarity significantly", ""),
    ('task_complexity', 'above', 70, "Consider breaking this into multiple smaller prompts",
     "Reduce cognitive load and improve success rate", ""),
    ('task_complexity', 'above', 80, "Reduce task dependencies by making some tasks independent",
     "Simplify execution path", ""),
    ('clarity', 'below', 70, "Ensure consistent verb tenses throughout",
     "Improve logical flow", ""),
    ('clarity', 'below', 50, "State the main request in one direct sentence before adding detail",
     "Make the intent unambiguous", "Start with: 'Write a migration script that renames the users table.'"),
    ('actionability', 'below', 70, "Add more action verbs (create, analyze, implement, build)",
     "Make prompt more executable",
     "Instead of: 'The system should have authentication' Use: 'Implement OAuth authentication in the system'"),
    ('actionability', 'below', 50, "Turn goals into explicit steps with a clear deliverable",
     "Give the reader a concrete place to start", ""),
    ('structure_quality', 'below', 70, "Add transition words (first, then, next, finally) between sections",
     "Improve readability and flow", ""),
    ('context_sufficiency', 'below', 70, "Provide more background information and define technical terms",
     "Ensure complete understanding", ""),
    ('scope_management', 'below', 60, "Narrow focus to core objectives",
     "Improve prompt effectiveness", ""),
)
PRIORITY_ORDER = {'high': 0, 'medium': 1, 'low': 2}
MAX_HIGHLIGHTS = 3
HIGHLIGHT_THRESHOLD = 70

NUMBER_PATTERN = re.compile(r'\d+')


def score_to_grade(score: float) -> str:
    """Letter grade for a 0-100 score; F covers 0-56 inclusive."""
    for letter, lower in GRADE_CUTOFFS:
        if score >= lower:
            return letter
    if score > 56:
        return "D-"
    return "F"


def grade_color(grade: str) -> str:
    return GRADE_COLORS.get(grade[:1], "#9E9E9E")


def quality_label(score: float) -> str:
    if score >= 90:
        return "Excellent"
    if score >= 80:
        return "Good"
    if score >= 70:
        return "Fair"
    if score >= 60:
        return "Poor"
    return "Very Poor"


def complexity_label(score: float) -> str:
    if score >= 80:
        return "More Complex"
    if score >= 60:
        return "Moderately Complex"
    if score >= 40:
        return "Balanced"
    if score >= 20:
        return "Less Complex"
    return "Minimal Complexity"


def describe(dimension: str, score: float) -> str:
    descriptions = DESCRIPTIONS[dimension]
    for threshold, description in zip(DESCRIPTION_THRESHOLDS, descriptions):
        if score >= threshold:
            return description
    return descriptions[-1]


def percentile(score: float) -> int:
    whole = int(score)
    if whole > 95:
        return 99
    if whole > 90:
        return 95
    if whole > 80:
        return 85
    if whole > 70:
        return 70
    if whole > 60:
        return 50
    return int(score * 0.8)


@dataclass
class Factor:
    name: str
    weight: float
    value: float

    @property
    def contribution(self) -> float:
        return self.value * self.weight

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'weight': self.weight,
            'value': round_half_up(self.value),
            'contribution': round_half_up(self.contribution),
        }


@dataclass
class GradeDimension:
    key: str
    score: float
    grade: Optional[str]
    label: str
    description: str
    factors: List[Factor] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'score': self.score,
            'grade': self.grade,
            'label': self.label,
            'description': self.description,
            'factors': [f.to_dict() for f in self.factors],
        }


def build_dimension(key: str, factors: List[Tuple[str, float, float]], graded: bool = True) -> GradeDimension:
    """Combine (name, weight, value) factors; values are clamped to 0-100 first.

    The score is rounded before the grade and label are derived from it.
    """
    built = [Factor(name, weight, clamp(value, 0.0, 100.0)) for name, weight, value in factors]
    score = round_half_up(sum(f.contribution for f in built))
    return GradeDimension(
        key=key,
        score=score,
        grade=score_to_grade(score) if graded else None,
        label=quality_label(score) if graded else complexity_label(score),
        description=describe(key, score),
        factors=built,
    )


def value_of(metrics: Dict[str, Metric], key: str, default: Any = 0):
    metric = metrics.get(key)
    return metric.value if metric is not None else default


class PromptGrader:
    """Grades a prompt from the outputs of every upstream stage."""

    def __init__(self):
        self.pronouns = Lexicons.words('grading', 'pronouns')
        self.abstract_words = Lexicons.words('grading', 'abstract_words')
        self.temporal_markers = Lexicons.words('grading', 'temporal_markers')

    def grade(self, complexity: Dict[str, Metric], tokens: Dict[str, Metric],
              preprocessing: Dict[str, Metric], ideas: Dict[str, Metric],
              task_graph: TaskGraph, text: str) -> Dict[str, Any]:
        dimensions = {
            'understandability': self.understandability(complexity),
            'specificity': self.specificity(text, ideas),
            'task_complexity': self.task_complexity(task_graph),
            'clarity': self.clarity(complexity, ideas, preprocessing),
            'actionability': self.actionability(task_graph),
            'structure_quality': self.structure_quality(ideas),
            'context_sufficiency': self.context_sufficiency(ideas),
            'scope_management': self.scope_management(task_graph, ideas, tokens),
        }
        overall = self.overall_grade(dimensions)
        strengths, weak_areas = self.strengths_and_weaknesses(dimensions)

        logger.debug(f"Prompt grade {overall['grade']} ({overall['score']})")

        result: Dict[str, Any] = {key: dimension.to_dict() for key, dimension in dimensions.items()}
        result['overall_grade'] = overall
        result['suggestions'] = self.suggestions(dimensions)
        result['strengths'] = strengths
        result['weak_areas'] = weak_areas
        return result

    @staticmethod
    def understandability(complexity: Dict[str, Metric]) -> GradeDimension:
        avg_length = value_of(complexity, 'sentence_stats', {}).get('average_words_per_sentence', 0.0)
        diversity = value_of(complexity, 'lexical_diversity', 0.0)
        distribution = value_of(complexity, 'word_complexity_distribution', {})

        length_score = 100.0 if avg_length <= 20 else 100 - (avg_length - 20) * 3
        lexical_score = diversity * 100
        if diversity > 0.7:
            lexical_score = 70 + (diversity - 0.7) * 100

        return build_dimension('understandability', [
            ("Reading Ease", 0.30, value_of(complexity, 'flesch_reading_ease', 0.0)),
            ("Sentence Length", 0.20, length_score),
            ("Sentence Complexity", 0.20, 100 - value_of(complexity, 'sentence_complexity_average', 0.0) * 10),
            ("Lexical Diversity", 0.15, lexical_score),
            ("Simple Words Ratio", 0.15,
             safe_divide(distribution.get('simple', 0), distribution.get('total', 0)) * 100),
        ])

    def specificity(self, text: str, ideas: Dict[str, Metric]) -> GradeDimension:
        words = [w.strip('.,;:!?"\'()') for w in text.lower().split()]
        total = len(words)
        pronouns = sum(1 for w in words if w in self.pronouns)
        abstract = sum(1 for w in words if w in self.abstract_words)
        temporal = sum(1 for w in words if w in self.temporal_markers)

        questions = value_of(ideas, 'question_analysis', {})
        question_score = 70.0
        if questions.get('total_questions', 0) > 0:
            question_score = len(questions.get('actionable_questions', [])) / questions['total_questions'] * 100

        return build_dimension('specificity', [
            ("Pronoun Usage", 0.25, 100 - safe_divide(pronouns, total) * 500),
            ("Named Entities", 0.20, min(100.0, safe_divide(self._capitalized_words(text), total) * 1000)),
            ("Concrete Language", 0.20, 100 - safe_divide(abstract, total) * 300),
            ("Question Clarity", 0.15, question_score),
            ("Numeric Specificity", 0.10, min(100, len(NUMBER_PATTERN.findall(text)) * 20)),
            ("Temporal Markers", 0.10, min(100, temporal * 25)),
        ])

    @staticmethod
    def _capitalized_words(text: str) -> int:
        """Capitalized words that do not open a sentence; a stand-in for named entities."""
        count = 0
        previous = ""
        for index, word in enumerate(text.split()):
            starts_sentence = index == 0 or previous.endswith(('.', '!', '?'))
            if not starts_sentence and word[:1].isupper():
                count += 1
            previous = word
        return count

    @staticmethod
    def task_complexity(graph: TaskGraph) -> GradeDimension:
        count = graph.total_tasks
        if count <= 2:
            count_score = 20.0
        elif count <= 5:
            count_score = 40.0
        elif count <= 10:
            count_score = 60.0
        elif count <= 15:
            count_score = 80.0
        else:
            count_score = 100.0

        depth = len(graph.critical_path)
        if depth <= 2:
            depth_score = 20.0
        elif depth <= 4:
            depth_score = 50.0
        elif depth <= 6:
            depth_score = 75.0
        else:
            depth_score = 100.0

        parallel_score = 50.0
        if count:
            parallel_score = len(graph.root_tasks) / count * 100

        task_types = {task.type for task in graph.tasks}

        return build_dimension('task_complexity', [
            ("Task Count", 0.25, count_score),
            ("Dependency Depth", 0.25, depth_score),
            ("Graph Complexity", 0.20, graph.graph_complexity * 100),
            ("Parallel Tasks", 0.15, parallel_score),
            ("Task Type Diversity", 0.15, min(100, len(task_types) * 25)),
        ], graded=False)

    @staticmethod
    def clarity(complexity: Dict[str, Metric], ideas: Dict[str, Metric],
                preprocessing: Dict[str, Metric]) -> GradeDimension:
        variance = value_of(complexity, 'sentence_stats', {}).get('sentence_length_variance', 0.0)
        diversity = value_of(complexity, 'lexical_diversity', 0.0)
        transitions = value_of(ideas, 'topic_transitions', 0)
        issues = value_of(preprocessing, 'quality', {}).get('issues', [])

        language_score = 80.0
        if diversity > 0.8:
            language_score = 60.0
        elif diversity < 0.3:
            language_score = 90.0

        flow_score = 100.0
        if transitions > 5:
            flow_score = max(40.0, 100 - (transitions - 5) * 10)

        return build_dimension('clarity', [
            ("Structure Consistency", 0.25, 100 - variance * 2),
            ("Language Clarity", 0.20, language_score),
            ("Logical Flow", 0.20, flow_score),
            ("No Contradictions", 0.15, value_of(ideas, 'thematic_consistency', 0.0) * 100),
            ("Modal Consistency", 0.10, 85.0),
            ("Punctuation Clarity", 0.10, max(50.0, 90.0 - 10 * len(issues))),
        ])

    @staticmethod
    def actionability(graph: TaskGraph) -> GradeDimension:
        count = graph.total_tasks
        verbs = sum(len(task.action_verbs) for task in graph.tasks)

        outcome_score = 60.0
        measurable_score = 50.0
        if count:
            clear = sum(1 for task in graph.tasks if task.priority and task.estimated_effort)
            outcome_score = clear / count * 100
            measurable_score = min(100, count * 20)

        return build_dimension('actionability', [
            ("Action Verbs", 0.25, min(100, verbs * 15)),
            ("Clear Outcomes", 0.20, outcome_score),
            ("Measurable Criteria", 0.20, measurable_score),
            ("Temporal Sequencing", 0.15, 90.0 if len(graph.critical_path) > 1 else 70.0),
            ("Resource Clarity", 0.10, 60.0),
            ("Success Criteria", 0.10, 65.0),
        ])

    @staticmethod
    def structure_quality(ideas: Dict[str, Metric]) -> GradeDimension:
        clusters = value_of(ideas, 'semantic_clusters', [])
        transitions = value_of(ideas, 'topic_transitions', 0)

        organization = 75.0
        if clusters:
            organization = mean([c.coherence for c in clusters]) * 100

        if 2 <= transitions <= 5:
            transition_score = 85.0
        else:
            transition_score = max(0.0, 100 - transitions * 15)

        return build_dimension('structure_quality', [
            ("Logical Progression", 0.25, PROGRESSION_SCORES.get(value_of(ideas, 'idea_progression', ""), 70.0)),
            ("Topic Coherence", 0.20, value_of(ideas, 'conceptual_coherence', 0.0) * 100),
            ("Organization", 0.20, organization),
            ("Smooth Transitions", 0.15, transition_score),
            ("Conclusion Clarity", 0.10, 70.0),
            ("Introduction Clarity", 0.10, 70.0),
        ])

    @staticmethod
    def context_sufficiency(ideas: Dict[str, Metric]) -> GradeDimension:
        facts = value_of(ideas, 'factual_content', {}).get('total_facts', 0)
        background = min(100, facts * 10) if facts > 3 else 60.0

        return build_dimension('context_sufficiency', [
            ("Background Info", 0.25, background),
            ("Explicit Assumptions", 0.20, 70.0),
            ("Domain Terminology", 0.20, 75.0),
            ("Complete References", 0.15, 70.0),
            ("Constraints Specified", 0.10, 65.0),
            ("Clear Goals", 0.10, 75.0),
        ])

    @staticmethod
    def scope_management(graph: TaskGraph, ideas: Dict[str, Metric],
                         tokens: Dict[str, Metric]) -> GradeDimension:
        count = graph.total_tasks
        words = value_of(tokens, 'token_counts', {}).get('words', 0)
        words_per_task = words / count if count else 100.0
        if 20 <= words_per_task <= 100:
            ratio_score = 90.0
        elif words_per_task < 10:
            ratio_score = 30.0
        elif words_per_task > 200:
            ratio_score = 40.0
        else:
            ratio_score = 50.0

        idea_complexity = value_of(ideas, 'idea_complexity', 0.0)
        if 3 <= idea_complexity <= 6:
            detail_score = 90.0
        elif idea_complexity > 8:
            detail_score = 50.0
        else:
            detail_score = 75.0

        high = sum(1 for task in graph.tasks if task.priority.value == 'high')
        priority_score = 85.0 if count and 0 < high <= count / 3 else 60.0

        return build_dimension('scope_management', [
            ("Task-Length Ratio", 0.25, ratio_score),
            ("Focused Scope", 0.20, (1 - value_of(ideas, 'conceptual_breadth', 0.0)) * 100),
            ("Detail Consistency", 0.20, detail_score),
            ("Focus Maintenance", 0.15, value_of(ideas, 'thematic_consistency', 0.0) * 100),
            ("No Scope Creep", 0.10, 40.0 if value_of(ideas, 'topic_transitions', 0) > 7 else 80.0),
            ("Clear Priorities", 0.10, priority_score),
        ])

    @staticmethod
    def overall_grade(dimensions: Dict[str, GradeDimension]) -> Dict[str, Any]:
        score = round_half_up(sum(dimensions[key].score * weight for key, weight in OVERALL_WEIGHTS.items()))
        letter = score_to_grade(score)

        if score >= 90:
            summary = "Exceptional prompt quality - clear, specific, and well-structured"
        elif score >= 80:
            summary = "Good prompt with minor areas for improvement"
        elif score >= 70:
            summary = "Average prompt - several areas need attention"
        elif score >= 60:
            summary = "Below average prompt - significant improvements needed"
        else:
            summary = "Poor prompt quality - requires major revision"

        return {
            'score': score,
            'grade': letter,
            'grade_color': grade_color(letter),
            'summary': summary,
            'percentile': percentile(score),
        }

    @staticmethod
    def suggestions(dimensions: Dict[str, GradeDimension]) -> List[Dict[str, str]]:
        """Every rule whose threshold is crossed fires; none are dropped."""
        fired = []
        for order, (key, direction, threshold, message, impact, example) in enumerate(SUGGESTION_RULES):
            score = dimensions[key].score
            if direction == 'below':
                gap = threshold - score
            else:
                gap = score - threshold
            if gap <= 0:
                continue
            if gap >= 20:
                priority = 'high'
            elif gap >= 10:
                priority = 'medium'
            else:
                priority = 'low'
            suggestion = {
                'dimension': DIMENSION_NAMES[key],
                'priority': priority,
                'message': message,
                'impact': impact,
                'example': example or "",
            }
            fired.append((PRIORITY_ORDER[priority], order, suggestion))
        return [s for _, _, s in sorted(fired, key=lambda item: item[:2])]

    @staticmethod
    def strengths_and_weaknesses(dimensions: Dict[str, GradeDimension]) -> Tuple[List[str], List[str]]:
        graded = [d for d in dimensions.values() if d.grade is not None]
        by_score = sorted(graded, key=lambda d: -d.score)

        strengths = [f"{DIMENSION_NAMES[d.key]}: {d.label}"
                     for d in by_score if d.score >= HIGHLIGHT_THRESHOLD][:MAX_HIGHLIGHTS]
        weak_areas = [f"{DIMENSION_NAMES[d.key]}: {d.label}"
                      for d in reversed(by_score) if d.score < HIGHLIGHT_THRESHOLD][:MAX_HIGHLIGHTS]

        if not strengths:
            strengths = ["No exceptional strengths identified"]
        if not weak_areas:
            weak_areas = ["No critical weaknesses identified"]
        return strengths, weak_areas
