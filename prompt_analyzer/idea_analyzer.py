"""
Idea Analyzer Module
Classifies sentences by thought type, groups them into topical clusters, and
derives idea-level metrics (density, coherence, breadth, progression).

Clusters produced here are the only input the task-graph extractor gets from
the text's semantic structure.
"""

import math
import re
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from .base_types import (
    Metric, make_metric, safe_divide, mean, jaccard, title_case, truncate,
    segment_sentences, significant_terms, strip_leading_phrases, first_word
)
from .lexicons import Lexicons, STOP_WORD_SET

logger = logging.getLogger(__name__)

MAX_SENTENCES = 100
MAX_CLUSTERS = 20
MAX_CLUSTER_SIZE = 10
MAX_KEY_WORDS = 5
MAX_KEY_CONCEPTS = 10
SIMILARITY_THRESHOLD = 0.2
LARGE_TEXT_SIMILARITY_THRESHOLD = 0.15
LARGE_TEXT_SENTENCES = 50
TRANSITION_THRESHOLD = 0.2

# Classification order; also the tie-break order for dominant types.
THOUGHT_TYPES = ('question', 'fact', 'opinion', 'instruction', 'example',
                 'argument', 'description', 'idea')

DIGITS = re.compile(r'\d+')
YEAR = re.compile(r'\b(19|20)\d{2}\b')
FOUR_DIGITS = re.compile(r'\d{4}')
PERCENTAGE = re.compile(r'\d+\s*%')
NUMBERED_STEP = re.compile(r'^\d+[.)]')


@dataclass
class SentenceClassification:
    sentence: str
    type: str
    sub_type: str
    confidence: float
    indicators: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sentence': self.sentence,
            'type': self.type,
            'sub_type': self.sub_type,
            'confidence': round(self.confidence, 2),
            'indicators': list(self.indicators),
        }


@dataclass
class IdeaCluster:
    id: str
    main_topic: str
    thought_type: str
    type_confidence: float
    sentences: List[str]
    sentence_indices: List[int]
    key_words: List[str]
    position_in_text: str
    complexity: float
    coherence: float
    actionable: bool = False
    certainty_level: str = ""
    evidence: List[str] = field(default_factory=list)
    sentence_details: List[SentenceClassification] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'main_topic': self.main_topic,
            'thought_type': self.thought_type,
            'type_confidence': round(self.type_confidence, 2),
            'sentences': list(self.sentences),
            'sentence_indices': list(self.sentence_indices),
            'key_words': list(self.key_words),
            'position_in_text': self.position_in_text,
            'complexity': round(self.complexity, 2),
            'coherence': round(self.coherence, 2),
            'actionable': self.actionable,
            'certainty_level': self.certainty_level,
            'evidence': list(self.evidence),
            'sentence_details': [d.to_dict() for d in self.sentence_details],
        }


def sample_sentences(sentences: List[str], limit: int = MAX_SENTENCES) -> List[str]:
    """Evenly spaced sample of at most ``limit`` sentences, keeping text order."""
    if len(sentences) <= limit:
        return list(sentences)
    step = len(sentences) / limit
    return [sentences[int(i * step)] for i in range(limit)]


def position_label(index: int, total: int) -> str:
    if index < total / 3:
        return "Beginning"
    if index < 2 * total / 3:
        return "Middle"
    return "End"


class SentenceClassifier:
    """Rule-based thought-type classification of single sentences."""

    def __init__(self):
        lex = Lexicons
        self.question_words = lex.words('thought_types', 'question_words')
        self.question_patterns = lex.phrases('thought_types', 'question_patterns')
        self.fact_indicators = lex.phrases('thought_types', 'fact_indicators')
        self.statistical_terms = lex.phrases('thought_types', 'statistical_terms')
        self.opinion_indicators = lex.phrases('thought_types', 'opinion_indicators')
        self.subjective_adjectives = lex.words('thought_types', 'subjective_adjectives')
        self.strong_certainty = lex.phrases('thought_types', 'strong_certainty')
        self.weak_certainty = lex.phrases('thought_types', 'weak_certainty')
        self.instruction_indicators = lex.phrases('thought_types', 'instruction_indicators')
        self.example_indicators = lex.phrases('thought_types', 'example_indicators')
        self.causal_indicators = lex.phrases('thought_types', 'causal_indicators')
        self.contrast_indicators = lex.phrases('thought_types', 'contrast_indicators')
        self.evidence_indicators = lex.phrases('thought_types', 'evidence_indicators')
        self.descriptive_patterns = lex.phrases('thought_types', 'descriptive_patterns')
        self.descriptive_adjectives = lex.words('thought_types', 'descriptive_adjectives')
        self.imperative_verbs = lex.words('imperative_verbs')
        self.sequence_markers = lex.phrases('tasks', 'sequence_markers')

    def classify(self, sentence: str) -> SentenceClassification:
        lower = sentence.lower()
        padded = f" {lower} "
        words = set(re.findall(r"[a-z']+", lower))

        if self.is_question(sentence):
            return SentenceClassification(sentence, 'question', self._question_type(words), 0.95,
                                          ['question form'])

        fact_score, fact_hits = self._score(padded, self.fact_indicators, 0.2)
        if DIGITS.search(sentence):
            fact_score += 0.3
            fact_hits.append('numeric content')
        if YEAR.search(sentence):
            fact_score += 0.2
            fact_hits.append('date reference')
        if any(term in lower for term in self.statistical_terms):
            fact_score += 0.2
            fact_hits.append('statistical term')
        if fact_score > 0.7:
            return SentenceClassification(sentence, 'fact', self._fact_type(sentence), min(fact_score, 1.0), fact_hits)

        opinion_score, opinion_hits = self._score(lower, self.opinion_indicators, 0.25)
        subjective = sorted(words & self.subjective_adjectives)
        opinion_score += 0.15 * len(subjective)
        opinion_hits.extend(subjective)
        if ' i ' in padded:
            opinion_score += 0.3
            opinion_hits.append('first person')
        if opinion_score > 0.6:
            return SentenceClassification(sentence, 'opinion', self.certainty(lower),
                                          min(opinion_score, 1.0), opinion_hits)

        instruction_score, instruction_hits = self._score(padded, self.instruction_indicators, 0.2)
        if self.starts_with_imperative(sentence):
            instruction_score += 0.5
            instruction_hits.insert(0, 'imperative verb')
        if NUMBERED_STEP.match(sentence.strip()):
            instruction_score += 0.3
            instruction_hits.append('numbered step')
        if instruction_score >= 0.5:
            return SentenceClassification(sentence, 'instruction', self._instruction_type(sentence),
                                          min(instruction_score, 1.0), instruction_hits)

        example_score, example_hits = self._score(padded, self.example_indicators, 0.4)
        if '(' in sentence and ')' in sentence:
            example_score += 0.2
        if ':' in sentence:
            example_score += 0.2
        if example_score > 0.6:
            return SentenceClassification(sentence, 'example', 'illustration', min(example_score, 1.0), example_hits)

        causal_score, causal_hits = self._score(padded, self.causal_indicators, 0.3)
        contrast_score, contrast_hits = self._score(padded, self.contrast_indicators, 0.25)
        evidence_score, evidence_hits = self._score(padded, self.evidence_indicators, 0.2)
        argument_score = causal_score + contrast_score + evidence_score
        if argument_score > 0.5:
            if causal_hits:
                sub_type = 'causal-argument'
            elif contrast_hits:
                sub_type = 'contrastive-argument'
            else:
                sub_type = 'evidence-based-argument'
            return SentenceClassification(sentence, 'argument', sub_type, min(argument_score, 1.0),
                                          causal_hits + contrast_hits + evidence_hits)

        descriptive = [p.strip() for p in self.descriptive_patterns if p in padded]
        descriptive += sorted(words & self.descriptive_adjectives)
        if descriptive:
            return SentenceClassification(sentence, 'description', 'descriptive-statement', 0.6, descriptive)

        return SentenceClassification(sentence, 'idea', 'general-idea', 0.5, ['general statement'])

    def is_question(self, sentence: str) -> bool:
        if '?' in sentence:
            return True
        lower = sentence.lower().strip()
        return any(lower.startswith(pattern + ' ') for pattern in self.question_patterns)

    def is_imperative_question(self, sentence: str) -> bool:
        lower = sentence.lower().strip()
        return any(lower.startswith(p) for p in ('can you', 'could you', 'would you', 'will you', 'how do', 'how can', 'how to'))

    def starts_with_imperative(self, sentence: str) -> bool:
        stripped = strip_leading_phrases(sentence, self.sequence_markers)
        return first_word(stripped) in self.imperative_verbs

    def certainty(self, lower: str) -> str:
        if any(marker in lower for marker in self.strong_certainty):
            return 'strong'
        if any(marker in lower for marker in self.weak_certainty):
            return 'weak'
        return 'moderate'

    @staticmethod
    def _score(text: str, indicators: Tuple[str, ...], weight: float) -> Tuple[float, List[str]]:
        hits = [indicator.strip() for indicator in indicators if indicator in text]
        return weight * len(hits), hits

    def _question_type(self, words: Set[str]) -> str:
        for word in ('what', 'why', 'how', 'when', 'where'):
            if word in words:
                return f"{word}-question"
        if 'who' in words or 'whom' in words:
            return 'who-question'
        return 'yes-no-question'

    @staticmethod
    def _fact_type(sentence: str) -> str:
        lower = sentence.lower()
        if DIGITS.search(sentence):
            if 'percent' in lower or '%' in lower:
                return 'statistical-fact'
            return 'numerical-fact'
        if YEAR.search(sentence):
            return 'historical-fact'
        if 'located' in lower or 'found in' in lower:
            return 'geographical-fact'
        if 'defined as' in lower or ' is a ' in f" {lower} " or ' is an ' in f" {lower} ":
            return 'definitional-fact'
        return 'general-fact'

    @staticmethod
    def _instruction_type(sentence: str) -> str:
        lower = sentence.lower()
        if any(w in lower for w in ('click', 'select', 'press')):
            return 'ui-instruction'
        if any(w in lower for w in ('install', 'configure', 'setup')):
            return 'setup-instruction'
        if NUMBERED_STEP.match(sentence.strip()):
            return 'numbered-step'
        return 'general-instruction'


class IdeaAnalyzer:
    """Produces the idea-analysis stage of the analysis result."""

    def __init__(self):
        self.classifier = SentenceClassifier()
        self.rhetorical_markers = Lexicons.phrases('thought_types', 'rhetorical_markers')
        self.verifiable_markers = Lexicons.phrases('thought_types', 'verifiable_markers')

    def analyze(self, text: str) -> Dict[str, Metric]:
        all_sentences = segment_sentences(text)
        sentences = sample_sentences(all_sentences)
        terms = [significant_terms(s, STOP_WORD_SET) for s in sentences]
        details = [self.classifier.classify(s) for s in sentences]

        clusters = self.build_clusters(sentences, terms, details)
        concepts = self._key_concepts(sentences, terms)
        transitions = self._topic_transitions(terms)
        unique_terms = {t for sentence_terms in terms for t in sentence_terms}

        avg_importance = mean([c['importance'] for c in concepts])
        idea_complexity = mean([c.complexity for c in clusters]) * (avg_importance / 10 if concepts else 1.0)

        logger.debug(f"Idea analysis: {len(sentences)} sentences, {len(clusters)} clusters, {len(concepts)} concepts")

        return {
            'unique_ideas': make_metric(
                len(clusters), "count (0-∞)",
                "Number of distinct topical clusters found in the text.",
                "One to five ideas keeps a prompt focused; more suggests splitting it."
            ),
            'idea_density': make_metric(
                safe_divide(len(clusters), len(all_sentences)), "0-1 (ideas per sentence)",
                "Clusters divided by sentences; 1.0 means every sentence introduces a new idea.",
                "Low density means ideas are developed over several sentences."
            ),
            'conceptual_coherence': make_metric(
                mean([c.coherence for c in clusters]), "0-1",
                "Average word overlap between sentences inside each cluster.",
                "Higher coherence means each idea is expressed consistently."
            ),
            'conceptual_breadth': make_metric(
                safe_divide(len(concepts), len(unique_terms)), "0-1",
                "Share of distinct content words that recur as key concepts.",
                "Very broad prompts cover many concepts shallowly."
            ),
            'thematic_consistency': make_metric(
                self._thematic_consistency(clusters), "0-1",
                "Average keyword overlap between clusters.",
                "Low values mean the prompt jumps between unrelated themes."
            ),
            'topic_transitions': make_metric(
                transitions, "count (0-∞)",
                "Adjacent sentence pairs that share almost no content words.",
                "Frequent shifts make a prompt harder to follow; add transitions."
            ),
            'idea_progression': make_metric(
                self._progression(clusters), "category",
                "How ideas are spread through the text: linear, circular, concentrated or single.",
                "Linear development usually reads most naturally."
            ),
            'idea_complexity': make_metric(
                idea_complexity, "0-∞ (typical 0-10)",
                "Average cluster complexity weighted by how important the key concepts are.",
                "Between 3 and 6 is a good depth for most prompts."
            ),
            'semantic_clusters': make_metric(
                clusters, "list of clusters",
                "Topical sentence groups with their dominant thought type and keywords.",
                "Each cluster is a candidate section of the prompt."
            ),
            'key_concepts': make_metric(
                concepts, "top 10 concepts",
                "Recurring content words ranked by frequency and spread across sentences.",
                "These are the terms the prompt is really about."
            ),
            'thought_type_distribution': make_metric(
                self._thought_type_distribution(clusters), "counts + balance (0-1)",
                "How many clusters are facts, questions, instructions and so on.",
                "Instruction-dominant prompts are the most directly actionable."
            ),
            'question_analysis': make_metric(
                self._question_analysis(clusters), "question lists",
                "Questions split into actionable, rhetorical and unanswered.",
                "Make questions actionable so the reader knows what to answer."
            ),
            'factual_content': make_metric(
                self._factual_content(clusters, len(all_sentences)), "fact lists + density (0-1)",
                "Fact-like sentences, their kinds, and which are verifiable.",
                "Facts supply context; verifiable ones add credibility."
            ),
        }

    def build_clusters(self, sentences: List[str], terms: List[List[str]],
                       details: List[SentenceClassification]) -> List[IdeaCluster]:
        """Greedy seed-based clustering; each sentence joins at most one cluster."""
        total = len(sentences)
        threshold = LARGE_TEXT_SIMILARITY_THRESHOLD if total > LARGE_TEXT_SENTENCES else SIMILARITY_THRESHOLD
        term_sets = [set(t) for t in terms]
        assigned = [False] * total
        groups: List[List[int]] = []

        for i in range(total):
            if assigned[i]:
                continue
            if len(groups) >= MAX_CLUSTERS:
                self._attach_leftover(i, groups, term_sets, assigned)
                continue
            members = [i]
            assigned[i] = True
            for j in range(i + 1, total):
                if len(members) >= MAX_CLUSTER_SIZE:
                    break
                if not assigned[j] and jaccard(term_sets[i], term_sets[j]) > threshold:
                    members.append(j)
                    assigned[j] = True
            groups.append(members)

        return [self._make_cluster(n, sorted(members), sentences, terms, details, total)
                for n, members in enumerate(groups, start=1)]

    @staticmethod
    def _attach_leftover(index: int, groups: List[List[int]], term_sets: List[set],
                         assigned: List[bool]) -> None:
        best, best_similarity = None, -1.0
        for group in groups:
            if len(group) >= MAX_CLUSTER_SIZE:
                continue
            similarity = jaccard(term_sets[group[0]], term_sets[index])
            if similarity > best_similarity:
                best, best_similarity = group, similarity
        if best is not None:
            best.append(index)
            assigned[index] = True

    def _make_cluster(self, number: int, members: List[int], sentences: List[str],
                      terms: List[List[str]], details: List[SentenceClassification],
                      total: int) -> IdeaCluster:
        member_sentences = [sentences[i] for i in members]
        member_details = [details[i] for i in members]

        frequency: Dict[str, int] = {}
        for i in members:
            for term in terms[i]:
                frequency[term] = frequency.get(term, 0) + 1
        key_words = sorted(frequency, key=lambda t: -frequency[t])[:MAX_KEY_WORDS]

        words = [w for s in member_sentences for w in s.split()]
        avg_word_length = mean([len(w.strip('.,;:!?"\'()')) for w in words])
        complexity = math.log(len(words) + 1) * (avg_word_length / 5)

        thought_type, type_confidence = self._dominant_type(member_details)
        certainty = ""
        if thought_type in ('opinion', 'argument'):
            certainty = self.classifier.certainty(' '.join(member_sentences).lower())

        actionable = any(
            d.type == 'instruction' or (d.type == 'question' and self.classifier.is_imperative_question(d.sentence))
            for d in member_details
        )
        evidence = [s for s in member_sentences
                    if any(marker in s.lower() for marker in self.classifier.evidence_indicators)]

        return IdeaCluster(
            id=f"cluster_{number}",
            main_topic=title_case(key_words[0]) if key_words else "General",
            thought_type=thought_type,
            type_confidence=type_confidence,
            sentences=member_sentences,
            sentence_indices=members,
            key_words=key_words,
            position_in_text=position_label(members[0], total),
            complexity=complexity,
            coherence=self._cluster_coherence([set(terms[i]) for i in members]),
            actionable=actionable,
            certainty_level=certainty,
            evidence=evidence,
            sentence_details=member_details,
        )

    @staticmethod
    def _dominant_type(details: List[SentenceClassification]) -> Tuple[str, float]:
        best_type, best_score, best_count = 'idea', -1.0, 0
        for thought_type in THOUGHT_TYPES:
            matching = [d.confidence for d in details if d.type == thought_type]
            if not matching:
                continue
            score = len(matching) * mean(matching)
            if score > best_score:
                best_type, best_score, best_count = thought_type, score, len(matching)
        return best_type, safe_divide(best_count, len(details))

    @staticmethod
    def _cluster_coherence(term_sets: List[set]) -> float:
        if len(term_sets) <= 1:
            return 1.0
        similarities = [jaccard(term_sets[i], term_sets[j])
                        for i in range(len(term_sets)) for j in range(i + 1, len(term_sets))]
        return mean(similarities)

    @staticmethod
    def _key_concepts(sentences: List[str], terms: List[List[str]]) -> List[Dict[str, Any]]:
        frequency: Dict[str, int] = {}
        for sentence_terms in terms:
            for term in sentence_terms:
                frequency[term] = frequency.get(term, 0) + 1

        concepts = []
        for term, count in frequency.items():
            if count < 2:
                continue
            containing = [sentences[i] for i, sentence_terms in enumerate(terms) if term in sentence_terms]
            concepts.append({
                'concept': term,
                'frequency': count,
                'importance': round(count * math.log(len(containing) + 1), 2),
                'contexts': [truncate(s, 100) for s in containing[:3]],
            })

        concepts.sort(key=lambda c: -c['importance'])
        return concepts[:MAX_KEY_CONCEPTS]

    @staticmethod
    def _topic_transitions(terms: List[List[str]]) -> int:
        return sum(
            1 for i in range(1, len(terms))
            if jaccard(set(terms[i - 1]), set(terms[i])) < TRANSITION_THRESHOLD
        )

    @staticmethod
    def _thematic_consistency(clusters: List[IdeaCluster]) -> float:
        if not clusters:
            return 0.0
        if len(clusters) == 1:
            return 1.0
        similarities = [jaccard(set(a.key_words), set(b.key_words))
                        for n, a in enumerate(clusters) for b in clusters[n + 1:]]
        return mean(similarities)

    @staticmethod
    def _progression(clusters: List[IdeaCluster]) -> str:
        if not clusters:
            return "No ideas"
        if len(clusters) == 1:
            return "Single idea"
        positions = [c.position_in_text for c in clusters]
        if all(label in positions for label in ("Beginning", "Middle", "End")):
            return "Linear development"
        if positions.count("Beginning") > 1 and positions.count("End") > 1:
            return "Circular progression"
        return "Concentrated development"

    @staticmethod
    def _thought_type_distribution(clusters: List[IdeaCluster]) -> Dict[str, Any]:
        counts = {t: 0 for t in THOUGHT_TYPES}
        for cluster in clusters:
            counts[cluster.thought_type] += 1

        dominant, max_count = "mixed", 0
        for thought_type in THOUGHT_TYPES:
            if counts[thought_type] > max_count:
                dominant, max_count = thought_type, counts[thought_type]

        entropy = 0.0
        for count in counts.values():
            if count:
                p = count / len(clusters)
                entropy -= p * math.log2(p)

        return {'counts': counts, 'dominant_type': dominant, 'balance': round(entropy / 3.0, 4)}

    def _question_analysis(self, clusters: List[IdeaCluster]) -> Dict[str, Any]:
        analysis = {'total_questions': 0, 'question_types': {}, 'unanswered': [],
                    'rhetorical': [], 'actionable_questions': []}
        for cluster in clusters:
            for detail in cluster.sentence_details:
                if detail.type != 'question':
                    continue
                analysis['total_questions'] += 1
                types = analysis['question_types']
                types[detail.sub_type] = types.get(detail.sub_type, 0) + 1
                lower = detail.sentence.lower()
                if any(marker in lower for marker in self.rhetorical_markers):
                    analysis['rhetorical'].append(detail.sentence)
                elif cluster.actionable:
                    analysis['actionable_questions'].append(detail.sentence)
                else:
                    analysis['unanswered'].append(detail.sentence)
        return analysis

    def _factual_content(self, clusters: List[IdeaCluster], total_sentences: int) -> Dict[str, Any]:
        content = {'total_facts': 0, 'fact_types': {}, 'verifiable_facts': [],
                   'statistical_facts': [], 'fact_density': 0.0}
        for cluster in clusters:
            for detail in cluster.sentence_details:
                if detail.type != 'fact':
                    continue
                content['total_facts'] += 1
                types = content['fact_types']
                types[detail.sub_type] = types.get(detail.sub_type, 0) + 1
                if detail.sub_type == 'statistical-fact':
                    content['statistical_facts'].append(detail.sentence)
                if self._is_verifiable(detail.sentence):
                    content['verifiable_facts'].append(detail.sentence)
        content['fact_density'] = round(safe_divide(content['total_facts'], total_sentences), 4)
        return content

    def _is_verifiable(self, sentence: str) -> bool:
        lower = sentence.lower()
        return bool(FOUR_DIGITS.search(sentence) or PERCENTAGE.search(sentence)
                    or any(marker in lower for marker in self.verifiable_markers))
