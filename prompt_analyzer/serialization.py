"""
Serialization Module
Turns analysis results into JSON-ready structures.

Every list- or mapping-typed field is guaranteed to serialize as ``[]`` or
``{}`` rather than ``null``; the guarantee is applied here, once, after all
stages finish.
"""

import json
import logging
from enum import Enum
from typing import Any, Dict

logger = logging.getLogger(__name__)

# Field names whose value is always a collection, with the empty default.
COLLECTION_FIELDS: Dict[str, type] = {
    # tokenizer
    'tokens': list, 'type_frequency': dict, 'length_distribution': dict,
    'frequency_distribution': dict, 'unigrams': dict, 'bigrams': dict,
    'trigrams': dict, 'fourgrams': dict, 'nouns': list, 'verbs': list,
    'adjectives': list, 'adverbs': list, 'distribution': dict,
    'sentence_types': dict, 'clause_types': dict, 'entities': list,
    'topic_distribution': dict, 'char_frequency': dict, 'detected_languages': list,
    # preprocessing
    'transformation_log': list, 'alternative_languages': list, 'problems': list,
    'urls': list, 'emails': list, 'phones': list, 'dates': list, 'times': list,
    'numbers': list, 'abbreviations': list, 'acronyms': list, 'hashtags': list,
    'mentions': list, 'emoticons': list, 'special_tokens': list, 'issues': list,
    'misspellings': list, 'grammar_issues': list, 'style_suggestions': list,
    # ideas
    'sentences': list, 'key_words': list, 'sentence_details': list,
    'evidence': list, 'contexts': list, 'counts': dict, 'question_types': dict,
    'unanswered': list, 'rhetorical': list, 'actionable_questions': list,
    'fact_types': dict, 'verifiable_facts': list, 'statistical_facts': list,
    'indicators': list,
    # task graph
    'tasks': list, 'relationships': list, 'root_tasks': list, 'leaf_tasks': list,
    'critical_path': list, 'keywords': list, 'action_verbs': list,
    'depends_on': list, 'blocks': list, 'related_task_ids': list,
    # insights
    'main_insights': list, 'main_ideas': list, 'key_points': list,
    'idea_connections': list, 'text_mapping': list, 'idea_distribution': dict,
    'strengths': list, 'weaknesses': list, 'quality_markers': dict,
    'recommendations': list, 'key_themes': list, 'characteristics': dict,
    # grading
    'factors': list, 'suggestions': list, 'weak_areas': list,
    # performance
    'sub_operations': dict,
}


def to_serializable(obj: Any) -> Any:
    """Recursively convert dataclasses, enums, tuples and sets to JSON types."""
    if hasattr(obj, 'to_dict') and callable(obj.to_dict):
        return to_serializable(obj.to_dict())
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, dict):
        return {str(k): to_serializable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_serializable(v) for v in obj]
    if isinstance(obj, (set, frozenset)):
        return [to_serializable(v) for v in sorted(obj)]
    return obj


def ensure_collections(obj: Any) -> Any:
    """Replace ``None`` in collection-typed fields with the empty collection."""
    if isinstance(obj, dict):
        fixed = {}
        for key, value in obj.items():
            if value is None and key in COLLECTION_FIELDS:
                fixed[key] = COLLECTION_FIELDS[key]()
            else:
                fixed[key] = ensure_collections(value)
        return fixed
    if isinstance(obj, list):
        return [ensure_collections(v) for v in obj]
    return obj


def prepare_result(result: Any) -> Any:
    return ensure_collections(to_serializable(result))


def marshal_result(result: Any) -> str:
    """Serialize a result to a JSON string; raises ``TypeError``/``ValueError`` on failure."""
    return json.dumps(prepare_result(result), ensure_ascii=False, allow_nan=False)
