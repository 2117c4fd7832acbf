"""
Prompt Analyzer Package

Deterministic, lexicon-based analysis of text prompts:
- Tokenizer: typed tokens, n-grams, POS, syntax, sentiment
- ComplexityAnalyzer: readability indices and text statistics
- Preprocessor: cleaning, normalization, language and quality checks
- IdeaAnalyzer: thought-type classification and idea clustering
- TaskGraphExtractor: actionable tasks and their dependency graph
- InsightGenerator: narrative findings and content profile
- PromptGrader: eight-dimension grade with improvement suggestions

Usage:
    from prompt_analyzer import process_text

    result = process_text("analyze", "Build a login page. Then add password reset.")
"""

from .base_types import Metric, Token, TokenType
from .complexity_analyzer import ComplexityAnalyzer
from .idea_analyzer import IdeaAnalyzer, IdeaCluster
from .insight_generator import InsightGenerator
from .lexicons import Lexicons
from .performance import PerformanceTracker
from .pipeline import PromptAnalyzer, process_text, SUPPORTED_OPERATIONS
from .preprocessor import Preprocessor
from .prompt_grader import PromptGrader, score_to_grade
from .task_graph import Task, TaskGraph, TaskGraphExtractor, TaskRelationship
from .tokenizer import Tokenizer

__all__ = [
    'Metric',
    'Token',
    'TokenType',
    'ComplexityAnalyzer',
    'IdeaAnalyzer',
    'IdeaCluster',
    'InsightGenerator',
    'Lexicons',
    'PerformanceTracker',
    'PromptAnalyzer',
    'process_text',
    'SUPPORTED_OPERATIONS',
    'Preprocessor',
    'PromptGrader',
    'score_to_grade',
    'Task',
    'TaskGraph',
    'TaskGraphExtractor',
    'TaskRelationship',
    'Tokenizer',
]
