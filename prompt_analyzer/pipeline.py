"""
Pipeline Module
Orchestrates the analysis stages and exposes the single text-processing entry point.

The four independent analyzers run in a bounded thread pool and are joined
before the dependent stages (task graph, insights, grading) run in order.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from typing import Any, Callable, Dict

from .complexity_analyzer import ComplexityAnalyzer
from .idea_analyzer import IdeaAnalyzer
from .insight_generator import InsightGenerator
from .performance import PerformanceTracker
from .preprocessor import Preprocessor
from .prompt_grader import PromptGrader
from .serialization import marshal_result, prepare_result
from .task_graph import TaskGraphExtractor
from .tokenizer import Tokenizer
from .base_types import make_metric

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4

SIMPLE_OPERATIONS: Dict[str, Callable[[str], str]] = {
    'uppercase': str.upper,
    'lowercase': str.lower,
    'trim': str.strip,
}
SUPPORTED_OPERATIONS = ('analyze', 'uppercase', 'lowercase', 'trim', 'wordcount')


class PromptAnalyzer:
    """
    Runs the full analysis for one text.

    Analyzer instances only hold read-only lexicons, so one PromptAnalyzer can
    serve concurrent requests; each call gets its own thread pool and
    performance tracker.
    """

    def __init__(self, max_workers: int = DEFAULT_MAX_WORKERS):
        self.max_workers = max(1, max_workers)
        self.tokenizer = Tokenizer()
        self.complexity_analyzer = ComplexityAnalyzer()
        self.preprocessor = Preprocessor()
        self.idea_analyzer = IdeaAnalyzer()
        self.task_graph_extractor = TaskGraphExtractor()
        self.insight_generator = InsightGenerator()
        self.prompt_grader = PromptGrader()

    def analyze(self, text: str) -> Dict[str, Any]:
        """Return the JSON-ready analysis result for ``text``."""
        tracker = PerformanceTracker()
        logger.debug(f"[{tracker.request_id}] Analyzing {len(text)} characters")

        stages = {
            'complexity_analysis': self.complexity_analyzer.analyze,
            'tokenization': self.tokenizer.tokenize,
            'preprocessing': self.preprocessor.process,
            'idea_analysis': self.idea_analyzer.analyze,
        }

        def run_stage(name: str, func: Callable[[str], Any]) -> Any:
            with tracker.measure(name):
                return func(text)

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(stages))) as executor:
            futures = {name: executor.submit(run_stage, name, func) for name, func in stages.items()}
            # result() re-raises the first stage failure after the pool drains
            outputs = {name: future.result() for name, future in futures.items()}

        complexity = outputs['complexity_analysis']
        tokens = outputs['tokenization']
        preprocessing = outputs['preprocessing']
        ideas = outputs['idea_analysis']

        with tracker.measure('task_graph_extraction'):
            task_graph = self.task_graph_extractor.extract(text, ideas['semantic_clusters'].value)

        with tracker.measure('insight_generation'):
            insights = self.insight_generator.generate(complexity, ideas, tokens)

        with tracker.measure('prompt_grade_calculation'):
            prompt_grade = self.prompt_grader.grade(complexity, tokens, preprocessing, ideas, task_graph, text)

        with tracker.measure('json_marshaling'):
            result = prepare_result({
                'complexity_metrics': complexity,
                'tokens': tokens,
                'preprocessing': preprocessing,
                'idea_analysis': ideas,
                'insights': insights,
                'task_graph': task_graph,
                'prompt_grade': prompt_grade,
                'grading': {
                    'prompt_grade': prompt_grade,
                    'overall_score': make_metric(
                        prompt_grade['overall_grade']['score'], "0-100",
                        "Weighted blend of the eight grading dimensions.",
                        "Scores of 80 and above indicate a prompt that needs only minor polish."
                    ),
                },
            })

        result['performance_metrics'] = prepare_result(tracker.finalize())
        logger.debug(f"[{tracker.request_id}] Analysis finished: {result['performance_metrics']['summary']['value']}")
        return result


def word_count_summary(text: str) -> str:
    words = len(text.split())
    sentences = sum(1 for char in text if char in '.!?')
    if sentences == 0 and text:
        sentences = 1
    return f"{words} words • {len(text)} characters • {sentences} sentences"


@lru_cache(maxsize=None)
def get_analyzer() -> PromptAnalyzer:
    """Shared analyzer; creating one loads the lexicons."""
    return PromptAnalyzer()


def process_text(*args, analyzer: PromptAnalyzer = None) -> Dict[str, Any]:
    """
    Single entry point: ``process_text(operation, text)``.

    Never raises; every failure is reported as ``{"success": False, "error": ...}``.
    """
    if len(args) != 2:
        return {'success': False, 'error': "processText expects exactly two arguments: operation and text"}

    operation, text = args
    if not isinstance(operation, str) or not isinstance(text, str):
        return {'success': False, 'error': "operation and text must be strings"}

    if operation in SIMPLE_OPERATIONS:
        return {'success': True, 'data': SIMPLE_OPERATIONS[operation](text)}

    if operation == 'wordcount':
        return {'success': True, 'data': word_count_summary(text)}

    if operation != 'analyze':
        return {'success': False, 'error': f"Unknown operation: {operation}"}

    try:
        result = (analyzer or get_analyzer()).analyze(text)
    except Exception as e:
        logger.error(f"Analysis failed: {e}", exc_info=True)
        return {'success': False, 'error': f"analysis failed: {e}"}

    try:
        data = marshal_result(result)
    except (TypeError, ValueError) as e:
        logger.error(f"Failed to marshal analysis result: {e}")
        return {'success': False, 'error': f"failed to marshal result: {e}"}

    return {'success': True, 'data': data}
