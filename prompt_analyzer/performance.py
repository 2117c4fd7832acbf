"""
Performance Module
Per-request stage timing for the analysis pipeline.
"""

import time
import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timedelta
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

from .base_types import Metric, make_metric

logger = logging.getLogger(__name__)

DURATION_SCALE = "0-∞ ms"
SUB_OPERATION_HELP = "Monitor for bottlenecks. Longer times may indicate complex text or processing issues."

# Stage name -> (result key, help text, practical application)
STAGE_METRICS = {
    'complexity_analysis': (
        'complexity_analysis_duration',
        "Time taken to compute readability indices and sentence/word statistics.",
        "Times above 500ms suggest very long or complex text.",
    ),
    'tokenization': (
        'tokenization_duration',
        "Time taken to split the text into typed tokens and derive lexical statistics.",
        "Tokenization should be fast (<100ms); slower runs point to very long input.",
    ),
    'preprocessing': (
        'preprocessing_duration',
        "Time taken to clean, normalize and profile the text.",
        "Preprocessing should be very fast (<50ms).",
    ),
    'idea_analysis': (
        'idea_analysis_duration',
        "Time taken to classify sentences and cluster them into ideas.",
        "Grows with sentence count; long prompts are sampled to 100 sentences.",
    ),
}
SUB_OPERATIONS = ('task_graph_extraction', 'insight_generation', 'prompt_grade_calculation', 'json_marshaling')


def format_clock(moment: datetime) -> str:
    return moment.strftime('%H:%M:%S.') + f"{moment.microsecond // 1000:03d}"


def new_request_id() -> str:
    return f"req_{time.time_ns()}"


@dataclass(frozen=True)
class DurationMetric(Metric):
    """Metric envelope carrying wall-clock start and end times."""
    start_time: str = ""
    end_time: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['start_time'] = self.start_time
        data['end_time'] = self.end_time
        return data


def duration_metric(seconds: float, help_text: str, practical_application: str,
                    ended_at: Optional[datetime] = None) -> DurationMetric:
    ended_at = ended_at or datetime.now()
    started_at = ended_at - timedelta(seconds=seconds)
    base = make_metric(seconds * 1000.0, DURATION_SCALE, help_text, practical_application)
    return DurationMetric(base.value, base.scale, base.help_text, base.practical_application,
                          format_clock(started_at), format_clock(ended_at))


class PerformanceTracker:
    """
    Records stage durations for one request.

    Each stage writes its own slot, so concurrent stages never touch the same
    entry; the lock only guards the dict itself.
    """

    def __init__(self, request_id: Optional[str] = None):
        self.request_id = request_id or new_request_id()
        self._started = time.perf_counter()
        self._durations: Dict[str, float] = {}
        self._lock = threading.Lock()

    @contextmanager
    def measure(self, stage: str) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record(stage, time.perf_counter() - start)

    def record(self, stage: str, seconds: float) -> None:
        with self._lock:
            self._durations[stage] = seconds
        logger.debug(f"[{self.request_id}] {stage} took {seconds * 1000:.2f}ms")

    def duration(self, stage: str) -> float:
        return self._durations.get(stage, 0.0)

    def finalize(self) -> Dict[str, Metric]:
        total = time.perf_counter() - self._started
        now = datetime.now()

        result: Dict[str, Metric] = {
            'total_duration': duration_metric(
                total,
                "Total time for the complete analysis including all sub-operations.",
                "Times above 1000ms may indicate the need for optimization or very long text.",
                now,
            ),
        }
        for stage, (key, help_text, practical) in STAGE_METRICS.items():
            result[key] = duration_metric(self.duration(stage), help_text, practical, now)

        sub_operations = {
            name: duration_metric(self.duration(name), f"Duration of {name} operation in milliseconds",
                                  SUB_OPERATION_HELP, now)
            for name in SUB_OPERATIONS
        }
        result['sub_operations'] = make_metric(
            sub_operations, DURATION_SCALE,
            "Timings of the sequential stages that run after the parallel analyzers.",
            "Compare against total_duration to find the slowest step."
        )
        result['request_id'] = make_metric(
            self.request_id, "identifier",
            "Unique id of this analysis request.",
            "Quote it when reporting a slow or failing analysis."
        )
        result['summary'] = make_metric(
            self.summary(total * 1000.0), "Fast / Normal / Slow / Very Slow",
            "Overall speed rating from the total duration.",
            "Anything other than Fast or Normal is worth investigating."
        )
        return result

    @staticmethod
    def summary(total_ms: float) -> str:
        if total_ms < 100:
            return "Fast"
        if total_ms < 500:
            return "Normal"
        if total_ms < 1000:
            return "Slow"
        return "Very Slow"
