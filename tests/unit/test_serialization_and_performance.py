"""
Unit tests for result serialization and stage timing.
"""

import json
import time
import unittest

from prompt_analyzer.base_types import Metric, Token, TokenType, make_metric
from prompt_analyzer.performance import PerformanceTracker, STAGE_METRICS, SUB_OPERATIONS
from prompt_analyzer.serialization import ensure_collections, marshal_result, prepare_result


class TestSerialization(unittest.TestCase):

    def test_metric_envelope(self):
        metric = make_metric(0.12345, "0-1", "help", "use it")
        self.assertEqual(prepare_result(metric), {
            'value': 0.12, 'scale': "0-1", 'help_text': "help", 'practical_application': "use it"
        })

    def test_enums_and_dataclasses(self):
        token = Token(text="hi", type=TokenType.WORD, position=0, length=2)
        self.assertEqual(prepare_result(token)['type'], "word")

    def test_null_collections_become_empty(self):
        fixed = ensure_collections({'tokens': None, 'nested': {'suggestions': None}, 'label': None})
        self.assertEqual(fixed, {'tokens': [], 'nested': {'suggestions': []}, 'label': None})

    def test_marshal_produces_json(self):
        payload = {'m': Metric(value=(1, 2), scale="s", help_text="h")}
        self.assertEqual(json.loads(marshal_result(payload)), {
            'm': {'value': [1, 2], 'scale': "s", 'help_text': "h", 'practical_application': ""}
        })

    def test_marshal_rejects_nan(self):
        with self.assertRaises(ValueError):
            marshal_result({'value': float('nan')})


class TestPerformanceTracker(unittest.TestCase):

    def test_measure_records_duration(self):
        tracker = PerformanceTracker(request_id="req_test")
        with tracker.measure('tokenization'):
            time.sleep(0.01)
        self.assertGreaterEqual(tracker.duration('tokenization'), 0.005)

    def test_measure_records_on_error(self):
        tracker = PerformanceTracker()
        with self.assertRaises(RuntimeError):
            with tracker.measure('preprocessing'):
                raise RuntimeError("boom")
        self.assertIn('preprocessing', tracker._durations)

    def test_finalize_keys(self):
        tracker = PerformanceTracker(request_id="req_test")
        result = prepare_result(tracker.finalize())
        expected = {'total_duration', 'sub_operations', 'request_id', 'summary'}
        expected.update(key for key, _, _ in STAGE_METRICS.values())
        self.assertEqual(set(result), expected)
        self.assertEqual(set(result['sub_operations']['value']), set(SUB_OPERATIONS))
        self.assertEqual(result['request_id']['value'], "req_test")
        self.assertIn('start_time', result['total_duration'])

    def test_request_id_prefix(self):
        self.assertTrue(PerformanceTracker().request_id.startswith("req_"))

    def test_summary_bands(self):
        self.assertEqual(PerformanceTracker.summary(50), "Fast")
        self.assertEqual(PerformanceTracker.summary(100), "Normal")
        self.assertEqual(PerformanceTracker.summary(999), "Slow")
        self.assertEqual(PerformanceTracker.summary(1000), "Very Slow")


if __name__ == '__main__':
    unittest.main()
