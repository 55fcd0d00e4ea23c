"""
Unit tests for logging configuration and the phase profiler.
"""

import unittest
import os
import tempfile
import shutil
import sys
import json
import logging
import time

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pipemat.observability import RunProfiler, configure_logging


class TestObservability(unittest.TestCase):
    """Test cases for observability utilities."""

    def setUp(self):
        self.test_dir = tempfile.mkdtemp()

    def tearDown(self):
        for handler in list(logging.getLogger('pipemat').handlers):
            logging.getLogger('pipemat').removeHandler(handler)
            handler.close()
        if os.path.exists(self.test_dir):
            shutil.rmtree(self.test_dir)

    def test_logging_configuration_writes_file(self):
        """Test that module loggers under pipemat reach the log file."""
        log_file = os.path.join(self.test_dir, "test.log")
        logger = configure_logging(level="WARNING", log_file=log_file)

        self.assertEqual(logger.name, 'pipemat')
        self.assertFalse(logger.propagate)
        logging.getLogger('pipemat.coordinator').debug("drained channel 3")
        for handler in logger.handlers:
            handler.flush()

        with open(log_file) as f:
            self.assertIn("drained channel 3", f.read())

    def test_reconfiguring_does_not_stack_handlers(self):
        configure_logging(level="INFO")
        logger = configure_logging(level="DEBUG")
        self.assertEqual(len(logger.handlers), 1)

    def test_phase_context_manager(self):
        """Test that phases are recorded in order with their durations."""
        profiler = RunProfiler()

        with profiler.phase("collect", workers=4):
            time.sleep(0.01)
        with profiler.phase("join"):
            pass

        self.assertEqual([t.name for t in profiler.timings], ["collect", "join"])
        self.assertGreater(profiler.timings[0].duration, 0.005)
        self.assertEqual(profiler.timings[0].metadata, {"workers": 4})

    def test_phase_recorded_when_block_raises(self):
        profiler = RunProfiler()
        with self.assertRaises(RuntimeError):
            with profiler.phase("spawn"):
                raise RuntimeError("boom")
        self.assertEqual(len(profiler.timings), 1)
        self.assertIsNotNone(profiler.timings[0].duration)

    def test_disabled_profiler_records_nothing(self):
        profiler = RunProfiler(enabled=False)
        with profiler.phase("collect") as timing:
            self.assertIsNone(timing)
        self.assertEqual(profiler.timings, [])
        self.assertEqual(profiler.get_summary(), {})

    def test_summary_statistics(self):
        profiler = RunProfiler()
        for _ in range(5):
            with profiler.phase("verify"):
                pass

        summary = profiler.get_summary()
        self.assertEqual(summary["verify"]["count"], 5)
        self.assertGreaterEqual(summary["verify"]["max"], summary["verify"]["min"])
        self.assertIn("verify", profiler.format_summary())

    def test_json_export(self):
        profiler = RunProfiler()
        with profiler.phase("init", size=10):
            pass

        json_file = os.path.join(self.test_dir, "profile.json")
        profiler.save_json(json_file)

        with open(json_file) as f:
            data = json.load(f)
        self.assertIn("summary", data)
        self.assertEqual(len(data["timings"]), 1)
        self.assertEqual(data["timings"][0]["metadata"], {"size": 10})

    def test_reset(self):
        profiler = RunProfiler()
        with profiler.phase("init"):
            pass
        profiler.reset()
        self.assertEqual(profiler.timings, [])
        self.assertEqual(profiler.get_summary(), {})


if __name__ == '__main__':
    unittest.main()
