"""
Integration tests for run_and_verify().
"""

import unittest
import os
import sys
import numpy as np

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pipemat.channel import Channel, ReadEnd, WriteEnd, open_pipe_channel
from pipemat.config import MATRIX_SIZE, WORKER_COUNT, RunConfig
from pipemat.engine import run_and_verify
from pipemat.errors import SetupFailure, TransportFailure
from pipemat.observability import RunProfiler


class StallingWriteEnd(WriteEnd):
    """Write end that never accepts a byte."""
    def write(self, data):
        return 0


def stalling_factory(bad_worker):
    def factory(worker_index):
        if worker_index != bad_worker:
            return open_pipe_channel(worker_index)
        read_fd, write_fd = os.pipe()
        return Channel(ReadEnd(read_fd), StallingWriteEnd(write_fd))
    return factory


class TestRunAndVerify(unittest.TestCase):
    """Test cases for the run entry point."""

    def test_default_configuration(self):
        """Test the N=10, P=4 run end to end."""
        report = run_and_verify()
        self.assertEqual(report.config, RunConfig(MATRIX_SIZE, WORKER_COUNT))
        self.assertTrue(report.passed)
        self.assertTrue(report.verification.matches)
        self.assertEqual(report.failures, [])
        self.assertEqual(report.result[0, 0], 56)
        np.testing.assert_array_equal(report.result, report.reference)
        report.raise_for_status()

    def test_edge_configurations(self):
        """Test P = 1 and P > N."""
        for size, workers in [(10, 1), (3, 8), (1, 4)]:
            with self.subTest(size=size, workers=workers):
                report = run_and_verify(RunConfig(size=size, workers=workers))
                self.assertTrue(report.passed)

    def test_runs_are_independent(self):
        """Test that repeated runs in one process do not share matrices."""
        first = run_and_verify(RunConfig(size=6, workers=4))
        second = run_and_verify(RunConfig(size=6, workers=4))
        self.assertIsNot(first.result, second.result)
        first.result[0, 0] = -1
        self.assertEqual(second.result[0, 0], second.reference[0, 0])

    def test_transport_failure_fails_the_run(self):
        """Test that a stalled channel is reported and marks the run as failed."""
        report = run_and_verify(RunConfig(size=10, workers=4), channel_factory=stalling_factory(2))
        self.assertFalse(report.passed)
        self.assertEqual({f.worker_index for f in report.failures}, {2})
        self.assertFalse(report.verification.matches)
        self.assertEqual(report.verification.first_mismatch, (6, 0, 0, 11 * 6 + 56))
        with self.assertRaises(TransportFailure):
            report.raise_for_status()

    def test_setup_failure_propagates(self):
        def factory(worker_index):
            raise OSError("no pipes left")

        with self.assertRaises(SetupFailure):
            run_and_verify(RunConfig(size=4, workers=2), channel_factory=factory)

    def test_profiler_covers_each_phase(self):
        profiler = RunProfiler()
        run_and_verify(RunConfig(size=8, workers=3), profiler=profiler)
        summary = profiler.get_summary()
        for phase in ["init", "reference", "distribute", "spawn", "collect", "join", "verify"]:
            self.assertIn(phase, summary)

    def test_invalid_config(self):
        with self.assertRaises(ValueError):
            RunConfig(size=0)
        with self.assertRaises(ValueError):
            RunConfig(workers=0)


if __name__ == '__main__':
    unittest.main()
