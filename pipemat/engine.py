"""
Run orchestration: initialize, distribute, verify, report.

A run owns all of its matrices; nothing is kept at module level, so
`run_and_verify` can be called any number of times in one process.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .channel import open_pipe_channel
from .config import RunConfig
from .coordinator import ChannelFactory, distribute
from .errors import TransportFailure
from .matrix import init_matrices
from .observability import RunProfiler
from .verify import Verification, compare, reference_product

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    """Everything a run produced, plus its pass/fail outcome."""
    config: RunConfig
    A: np.ndarray
    B: np.ndarray
    result: np.ndarray
    reference: np.ndarray
    verification: Verification
    failures: List[TransportFailure] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.verification.matches and not self.failures

    def raise_for_status(self):
        """Raises the first transport failure, else the verification mismatch, if any."""
        if self.failures:
            raise self.failures[0]
        error = self.verification.to_error()
        if error is not None:
            raise error


def run_and_verify(config: Optional[RunConfig] = None,
                   channel_factory: ChannelFactory = open_pipe_channel,
                   profiler: Optional[RunProfiler] = None) -> RunReport:
    """
    Multiplies the fixed test matrices with the distributed engine and checks
    the assembled result against the single-threaded reference.

    SetupFailure propagates to the caller. Transport failures and mismatches
    are reported in the returned RunReport.
    """
    config = config or RunConfig()
    profiler = profiler or RunProfiler(enabled=False)
    logger.info("Distributed matrix multiplication (%dx%d) with %d workers",
                config.size, config.size, config.workers)

    with profiler.phase("init", size=config.size):
        A, B = init_matrices(config.size)

    with profiler.phase("reference", size=config.size):
        C_ref = reference_product(A, B)

    with profiler.phase("distribute", workers=config.workers):
        collection = distribute(A, B, config.workers, channel_factory=channel_factory, profiler=profiler)

    with profiler.phase("verify"):
        verification = compare(collection.result, C_ref)

    if verification.matches:
        logger.info("Distributed result matches reference")
    else:
        row, col, actual, expected = verification.first_mismatch
        logger.warning("Distributed result differs from reference at %d position(s); "
                       "first at C[%d][%d]: %d != %d",
                       verification.mismatches, row, col, actual, expected)

    return RunReport(
        config=config,
        A=A,
        B=B,
        result=collection.result,
        reference=C_ref,
        verification=verification,
        failures=collection.failures,
    )
