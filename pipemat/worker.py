# --- Purpose: The computation each worker task runs. ---

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .channel import encode_block, send_exact
from .config import ELEMENT_DTYPE
from .errors import TransportFailure
from .partition import Partition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkItem:
    """Everything a worker needs; never mutated after handoff."""
    worker_index: int
    partition: Partition
    A: np.ndarray
    B: np.ndarray


@dataclass
class WorkerOutcome:
    worker_index: int
    bytes_sent: int = 0
    failure: Optional[TransportFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def multiply_rows(A: np.ndarray, B: np.ndarray, part: Partition) -> np.ndarray:
    """
    Computes rows [start, end) of A @ B.
    Arithmetic is int32 and wraps on overflow.
    """
    block = np.matmul(A[part.start:part.end], B, dtype=ELEMENT_DTYPE)
    return np.ascontiguousarray(block, dtype=ELEMENT_DTYPE)


def run_worker(item: WorkItem, writer) -> WorkerOutcome:
    """
    Computes the worker's row block and sends it over its channel.

    The write end is always closed before returning so the coordinator sees
    end-of-stream even when the send stopped early.
    """
    part = item.partition
    outcome = WorkerOutcome(item.worker_index)
    try:
        block = multiply_rows(item.A, item.B, part)
        payload = encode_block(block)
        outcome.bytes_sent = send_exact(writer, payload, item.worker_index)
        logger.debug("Worker %d sent rows %d-%d (%d bytes)",
                     item.worker_index, part.start, part.end, outcome.bytes_sent)
    except TransportFailure as failure:
        logger.error("Worker %d: %s", item.worker_index, failure)
        outcome.bytes_sent = failure.transferred
        outcome.failure = failure
    finally:
        writer.close()
    return outcome
