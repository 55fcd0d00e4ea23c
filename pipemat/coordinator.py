# --- Purpose: Spawns one worker per partition and assembles their results. ---

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import numpy as np

from .channel import Channel, decode_block, open_pipe_channel, payload_length, recv_exact
from .errors import SetupFailure, TransportFailure
from .matrix import empty_matrix, readonly_copy
from .observability import RunProfiler
from .partition import partition
from .worker import WorkItem, WorkerOutcome, run_worker

logger = logging.getLogger(__name__)

ChannelFactory = Callable[[int], Channel]


@dataclass
class Collection:
    """What the coordinator gathered from one distributed multiplication."""
    result: np.ndarray
    failures: List[TransportFailure] = field(default_factory=list)
    outcomes: List[WorkerOutcome] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failures

    def failed_workers(self) -> List[int]:
        return sorted({f.worker_index for f in self.failures})


def _check_inputs(A: np.ndarray, B: np.ndarray):
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ValueError(f"Matrix A must be square, got shape {A.shape}.")
    if A.shape != B.shape:
        raise ValueError(f"Matrices must have the same shape, got {A.shape} and {B.shape}.")


class WorkerThread(threading.Thread):
    """One worker task. Holds the outcome until the coordinator joins it."""
    def __init__(self, item: WorkItem, writer):
        super().__init__(name=f"pipemat-worker-{item.worker_index}")
        self.item = item
        self.writer = writer
        self.outcome: Optional[WorkerOutcome] = None
        self.error: Optional[Exception] = None

    def run(self):
        try:
            self.outcome = run_worker(self.item, self.writer)
        except Exception as exc:
            self.error = exc

    def result(self) -> WorkerOutcome:
        """Waits for the worker and returns its outcome, re-raising anything it raised."""
        self.join()
        if self.error is not None:
            raise self.error
        return self.outcome


def _open_channels(worker_count: int, channel_factory: ChannelFactory) -> List[Channel]:
    """Creates every channel up front, releasing them all if any one fails."""
    channels = []
    for i in range(worker_count):
        try:
            channels.append(channel_factory(i))
        except OSError as exc:
            for channel in channels:
                channel.close()
            raise SetupFailure(i, "channel creation", exc) from exc
    return channels


def _start_workers(channels: List[Channel], items: List[WorkItem]) -> List[WorkerThread]:
    """
    Starts one thread per work item. If a thread cannot be started, the
    workers already running lose their readers and are joined, and every
    unstarted channel is closed on both ends.
    """
    threads = []
    for channel, item in zip(channels, items):
        thread = WorkerThread(item, channel.writer)
        try:
            # The write end now belongs to the worker, which closes it
            thread.start()
        except RuntimeError as exc:
            for started in channels[:len(threads)]:
                started.reader.close()
            for unstarted in channels[len(threads):]:
                unstarted.close()
            for started in threads:
                started.join()
            raise SetupFailure(item.worker_index, "task spawn", exc) from exc
        logger.debug("Spawned worker %d for rows %d-%d",
                     item.worker_index, item.partition.start, item.partition.end)
        threads.append(thread)
    return threads


def distribute(A: np.ndarray, B: np.ndarray, worker_count: int,
               channel_factory: ChannelFactory = open_pipe_channel,
               profiler: Optional[RunProfiler] = None) -> Collection:
    """
    Computes A @ B by splitting the output rows across `worker_count` tasks.

    Every channel is created before any worker starts. Channels are then
    drained in worker index order, each block is copied into its partition's
    rows of the result, and every task is joined once all channels are
    drained. A transport failure on one channel is recorded and the
    remaining channels are still collected; the affected rows stay at 0.

    Raises:
        SetupFailure: a channel or task could not be created
        ValueError: the inputs are not two equally shaped square matrices
    """
    if worker_count < 1:
        raise ValueError("Worker count must be at least 1.")
    _check_inputs(A, B)
    profiler = profiler or RunProfiler(enabled=False)

    n = A.shape[0]
    # One read-only snapshot shared by every worker
    A_snap = readonly_copy(A)
    B_snap = readonly_copy(B)
    C = empty_matrix(n)

    with profiler.phase("spawn", workers=worker_count):
        try:
            channels = _open_channels(worker_count, channel_factory)
            items = [WorkItem(i, partition(i, n, worker_count), A_snap, B_snap)
                     for i in range(worker_count)]
            # Every worker gets its own thread so a worker blocked on a full
            # pipe never holds up one that has not started yet.
            threads = _start_workers(channels, items)
        except SetupFailure as exc:
            logger.error("Setup failed: %s", exc)
            raise

    failures = []
    with profiler.phase("collect", workers=worker_count):
        for channel, item in zip(channels, items):
            part = item.partition
            expected = payload_length(part, n)
            try:
                payload = recv_exact(channel.reader, expected, item.worker_index)
                C[part.start:part.end] = decode_block(payload, part.rows, n)
            except TransportFailure as failure:
                logger.error("Coordinator: %s", failure)
                failures.append(failure)
            finally:
                channel.reader.close()

    with profiler.phase("join", workers=worker_count):
        outcomes = [thread.result() for thread in threads]

    failures.extend(o.failure for o in outcomes if not o.ok)
    failures.sort(key=lambda f: (f.worker_index, f.direction != "write"))

    if failures:
        logger.warning("Collection finished with %d transport failure(s) on worker(s) %s",
                       len(failures), sorted({f.worker_index for f in failures}))
    else:
        logger.info("Collected %d row block(s) from %d worker(s)", len(items), worker_count)

    return Collection(result=C, failures=failures, outcomes=outcomes)
