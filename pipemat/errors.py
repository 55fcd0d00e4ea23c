"""
Exception types raised by the pipemat engine.
"""


class PipematError(Exception):
    """Base class for all pipemat errors."""


class SetupFailure(PipematError):
    """A channel or worker task could not be created. Fatal for the run."""

    def __init__(self, worker_index: int, stage: str, cause: Exception = None):
        self.worker_index = worker_index
        self.stage = stage
        self.cause = cause
        message = f"{stage} failed for worker {worker_index}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class TransportFailure(PipematError):
    """
    A channel stalled before the expected byte count was transferred.

    Attributes:
        worker_index: Worker whose channel failed
        direction: "write" (worker side) or "read" (coordinator side)
        expected: Payload length both ends derived from the partition
        transferred: Bytes actually moved before the stall
    """

    def __init__(self, worker_index: int, direction: str, expected: int, transferred: int,
                 reason: str = "no progress"):
        self.worker_index = worker_index
        self.direction = direction
        self.expected = expected
        self.transferred = transferred
        self.reason = reason
        super().__init__(
            f"{direction} on channel {worker_index} failed after "
            f"{transferred}/{expected} bytes ({reason})"
        )


class VerificationMismatch(PipematError):
    """The distributed result differs from the reference result."""

    def __init__(self, row: int, col: int, actual: int, expected: int, mismatches: int = 1):
        self.row = row
        self.col = col
        self.actual = actual
        self.expected = expected
        self.mismatches = mismatches
        super().__init__(
            f"C[{row}][{col}] = {actual}, reference has {expected} "
            f"({mismatches} differing element(s))"
        )
