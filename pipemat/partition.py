# --- Purpose: Static load balancing of output rows across workers. ---

from typing import List, NamedTuple


class Partition(NamedTuple):
    """Half-open row interval [start, end) owned by one worker."""
    start: int
    end: int

    @property
    def rows(self) -> int:
        return self.end - self.start

    def is_empty(self) -> bool:
        return self.start >= self.end


def partition(worker_index: int, total_rows: int, worker_count: int) -> Partition:
    """
    Computes the rows assigned to one worker.

    The first (total_rows % worker_count) workers receive one extra row, so
    partition sizes never differ by more than one. When there are more
    workers than rows the trailing workers receive an empty partition.
    """
    if worker_count < 1:
        raise ValueError("Worker count must be at least 1.")
    if total_rows < 0:
        raise ValueError("Row count cannot be negative.")
    if not 0 <= worker_index < worker_count:
        raise ValueError(f"Worker index {worker_index} is outside [0, {worker_count}).")

    base_rows = total_rows // worker_count
    extra_rows = total_rows % worker_count

    if worker_index < extra_rows:
        start = worker_index * (base_rows + 1)
        return Partition(start, start + base_rows + 1)

    start = extra_rows * (base_rows + 1) + (worker_index - extra_rows) * base_rows
    return Partition(start, start + base_rows)


def partitions(total_rows: int, worker_count: int) -> List[Partition]:
    """Returns the partitions of every worker, in worker index order."""
    return [partition(i, total_rows, worker_count) for i in range(worker_count)]
