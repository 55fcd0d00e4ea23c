from .config import MATRIX_SIZE, WORKER_COUNT, ELEMENT_DTYPE, RunConfig
from .errors import PipematError, SetupFailure, TransportFailure, VerificationMismatch
from .partition import Partition, partition, partitions
from .matrix import init_matrices, empty_matrix, readonly_copy, format_matrix
from .channel import Channel, open_pipe_channel, send_exact, recv_exact
from .worker import WorkItem, WorkerOutcome, multiply_rows, run_worker
from .coordinator import Collection, distribute
from .verify import Verification, reference_product, compare
from .engine import RunReport, run_and_verify
