# --- Purpose: One-way byte channels between workers and the coordinator. ---
#
# Each channel carries exactly one message: the worker's result block as
# fixed-width integers in row-major order. The message length is never sent;
# both ends recompute it from the worker's partition.

import errno
import logging
import os

import numpy as np

from .config import ELEMENT_DTYPE
from .errors import TransportFailure
from .partition import Partition

logger = logging.getLogger(__name__)

ELEMENT_SIZE = np.dtype(ELEMENT_DTYPE).itemsize


def payload_length(part: Partition, n: int) -> int:
    """Byte length of the message for a partition of an n-column matrix."""
    return part.rows * n * ELEMENT_SIZE


def encode_block(block: np.ndarray) -> bytes:
    """Serializes a result block to little-endian int32, row-major."""
    return np.ascontiguousarray(block, dtype=ELEMENT_DTYPE).tobytes(order='C')


def decode_block(payload, rows: int, cols: int) -> np.ndarray:
    """Rebuilds a (rows x cols) result block from its wire bytes."""
    expected = rows * cols * ELEMENT_SIZE
    if len(payload) != expected:
        raise ValueError(f"Expected {expected} bytes for a {rows}x{cols} block, got {len(payload)}.")
    return np.frombuffer(bytes(payload), dtype=ELEMENT_DTYPE).reshape(rows, cols)


class WriteEnd:
    """Write-only end of a pipe, held by the worker."""
    def __init__(self, fd: int):
        self.fd = fd
        self.closed = False

    def write(self, data) -> int:
        if self.closed:
            raise OSError(errno.EBADF, "write to a closed channel end")
        return os.write(self.fd, data)

    def close(self):
        if not self.closed:
            self.closed = True
            os.close(self.fd)


class ReadEnd:
    """Read-only end of a pipe, held by the coordinator."""
    def __init__(self, fd: int):
        self.fd = fd
        self.closed = False

    def read(self, size: int) -> bytes:
        if self.closed:
            raise OSError(errno.EBADF, "read from a closed channel end")
        return os.read(self.fd, size)

    def close(self):
        if not self.closed:
            self.closed = True
            os.close(self.fd)


class Channel:
    """A dedicated unidirectional channel: worker writes, coordinator reads."""
    def __init__(self, reader, writer):
        self.reader = reader
        self.writer = writer

    def close(self):
        """Closes both ends. Used to release a channel that never got a worker."""
        self.writer.close()
        self.reader.close()

    def __repr__(self):
        return f"Channel(reader={self.reader!r}, writer={self.writer!r})"


def open_pipe_channel(worker_index: int) -> Channel:
    """Creates an OS pipe for one worker."""
    read_fd, write_fd = os.pipe()
    logger.debug("Opened pipe for worker %d (read fd %d, write fd %d)", worker_index, read_fd, write_fd)
    return Channel(ReadEnd(read_fd), WriteEnd(write_fd))


def send_exact(writer, payload: bytes, worker_index: int) -> int:
    """
    Writes the whole payload, looping over partial writes.

    Raises TransportFailure as soon as a write makes no progress or errors.
    Returns the number of bytes written.
    """
    view = memoryview(payload)
    total = len(view)
    written = 0
    while written < total:
        try:
            w = writer.write(view[written:])
        except OSError as exc:
            raise TransportFailure(worker_index, "write", total, written, reason=str(exc)) from exc
        if not w or w <= 0:
            raise TransportFailure(worker_index, "write", total, written)
        written += w
    return written


def recv_exact(reader, nbytes: int, worker_index: int) -> bytearray:
    """
    Reads exactly nbytes, looping over partial reads. Never reads past nbytes.

    Raises TransportFailure if the stream ends or errors first.
    """
    buf = bytearray()
    while len(buf) < nbytes:
        try:
            chunk = reader.read(nbytes - len(buf))
        except OSError as exc:
            raise TransportFailure(worker_index, "read", nbytes, len(buf), reason=str(exc)) from exc
        if not chunk:
            raise TransportFailure(worker_index, "read", nbytes, len(buf), reason="end of stream")
        buf.extend(chunk)
    return buf
