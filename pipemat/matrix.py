# --- Purpose: Creation, snapshotting and display of the in-memory matrices. ---

import numpy as np
from .config import ELEMENT_DTYPE


def init_matrices(n: int):
    """
    Builds the two input matrices with the fixed test formula:
    A[i][j] = i + j + 1 and B[i][j] = 2 on the diagonal, 1 elsewhere.
    """
    idx = np.arange(n, dtype=ELEMENT_DTYPE)
    A = (idx[:, np.newaxis] + idx[np.newaxis, :] + 1).astype(ELEMENT_DTYPE)
    B = np.ones((n, n), dtype=ELEMENT_DTYPE) + np.eye(n, dtype=ELEMENT_DTYPE)
    return A, B


def empty_matrix(n: int) -> np.ndarray:
    """Result matrix with every element at its default value of 0."""
    return np.zeros((n, n), dtype=ELEMENT_DTYPE)


def readonly_copy(matrix: np.ndarray) -> np.ndarray:
    """
    Returns a private, C-ordered copy that cannot be written through.
    Workers only ever see these snapshots of the inputs.
    """
    snapshot = np.array(matrix, dtype=ELEMENT_DTYPE, order='C', copy=True)
    snapshot.setflags(write=False)
    return snapshot


def format_matrix(matrix: np.ndarray) -> str:
    """Space-separated rows, one line per row."""
    return "\n".join(" ".join(str(int(v)) for v in row) for row in matrix)
