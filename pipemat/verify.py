# --- Purpose: Independent single-threaded reference and result comparison. ---

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .config import ELEMENT_DTYPE
from .errors import VerificationMismatch


@dataclass(frozen=True)
class Verification:
    """Outcome of comparing the distributed result with the reference."""
    matches: bool
    mismatches: int = 0
    first_mismatch: Optional[Tuple[int, int, int, int]] = None  # (row, col, actual, expected)

    def to_error(self) -> Optional[VerificationMismatch]:
        if self.matches:
            return None
        row, col, actual, expected = self.first_mismatch
        return VerificationMismatch(row, col, actual, expected, mismatches=self.mismatches)


def reference_product(A: np.ndarray, B: np.ndarray) -> np.ndarray:
    """Full A @ B in one pass, with the same int32 wrap-around as the workers."""
    if A.shape[1] != B.shape[0]:
        raise ValueError("Inner dimensions must match for multiplication.")
    return np.matmul(A, B, dtype=ELEMENT_DTYPE)


def compare(C: np.ndarray, C_ref: np.ndarray) -> Verification:
    """Element-wise equality over every position, reporting the first difference in row-major order."""
    if C.shape != C_ref.shape:
        raise ValueError(f"Cannot compare shapes {C.shape} and {C_ref.shape}.")

    differing = np.argwhere(C != C_ref)
    if len(differing) == 0:
        return Verification(matches=True)

    row, col = (int(x) for x in differing[0])
    return Verification(
        matches=False,
        mismatches=len(differing),
        first_mismatch=(row, col, int(C[row, col]), int(C_ref[row, col])),
    )
