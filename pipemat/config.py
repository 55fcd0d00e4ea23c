# pipemat/config.py
"""
Centralized configuration for the pipemat engine.
This module provides a single source of truth for all configurable parameters.
"""

from dataclasses import dataclass

# Core computation parameters
MATRIX_SIZE = 10  # Dimension N of the square input and output matrices
WORKER_COUNT = 4  # Number of concurrent worker tasks

# Wire format: little-endian signed 32-bit integers, row-major
ELEMENT_DTYPE = "<i4"


@dataclass(frozen=True)
class RunConfig:
    """Per-run parameters for a distributed multiplication."""
    size: int = MATRIX_SIZE
    workers: int = WORKER_COUNT

    def __post_init__(self):
        if self.size < 1:
            raise ValueError(f"Matrix size must be positive, got {self.size}.")
        if self.workers < 1:
            raise ValueError(f"Worker count must be positive, got {self.workers}.")
