"""
Observability utilities for pipemat.

This module provides:
- Logging configuration for the `pipemat` logger hierarchy
- A phase profiler used to time each stage of a run
"""

import json
import logging
import time
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


# ============================================================================
# Logging Configuration
# ============================================================================

def configure_logging(level: str = "INFO", log_file: Optional[str] = None):
    """
    Configure logging for the pipemat package.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path that receives every record at DEBUG level

    Returns:
        The configured `pipemat` logger
    """
    log_level = getattr(logging, level.upper())

    console_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(threadName)s - [%(filename)s:%(lineno)d] - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    pipemat_logger = logging.getLogger('pipemat')
    pipemat_logger.setLevel(logging.DEBUG if log_file else log_level)

    # Reconfiguring replaces handlers instead of stacking them
    for handler in list(pipemat_logger.handlers):
        pipemat_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(console_formatter)
    pipemat_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(detailed_formatter)
        pipemat_logger.addHandler(file_handler)

    pipemat_logger.propagate = False

    return pipemat_logger


# ============================================================================
# Phase Profiling
# ============================================================================

@dataclass
class PhaseTiming:
    """Timing of one run phase."""
    name: str
    start_time: float
    end_time: Optional[float] = None
    duration: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def complete(self):
        self.end_time = time.perf_counter()
        self.duration = self.end_time - self.start_time

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'duration': self.duration,
            'start_time': self.start_time,
            'end_time': self.end_time,
            'metadata': self.metadata
        }


class RunProfiler:
    """
    Records how long each phase of a run takes.

    Example:
        profiler = RunProfiler()

        with profiler.phase("collect", workers=4):
            ...

        print(profiler.format_summary())
    """

    def __init__(self, enabled: bool = True):
        self.timings: List[PhaseTiming] = []
        self.aggregated: Dict[str, List[float]] = defaultdict(list)
        self.enabled = enabled

    @contextmanager
    def phase(self, name: str, **metadata):
        """
        Context manager timing a block of code under the given phase name.
        Timings are recorded even if the block raises.
        """
        if not self.enabled:
            yield None
            return

        timing = PhaseTiming(name=name, start_time=time.perf_counter(), metadata=metadata)
        try:
            yield timing
        finally:
            timing.complete()
            self.timings.append(timing)
            self.aggregated[name].append(timing.duration)

    def get_summary(self) -> Dict[str, Dict[str, float]]:
        """
        Aggregated statistics per phase name.

        Returns:
            Dictionary mapping phase names to count/total/mean/min/max
        """
        summary = {}
        for name, durations in self.aggregated.items():
            if durations:
                summary[name] = {
                    'count': len(durations),
                    'total': sum(durations),
                    'mean': sum(durations) / len(durations),
                    'min': min(durations),
                    'max': max(durations)
                }
        return summary

    def format_summary(self) -> str:
        """Summary as a fixed-width text table, slowest phase first."""
        lines = [
            "=" * 64,
            f"{'Phase':<28} {'Count':>8} {'Total (s)':>12} {'Mean (s)':>12}",
            "-" * 64,
        ]
        ordered = sorted(self.get_summary().items(), key=lambda x: x[1]['total'], reverse=True)
        for name, stats in ordered:
            lines.append(f"{name:<28} {stats['count']:>8} {stats['total']:>12.6f} {stats['mean']:>12.6f}")
        lines.append("=" * 64)
        return "\n".join(lines)

    def save_json(self, filepath: str):
        """
        Save the summary and every individual timing to a JSON file.

        Args:
            filepath: Path to save JSON data
        """
        data = {
            'summary': self.get_summary(),
            'timings': [timing.to_dict() for timing in self.timings]
        }
        with open(filepath, 'w') as f:
            json.dump(data, f, indent=2)

    def reset(self):
        """Clear all recorded timings."""
        self.timings.clear()
        self.aggregated.clear()
