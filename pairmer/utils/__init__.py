"""
Utilities module for Pairmer.

This module provides the shared helpers used by every stage:
- Completion tracking and atomic output (checkpoints)
- K-mer decomposition
- Mode statistic and count stream cursor
- Bounded parallel execution and timing

The pipeline orchestrator lives in ``pairmer.utils.pipeline`` and is not
imported here, since it depends on the stages that depend on these helpers.
"""

from .checkpoints import atomic_path, atomic_write, output_exists, clear_stale_temps
from .sequence_utils import extract_kmers, iter_kmers, kmer_count
from .mode_utils import CountConsumer, compute_mode, parse_count
from .parallel import run_units
from .timing import Timer, format_elapsed

__all__ = [
    "atomic_path",
    "atomic_write",
    "output_exists",
    "clear_stale_temps",
    "extract_kmers",
    "iter_kmers",
    "kmer_count",
    "CountConsumer",
    "compute_mode",
    "parse_count",
    "run_units",
    "Timer",
    "format_elapsed",
]
