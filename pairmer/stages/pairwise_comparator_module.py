#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pairmer v0.1.0

PairwiseComparator — query every ordered sample pair and tally the reads
whose k-mer count mode reaches ``mode_min``.

For a pair (query, index) the query sample's k-mers are looked up in the
index sample's jellyfish index. The flat count stream is regrouped per read
with the query sample's location manifest, one read consuming exactly as
many lines as it produced k-mers.

Outputs per pair:
    mode/<index>/<query>        number of accepted reads
    read_mode/<index>/<query>   ``read_id<TAB>mode`` for each accepted read

The mode file is written last and marks the pair as done.

Author: Pairmer Development Team
License: MIT - See LICENSE
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from itertools import combinations
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from ..config.settings import PipelineConfig
from ..errors import PreconditionError, QueryOutputError
from ..io.io_core_module import LocationEntry, iter_query_lines, read_location_manifest
from ..utils.checkpoints import atomic_write, output_exists
from ..utils.mode_utils import CountConsumer, compute_mode
from ..utils.parallel import run_units
from ..utils.timing import Timer
from .index_builder_module import JellyfishEngine
from .kmer_extractor_module import kmer_file_paths

logger = logging.getLogger(__name__)


# ============================================================================
# Data structures
# ============================================================================

@dataclass(frozen=True)
class Pair:
    """A directional comparison: ``query`` k-mers looked up in ``index``."""
    query: str
    index: str

    def __str__(self) -> str:
        return f"{self.query} -> {self.index}"


@dataclass(frozen=True)
class ReadModeResult:
    """Mode of one read's k-mer counts in the queried index (None: no usable counts)."""
    read_id: str
    mode: Optional[int]


@dataclass(frozen=True)
class PairwiseCount:
    """Number of query reads accepted for a pair."""
    pair: Pair
    count: int
    skipped: bool = False


# ============================================================================
# Pair scheduling and decoding
# ============================================================================

def enumerate_pairs(names: Sequence[str]) -> List[Pair]:
    """
    All directional comparisons for a set of samples.

    Self-pairs first, then both orders of every 2-combination. Nothing is
    deduplicated: (A, B) and (B, A) are separate units of work.

    Example:
        >>> [str(p) for p in enumerate_pairs(['A', 'B'])]
        ['A -> A', 'B -> B', 'A -> B', 'B -> A']
    """
    pairs = [Pair(name, name) for name in names]
    for first, second in combinations(names, 2):
        pairs.append(Pair(first, second))
        pairs.append(Pair(second, first))
    return pairs


def score_reads(entries: Iterable[LocationEntry], lines: Iterable[str]) -> Iterator[ReadModeResult]:
    """
    Regroup a query result stream into one mode per read.

    Args:
        entries: Location manifest of the query sample, in order
        lines: Query engine output lines, in k-mer file order

    Yields:
        ReadModeResult for every manifest entry, with mode None when no
        count was usable

    Raises:
        QueryOutputError: Once the manifest is exhausted, if the stream had
            more or fewer lines than the manifest has k-mers
    """
    consumer = CountConsumer(lines)
    expected = 0
    for entry in entries:
        expected += entry.kmer_count
        counts = consumer.take(entry.kmer_count)
        yield ReadModeResult(entry.sequence_id, compute_mode(counts) if counts else None)

    consumer.drain()
    if consumer.consumed != expected:
        raise QueryOutputError(expected, consumer.consumed)


def accepted_reads(entries: Iterable[LocationEntry], lines: Iterable[str],
                   mode_min: int) -> Iterator[ReadModeResult]:
    """Reads with at least one usable count and a mode of at least ``mode_min``."""
    for result in score_reads(entries, lines):
        if result.mode is not None and result.mode >= mode_min:
            yield result


def read_tally(mode_file: Path) -> Optional[int]:
    """
    Read a pair's summary tally.

    Returns:
        The count, or None if the file is missing, empty or unreadable
    """
    try:
        with open(mode_file, 'r') as f:
            first = f.readline().strip()
    except OSError:
        return None
    if not first:
        return None
    try:
        return int(first)
    except ValueError:
        return None


def _count_files(directory: Path, suffix: str = '') -> int:
    if not directory.is_dir():
        return 0
    return sum(
        1 for p in directory.iterdir()
        if p.is_file() and not p.name.startswith('.') and p.name.endswith(suffix)
    )


# ============================================================================
# Stage
# ============================================================================

class PairwiseComparator:
    """Run every directional comparison and write mode/read_mode files."""

    def __init__(self, config: PipelineConfig, engine: Optional[JellyfishEngine] = None):
        self.config = config
        self.engine = engine or JellyfishEngine(config.jellyfish)
        self.logger = logging.getLogger(__name__)

    def mode_path(self, pair: Pair) -> Path:
        return self.config.mode_dir / pair.index / pair.query

    def read_mode_path(self, pair: Pair) -> Path:
        return self.config.read_mode_dir / pair.index / pair.query

    def check_preconditions(self):
        """
        Require one index, one k-mer file and one location file per sample.

        Raises:
            PreconditionError: If the directories are missing or the three
                artifact counts differ
        """
        if not self.config.index_dir.is_dir():
            raise PreconditionError(f"Pairwise comp: bad index dir ({self.config.index_dir})")
        if not self.config.kmer_dir.is_dir():
            raise PreconditionError(f"Pairwise comp: bad kmer dir ({self.config.kmer_dir})")

        n_index = _count_files(self.config.index_dir)
        n_kmer = _count_files(self.config.kmer_dir, '.kmer')
        n_loc = _count_files(self.config.kmer_dir, '.loc')

        if not n_index == n_kmer == n_loc:
            raise PreconditionError(
                f"Pairwise comp: artifact count mismatch: {n_index} indexes, "
                f"{n_kmer} kmer files, {n_loc} location files"
            )

    def compare(self, pair: Pair, position: int = 0, total: int = 0) -> PairwiseCount:
        """
        Run one directional comparison.

        Raises:
            PreconditionError: If an input artifact of the pair is missing
            ExternalProcessError: If the query engine fails
            QueryOutputError: If the query output and the location manifest
                disagree on the number of k-mers
        """
        mode_file = self.mode_path(pair)
        read_mode_file = self.read_mode_path(pair)
        label = f"{position:5d}/{total}: {pair}"

        if output_exists(mode_file, nonempty=True):
            self.logger.info(f"{label}  mode file exists")
            return PairwiseCount(pair, read_tally(mode_file) or 0, skipped=True)

        index_file = self.config.index_dir / pair.index
        kmer_file, loc_file = kmer_file_paths(self.config, pair.query)
        for artifact in (index_file, kmer_file, loc_file):
            if not artifact.exists():
                raise PreconditionError(f"Pairwise comp ({pair}): missing {artifact}")

        timer = Timer()
        self.config.tmp_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{pair.query}.", suffix='.query.tmp',
                                        dir=self.config.tmp_dir)
        os.close(fd)
        query_out = Path(tmp_name)

        try:
            self.engine.query(kmer_file, index_file, query_out)

            n_accepted = 0
            try:
                with atomic_write(read_mode_file) as read_mode_fh:
                    for result in accepted_reads(
                        read_location_manifest(loc_file),
                        iter_query_lines(query_out),
                        self.config.mode_min,
                    ):
                        read_mode_fh.write(f"{result.read_id}\t{result.mode}\n")
                        n_accepted += 1
            except QueryOutputError as e:
                raise QueryOutputError(
                    e.expected, e.observed, f"Pairwise comp ({pair})"
                ) from e

            with atomic_write(mode_file) as mode_fh:
                mode_fh.write(f"{n_accepted}\n")
        finally:
            if query_out.exists():
                query_out.unlink()

        self.logger.info(f"{label}  {n_accepted:,} reads, finished in {timer}")
        return PairwiseCount(pair, n_accepted)

    def run(self, names: Sequence[str]) -> Dict[Pair, PairwiseCount]:
        """Compare every ordered pair of ``names``; returns pair -> count."""
        self.check_preconditions()

        pairs = enumerate_pairs(sorted(names))
        self.logger.info(f"Will perform {len(pairs)} comparisons")

        for directory in (self.config.mode_dir, self.config.read_mode_dir):
            for name in names:
                (directory / name).mkdir(parents=True, exist_ok=True)

        positions = {pair: i for i, pair in enumerate(pairs, 1)}
        return run_units(
            lambda pair: self.compare(pair, positions[pair], len(pairs)),
            pairs,
            self.config.workers,
        )
