#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pairmer v0.1.0

SampleSelector — choose the participating samples and cap each one at a
fixed number of sequences.

Selection:
    All regular files in the input directory (or an explicit list of names)
    are candidates. If there are more than ``max_samples``, a uniform random
    subset of that size is drawn without replacement.

Subsampling:
    A sample with fewer than ``max_seqs`` records is copied unchanged.
    Otherwise ids are drawn uniformly until ``max_seqs`` distinct ids have
    been collected, and the file is streamed once more keeping only those
    records. The number of draws is bounded. Subset files are always plain
    FASTA: gzipped inputs are decompressed on the way.

Author: Pairmer Development Team
License: MIT - See LICENSE
"""

import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Set

from ..config.settings import PipelineConfig
from ..errors import ConfigurationError, PreconditionError, SamplingError
from ..io.io_core_module import copy_uncompressed, list_sequence_ids, read_fasta, write_fasta
from ..utils.checkpoints import atomic_path, atomic_write, output_exists
from ..utils.parallel import run_units
from ..utils.timing import Timer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Sample:
    """A selected sample and the outcome of subsampling it."""
    name: str
    source: Path
    subset_path: Path
    sequence_count: Optional[int] = None   # None when the subset already existed
    subsampled: bool = False
    selected: bool = True


# ============================================================================
# Helpers
# ============================================================================

def list_sample_files(directory: Path) -> List[str]:
    """Sorted names of the non-hidden regular files in a directory."""
    return sorted(
        p.name for p in Path(directory).iterdir()
        if p.is_file() and not p.name.startswith('.')
    )


def draw_distinct_ids(ids: Sequence[str], target: int, rng: random.Random,
                      max_draws: int) -> Set[str]:
    """
    Draw ids uniformly (with replacement) until ``target`` distinct ids
    have been collected.

    Args:
        ids: Every record id in the file, in file order
        target: Number of distinct ids to collect
        rng: Random source
        max_draws: Upper bound on draws

    Returns:
        Set of exactly ``target`` ids

    Raises:
        SamplingError: If the file holds fewer than ``target`` distinct ids
            or the draw bound is reached first
    """
    n_distinct = len(set(ids))
    if n_distinct < target:
        raise SamplingError(
            f"Cannot sample {target} distinct ids: only {n_distinct} distinct ids present"
        )

    taken: Set[str] = set()
    draws = 0
    while len(taken) < target:
        if draws >= max_draws:
            raise SamplingError(
                f"Collected {len(taken)} of {target} distinct ids after {draws} draws"
            )
        taken.add(rng.choice(ids))
        draws += 1

    return taken


# ============================================================================
# Stage
# ============================================================================

class SampleSelector:
    """Select samples from the input directory and write ``subset/<sample>``."""

    def __init__(self, config: PipelineConfig):
        self.config = config
        self.logger = logging.getLogger(__name__)

    def _rng(self, salt: str = '') -> random.Random:
        if self.config.seed is None:
            return random.Random()
        return random.Random(f"{self.config.seed}:{salt}")

    def discover(self) -> List[str]:
        """
        Candidate sample names.

        Raises:
            ConfigurationError: If the input directory is missing or an
                explicitly requested file does not exist
        """
        in_dir = self.config.in_dir
        if in_dir is None:
            raise ConfigurationError("No input directory")
        if not in_dir.is_dir():
            raise ConfigurationError(f"Bad input dir ({in_dir})")

        if self.config.files:
            names = list(dict.fromkeys(self.config.files))
            bad = [name for name in names if not (in_dir / name).is_file()]
            if bad:
                raise ConfigurationError(f"Bad input files ({', '.join(bad)})")
            return sorted(names)

        return list_sample_files(in_dir)

    def select(self, names: Sequence[str]) -> List[str]:
        """
        Apply the sample budget.

        Raises:
            ConfigurationError: If fewer than two samples are available
        """
        if len(names) < 2:
            raise ConfigurationError(
                f"Need more than one file to compare (found {len(names)})"
            )

        self.logger.info(f"Found {len(names)} files in dir '{self.config.in_dir}'")
        self.logger.debug("files = " + ", ".join(names))

        if len(names) > self.config.max_samples:
            self.logger.info(f"Subsetting to {self.config.max_samples} files")
            names = self._rng('samples').sample(list(names), self.config.max_samples)

        return sorted(names)

    def subsample(self, name: str, position: int = 0, total: int = 0) -> Sample:
        """Write ``subset/<name>``, copying or sampling as the budget requires."""
        source = self.config.in_dir / name
        subset_file = self.config.subset_dir / name
        label = f"{position:5d}/{total}: {name}"

        if output_exists(subset_file):
            self.logger.info(f"{label}  subset file exists")
            return Sample(name, source, subset_file)

        if not source.is_file():
            raise PreconditionError(f"Subsetting: bad input file ({source})")

        ids = list_sequence_ids(source)
        count = len(ids)
        timer = Timer()

        if count < self.config.max_seqs:
            with atomic_path(subset_file) as tmp_file:
                copy_uncompressed(source, tmp_file)
            self.logger.info(f"{label}  {count:,} seqs, copied, finished in {timer}")
            return Sample(name, source, subset_file, count, subsampled=False)

        keep = draw_distinct_ids(
            ids, self.config.max_seqs, self._rng(name),
            max_draws=self.config.max_draw_factor * self.config.max_seqs,
        )
        del ids

        written: Set[str] = set()

        def wanted():
            for record in read_fasta(source):
                if record.id in keep and record.id not in written:
                    written.add(record.id)
                    yield record

        with atomic_write(subset_file) as handle:
            write_fasta(wanted(), handle)

        self.logger.info(
            f"{label}  {count:,} seqs, randomly sampled {len(written):,}, finished in {timer}"
        )
        return Sample(name, source, subset_file, count, subsampled=True)

    def run(self) -> List[Sample]:
        """
        Select and subsample.

        Returns:
            Samples in sorted name order
        """
        names = self.select(self.discover())
        self.config.subset_dir.mkdir(parents=True, exist_ok=True)
        positions = {name: i for i, name in enumerate(names, 1)}

        results = run_units(
            lambda name: self.subsample(name, positions[name], len(names)),
            names,
            self.config.workers,
        )
        return [results[name] for name in names]


def selected_samples(config: PipelineConfig) -> List[str]:
    """
    Sample names of an existing run, read back from ``subset/``.

    Raises:
        PreconditionError: If the subset directory is missing or holds
            fewer than two samples
    """
    if not config.subset_dir.is_dir():
        raise PreconditionError(f"Bad subset dir ({config.subset_dir})")
    names = list_sample_files(config.subset_dir)
    if len(names) < 2:
        raise PreconditionError(
            f"Need more than one subset file to compare (found {len(names)} in {config.subset_dir})"
        )
    return names
