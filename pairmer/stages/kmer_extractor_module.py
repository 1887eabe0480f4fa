#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pairmer v0.1.0

KmerExtractor — decompose each subsampled sample into a k-mer query file
and a location manifest.

Outputs per sample:
    kmer/<sample>.kmer   FASTA of k-mers, ids 0..N-1 across the whole sample
    kmer/<sample>.loc    ``sequence_id<TAB>kmer_count`` per input sequence

K-mers of one sequence are contiguous and left to right, so the manifest
is enough to regroup the query counts per read.

Author: Pairmer Development Team
License: MIT - See LICENSE
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Sequence

from ..config.settings import PipelineConfig
from ..errors import PreconditionError
from ..io.io_core_module import LocationEntry, read_fasta
from ..utils.checkpoints import atomic_write, output_exists
from ..utils.parallel import run_units
from ..utils.sequence_utils import iter_kmers, kmer_count
from ..utils.timing import Timer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KmerFiles:
    """K-mer and location files of one sample."""
    kmer_file: Path
    loc_file: Path
    n_sequences: Optional[int] = None   # None when the files already existed
    n_kmers: Optional[int] = None


def kmer_file_paths(config: PipelineConfig, name: str):
    """Return ``(kmer_file, loc_file)`` for a sample."""
    return config.kmer_dir / f"{name}.kmer", config.kmer_dir / f"{name}.loc"


class KmerExtractor:
    """Write ``.kmer`` and ``.loc`` files for every selected sample."""

    def __init__(self, config: PipelineConfig):
        self.config = config
        self.k = config.kmer_size
        self.logger = logging.getLogger(__name__)

    def extract(self, name: str, position: int = 0, total: int = 0) -> KmerFiles:
        """
        Kmerize one sample.

        Args:
            name: Sample name (file under ``subset/``)
            position: 1-based position for progress messages
            total: Number of samples in this stage

        Returns:
            KmerFiles for the sample

        Raises:
            PreconditionError: If the subsampled FASTA is missing
        """
        kmer_file, loc_file = kmer_file_paths(self.config, name)
        label = f"{position:5d}/{total}: {name}"

        if output_exists(kmer_file) and output_exists(loc_file):
            self.logger.info(f"{label}  kmer/loc files exist")
            return KmerFiles(kmer_file, loc_file)

        fasta_file = self.config.subset_dir / name
        if not fasta_file.exists():
            raise PreconditionError(f"Kmerize: cannot find FASTA file '{fasta_file}'")

        timer = Timer()
        kmer_id = 0
        n_sequences = 0

        # The manifest is renamed last, so a complete .loc implies a complete .kmer
        with atomic_write(loc_file) as loc_fh:
            with atomic_write(kmer_file) as kmer_fh:
                for record in read_fasta(fasta_file):
                    sequence = str(record.seq)
                    for kmer in iter_kmers(sequence, self.k):
                        kmer_fh.write(f">{kmer_id}\n{kmer}\n")
                        kmer_id += 1

                    entry = LocationEntry(record.id, kmer_count(len(sequence), self.k))
                    loc_fh.write(entry.to_line())
                    n_sequences += 1

        self.logger.info(
            f"{label}  kmerized {n_sequences:,} seqs into {kmer_id:,} k-mers, "
            f"finished in {timer}"
        )
        return KmerFiles(kmer_file, loc_file, n_sequences, kmer_id)

    def run(self, names: Sequence[str]) -> Dict[str, KmerFiles]:
        """Kmerize every sample; returns name -> KmerFiles."""
        self.config.kmer_dir.mkdir(parents=True, exist_ok=True)
        positions = {name: i for i, name in enumerate(names, 1)}

        return run_units(
            lambda name: self.extract(name, positions[name], len(names)),
            list(names),
            self.config.workers,
        )
