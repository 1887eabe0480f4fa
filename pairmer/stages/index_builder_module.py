#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pairmer v0.1.0

IndexBuilder — per-sample k-mer count indexes built with jellyfish, and the
engine wrapper shared with the pairwise comparator.

Engine commands:
    jellyfish count -m K -s HASH -t THREADS -o <index> <fasta>
    jellyfish query -s <kmer file> -o <output> <index>

Author: Pairmer Development Team
License: MIT - See LICENSE
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from ..config.settings import PipelineConfig
from ..errors import ExternalProcessError, PreconditionError
from ..utils.checkpoints import atomic_path, output_exists
from ..utils.parallel import run_units
from ..utils.timing import Timer

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


# ============================================================================
# Engine command builders
# ============================================================================

@dataclass
class JellyfishCountOptions:
    """Arguments for ``jellyfish count``."""
    fasta: PathLike
    output: PathLike
    kmer_size: int = 20
    hash_size: str = '100M'
    threads: int = 1
    exe: str = 'jellyfish'

    def build_cmd(self) -> List[str]:
        return [
            self.exe, 'count',
            '-m', str(self.kmer_size),
            '-s', str(self.hash_size),
            '-t', str(self.threads),
            '-o', str(self.output),
            str(self.fasta),
        ]


@dataclass
class JellyfishQueryOptions:
    """Arguments for ``jellyfish query``."""
    kmer_file: PathLike
    index: PathLike
    output: PathLike
    exe: str = 'jellyfish'

    def build_cmd(self) -> List[str]:
        return [
            self.exe, 'query',
            '-s', str(self.kmer_file),
            '-o', str(self.output),
            str(self.index),
        ]


# ============================================================================
# Engine
# ============================================================================

class JellyfishEngine:
    """
    Black-box k-mer index and query service backed by the jellyfish binary.

    Any object with the same ``count`` and ``query`` signatures can stand in
    for this class (the test suite uses an in-memory counter).
    """

    def __init__(self, executable: str = 'jellyfish'):
        self.executable = executable

    def count(self, fasta: PathLike, output: PathLike, kmer_size: int,
              hash_size: str, threads: int):
        """Build an index of ``fasta`` at ``output``."""
        opts = JellyfishCountOptions(
            fasta=fasta, output=output, kmer_size=kmer_size,
            hash_size=hash_size, threads=threads, exe=self.executable,
        )
        self._run(opts.build_cmd())

    def query(self, kmer_file: PathLike, index: PathLike, output: PathLike):
        """Write one ``KMER COUNT`` line per query k-mer, in input order."""
        opts = JellyfishQueryOptions(
            kmer_file=kmer_file, index=index, output=output, exe=self.executable,
        )
        self._run(opts.build_cmd())

    def _run(self, cmd: List[str]):
        logger.debug(f"exec = {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise ExternalProcessError(cmd, None, str(e)) from e

        if result.returncode != 0:
            raise ExternalProcessError(cmd, result.returncode, result.stderr)


# ============================================================================
# Stage
# ============================================================================

class IndexBuilder:
    """
    Build one jellyfish index per subsampled sample under ``jf/``.

    An index that already exists is left alone.
    """

    def __init__(self, config: PipelineConfig, engine: Optional[JellyfishEngine] = None):
        self.config = config
        self.engine = engine or JellyfishEngine(config.jellyfish)
        self.logger = logging.getLogger(__name__)

    def index_path(self, name: str) -> Path:
        return self.config.index_dir / name

    def build(self, name: str, position: int = 0, total: int = 0) -> Path:
        """
        Build the index for one sample.

        Args:
            name: Sample name
            position: 1-based position for progress messages
            total: Number of samples in this stage

        Returns:
            Path to the index

        Raises:
            PreconditionError: If the subsampled FASTA is missing
            ExternalProcessError: If jellyfish fails
        """
        index_file = self.index_path(name)
        label = f"{position:5d}/{total}: {name}"

        if output_exists(index_file):
            self.logger.info(f"{label}  index exists")
            return index_file

        fasta_file = self.config.subset_dir / name
        if not fasta_file.exists():
            raise PreconditionError(f"Indexing: bad FASTA file ({fasta_file})")

        timer = Timer()
        with atomic_path(index_file) as tmp_index:
            self.engine.count(
                fasta_file, tmp_index,
                kmer_size=self.config.kmer_size,
                hash_size=self.config.hash_size,
                threads=self.config.num_threads,
            )
        self.logger.info(f"{label}  indexed, finished in {timer}")
        return index_file

    def run(self, names: Sequence[str]) -> Dict[str, Path]:
        """Index every sample; returns name -> index path."""
        if not self.config.subset_dir.is_dir():
            raise PreconditionError(f"Indexing: bad subset dir ({self.config.subset_dir})")

        self.config.index_dir.mkdir(parents=True, exist_ok=True)
        positions = {name: i for i, name in enumerate(names, 1)}

        return run_units(
            lambda name: self.build(name, positions[name], len(names)),
            list(names),
            self.config.workers,
        )
