#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pairmer v0.1.0

MatrixAssembler — combine the pairwise tallies into ``matrix/matrix.tab``.

Cell (i, j) is the number of reads of sample i accepted when its k-mers
were queried against sample j's index, i.e. the tally stored at
``mode/<j>/<i>``. The matrix is directional and generally not symmetric.

File format:
    line 1: empty cell, then the sample names (tab-separated)
    line 2+: sample name, then one value per column

Author: Pairmer Development Team
License: MIT - See LICENSE
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import numpy as np

from ..config.settings import PipelineConfig
from ..utils.checkpoints import atomic_write, output_exists
from .pairwise_comparator_module import read_tally

logger = logging.getLogger(__name__)


def format_cell(value: float, transform: str = 'raw') -> str:
    """
    Render one matrix cell.

    ``raw`` writes the integer count. ``log`` writes the natural log with
    two decimals, and ``1.00`` for an empty cell.
    """
    if transform == 'log':
        return f"{np.log(value):.2f}" if value > 0 else f"{1:.2f}"
    return str(int(value))


def read_matrix(matrix_file: Path) -> Tuple[List[str], np.ndarray]:
    """
    Load a matrix written by :class:`MatrixAssembler`.

    Returns:
        ``(sample_names, values)`` with ``values[i, j]`` the cell for row
        sample i and column sample j
    """
    with open(matrix_file, 'r') as f:
        header = f.readline().rstrip('\n').split('\t')
        names = header[1:]
        rows = []
        for line in f:
            fields = line.rstrip('\n').split('\t')
            if len(fields) < 2:
                continue
            rows.append([float(v) for v in fields[1:]])

    return names, np.array(rows, dtype=float).reshape(len(rows), len(names))


class MatrixAssembler:
    """Write the directional similarity matrix from ``mode/`` tallies."""

    def __init__(self, config: PipelineConfig):
        self.config = config
        self.logger = logging.getLogger(__name__)

    def sample_names(self, names: Optional[Iterable[str]] = None) -> List[str]:
        """Sorted union of the given names and every name found under ``mode/``."""
        seen = set(names or ())
        mode_dir = self.config.mode_dir
        if mode_dir.is_dir():
            for index_dir in mode_dir.iterdir():
                if not index_dir.is_dir():
                    continue
                seen.add(index_dir.name)
                seen.update(
                    p.name for p in index_dir.iterdir()
                    if p.is_file() and not p.name.startswith('.')
                )
        return sorted(seen)

    def collect(self, names: List[str]) -> np.ndarray:
        """
        Gather tallies into a square array.

        A missing or unreadable tally counts as 0.
        """
        values = np.zeros((len(names), len(names)), dtype=np.int64)
        for i, query in enumerate(names):
            for j, index in enumerate(names):
                tally = read_tally(self.config.mode_dir / index / query)
                if tally is None:
                    self.logger.debug(f"No tally for {query} -> {index}, using 0")
                    continue
                values[i, j] = tally
        return values

    def write(self, names: List[str], values: np.ndarray, matrix_file: Path):
        transform = self.config.transform
        with atomic_write(matrix_file) as fh:
            fh.write('\t'.join([''] + names) + '\n')
            for name, row in zip(names, values):
                fh.write('\t'.join([name] + [format_cell(v, transform) for v in row]) + '\n')

    def run(self, names: Optional[Iterable[str]] = None) -> Path:
        """
        Assemble and write the matrix unless it already exists.

        Args:
            names: Selected sample names (merged with names found on disk)

        Returns:
            Path to ``matrix.tab``
        """
        matrix_file = self.config.matrix_file
        if output_exists(matrix_file):
            self.logger.info(f"matrix file exists ({matrix_file})")
            return matrix_file

        all_names = self.sample_names(names)
        values = self.collect(all_names)

        self.config.matrix_dir.mkdir(parents=True, exist_ok=True)
        self.write(all_names, values, matrix_file)

        self.logger.info(
            f"Wrote {len(all_names)}x{len(all_names)} matrix "
            f"({self.config.transform}) to {matrix_file}"
        )
        return matrix_file
