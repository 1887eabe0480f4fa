#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pairmer v0.1.0

Core I/O: FASTA reading and writing, location manifests and engine query
output.

Sections:
    1. File handling helpers
    2. FASTA I/O (Biopython)
    3. Location manifest
    4. Query result stream

Author: Pairmer Development Team
License: MIT - See LICENSE
"""

import gzip
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, TextIO, Union

from Bio import SeqIO
from Bio.SeqRecord import SeqRecord

from ..errors import PreconditionError

logger = logging.getLogger(__name__)


# =============================================================================
# SECTION 1: FILE HANDLING HELPERS
# =============================================================================

GZIP_MAGIC = b'\x1f\x8b'


def is_gzipped(filepath: Union[str, Path]) -> bool:
    """
    Check if file is gzip compressed.

    An existing file is judged by its magic bytes, so a plain FASTA that
    kept a ``.gz`` name is read as text. A file that does not exist yet is
    judged by its suffix.

    Args:
        filepath: Path to file

    Returns:
        True if file is gzipped
    """
    filepath = Path(filepath)
    if filepath.is_file():
        with open(filepath, 'rb') as f:
            return f.read(2) == GZIP_MAGIC
    return filepath.suffix in ('.gz', '.gzip')


def open_file(filepath: Union[str, Path], mode: str = 'r') -> TextIO:
    """
    Open file with automatic gzip detection.

    Args:
        filepath: Path to file
        mode: File mode ('r' or 'w')

    Returns:
        File handle
    """
    filepath = Path(filepath)

    if is_gzipped(filepath):
        if 'r' in mode:
            return gzip.open(filepath, 'rt')
        else:
            return gzip.open(filepath, 'wt')
    else:
        return open(filepath, mode)


def copy_uncompressed(source: Union[str, Path], dest: Union[str, Path]):
    """Copy ``source`` to ``dest``, decompressing it first if it is gzipped."""
    if is_gzipped(source):
        with gzip.open(source, 'rb') as src, open(dest, 'wb') as dst:
            shutil.copyfileobj(src, dst)
    else:
        shutil.copyfile(source, dest)


# =============================================================================
# SECTION 2: FASTA I/O
# =============================================================================

def read_fasta(filepath: Union[str, Path]) -> Iterator[SeqRecord]:
    """
    Stream FASTA records from a file.

    Args:
        filepath: Path to FASTA file (can be gzipped)

    Yields:
        Bio.SeqRecord objects in file order

    Raises:
        FileNotFoundError: If the file does not exist
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"FASTA file not found: {filepath}")

    with open_file(filepath, 'r') as handle:
        for record in SeqIO.parse(handle, "fasta"):
            yield record


def list_sequence_ids(filepath: Union[str, Path]) -> List[str]:
    """Return the id of every record, in file order (duplicates kept)."""
    return [record.id for record in read_fasta(filepath)]


def write_fasta(records: Iterable[SeqRecord], handle: TextIO) -> int:
    """
    Write SeqRecords to an open handle.

    Args:
        records: Records to write
        handle: Writable text handle

    Returns:
        Number of records written
    """
    return SeqIO.write(records, handle, "fasta")


# =============================================================================
# SECTION 3: LOCATION MANIFEST
# =============================================================================

@dataclass(frozen=True)
class LocationEntry:
    """
    One original sequence and the number of k-mers it contributed.

    A count of 0 is valid: the sequence was shorter than k and added nothing
    to the k-mer stream, but it is still a read to account for.
    """
    sequence_id: str
    kmer_count: int

    def to_line(self) -> str:
        return f"{self.sequence_id}\t{self.kmer_count}\n"


def read_location_manifest(filepath: Union[str, Path]) -> Iterator[LocationEntry]:
    """
    Stream LocationEntry rows from a ``.loc`` file.

    Args:
        filepath: Path to a tab-separated ``sequence_id<TAB>kmer_count`` file

    Yields:
        LocationEntry objects in file order

    Raises:
        PreconditionError: If a row does not have an integer count
    """
    with open(filepath, 'r') as handle:
        for line_num, line in enumerate(handle, 1):
            line = line.rstrip('\n')
            if not line:
                continue
            sequence_id, _, count = line.rpartition('\t')
            try:
                kmer_count = int(count)
            except ValueError as e:
                raise PreconditionError(
                    f"Malformed location entry at {filepath}:{line_num}: {line!r}"
                ) from e
            # Sequences shorter than k may be recorded with a negative count
            yield LocationEntry(sequence_id, max(0, kmer_count))


# =============================================================================
# SECTION 4: QUERY RESULT STREAM
# =============================================================================

def iter_query_lines(filepath: Union[str, Path]) -> Iterator[str]:
    """
    Stream the raw ``KMER COUNT`` lines written by the query engine.

    Lines are yielded without their newline and are not parsed here; the
    count consumer decides which values are usable.
    """
    with open(filepath, 'r') as handle:
        for line in handle:
            yield line.rstrip('\n')

# Pairmer v0.1.0
# Any usage is subject to this software's license.
