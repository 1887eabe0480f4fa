"""
Sequence and artifact I/O for Pairmer.

CONSOLIDATED MODULES:
- io_core_module.py: FASTA I/O, location manifests, query result streams
"""

from .io_core_module import (
    LocationEntry,
    copy_uncompressed,
    open_file,
    read_fasta,
    write_fasta,
    list_sequence_ids,
    read_location_manifest,
    iter_query_lines,
)

__all__ = [
    "LocationEntry",
    "copy_uncompressed",
    "open_file",
    "read_fasta",
    "write_fasta",
    "list_sequence_ids",
    "read_location_manifest",
    "iter_query_lines",
]
