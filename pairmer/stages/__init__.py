"""
Pipeline stages for Pairmer.

Each stage consumes the previous stage's output directory and writes its
own, skipping any sample or pair whose output is already present.

CONSOLIDATED MODULES:
- sample_selector_module.py: Sample selection and subsampling
- kmer_extractor_module.py: K-mer query files and location manifests
- index_builder_module.py: Jellyfish indexes and engine wrapper
- pairwise_comparator_module.py: Directional pair queries and per-read modes
- matrix_assembler_module.py: Similarity matrix
- metadata_module.py: Per-field metadata files
"""

from .sample_selector_module import Sample, SampleSelector, selected_samples
from .kmer_extractor_module import KmerExtractor, KmerFiles
from .index_builder_module import (
    IndexBuilder,
    JellyfishEngine,
    JellyfishCountOptions,
    JellyfishQueryOptions,
)
from .pairwise_comparator_module import (
    Pair,
    PairwiseComparator,
    PairwiseCount,
    ReadModeResult,
    enumerate_pairs,
    score_reads,
    accepted_reads,
)
from .matrix_assembler_module import MatrixAssembler, read_matrix
from .metadata_module import MetadataSplitter

__all__ = [
    "Sample",
    "SampleSelector",
    "selected_samples",
    "KmerExtractor",
    "KmerFiles",
    "IndexBuilder",
    "JellyfishEngine",
    "JellyfishCountOptions",
    "JellyfishQueryOptions",
    "Pair",
    "PairwiseComparator",
    "PairwiseCount",
    "ReadModeResult",
    "enumerate_pairs",
    "score_reads",
    "accepted_reads",
    "MatrixAssembler",
    "read_matrix",
    "MetadataSplitter",
]
