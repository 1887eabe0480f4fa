#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pairmer v0.1.0

Pairwise k-mer similarity between sequence samples.

Subsamples a directory of FASTA samples, decomposes them into k-mers,
indexes each sample with jellyfish, queries every ordered sample pair and
assembles the per-read mode tallies into a directional similarity matrix.

Author: Pairmer Development Team
License: MIT - See LICENSE
"""

from .version import __version__
from .errors import (
    PairmerError,
    ConfigurationError,
    PreconditionError,
    ExternalProcessError,
    QueryOutputError,
    SamplingError,
)

__all__ = [
    "__version__",
    "PairmerError",
    "ConfigurationError",
    "PreconditionError",
    "ExternalProcessError",
    "QueryOutputError",
    "SamplingError",
]

# Pairmer v0.1.0
# Any usage is subject to this software's license.
