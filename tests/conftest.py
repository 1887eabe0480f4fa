#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pairmer v0.1.0

Pytest configuration and shared fixtures.

Author: Pairmer Development Team
License: MIT - See LICENSE
"""

import json
import random
import shutil
import stat
import sys
import tempfile
from collections import Counter
from pathlib import Path

import pytest

from pairmer.config.settings import PipelineConfig


# ============================================================================
# Helpers
# ============================================================================

def random_sequence(length, rng):
    return ''.join(rng.choice('ACGT') for _ in range(length))


def write_fasta_file(path, records):
    """Write ``[(id, sequence), ...]`` as single-line FASTA."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        for seq_id, seq in records:
            f.write(f">{seq_id}\n{seq}\n")
    return path


def read_fasta_pairs(path):
    """Parse single- or multi-line FASTA into ``[(id, sequence), ...]``."""
    records = []
    with open(path) as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            if line.startswith('>'):
                records.append([line[1:].split()[0], ''])
            else:
                records[-1][1] += line
    return [tuple(r) for r in records]


class FakeJellyfish:
    """
    In-memory stand-in for the jellyfish engine.

    ``count`` stores exact k-mer counts as JSON at the index path; ``query``
    writes one ``KMER COUNT`` line per k-mer of the query file, in order.
    """

    def __init__(self):
        self.count_calls = []
        self.query_calls = []

    def count(self, fasta, output, kmer_size, hash_size, threads):
        self.count_calls.append((Path(fasta).name, kmer_size, hash_size, threads))
        counts = Counter()
        for _, seq in read_fasta_pairs(fasta):
            for i in range(len(seq) - kmer_size + 1):
                counts[seq[i:i + kmer_size]] += 1
        with open(output, 'w') as f:
            json.dump(counts, f)

    def query(self, kmer_file, index, output):
        self.query_calls.append((Path(kmer_file).name, Path(index).name))
        with open(index) as f:
            counts = json.load(f)
        with open(output, 'w') as out:
            for _, kmer in read_fasta_pairs(kmer_file):
                out.write(f"{kmer} {counts.get(kmer, 0)}\n")


FAKE_JELLYFISH_SCRIPT = '''#!{python}
import json, sys
from collections import Counter


def fasta(path):
    records = []
    with open(path) as f:
        for line in f:
            line = line.strip()
            if line.startswith('>'):
                records.append('')
            elif line:
                records[-1] += line
    return records


def opt(args, flag):
    return args[args.index(flag) + 1]


args = sys.argv[1:]
if args[0] == 'count':
    k = int(opt(args, '-m'))
    counts = Counter()
    for seq in fasta(args[-1]):
        for i in range(len(seq) - k + 1):
            counts[seq[i:i + k]] += 1
    with open(opt(args, '-o'), 'w') as f:
        json.dump(counts, f)
elif args[0] == 'query':
    with open(args[-1]) as f:
        counts = json.load(f)
    with open(opt(args, '-o'), 'w') as out:
        for kmer in fasta(opt(args, '-s')):
            out.write('%s %d\\n' % (kmer, counts.get(kmer, 0)))
else:
    sys.exit(2)
'''


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def temp_output_dir():
    """Create temporary output directory for tests."""
    temp_dir = tempfile.mkdtemp(prefix="pairmer_test_")
    yield Path(temp_dir)
    # Cleanup after test
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def simple_fasta():
    """Generate simple FASTA sequence for testing."""
    return ">test_sequence\nATCGATCGATCGATCGATCGATCGATCGATCG\n"


@pytest.fixture
def fake_engine():
    """In-memory jellyfish replacement."""
    return FakeJellyfish()


@pytest.fixture
def fake_jellyfish_exe(temp_output_dir):
    """Executable script that mimics ``jellyfish count`` and ``jellyfish query``."""
    script = temp_output_dir / "bin" / "jellyfish"
    script.parent.mkdir(parents=True)
    script.write_text(FAKE_JELLYFISH_SCRIPT.format(python=sys.executable))
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return script


@pytest.fixture
def two_sample_dir(temp_output_dir):
    """
    Samples A (lengths 25/30/15) and B (lengths 22/19).

    B's first sequence is the first 22 bases of A's second sequence, so B's
    reads are fully supported by A's index while most of A's k-mers are
    absent from B's.
    """
    rng = random.Random(42)
    a1 = random_sequence(25, rng)
    a2 = random_sequence(30, rng)
    a3 = random_sequence(15, rng)
    b1 = a2[:22]
    b2 = random_sequence(19, rng)

    in_dir = temp_output_dir / "input"
    write_fasta_file(in_dir / "A", [("a1", a1), ("a2", a2), ("a3", a3)])
    write_fasta_file(in_dir / "B", [("b1", b1), ("b2", b2)])
    return in_dir


@pytest.fixture
def make_config(temp_output_dir):
    """Factory for a PipelineConfig rooted in the temporary directory."""
    def _make(**overrides):
        values = {
            'out_dir': temp_output_dir / "out",
            'in_dir': temp_output_dir / "input",
            'kmer_size': 20,
            'num_threads': 1,
        }
        values.update(overrides)
        return PipelineConfig(**values)
    return _make

# Pairmer v0.1.0
# Any usage is subject to this software's license.
