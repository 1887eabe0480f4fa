#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pairmer v0.1.0

Per-read count statistics. The mode of k-mer counts, and the cursor that
regroups a flat per-k-mer count stream into per-read lists.

Author: Pairmer Development Team
License: MIT - See LICENSE
"""

import re
from collections import Counter
from itertools import islice
from typing import Iterable, Iterator, List, Optional, Sequence

_COUNT_RE = re.compile(r'[0-9]+')


def compute_mode(values: Sequence[int]) -> int:
    """
    Most frequent value of a list of counts.

    Args:
        values: Observed counts for one read

    Returns:
        The mode, or 0 for an empty list. When several values share the
        highest frequency the smallest of them is returned.

    Example:
        >>> compute_mode([3, 1, 3, 2])
        3
        >>> compute_mode([5, 2, 2, 5])
        2
    """
    if not values:
        return 0
    if len(values) == 1:
        return values[0]

    tally = Counter(values)
    if len(tally) == 1:
        return values[0]

    best_freq = max(tally.values())
    return min(value for value, freq in tally.items() if freq == best_freq)


def parse_count(line: Optional[str]) -> Optional[int]:
    """
    Extract the count from one ``KMER COUNT`` query line.

    Args:
        line: Raw line from the query engine

    Returns:
        The count as an int, or None if the line is blank or the count is
        not a non-negative integer
    """
    if not line:
        return None
    fields = line.split()
    if len(fields) < 2 or not _COUNT_RE.fullmatch(fields[1]):
        return None
    return int(fields[1])


class CountConsumer:
    """
    Sequential cursor over a query result stream.

    Each call to :meth:`take` advances the underlying iterator by exactly
    ``n`` lines (fewer only if the stream runs out) and returns the counts
    that parsed. Unparseable lines still use up their position, so the
    next read starts at the right offset.

    Example:
        >>> consumer = CountConsumer(["AAA 2", "CCC x", "GGG 4"])
        >>> consumer.take(2)
        [2]
        >>> consumer.take(1)
        [4]
    """

    def __init__(self, lines: Iterable[str]):
        self._lines: Iterator[str] = iter(lines)
        self.consumed = 0
        self.exhausted = False

    def take(self, n: int) -> List[int]:
        if n <= 0:
            return []

        chunk = list(islice(self._lines, n))
        self.consumed += len(chunk)
        if len(chunk) < n:
            self.exhausted = True

        counts = []
        for line in chunk:
            value = parse_count(line)
            if value is not None:
                counts.append(value)
        return counts

    def drain(self) -> int:
        """Consume whatever lines are left and return how many there were."""
        leftover = sum(1 for _ in self._lines)
        self.consumed += leftover
        return leftover
