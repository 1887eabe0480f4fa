#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pairmer v0.1.0

Tests for the per-read mode statistic and the count stream cursor.

Author: Pairmer Development Team
License: MIT - See LICENSE
"""

import pytest
from pairmer.utils.mode_utils import CountConsumer, compute_mode, parse_count


class TestComputeMode:
    """Test mode computation."""
    
    def test_empty(self):
        """Empty list has mode 0."""
        assert compute_mode([]) == 0
    
    def test_single_value(self):
        """Mode of one value is that value."""
        assert compute_mode([7]) == 7
        assert compute_mode([0]) == 0
    
    def test_all_identical(self):
        """Mode of identical values is that value."""
        assert compute_mode([3, 3, 3, 3]) == 3
    
    def test_most_frequent(self):
        """Most frequent value wins."""
        assert compute_mode([1, 4, 4, 2, 4, 1]) == 4
    
    def test_tie_takes_smallest(self):
        """Equally frequent values resolve to the smallest."""
        assert compute_mode([5, 2, 2, 5]) == 2
        assert compute_mode([9, 0, 3]) == 0
    
    def test_order_independent(self):
        """Result does not depend on input order."""
        values = [6, 1, 6, 1, 8, 8]
        assert compute_mode(values) == compute_mode(list(reversed(values))) == 1


class TestParseCount:
    """Test parsing of query engine lines."""
    
    def test_valid_line(self):
        assert parse_count("ACGTACGT 12") == 12
    
    def test_tab_separated(self):
        assert parse_count("ACGT\t0") == 0
    
    @pytest.mark.parametrize("line", [
        "",
        None,
        "ACGT",
        "ACGT -1",
        "ACGT 1.5",
        "ACGT abc",
        "ACGT 3x",
    ])
    def test_malformed_lines_dropped(self, line):
        """Blank lines and non-integer counts yield None."""
        assert parse_count(line) is None


class TestCountConsumer:
    """Test sequential consumption of the count stream."""
    
    def test_takes_exact_number_of_lines(self):
        """Each take advances by exactly n lines."""
        consumer = CountConsumer(["A 1", "C 2", "G 3", "T 4"])
        
        assert consumer.take(1) == [1]
        assert consumer.take(2) == [2, 3]
        assert consumer.take(1) == [4]
        assert consumer.consumed == 4
        assert not consumer.exhausted
    
    def test_zero_takes_nothing(self):
        """A read with no k-mers consumes no lines."""
        consumer = CountConsumer(["A 1", "C 2"])
        
        assert consumer.take(0) == []
        assert consumer.take(2) == [1, 2]
    
    def test_malformed_value_dropped_in_place(self):
        """A bad line is skipped but still uses its position."""
        consumer = CountConsumer(["A 5", "C bad", "", "T 6"])
        
        assert consumer.take(3) == [5]
        assert consumer.take(1) == [6]
    
    def test_repeated_kmers_decoded_by_position(self):
        """Identical k-mer strings are not merged."""
        consumer = CountConsumer(["AAA 2", "AAA 2", "AAA 9"])
        
        assert consumer.take(2) == [2, 2]
        assert consumer.take(1) == [9]
    
    def test_short_stream(self):
        """Running out of lines returns what was available."""
        consumer = CountConsumer(["A 1"])
        
        assert consumer.take(3) == [1]
        assert consumer.exhausted
        assert consumer.take(2) == []
    
    def test_drain_counts_leftover_lines(self):
        consumer = CountConsumer(["A 1", "C 2", "G 3"])
        consumer.take(1)
        
        assert consumer.drain() == 2
        assert consumer.consumed == 3
        assert consumer.drain() == 0
