#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pairmer v0.1.0

Tests for similarity matrix assembly.

Author: Pairmer Development Team
License: MIT - See LICENSE
"""

import numpy as np

from pairmer.stages.matrix_assembler_module import (
    MatrixAssembler,
    format_cell,
    read_matrix,
)


def write_tally(config, index, query, value):
    path = config.mode_dir / index / query
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"{value}\n")


class TestFormatCell:
    """Test cell encodings."""
    
    def test_raw(self):
        assert format_cell(12) == "12"
        assert format_cell(0) == "0"
    
    def test_log(self):
        assert format_cell(1, 'log') == "0.00"
        assert format_cell(10, 'log') == "2.30"
        assert format_cell(0, 'log') == "1.00"


class TestMatrixAssembler:
    """Test matrix assembly from tallies."""
    
    def test_directional_cells(self, make_config):
        """Row is the query sample, column the index sample."""
        config = make_config()
        write_tally(config, "A", "A", 5)
        write_tally(config, "B", "B", 7)
        write_tally(config, "B", "A", 2)   # A queried against B
        write_tally(config, "A", "B", 3)   # B queried against A
        
        matrix_file = MatrixAssembler(config).run(["A", "B"])
        
        assert matrix_file.read_text() == "\tA\tB\nA\t5\t2\nB\t3\t7\n"
    
    def test_missing_tally_is_zero(self, make_config):
        config = make_config()
        write_tally(config, "A", "A", 4)
        write_tally(config, "B", "B", 1)
        (config.mode_dir / "A" / "B").write_text("")
        
        names, values = read_matrix(MatrixAssembler(config).run(["A", "B"]))
        
        assert names == ["A", "B"]
        np.testing.assert_array_equal(values, [[4, 0], [0, 1]])
    
    def test_union_of_names(self, make_config):
        """Samples seen only on disk still get a row and column."""
        config = make_config()
        write_tally(config, "C", "A", 6)
        
        names, values = read_matrix(MatrixAssembler(config).run(["A", "B"]))
        
        assert names == ["A", "B", "C"]
        assert values.shape == (3, 3)
        assert values[0, 2] == 6
    
    def test_sorted_names(self, make_config):
        config = make_config()
        
        names, _ = read_matrix(MatrixAssembler(config).run(["zeta", "alpha", "mid"]))
        
        assert names == ["alpha", "mid", "zeta"]
    
    def test_log_transform(self, make_config):
        config = make_config(transform='log')
        write_tally(config, "A", "A", 1)
        write_tally(config, "B", "A", 0)
        
        matrix_file = MatrixAssembler(config).run(["A", "B"])
        
        assert matrix_file.read_text() == "\tA\tB\nA\t0.00\t1.00\nB\t1.00\t1.00\n"
    
    def test_existing_matrix_kept(self, make_config):
        config = make_config()
        config.matrix_dir.mkdir(parents=True)
        config.matrix_file.write_text("existing\n")
        write_tally(config, "A", "A", 9)
        
        MatrixAssembler(config).run(["A", "B"])
        
        assert config.matrix_file.read_text() == "existing\n"
