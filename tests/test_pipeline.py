#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pairmer v0.1.0

End-to-end tests for the pipeline orchestrator.

Author: Pairmer Development Team
License: MIT - See LICENSE
"""

import pytest

from pairmer.errors import ConfigurationError, PreconditionError
from pairmer.io.io_core_module import read_location_manifest
from pairmer.utils.pipeline import PIPELINE_STEPS, PipelineOrchestrator
from conftest import read_fasta_pairs

EXPECTED_MATRIX = "\tA\tB\nA\t2\t0\nB\t1\t1\n"


def make_orchestrator(config, engine):
    return PipelineOrchestrator(config, engine=engine, configure_logging=False)


class TestFullRun:
    """Test a complete two-sample run."""
    
    def test_outputs(self, two_sample_dir, make_config, fake_engine):
        config = make_config(in_dir=two_sample_dir)
        
        summary = make_orchestrator(config, fake_engine).run()
        
        assert summary['status'] == 'success'
        assert summary['steps_completed'] == PIPELINE_STEPS
        assert summary['samples'] == ["A", "B"]
        assert summary['pairs'] == 4
        
        assert sorted(p.name for p in config.subset_dir.iterdir()) == ["A", "B"]
        assert len(read_fasta_pairs(config.kmer_dir / "A.kmer")) == 17
        assert len(read_fasta_pairs(config.kmer_dir / "B.kmer")) == 3
        assert [e.sequence_id for e in read_location_manifest(config.kmer_dir / "B.loc")] == [
            "b1", "b2"
        ]
        assert (config.index_dir / "A").is_file()
        assert (config.mode_dir / "A" / "B").read_text() == "1\n"
        assert config.matrix_file.read_text() == EXPECTED_MATRIX
        assert summary['matrix_file'] == str(config.matrix_file)
    
    def test_engine_calls(self, two_sample_dir, make_config, fake_engine):
        config = make_config(in_dir=two_sample_dir)
        
        make_orchestrator(config, fake_engine).run()
        
        assert sorted(c[0] for c in fake_engine.count_calls) == ["A", "B"]
        assert len(fake_engine.query_calls) == 4
    
    def test_rerun_is_idempotent(self, two_sample_dir, make_config, fake_engine):
        """A second run on a complete output directory recomputes nothing."""
        config = make_config(in_dir=two_sample_dir)
        make_orchestrator(config, fake_engine).run()
        first = config.matrix_file.read_bytes()
        
        fake_engine.count_calls.clear()
        fake_engine.query_calls.clear()
        make_orchestrator(config, fake_engine).run()
        
        assert fake_engine.count_calls == []
        assert fake_engine.query_calls == []
        assert config.matrix_file.read_bytes() == first
    
    def test_parallel_workers(self, two_sample_dir, make_config, fake_engine):
        config = make_config(in_dir=two_sample_dir, workers=4)
        
        make_orchestrator(config, fake_engine).run()
        
        assert config.matrix_file.read_text() == EXPECTED_MATRIX
    
    def test_no_temp_files_left(self, two_sample_dir, make_config, fake_engine):
        config = make_config(in_dir=two_sample_dir)
        
        make_orchestrator(config, fake_engine).run()
        
        assert list(config.out_dir.rglob(".*.tmp")) == []


class TestStepSelection:
    """Test running individual steps."""
    
    def test_standalone_step_reads_subset_dir(self, two_sample_dir, make_config, fake_engine):
        config = make_config(in_dir=two_sample_dir)
        make_orchestrator(config, fake_engine).run()
        config.matrix_file.unlink()
        
        summary = make_orchestrator(config, fake_engine).run(['matrix'])
        
        assert summary['steps_completed'] == ['matrix']
        assert summary['samples'] == ["A", "B"]
        assert config.matrix_file.read_text() == EXPECTED_MATRIX
    
    def test_steps_run_in_pipeline_order(self, two_sample_dir, make_config, fake_engine):
        config = make_config(in_dir=two_sample_dir)
        
        summary = make_orchestrator(config, fake_engine).run(['kmerize', 'subset'])
        
        assert summary['steps_completed'] == ['subset', 'kmerize']
    
    def test_unknown_step(self, make_config, fake_engine):
        with pytest.raises(ValueError, match="Unknown step"):
            make_orchestrator(make_config(), fake_engine).run(['align'])
    
    def test_step_without_subset(self, make_config, fake_engine):
        with pytest.raises(PreconditionError, match="Bad subset dir"):
            make_orchestrator(make_config(), fake_engine).run(['kmerize'])


class TestCheckInputs:
    """Test configuration checks before the first stage."""
    
    def test_missing_input_dir(self, temp_output_dir, make_config, fake_engine):
        config = make_config(in_dir=temp_output_dir / "absent")
        
        with pytest.raises(ConfigurationError, match="Bad input dir"):
            make_orchestrator(config, fake_engine).run()
    
    def test_no_input_dir(self, make_config, fake_engine):
        config = make_config(in_dir=None)
        
        with pytest.raises(ConfigurationError, match="No input directory"):
            make_orchestrator(config, fake_engine).check_inputs()
    
    def test_bad_metadata_file(self, two_sample_dir, temp_output_dir, make_config, fake_engine):
        config = make_config(in_dir=two_sample_dir, metadata=temp_output_dir / "none.tab")
        
        with pytest.raises(ConfigurationError, match="Bad metadata file"):
            make_orchestrator(config, fake_engine).run()
        
        assert not config.subset_dir.exists()
    
    def test_all_path_errors_reported(self, temp_output_dir, make_config, fake_engine):
        config = make_config(in_dir=temp_output_dir / "absent",
                             metadata=temp_output_dir / "none.tab")
        
        with pytest.raises(ConfigurationError) as excinfo:
            make_orchestrator(config, fake_engine).check_inputs()
        
        assert "Bad input dir" in str(excinfo.value)
        assert "Bad metadata file" in str(excinfo.value)
    
    def test_single_sample(self, two_sample_dir, make_config, fake_engine):
        config = make_config(in_dir=two_sample_dir, files=["A"])
        
        with pytest.raises(ConfigurationError, match="Need more than one file"):
            make_orchestrator(config, fake_engine).run()


class TestMetadataStep:
    """Test the optional metadata step within a run."""
    
    def test_metadata_written(self, two_sample_dir, temp_output_dir, make_config, fake_engine):
        meta = temp_output_dir / "meta.tab"
        meta.write_text("name\tdepth.c\tnotes\nA\t1\tx\nB\t2\ty\n")
        config = make_config(in_dir=two_sample_dir, metadata=meta)
        
        make_orchestrator(config, fake_engine).run()
        
        assert (config.metadata_dir / "depth.c").read_text() == "Sample\tdepth\nA\t1\nB\t2\n"
