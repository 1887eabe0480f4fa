#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pairmer v0.1.0

Tests for metadata splitting.

Author: Pairmer Development Team
License: MIT - See LICENSE
"""

import pytest

from pairmer.errors import ConfigurationError
from pairmer.stages.metadata_module import (
    MetadataSplitter,
    field_header,
    metadata_fields,
)

METADATA = (
    "name\tdepth.c\tbiome.d\tlat_lon.ll\tnotes\n"
    "A\t10\tocean\t21.3, -157.8\tfirst\n"
    "B\t200\tsoil\t32.2,-110.9\tsecond\n"
    "C\t5\tlake\t0,0\tthird\n"
)


@pytest.fixture
def metadata_file(temp_output_dir):
    path = temp_output_dir / "meta.tab"
    path.write_text(METADATA)
    return path


class TestHelpers:
    """Test field selection and headers."""
    
    def test_metadata_fields(self):
        fields = metadata_fields(["name", "depth.c", "biome.d", "lat_lon.ll", "notes", "x.dd"])
        
        assert fields == ["depth.c", "biome.d", "lat_lon.ll"]
    
    def test_field_header(self):
        assert field_header("lat_lon.ll") == ["Sample", "lat", "lon"]
        assert field_header("depth.c") == ["Sample", "depth"]


class TestMetadataSplitter:
    """Test per-field file generation."""
    
    def test_writes_field_files(self, metadata_file, make_config):
        config = make_config(metadata=metadata_file)
        
        meta_dir = MetadataSplitter(config).run(["A", "B"])
        
        assert sorted(p.name for p in meta_dir.iterdir()) == ["biome.d", "depth.c", "lat_lon.ll"]
        assert (meta_dir / "depth.c").read_text() == "Sample\tdepth\nA\t10\nB\t200\n"
        assert (meta_dir / "lat_lon.ll").read_text() == (
            "Sample\tlat\tlon\nA\t21.3\t-157.8\nB\t32.2\t-110.9\n"
        )
    
    def test_no_metadata_configured(self, make_config):
        assert MetadataSplitter(make_config()).run(["A", "B"]) is None
    
    def test_missing_sample_metadata(self, metadata_file, make_config):
        config = make_config(metadata=metadata_file)
        
        with pytest.raises(ConfigurationError, match="D missing meta"):
            MetadataSplitter(config).run(["A", "D"])
        
        assert not (config.metadata_dir / "depth.c").exists()
    
    def test_bad_metadata_file(self, temp_output_dir, make_config):
        empty = temp_output_dir / "empty.tab"
        empty.touch()
        
        with pytest.raises(ConfigurationError, match="Bad metadata file"):
            MetadataSplitter(make_config(metadata=empty)).run(["A", "B"])
    
    def test_previous_files_removed(self, metadata_file, make_config):
        config = make_config(metadata=metadata_file)
        config.metadata_dir.mkdir(parents=True)
        (config.metadata_dir / "old_field.d").write_text("stale")
        (config.metadata_dir / "README").write_text("keep")
        
        MetadataSplitter(config).run(["A", "B"])
        
        assert not (config.metadata_dir / "old_field.d").exists()
        assert (config.metadata_dir / "README").exists()
