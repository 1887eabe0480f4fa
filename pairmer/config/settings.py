#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pairmer v0.1.0

Immutable run configuration shared by every stage.

The nested YAML dictionary from the schema module is flattened once into a
frozen PipelineConfig, validated at construction, and handed read-only to
the stages. The on-disk layout of a run is derived from it.

Author: Pairmer Development Team
License: MIT - See LICENSE
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from ..errors import ConfigurationError
from .schema import DEFAULT_CONFIG, FILES_TYPE_ERROR, _deep_merge, split_names, validate_config


@dataclass(frozen=True)
class PipelineConfig:
    """Validated settings for one pipeline run."""
    out_dir: Path
    in_dir: Optional[Path] = None
    files: Tuple[str, ...] = ()
    metadata: Optional[Path] = None

    max_samples: int = 15
    max_seqs: int = 300000
    seed: Optional[int] = None
    max_draw_factor: int = 100

    kmer_size: int = 20
    hash_size: str = '100M'
    mode_min: int = 1
    transform: str = 'raw'

    num_threads: int = 12
    workers: int = 1
    jellyfish: str = 'jellyfish'
    debug: bool = False

    log_level: str = 'INFO'
    log_file: str = 'pairmer.log'

    def __post_init__(self):
        # Frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, 'out_dir', Path(self.out_dir))
        if self.in_dir is not None:
            object.__setattr__(self, 'in_dir', Path(self.in_dir))
        if self.metadata is not None:
            object.__setattr__(self, 'metadata', Path(self.metadata))
        object.__setattr__(self, 'files', tuple(split_names(self.files)))
        object.__setattr__(self, 'hash_size', str(self.hash_size))
        object.__setattr__(self, 'log_level', str(self.log_level).upper())

        errors = validate_config(self.to_nested())
        if errors:
            raise ConfigurationError(
                "Configuration validation failed:\n  " + "\n  ".join(errors)
            )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'PipelineConfig':
        """
        Build a PipelineConfig from a (possibly partial) nested config dict.

        Args:
            config: Nested dictionary shaped like DEFAULT_CONFIG

        Returns:
            Frozen, validated configuration

        Raises:
            ConfigurationError: If the output directory is missing or any
                value is invalid
        """
        merged = _deep_merge(DEFAULT_CONFIG, config or {})

        out_dir = merged['output'].get('out_dir')
        if not out_dir:
            raise ConfigurationError("No output directory")

        in_dir = merged['input'].get('in_dir')
        metadata = merged['input'].get('metadata')
        files = merged['input'].get('files')
        if files and not isinstance(files, (str, list, tuple)):
            raise ConfigurationError(FILES_TYPE_ERROR)

        return cls(
            out_dir=Path(out_dir),
            in_dir=Path(in_dir) if in_dir else None,
            files=tuple(split_names(files)),
            metadata=Path(metadata) if metadata else None,
            max_samples=merged['sampling']['max_samples'],
            max_seqs=merged['sampling']['max_seqs'],
            seed=merged['sampling']['seed'],
            max_draw_factor=merged['sampling']['max_draw_factor'],
            kmer_size=merged['kmer']['kmer_size'],
            hash_size=merged['kmer']['hash_size'],
            mode_min=merged['comparison']['mode_min'],
            transform=merged['matrix']['transform'],
            num_threads=merged['execution']['num_threads'],
            workers=merged['execution']['workers'],
            jellyfish=merged['execution']['jellyfish'],
            debug=bool(merged['execution']['debug']),
            log_level=merged['output']['logging']['level'],
            log_file=merged['output']['logging']['log_file'],
        )

    def to_nested(self) -> Dict[str, Any]:
        """Return the configuration in the nested YAML shape."""
        return {
            'input': {
                'in_dir': str(self.in_dir) if self.in_dir else None,
                'files': list(self.files),
                'metadata': str(self.metadata) if self.metadata else None,
            },
            'output': {
                'out_dir': str(self.out_dir),
                'logging': {'level': self.log_level, 'log_file': self.log_file},
            },
            'sampling': {
                'max_samples': self.max_samples,
                'max_seqs': self.max_seqs,
                'seed': self.seed,
                'max_draw_factor': self.max_draw_factor,
            },
            'kmer': {'kmer_size': self.kmer_size, 'hash_size': self.hash_size},
            'comparison': {'mode_min': self.mode_min},
            'matrix': {'transform': self.transform},
            'execution': {
                'num_threads': self.num_threads,
                'workers': self.workers,
                'jellyfish': self.jellyfish,
                'debug': self.debug,
            },
        }

    # ------------------------------------------------------------------
    # Run layout
    # ------------------------------------------------------------------

    @property
    def subset_dir(self) -> Path:
        return self.out_dir / 'subset'

    @property
    def kmer_dir(self) -> Path:
        return self.out_dir / 'kmer'

    @property
    def index_dir(self) -> Path:
        return self.out_dir / 'jf'

    @property
    def mode_dir(self) -> Path:
        return self.out_dir / 'mode'

    @property
    def read_mode_dir(self) -> Path:
        return self.out_dir / 'read_mode'

    @property
    def tmp_dir(self) -> Path:
        return self.out_dir / 'tmp'

    @property
    def matrix_dir(self) -> Path:
        return self.out_dir / 'matrix'

    @property
    def matrix_file(self) -> Path:
        return self.matrix_dir / 'matrix.tab'

    @property
    def metadata_dir(self) -> Path:
        return self.out_dir / 'metadata'

    @property
    def log_path(self) -> Path:
        return self.out_dir / self.log_file
