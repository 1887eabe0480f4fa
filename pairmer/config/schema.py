"""
Pairmer v0.1.0

Configuration schema for Pairmer.

Defines all available configuration parameters with defaults and validation.

Author: Pairmer Development Team
License: MIT - See LICENSE
"""

import copy
import re
from typing import Dict, Any, Optional, List
from pathlib import Path
import yaml


# Default configuration values
DEFAULT_CONFIG = {
    # ========================================================================
    # Input
    # ========================================================================
    'input': {
        'in_dir': None,            # Directory of per-sample FASTA files
        'files': [],               # Optional explicit subset of file names
        'metadata': None,          # Optional tab-separated metadata table
    },

    # ========================================================================
    # Output
    # ========================================================================
    'output': {
        'out_dir': None,
        'logging': {
            'level': 'INFO',
            'log_file': 'pairmer.log',   # Relative to out_dir
        },
    },

    # ========================================================================
    # Sample selection and subsampling
    # ========================================================================
    'sampling': {
        'max_samples': 15,         # Cap on samples entering the comparison
        'max_seqs': 300000,        # Sequences kept per sample
        'seed': None,              # None = nondeterministic
        'max_draw_factor': 100,    # Draw bound = factor * max_seqs
    },

    # ========================================================================
    # K-mer indexing
    # ========================================================================
    'kmer': {
        'kmer_size': 20,
        'hash_size': '100M',       # Passed verbatim to jellyfish -s
    },

    # ========================================================================
    # Pairwise comparison
    # ========================================================================
    'comparison': {
        'mode_min': 1,             # Minimum per-read mode to count a read
    },

    # ========================================================================
    # Matrix
    # ========================================================================
    'matrix': {
        'transform': 'raw',        # 'raw' counts or 'log' (ln, 2 decimals)
    },

    # ========================================================================
    # Execution
    # ========================================================================
    'execution': {
        'num_threads': 12,         # Threads given to jellyfish count
        'workers': 1,              # Samples/pairs processed concurrently
        'jellyfish': 'jellyfish',  # Engine executable
        'debug': False,
    },
}

VALID_TRANSFORMS = ('raw', 'log')
VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

# jellyfish accepts plain integers with an optional SI suffix
_HASH_SIZE_RE = re.compile(r'^\d+[kKMGT]?$')
FILES_TYPE_ERROR = "input.files must be a list or a comma-separated string of file names"


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        Configuration dictionary
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path and Path(config_path).exists():
        with open(config_path, 'r') as f:
            user_config = yaml.safe_load(f)

        if user_config:
            # Deep merge user config into defaults
            config = _deep_merge(config, user_config)

    return config


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Override dictionary

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def save_config_template(output_path: Path):
    """
    Save the default configuration as a template file.

    Args:
        output_path: Output file path
    """
    with open(output_path, 'w') as f:
        yaml.dump(DEFAULT_CONFIG, f, default_flow_style=False, sort_keys=False)


def split_names(value: Any) -> List[str]:
    """
    Normalise an ``input.files`` value to a list of names.

    A string is split on commas, as on the command line.

    Example:
        >>> split_names("A, B,,C")
        ['A', 'B', 'C']
    """
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(',')
    return [str(name).strip() for name in value if str(name).strip()]


def _check_int(errors: List[str], value: Any, name: str, minimum: int):
    if isinstance(value, bool) or not isinstance(value, int):
        errors.append(f"{name} must be an integer (got {value!r})")
    elif value < minimum:
        errors.append(f"{name} must be >= {minimum} (got {value})")


def validate_config(config: Dict[str, Any], require_paths: bool = False) -> List[str]:
    """
    Validate configuration dictionary.

    Args:
        config: Configuration to validate
        require_paths: Also require input/output directories to be set

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    sampling = config.get('sampling', {})
    _check_int(errors, sampling.get('max_samples'), 'sampling.max_samples', 2)
    _check_int(errors, sampling.get('max_seqs'), 'sampling.max_seqs', 1)
    _check_int(errors, sampling.get('max_draw_factor'), 'sampling.max_draw_factor', 1)
    seed = sampling.get('seed')
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
        errors.append(f"sampling.seed must be an integer or null (got {seed!r})")

    kmer = config.get('kmer', {})
    _check_int(errors, kmer.get('kmer_size'), 'kmer.kmer_size', 1)
    if not _HASH_SIZE_RE.match(str(kmer.get('hash_size', ''))):
        errors.append(f"Invalid kmer.hash_size: {kmer.get('hash_size')!r} (e.g. '100M')")

    _check_int(errors, config.get('comparison', {}).get('mode_min'), 'comparison.mode_min', 0)

    transform = config.get('matrix', {}).get('transform')
    if transform not in VALID_TRANSFORMS:
        errors.append(f"Invalid matrix.transform: {transform!r} "
                      f"(choose from {', '.join(VALID_TRANSFORMS)})")

    execution = config.get('execution', {})
    _check_int(errors, execution.get('num_threads'), 'execution.num_threads', 1)
    _check_int(errors, execution.get('workers'), 'execution.workers', 1)
    if not execution.get('jellyfish'):
        errors.append("execution.jellyfish must name an executable")

    level = str(config.get('output', {}).get('logging', {}).get('level', '')).upper()
    if level not in VALID_LOG_LEVELS:
        errors.append(f"Invalid output.logging.level: {level!r}")

    files = config.get('input', {}).get('files') or []
    if not isinstance(files, (str, list, tuple)):
        errors.append(FILES_TYPE_ERROR)

    if require_paths:
        in_dir = config.get('input', {}).get('in_dir')
        if not in_dir:
            errors.append("No input directory")
        elif not Path(in_dir).is_dir():
            errors.append(f"Bad input dir ({in_dir})")

        if not config.get('output', {}).get('out_dir'):
            errors.append("No output directory")

        metadata = config.get('input', {}).get('metadata')
        if metadata:
            metadata_path = Path(metadata)
            if not metadata_path.is_file() or metadata_path.stat().st_size == 0:
                errors.append(f"Bad metadata file ({metadata})")

    return errors
