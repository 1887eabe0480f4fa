"""
Pairmer v0.1.0

Configuration management for Pairmer.

Author: Pairmer Development Team
License: MIT - See LICENSE
"""

from .schema import DEFAULT_CONFIG, load_config, save_config_template, split_names, validate_config
from .settings import PipelineConfig

__all__ = [
    "DEFAULT_CONFIG",
    "PipelineConfig",
    "load_config",
    "save_config_template",
    "split_names",
    "validate_config",
]
