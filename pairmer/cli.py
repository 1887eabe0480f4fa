#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Command-line interface for Pairmer.

This module provides the main CLI entry point and all subcommands for
the Pairmer pairwise k-mer similarity pipeline.
"""

import sys
import shutil
import click
from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml

from .version import __version__
from .config.schema import load_config, save_config_template, split_names, validate_config
from .config.settings import PipelineConfig
from .errors import PairmerError
from .utils.checkpoints import clear_stale_temps
from .utils.pipeline import PipelineOrchestrator


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.pass_context
def main(ctx, verbose, quiet):
    """
    Pairmer: pairwise k-mer similarity between sequence samples

    Subsamples a directory of FASTA samples, indexes them with jellyfish,
    queries every ordered sample pair and writes a directional read-sharing
    matrix.
    """
    # Ensure context object exists
    ctx.ensure_object(dict)
    ctx.obj['VERBOSE'] = verbose
    ctx.obj['QUIET'] = quiet


# ============================================================================
# Shared pipeline options
# ============================================================================

_PIPELINE_OPTIONS = [
    click.option('--in-dir', '-i', type=click.Path(file_okay=False),
                 help='Directory of per-sample FASTA files'),
    click.option('--out-dir', '-o', type=click.Path(file_okay=False),
                 help='Output directory (created if missing)'),
    click.option('--config', '-c', 'config_file', type=click.Path(exists=True, dir_okay=False),
                 help='YAML configuration file'),
    click.option('--files', '-f', type=str, default=None,
                 help='Comma-separated subset of file names in --in-dir'),
    click.option('--metadata', '-m', type=click.Path(dir_okay=False),
                 help='Tab-separated sample metadata table'),
    click.option('--max-samples', type=int, default=None,
                 help='Maximum number of samples (default: 15)'),
    click.option('--max-seqs', type=int, default=None,
                 help='Maximum sequences per sample (default: 300000)'),
    click.option('--kmer-size', '-k', type=int, default=None,
                 help='K-mer length (default: 20)'),
    click.option('--hash-size', '-s', type=str, default=None,
                 help='Jellyfish hash size (default: 100M)'),
    click.option('--mode-min', type=int, default=None,
                 help='Minimum per-read mode to count a read (default: 1)'),
    click.option('--num-threads', '-t', type=int, default=None,
                 help='Threads passed to jellyfish count (default: 12)'),
    click.option('--workers', '-w', type=int, default=None,
                 help='Samples/pairs processed concurrently (default: 1)'),
    click.option('--seed', type=int, default=None,
                 help='Random seed for sample selection and subsampling'),
    click.option('--transform', type=click.Choice(['raw', 'log']), default=None,
                 help='Matrix cell encoding (default: raw)'),
    click.option('--jellyfish', 'jellyfish_exe', type=str, default=None,
                 help='Jellyfish executable (default: jellyfish)'),
    click.option('--debug', '-d', is_flag=True, default=False,
                 help='Debug logging'),
]


def pipeline_options(f):
    for option in reversed(_PIPELINE_OPTIONS):
        f = option(f)
    return f


def _set(config: Dict[str, Any], section: str, key: str, value: Any):
    if value is not None:
        config.setdefault(section, {})[key] = value


def build_config(ctx, params: Dict[str, Any]) -> PipelineConfig:
    """
    Merge defaults, an optional config file and CLI overrides into a
    PipelineConfig.
    """
    config_file = params.get('config_file')
    config = load_config(Path(config_file) if config_file else None)

    _set(config, 'input', 'in_dir', params.get('in_dir'))
    if params.get('files'):
        config['input']['files'] = split_names(params['files'])
    _set(config, 'input', 'metadata', params.get('metadata'))
    config['output']['out_dir'] = params.get('out_dir') or config['output'].get('out_dir')

    _set(config, 'sampling', 'max_samples', params.get('max_samples'))
    _set(config, 'sampling', 'max_seqs', params.get('max_seqs'))
    _set(config, 'sampling', 'seed', params.get('seed'))
    _set(config, 'kmer', 'kmer_size', params.get('kmer_size'))
    _set(config, 'kmer', 'hash_size', params.get('hash_size'))
    _set(config, 'comparison', 'mode_min', params.get('mode_min'))
    _set(config, 'matrix', 'transform', params.get('transform'))
    _set(config, 'execution', 'num_threads', params.get('num_threads'))
    _set(config, 'execution', 'workers', params.get('workers'))
    _set(config, 'execution', 'jellyfish', params.get('jellyfish_exe'))

    obj = ctx.obj or {}
    if params.get('debug') or obj.get('VERBOSE'):
        config['execution']['debug'] = True
    if obj.get('QUIET'):
        config['output']['logging']['level'] = 'WARNING'

    return PipelineConfig.from_dict(config)


def _run_steps(ctx, params: Dict[str, Any], steps: Optional[List[str]] = None,
               clean_tmp: bool = False) -> Dict[str, Any]:
    try:
        pipeline_config = build_config(ctx, params)
        if clean_tmp:
            clear_stale_temps(pipeline_config.out_dir)
        orchestrator = PipelineOrchestrator(pipeline_config)
        return orchestrator.run(steps)
    except PairmerError as e:
        click.echo(f"✗ {e}", err=True)
        ctx.exit(1)


# ============================================================================
# Pipeline Commands
# ============================================================================

@main.command()
@pipeline_options
@click.option('--clean-tmp', is_flag=True, default=False,
              help='Remove temporary files left by an interrupted run first')
@click.pass_context
def run(ctx, clean_tmp, **params):
    """Run the full pipeline: subset, kmerize, index, compare, matrix, metadata."""
    summary = _run_steps(ctx, params, clean_tmp=clean_tmp)
    if not (ctx.obj or {}).get('QUIET'):
        click.echo(f"✓ Compared {len(summary['samples'])} samples "
                   f"({summary['pairs']} pairs)")
        click.echo(f"Done, see '{summary['matrix_file']}' for output.")


def _step_command(step: str, help_text: str):
    @click.pass_context
    def command(ctx, **params):
        _run_steps(ctx, params, [step])
        if not (ctx.obj or {}).get('QUIET'):
            click.echo(f"✓ {step} complete")

    command.__doc__ = help_text
    return main.command(name=step)(pipeline_options(command))


subset = _step_command('subset', "Select samples and cap sequences per sample.")
kmerize = _step_command('kmerize', "Write k-mer query files and location manifests.")
index = _step_command('index', "Build a jellyfish index per sample.")
compare = _step_command('compare', "Query every ordered sample pair.")
matrix = _step_command('matrix', "Assemble the similarity matrix.")
metadata = _step_command('metadata', "Split the metadata table into per-field files.")


# ============================================================================
# Configuration Management Commands
# ============================================================================

@main.group()
def config():
    """Configuration management commands."""
    pass


@config.command('init')
@click.option('--output', '-o', type=click.Path(), default='pairmer_config.yaml',
              help='Output configuration file path')
def config_init(output):
    """Generate a template configuration file with all available parameters."""
    click.echo(f"Generating configuration template: {output}")

    try:
        save_config_template(Path(output))
    except OSError as e:
        click.echo(f"✗ Error creating configuration: {e}", err=True)
        sys.exit(1)

    click.echo(f"✓ Configuration file created: {output}")
    click.echo("\nEdit this file to set input/output directories and pipeline knobs.")


@config.command('validate')
@click.argument('config_file', type=click.Path(exists=True))
def config_validate(config_file):
    """Validate a configuration file."""
    click.echo(f"Validating configuration file: {config_file}")

    try:
        config = load_config(Path(config_file))
    except yaml.YAMLError as e:
        click.echo(f"✗ Invalid YAML: {e}", err=True)
        sys.exit(1)

    errors = validate_config(config)
    if errors:
        click.echo("\n✗ Configuration validation failed:")
        for error in errors:
            click.echo(f"  • {error}", err=True)
        sys.exit(1)

    click.echo("✓ Configuration is valid")
    click.echo("\nKey Settings:")
    click.echo(f"  k-mer size: {config['kmer']['kmer_size']}")
    click.echo(f"  Max samples: {config['sampling']['max_samples']}")
    click.echo(f"  Mode min: {config['comparison']['mode_min']}")


@config.command('show')
@click.argument('config_file', type=click.Path(exists=True))
@click.option('--format', '-f', type=click.Choice(['yaml', 'summary']), default='summary',
              help='Output format')
def config_show(config_file, format):
    """Display configuration settings."""
    config = load_config(Path(config_file))

    if format == 'yaml':
        click.echo(yaml.dump(config, default_flow_style=False, sort_keys=False))
        return

    click.echo(f"Configuration from: {config_file}")
    click.echo("=" * 60)

    click.echo("\nInput / Output:")
    click.echo(f"  Input dir: {config['input']['in_dir']}")
    click.echo(f"  Output dir: {config['output']['out_dir']}")
    if config['input']['files']:
        click.echo(f"  Files: {', '.join(split_names(config['input']['files']))}")
    if config['input']['metadata']:
        click.echo(f"  Metadata: {config['input']['metadata']}")

    click.echo("\nSampling:")
    click.echo(f"  Max samples: {config['sampling']['max_samples']}")
    click.echo(f"  Max seqs: {config['sampling']['max_seqs']:,}")
    click.echo(f"  Seed: {config['sampling']['seed']}")

    click.echo("\nK-mers / Comparison:")
    click.echo(f"  k-mer size: {config['kmer']['kmer_size']}")
    click.echo(f"  Hash size: {config['kmer']['hash_size']}")
    click.echo(f"  Mode min: {config['comparison']['mode_min']}")
    click.echo(f"  Matrix transform: {config['matrix']['transform']}")

    click.echo("\nExecution:")
    click.echo(f"  Jellyfish threads: {config['execution']['num_threads']}")
    click.echo(f"  Workers: {config['execution']['workers']}")


# ============================================================================
# Utility Commands
# ============================================================================

@main.command()
def version():
    """Show version information."""
    click.echo(f"Pairmer v{__version__}")
    click.echo("\nDependencies:")

    import Bio
    import numpy
    click.echo(f"  BioPython: {Bio.__version__}")
    click.echo(f"  NumPy: {numpy.__version__}")
    click.echo(f"  PyYAML: {yaml.__version__}")

    jellyfish = shutil.which('jellyfish')
    click.echo(f"  jellyfish: {jellyfish or 'not found on PATH'}")


if __name__ == '__main__':
    sys.exit(main())
