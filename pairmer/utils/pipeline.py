"""
Pairmer Pipeline Orchestrator.

Runs the stages in dependency order against one output directory:

1. subset    - SampleSelector: pick samples, cap sequences per sample
2. kmerize   - KmerExtractor: k-mer query file + location manifest
3. index     - IndexBuilder: jellyfish index per sample
4. compare   - PairwiseComparator: every ordered pair, per-read modes
5. matrix    - MatrixAssembler: directional similarity matrix
6. metadata  - MetadataSplitter: per-field metadata files (optional)

Every stage skips units whose output already exists, so re-running on a
complete output directory recomputes nothing.
"""

from typing import Optional, Dict, Any, List, Sequence
import logging

from ..config.schema import validate_config
from ..config.settings import PipelineConfig
from ..errors import ConfigurationError
from ..stages.sample_selector_module import SampleSelector, selected_samples
from ..stages.kmer_extractor_module import KmerExtractor
from ..stages.index_builder_module import IndexBuilder, JellyfishEngine
from ..stages.pairwise_comparator_module import PairwiseComparator
from ..stages.matrix_assembler_module import MatrixAssembler
from ..stages.metadata_module import MetadataSplitter
from .timing import Timer

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

PIPELINE_STEPS = ['subset', 'kmerize', 'index', 'compare', 'matrix', 'metadata']


def setup_logging(config: PipelineConfig):
    """
    Configure root logging for a run: log file in the output directory
    plus the console.
    """
    level = logging.DEBUG if config.debug else getattr(logging, config.log_level)
    config.out_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(config.log_path),
            logging.StreamHandler()
        ]
    )


class PipelineOrchestrator:
    """
    Master orchestrator for the Pairmer pipeline.

    Holds the immutable run configuration and the engine, and executes the
    requested steps in order. Samples chosen by the subset step are reused
    by later steps; when a later step runs on its own, the samples are read
    back from the ``subset/`` directory.
    """

    def __init__(self, config: PipelineConfig, engine: Optional[JellyfishEngine] = None,
                 configure_logging: bool = True):
        """
        Initialize pipeline orchestrator.

        Args:
            config: Validated run configuration
            engine: K-mer index/query engine (jellyfish by default)
            configure_logging: Install file and console log handlers
        """
        self.config = config
        self.output_dir = config.out_dir
        self.output_dir.mkdir(parents=True, exist_ok=True)

        if configure_logging:
            setup_logging(config)
        self.logger = logging.getLogger(__name__)

        self.engine = engine or JellyfishEngine(config.jellyfish)

        # Runtime state
        self.state: Dict[str, Any] = {
            'current_step': None,
            'completed_steps': [],
            'samples': None,
            'pairs': None,
            'matrix_file': None,
            'metadata_dir': None,
        }

    def check_inputs(self):
        """
        Configuration checks that must pass before any stage runs.

        Raises:
            ConfigurationError: On a missing input directory or a bad
                metadata file
        """
        errors = validate_config(self.config.to_nested(), require_paths=True)
        if errors:
            raise ConfigurationError("; ".join(errors))

    def run(self, steps: Optional[Sequence[str]] = None) -> Dict[str, Any]:
        """
        Run the pipeline.

        Args:
            steps: Subset of PIPELINE_STEPS to run (None = all, in order)

        Returns:
            Pipeline execution summary
        """
        unknown = set(steps or ()) - set(PIPELINE_STEPS)
        if unknown:
            raise ValueError(f"Unknown step: {', '.join(sorted(unknown))}")
        steps = [s for s in PIPELINE_STEPS if steps is None or s in steps]

        if 'subset' in steps:
            self.check_inputs()

        self.logger.info("=" * 60)
        self.logger.info(f"Starting Pairmer pipeline in {self.output_dir}")
        self.logger.info("=" * 60)

        run_timer = Timer()
        for i, step in enumerate(steps):
            self.state['current_step'] = step
            self.logger.info(f"STEP {i + 1}/{len(steps)}: {step.upper()}")

            try:
                self._execute_step(step)
            except Exception as e:
                self.logger.error(f"Step {step} failed: {e}")
                raise
            self.state['completed_steps'].append(step)

        if self.state['matrix_file']:
            self.logger.info(f"Done, see '{self.state['matrix_file']}' for output.")
        self.logger.info(f"Pipeline finished in {run_timer}")

        return {
            "status": "success",
            "steps_completed": list(self.state['completed_steps']),
            "samples": list(self.state['samples'] or []),
            "pairs": self.state['pairs'],
            "matrix_file": str(self.state['matrix_file']) if self.state['matrix_file'] else None,
            "output_dir": str(self.output_dir),
        }

    def _samples(self) -> List[str]:
        if self.state['samples'] is None:
            self.state['samples'] = selected_samples(self.config)
        return self.state['samples']

    def _execute_step(self, step: str):
        """Execute a single pipeline step."""
        if step == 'subset':
            samples = SampleSelector(self.config).run()
            self.state['samples'] = [s.name for s in samples]
        elif step == 'kmerize':
            KmerExtractor(self.config).run(self._samples())
        elif step == 'index':
            IndexBuilder(self.config, self.engine).run(self._samples())
        elif step == 'compare':
            results = PairwiseComparator(self.config, self.engine).run(self._samples())
            self.state['pairs'] = len(results)
        elif step == 'matrix':
            self.state['matrix_file'] = MatrixAssembler(self.config).run(self._samples())
        elif step == 'metadata':
            self.state['metadata_dir'] = MetadataSplitter(self.config).run(self._samples())
        else:
            raise ValueError(f"Unknown step: {step}")
