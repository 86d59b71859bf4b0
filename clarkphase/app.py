"""Main application coordinator for clarkphase."""

import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable, Optional, TextIO

from .core import DosageEncoding, PhasingDriver, PhasingResult
from .io import ConsoleReporter, GenotypeReader, PhasingWriter, RunInfoWriter
from .utils import MemoryMonitor, setup_logger

__all__ = ["PhasingConfig", "PhasingApp"]


@dataclass
class PhasingConfig:
    """Configuration for a clarkphase run.

    Attributes:
        input_path: Path to the genotype file
        input_format: Input format identifier (auto, matrix, vcf)
        output_dir: Folder for result files, or None for console output only
        max_iterations: Maximum number of expansion passes
        max_stalled_escalations: Consecutive escalations without progress
            tolerated before aborting
        consensus_fallback: Value replacing all-zero consensus sums
        show_progress: Whether to show progress bars on large corpora
        verbose: Whether to enable verbose logging
        log_level: Logging level override
        log_format: Logging format (text or json)

    Example:
        >>> config = PhasingConfig(input_path=Path("corpus.txt"), max_iterations=500)
        >>> print(f"Input: {config.input_path}, passes: {config.max_iterations}")
        Input: corpus.txt, passes: 500
    """

    input_path: Path
    input_format: str = "auto"
    output_dir: Optional[Path] = None
    max_iterations: int = 10000
    max_stalled_escalations: int = 2
    consensus_fallback: int = 1
    show_progress: bool = True
    verbose: bool = True
    log_level: Optional[str] = None
    log_format: str = "text"


class PhasingApp:
    """Main application coordinator with separated concerns."""

    def __init__(
        self,
        config: PhasingConfig,
        shutdown_checker: Optional[Callable[[], bool]] = None,
        stdout: Optional[TextIO] = None,
    ):
        """Initialize the application with configuration.

        Args:
            config: Application configuration
            shutdown_checker: Optional function to check if shutdown was requested
            stdout: Stream for the phasing report; defaults to sys.stdout
        """
        self.config = config
        self.shutdown_checker = shutdown_checker
        self.logger = setup_logger(
            "clarkphase", config.log_level, config.log_format, config.verbose
        )
        self.memory_monitor = MemoryMonitor(self.logger)
        self.encoding = DosageEncoding(consensus_fallback=config.consensus_fallback)

        self.reader = GenotypeReader(self.memory_monitor, self.logger, shutdown_checker)
        self.driver = PhasingDriver(
            self.logger,
            memory_monitor=self.memory_monitor,
            encoding=self.encoding,
            max_iterations=config.max_iterations,
            max_stalled_escalations=config.max_stalled_escalations,
            shutdown_checker=shutdown_checker,
            reporter=ConsoleReporter(stdout),
            show_progress=config.show_progress,
        )
        self.phasing_writer = PhasingWriter(self.logger, self.encoding)
        self.run_info_writer = RunInfoWriter(self.memory_monitor)

        self.memory_monitor.check_memory_and_warn("initialization")

    def run(self) -> PhasingResult:
        """Execute the complete pipeline.

        1. Read and validate the genotype corpus
        2. Phase it with Clark's algorithm
        3. Write result files (if an output folder was given)
        """
        data = self.reader.read(self.config.input_path, self.config.input_format)

        result = self.driver.run(data.genotypes)

        if self.config.output_dir is not None:
            self.phasing_writer.write_all(self.config.output_dir, data, result)
            run_info_path = self.run_info_writer.write_run_info(
                self.config.output_dir, data, result, asdict(self.config)
            )
            if self.logger.isEnabledFor(logging.INFO):
                self.logger.info(f"Run information written: {run_info_path}")

        if self.logger.isEnabledFor(logging.INFO):
            final_memory = self.memory_monitor.get_memory_usage_mb()
            self.logger.info(f"Final memory usage: {final_memory:.1f}MB")

        return result
