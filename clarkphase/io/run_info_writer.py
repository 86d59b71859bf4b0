"""Run information file output operations."""

import datetime
import platform
from pathlib import Path

from ..core.counting import count_at, count_total
from ..core.phasing import PhasingResult
from ..utils.memory_monitor import MemoryMonitor
from ..version import __version__ as clarkphase_version
from .genotype_reader import GenotypeData

__all__ = ["RunInfoWriter"]

RUN_INFO_FILENAME = "run_info.txt"


class RunInfoWriter:
    """Handles run information file output."""

    def __init__(self, memory_monitor: MemoryMonitor):
        """Initialize run info writer with memory monitor.

        Args:
            memory_monitor: MemoryMonitor instance for tracking memory usage
        """
        self.memory_monitor = memory_monitor

    def write_run_info(
        self,
        output_dir: Path,
        data: GenotypeData,
        result: PhasingResult,
        config_data: dict,
    ) -> Path:
        """Write run information to ``output_dir/run_info.txt``.

        Args:
            output_dir: Path to output directory
            data: Genotype corpus that was phased
            result: Completed phasing result
            config_data: Dictionary containing configuration information

        Example:
            >>> writer = RunInfoWriter(memory_monitor)
            >>> config = {"input_path": "corpus.txt", "max_iterations": 10000, ...}
            >>> writer.write_run_info(Path("output"), data, result, config)
            PosixPath('output/run_info.txt')
        """
        run_info_path = output_dir / RUN_INFO_FILENAME
        timestamp = datetime.datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        memory_summary = self.memory_monitor.get_memory_summary()
        threshold_info = self.memory_monitor.get_threshold_info()
        estimated_mb = self.memory_monitor.estimate_corpus_memory_mb(
            len(data.genotypes), data.num_loci
        )

        het_calls = count_total(1, data.genotypes)
        loci_without_het = sum(
            1
            for position in range(data.num_loci)
            if count_at(1, position, data.genotypes) == 0
        )

        lines = [
            "clarkphase Run Information",
            "==========================",
            "",
            f"Version: {clarkphase_version}",
            f"Python version: {platform.python_version()}",
            f"Platform: {platform.platform()}",
            "",
            f"Run timestamp: {timestamp}",
            "",
            "System Memory Information:",
            f"  Current process memory: {memory_summary['current_mb']:.1f} MB",
            f"  Peak process memory: {memory_summary['peak_mb']:.1f} MB",
            f"  Available system memory: {memory_summary['available_mb']:.1f} MB",
            f"  Total system memory: {memory_summary['total_mb']:.1f} MB",
            f"  Memory warning threshold: {memory_summary['warning_threshold_mb']:.1f} MB ({threshold_info['warning_percent']:.0f}%)",
            f"  Critical threshold: {memory_summary['critical_threshold_mb']:.1f} MB ({threshold_info['critical_percent']:.0f}%)",
            f"  Estimated corpus memory: {estimated_mb:.1f} MB",
            "",
            "Input Configuration:",
            f"  Input file: {config_data['input_path']}",
            f"  Input format: {config_data['input_format']} (read as {data.source_format})",
            f"  Output directory: {config_data['output_dir']}",
            f"  Max iterations: {config_data['max_iterations']}",
            f"  Max stalled escalations: {config_data['max_stalled_escalations']}",
            f"  Consensus fallback: {config_data['consensus_fallback']}",
            f"  Log level: {config_data['log_level'] or 'default'}",
            f"  Log format: {config_data['log_format']}",
            "",
            "Input Data Summary:",
            f"  Number of genotypes: {len(data.genotypes)}",
            f"  Number of loci: {data.num_loci}",
            f"  Heterozygous calls: {het_calls}",
            f"  Loci without heterozygous calls: {loci_without_het}",
            "",
            "Phasing Summary:",
            f"  Expansion passes: {result.iterations}",
            f"  Consensus escalations: {len(result.escalations)}",
            f"  Haplotypes: {len(result.haplotypes)}",
            f"  Distinct haplotypes: {len(set(result.haplotypes))}",
            f"  Genotypes generated: {result.generated}",
            f"  Genotypes missing: {result.missing}",
        ]

        output_dir.mkdir(parents=True, exist_ok=True)
        with open(run_info_path, "w", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")

        return run_info_path
