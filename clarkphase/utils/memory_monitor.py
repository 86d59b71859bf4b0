"""Memory usage monitoring and warning system."""

import logging
from typing import Dict

import psutil

__all__ = ["MemoryMonitor"]

# Bytes per stored locus code (int8 vectors)
BYTES_PER_LOCUS = 1


class MemoryMonitor:
    """Utility class for monitoring memory usage and providing warnings."""

    # Dynamic threshold percentages of total system memory
    WARNING_THRESHOLD_PERCENT = 50.0
    CRITICAL_THRESHOLD_PERCENT = 90.0

    def __init__(self, logger: logging.Logger):
        """Initialize memory monitor with logger and dynamic thresholds.

        Args:
            logger: Logger instance for output

        Example:
            >>> from clarkphase.utils.logging_setup import setup_logger
            >>> logger = setup_logger("memory_monitor")
            >>> monitor = MemoryMonitor(logger)
            >>> print(f"Warning threshold: {monitor.warning_threshold_mb:.1f}MB")
            Warning threshold: 8192.0MB
        """
        self.logger = logger
        self.process = psutil.Process()

        total_memory_mb = psutil.virtual_memory().total / 1024 / 1024
        self.warning_threshold_mb = total_memory_mb * (
            self.WARNING_THRESHOLD_PERCENT / 100
        )
        self.critical_threshold_mb = total_memory_mb * (
            self.CRITICAL_THRESHOLD_PERCENT / 100
        )

        self.logger.debug(
            f"Memory thresholds calculated: Warning={self.warning_threshold_mb:.1f}MB "
            f"({self.WARNING_THRESHOLD_PERCENT}%), Critical={self.critical_threshold_mb:.1f}MB "
            f"({self.CRITICAL_THRESHOLD_PERCENT}%) of {total_memory_mb:.1f}MB total"
        )

    def get_memory_usage_mb(self) -> float:
        """Get current process memory usage (RSS) in MB."""
        rss: int = self.process.memory_info().rss
        return float(rss / 1024 / 1024)

    def get_peak_memory_usage_mb(self) -> float:
        """Get peak memory usage in MB, or current usage if the platform lacks it."""
        memory_info = self.process.memory_info()
        peak_bytes = getattr(memory_info, "peak_wset", None) or memory_info.rss
        return float(peak_bytes / 1024 / 1024)

    def get_available_memory_mb(self) -> float:
        available: int = psutil.virtual_memory().available
        return float(available / 1024 / 1024)

    def check_memory_and_warn(self, operation: str = "operation") -> None:
        """Check current memory usage and warn if approaching limits.

        Args:
            operation: Name of operation being performed (for logging context)
        """
        current_mb = self.get_memory_usage_mb()
        available_mb = self.get_available_memory_mb()

        if current_mb > self.critical_threshold_mb:
            self.logger.warning(
                f"CRITICAL: High memory usage during {operation}: {current_mb:.1f}MB "
                f"(>{self.critical_threshold_mb:.1f}MB threshold). "
                f"Available: {available_mb:.1f}MB. Consider phasing a smaller corpus."
            )
        elif current_mb > self.warning_threshold_mb:
            self.logger.warning(
                f"WARNING: Elevated memory usage during {operation}: {current_mb:.1f}MB "
                f"(>{self.warning_threshold_mb:.1f}MB threshold). "
                f"Available: {available_mb:.1f}MB. Monitor for potential issues."
            )
        else:
            self.logger.debug(f"Memory usage during {operation}: {current_mb:.1f}MB")

    def estimate_corpus_memory_mb(self, num_genotypes: int, num_loci: int) -> float:
        """Estimate memory for the corpus plus a worst-case haplotype set in MB.

        Every genotype contributes at most one derived haplotype per pass, so
        the haplotype matrix is bounded by a small multiple of the corpus.

        Example:
            >>> monitor = MemoryMonitor(logger)
            >>> f"{monitor.estimate_corpus_memory_mb(100000, 1000):.1f}"
            '286.1'
        """
        matrix_bytes = num_genotypes * num_loci * BYTES_PER_LOCUS
        return matrix_bytes * 3 / 1024 / 1024

    def get_threshold_info(self) -> Dict[str, float]:
        return {
            "warning_threshold_mb": self.warning_threshold_mb,
            "critical_threshold_mb": self.critical_threshold_mb,
            "warning_percent": self.WARNING_THRESHOLD_PERCENT,
            "critical_percent": self.CRITICAL_THRESHOLD_PERCENT,
            "total_memory_mb": psutil.virtual_memory().total / 1024 / 1024,
        }

    def warn_for_large_corpus(self, num_genotypes: int, num_loci: int) -> None:
        """Warn user about potential memory issues with large corpora.

        Args:
            num_genotypes: Number of genotypes in the corpus
            num_loci: Number of loci per genotype
        """
        estimated_mb = self.estimate_corpus_memory_mb(num_genotypes, num_loci)
        available_mb = self.get_available_memory_mb()

        if estimated_mb > available_mb * 0.8:
            self.logger.warning(
                f"MEMORY WARNING: Corpus ({num_genotypes} genotypes × {num_loci} loci) "
                f"may require ~{estimated_mb:.1f}MB memory, but only {available_mb:.1f}MB available. "
                "Consider splitting the loci into windows."
            )
        elif estimated_mb > self.warning_threshold_mb:
            self.logger.warning(
                f"Large corpus detected ({num_genotypes} genotypes × {num_loci} loci). "
                f"Estimated memory usage ~{estimated_mb:.1f}MB exceeds warning threshold "
                f"({self.warning_threshold_mb:.1f}MB). Monitor memory usage carefully."
            )
        elif estimated_mb > self.warning_threshold_mb * 0.5:
            self.logger.info(
                f"Large corpus detected ({num_genotypes} genotypes × {num_loci} loci). "
                f"Estimated memory usage: ~{estimated_mb:.1f}MB"
            )

    def get_memory_summary(self) -> Dict[str, float]:
        """Get current, peak, available, and threshold memory information."""
        return {
            "current_mb": self.get_memory_usage_mb(),
            "peak_mb": self.get_peak_memory_usage_mb(),
            "available_mb": self.get_available_memory_mb(),
            "total_mb": psutil.virtual_memory().total / 1024 / 1024,
            "warning_threshold_mb": self.warning_threshold_mb,
            "critical_threshold_mb": self.critical_threshold_mb,
        }
