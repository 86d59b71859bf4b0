"""Console report of a phasing run."""

import sys
from typing import Optional, TextIO

from ..core.phasing import PhasingResult
from ..core.sequences import Haplotype

__all__ = ["ConsoleReporter"]


class ConsoleReporter:
    """Prints seed, escalation and summary lines to stdout.

    Example:
        >>> reporter = ConsoleReporter()
        >>> reporter.escalated(3, Haplotype([0, 1, 1]))
        Adding another common haplotype (from 3 generated): 011
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def _write(self, line: str) -> None:
        out = self.stream or sys.stdout
        out.write(line + "\n")
        out.flush()

    def seed_selected(self, haplotype: Haplotype) -> None:
        self._write(f"Initial common haplotype: {haplotype}")

    def escalated(self, generated: int, haplotype: Haplotype) -> None:
        self._write(
            f"Adding another common haplotype (from {generated} generated): {haplotype}"
        )

    def finished(self, result: PhasingResult) -> None:
        self._write(
            f"After {result.iterations} run(s), haplotype list has "
            f"{len(result.haplotypes)} entries and generates {result.generated} "
            f"genotypes; still missing {result.missing} genotypes"
        )
