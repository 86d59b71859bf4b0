"""Genotype corpus loading from matrix text files and VCF/BCF."""

import re
import sys
import logging
from pathlib import Path
from typing import Callable, List, Optional, Tuple
from dataclasses import dataclass

import pysam

from ..core.sequences import Genotype
from ..utils.memory_monitor import MemoryMonitor

__all__ = [
    "GenotypeData",
    "GenotypeReader",
    "infer_input_format",
    "gt_to_dosage",
]

VARIANT_SUFFIXES = (".vcf", ".vcf.gz", ".vcfz", ".bcf")
_SEPARATORS = re.compile(r"[\s,]+")
_INTEGER = re.compile(r"-?\d+")


@dataclass
class GenotypeData:
    """Genotype corpus with sample and locus labels.

    Attributes:
        samples: Sample names, one per genotype
        locus_ids: Locus identifiers, one per position
        genotypes: Genotype vectors in input order
        source_format: "matrix" or "vcf"
    """

    samples: List[str]
    locus_ids: List[str]
    genotypes: List[Genotype]
    source_format: str

    @property
    def num_loci(self) -> int:
        return len(self.locus_ids)


def infer_input_format(path: Path) -> str:
    """Infer input format from filename: "vcf" for VCF/BCF suffixes, else "matrix"."""
    name = str(path).lower()
    if name.endswith(VARIANT_SUFFIXES):
        return "vcf"
    return "matrix"


def gt_to_dosage(gt: Optional[Tuple[Optional[int], ...]]) -> Optional[int]:
    """Convert a pysam GT tuple to an alternate allele count.

    Returns None for missing or non-diploid calls.

    Example:
        >>> gt_to_dosage((0, 1))
        1
        >>> gt_to_dosage((1, 1))
        2
        >>> gt_to_dosage((None, None)) is None
        True
        >>> gt_to_dosage((1,)) is None
        True
    """
    if gt is None or len(gt) != 2 or any(a is None for a in gt):
        return None
    return sum(1 for a in gt if a == 1)


class GenotypeReader:
    """Reads and validates genotype corpora."""

    def __init__(
        self,
        memory_monitor: MemoryMonitor,
        logger: logging.Logger,
        shutdown_checker: Optional[Callable[[], bool]] = None,
    ):
        """Initialize genotype reader with memory monitoring and logging."""
        self.memory_monitor = memory_monitor
        self.logger = logger
        self.shutdown_checker = shutdown_checker

    def read(self, path: Path, input_format: str = "auto") -> GenotypeData:
        """Load a genotype corpus.

        Args:
            path: Path to the input file
            input_format: "auto", "matrix" or "vcf"

        Returns:
            GenotypeData with one genotype per sample

        Raises:
            SystemExit: If the file is malformed or holds no genotypes
        """
        fmt = infer_input_format(path) if input_format == "auto" else input_format
        if self.logger.isEnabledFor(logging.INFO):
            self.logger.info(f"Reading genotypes from {path} (format: {fmt})")

        if fmt == "vcf":
            data = self._read_variants(path)
        elif fmt == "matrix":
            data = self._read_matrix(path)
        else:
            sys.exit(f"ERROR: Unknown input format '{fmt}'")

        self.memory_monitor.check_memory_and_warn("genotype loading")
        self.memory_monitor.warn_for_large_corpus(len(data.genotypes), data.num_loci)

        if self.logger.isEnabledFor(logging.INFO):
            self.logger.info(
                f"Loaded {len(data.genotypes)} genotypes with {data.num_loci} loci"
            )
        return data

    def _read_matrix(self, path: Path) -> GenotypeData:
        """Parse one genotype per line, with an optional leading sample name."""
        samples: List[str] = []
        genotypes: List[Genotype] = []
        expected_length: Optional[int] = None

        try:
            with open(path, encoding="utf-8") as handle:
                lines = handle.read().splitlines()
        except UnicodeDecodeError as e:
            sys.exit(
                f"ERROR: Failed to read {path}: not a UTF-8 text file "
                f"(invalid byte at offset {e.start}). "
                "Use -I vcf for VCF/BCF input."
            )
        except OSError as e:
            sys.exit(f"ERROR: Failed to read {path}: {e}")

        for line_number, line in enumerate(lines, start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            tokens = [t for t in _SEPARATORS.split(line) if t]
            name = f"G{len(genotypes) + 1}"
            if len(tokens) > 1 and not _INTEGER.fullmatch(tokens[0]):
                name, tokens = tokens[0], tokens[1:]
            if len(tokens) == 1:
                # Compact form: one digit per locus, e.g. "0120"
                tokens = list(tokens[0])

            try:
                codes = [int(t) for t in tokens]
            except ValueError:
                sys.exit(
                    f"ERROR: Line {line_number}: Non-integer locus code in '{line}'. "
                    "Locus codes must be nonnegative integers."
                )
            if any(c < 0 for c in codes):
                sys.exit(
                    f"ERROR: Line {line_number}: Negative locus code in '{line}'."
                )

            if expected_length is None:
                expected_length = len(codes)
            elif len(codes) != expected_length:
                sys.exit(
                    f"ERROR: Line {line_number}: Invalid number of loci. "
                    f"Expected {expected_length}, found {len(codes)}."
                )

            samples.append(name)
            genotypes.append(Genotype(codes))

        if not genotypes:
            sys.exit(
                "ERROR: No genotypes found in input. "
                "Ensure the file contains one genotype per line."
            )

        return GenotypeData(
            samples=samples,
            locus_ids=[f"locus{i + 1}" for i in range(expected_length or 0)],
            genotypes=genotypes,
            source_format="matrix",
        )

    def _read_variants(self, path: Path) -> GenotypeData:
        """Parse a VCF/BCF; every sample becomes one genotype across all records."""
        try:
            vf = pysam.VariantFile(str(path))
        except (OSError, ValueError) as e:
            sys.exit(f"ERROR: Failed to read VCF/BCF via pysam: {e}")

        with vf:
            samples = list(vf.header.samples)
            if not samples:
                sys.exit("ERROR: VCF contains no samples; nothing to phase.")

            columns: List[List[int]] = [[] for _ in samples]
            locus_ids: List[str] = []

            for line_number, rec in enumerate(vf, start=1):
                if self.shutdown_checker and self.shutdown_checker():
                    if self.logger.isEnabledFor(logging.INFO):
                        self.logger.info(
                            "Graceful shutdown requested. Stopping VCF parsing."
                        )
                    break

                if rec.alts and len(rec.alts) > 1:
                    sys.exit(
                        f"ERROR: Line {line_number}: Multiallelic site detected "
                        f"(ALT='{','.join(rec.alts)}'). "
                        "Filter or split multiallelic sites before phasing."
                    )

                for sample_idx, sample in enumerate(samples):
                    gt = rec.samples[sample].get("GT")
                    if gt is not None and any(a is not None and a > 1 for a in gt):
                        sys.exit(
                            f"ERROR: Line {line_number}, Sample {sample}: "
                            f"Multiallelic genotype detected (GT={gt})."
                        )
                    dosage = gt_to_dosage(gt)
                    if dosage is None:
                        sys.exit(
                            f"ERROR: Line {line_number}, Sample {sample}: "
                            "Missing or non-diploid genotype. "
                            "Impute or filter missing calls before phasing."
                        )
                    columns[sample_idx].append(dosage)

                locus_ids.append(
                    rec.id if rec.id and rec.id != "." else f"{rec.chrom}:{rec.pos}"
                )
                if line_number % 10000 == 0 and self.logger.isEnabledFor(logging.INFO):
                    self.logger.info(f"Processed {line_number} variants...")

        if not locus_ids:
            sys.exit(
                "ERROR: No data lines found in VCF. "
                "Ensure VCF contains variant records."
            )

        return GenotypeData(
            samples=samples,
            locus_ids=locus_ids,
            genotypes=[Genotype(column) for column in columns],
            source_format="vcf",
        )
