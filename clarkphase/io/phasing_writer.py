"""TSV output of inferred haplotypes and per-sample phase assignments."""

import logging
from pathlib import Path
from typing import List, Optional

from ..core.coverage import find_generating_pair
from ..core.phasing import PhasingResult
from ..core.sequences import DEFAULT_ENCODING, DosageEncoding
from .genotype_reader import GenotypeData

__all__ = ["PhasingWriter"]

HAPLOTYPES_FILENAME = "haplotypes.tsv"
PHASED_GENOTYPES_FILENAME = "phased_genotypes.tsv"


class PhasingWriter:
    """Handles TSV output of phasing results."""

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        encoding: DosageEncoding = DEFAULT_ENCODING,
    ):
        self.logger = logger or logging.getLogger(__name__)
        self.encoding = encoding

    def write_haplotypes(self, output_path: Path, result: PhasingResult) -> Path:
        """Write the haplotype set in insertion order.

        Example output format:
            index	origin	haplotype
            1	seed	0000
            2	derived	1001
        """
        lines = ["\t".join(["index", "origin", "haplotype"])]
        for index, (haplotype, origin) in enumerate(
            zip(result.haplotypes, result.haplotypes.origins), start=1
        ):
            lines.append("\t".join([str(index), origin, str(haplotype)]))

        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")
        return output_path

    def write_phased_genotypes(
        self, output_path: Path, data: GenotypeData, result: PhasingResult
    ) -> Path:
        """Write, for every sample, the 1-based indices of its haplotype pair.

        Samples whose genotype is not generated get ``NA`` in both columns.
        """
        lines = ["\t".join(["sample", "genotype", "haplotype_a", "haplotype_b"])]
        unresolved = 0
        for sample, genotype in zip(data.samples, data.genotypes):
            pair = find_generating_pair(result.haplotypes, genotype, self.encoding)
            if pair is None:
                unresolved += 1
                first, second = "NA", "NA"
            else:
                first, second = str(pair[0] + 1), str(pair[1] + 1)
            lines.append("\t".join([sample, str(genotype), first, second]))

        if unresolved and self.logger.isEnabledFor(logging.WARNING):
            self.logger.warning(f"{unresolved} sample(s) have no haplotype pair")

        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")
        return output_path

    def write_all(
        self, output_dir: Path, data: GenotypeData, result: PhasingResult
    ) -> List[Path]:
        """Write both TSV files into ``output_dir`` (created if absent)."""
        if self.logger.isEnabledFor(logging.INFO):
            self.logger.info(f"Writing phasing results to: {output_dir}")
        written = [
            self.write_haplotypes(output_dir / HAPLOTYPES_FILENAME, result),
            self.write_phased_genotypes(
                output_dir / PHASED_GENOTYPES_FILENAME, data, result
            ),
        ]
        if self.logger.isEnabledFor(logging.DEBUG):
            for path in written:
                self.logger.debug(f"Wrote {path}")
        return written
