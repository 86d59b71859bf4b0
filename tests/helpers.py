import subprocess
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence


def _project_root() -> Path:
    # helpers.py resides in tests/, go one level up
    return Path(__file__).resolve().parents[1]


def write_genotype_matrix(
    path: Path, rows: Sequence[Sequence[int]], names: Optional[List[str]] = None
) -> Path:
    """Write a matrix genotype file, one whitespace-separated genotype per line."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        f.write("# generated by clarkphase tests\n")
        for i, row in enumerate(rows):
            codes = " ".join(str(c) for c in row)
            f.write(f"{names[i]} {codes}\n" if names else codes + "\n")
    return path


def write_vcf(path: Path, samples: List[str], variants: List[Dict]) -> Path:
    """
    Write a minimal VCF with provided variants.

    Each variant dict must contain keys:
      - id (str)
      - genotypes (List[str]) aligned to samples order
    and may contain chrom, pos, ref, alt.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        f.write("##fileformat=VCFv4.2\n")
        f.write("##source=clarkphase-tests\n")
        f.write("##contig=<ID=1>\n")
        f.write('##FORMAT=<ID=GT,Number=1,Type=String,Description="Genotype">\n')
        f.write(
            "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\t"
            + "\t".join(samples)
            + "\n"
        )
        for i, v in enumerate(variants, start=1):
            line = [
                v.get("chrom", "1"),
                str(v.get("pos", i * 100)),
                v["id"],
                v.get("ref", "A"),
                v.get("alt", "T"),
                ".",
                "PASS",
                ".",
                "GT",
            ]
            line += v["genotypes"]
            f.write("\t".join(line) + "\n")
    return path


def run_clarkphase(*args: str, check: bool = True) -> subprocess.CompletedProcess:
    """Run the CLI in a subprocess and capture its output."""
    cmd = [sys.executable, "-m", "clarkphase", *[str(a) for a in args]]
    return subprocess.run(
        cmd,
        check=check,
        cwd=_project_root(),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )


# Seed 121 derives 000; the duplicate 000 covers the homozygous genotypes
CONVERGING_CORPUS = [
    [0, 0, 0],
    [1, 2, 1],
    [0, 0, 0],
]

# Seed 222 is consistent with neither genotype; every escalation repeats it
STALLING_CORPUS = [
    [2, 1, 0],
    [0, 1, 2],
]
