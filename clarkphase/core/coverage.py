"""Checks whether a haplotype set reproduces genotypes under pairwise combination."""

from typing import Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from .sequences import (
    DEFAULT_ENCODING,
    DosageEncoding,
    Genotype,
    Haplotype,
    HaplotypeSet,
    InputConsistencyError,
    stack_sequences,
)

__all__ = [
    "find_generating_pair",
    "generates",
    "generates_all",
    "count_generated",
]

HaplotypeCollection = Union[HaplotypeSet, Sequence[Haplotype]]


def _haplotype_matrix(haplotypes: HaplotypeCollection) -> NDArray[np.integer]:
    if isinstance(haplotypes, HaplotypeSet):
        return haplotypes.as_matrix()
    return stack_sequences(list(haplotypes))


def _first_pair(
    matrix: NDArray[np.integer], genotype: Genotype, encoding: DosageEncoding
) -> Optional[Tuple[int, int]]:
    """Scan the upper triangle (j > i) one anchor row at a time."""
    n_haplotypes = matrix.shape[0]
    if n_haplotypes < 2:
        return None
    if matrix.shape[1] != len(genotype):
        raise InputConsistencyError(
            f"Genotype has {len(genotype)} loci but haplotypes have {matrix.shape[1]}"
        )
    target = genotype.snps
    for i in range(n_haplotypes - 1):
        combined = encoding.combine(matrix[i], matrix[i + 1 :])
        hits = np.flatnonzero((combined == target).all(axis=1))
        if hits.size:
            return i, i + 1 + int(hits[0])
    return None


def find_generating_pair(
    haplotypes: HaplotypeCollection,
    genotype: Genotype,
    encoding: DosageEncoding = DEFAULT_ENCODING,
) -> Optional[Tuple[int, int]]:
    """Return positions (i, j), i < j, of the first pair combining into ``genotype``.

    Example:
        >>> haps = [Haplotype([0, 0]), Haplotype([1, 0]), Haplotype([0, 1])]
        >>> find_generating_pair(haps, Genotype([1, 1]))
        (1, 2)
    """
    return _first_pair(_haplotype_matrix(haplotypes), genotype, encoding)


def generates(
    haplotypes: HaplotypeCollection,
    genotype: Genotype,
    encoding: DosageEncoding = DEFAULT_ENCODING,
) -> bool:
    """Whether two distinct positions of ``haplotypes`` combine into ``genotype``.

    A haplotype present once cannot pair with itself, so a homozygous
    genotype needs its haplotype at two positions of the set.
    """
    return find_generating_pair(haplotypes, genotype, encoding) is not None


def generates_all(
    haplotypes: HaplotypeCollection,
    genotypes: Sequence[Genotype],
    encoding: DosageEncoding = DEFAULT_ENCODING,
) -> bool:
    """Whether every genotype in ``genotypes`` is generated by ``haplotypes``."""
    matrix = _haplotype_matrix(haplotypes)
    return all(_first_pair(matrix, g, encoding) is not None for g in genotypes)


def count_generated(
    haplotypes: HaplotypeCollection,
    genotypes: Sequence[Genotype],
    encoding: DosageEncoding = DEFAULT_ENCODING,
) -> int:
    """Number of ``genotypes`` generated by ``haplotypes``."""
    matrix = _haplotype_matrix(haplotypes)
    return sum(1 for g in genotypes if _first_pair(matrix, g, encoding) is not None)
