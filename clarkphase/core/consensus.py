"""Consensus haplotype construction."""

from typing import Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from .sequences import DEFAULT_ENCODING, DosageEncoding, Genotype, Haplotype, stack_sequences

__all__ = ["consensus_vector", "build_consensus"]


def consensus_vector(
    genotypes: Sequence[Genotype], encoding: DosageEncoding = DEFAULT_ENCODING
) -> Optional[NDArray[np.int64]]:
    """Elementwise dosage sum over ``genotypes`` with zero sums replaced.

    Positions whose sum is exactly 0 take ``encoding.consensus_fallback``.

    Args:
        genotypes: Genotypes of identical length
        encoding: Dosage encoding supplying the fallback constant

    Returns:
        Raw consensus vector, or None for an empty collection

    Raises:
        InputConsistencyError: If genotype lengths differ
    """
    if len(genotypes) == 0:
        return None
    raw = stack_sequences(genotypes).sum(axis=0, dtype=np.int64)
    raw[raw == 0] = encoding.consensus_fallback
    return raw


def build_consensus(
    genotypes: Sequence[Genotype], encoding: DosageEncoding = DEFAULT_ENCODING
) -> Optional[Haplotype]:
    """Build the haplotype likely to share the most with ``genotypes``.

    The haplotype carries the consensus vector itself: summed dosages, with
    the encoding's fallback at loci no genotype carries.

    Example:
        >>> build_consensus([Genotype([2, 1, 0]), Genotype([0, 1, 2])])
        Haplotype('222')
        >>> build_consensus([Genotype([0, 1, 2]), Genotype([0, 1, 2])])
        Haplotype('124')
        >>> build_consensus([]) is None
        True
    """
    raw = consensus_vector(genotypes, encoding)
    if raw is None:
        return None
    return Haplotype(raw)
