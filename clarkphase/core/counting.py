"""Frequency queries over collections of SNP sequences."""

from typing import Sequence

import numpy as np

from .sequences import SNPSequence

__all__ = ["count_at", "count_total"]


def count_at(value: int, position: int, sequences: Sequence[SNPSequence]) -> int:
    """Count sequences whose locus at ``position`` equals ``value``.

    Example:
        >>> count_at(1, 0, [Genotype([1, 2]), Genotype([0, 1]), Genotype([1, 1])])
        2
    """
    return sum(1 for seq in sequences if seq[position] == value)


def count_total(value: int, sequences: Sequence[SNPSequence]) -> int:
    """Count occurrences of ``value`` over every locus of every sequence.

    Example:
        >>> count_total(1, [Genotype([1, 2]), Genotype([0, 1]), Genotype([1, 1])])
        4
    """
    return sum(int(np.count_nonzero(seq.snps == value)) for seq in sequences)
