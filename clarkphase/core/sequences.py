"""SNP sequence types, dosage encoding and the haplotype working set."""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

__all__ = [
    "InputConsistencyError",
    "DosageEncoding",
    "DEFAULT_ENCODING",
    "SNPSequence",
    "Genotype",
    "Haplotype",
    "HaplotypeSet",
    "combine",
    "derive_parent",
    "stack_sequences",
    "validate_corpus",
]

LOCUS_DTYPE = np.int8
# Consensus haplotypes carry summed dosages that can outgrow int8
WIDE_LOCUS_DTYPE = np.int32


class InputConsistencyError(ValueError):
    """Exception raised when input sequences cannot take part in one run."""

    pass


@dataclass(frozen=True)
class DosageEncoding:
    """Additive diploid dosage encoding.

    Genotype codes count alternate alleles (0, 1, 2). Two haplotypes combine
    into the genotype given by their elementwise sum. Derived haplotypes
    carry alleles 0 (reference) or 1 (alternate); a consensus haplotype
    carries the summed dosages of the genotypes it summarizes, with all-zero
    sums replaced by ``consensus_fallback``.

    Attributes:
        genotype_codes: Valid genotype locus codes
        haplotype_alleles: Valid values of a derived haplotype
        consensus_fallback: Replacement for all-zero consensus sums

    Example:
        >>> enc = DosageEncoding()
        >>> enc.combine(np.array([0, 1, 1]), np.array([1, 1, 0]))
        array([1, 2, 1])
    """

    genotype_codes: Tuple[int, ...] = (0, 1, 2)
    haplotype_alleles: Tuple[int, ...] = (0, 1)
    consensus_fallback: int = 1

    def combine(self, first: NDArray, second: NDArray) -> NDArray:
        """Combine haplotype locus vectors; broadcasts over stacked rows."""
        return np.add(first, second, dtype=np.int64)

    def complement(self, genotype: NDArray, haplotype: NDArray) -> Optional[NDArray]:
        """Return the haplotype that pairs with ``haplotype`` into ``genotype``.

        Returns None when ``haplotype`` is inconsistent with ``genotype`` at
        any locus, i.e. when the difference leaves the derived alleles.
        """
        other = genotype.astype(np.int64) - haplotype
        if not np.isin(other, self.haplotype_alleles).all():
            return None
        return other

    def validate_genotype(self, genotype: "Genotype", index: int = 0) -> None:
        invalid = ~np.isin(genotype.snps, self.genotype_codes)
        if invalid.any():
            position = int(np.flatnonzero(invalid)[0])
            raise InputConsistencyError(
                f"Genotype {index + 1} has code {genotype[position]} at locus "
                f"{position + 1}; expected one of {list(self.genotype_codes)}"
            )


DEFAULT_ENCODING = DosageEncoding()


class SNPSequence:
    """Immutable fixed-length vector of SNP locus codes with value equality."""

    __slots__ = ("_snps",)

    def __init__(self, snps: Iterable[int]):
        values = np.asarray(list(snps) if not isinstance(snps, np.ndarray) else snps)
        if values.ndim != 1 or values.size == 0:
            raise InputConsistencyError(
                f"{type(self).__name__} needs a non-empty one-dimensional locus vector"
            )
        if not np.issubdtype(values.dtype, np.integer):
            raise InputConsistencyError(
                f"{type(self).__name__} locus codes must be integers, got {values.dtype}"
            )
        if values.min() < 0 or values.max() > np.iinfo(WIDE_LOCUS_DTYPE).max:
            raise InputConsistencyError(
                f"{type(self).__name__} locus codes must be nonnegative integers "
                f"no greater than {np.iinfo(WIDE_LOCUS_DTYPE).max}"
            )
        # Storage width depends only on the values, so equal sequences hash alike
        if values.max() <= np.iinfo(LOCUS_DTYPE).max:
            self._snps = values.astype(LOCUS_DTYPE)
        else:
            self._snps = values.astype(WIDE_LOCUS_DTYPE)
        self._snps.flags.writeable = False

    @property
    def snps(self) -> NDArray[np.integer]:
        """Read-only locus vector."""
        return self._snps

    def __len__(self) -> int:
        return int(self._snps.size)

    def __getitem__(self, position: int) -> int:
        return int(self._snps[position])

    def __iter__(self) -> Iterator[int]:
        return (int(v) for v in self._snps)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return np.array_equal(self._snps, other._snps)  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._snps.tobytes()))

    def __str__(self) -> str:
        # Compact digits ("0120") unless some code needs more than one digit
        separator = "" if self._snps.max() < 10 else " "
        return separator.join(str(v) for v in self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self}')"


class Genotype(SNPSequence):
    """Observed diploid SNP pattern."""

    __slots__ = ()

    def parent_pair_of(
        self, haplotype: "Haplotype", encoding: DosageEncoding = DEFAULT_ENCODING
    ) -> Optional["Haplotype"]:
        """Return the haplotype completing ``haplotype`` into this genotype, if any.

        Example:
            >>> Genotype([2, 1, 0]).parent_pair_of(Haplotype([1, 0, 0]))
            Haplotype('110')
            >>> Genotype([2, 1, 0]).parent_pair_of(Haplotype([0, 0, 0])) is None
            True
        """
        return derive_parent(self, haplotype, encoding)


class Haplotype(SNPSequence):
    """Candidate haploid SNP pattern."""

    __slots__ = ()

    def combine_with(
        self, other: "Haplotype", encoding: DosageEncoding = DEFAULT_ENCODING
    ) -> Genotype:
        return combine(self, other, encoding)


def _check_same_length(first: SNPSequence, second: SNPSequence) -> None:
    if len(first) != len(second):
        raise InputConsistencyError(
            f"Sequence lengths differ: {len(first)} vs {len(second)} loci"
        )


def combine(
    first: Haplotype, second: Haplotype, encoding: DosageEncoding = DEFAULT_ENCODING
) -> Genotype:
    """Genotype produced by pairing two haplotypes."""
    _check_same_length(first, second)
    return Genotype(encoding.combine(first.snps, second.snps))


def derive_parent(
    genotype: Genotype,
    haplotype: Haplotype,
    encoding: DosageEncoding = DEFAULT_ENCODING,
) -> Optional[Haplotype]:
    """Unique complement of ``haplotype`` within ``genotype``, or None."""
    _check_same_length(genotype, haplotype)
    other = encoding.complement(genotype.snps, haplotype.snps)
    if other is None:
        return None
    return Haplotype(other)


def stack_sequences(sequences: Sequence[SNPSequence]) -> NDArray[np.integer]:
    """Stack sequences into a (n, L) matrix, rejecting mixed lengths.

    Raises:
        InputConsistencyError: If sequence lengths differ
    """
    if not sequences:
        return np.zeros((0, 0), dtype=LOCUS_DTYPE)
    expected = len(sequences[0])
    for index, seq in enumerate(sequences):
        if len(seq) != expected:
            raise InputConsistencyError(
                f"{type(seq).__name__} {index + 1} has {len(seq)} loci, "
                f"expected {expected}"
            )
    return np.vstack([seq.snps for seq in sequences])


def validate_corpus(
    genotypes: Iterable[Genotype], encoding: DosageEncoding = DEFAULT_ENCODING
) -> Tuple[Genotype, ...]:
    """Return the corpus as a tuple after checking it can be phased.

    Raises:
        InputConsistencyError: If the corpus is empty, has mixed lengths or
            holds codes outside the encoding
    """
    corpus = tuple(genotypes)
    if not corpus:
        raise InputConsistencyError("Genotype corpus is empty; nothing to phase")
    stack_sequences(corpus)
    for index, genotype in enumerate(corpus):
        encoding.validate_genotype(genotype, index)
    return corpus


class HaplotypeSet:
    """Append-only, insertion-ordered haplotype collection owned by one run.

    Equal values may appear more than once; a homozygous genotype is only
    covered when its haplotype sits at two distinct positions.
    """

    SEED = "seed"
    DERIVED = "derived"
    CONSENSUS = "consensus"

    def __init__(self) -> None:
        self._haplotypes: List[Haplotype] = []
        self._origins: List[str] = []
        self._matrix: Optional[NDArray[np.integer]] = None

    def append(self, haplotype: Haplotype, origin: str = DERIVED) -> None:
        if self._haplotypes and len(haplotype) != len(self._haplotypes[0]):
            raise InputConsistencyError(
                f"Haplotype has {len(haplotype)} loci, "
                f"expected {len(self._haplotypes[0])}"
            )
        self._haplotypes.append(haplotype)
        self._origins.append(origin)
        self._matrix = None

    def __len__(self) -> int:
        return len(self._haplotypes)

    def __iter__(self) -> Iterator[Haplotype]:
        return iter(self._haplotypes)

    def __getitem__(self, index: int) -> Haplotype:
        return self._haplotypes[index]

    @property
    def origins(self) -> Tuple[str, ...]:
        return tuple(self._origins)

    def as_matrix(self) -> NDArray[np.integer]:
        """Stacked locus matrix, rebuilt only after appends."""
        if self._matrix is None:
            self._matrix = stack_sequences(self._haplotypes)
        return self._matrix
