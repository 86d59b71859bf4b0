"""Core phasing modules for clarkphase."""

from .sequences import (
    InputConsistencyError,
    DosageEncoding,
    DEFAULT_ENCODING,
    SNPSequence,
    Genotype,
    Haplotype,
    HaplotypeSet,
    combine,
    derive_parent,
    validate_corpus,
)
from .counting import count_at, count_total
from .consensus import build_consensus, consensus_vector
from .coverage import find_generating_pair, generates, generates_all, count_generated
from .phasing import (
    NonConvergenceError,
    PhasingInterrupted,
    PhasingState,
    PhasingResult,
    PhasingDriver,
)

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
    "validate_corpus",
    "count_at",
    "count_total",
    "build_consensus",
    "consensus_vector",
    "find_generating_pair",
    "generates",
    "generates_all",
    "count_generated",
    "NonConvergenceError",
    "PhasingInterrupted",
    "PhasingState",
    "PhasingResult",
    "PhasingDriver",
]
