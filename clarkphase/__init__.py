"""clarkphase - haplotype inference from diploid genotypes.

A Python package implementing Clark's greedy phasing heuristic: a consensus
haplotype seeds the search, complementary parents are derived until no new
genotype can be explained, and fresh consensus seeds are added when stuck.
"""

from .version import __version__
from .app import PhasingApp, PhasingConfig
from .core.sequences import Genotype, Haplotype, HaplotypeSet, DosageEncoding
from .core.phasing import PhasingDriver, PhasingResult
from .io.genotype_reader import GenotypeReader, GenotypeData
from .utils.memory_monitor import MemoryMonitor

__all__ = [
    "__version__",
    "PhasingApp",
    "PhasingConfig",
    "Genotype",
    "Haplotype",
    "HaplotypeSet",
    "DosageEncoding",
    "PhasingDriver",
    "PhasingResult",
    "GenotypeReader",
    "GenotypeData",
    "MemoryMonitor",
]
