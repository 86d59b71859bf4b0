"""Clark's haplotype inference driver."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, List, Optional, Protocol, Tuple

from tqdm import tqdm

from ..utils.memory_monitor import MemoryMonitor
from .consensus import build_consensus, consensus_vector
from .counting import count_total
from .coverage import count_generated, generates
from .sequences import (
    DEFAULT_ENCODING,
    DosageEncoding,
    Genotype,
    Haplotype,
    HaplotypeSet,
    validate_corpus,
)

__all__ = [
    "NonConvergenceError",
    "PhasingInterrupted",
    "PhasingState",
    "Escalation",
    "PhasingResult",
    "PhasingReporter",
    "PhasingDriver",
]

# Corpus size above which expansion passes show a progress bar
PROGRESS_MIN_GENOTYPES = 500


class NonConvergenceError(RuntimeError):
    """Exception raised when phasing stops making progress or exceeds its pass budget."""

    def __init__(self, reason: str, haplotype_count: int, generated: int, total: int):
        super().__init__(
            f"{reason}: haplotype list has {haplotype_count} entries and generates "
            f"{generated} of {total} genotypes"
        )
        self.haplotype_count = haplotype_count
        self.generated = generated
        self.total = total


class PhasingInterrupted(RuntimeError):
    """Exception raised when shutdown is requested during a run."""

    pass


class PhasingState(Enum):
    SEEDED = "seeded"
    EXPANDING = "expanding"
    STUCK = "stuck"
    DONE = "done"


@dataclass
class Escalation:
    """A consensus haplotype added after the expansion got stuck."""

    generated_before: int
    haplotype: Haplotype
    ungenerated: int


@dataclass
class PhasingResult:
    """Outcome of a completed phasing run.

    Attributes:
        haplotypes: Final haplotype set in insertion order
        genotypes: The phased corpus
        iterations: Number of expansion passes performed
        generated: Genotypes generated by the final set
        missing: Genotypes not generated by the final set
        escalations: Consensus haplotypes added when stuck, in order
        pass_history: Generated count recorded after every pass
    """

    haplotypes: HaplotypeSet
    genotypes: Tuple[Genotype, ...]
    iterations: int
    generated: int
    missing: int
    escalations: List[Escalation] = field(default_factory=list)
    pass_history: List[int] = field(default_factory=list)

    @property
    def seed(self) -> Haplotype:
        return self.haplotypes[0]


class PhasingReporter(Protocol):
    """Receives progress events from a phasing run."""

    def seed_selected(self, haplotype: Haplotype) -> None: ...

    def escalated(self, generated: int, haplotype: Haplotype) -> None: ...

    def finished(self, result: PhasingResult) -> None: ...


@dataclass
class _PhasingRun:
    """Mutable state owned by one call to ``PhasingDriver.run``."""

    corpus: Tuple[Genotype, ...]
    haplotypes: HaplotypeSet
    state: PhasingState = PhasingState.SEEDED
    iterations: int = 0
    generated: int = 0
    escalations: List[Escalation] = field(default_factory=list)
    pass_history: List[int] = field(default_factory=list)


class PhasingDriver:
    """Grows a haplotype set until it explains every genotype.

    Starting from a consensus seed, each expansion pass derives the missing
    parent of every ungenerated genotype from the first compatible haplotype.
    When a pass adds nothing new, a fresh consensus over the ungenerated
    genotypes is appended and expansion resumes.
    """

    def __init__(
        self,
        logger: logging.Logger,
        memory_monitor: Optional[MemoryMonitor] = None,
        encoding: DosageEncoding = DEFAULT_ENCODING,
        max_iterations: int = 10000,
        max_stalled_escalations: int = 2,
        shutdown_checker: Optional[Callable[[], bool]] = None,
        reporter: Optional[PhasingReporter] = None,
        show_progress: bool = True,
    ):
        """Initialize the driver with run limits and collaborators.

        Args:
            logger: Logger instance for output
            memory_monitor: Optional MemoryMonitor for memory checks
            encoding: Dosage encoding defining combination and derivation
            max_iterations: Maximum number of expansion passes
            max_stalled_escalations: Consecutive escalations without gain
                tolerated before aborting
            shutdown_checker: Optional function to check if shutdown was requested
            reporter: Optional receiver for seed, escalation and summary events
            show_progress: Whether to show progress bars for large corpora
        """
        if max_iterations < 1:
            raise ValueError("max_iterations must be >= 1")
        if max_stalled_escalations < 1:
            raise ValueError("max_stalled_escalations must be >= 1")
        self.logger = logger
        self.memory_monitor = memory_monitor
        self.encoding = encoding
        self.max_iterations = max_iterations
        self.max_stalled_escalations = max_stalled_escalations
        self.shutdown_checker = shutdown_checker
        self.reporter = reporter
        self.show_progress = show_progress

    def run(self, genotypes: Iterable[Genotype]) -> PhasingResult:
        """Phase ``genotypes`` and return the final haplotype set.

        Raises:
            InputConsistencyError: If the corpus is empty or inconsistent
            NonConvergenceError: If the pass budget is exhausted or
                escalations stop making progress
            PhasingInterrupted: If shutdown was requested
        """
        corpus = validate_corpus(genotypes, self.encoding)
        if self.logger.isEnabledFor(logging.INFO):
            self.logger.info(
                f"Phasing {len(corpus)} genotypes over {len(corpus[0])} loci..."
            )
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(
                f"Heterozygous calls in corpus: {count_total(1, corpus)}; "
                f"consensus vector: {consensus_vector(corpus, self.encoding).tolist()}"
            )
        if self.memory_monitor:
            self.memory_monitor.check_memory_and_warn("phasing start")

        seed = build_consensus(corpus, self.encoding)
        run = _PhasingRun(corpus=corpus, haplotypes=HaplotypeSet())
        run.haplotypes.append(seed, HaplotypeSet.SEED)
        if self.reporter:
            self.reporter.seed_selected(seed)

        self._expand_to_fixed_point(run)

        stalled = 0
        while run.generated < len(corpus):
            run.state = PhasingState.STUCK
            before = run.generated
            self._escalate(run)
            self._expand_to_fixed_point(run)
            if run.generated > before:
                stalled = 0
                continue
            stalled += 1
            if self.logger.isEnabledFor(logging.DEBUG):
                self.logger.debug(
                    f"Escalation made no progress ({stalled}/"
                    f"{self.max_stalled_escalations} in a row)"
                )
            if stalled >= self.max_stalled_escalations:
                raise NonConvergenceError(
                    f"No progress after {stalled} consecutive consensus escalations",
                    len(run.haplotypes),
                    run.generated,
                    len(corpus),
                )

        run.state = PhasingState.DONE
        result = PhasingResult(
            haplotypes=run.haplotypes,
            genotypes=corpus,
            iterations=run.iterations,
            generated=run.generated,
            missing=len(corpus) - run.generated,
            escalations=run.escalations,
            pass_history=run.pass_history,
        )
        if self.logger.isEnabledFor(logging.INFO):
            self.logger.info(
                f"Phasing complete: {len(run.haplotypes)} haplotypes explain "
                f"{run.generated} genotypes after {run.iterations} pass(es)"
            )
        if self.memory_monitor:
            self.memory_monitor.check_memory_and_warn("phasing complete")
        if self.reporter:
            self.reporter.finished(result)
        return result

    def _expand_to_fixed_point(self, run: _PhasingRun) -> None:
        run.state = PhasingState.EXPANDING
        previous = run.generated
        while True:
            if self.shutdown_checker and self.shutdown_checker():
                if self.logger.isEnabledFor(logging.INFO):
                    self.logger.info("Graceful shutdown requested. Stopping phasing.")
                raise PhasingInterrupted(
                    f"Phasing interrupted after {run.iterations} pass(es)"
                )
            if run.iterations >= self.max_iterations:
                raise NonConvergenceError(
                    f"Exceeded {self.max_iterations} expansion passes",
                    len(run.haplotypes),
                    run.generated,
                    len(run.corpus),
                )

            added = self._expansion_pass(run)
            run.iterations += 1
            run.generated = count_generated(run.haplotypes, run.corpus, self.encoding)
            run.pass_history.append(run.generated)

            if self.logger.isEnabledFor(logging.DEBUG):
                self.logger.debug(
                    f"Pass {run.iterations}: added {added} haplotype(s), "
                    f"{run.generated}/{len(run.corpus)} genotypes generated"
                )
            if run.generated == previous:
                return
            previous = run.generated

    def _expansion_pass(self, run: _PhasingRun) -> int:
        """Derive at most one new haplotype per ungenerated genotype."""
        corpus: Iterable[Genotype] = run.corpus
        if self.show_progress and len(run.corpus) > PROGRESS_MIN_GENOTYPES:
            corpus = tqdm(
                run.corpus,
                desc=f"Expansion pass {run.iterations + 1}",
                unit="genotype",
                leave=False,
            )

        added = 0
        for genotype in corpus:
            if generates(run.haplotypes, genotype, self.encoding):
                continue
            parent = self._first_parent_pair(genotype, run.haplotypes)
            if parent is not None:
                run.haplotypes.append(parent, HaplotypeSet.DERIVED)
                added += 1
        return added

    def _first_parent_pair(
        self, genotype: Genotype, haplotypes: Iterable[Haplotype]
    ) -> Optional[Haplotype]:
        candidates = (genotype.parent_pair_of(h, self.encoding) for h in haplotypes)
        return next((c for c in candidates if c is not None), None)

    def _escalate(self, run: _PhasingRun) -> None:
        """Append a consensus built from the genotypes still unexplained."""
        ungenerated = [
            g for g in run.corpus if not generates(run.haplotypes, g, self.encoding)
        ]
        haplotype = build_consensus(ungenerated, self.encoding)
        run.haplotypes.append(haplotype, HaplotypeSet.CONSENSUS)
        run.escalations.append(
            Escalation(
                generated_before=run.generated,
                haplotype=haplotype,
                ungenerated=len(ungenerated),
            )
        )
        if self.logger.isEnabledFor(logging.INFO):
            self.logger.info(
                f"Expansion stuck at {run.generated}/{len(run.corpus)} genotypes; "
                f"adding consensus of {len(ungenerated)} ungenerated genotype(s)"
            )
        if self.reporter:
            self.reporter.escalated(run.generated, haplotype)
