"""Input/Output modules for file operations."""

from .genotype_reader import GenotypeReader, GenotypeData, infer_input_format
from .console_reporter import ConsoleReporter
from .phasing_writer import PhasingWriter
from .run_info_writer import RunInfoWriter

__all__ = [
    "GenotypeReader",
    "GenotypeData",
    "infer_input_format",
    "ConsoleReporter",
    "PhasingWriter",
    "RunInfoWriter",
]
