"""Command-line interface for clarkphase."""

import argparse
import logging
import signal
import sys
from pathlib import Path
import subprocess
import platform

from .app import PhasingApp, PhasingConfig
from .core import InputConsistencyError, NonConvergenceError, PhasingInterrupted
from .utils.validation import validate_cli_arguments
from .version import __version__

__all__ = ["parser_resolve_path", "create_parser", "main", "is_shutdown_requested"]

_shutdown_requested = False


def _signal_handler(signum: int, frame: object) -> None:
    """Handle signals for graceful shutdown."""
    global _shutdown_requested
    if signum == signal.SIGINT:
        print("\nReceived interrupt signal (Ctrl+C). Shutting down gracefully...", file=sys.stderr)
    elif signum == signal.SIGTERM:
        print("\nReceived termination signal. Shutting down gracefully...", file=sys.stderr)
    else:
        print(f"\nReceived signal {signum}. Shutting down gracefully...", file=sys.stderr)
    _shutdown_requested = True


def is_shutdown_requested() -> bool:
    """Check if graceful shutdown was requested."""
    return _shutdown_requested


def _get_git_commit() -> str:
    """Return short git commit hash if available, else 'unknown'."""
    try:
        res = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            check=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
        )
        return res.stdout.strip() or "unknown"
    except (OSError, subprocess.CalledProcessError):
        return "unknown"


def _build_version_string() -> str:
    """Compose version string with build and runtime info."""
    commit = _get_git_commit()
    py = platform.python_version()
    return f"clarkphase {__version__} (commit hash {commit})\nPython {py}"


def parser_resolve_path(path: str) -> Path:
    """Resolve CLI-provided path string to an absolute Path.

    Example:
        >>> parser_resolve_path("genotypes.txt")
        PosixPath('/absolute/path/to/genotypes.txt')
    """
    return Path(path).resolve()


def create_parser() -> argparse.ArgumentParser:
    """Create and configure argument parser.

    Example:
        >>> parser = create_parser()
        >>> args = parser.parse_args(["genotypes.txt", "-mi", "500"])
        >>> print(f"Input: {args.input.name}, max passes: {args.max_iterations}")
        Input: genotypes.txt, max passes: 500
    """
    parser = argparse.ArgumentParser(
        prog="clarkphase",
        description=(
            "Infer a small set of haplotypes whose pairwise combinations "
            "reproduce the observed diploid genotypes (Clark's algorithm)."
        ),
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        epilog=(
            "Notes: genotype codes count alternate alleles (0, 1, 2). "
            "Missing calls and multiallelic sites are rejected."
        ),
    )

    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=_build_version_string(),
        help="Show program version, commit hash, and Python version, then exit",
    )

    parser.add_argument(
        "input",
        help="Genotype file: one genotype per line, or VCF/BCF",
        type=parser_resolve_path,
        metavar="INPUT",
    )

    grp_phase = parser.add_argument_group(
        "Phasing", "Limits and constants of the phasing run"
    )
    grp_phase.add_argument(
        "-mi",
        "--max-iterations",
        dest="max_iterations",
        help="Maximum number of expansion passes before aborting",
        default=10000,
        type=int,
        metavar="MAX_ITER",
    )
    grp_phase.add_argument(
        "-ms",
        "--max-stalled-escalations",
        dest="max_stalled",
        help="Consecutive consensus escalations without progress before aborting",
        default=2,
        type=int,
        metavar="MAX_STALLED",
    )
    grp_phase.add_argument(
        "-cf",
        "--consensus-fallback",
        dest="consensus_fallback",
        help="Value substituted for loci whose consensus dosage sum is zero",
        default=1,
        type=int,
        metavar="FALLBACK",
    )

    grp_io = parser.add_argument_group("IO formats", "Input format and result files")
    grp_io.add_argument(
        "-I",
        "--input-format",
        help="Input format: auto (by file suffix), matrix, or vcf (VCF/VCF.gz/BCF)",
        choices=["auto", "matrix", "vcf"],
        default="auto",
    )
    grp_io.add_argument(
        "-o",
        "--output-dir",
        help="Folder for haplotypes.tsv, phased_genotypes.tsv and run_info.txt",
        type=parser_resolve_path,
        default=None,
        metavar="OUTPUT_FOLDER",
    )

    grp_log = parser.add_argument_group("Logging", "Logging verbosity and format")
    grp_log.add_argument(
        "-q",
        "--quiet",
        help="Suppress progress output",
        action="store_true",
        default=False,
    )
    grp_log.add_argument(
        "-L",
        "--log-level",
        help=(
            "Logging level (DEBUG, INFO, WARNING, ERROR); default depends on --quiet"
        ),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
    )
    grp_log.add_argument(
        "-F",
        "--log-format",
        help="Logging format: text or json",
        choices=["text", "json"],
        default="text",
    )
    grp_log.add_argument(
        "--no-progress",
        help="Disable progress bars",
        action="store_true",
        default=False,
    )

    return parser


def main() -> None:
    """CLI entry point.

    This function:
    1. Parses command line arguments
    2. Validates argument values
    3. Creates application configuration
    4. Runs the phasing pipeline
    """
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    parser = create_parser()
    args = parser.parse_args()

    validate_cli_arguments(args)

    config = PhasingConfig(
        input_path=args.input,
        input_format=args.input_format,
        output_dir=args.output_dir,
        max_iterations=args.max_iterations,
        max_stalled_escalations=args.max_stalled,
        consensus_fallback=args.consensus_fallback,
        show_progress=not (args.no_progress or args.quiet),
        verbose=not args.quiet,
        log_level=args.log_level,
        log_format=args.log_format,
    )

    app = PhasingApp(config, shutdown_checker=is_shutdown_requested)
    logger = app.logger
    if logger.isEnabledFor(logging.INFO):
        logger.info(f"Starting {_build_version_string().splitlines()[0]}")
        logger.info(f"Input: {config.input_path}")
        logger.info(
            f"Configuration: max_iterations={config.max_iterations}, "
            f"max_stalled_escalations={config.max_stalled_escalations}, "
            f"consensus_fallback={config.consensus_fallback}"
        )

    try:
        app.run()
    except KeyboardInterrupt:
        logger.error("Operation interrupted by user. Exiting gracefully.")
        sys.exit(1)
    except PhasingInterrupted as e:
        logger.error(f"Graceful shutdown completed. {e}")
        sys.exit(1)
    except InputConsistencyError as e:
        logger.error(f"Invalid input: {e}")
        sys.exit(1)
    except NonConvergenceError as e:
        logger.error(f"Phasing did not converge: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
