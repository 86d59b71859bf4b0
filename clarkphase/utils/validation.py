"""Input validation utilities."""

import sys
import argparse

__all__ = ["validate_cli_arguments"]


def validate_cli_arguments(args: argparse.Namespace) -> None:
    """Validate CLI argument combinations and constraints.

    Args:
        args: Parsed command line arguments
    """
    if args.max_iterations < 1:
        sys.exit("-mi (max iterations) must be >= 1")

    if args.max_stalled < 1:
        sys.exit("-ms (max stalled escalations) must be >= 1")

    if args.consensus_fallback < 1:
        sys.exit("-cf (consensus fallback) must be >= 1")

    if not args.input.is_file():
        sys.exit(f"ERROR: Input file not found: {args.input}")
