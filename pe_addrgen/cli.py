"""Command-line interface for pe-addrgen.

This module provides the main CLI entry point: scan candidate PE images
for byte signatures and generate version-keyed address tables.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .constants import DEFAULT_OUTPUT_FORMAT, OUTPUT_FORMATS
from .definitions import load_signatures
from .exceptions import PEAddrGenError
from .formats import render, write_output
from .logging_config import setup_logging, log_info, log_error
from .models import Version
from .scanner import expand_candidates, scan_versions
from .versioning import parse_version


def cmd_generate(
    signatures_path: Path,
    images: list[Path],
    *,
    output: Path | None,
    output_format: str,
    min_version: Version | None,
    max_version: Version | None,
    strict: bool,
    show_progress: bool,
) -> int:
    """Scan candidate images and write the generated address tables."""

    signatures = load_signatures(signatures_path)
    log_info(f"Loaded {len(signatures)} signatures from {signatures_path}")

    candidates = expand_candidates(images)

    tables = scan_versions(
        candidates,
        signatures,
        min_version=min_version,
        max_version=max_version,
        strict=strict,
        show_progress=show_progress,
    )

    missing = sum(1 for vd in tables for r in vd.addresses if not r.found)
    log_info(
        f"Found {len(tables)} distinct version(s) across {len(candidates)} candidate(s)"
    )
    if missing:
        log_info(f"{missing} signature lookups had no match")

    text = render(output_format, [s.name for s in signatures], tables)

    if output:
        write_output(output, text)
        log_info(f"Output written to {output}")
    else:
        sys.stdout.write(text)

    return 0


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for pe-addrgen CLI.

    Args:
        argv: Command-line arguments (default: sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = argparse.ArgumentParser(
        prog="pe-addrgen",
        description="Generate version-keyed address tables from byte signatures in PE images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate a Python module from every build in a directory
  pe-addrgen signatures.json builds/ -o base_addresses.py

  # Generate Rust definitions for two specific executables
  pe-addrgen signatures.json game-1.02.exe game-1.05.exe -o base_addresses.rs --output-format rust

  # Fail if any signature is missing from any build
  pe-addrgen signatures.json builds/ --strict --output-format cheader -o base_addresses.h
        """,
    )

    parser.add_argument(
        "signatures",
        type=Path,
        help="JSON file with signature definitions",
    )
    parser.add_argument(
        "images",
        type=Path,
        nargs="+",
        help="Candidate executables or directories of executables; missing paths are ignored",
    )

    # Output options
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Output file path (default: stdout)",
    )
    parser.add_argument(
        "--output-format",
        choices=list(OUTPUT_FORMATS),
        default=DEFAULT_OUTPUT_FORMAT,
        help=f"Generated output format (default: {DEFAULT_OUTPUT_FORMAT})",
    )

    # Version filtering
    parser.add_argument(
        "--min-version",
        metavar="MAJOR.MINOR.PATCH",
        help="Ignore images with a lower product version",
    )
    parser.add_argument(
        "--max-version",
        metavar="MAJOR.MINOR.PATCH",
        help="Ignore images with a higher product version",
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Treat a signature missing from any image as an error",
    )

    # Display options
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable progress bar display",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging output",
    )
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress all non-error output",
    )

    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose, quiet=args.quiet)

    min_version = None
    max_version = None

    if args.min_version:
        min_version = parse_version(args.min_version)
        if not min_version:
            log_error(f"Invalid min version: {args.min_version}")
            return 1
    if args.max_version:
        max_version = parse_version(args.max_version)
        if not max_version:
            log_error(f"Invalid max version: {args.max_version}")
            return 1

    try:
        return cmd_generate(
            args.signatures,
            args.images,
            output=args.output,
            output_format=args.output_format,
            min_version=min_version,
            max_version=max_version,
            strict=args.strict,
            show_progress=not args.no_progress and not args.quiet,
        )
    except PEAddrGenError as e:
        log_error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
