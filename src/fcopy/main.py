#!/usr/bin/env python3
"""
fcopy - file and directory copy tool with resume, progress and statistics.

Command-line layer: turns flags into :class:`~fcopy.options.CopyOptions`,
configures logging, runs :func:`~fcopy.engine.copy` and maps the outcome to
an exit code.
"""

import argparse
import logging
import sys

from .engine import copy
from .options import CopyOptions
from .progress import TqdmProgressReporter
from .util import parse_size


def setup_logging(verbose: bool = False) -> None:
    """
    Configure logging for the application.

    Parameters
    ----------
    verbose : bool
        Enable debug logging
    """
    log_level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=log_level,
        format="%(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def block_size_arg(value: str) -> int:
    """argparse type for ``--block-size``."""
    size = parse_size(value)
    if size <= 0:
        raise argparse.ArgumentTypeError(f"block size must be positive: {value!r}")
    return size


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Parameters
    ----------
    argv : list[str] | None, default=None
        Arguments to parse, ``sys.argv[1:]`` if None

    Returns
    -------
    argparse.Namespace
        Parsed command line arguments
    """
    parser = argparse.ArgumentParser(
        description="A file copy utility with progress and statistics tracking",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Supply source and destination respectively as positional arguments after
specifying the options.

Examples:
  %(prog)s -p -s big.iso /mnt/backup/
  %(prog)s -r -b 32M photos/ /mnt/backup/photos
  %(prog)s -c -p big.iso /mnt/backup/big.iso      # resume an interrupted copy
        """,
    )

    parser.add_argument(
        "-b",
        "--block-size",
        type=block_size_arg,
        default="8M",
        help="Block size for transfer (in units of K, M and G. Ex: 32M)",
    )
    parser.add_argument(
        "-p", "--progress", action="store_true", help="Show progress of the transfer"
    )
    parser.add_argument(
        "-r", "--recursive", action="store_true", help="Copy files recursively"
    )
    parser.add_argument(
        "-s", "--stats", action="store_true", help="Show statistics of the transfer"
    )
    parser.add_argument(
        "-f", "--force", action="store_true", help="Overwrite the destination file"
    )
    parser.add_argument(
        "-m", "--move", action="store_true", help="Remove the source file after transfer"
    )
    parser.add_argument(
        "-n",
        "--no-dir-error",
        action="store_true",
        help="Ignore errors while copying directories",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print verbose output for the copy operation",
    )
    parser.add_argument(
        "-c",
        "--continue",
        dest="resume",
        action="store_true",
        help="Resume a partially completed copy",
    )
    parser.add_argument(
        "--bar",
        action="store_true",
        help="Show progress as a progress bar (implies --progress)",
    )

    parser.add_argument("source", metavar="SRC", help="Path to source file")
    parser.add_argument("destination", metavar="DST", help="Path to destination")

    return parser.parse_args(argv)


def options_from_args(args: argparse.Namespace) -> CopyOptions:
    """Create copy options from command-line arguments."""
    return (
        CopyOptions()
        .with_block_size(args.block_size)
        .with_force(args.force)
        .with_recursive(args.recursive)
        .with_progress(args.progress or args.bar)
        .with_remove(args.move)
        .with_stats(args.stats)
        .with_dircopy_err(args.no_dir_error)
        .with_verbose(args.verbose)
        .with_resume(args.resume)
    )


def main(argv: list[str] | None = None) -> int:
    """
    CLI entry point.

    Returns
    -------
    int
        Exit code: 0 for success, 1 for failure, 130 for keyboard interrupt
    """
    args = parse_arguments(argv)
    setup_logging(args.verbose)

    options = options_from_args(args)
    bar = TqdmProgressReporter() if args.bar else None
    if bar is not None:
        options.with_progress_handler(bar)

    try:
        copy(args.source, args.destination, options)
        return 0
    except KeyboardInterrupt:
        print("\nOperation interrupted by user")
        return 130
    except OSError as e:
        if args.move:
            print(f"Move failed: {e.strerror or e}")
        else:
            print(f"Copy failed: {e.strerror or e}")
        return 1
    finally:
        if bar is not None:
            bar.close()


if __name__ == "__main__":
    sys.exit(main())
