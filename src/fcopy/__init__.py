"""
fcopy: file and directory copy tool with resumable transfers.

Copies single files or whole directory trees in fixed-size blocks, can
resume a partially written destination, move instead of copy, and report
progress and transfer statistics.
"""

from .engine import copy, copy_directory, copy_file
from .errors import CopyError, InvalidInputError, TransferMismatchError
from .options import CopyOptions, TransferStats
from .progress import ConsoleProgressReporter, ProgressReporter, TqdmProgressReporter
from .util import DirEntryInfo, copy_n, format_size, list_dir_recursive, parse_size

__version__ = "1.0.0"
__author__ = "fcopy project"
__description__ = "File copy tool with resume, progress and statistics"

__all__ = [
    "ConsoleProgressReporter",
    "CopyError",
    "CopyOptions",
    "DirEntryInfo",
    "InvalidInputError",
    "ProgressReporter",
    "TqdmProgressReporter",
    "TransferMismatchError",
    "TransferStats",
    "copy",
    "copy_directory",
    "copy_file",
    "copy_n",
    "format_size",
    "list_dir_recursive",
    "parse_size",
]
