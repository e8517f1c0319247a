"""Filesystem and size helpers used by the copy engine."""

import logging
import os
import re
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from .errors import annotate

logger = logging.getLogger(__name__)

KB = 1024
MB = 1024 * KB
GB = 1024 * MB

DEFAULT_BLOCK_SIZE = 8 * MB
TRANSFER_BUFFER_SIZE = 32 * KB

_SIZE_SUFFIXES = {
    "k": KB,
    "K": KB,
    "m": MB,
    "M": MB,
    "g": GB,
    "G": GB,
}
_SIZE_PATTERN = re.compile(r"([0-9]*)(.*)", re.DOTALL)


@dataclass(frozen=True)
class DirEntryInfo:
    """A regular file found under a walked directory."""

    relative_path: str
    size: int


# ============================================================================
# Chunked transfer
# ============================================================================


def copy_n(src: BinaryIO, dst: BinaryIO, bytes_to_read: int) -> int:
    """
    Copy up to ``bytes_to_read`` bytes from ``src`` to ``dst``.

    Parameters
    ----------
    src : BinaryIO
        Readable binary handle
    dst : BinaryIO
        Writable binary handle
    bytes_to_read : int
        Upper bound on the bytes transferred

    Returns
    -------
    int
        Bytes actually transferred; less than ``bytes_to_read`` at end of
        input or after a read error

    Raises
    ------
    OSError
        If writing to ``dst`` fails

    Notes
    -----
    A read error stops the transfer without raising. The caller sees a short
    count, which the per-file and whole-operation byte checks turn into a
    :class:`~fcopy.errors.TransferMismatchError`.
    """
    buffer = memoryview(bytearray(TRANSFER_BUFFER_SIZE))
    remaining = bytes_to_read

    while remaining > 0:
        chunk = buffer[: min(remaining, TRANSFER_BUFFER_SIZE)]
        try:
            read_count = src.readinto(chunk)
        except OSError as e:
            logger.warning(f"Read error after {bytes_to_read - remaining} bytes, stopping chunk: {e}")
            break
        if not read_count:
            break
        dst.write(chunk[:read_count])
        remaining -= read_count

    return bytes_to_read - remaining


# ============================================================================
# Directory helpers
# ============================================================================


def list_dir_recursive(basepath: Path) -> list[DirEntryInfo]:
    """
    List every regular file under ``basepath`` with its size.

    Entries are sorted by name inside each directory. Directories themselves
    are not listed, symlinked directories are not descended into, and
    special files (FIFOs, sockets, devices) are left out. A symlink to a
    regular file is listed with the size of its target.

    Parameters
    ----------
    basepath : Path
        Root of the walk

    Returns
    -------
    list[DirEntryInfo]
        Files with POSIX-style paths relative to ``basepath``

    Raises
    ------
    OSError
        If any directory cannot be listed or any entry cannot be stat'ed.
        The error keeps its original class and errno.
    """
    return _list_dir_recursive(Path(basepath), "")


def _list_dir_recursive(basepath: Path, prefix: str) -> list[DirEntryInfo]:
    result = []
    read_path = basepath / prefix if prefix else basepath

    try:
        with os.scandir(read_path) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as e:
        raise annotate(e, f"failure in reading directory '{read_path}'") from e

    for entry in entries:
        try:
            metadata = entry.stat()
        except OSError as e:
            raise annotate(e, f"failure in reading metadata for file '{entry.path}'") from e

        rel_path = f"{prefix}/{entry.name}" if prefix else entry.name
        if entry.is_dir(follow_symlinks=False):
            result.extend(_list_dir_recursive(basepath, rel_path))
        elif stat.S_ISREG(metadata.st_mode):
            result.append(DirEntryInfo(relative_path=rel_path, size=metadata.st_size))

    return result


def delete_dir_recursive(basepath: Path) -> None:
    """
    Remove an emptied directory tree, deepest directories first.

    Files are never deleted; a directory still holding files makes the
    removal fail. A directory that is already gone is ignored.
    """
    with os.scandir(basepath) as it:
        subdirs = [entry.path for entry in it if entry.is_dir(follow_symlinks=False)]
    for subdir in subdirs:
        delete_dir_recursive(Path(subdir))

    try:
        os.rmdir(basepath)
    except FileNotFoundError:
        pass


# ============================================================================
# Size strings
# ============================================================================


def parse_size(size: str) -> int:
    """
    Parse a size such as ``"32M"`` into bytes.

    Leading decimal digits are multiplied by the suffix ``k``/``K``,
    ``m``/``M`` or ``g``/``G`` (powers of 1024). Anything unparsable,
    including a bare number, yields 8 MiB.
    """
    digits, suffix = _SIZE_PATTERN.match(size).groups()
    multiplier = _SIZE_SUFFIXES.get(suffix)
    if not digits or multiplier is None:
        logger.debug(f"Unrecognised size '{size}', using {format_size(DEFAULT_BLOCK_SIZE)}")
        return DEFAULT_BLOCK_SIZE
    return int(digits) * multiplier


def format_size(size: int) -> str:
    """Human readable size with B/K/M/G suffixes."""
    if size > GB:
        return f"{size / GB:.2f}G"
    if size > MB:
        return f"{size / MB:.2f}M"
    if size > KB:
        return f"{size / KB:.2f}K"
    return f"{size}B"
