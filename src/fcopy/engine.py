"""
Copy engine: single files, directory trees, and the top-level orchestrator.

Every call threads an explicit :class:`~fcopy.options.TransferStats` through
the call chain; nothing is shared between invocations.
"""

import errno
import logging
import os
import stat
import time
from pathlib import Path

from .errors import InvalidInputError, TransferMismatchError, annotate
from .options import CopyOptions, TransferStats
from .util import copy_n, delete_dir_recursive, format_size, list_dir_recursive

logger = logging.getLogger(__name__)


# ============================================================================
# Single file
# ============================================================================


def copy_file(src: Path, dst: Path, options: CopyOptions, stats: TransferStats) -> int:
    """
    Copy one file, honouring the force, resume and progress options.

    Parameters
    ----------
    src : Path
        Source file
    dst : Path
        Destination file (not a directory)
    options : CopyOptions
        Copy configuration
    stats : TransferStats
        Operation counters; ``transferred`` is increased by every byte this
        file contributes, including a resumed prefix

    Returns
    -------
    int
        Bytes of this file present in the destination afterwards

    Raises
    ------
    FileExistsError
        If the destination exists and neither force nor resume is set
    TransferMismatchError
        If the destination size does not match the source once the
        transfer loop ends
    OSError
        For any failing filesystem call, annotated with the operation
    """
    try:
        src_file = open(src, "rb")
    except OSError as e:
        raise annotate(e, "failure in opening source file") from e

    with src_file:
        try:
            src_meta = os.fstat(src_file.fileno())
        except OSError as e:
            raise annotate(e, "failure in fetching metadata for source file") from e
        src_size = src_meta.st_size

        try:
            dst_meta = os.stat(dst)
        except OSError:
            dst_meta = None

        if dst_meta is not None:
            if not options.force and not options.resume:
                raise FileExistsError(
                    errno.EEXIST,
                    f"file '{dst}' exists, can't copy file without --force or --continue option",
                )
        else:
            try:
                os.makedirs(dst.parent, exist_ok=True)
            except FileExistsError:
                pass
            except OSError as e:
                raise annotate(e, "failure in creating destination directory") from e

        resuming = options.resume and dst_meta is not None
        flags = os.O_WRONLY | os.O_CREAT | (os.O_APPEND if resuming else os.O_TRUNC)
        mode = stat.S_IMODE(dst_meta.st_mode if resuming else src_meta.st_mode)
        try:
            fd = os.open(dst, flags, mode)
        except OSError as e:
            raise annotate(e, "failure in opening destination file") from e

        with os.fdopen(fd, "ab" if resuming else "wb") as dst_file:
            transferred = 0
            if resuming:
                try:
                    src_file.seek(dst_meta.st_size)
                except OSError as e:
                    raise annotate(e, "failed to resume copy due to seek fail on source file") from e
                transferred = dst_meta.st_size
                stats.transferred += transferred
                logger.debug(f"Resuming {src} at byte {transferred:,}")

            try:
                while transferred < src_size:
                    copied = copy_n(src_file, dst_file, options.block_size)
                    if copied == 0:
                        break

                    transferred += copied
                    stats.transferred += copied

                    if options.show_progress:
                        options.progress_handler.report(src, dst, transferred, src_size, stats)
                dst_file.flush()
            except OSError as e:
                raise annotate(e, f"error while copying file '{src}'") from e

            if transferred < src_size:
                raise TransferMismatchError(
                    f"error while copying file '{src}': "
                    f"missing {src_size - transferred} bytes in destination"
                )
            if transferred > src_size:
                raise TransferMismatchError(
                    f"error while copying file '{src}': "
                    f"{transferred - src_size} extra bytes in destination"
                )

            os.chmod(dst, stat.S_IMODE(src_meta.st_mode))

    if options.verbose:
        logger.info(f"'{src}' -> '{dst}' ({transferred:,} bytes)")

    if options.show_progress:
        options.progress_handler.finish(src, moved=options.remove)

    return transferred


# ============================================================================
# Directory tree
# ============================================================================


def copy_directory(src: Path, dst: Path, options: CopyOptions, stats: TransferStats) -> None:
    """
    Copy every file under ``src`` to the same relative path under ``dst``.

    All file sizes are added to ``stats.total`` before the first byte is
    copied. Without ``no_dir_err`` the first failure is raised. With it a
    failing file is logged and its size and any bytes it already counted
    are taken back out of ``stats``, so ``total`` only covers the files that
    were copied and the final ``transferred == total`` check of
    :func:`copy` passes when every other file succeeded. A tree copy with
    skipped files therefore exits successfully. In move mode each source
    file is removed after its copy and the emptied source tree is removed
    at the end; symlinked directories are left in place, which makes that
    final removal fail.

    Parameters
    ----------
    src : Path
        Source directory
    dst : Path
        Destination directory (created as needed)
    options : CopyOptions
        Copy configuration
    stats : TransferStats
        Operation counters
    """
    entries = list_dir_recursive(src)
    stats.total += sum(entry.size for entry in entries)
    logger.debug(f"Found {len(entries)} files ({format_size(stats.total)}) under {src}")

    for entry in entries:
        file_src = src / entry.relative_path
        file_dst = dst / entry.relative_path
        transferred_before = stats.transferred

        try:
            copy_file(file_src, file_dst, options, stats)
        except OSError as e:
            if not options.no_dir_err:
                raise
            logger.error(f"Failed to copy file: {e}")
            stats.transferred = transferred_before
            stats.total -= entry.size
            continue

        if options.remove:
            try:
                os.remove(file_src)
            except OSError as e:
                if not options.no_dir_err:
                    raise annotate(e, "failed to remove source file") from e
                logger.error(f"Failed to remove source file: {e}")

    if options.remove:
        try:
            delete_dir_recursive(src)
        except OSError as e:
            raise annotate(e, "failed to remove source directory") from e


# ============================================================================
# Orchestrator
# ============================================================================


def copy(src: str | os.PathLike, dst: str | os.PathLike, options: CopyOptions | None = None) -> TransferStats:
    """
    Copy (or move) a file or directory tree.

    If ``dst`` is an existing directory the source is copied into it under
    its own name.

    Parameters
    ----------
    src : str | os.PathLike
        Source file or directory
    dst : str | os.PathLike
        Destination path
    options : CopyOptions | None, default=None
        Copy configuration, defaults to ``CopyOptions()``

    Returns
    -------
    TransferStats
        Counters and duration of the operation

    Raises
    ------
    InvalidInputError
        If the paths are identical, a directory source is given without
        ``recursive``, or a directory source targets an existing file
    TransferMismatchError
        If the bytes transferred differ from the bytes expected
    OSError
        For any failing filesystem call
    """
    options = options if options is not None else CopyOptions()

    if os.fspath(src) == os.fspath(dst):
        raise InvalidInputError("destination is same as the source")

    source = Path(src)
    destination = Path(dst)
    stats = TransferStats()

    try:
        src_stat = os.stat(source)
    except OSError as e:
        raise annotate(e, "stat failed for source path") from e
    src_is_dir = stat.S_ISDIR(src_stat.st_mode)

    if src_is_dir and not options.recursive:
        raise InvalidInputError("source is a directory but --recursive option not specified")

    if destination.is_dir():
        if source.name:
            destination = destination / source.name
    elif destination.exists() and src_is_dir:
        raise InvalidInputError("source is a directory, destination is a file")

    start = time.perf_counter()

    if src_is_dir:
        copy_directory(source, destination, options, stats)
    else:
        stats.total = src_stat.st_size
        copy_file(source, destination, options, stats)
        if options.remove:
            try:
                os.remove(source)
            except OSError as e:
                raise annotate(e, "failed to remove source file") from e

    stats.time_taken = time.perf_counter() - start

    if not stats.complete:
        raise TransferMismatchError(
            f"error in copy: transferred={stats.transferred}, total={stats.total}"
        )

    logger.debug(
        f"{'Moved' if options.remove else 'Copied'} {stats.transferred:,} bytes "
        f"in {stats.time_taken:.5f} sec"
    )

    if options.show_stats:
        print(f"\nTime taken to copy: {stats.time_taken:.6f}s")
        print(f"Transfer speed: {format_size(int(stats.throughput))}/s")

    return stats
