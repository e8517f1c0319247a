"""
Progress reporting for copy operations.

The engine only talks to the :class:`ProgressReporter` protocol, so callers
(and tests) can pass any object with ``report`` and ``finish`` methods.
"""

import sys
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, TextIO

from tqdm import tqdm

from .util import format_size

if TYPE_CHECKING:
    from .options import TransferStats


class ProgressReporter(Protocol):
    """Receives progress updates from the copy engine."""

    def report(
        self,
        src: Path,
        dst: Path,
        transferred: int,
        total: int,
        stats: "TransferStats",
    ) -> None:
        """
        Called after every non-empty chunk.

        Parameters
        ----------
        src : Path
            Source file being copied
        dst : Path
            Destination file being written
        transferred : int
            Bytes of this file present in the destination so far
        total : int
            Size of this file
        stats : TransferStats
            Counters for the whole operation
        """
        ...

    def finish(self, src: Path, moved: bool) -> None:
        """Called once a file has been fully copied."""
        ...


class ConsoleProgressReporter:
    """
    Rewrites a single status line on stdout.

    Parameters
    ----------
    stream : TextIO | None, default=None
        Output stream, ``sys.stdout`` at write time if None
    """

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def report(self, src, dst, transferred, total, stats) -> None:
        name = f"'{src.name or '/'}'"
        self.stream.write(
            f"\rCopying file {name:50} "
            f"({format_size(transferred):>8} /{format_size(total):>8})"
            f"\tTotal: ({format_size(stats.transferred):>8} /{format_size(stats.total):>8})"
        )
        self.stream.flush()

    def finish(self, src, moved) -> None:
        if moved:
            self.stream.write(f"\rMoved file '{src.name}'  \n")
        else:
            self.stream.write(f"\rCopied file '{src.name}' \n")
        self.stream.flush()


class TqdmProgressReporter:
    """
    Byte progress bar over the whole operation.

    The bar is created on the first report, once the operation total is
    known, and must be closed with :meth:`close` (or by using the reporter as
    a context manager).

    Parameters
    ----------
    file : TextIO | None, default=None
        Stream handed to tqdm (stderr if None)
    """

    def __init__(self, file: TextIO | None = None):
        self._file = file
        self._bar: tqdm | None = None

    def __enter__(self) -> "TqdmProgressReporter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def report(self, src, dst, transferred, total, stats) -> None:
        if self._bar is None:
            self._bar = tqdm(
                total=stats.total,
                unit="B",
                unit_scale=True,
                unit_divisor=1024,
                desc="COPY",
                file=self._file,
            )
        self._bar.total = stats.total
        self._bar.set_postfix_str(src.name, refresh=False)
        self._bar.update(stats.transferred - self._bar.n)

    def finish(self, src, moved) -> None:
        verb = "Moved" if moved else "Copied"
        tqdm.write(f"{verb} file '{src.name}'", file=self._file)

    def close(self) -> None:
        if self._bar is not None:
            self._bar.close()
            self._bar = None
