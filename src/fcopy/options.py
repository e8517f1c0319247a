"""Copy configuration and transfer statistics."""

from dataclasses import dataclass, field

from .progress import ConsoleProgressReporter, ProgressReporter
from .util import DEFAULT_BLOCK_SIZE


@dataclass
class TransferStats:
    """
    Byte counters for one copy invocation.

    Attributes
    ----------
    transferred : int, default=0
        Bytes written to destinations so far, resumed prefixes included
    total : int, default=0
        Bytes expected once the whole operation completes
    time_taken : float, default=0.0
        Duration of the operation in seconds
    """

    transferred: int = 0
    total: int = 0
    time_taken: float = 0.0

    @property
    def throughput(self) -> float:
        """
        Transfer speed in bytes per second.

        Returns
        -------
        float
            ``total`` divided by the elapsed microseconds, scaled to seconds.
            Elapsed time is floored at one microsecond.
        """
        elapsed_us = max(self.time_taken * 1_000_000, 1.0)
        return self.total / elapsed_us * 1_000_000

    @property
    def complete(self) -> bool:
        return self.transferred == self.total


@dataclass
class CopyOptions:
    """
    Configuration for a copy invocation.

    Built once per invocation and only read by the engine; the byte counters
    live in a separate :class:`TransferStats`. The ``with_*`` methods return
    the options object so calls can be chained.

    Attributes
    ----------
    block_size : int, default=8 MiB
        Maximum bytes handed to one chunked transfer call
    force : bool, default=False
        Overwrite existing destination files
    show_progress : bool, default=False
        Report progress through ``progress_handler``
    recursive : bool, default=False
        Allow directory sources
    show_stats : bool, default=False
        Print duration and throughput after the copy
    remove : bool, default=False
        Delete the source after a successful copy (move)
    no_dir_err : bool, default=False
        Log and skip per-file failures during a directory copy
    verbose : bool, default=False
        Verbose output
    resume : bool, default=False
        Append to existing destinations instead of failing
    progress_handler : ProgressReporter
        Receives progress reports when ``show_progress`` is set
    """

    block_size: int = DEFAULT_BLOCK_SIZE
    force: bool = False
    show_progress: bool = False
    recursive: bool = False
    show_stats: bool = False
    remove: bool = False
    no_dir_err: bool = False
    verbose: bool = False
    resume: bool = False
    progress_handler: ProgressReporter = field(default_factory=ConsoleProgressReporter)

    def __post_init__(self):
        """Validate configuration."""
        if self.block_size <= 0:
            raise ValueError(f"Block size must be positive, got {self.block_size}")

    def with_block_size(self, block_size: int) -> "CopyOptions":
        if block_size <= 0:
            raise ValueError(f"Block size must be positive, got {block_size}")
        self.block_size = block_size
        return self

    def with_force(self, force: bool) -> "CopyOptions":
        self.force = force
        return self

    def with_progress(self, show_progress: bool) -> "CopyOptions":
        self.show_progress = show_progress
        return self

    def with_recursive(self, recursive: bool) -> "CopyOptions":
        self.recursive = recursive
        return self

    def with_remove(self, remove: bool) -> "CopyOptions":
        self.remove = remove
        return self

    def with_stats(self, show_stats: bool) -> "CopyOptions":
        self.show_stats = show_stats
        return self

    def with_dircopy_err(self, ignore: bool) -> "CopyOptions":
        self.no_dir_err = ignore
        return self

    def with_verbose(self, verbose: bool) -> "CopyOptions":
        self.verbose = verbose
        return self

    def with_resume(self, resume: bool) -> "CopyOptions":
        self.resume = resume
        return self

    def with_progress_handler(self, handler: ProgressReporter) -> "CopyOptions":
        self.progress_handler = handler
        return self
