"""
Error types raised by the copy engine.

Filesystem failures are not wrapped in new types: they are re-raised as the
same ``OSError`` subclass with the same errno, with the failing operation
prepended to the message (see :func:`annotate`). Only conditions detected by
the engine itself get dedicated classes.
"""


class CopyError(OSError):
    """Base class for errors raised by the copy engine itself."""


class InvalidInputError(CopyError, ValueError):
    """
    Source/destination combination that can never be copied.

    Raised for identical source and destination paths, a directory source
    without recursion, and a directory source onto an existing file.
    """


class TransferMismatchError(CopyError):
    """Bytes transferred do not match the expected byte count."""


def annotate(err: OSError, context: str) -> OSError:
    """
    Build a copy of ``err`` whose message is prefixed with ``context``.

    Parameters
    ----------
    err : OSError
        Original error
    context : str
        Description of the operation that failed

    Returns
    -------
    OSError
        Error of the same class and errno as ``err``; callers raise it
        ``from err`` so the original stays chained
    """
    detail = err.strerror or str(err)
    if err.filename is not None:
        detail = f"{detail}: '{err.filename}'"

    if err.errno is None:
        return type(err)(f"{context}: {detail}")
    return type(err)(err.errno, f"{context}: {detail}")
