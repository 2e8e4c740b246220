"""
Error types raised by PyTrace buffers.

Each error also derives from the built-in exception callers would expect for
that condition, so ``except ValueError`` style handling keeps working.
"""


class PyTraceError(Exception):
    """Base class for all PyTrace errors."""


class DimensionMismatch(PyTraceError, ValueError):
    """A frame's width disagrees with the width established by the buffer."""


class IndexOutOfRange(PyTraceError, IndexError):
    """A row, column or sample index is outside the current bounds."""


class LoadFailure(PyTraceError, RuntimeError):
    """The loader could not produce a waveform for a channel."""


class EmptyBuffer(PyTraceError, ValueError):
    """Extrema were requested from a channel that holds no samples."""
