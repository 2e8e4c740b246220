"""
Tabular read contract shared by PyTrace buffers.

Display layers only ever talk to a buffer through these four queries, so any
table or plot widget can be adapted on top without the buffers knowing about it.
"""

from typing import Protocol, runtime_checkable

import numpy as np

from pytrace.errors import IndexOutOfRange

AXES = ("channel", "frame")


@runtime_checkable
class TableSource(Protocol):
    """Row count / column count / cell value / header label queries."""

    def row_count(self) -> int: ...

    def column_count(self) -> int: ...

    def value_at(self, row: int, column: int) -> float: ...

    def header(self, index: int, axis: str) -> str: ...


def check_axis(axis: str) -> None:
    """Raise ValueError for an unknown header axis."""
    if axis not in AXES:
        raise ValueError(f"Unknown axis: {axis}. Choose from {', '.join(AXES)}")


def check_index(index: int, bound: int, what: str = "index") -> None:
    """
    Check that ``0 <= index < bound``.

    Parameters
    ----------
    index : int
        Index to check.
    bound : int
        Exclusive upper bound.
    what : str, default="index"
        Name used in the error message.

    Raises
    ------
    IndexOutOfRange
        If the index is outside the bounds.
    """
    if index < 0 or index >= bound:
        if bound == 0:
            raise IndexOutOfRange(f"Invalid {what}: {index}. The table is empty.")
        raise IndexOutOfRange(
            f"Invalid {what}: {index}. Must be between 0 and {bound - 1}."
        )


def to_array(source: TableSource) -> np.ndarray:
    """
    Pull a whole table into a rows x columns array using only the read contract.

    Parameters
    ----------
    source : TableSource
        Any object implementing the tabular read contract.

    Returns
    -------
    np.ndarray
        float64 array of shape (row_count, column_count). Cells the source
        cannot provide (e.g. past the end of a short channel) are NaN.
    """
    n_rows = source.row_count()
    n_cols = source.column_count()
    out = np.full((n_rows, n_cols), np.nan, dtype=np.float64)
    for row in range(n_rows):
        for col in range(n_cols):
            try:
                out[row, col] = source.value_at(row, col)
            except IndexOutOfRange:
                continue
    return out
