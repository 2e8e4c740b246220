from typing import Optional, Sequence, Tuple

import numpy as np

# Time unit boundaries
PICOSECOND_BOUNDARY = 0.8e-9
NANOSECOND_BOUNDARY = 0.8e-6
MICROSECOND_BOUNDARY = 0.8e-3
MILLISECOND_BOUNDARY = 0.8


def get_optimal_time_unit_and_scale(span: float) -> Tuple[str, float]:
    """
    Determines the optimal time unit and scaling factor for a time span.

    Parameters
    ----------
    span : float
        Time span (or magnitude of a time value) in seconds.

    Returns
    -------
    Tuple[str, float]
        A tuple containing the time unit string (e.g., "s", "ms", "us", "ns")
        and the corresponding scaling factor (e.g. 1.0, 1e3, 1e6, 1e9).
    """
    span = abs(span)
    if span == 0 or span >= MILLISECOND_BOUNDARY:
        return "s", 1.0
    elif span < PICOSECOND_BOUNDARY:
        return "ps", 1e12
    elif span < NANOSECOND_BOUNDARY:
        return "ns", 1e9
    elif span < MICROSECOND_BOUNDARY:
        return "us", 1e6
    else:
        return "ms", 1e3


def format_time_label(t: float, unit_span: Optional[float] = None) -> str:
    """
    Format a time in seconds with an auto-selected unit.

    Parameters
    ----------
    t : float
        Time in seconds.
    unit_span : Optional[float], default=None
        Span used to pick the unit. Defaults to ``t`` itself; passing the
        sampling interval keeps every label of a buffer in the same unit.

    Returns
    -------
    str
        Label such as ``"1.5 ms"``.
    """
    unit, scale = get_optimal_time_unit_and_scale(t if unit_span is None else unit_span)
    return f"{np.round(t * scale, 6):g} {unit}"


def channel_label(index: int, names: Optional[Sequence[str]] = None) -> str:
    """Label for a channel row, falling back to ``"Ch <n>"``."""
    if names is not None and index < len(names):
        return names[index]
    return f"Ch {index + 1}"


def index_label(index: int) -> str:
    """Label for a synthetic sample index."""
    return f"#{index}"
