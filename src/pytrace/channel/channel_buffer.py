from typing import Callable, Optional, Sequence, Tuple

import numpy as np
from loguru import logger
from numba import njit

from pytrace.channel.io import load_channel_samples
from pytrace.errors import EmptyBuffer, LoadFailure

Loader = Callable[[str, str], Sequence[float]]


@njit
def _min_max_numba(x: np.ndarray) -> Tuple[float, float, bool]:
    """
    Numba-optimized single pass over a waveform.

    Parameters
    ----------
    x : np.ndarray
        Non-empty input signal array.

    Returns
    -------
    Tuple[float, float, bool]
        Minimum, maximum, and whether any sample was NaN.
    """
    x_min = x[0]
    x_max = x[0]
    has_nan = False
    for i in range(len(x)):
        val = x[i]
        if np.isnan(val):
            has_nan = True
        if val < x_min:
            x_min = val
        if val > x_max:
            x_max = val
    return x_min, x_max, has_nan


class ChannelSampleBuffer:
    """
    Holds the full waveform of one channel for display.

    The waveform is loaded in bulk by ``init_channel`` through a loader
    callable; its minimum and maximum are computed once per load and cached
    for axis scaling. Enabled/visible flags are independent of the data.
    """

    def __init__(
        self,
        resource_path: str,
        source_identifier: str,
        enabled: bool = True,
        visible: bool = True,
        loader: Optional[Loader] = None,
    ):
        """
        Initialise an empty channel.

        Parameters
        ----------
        resource_path : str
            Directory where the channel files are stored.
        source_identifier : str
            File (or other source key) to load the waveform from.
        enabled : bool, default=True
            Whether the channel is initially enabled.
        visible : bool, default=True
            Whether the channel is initially visible.
        loader : Optional[Loader], default=None
            ``loader(resource_path, source_identifier)`` returning the samples.
            Defaults to ``load_channel_samples``.
        """
        self._resource_path = resource_path
        self._source_identifier = source_identifier
        self._enabled = enabled
        self._visible = visible
        self._loader = loader if loader is not None else load_channel_samples

        # (samples, minimum, maximum), swapped as a whole so readers never mix loads
        self._state: Tuple[np.ndarray, Optional[float], Optional[float]] = (
            self._freeze(np.empty(0, dtype=np.float64)),
            None,
            None,
        )

    def __repr__(self) -> str:
        return (
            f"ChannelSampleBuffer({self._source_identifier!r}, samples={len(self)}, "
            f"enabled={self._enabled}, visible={self._visible})"
        )

    @staticmethod
    def _freeze(arr: np.ndarray) -> np.ndarray:
        arr.flags.writeable = False
        return arr

    @property
    def resource_path(self) -> str:
        return self._resource_path

    def set_resource_path(self, path: str) -> None:
        self._resource_path = path

    @property
    def source_identifier(self) -> str:
        return self._source_identifier

    def set_source_identifier(self, source_identifier: str) -> None:
        self._source_identifier = source_identifier

    @property
    def samples(self) -> np.ndarray:
        """Read-only view of the loaded waveform (empty if not loaded)."""
        return self._state[0]

    def __len__(self) -> int:
        return len(self._state[0])

    def is_loaded(self) -> bool:
        return len(self) > 0

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def is_enabled(self) -> bool:
        return self._enabled

    def set_visible(self, visible: bool) -> None:
        self._visible = visible

    def is_visible(self) -> bool:
        return self._visible

    def minimum(self) -> float:
        """
        Smallest sample value.

        Raises
        ------
        EmptyBuffer
            If no samples are loaded.
        """
        x_min = self._state[1]
        if x_min is None:
            raise EmptyBuffer(f"Channel {self._source_identifier!r} holds no samples")
        return x_min

    def maximum(self) -> float:
        """
        Largest sample value.

        Raises
        ------
        EmptyBuffer
            If no samples are loaded.
        """
        x_max = self._state[2]
        if x_max is None:
            raise EmptyBuffer(f"Channel {self._source_identifier!r} holds no samples")
        return x_max

    def value_range(self) -> Tuple[float, float]:
        """(minimum, maximum) of the loaded waveform."""
        _, x_min, x_max = self._state
        if x_min is None or x_max is None:
            raise EmptyBuffer(f"Channel {self._source_identifier!r} holds no samples")
        return x_min, x_max

    def init_channel(self) -> None:
        """
        Load the waveform and compute its extrema.

        The new samples and extrema are published together only after the load
        and the scan both succeed; on failure the previous state is kept.

        Raises
        ------
        LoadFailure
            If the loader raises, returns something other than a 1D numeric
            array, or the waveform contains NaN. Infinite samples are kept;
            they order like any other value and show up in the extrema.
        """
        try:
            raw = self._loader(self._resource_path, self._source_identifier)
            x = np.array(raw, dtype=np.float64)
        except Exception as e:
            logger.warning(
                f"Failed to load channel {self._source_identifier!r} from {self._resource_path!r}: {e}"
            )
            raise LoadFailure(
                f"Could not load channel {self._source_identifier!r} from {self._resource_path!r}: {e}"
            ) from e

        if x.ndim != 1:
            raise LoadFailure(
                f"Channel {self._source_identifier!r} must be one-dimensional. Got shape {x.shape}"
            )

        if x.size == 0:
            logger.warning(f"Channel {self._source_identifier!r} loaded with no samples")
            x_min, x_max = None, None
        else:
            x_min, x_max, has_nan = _min_max_numba(x)
            if has_nan:
                raise LoadFailure(
                    f"Channel {self._source_identifier!r} contains NaN samples"
                )
            x_min, x_max = float(x_min), float(x_max)

        self._state = (self._freeze(x), x_min, x_max)
        logger.success(
            f"Loaded channel {self._source_identifier!r}: {x.size} samples, "
            f"min={x_min}, max={x_max}"
        )

    def clear(self) -> None:
        """Drop the samples and invalidate the extrema."""
        self._state = (self._freeze(np.empty(0, dtype=np.float64)), None, None)
        logger.debug(f"Cleared channel {self._source_identifier!r}")
