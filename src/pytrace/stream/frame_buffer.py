import threading
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
from loguru import logger

from pytrace.errors import DimensionMismatch
from pytrace.stream.labels import channel_label, format_time_label, index_label
from pytrace.table import check_axis, check_index


class DecimatingFrameBuffer:
    """
    Accumulates fixed-width frames and keeps every Nth one for display.

    Frames arrive one at a time (or as channels x samples blocks). The first
    frame and then every Nth arrival after it are retained; the rest only
    advance the arrival counter. Retained frames are exposed as a
    channels x retained-frames table through the tabular read contract.

    All state changes and reads are serialised behind one re-entrant lock, so a
    producer thread may append while a display thread reads.
    """

    def __init__(
        self,
        decimation_factor: int = 1,
        channel_names: Optional[Sequence[str]] = None,
        sampling_interval: Optional[float] = None,
        t_start: float = 0.0,
    ):
        """
        Initialise an empty buffer.

        Parameters
        ----------
        decimation_factor : int, default=1
            Retention period N. 1 keeps every frame.
        channel_names : Optional[Sequence[str]], default=None
            Channel labels. If given, must match the frame width.
        sampling_interval : Optional[float], default=None
            Seconds between incoming frames. Enables time-valued frame headers.
        t_start : float, default=0.0
            Time of the first incoming frame in seconds.

        Raises
        ------
        ValueError
            If the decimation factor or sampling interval is invalid.
        """
        self._validate_factor(decimation_factor)
        if sampling_interval is not None and not sampling_interval > 0:
            raise ValueError(
                f"sampling_interval must be positive or None. Got {sampling_interval}"
            )

        self._lock = threading.RLock()
        self._decimation_factor = int(decimation_factor)
        self._channel_names = list(channel_names) if channel_names is not None else None
        self.sampling_interval = sampling_interval
        self.t_start = float(t_start)

        self._frames: List[np.ndarray] = []
        self._width: Optional[int] = None
        self._arrival_counter = 0
        self._frames_seen = 0

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "DecimatingFrameBuffer":
        """Build a buffer from a merged configuration dictionary."""
        return cls(
            decimation_factor=config["DECIMATION_FACTOR"],
            channel_names=config.get("CHANNEL_NAMES"),
            sampling_interval=config.get("SAMPLING_INTERVAL"),
            t_start=config.get("T_START", 0.0),
        )

    @staticmethod
    def _validate_factor(decimation_factor: int) -> None:
        if (
            isinstance(decimation_factor, bool)
            or not isinstance(decimation_factor, (int, np.integer))
            or decimation_factor < 1
        ):
            raise ValueError(
                f"decimation_factor must be an integer >= 1. Got {decimation_factor!r}"
            )

    def _check_width(self, width: int) -> None:
        """Raise DimensionMismatch unless ``width`` fits the buffer."""
        if width == 0:
            raise DimensionMismatch("Frames must hold at least one channel.")
        if self._width is not None:
            if width != self._width:
                raise DimensionMismatch(
                    f"Frame width ({width}) does not match buffer width ({self._width})"
                )
        elif self._channel_names is not None and len(self._channel_names) != width:
            raise DimensionMismatch(
                f"Frame width ({width}) does not match number of channel names ({len(self._channel_names)})"
            )

    @property
    def decimation_factor(self) -> int:
        """Retention period N."""
        return self._decimation_factor

    def set_decimation_factor(self, decimation_factor: int) -> None:
        """
        Change the retention period.

        Only allowed while nothing has been retained yet; otherwise the spacing
        of retained frames (and their labels) would become inconsistent.

        Raises
        ------
        ValueError
            If the factor is invalid or frames have already been retained.
        """
        self._validate_factor(decimation_factor)
        with self._lock:
            if self._frames:
                raise ValueError(
                    f"Cannot change decimation factor from {self._decimation_factor} to "
                    f"{decimation_factor} after {len(self._frames)} frames were retained. "
                    "Call reset() first."
                )
            self._decimation_factor = int(decimation_factor)
        logger.debug(f"Decimation factor set to {decimation_factor}")

    @property
    def arrival_counter(self) -> int:
        """Position of the next incoming frame within the decimation period."""
        return self._arrival_counter

    @property
    def frames_seen(self) -> int:
        """Number of frames accepted since creation or the last reset."""
        return self._frames_seen

    @property
    def width(self) -> Optional[int]:
        """Channel count established by the first frame, or None."""
        return self._width

    def append(self, frame: Sequence[float]) -> bool:
        """
        Offer one frame to the buffer.

        Parameters
        ----------
        frame : Sequence[float]
            One value per channel.

        Returns
        -------
        bool
            True if the frame was retained, False if it was discarded.

        Raises
        ------
        DimensionMismatch
            If the frame is not one-dimensional or its width differs from the
            established width. The buffer is left unchanged.
        """
        arr = np.array(frame, dtype=np.float64)
        if arr.ndim != 1:
            raise DimensionMismatch(
                f"Frame must be one-dimensional. Got shape {arr.shape}"
            )

        with self._lock:
            self._check_width(arr.shape[0])

            retained = self._arrival_counter == 0
            if retained:
                arr.flags.writeable = False
                self._frames.append(arr)
                self._width = arr.shape[0]
            self._arrival_counter = (self._arrival_counter + 1) % self._decimation_factor
            self._frames_seen += 1
            arrival_index = self._frames_seen - 1
            column_index = len(self._frames) - 1

        if retained:
            logger.debug(f"Retained frame {arrival_index} as column {column_index}")
        return retained

    def extend(self, block: np.ndarray) -> int:
        """
        Offer a block of frames laid out as channels x samples.

        Each column is one frame, in arrival order, subject to the same
        retention rule as ``append``.

        Parameters
        ----------
        block : np.ndarray
            2D array (channels x samples).

        Returns
        -------
        int
            Number of columns retained.

        Raises
        ------
        DimensionMismatch
            If the block is not 2D or its row count differs from the buffer
            width. The buffer is left unchanged.
        """
        arr = np.array(block, dtype=np.float64)
        if arr.ndim != 2:
            raise DimensionMismatch(
                f"Block must be two-dimensional (channels x samples). Got shape {arr.shape}"
            )
        n_channels, n_samples = arr.shape

        with self._lock:
            self._check_width(n_channels)
            if n_samples == 0:
                return 0

            n = self._decimation_factor
            first = (-self._arrival_counter) % n
            keep = np.arange(first, n_samples, n)
            for idx in keep:
                column = arr[:, idx].copy()
                column.flags.writeable = False
                self._frames.append(column)
            if keep.size:
                self._width = n_channels
            self._arrival_counter = (self._arrival_counter + n_samples) % n
            self._frames_seen += n_samples
            n_columns = len(self._frames)

        logger.debug(
            f"Block of {n_samples} frames: retained {keep.size}, total columns {n_columns}"
        )
        return int(keep.size)

    def reset(self) -> None:
        """Drop every frame and forget the established width."""
        with self._lock:
            n_dropped = len(self._frames)
            self._frames = []
            self._width = None
            self._arrival_counter = 0
            self._frames_seen = 0
        logger.info(f"Frame buffer reset ({n_dropped} retained frames dropped)")

    def row_count(self) -> int:
        """Number of channels, or 0 if nothing has been retained."""
        with self._lock:
            return self._width if self._frames else 0

    def column_count(self) -> int:
        """Number of retained frames."""
        with self._lock:
            return len(self._frames)

    def __len__(self) -> int:
        return self.column_count()

    def value_at(self, channel: int, frame: int) -> float:
        """
        Value of one channel in one retained frame.

        Raises
        ------
        IndexOutOfRange
            If either index is outside the current bounds.
        """
        with self._lock:
            check_index(frame, len(self._frames), "frame index")
            check_index(channel, self._width, "channel index")
            return float(self._frames[frame][channel])

    def get_frame(self, frame: int) -> np.ndarray:
        """Read-only view of one retained frame."""
        with self._lock:
            check_index(frame, len(self._frames), "frame index")
            return self._frames[frame]

    def header(self, index: int, axis: str = "channel") -> str:
        """
        Display label for a channel row or a retained-frame column.

        Parameters
        ----------
        index : int
            Channel index (axis="channel") or retained-frame index (axis="frame").
        axis : str, default="channel"
            "channel" or "frame".

        Returns
        -------
        str
            Channel name, or the frame's arrival index / arrival time.

        Raises
        ------
        IndexOutOfRange
            If the index is outside the current channels or retained frames.
        """
        check_axis(axis)
        with self._lock:
            if axis == "channel":
                check_index(index, self._width if self._frames else 0, "channel index")
                return channel_label(index, self._channel_names)
            check_index(index, len(self._frames), "frame index")

        arrival_index = index * self._decimation_factor
        if self.sampling_interval is None:
            return index_label(arrival_index)
        return format_time_label(
            self.t_start + arrival_index * self.sampling_interval,
            unit_span=self.sampling_interval * self._decimation_factor,
        )

    def snapshot(self) -> np.ndarray:
        """
        Frozen copy of the retained data.

        Returns
        -------
        np.ndarray
            float64 array of shape (channels, retained frames); (0, 0) if empty.
        """
        with self._lock:
            if not self._frames:
                return np.empty((0, 0), dtype=np.float64)
            return np.column_stack(self._frames)
