import os
from typing import Any, Dict, Iterator, List, Optional, Tuple

from loguru import logger

from pytrace.channel.channel_buffer import ChannelSampleBuffer, Loader
from pytrace.errors import EmptyBuffer
from pytrace.stream.labels import index_label
from pytrace.table import check_axis, check_index


class ChannelSet:
    """
    Ordered collection that owns a group of channels.

    Rows of the table view are channels; columns are sample indices up to the
    longest loaded channel.
    """

    def __init__(self, loader: Optional[Loader] = None):
        """
        Initialise an empty channel set.

        Parameters
        ----------
        loader : Optional[Loader], default=None
            Loader handed to every channel created by ``add_channel``.
        """
        self._loader = loader
        self._channels: List[ChannelSampleBuffer] = []

    @classmethod
    def from_config(
        cls, config: Dict[str, Any], loader: Optional[Loader] = None
    ) -> "ChannelSet":
        """Build a set with one channel per entry of ``CHANNEL_FILES``."""
        channel_set = cls(loader=loader)
        for channel_file in config["CHANNEL_FILES"]:
            channel_set.add_channel(config["RESOURCE_PATH"], channel_file)
        return channel_set

    def add_channel(
        self,
        resource_path: str,
        source_identifier: str,
        enabled: bool = True,
        visible: bool = True,
    ) -> ChannelSampleBuffer:
        """Create a new (unloaded) channel owned by this set and return it."""
        channel = ChannelSampleBuffer(
            resource_path, source_identifier, enabled, visible, loader=self._loader
        )
        self._channels.append(channel)
        logger.debug(f"Added channel {len(self._channels) - 1}: {source_identifier!r}")
        return channel

    def __len__(self) -> int:
        return len(self._channels)

    def __iter__(self) -> Iterator[ChannelSampleBuffer]:
        return iter(self._channels)

    def __getitem__(self, index: int) -> ChannelSampleBuffer:
        check_index(index, len(self._channels), "channel index")
        return self._channels[index]

    def init_channels(self) -> None:
        """
        Load every channel in order.

        Raises
        ------
        LoadFailure
            From the first channel that fails. Channels loaded before it keep
            their new data; later channels are not attempted.
        """
        logger.info(f"Initialising {len(self._channels)} channels")
        for channel in self._channels:
            channel.init_channel()

    def clear(self) -> None:
        for channel in self._channels:
            channel.clear()

    def enabled_channels(self) -> List[ChannelSampleBuffer]:
        return [ch for ch in self._channels if ch.is_enabled()]

    def visible_channels(self) -> List[ChannelSampleBuffer]:
        return [ch for ch in self._channels if ch.is_visible()]

    def value_range(self) -> Tuple[float, float]:
        """
        Combined (minimum, maximum) over visible, loaded channels.

        Uses only the cached extrema of each channel.

        Raises
        ------
        EmptyBuffer
            If no visible channel holds samples.
        """
        ranges = [ch.value_range() for ch in self.visible_channels() if ch.is_loaded()]
        if not ranges:
            raise EmptyBuffer("No visible channel holds samples")
        return min(r[0] for r in ranges), max(r[1] for r in ranges)

    def row_count(self) -> int:
        return len(self._channels)

    def column_count(self) -> int:
        return max((len(ch) for ch in self._channels), default=0)

    def value_at(self, channel: int, sample: int) -> float:
        check_index(channel, len(self._channels), "channel index")
        samples = self._channels[channel].samples
        check_index(sample, len(samples), "sample index")
        return float(samples[sample])

    def header(self, index: int, axis: str = "channel") -> str:
        check_axis(axis)
        if axis == "channel":
            check_index(index, len(self._channels), "channel index")
            return os.path.basename(self._channels[index].source_identifier)
        check_index(index, self.column_count(), "sample index")
        return index_label(index)
