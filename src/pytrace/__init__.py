"""
PyTrace: streaming trace buffers for display

Bounded, randomly indexable buffers that feed incrementally produced
multichannel time series to tables and plots.
"""

# Import from channel subpackage
from pytrace.channel.channel_buffer import ChannelSampleBuffer
from pytrace.channel.channel_set import ChannelSet
from pytrace.channel.io import load_channel_samples
from pytrace.config import DEFAULT_CONFIG, configure_logging, merge_config
from pytrace.errors import (
    DimensionMismatch,
    EmptyBuffer,
    IndexOutOfRange,
    LoadFailure,
    PyTraceError,
)

# Import from stream subpackage
from pytrace.stream.frame_buffer import DecimatingFrameBuffer
from pytrace.table import TableSource, to_array

__all__ = [
    # Streaming frames
    "DecimatingFrameBuffer",
    # Channels
    "ChannelSampleBuffer",
    "ChannelSet",
    "load_channel_samples",
    # Table contract
    "TableSource",
    "to_array",
    # Configuration and logging
    "DEFAULT_CONFIG",
    "configure_logging",
    "merge_config",
    # Errors
    "PyTraceError",
    "DimensionMismatch",
    "IndexOutOfRange",
    "LoadFailure",
    "EmptyBuffer",
]
