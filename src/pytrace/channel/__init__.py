"""
Channel components for PyTrace.

This package contains whole-waveform channel buffers, the collection that owns
them, and the file loader they read from.
"""

from pytrace.channel.channel_buffer import ChannelSampleBuffer
from pytrace.channel.channel_set import ChannelSet
from pytrace.channel.io import get_waveform_params, load_channel_samples, read_waveform

__all__ = [
    "ChannelSampleBuffer",
    "ChannelSet",
    "get_waveform_params",
    "load_channel_samples",
    "read_waveform",
]
