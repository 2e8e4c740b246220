"""
Streaming components for PyTrace.

This package contains the decimating frame buffer fed one frame at a time by
an acquisition or computation pipeline.
"""

from pytrace.stream.frame_buffer import DecimatingFrameBuffer
from pytrace.stream.labels import format_time_label, get_optimal_time_unit_and_scale

__all__ = [
    "DecimatingFrameBuffer",
    "format_time_label",
    "get_optimal_time_unit_and_scale",
]
