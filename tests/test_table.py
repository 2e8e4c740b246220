import numpy as np
import pytest

from pytrace import DecimatingFrameBuffer, IndexOutOfRange, to_array
from pytrace.stream.labels import (
    channel_label,
    format_time_label,
    get_optimal_time_unit_and_scale,
)
from pytrace.table import check_index


@pytest.mark.parametrize(
    "span, unit",
    [(2.0, "s"), (0.5, "ms"), (5e-4, "us"), (5e-7, "ns"), (5e-10, "ps"), (0.0, "s")],
)
def test_time_unit_selection(span: float, unit: str) -> None:
    assert get_optimal_time_unit_and_scale(span)[0] == unit


def test_format_time_label() -> None:
    assert format_time_label(0.0015) == "1.5 ms"
    assert format_time_label(2.0, unit_span=1e-3) == "2000 ms"
    assert format_time_label(0.0, unit_span=1e-6) == "0 us"


def test_channel_label_falls_back_past_names() -> None:
    assert channel_label(0, ["Fz"]) == "Fz"
    assert channel_label(1, ["Fz"]) == "Ch 2"


def test_check_index() -> None:
    check_index(0, 1)
    with pytest.raises(IndexOutOfRange, match="empty"):
        check_index(0, 0)
    with pytest.raises(IndexOutOfRange, match="between 0 and 2"):
        check_index(3, 3)


def test_to_array_reads_through_contract() -> None:
    buf = DecimatingFrameBuffer(decimation_factor=2)
    buf.extend(np.arange(10, dtype=np.float64).reshape(2, 5))
    np.testing.assert_array_equal(to_array(buf), buf.snapshot())
    np.testing.assert_array_equal(to_array(buf), [[0.0, 2.0, 4.0], [5.0, 7.0, 9.0]])
