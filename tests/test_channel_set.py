import numpy as np
import pytest

from pytrace import (
    ChannelSet,
    EmptyBuffer,
    IndexOutOfRange,
    LoadFailure,
    TableSource,
    merge_config,
    to_array,
)

WAVEFORMS = {
    "a.txt": [1.0, 2.0, 3.0],
    "b.txt": [-4.0, 0.0],
    "c.txt": [10.0],
}


def _loader(resource_path, source_identifier):
    if source_identifier not in WAVEFORMS:
        raise FileNotFoundError(source_identifier)
    return WAVEFORMS[source_identifier]


@pytest.fixture
def channels() -> ChannelSet:
    channel_set = ChannelSet(loader=_loader)
    for name in ("a.txt", "b.txt", "c.txt"):
        channel_set.add_channel("/data", name)
    return channel_set


def test_init_channels_loads_every_channel(channels: ChannelSet) -> None:
    channels.init_channels()
    assert [len(ch) for ch in channels] == [3, 2, 1]
    assert channels.value_range() == (-4.0, 10.0)


def test_value_range_only_uses_visible_channels(channels: ChannelSet) -> None:
    channels.init_channels()
    channels[2].set_visible(False)
    assert channels.value_range() == (-4.0, 3.0)

    for ch in channels:
        ch.set_visible(False)
    with pytest.raises(EmptyBuffer):
        channels.value_range()


def test_enabled_and_visible_filters(channels: ChannelSet) -> None:
    channels[0].set_enabled(False)
    channels[1].set_visible(False)
    assert [ch.source_identifier for ch in channels.enabled_channels()] == [
        "b.txt",
        "c.txt",
    ]
    assert [ch.source_identifier for ch in channels.visible_channels()] == [
        "a.txt",
        "c.txt",
    ]


def test_first_failure_propagates(channels: ChannelSet) -> None:
    channels.add_channel("/data", "missing.txt")
    channels.add_channel("/data", "a.txt")
    with pytest.raises(LoadFailure):
        channels.init_channels()
    assert channels[0].is_loaded()
    assert not channels[4].is_loaded()


def test_table_view(channels: ChannelSet) -> None:
    channels.init_channels()
    assert isinstance(channels, TableSource)
    assert channels.row_count() == 3
    assert channels.column_count() == 3
    assert channels.value_at(1, 0) == -4.0
    assert channels.header(1, "channel") == "b.txt"
    assert channels.header(2, "frame") == "#2"

    with pytest.raises(IndexOutOfRange):
        channels.value_at(1, 2)
    with pytest.raises(IndexOutOfRange):
        channels.value_at(3, 0)

    expected = np.array(
        [[1.0, 2.0, 3.0], [-4.0, 0.0, np.nan], [10.0, np.nan, np.nan]]
    )
    np.testing.assert_array_equal(to_array(channels), expected)


def test_clear_empties_every_channel(channels: ChannelSet) -> None:
    channels.init_channels()
    channels.clear()
    assert channels.column_count() == 0
    assert all(not ch.is_loaded() for ch in channels)


def test_getitem_out_of_range(channels: ChannelSet) -> None:
    with pytest.raises(IndexOutOfRange):
        channels[3]


def test_from_config() -> None:
    config = merge_config(
        {"RESOURCE_PATH": "/data", "CHANNEL_FILES": ["a.txt", "c.txt"]}
    )
    channel_set = ChannelSet.from_config(config, loader=_loader)
    channel_set.init_channels()

    assert len(channel_set) == 2
    assert channel_set[1].resource_path == "/data"
    assert channel_set.value_range() == (1.0, 10.0)
