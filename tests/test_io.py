import struct

import numpy as np
import pytest

from pytrace.channel.io import get_waveform_params, load_channel_samples, read_waveform

SIDECAR = """<?xml version="1.0"?>
<Database>
  <Prop Name="Resolution" Value="1e-06"/>
  <Prop Name="VerticalScale" Value="0.5"/>
  <Prop Name="VerticalOffset" Value="1.0"/>
  <Prop Name="ByteOrder" Value="LSB First"/>
  <Prop Name="SignalFormat" Value="INT16"/>
  <Prop Name="SignalHardwareRecordLength" Value="4"/>
</Database>
"""


def _write_waveform(directory, name="trace.Wfm.bin", sidecar_name="trace.bin"):
    values = np.array([0, 2, -4, 6], dtype="<i2")
    (directory / name).write_bytes(struct.pack("<II", 2, len(values)) + values.tobytes())
    (directory / sidecar_name).write_text(SIDECAR, encoding="utf-8")
    return directory / name


def test_get_waveform_params(tmp_path) -> None:
    bin_path = _write_waveform(tmp_path)
    params = get_waveform_params(str(bin_path))

    assert params["sampling_interval"] == 1e-6
    assert params["vertical_scale"] == 0.5
    assert params["vertical_offset"] == 1.0
    assert params["byte_order"] == "LSB"
    assert params["signal_format"] == "int16"
    assert params["signal_hardware_record_length"] == 4


def test_read_waveform_applies_scale_and_offset(tmp_path) -> None:
    bin_path = _write_waveform(tmp_path)
    np.testing.assert_array_equal(read_waveform(str(bin_path)), [1.0, 2.0, -1.0, 4.0])


def test_plain_bin_uses_xml_sidecar(tmp_path) -> None:
    _write_waveform(tmp_path, name="lead.bin", sidecar_name="lead.xml")
    np.testing.assert_array_equal(
        load_channel_samples(str(tmp_path), "lead.bin"), [1.0, 2.0, -1.0, 4.0]
    )


def test_missing_sidecar(tmp_path) -> None:
    (tmp_path / "lonely.bin").write_bytes(struct.pack("<II", 4, 0))
    with pytest.raises(FileNotFoundError):
        read_waveform(str(tmp_path / "lonely.bin"))


def test_broken_sidecar(tmp_path) -> None:
    bin_path = _write_waveform(tmp_path)
    (tmp_path / "trace.bin").write_text("<Database><Prop", encoding="utf-8")
    with pytest.raises(RuntimeError):
        read_waveform(str(bin_path))


def test_text_samples_accept_commas_and_whitespace(tmp_path) -> None:
    (tmp_path / "lead.csv").write_text("1.5, -2\n3 4.25\n", encoding="utf-8")
    np.testing.assert_array_equal(
        load_channel_samples(str(tmp_path), "lead.csv"), [1.5, -2.0, 3.0, 4.25]
    )


def test_malformed_text(tmp_path) -> None:
    (tmp_path / "lead.txt").write_text("1.0\nabc\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_channel_samples(str(tmp_path), "lead.txt")


def test_npy_file(tmp_path) -> None:
    np.save(tmp_path / "lead.npy", np.array([3.0, -1.0]))
    np.testing.assert_array_equal(
        load_channel_samples(str(tmp_path), "lead.npy"), [3.0, -1.0]
    )


def test_npy_must_be_one_dimensional(tmp_path) -> None:
    np.save(tmp_path / "grid.npy", np.zeros((2, 2)))
    with pytest.raises(ValueError):
        load_channel_samples(str(tmp_path), "grid.npy")


def test_absolute_identifier_ignores_resource_path(tmp_path) -> None:
    path = tmp_path / "lead.txt"
    path.write_text("2.0\n", encoding="utf-8")
    np.testing.assert_array_equal(load_channel_samples("/nowhere", str(path)), [2.0])


def test_missing_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_channel_samples(str(tmp_path), "nope.npy")
