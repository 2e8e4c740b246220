import os
import struct
import xml.etree.ElementTree as ET
from typing import Any, Dict, Optional

import numpy as np
from loguru import logger

BIN_HEADER_BYTES = 8


def _get_xml_sidecar_path(bin_path: str, sidecar: Optional[str] = None) -> str:
    """
    Determine the XML sidecar file path for a binary waveform.

    Parameters
    ----------
    bin_path : str
        Path to the binary waveform file.
    sidecar : str, optional
        Name of the XML sidecar file. Relative names are resolved next to the
        binary file. If None, ``<name>.Wfm.bin`` maps to ``<name>.bin`` and
        any other ``<name>.bin`` to ``<name>.xml``.

    Returns
    -------
    str
        Full path to the XML sidecar file.
    """
    directory = os.path.dirname(bin_path)
    if sidecar is not None:
        return sidecar if os.path.isabs(sidecar) else os.path.join(directory, sidecar)

    base = os.path.splitext(os.path.basename(bin_path))[0]
    if base.endswith(".Wfm"):
        sidecar_guess = base[:-4] + ".bin"
    else:
        sidecar_guess = base + ".xml"
    return os.path.join(directory, sidecar_guess)


def get_waveform_params(bin_path: str, sidecar: Optional[str] = None) -> Dict[str, Any]:
    """
    Parse the XML sidecar of a binary waveform.

    Parameters
    ----------
    bin_path : str
        Path to the binary waveform file.
    sidecar : str, optional
        Name of the XML sidecar file. If None, guessed from ``bin_path``.

    Returns
    -------
    Dict[str, Any]
        Dictionary with keys: sampling_interval, vertical_scale, vertical_offset,
        byte_order, signal_format, signal_hardware_record_length.

    Raises
    ------
    FileNotFoundError
        If the XML sidecar file is not found.
    RuntimeError
        If the XML file cannot be parsed.
    """
    sidecar_path = _get_xml_sidecar_path(bin_path, sidecar)
    params: Dict[str, Any] = {
        "sampling_interval": None,
        "vertical_scale": None,
        "vertical_offset": None,
        "byte_order": "LSB",  # default
        "signal_format": "float32",  # default
        "signal_hardware_record_length": None,
    }
    if not os.path.exists(sidecar_path):
        raise FileNotFoundError(
            f"XML sidecar file not found: {sidecar_path} (for waveform {bin_path})"
        )

    try:
        root = ET.parse(sidecar_path).getroot()
    except ET.ParseError as e:
        raise RuntimeError(f"XML parsing error in {sidecar_path}: {e}") from e

    for prop in root.iter("Prop"):
        name = prop.attrib.get("Name", "")
        value = prop.attrib.get("Value", "")
        if not name:
            logger.warning(
                f"Found Prop element with empty Name attribute in {sidecar_path}"
            )
            continue

        try:
            if name == "Resolution":
                params["sampling_interval"] = float(value)
            elif name == "SignalResolution" and params["sampling_interval"] is None:
                params["sampling_interval"] = float(value)
            elif name == "VerticalScale":
                params["vertical_scale"] = float(value)
            elif name == "VerticalOffset":
                params["vertical_offset"] = float(value)
            elif name == "ByteOrder" and value:
                params["byte_order"] = "LSB" if "LSB" in value else "MSB"
            elif name == "SignalFormat" and value:
                if "FLOAT" in value:
                    params["signal_format"] = "float32"
                elif "INT16" in value:
                    params["signal_format"] = "int16"
                elif "INT32" in value:
                    params["signal_format"] = "int32"
                else:
                    logger.warning(
                        f"Unknown SignalFormat '{value}' in {sidecar_path}, using default float32"
                    )
            elif name == "SignalHardwareRecordLength":
                params["signal_hardware_record_length"] = int(value)
        except ValueError as e:
            logger.warning(
                f"Failed to parse {name} value '{value}' in {sidecar_path}: {e}"
            )

    logger.debug(f"XML sidecar {sidecar_path}: {params}")
    return params


def read_waveform(bin_path: str, sidecar: Optional[str] = None) -> np.ndarray:
    """
    Read a binary waveform file using its XML sidecar for scaling.

    The file starts with an 8-byte header (element size and record length as
    two little-endian uint32), followed by the raw samples.

    Parameters
    ----------
    bin_path : str
        Path to the binary waveform file.
    sidecar : str, optional
        Name of the XML sidecar file.

    Returns
    -------
    np.ndarray
        Scaled signal array (float64).

    Raises
    ------
    FileNotFoundError
        If the binary file or its sidecar is not found.
    RuntimeError
        If the header is truncated or the sidecar cannot be parsed.
    """
    if not os.path.exists(bin_path):
        raise FileNotFoundError(f"The file '{bin_path}' was not found.")
    params = get_waveform_params(bin_path, sidecar)

    dtype = {"int16": np.int16, "int32": np.int32}.get(params["signal_format"], np.float32)
    byteorder = "<" if params["byte_order"] == "LSB" else ">"

    with open(bin_path, "rb") as f:
        header_bytes = f.read(BIN_HEADER_BYTES)
    if len(header_bytes) < BIN_HEADER_BYTES:
        raise RuntimeError(
            f"Truncated header in {bin_path}: expected {BIN_HEADER_BYTES} bytes, got {len(header_bytes)}"
        )
    elsize, record_length = struct.unpack("<II", header_bytes)
    logger.debug(f"Bin header: element size {elsize} bytes, length {record_length}")

    arr = np.fromfile(bin_path, dtype=byteorder + np.dtype(dtype).char, offset=BIN_HEADER_BYTES)
    expected_length = params["signal_hardware_record_length"]
    if expected_length is not None and len(arr) != expected_length:
        logger.warning(
            f"Data length mismatch in {bin_path}: expected {expected_length} points "
            f"from SignalHardwareRecordLength, but read {len(arr)} points"
        )

    scale = params["vertical_scale"] if params["vertical_scale"] is not None else 1.0
    offset = params["vertical_offset"] if params["vertical_offset"] is not None else 0.0
    return arr.astype(np.float64) * scale + offset


def read_text_samples(path: str) -> np.ndarray:
    """
    Read whitespace- or comma-separated sample values from a text file.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the content is not numeric.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"The file '{path}' was not found.")
    with open(path, "r", encoding="utf-8") as f:
        content = f.read().replace(",", " ")
    tokens = content.split()
    try:
        return np.array([float(tok) for tok in tokens], dtype=np.float64)
    except ValueError as e:
        raise ValueError(f"Malformed sample value in {path}: {e}") from e


def load_channel_samples(resource_path: str, source_identifier: str) -> np.ndarray:
    """
    Load the full waveform of one channel.

    Parameters
    ----------
    resource_path : str
        Directory holding the channel files.
    source_identifier : str
        Channel file name. Absolute paths ignore ``resource_path``.

    Returns
    -------
    np.ndarray
        1D float64 sample array.

    Raises
    ------
    FileNotFoundError
        If the file (or a required sidecar) is missing.
    RuntimeError, ValueError
        If the content cannot be parsed.
    """
    if resource_path and not os.path.isabs(source_identifier):
        fp = os.path.join(resource_path, source_identifier)
    else:
        fp = source_identifier

    ext = os.path.splitext(fp)[1].lower()
    logger.info(f"Reading channel file: {fp}")
    if ext == ".bin":
        x = read_waveform(fp)
    elif ext == ".npy":
        if not os.path.exists(fp):
            raise FileNotFoundError(f"The file '{fp}' was not found.")
        x = np.load(fp, allow_pickle=False)
    else:
        x = read_text_samples(fp)

    x = np.asarray(x, dtype=np.float64)
    if x.ndim != 1:
        raise ValueError(f"Expected a 1D waveform in {fp}, got shape {x.shape}")
    return x
