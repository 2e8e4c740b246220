import sys
from typing import Any, Dict, Optional

from loguru import logger

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")

# --- Default configuration dictionary ---
DEFAULT_CONFIG: Dict[str, Any] = {
    "DECIMATION_FACTOR": 1,  # keep every Nth incoming frame
    "SAMPLING_INTERVAL": None,  # seconds between incoming frames (None: index labels)
    "T_START": 0.0,  # time of the first incoming frame (seconds)
    "CHANNEL_NAMES": None,  # list of channel labels for the frame buffer
    "RESOURCE_PATH": ".",  # directory holding the channel files
    "CHANNEL_FILES": [],  # channel files, relative to RESOURCE_PATH
    "LOG_LEVEL": "INFO",  # logging level: DEBUG, INFO, SUCCESS, WARNING, ERROR, CRITICAL
}


def configure_logging(log_level: str = "INFO") -> None:
    """
    Configure loguru logging with specified level.

    Parameters
    ----------
    log_level : str, default="INFO"
        Logging level: DEBUG, INFO, SUCCESS, WARNING, ERROR, CRITICAL.
    """
    level = log_level.upper()
    if level not in LOG_LEVELS:
        raise ValueError(
            f"Unknown log level: {log_level}. Choose from {', '.join(LOG_LEVELS)}"
        )
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        colorize=True,
    )


def merge_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Merge user overrides over the default configuration and validate the result.

    Parameters
    ----------
    overrides : Optional[Dict[str, Any]], default=None
        Configuration keys to override. Keys must be present in DEFAULT_CONFIG.

    Returns
    -------
    Dict[str, Any]
        A new, validated configuration dictionary.

    Raises
    ------
    ValueError
        If an unknown key is given or a value is out of range.
    """
    merged = DEFAULT_CONFIG.copy()
    merged["CHANNEL_FILES"] = list(DEFAULT_CONFIG["CHANNEL_FILES"])
    if overrides:
        unknown = sorted(set(overrides) - set(DEFAULT_CONFIG))
        if unknown:
            raise ValueError(
                f"Unknown configuration keys: {unknown}. Valid keys: {sorted(DEFAULT_CONFIG)}"
            )
        merged.update(overrides)

    factor = merged["DECIMATION_FACTOR"]
    if isinstance(factor, bool) or not isinstance(factor, int) or factor < 1:
        raise ValueError(
            f"DECIMATION_FACTOR must be an integer >= 1. Got {factor!r}"
        )

    interval = merged["SAMPLING_INTERVAL"]
    if interval is not None and not interval > 0:
        raise ValueError(f"SAMPLING_INTERVAL must be positive or None. Got {interval!r}")

    if str(merged["LOG_LEVEL"]).upper() not in LOG_LEVELS:
        raise ValueError(
            f"Unknown LOG_LEVEL: {merged['LOG_LEVEL']}. Choose from {', '.join(LOG_LEVELS)}"
        )

    logger.debug(f"Merged configuration: {merged}")
    return merged
