import numpy as np
from loguru import logger

from pytrace import (
    ChannelSet,
    DecimatingFrameBuffer,
    LoadFailure,
    configure_logging,
    merge_config,
)

# --- User configuration dictionary ---
CONFIG = {
    "DECIMATION_FACTOR": 10,  # keep every 10th frame for display
    "SAMPLING_INTERVAL": 1e-3,  # 1 kHz acquisition
    "LOG_LEVEL": "SUCCESS",  # logging level: DEBUG, INFO, SUCCESS, WARNING, ERROR, CRITICAL
    # ---
    "RESOURCE_PATH": "../data/channels/",
    "CHANNEL_FILES": [
        "ecg_lead1.txt",
        "ecg_lead2.txt",
        "ecg_lead3.txt",
    ],
}


def main() -> None:
    """
    Load every channel, then replay them through a decimating frame buffer
    one frame at a time, as an acquisition loop would.
    """
    config = merge_config(CONFIG)
    configure_logging(config["LOG_LEVEL"])

    channels = ChannelSet.from_config(config)
    try:
        channels.init_channels()
    except LoadFailure as e:
        logger.error(f"Giving up: {e}")
        return

    y_min, y_max = channels.value_range()
    logger.success(f"Display range over visible channels: [{y_min:.3g}, {y_max:.3g}]")

    config["CHANNEL_NAMES"] = [ch.source_identifier for ch in channels]
    frames = DecimatingFrameBuffer.from_config(config)
    n_samples = min(len(ch) for ch in channels)
    stacked = np.vstack([ch.samples[:n_samples] for ch in channels])
    for i in range(n_samples):
        frames.append(stacked[:, i])

    logger.success(
        f"Streamed {frames.frames_seen} frames, retained {frames.column_count()} "
        f"({frames.row_count()} channels)"
    )
    last = frames.column_count() - 1
    if last >= 0:
        logger.info(
            f"Last retained frame at {frames.header(last, 'frame')}: "
            + ", ".join(
                f"{frames.header(c, 'channel')}={frames.value_at(c, last):.3g}"
                for c in range(frames.row_count())
            )
        )


if __name__ == "__main__":
    main()
