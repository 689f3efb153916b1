"""
DCP Channel Remapper
====================

Rewrites the decoded PCM of a DCP sound track to a consumer channel layout.

DCP sound essences don't describe their channels; positions are fixed:

    0-5    L, R, C, LFE, Ls, Rs
    6-7    HI, VI narration (Auro: top front left/right)
    8-9    SDDS Lc, Rc (Auro: top center, God's Voice)
    10-11  Lrs, Rrs rear surrounds (Auro: top surround left/right)
    12+    sync signals

The file is processed in fixed-size blocks so memory use doesn't depend on
its length. Inputs of 6 or fewer channels are left untouched by every
strategy.

Usage:
    from dcp_ripper.audio.downmix import remap
    from dcp_ripper.core.enums import Downmixer

    remap("reel1.wav", "reel1_51.wav", Downmixer.GAIN_KEEPING_51)
"""

import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

import numpy as np
import soundfile as sf

from ..core.enums import AudioTrack, Downmixer
from ..exceptions import RemixerError, UnsupportedLayoutError
from .remixer import ChannelRemixer, LayoutRemixer

logger = logging.getLogger(__name__)

# 1 MB per channel at 32 bits
BLOCK_SIZE = 1 << 18

# Gain for -3 dB
MINUS_3DB = .707

# Constant power gain for downmixing God's Voice to 5.0
GV_GAIN = .4472135955

PASSTHROUGH_CHANNELS = 6
MAX_CHANNELS = 16

# Auro height channel -> ground channel it's folded into
AURO_FOLDS = ((6, 0), (7, 1), (8, 2), (10, 4), (11, 5))
AURO_GOD_VOICE = 9
AURO_GV_TARGETS = (0, 1, 2, 4, 5)

# Largest data size a plain RIFF header can describe
RIFF_LIMIT = 0xFFFFFFFF
_SUBTYPE_BYTES = {"PCM_16": 2, "PCM_24": 3, "PCM_32": 4, "FLOAT": 4, "DOUBLE": 8}


def select_strategy(requested: Downmixer, audio: AudioTrack) -> Downmixer:
    """Auro tracks are embedded in the channel layout, and need the Auro-aware surround mix."""
    if requested == Downmixer.SURROUND and audio == AudioTrack.AURO:
        return Downmixer.AURO_SURROUND
    return requested


def _check_channels(strategy: Downmixer, channels: int):
    if channels > MAX_CHANNELS:
        raise UnsupportedLayoutError(
            strategy.value, channels, f"DCP sound tracks have at most {MAX_CHANNELS} channels"
        )


def output_channel_count(strategy: Downmixer, channels: int,
                         remixer: Optional[ChannelRemixer] = None) -> int:
    """Channel count a strategy produces from a given input channel count."""
    if channels <= PASSTHROUGH_CHANNELS:
        return channels
    _check_channels(strategy, channels)
    if strategy == Downmixer.SURROUND:
        return 8 if channels >= 12 else 6
    if strategy == Downmixer.CAVERN_AUTO:
        if remixer is None:
            raise RemixerError("The automatic strategy needs a remixer", strategy=strategy.value)
        return remixer.output_channels
    return 6


# ============================================================================
# Block Functions
# ============================================================================

def gain_keeping_51(block: np.ndarray) -> np.ndarray:
    """
    Force a 5.1 output without any gain change.

    With 7 or 8 channels, 6 and 7 are rear surrounds and fold into Ls/Rs.
    With more, 6-7 are hearing/visually impaired tracks and 12+ are sync
    signals, so only 8-11 fold into Ls/Rs. This might clip, but keeps the
    surround content when it was mixed to the rears.
    """
    data = block.copy()
    channels = data.shape[1]
    first, last = (6, channels) if channels <= 8 else (8, min(channels, 12))
    for i in range(first, last):
        data[:, 4 + i % 2] += data[:, i]
    return data[:, :6]


def surround(block: np.ndarray) -> np.ndarray:
    """
    7.1 if available, else 5.1, stripping HI/VI/sync.

    DCP order is converted to consumer order (back surrounds before side
    surrounds), and the SDDS screen channels are mixed into their neighbours
    at -3 dB.
    """
    data = block.copy()
    channels = data.shape[1]
    if channels >= 12:
        data[:, [4, 10]] = data[:, [10, 4]]  # Swap SL and RL
        data[:, [5, 11]] = data[:, [11, 5]]  # Swap SR and RR
        data[:, [6, 10]] = data[:, [10, 6]]  # Move SL to HI
        data[:, [7, 11]] = data[:, [11, 7]]  # Move SR to VI
    if channels >= 10:
        data[:, 0] += MINUS_3DB * data[:, 8]  # LC to L
        data[:, 2] += MINUS_3DB * data[:, 8]  # LC to C
        data[:, 1] += MINUS_3DB * data[:, 9]  # RC to R
        data[:, 2] += MINUS_3DB * data[:, 9]  # RC to C
    return data[:, :8 if channels >= 12 else 6]


def auro_surround(block: np.ndarray) -> np.ndarray:
    """Fold an Auro embedded layout to 5.1: heights to their ground channels, God's Voice to all mains."""
    data = block.copy()
    channels = data.shape[1]
    for source, target in AURO_FOLDS:
        if source < channels:
            data[:, target] += data[:, source]
    if AURO_GOD_VOICE < channels:
        for target in AURO_GV_TARGETS:
            data[:, target] += GV_GAIN * data[:, AURO_GOD_VOICE]
    return data[:, :6]


def remap_block(block: np.ndarray, strategy: Downmixer,
                remixer: Optional[ChannelRemixer] = None) -> np.ndarray:
    """
    Remap one (frames, channels) block with a strategy.

    Raises:
        UnsupportedLayoutError: more channels than a DCP can carry
        RemixerError: the remixer returned a malformed block
    """
    channels = block.shape[1]
    if channels <= PASSTHROUGH_CHANNELS:
        return block
    _check_channels(strategy, channels)

    if strategy == Downmixer.GAIN_KEEPING_51:
        return gain_keeping_51(block)
    if strategy == Downmixer.SURROUND:
        return surround(block)
    if strategy == Downmixer.AURO_SURROUND:
        return auro_surround(block)

    if remixer is None:
        raise RemixerError("The automatic strategy needs a remixer", strategy=strategy.value)
    result = remixer.process(block)
    if result.ndim != 2 or result.shape != (block.shape[0], remixer.output_channels):
        raise RemixerError(
            f"Remixer returned a {result.shape} block for {block.shape[0]} frames "
            f"of {remixer.output_channels} channels",
            strategy=strategy.value
        )
    return result


# ============================================================================
# File-based Conversion
# ============================================================================

def _block_dtype(subtype: str) -> str:
    """float32 holds 24 bits exactly; wider samples need float64."""
    return "float64" if subtype in ("PCM_32", "DOUBLE") else "float32"


def _output_format(reader: sf.SoundFile, channels: int) -> str:
    """Keep the input container, unless the output won't fit a RIFF header."""
    bytes_per_sample = _SUBTYPE_BYTES.get(reader.subtype, 4)
    if reader.format in ("WAV", "WAVEX") and reader.frames * channels * bytes_per_sample > RIFF_LIMIT:
        return "RF64"
    return reader.format


def remap(
    input_path: str,
    output_path: Optional[str] = None,
    strategy: Downmixer = Downmixer.SURROUND,
    remixer: Optional[ChannelRemixer] = None,
    output_channels: int = 6,
    block_size: int = BLOCK_SIZE
) -> str:
    """
    Remap a PCM WAV file block by block.

    Args:
        input_path: Decoded DCP sound track
        output_path: Where to write the result; None (or the input path)
            rewrites the input
        strategy: Remapping strategy
        remixer: Remixer for the automatic strategy; a LayoutRemixer with
            output_channels is created when not given
        output_channels: Target channel count of the automatic strategy
        block_size: Frames per block

    Returns:
        Path of the remapped file. Inputs of 6 or fewer channels are copied
        unchanged (or left alone when rewriting in place).

    Raises:
        UnsupportedLayoutError: the strategy can't handle the input
        RemixerError: the remixer broke the block contract
    """
    source = Path(input_path)
    target = Path(output_path) if output_path else None
    if target is not None and target.resolve() == source.resolve():
        target = None

    with sf.SoundFile(str(source)) as reader:
        channels = reader.channels
        if channels <= PASSTHROUGH_CHANNELS:
            logger.info(f"[Downmix] {source.name} has {channels} channels, nothing to remap")
            if target is None:
                return str(source)
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, target)
            return str(target)

        if strategy == Downmixer.CAVERN_AUTO and remixer is None:
            remixer = LayoutRemixer(output_channels)
        out_channels = output_channel_count(strategy, channels, remixer)
        logger.info(
            f"[Downmix] {source.name}: {channels}ch -> {out_channels}ch ({strategy.value}), "
            f"{reader.frames} frames @ {reader.samplerate} Hz"
        )

        if target is None:
            fd, temp_name = tempfile.mkstemp(suffix=".wav", prefix="_remap_", dir=str(source.parent))
            os.close(fd)
            write_path = Path(temp_name)
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            write_path = target

        try:
            with sf.SoundFile(
                str(write_path), "w",
                samplerate=reader.samplerate,
                channels=out_channels,
                subtype=reader.subtype,
                format=_output_format(reader, out_channels),
            ) as writer:
                for block in reader.blocks(blocksize=block_size, dtype=_block_dtype(reader.subtype),
                                           always_2d=True):
                    writer.write(remap_block(block, strategy, remixer))
        except BaseException:
            write_path.unlink(missing_ok=True)
            raise

    if target is None:
        os.replace(write_path, source)
        return str(source)
    logger.info(f"[Downmix] Output: {write_path}")
    return str(write_path)
