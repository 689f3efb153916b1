"""
Layout remixers for the automatic downmix strategy.

A remixer takes blocks of N input channels and returns blocks of M output
channels with the same number of frames. Any object with an
``output_channels`` attribute and a ``process(block)`` method can be used;
LayoutRemixer is the built-in one. It detects the DCP layout from the
channel count, builds a consumer 7.1 bed from it, then folds that bed down
to the requested channel count using ITU-R BS.775 style coefficients.
"""

import logging
from abc import ABC, abstractmethod

import numpy as np

logger = logging.getLogger(__name__)


# ============================================================================
# ITU-R BS.775-3 Downmix Coefficients
# ============================================================================

COEF_CENTER = 0.707107      # -3 dB (1/sqrt(2))
COEF_SURROUND = 0.707107    # -3 dB
COEF_REAR = 0.5             # -6 dB
COEF_SCREEN = 0.707107      # -3 dB, SDDS Lc/Rc into the neighbouring screen channels

SUPPORTED_OUTPUTS = (2, 6, 8)


# ============================================================================
# Channel Layout Definitions
# ============================================================================

# DCP sound essence channel order (SMPTE 428-12 numbering, 0-based)
DCP_CHANNELS = {
    'L': 0,      # Left
    'R': 1,      # Right
    'C': 2,      # Center
    'LFE': 3,    # Low Frequency Effects
    'Ls': 4,     # Left Surround
    'Rs': 5,     # Right Surround
    'HI': 6,     # Hearing Impaired narration
    'VI': 7,     # Visually Impaired narration
    'Lc': 8,     # Left Center (SDDS)
    'Rc': 9,     # Right Center (SDDS)
    'Lrs': 10,   # Left Rear Surround
    'Rrs': 11,   # Right Rear Surround
}


def detect_layout(channels: int) -> str:
    """Best-effort name of a DCP layout from its channel count."""
    if channels <= 2:
        return "stereo" if channels == 2 else "mono"
    if channels <= 6:
        return "5.1"
    if channels <= 8:
        return "5.1+HI/VI"
    if channels <= 10:
        return "SDDS"
    return "7.1+SDDS"


def _get_channel(data: np.ndarray, idx: int) -> np.ndarray:
    """Safely get a channel, returning zeros if index out of range."""
    if idx < data.shape[1]:
        return data[:, idx]
    return np.zeros(data.shape[0], dtype=data.dtype)


class ChannelRemixer(ABC):
    """Streaming remixer: N channels in, output_channels out, frame count kept."""

    output_channels: int

    @abstractmethod
    def process(self, block: np.ndarray) -> np.ndarray:
        """Remix a (frames, channels) block."""


class LayoutRemixer(ChannelRemixer):
    """Detects the input layout and downmixes it to 2.0, 5.1 or 7.1."""

    def __init__(self, output_channels: int = 6):
        if output_channels not in SUPPORTED_OUTPUTS:
            raise ValueError(
                f"Unsupported output channel count: {output_channels} "
                f"(supported: {', '.join(map(str, SUPPORTED_OUTPUTS))})"
            )
        self.output_channels = output_channels
        self._announced = None

    def _bed(self, data: np.ndarray):
        """Consumer 7.1 bed channels from a DCP layout. HI/VI and sync tracks are dropped."""
        L = _get_channel(data, DCP_CHANNELS['L'])
        R = _get_channel(data, DCP_CHANNELS['R'])
        C = _get_channel(data, DCP_CHANNELS['C'])
        LFE = _get_channel(data, DCP_CHANNELS['LFE'])
        Ls = _get_channel(data, DCP_CHANNELS['Ls'])
        Rs = _get_channel(data, DCP_CHANNELS['Rs'])
        Lrs = _get_channel(data, DCP_CHANNELS['Lrs'])
        Rrs = _get_channel(data, DCP_CHANNELS['Rrs'])

        # SDDS screen channels
        Lc = _get_channel(data, DCP_CHANNELS['Lc'])
        Rc = _get_channel(data, DCP_CHANNELS['Rc'])
        L = L + COEF_SCREEN * Lc
        R = R + COEF_SCREEN * Rc
        C = C + COEF_SCREEN * (Lc + Rc)
        return L, R, C, LFE, Ls, Rs, Lrs, Rrs

    def process(self, block: np.ndarray) -> np.ndarray:
        if self._announced != block.shape[1]:
            self._announced = block.shape[1]
            logger.info(
                f"[Remixer] Detected {detect_layout(block.shape[1])} input, "
                f"remixing {block.shape[1]}ch -> {self.output_channels}ch"
            )
        L, R, C, LFE, Ls, Rs, Lrs, Rrs = self._bed(block)

        if self.output_channels == 8:
            return np.column_stack([L, R, C, LFE, Lrs, Rrs, Ls, Rs]).astype(block.dtype)

        # Fold rear surrounds into side surrounds
        Ls = Ls + COEF_REAR * Lrs
        Rs = Rs + COEF_REAR * Rrs
        if self.output_channels == 6:
            return np.column_stack([L, R, C, LFE, Ls, Rs]).astype(block.dtype)

        stereo_L = L + COEF_CENTER * C + COEF_SURROUND * Ls
        stereo_R = R + COEF_CENTER * C + COEF_SURROUND * Rs
        return np.column_stack([stereo_L, stereo_R]).astype(block.dtype)
