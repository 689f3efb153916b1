"""
Channel remapping of decoded DCP sound tracks.
"""

from .downmix import remap, remap_block, select_strategy
from .remixer import ChannelRemixer, LayoutRemixer

__all__ = ['remap', 'remap_block', 'select_strategy', 'ChannelRemixer', 'LayoutRemixer']
