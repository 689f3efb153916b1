"""
DCP Ripper

Metadata extraction and audio channel remapping for Digital Cinema Packages:
- Naming convention classification of composition titles
- Composition playlist and asset map resolution to reels
- Block-streamed downmix of cinema channel layouts to consumer layouts
"""

__version__ = "1.0.0"

from .audio.downmix import remap, select_strategy
from .core.enums import AudioTrack, ContentType, Downmixer, Framing, PackageVersion, Resolution
from .core.naming import CompositionMetadata, classify
from .core.playlist import Composition, Reel, load_composition, resolve_playlist

__all__ = [
    "remap",
    "select_strategy",
    "AudioTrack",
    "ContentType",
    "Downmixer",
    "Framing",
    "PackageVersion",
    "Resolution",
    "CompositionMetadata",
    "classify",
    "Composition",
    "Reel",
    "load_composition",
    "resolve_playlist",
]
