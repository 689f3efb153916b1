"""
Composition Playlist Resolver
=============================

Walks a composition playlist (CPL) and rebuilds its reels: which essence
files carry the picture and the sound, where playback starts in each, how
long the reel runs and at what frame rate.

The document is streamed. Picture and sound asset blocks open a context in
which Id, EntryPoint, Duration and FrameRate values are attributed to the
video or the audio side of the current reel. Subtitle, caption, marker and
auxiliary data blocks are skipped whole, by depth, so nested elements of the
same name can't end the skip early.

Usage:
    from dcp_ripper.core.playlist import load_composition

    composition = load_composition("/dcp/MyMovie_FTR/CPL_abc.xml")
    for reel in composition.playable_reels:
        print(reel.video_file, reel.duration, reel.framerate)
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..exceptions import PlaylistParseError
from .asset_map import list_essence_files, parse_asset_map
from .naming import CompositionMetadata, classify
from .xml_utils import iter_events, local_name

logger = logging.getLogger(__name__)

PLAYLIST_ROOT = "CompositionPlaylist"
DEFAULT_FRAME_RATE = 24.0
UHD_MARKER = "_4K"

PICTURE_ELEMENTS = ("MainPicture", "MainStereoscopicPicture")
SOUND_ELEMENTS = ("MainSound",)
SKIPPED_ELEMENTS = frozenset({
    "MainSubtitle",
    "MainClosedCaption",
    "ClosedCaption",
    "MainCaption",
    "MainMarkers",
    "AuxData",
})


@dataclass(frozen=True)
class Reel:
    """A single reel of content."""

    video_file: Optional[str] = None
    audio_file: Optional[str] = None
    is_3d: bool = False
    video_start_frame: int = 0
    audio_start_frame: int = 0
    duration: int = 0
    framerate: float = DEFAULT_FRAME_RATE
    needs_key: bool = False  # encrypted, can't be processed

    @property
    def duration_seconds(self) -> float:
        return self.duration / self.framerate if self.framerate else 0.0


@dataclass(frozen=True)
class Composition:
    """A parsed composition: its reels in playlist order and its title metadata."""

    path: str
    title: str
    reels: Tuple[Reel, ...] = ()
    metadata: Optional[CompositionMetadata] = field(default=None, compare=False)

    @property
    def is_4k(self) -> bool:
        return UHD_MARKER in self.title

    @property
    def playable_reels(self) -> List[Reel]:
        """Reels that can be processed: unencrypted, with a video track."""
        return [r for r in self.reels if not r.needs_key and r.video_file is not None]

    def downscaled_title(self) -> str:
        """Title of the 2K version of this composition."""
        return self.title.replace(UHD_MARKER, "_2K")

    def __str__(self):
        return str(self.metadata) if self.metadata else self.title


class _EssenceResolver:
    """Resolves asset Ids to files, with a size-based guess for unmapped assets."""

    def __init__(self, directory: Path, assets: Dict[str, str]):
        self.directory = directory
        self.assets = assets
        self._fallback = None

    def _fallback_pair(self) -> Optional[Tuple[Path, Path]]:
        """(video, audio) when the folder holds exactly two essences of different sizes."""
        if self._fallback is None:
            pair = ()
            candidates = list_essence_files(self.directory)
            if len(candidates) == 2:
                first, second = candidates
                first_size, second_size = first.stat().st_size, second.stat().st_size
                if first_size == second_size:
                    logger.warning(
                        f"[Playlist] Can't tell video from audio in {self.directory}: "
                        f"both essences are {first_size} bytes"
                    )
                elif first_size > second_size:
                    pair = (first, second)
                else:
                    pair = (second, first)
            self._fallback = pair
        return self._fallback or None

    def resolve(self, asset_id: str, video: bool) -> Optional[str]:
        relative = self.assets.get(asset_id)
        if relative is not None:
            return str(self.directory / relative)
        # Single reel content with a missing asset map: the larger file is the picture
        pair = self._fallback_pair()
        if pair is None:
            logger.debug(f"[Playlist] Unresolved asset {asset_id} in {self.directory}")
            return None
        return str(pair[0] if video else pair[1])


def _parse_frame_rate(value: str, is_3d: bool) -> Optional[float]:
    """Parse "48 1" style rates; interop 3D stores both eyes, so it's halved."""
    parts = value.split()
    if not parts:
        return None
    numerator, denominator = parts if len(parts) == 2 else (parts[0], "1")
    rate = float(numerator) / float(denominator)
    return rate * .5 if is_3d else rate


def resolve_playlist(cpl_path) -> Tuple[str, List[Reel]]:
    """
    Parse a composition playlist.

    Args:
        cpl_path: Path of the CPL document

    Returns:
        Tuple of (content title, reels in document order). The title falls
        back to the file name if the playlist has none.

    Raises:
        PlaylistParseError: the document is not well-formed, is not a
            composition playlist, or holds non-numeric timing values
    """
    path = Path(cpl_path)
    directory = path.parent
    resolver = _EssenceResolver(directory, parse_asset_map(directory))

    title = None
    reels: List[Reel] = []
    reel: Optional[dict] = None
    video = audio = False
    skip_depth = 0

    try:
        with open(path, "rb") as fh:
            for event, elem, depth in iter_events(fh):
                name = local_name(elem.tag)
                if skip_depth:
                    if event == "end" and depth == skip_depth:
                        skip_depth = 0
                    continue

                if event == "start":
                    if depth == 1 and name != PLAYLIST_ROOT:
                        raise PlaylistParseError(str(path), f"root element is {name}")
                    if name in SKIPPED_ELEMENTS:
                        skip_depth = depth
                    elif name == "Reel":
                        reel = {}
                    elif name in PICTURE_ELEMENTS:
                        video = True
                        if name == "MainStereoscopicPicture" and reel is not None:
                            reel["is_3d"] = True
                    elif name in SOUND_ELEMENTS:
                        audio = True
                    continue

                text = (elem.text or "").strip()
                if name == "Reel":
                    if reel is not None:
                        reels.append(Reel(**reel))
                    reel = None
                elif name in PICTURE_ELEMENTS:
                    video = False
                elif name in SOUND_ELEMENTS:
                    audio = False
                elif name == "ContentTitleText":
                    if title is None:
                        title = text
                elif reel is None:
                    continue
                elif name == "KeyId":
                    reel["needs_key"] = True
                elif video or audio:
                    _read_asset_value(reel, name, text, video, resolver)
    except ET.ParseError as e:
        raise PlaylistParseError(str(path), str(e)) from e
    except (ValueError, ZeroDivisionError) as e:
        raise PlaylistParseError(str(path), f"invalid value: {e}") from e

    if not title:
        title = path.name
    logger.info(f"[Playlist] {title}: {len(reels)} reel(s)")
    return title, reels


def _read_asset_value(reel: dict, name: str, text: str, video: bool, resolver: _EssenceResolver):
    """Attribute a value inside a picture or sound block to the current reel."""
    if name == "Id":
        resolved = resolver.resolve(text, video)
        if resolved is not None:
            reel["video_file" if video else "audio_file"] = resolved
    elif name == "EntryPoint":
        if text:
            reel["video_start_frame" if video else "audio_start_frame"] = int(text)
    elif name == "Duration":
        # The picture duration wins over the sound duration
        if text and (video or "duration" not in reel):
            reel["duration"] = int(text)
    elif name == "FrameRate":
        rate = _parse_frame_rate(text, reel.get("is_3d", False))
        if rate is not None:
            reel["framerate"] = rate


def load_composition(cpl_path) -> Composition:
    """
    Load a composition for processing.

    The content title is resolved from the playlist and classified with the
    naming convention.
    """
    title, reels = resolve_playlist(cpl_path)
    return Composition(
        path=str(cpl_path),
        title=title,
        reels=tuple(reels),
        metadata=classify(title),
    )
