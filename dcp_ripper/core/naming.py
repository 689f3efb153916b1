"""
DCP Naming Convention Classifier
================================

Recovers structured metadata from a standardized composition title such as
``MyMovie_FTR-1_F_EN-XX_US-13_51-Atmos_2K_ST_20230101_FAC_SMPTE_OV``.

The title is split on underscores. The first token seeds the free title; the
remaining tokens are classified in order by a fixed chain of recognizers. The
first recognizer that accepts a token wins. Some recognizers depend on what
earlier tokens were (a date opens the facility slot, a language opens the
territory slot), so classification is a fold of a small state value over the
token list.

Usage:
    from dcp_ripper.core.naming import classify

    meta = classify("MyMovie_FTR-1_F_71-Atmos_2K_20230229_XX_STUDIO")
    meta.audio            # AudioTrack.ATMOS
    meta.creation         # datetime.date(2023, 2, 28)
"""

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, replace
from datetime import date
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from .enums import (
    CONTENT_STAMPS,
    FRAMING_ALIASES,
    RESOLUTION_TAGS,
    VERSION_ALIASES,
    AudioTrack,
    ContentType,
    Framing,
    PackageVersion,
    Resolution,
)
from .xml_utils import local_name

logger = logging.getLogger(__name__)

DELIMITER = "_"
UNKNOWN_LANGUAGE = "XX"

_DATE_TOKEN = re.compile(r"^[0-9]{8}$")


@dataclass(frozen=True, eq=False)
class CompositionMetadata:
    """Everything the naming convention tells about a composition.

    Two records compare equal when they describe the same content: title,
    content type, modifiers, aspect ratio and audio layout match. Language,
    territory, studio, facility and creation date are ignored.
    """

    standard_title: str
    title: str
    content_type: ContentType = ContentType.UNKNOWN
    modifiers: str = ""
    aspect_ratio: Framing = Framing.UNKNOWN
    language: str = UNKNOWN_LANGUAGE
    territory: str = UNKNOWN_LANGUAGE
    audio: AudioTrack = AudioTrack.UNKNOWN
    resolution: Resolution = Resolution.UNKNOWN
    studio: str = ""
    creation: Optional[date] = None
    facility: str = ""
    package_type: PackageVersion = PackageVersion.OV
    standard: str = ""

    @property
    def material(self) -> str:
        """The contained material, like "Feature 1"."""
        return f"{self.content_type.display_name} {self.modifiers}"

    @property
    def short_title(self) -> str:
        return f"{self.title} {self.material}"

    def content_key(self) -> Tuple:
        return (self.title, self.content_type, self.modifiers, self.aspect_ratio, self.audio)

    def __eq__(self, other):
        if not isinstance(other, CompositionMetadata):
            return NotImplemented
        return self.content_key() == other.content_key()

    def __hash__(self):
        return hash(self.content_key())

    def __str__(self):
        return self.short_title


@dataclass(frozen=True)
class _ClassifierState:
    """Carried state of the token fold."""

    title: str = ""
    content_type: ContentType = ContentType.UNKNOWN
    modifiers: str = ""
    aspect_ratio: Framing = Framing.UNKNOWN
    language: str = ""
    territory: str = ""
    audio: AudioTrack = AudioTrack.UNKNOWN
    resolution: Resolution = Resolution.UNKNOWN
    studio: str = ""
    creation: Optional[date] = None
    facility: str = ""
    package_type: PackageVersion = PackageVersion.OV
    standard: str = ""
    was_date: bool = False
    was_language: bool = False


Recognizer = Callable[[_ClassifierState, str], Optional[_ClassifierState]]


# ============================================================================
# Token parsers
# ============================================================================

def parse_date(token: str) -> Optional[date]:
    """
    Parse a YYYYMMDD token.

    A day that doesn't exist in the month (like September 31) is retried one
    day earlier. If that is still invalid, the ValueError propagates.

    Returns:
        The date, or None if the token isn't 8 digits
    """
    if not _DATE_TOKEN.match(token):
        return None
    value = int(token)
    year, month, day = value // 10000, value % 10000 // 100, value % 100
    try:
        return date(year, month, day)
    except ValueError:
        return date(year, month, day - 1)


def _alias_lookup(token: str, aliases: dict):
    """Match the part after the first hyphen (or the whole token) against an alias table."""
    split = token.find("-")
    if split != -1:
        token = token[split + 1:]
    return aliases.get(token.lower())


def parse_audio(token: str) -> AudioTrack:
    """
    Parse an audio format tag.

    Channel-count prefixes are checked first. Immersive format names can
    appear anywhere in the token and override the prefix, so "71-Atmos" is
    Atmos.
    """
    token = token.lower()
    track = AudioTrack.UNKNOWN
    if token.startswith("20"):
        track = AudioTrack.STEREO
    elif token.startswith("51"):
        track = AudioTrack.SURROUND_51
    elif token.startswith("71"):
        track = AudioTrack.SURROUND_71
    elif token.startswith("sdds"):
        track = AudioTrack.SDDS
    elif token.startswith("cavern"):
        track = AudioTrack.CAVERN_XL if "xl" in token else AudioTrack.CAVERN
    elif token.startswith("imax5"):
        track = AudioTrack.IMAX5
    elif token.startswith("imax6"):
        track = AudioTrack.IMAX6
    elif token.startswith("imax12"):
        track = AudioTrack.IMAX12
    if "atmos" in token:
        track = AudioTrack.ATMOS
    if "auro" in token:
        track = AudioTrack.AURO
    if "auromax" in token:
        track = AudioTrack.AUROMAX
    if "dtsx" in token:
        track = AudioTrack.DTSX
    return track


def parse_content_type(token: str) -> Optional[Tuple[ContentType, str]]:
    """
    Parse a content type stamp and its unconventional modifiers.

    "FTR-1-3D" gives (FEATURE, "1, 3D").
    """
    if len(token) < 3:
        return None
    content_type = CONTENT_STAMPS.get(token[:3])
    if content_type is None:
        return None
    modifiers = ""
    for part in token[3:].split("-"):
        modifiers = part if not modifiers else f"{modifiers}, {part}"
    return content_type, modifiers


def is_language(token: str) -> bool:
    """Language tags look like "EN-XX" or "DE-FR": an early hyphen and a short second half."""
    first = token.find("-")
    if first == -1:
        return False
    second = token.find("-", first + 1)
    end = second if second != -1 else len(token)
    return first <= 3 and end - first <= 4


# ============================================================================
# Recognizer chain
# ============================================================================

def _recognize_date(state, token):
    creation = parse_date(token)
    if creation is None:
        return None
    return replace(state, creation=creation, was_date=True)


def _recognize_resolution(state, token):
    resolution = RESOLUTION_TAGS.get(token)
    if resolution is None:
        return None
    return replace(state, resolution=resolution)


def _recognize_standard(state, token):
    lowered = token.lower()
    if lowered.startswith("iop") or lowered.startswith("smpte"):
        return replace(state, standard=token.upper())
    return None


def _recognize_package(state, token):
    package_type = _alias_lookup(token, VERSION_ALIASES)
    if package_type is None:
        return None
    return replace(state, package_type=package_type)


def _recognize_audio(state, token):
    track = parse_audio(token)
    if track == AudioTrack.UNKNOWN:
        return None
    # A plain channel layout never downgrades an immersive one
    if state.audio.is_immersive and not track.is_immersive:
        return state
    return replace(state, audio=track)


def _recognize_content_type(state, token):
    parsed = parse_content_type(token)
    if parsed is None:
        return None
    content_type, modifiers = parsed
    return replace(state, content_type=content_type, modifiers=modifiers)


def _recognize_aspect(state, token):
    framing = _alias_lookup(token, FRAMING_ALIASES)
    if framing is None:
        return None
    return replace(state, aspect_ratio=framing)


def _recognize_language(state, token):
    if state.was_language:
        return replace(state, territory=token, was_language=False)
    if not state.language and is_language(token):
        return replace(state, language=token, was_language=True)
    return None


def _recognize_leftover(state, token):
    if state.was_date and not state.facility:
        return replace(state, facility=token)
    if state.content_type != ContentType.UNKNOWN:
        studio = token if not state.studio else f"{state.studio}{DELIMITER}{token}"
        return replace(state, studio=studio)
    title = token if not state.title else f"{state.title}{DELIMITER}{token}"
    return replace(state, title=title)


RECOGNIZERS: List[Recognizer] = [
    _recognize_date,
    _recognize_resolution,
    _recognize_standard,
    _recognize_package,
    _recognize_audio,
    _recognize_content_type,
    _recognize_aspect,
    _recognize_language,
    _recognize_leftover,
]


def classify_token(state: _ClassifierState, token: str) -> _ClassifierState:
    """Run a single token through the recognizer chain."""
    for recognizer in RECOGNIZERS:
        result = recognizer(state, token)
        if result is not None:
            return result
    return state


def classify(standard_title: str) -> CompositionMetadata:
    """
    Parse a standardized composition title.

    Args:
        standard_title: Title as shown on the playout server

    Returns:
        CompositionMetadata with unset language/territory set to "XX"
    """
    tokens = standard_title.split(DELIMITER)
    state = _ClassifierState(title=tokens[0])
    for token in tokens[1:]:
        state = classify_token(state, token)

    return CompositionMetadata(
        standard_title=standard_title,
        title=state.title or tokens[0],
        content_type=state.content_type,
        modifiers=state.modifiers,
        aspect_ratio=state.aspect_ratio,
        language=state.language or UNKNOWN_LANGUAGE,
        territory=state.territory or UNKNOWN_LANGUAGE,
        audio=state.audio,
        resolution=state.resolution,
        studio=state.studio,
        creation=state.creation,
        facility=state.facility,
        package_type=state.package_type,
        standard=state.standard,
    )


def get_content_title(cpl_path) -> str:
    """
    Get the content title of a composition playlist.

    Falls back to the file name when the playlist has no title element or
    can't be read.
    """
    path = Path(cpl_path)
    try:
        with open(path, "rb") as fh:
            for _, elem in ET.iterparse(fh, events=("end",)):
                if local_name(elem.tag) == "ContentTitleText":
                    title = (elem.text or "").strip()
                    if title:
                        return title
                    break
    except (ET.ParseError, OSError) as e:
        logger.debug(f"[Naming] Title lookup failed for {path.name}: {e}")
    return path.name


def classify_playlist(cpl_path) -> CompositionMetadata:
    """Classify the content title of a playlist file."""
    return classify(get_content_title(cpl_path))
