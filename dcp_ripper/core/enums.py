"""
Enumerations for DCP content metadata.

The naming convention packs content type, framing, audio format, resolution
and package variant into short underscore-separated tags. Each enum here
carries the tag it is recognized by, plus a display name used in listings.
"""

from enum import Enum
from typing import Dict


class ContentType(Enum):
    """Content category, keyed by its three-letter stamp."""

    UNKNOWN = ("UNK", "Unknown")
    FEATURE = ("FTR", "Feature")
    SHORT = ("SHR", "Short")
    TRAILER = ("TLR", "Trailer")
    TEST = ("TST", "Test")
    TRANSITIONAL = ("XSN", "Transitional")
    RATING_TAG = ("RTG", "RatingTag")
    TEASER = ("TSR", "Teaser")
    POLICY = ("POL", "Policy")
    PSA = ("PSA", "PublicServiceAnnouncement")
    ADVERTISEMENT = ("ADV", "Advertisement")
    PROMOTION = ("PRO", "Promotion")

    def __init__(self, stamp: str, display_name: str):
        self.stamp = stamp
        self.display_name = display_name


class Framing(Enum):
    """Picture aspect ratio."""

    UNKNOWN = ("Unknown", "Unknown")
    R119 = ("119", "1.19")
    R133 = ("133", "1.33")
    R137_ACADEMY = ("137", "1.375 (Academy)")
    R166 = ("166", "1.66")
    R178 = ("178", "1.78")
    R185_FLAT = ("185", "1.85 (Flat)")
    R235_SCOPE = ("235", "2.35 (Scope)")
    R239_SCOPE = ("239", "2.39 (Scope)")
    F_FLAT = ("F", "Flat")
    S_SCOPE = ("S", "Scope")
    C_FULL_CONTAINER = ("C", "Full container")

    def __init__(self, tag: str, display_name: str):
        self.tag = tag
        self.display_name = display_name


class Resolution(Enum):
    """Frame width class."""

    UNKNOWN = ("", "Unknown")
    R2K = ("2K", "2K")
    R4K = ("4K", "4K")

    def __init__(self, tag: str, display_name: str):
        self.tag = tag
        self.display_name = display_name


class AudioTrack(Enum):
    """Master audio track format."""

    UNKNOWN = "Unknown"
    STEREO = "Stereo"
    SURROUND_51 = "5.1"
    SURROUND_71 = "7.1"
    SDDS = "SDDS"
    ATMOS = "Atmos"
    AURO = "Auro"
    AUROMAX = "AuroMax"
    DTSX = "DTS:X"
    CAVERN = "Cavern"
    CAVERN_XL = "Cavern XL"
    IMAX5 = "IMAX 5.0"
    IMAX6 = "IMAX 6.0"
    IMAX12 = "IMAX 12-track"

    @property
    def display_name(self) -> str:
        return self.value

    @property
    def is_immersive(self) -> bool:
        """Formats carried next to, or embedded in, a channel-based track."""
        return self in IMMERSIVE_TRACKS


IMMERSIVE_TRACKS = frozenset({AudioTrack.ATMOS, AudioTrack.AURO, AudioTrack.AUROMAX, AudioTrack.DTSX})


class PackageVersion(Enum):
    """Original version or version file."""

    OV = ("OV", "Original version")
    VF = ("VF", "Version file")

    def __init__(self, tag: str, display_name: str):
        self.tag = tag
        self.display_name = display_name


class Downmixer(Enum):
    """Channel remapping strategies."""

    SURROUND = "surround"           # 7.1 if available, stripping HI/VI/sync
    GAIN_KEEPING_51 = "gain-keeping-51"
    AURO_SURROUND = "auro-surround"
    CAVERN_AUTO = "cavern-auto"

    @classmethod
    def from_name(cls, name: str) -> "Downmixer":
        """Parse a strategy from its value or member name, case-insensitively."""
        key = name.strip().lower().replace("_", "-")
        for member in cls:
            if key in (member.value, member.name.lower().replace("_", "-")):
                return member
        raise ValueError(f"Unknown downmix strategy: {name}")


def _alias_table(enum_cls, attr: str = "tag") -> Dict[str, Enum]:
    """Lower-cased matchable alias -> member, built once at import."""
    table = {}
    for member in enum_cls:
        alias = getattr(member, attr)
        if alias:
            table.setdefault(alias.lower(), member)
    return table


FRAMING_ALIASES: Dict[str, Framing] = _alias_table(Framing)
VERSION_ALIASES: Dict[str, PackageVersion] = _alias_table(PackageVersion)
# Resolution tags are matched case-sensitively
RESOLUTION_TAGS: Dict[str, Resolution] = {r.tag: r for r in Resolution if r.tag}
CONTENT_STAMPS: Dict[str, ContentType] = {c.stamp: c for c in ContentType}
