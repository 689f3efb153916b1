"""
Asset map resolution.

An asset map links the UUIDs a playlist references to essence file paths
relative to the package folder. Packages shipped without one are common
enough that a missing map is not an error.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List, Optional

from .xml_utils import iter_events, local_name

logger = logging.getLogger(__name__)

ASSET_MAP_NAMES = ("ASSETMAP", "ASSETMAP.xml")
ESSENCE_EXTENSION = ".mxf"


def find_asset_map(directory) -> Optional[Path]:
    """Return the asset map path of a folder, or None when it has none."""
    directory = Path(directory)
    for name in ASSET_MAP_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def parse_asset_map(directory) -> Dict[str, str]:
    """
    Get the relative file paths for asset UUIDs in a package folder.

    Each Path element is paired with the most recently read Id element. When
    an Id is listed twice, the first path is kept.

    Args:
        directory: Package folder

    Returns:
        Mapping of asset Id to path relative to the folder; empty if the
        folder has no asset map or it isn't well-formed
    """
    map_path = find_asset_map(directory)
    assets: Dict[str, str] = {}
    if map_path is None:
        logger.debug(f"[AssetMap] No asset map in {directory}")
        return assets

    next_id = ""
    try:
        with open(map_path, "rb") as fh:
            for event, elem, _ in iter_events(fh):
                if event != "end":
                    continue
                name = local_name(elem.tag)
                if name == "Id":
                    next_id = (elem.text or "").strip()
                elif name == "Path":
                    assets.setdefault(next_id, (elem.text or "").strip())
    except ET.ParseError as e:
        logger.warning(f"[AssetMap] Ignoring malformed {map_path}: {e}")
        return {}

    logger.debug(f"[AssetMap] {map_path.name}: {len(assets)} assets")
    return assets


def list_essence_files(directory) -> List[Path]:
    """
    Get all MXF files in a folder, sorted by name.

    Used when the asset map is missing or doesn't list an asset.
    """
    directory = Path(directory)
    return sorted(
        p for p in directory.iterdir()
        if p.is_file() and p.name.lower().endswith(ESSENCE_EXTENSION)
    )
