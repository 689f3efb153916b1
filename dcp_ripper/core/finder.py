"""
Composition locator.

Finds composition playlists in a folder tree. A playlist is an XML document
whose root element, after the XML declaration, is CompositionPlaylist.
"""

import logging
import os
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List

from .playlist import PLAYLIST_ROOT
from .xml_utils import root_name

logger = logging.getLogger(__name__)


def is_composition_playlist(path) -> bool:
    """Check if a file is a composition playlist."""
    path = Path(path)
    if not path.name.lower().endswith("xml"):
        return False
    try:
        return root_name(path) == PLAYLIST_ROOT
    except (ET.ParseError, OSError) as e:
        logger.debug(f"[Finder] Not a playlist: {path} ({e})")
        return False


def find_compositions(root) -> List[str]:
    """
    Check a folder and its subfolders for composition playlist files.

    Folders that can't be listed are skipped.

    Returns:
        Sorted list of playlist paths
    """
    def _on_error(error: OSError):
        logger.warning(f"[Finder] Skipping unreadable folder: {error.filename}")

    found = []
    for folder, _, files in os.walk(root, onerror=_on_error):
        for name in files:
            candidate = os.path.join(folder, name)
            if is_composition_playlist(candidate):
                found.append(candidate)
    found.sort()
    logger.info(f"[Finder] {len(found)} composition(s) under {root}")
    return found
