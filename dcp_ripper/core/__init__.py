"""
DCP metadata parsing: naming convention, asset maps, composition playlists.
"""

from .asset_map import list_essence_files, parse_asset_map
from .batch import BatchResult, group_languages, load_batch, resolve_output_dir, run_batch
from .finder import find_compositions, is_composition_playlist
from .naming import CompositionMetadata, classify, get_content_title
from .playlist import Composition, Reel, load_composition, resolve_playlist

__all__ = [
    "list_essence_files",
    "parse_asset_map",
    "BatchResult",
    "group_languages",
    "load_batch",
    "resolve_output_dir",
    "run_batch",
    "find_compositions",
    "is_composition_playlist",
    "CompositionMetadata",
    "classify",
    "get_content_title",
    "Composition",
    "Reel",
    "load_composition",
    "resolve_playlist",
]
