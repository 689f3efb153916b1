#!/usr/bin/env python3
"""
DCP Ripper CLI Tool
===================

Command-line interface for inspecting Digital Cinema Packages and remapping
their decoded sound tracks.

Examples:
  dcp-ripper scan /mnt/dcp
  dcp-ripper scan /mnt/dcp --json --multilingual
  dcp-ripper downmix reel1.wav reel1_51.wav --strategy gain-keeping-51
  dcp-ripper downmix reel1.wav --title MyMovie_FTR_F_51-Auro_2K
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from typing import List, Optional

from ..audio.downmix import remap, select_strategy
from ..config import get_settings
from ..core.batch import group_languages, load_batch
from ..core.enums import Downmixer
from ..core.finder import find_compositions
from ..core.naming import classify
from ..core.playlist import Composition
from ..exceptions import DcpRipperError
from ..logging_config import setup_logging

logger = logging.getLogger(__name__)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="DCP Ripper - composition metadata and channel remapping",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", help="List the compositions under a folder")
    scan.add_argument("root", help="Folder to search for composition playlists")
    scan.add_argument("--json", action="store_true", help="Print a JSON document")
    scan.add_argument(
        "--multilingual",
        action="store_true",
        default=None,
        help="Group compositions that only differ in language",
    )

    downmix = subparsers.add_parser("downmix", help="Remap a decoded DCP sound track")
    downmix.add_argument("input", help="PCM WAV file with DCP channel order")
    downmix.add_argument("output", nargs="?", default=None, help="Output file (default: rewrite input)")
    downmix.add_argument(
        "--strategy",
        choices=[d.value for d in Downmixer],
        default=None,
        help="Remapping strategy (default: from settings)",
    )
    downmix.add_argument("--title", help="Composition title, selects the Auro mix for Auro content")
    downmix.add_argument(
        "--channels",
        type=int,
        choices=[2, 6, 8],
        default=None,
        help="Output channels of the cavern-auto strategy",
    )

    return parser.parse_args(argv)


def _composition_to_dict(composition: Composition) -> dict:
    meta = composition.metadata
    return {
        "path": composition.path,
        "title": composition.title,
        "is_4k": composition.is_4k,
        "metadata": {
            "title": meta.title,
            "content_type": meta.content_type.display_name,
            "modifiers": meta.modifiers,
            "aspect_ratio": meta.aspect_ratio.display_name,
            "language": meta.language,
            "territory": meta.territory,
            "audio": meta.audio.display_name,
            "resolution": meta.resolution.display_name,
            "studio": meta.studio,
            "creation": meta.creation.isoformat() if meta.creation else None,
            "facility": meta.facility,
            "package_type": meta.package_type.tag,
            "standard": meta.standard,
        },
        "reels": [asdict(reel) for reel in composition.reels],
    }


def run_scan(args: argparse.Namespace) -> int:
    settings = get_settings()
    result = load_batch(find_compositions(args.root))
    multilingual = settings.MULTILINGUAL if args.multilingual is None else args.multilingual

    if args.json:
        document = {"compositions": [_composition_to_dict(c) for c in result.compositions],
                    "failures": result.failures}
        if multilingual:
            document["groups"] = [
                {"main": group.main.path, "others": [c.path for c in group.others]}
                for group in group_languages(result.compositions)
            ]
        print(json.dumps(document, indent=2))
    else:
        for composition in result.compositions:
            meta = composition.metadata
            print(f"{composition} [{meta.aspect_ratio.display_name}, {meta.audio.display_name}, "
                  f"{meta.language}/{meta.territory}] - {len(composition.reels)} reel(s)")
        if multilingual:
            for group in group_languages(result.compositions):
                if group.others:
                    print(f"{group.main}: {', '.join(group.languages)}")
        if result.failures:
            print("\nFailed:", file=sys.stderr)
            print(result.failure_report(), file=sys.stderr)
    return 0 if result.ok else 1


def run_downmix(args: argparse.Namespace) -> int:
    settings = get_settings()
    strategy = Downmixer(args.strategy) if args.strategy else settings.downmixer
    if args.title:
        strategy = select_strategy(strategy, classify(args.title).audio)
    output = remap(
        args.input,
        args.output,
        strategy=strategy,
        output_channels=args.channels or settings.OUTPUT_CHANNELS,
        block_size=settings.BLOCK_SIZE,
    )
    print(output)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = parse_arguments(argv)
    setup_logging("DEBUG" if args.verbose else None)
    try:
        if args.command == "scan":
            return run_scan(args)
        return run_downmix(args)
    except (DcpRipperError, OSError, RuntimeError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
