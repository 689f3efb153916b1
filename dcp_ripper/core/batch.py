"""
Batch handling of compositions.

One bad composition must never stop the others. Every failure is recorded
as a line naming the composition, and the batch carries on.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from ..exceptions import DcpRipperError, OutputLocationError
from .naming import classify, get_content_title
from .playlist import Composition, load_composition

logger = logging.getLogger(__name__)

# Output path value that places the output next to the composition folder
PARENT_MARKER = "parent"


@dataclass
class BatchResult:
    """Outcome of a batch: what succeeded and why the rest failed."""

    compositions: List[Composition] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def failure_report(self) -> str:
        """One failed composition per line."""
        return "\n".join(self.failures)


@dataclass
class LanguageGroup:
    """A composition carrying the picture and same-content companions in other languages."""

    main: Composition
    others: List[Composition] = field(default_factory=list)

    @property
    def languages(self) -> List[str]:
        return [c.metadata.language for c in [self.main] + self.others]


def display_title(cpl_path) -> str:
    """Short readable title of a playlist for failure reports."""
    title = get_content_title(cpl_path)
    try:
        return str(classify(title))
    except ValueError:
        return title


def load_batch(cpl_paths: Iterable) -> BatchResult:
    """
    Load every composition in a list of playlists.

    Args:
        cpl_paths: Playlist paths, like the output of find_compositions

    Returns:
        BatchResult with the loaded compositions in input order
    """
    result = BatchResult()
    for cpl_path in cpl_paths:
        path = Path(cpl_path)
        if not path.is_file():
            result.failures.append(f"{path.name} does not exist.")
            continue
        try:
            result.compositions.append(load_composition(path))
        except (DcpRipperError, OSError, ValueError) as e:
            logger.warning(f"[Batch] Skipping {path}: {e}")
            result.failures.append(f"{display_title(path)}: {e}")
    logger.info(f"[Batch] Loaded {len(result.compositions)} composition(s), {len(result.failures)} failed")
    return result


def resolve_output_dir(composition: Composition, output_path: Optional[str] = None) -> Optional[str]:
    """
    Get the folder the outputs of a composition go to.

    Args:
        composition: The composition to place
        output_path: None to keep outputs next to the essences, PARENT_MARKER
            for the parent of the composition folder, or a folder path

    Raises:
        OutputLocationError: the parent marker is used on a root folder
    """
    if not output_path:
        return None
    if output_path == PARENT_MARKER:
        source = Path(composition.path).resolve().parent
        parent = source.parent
        if parent == source:
            raise OutputLocationError(str(composition), "above a root folder")
        return str(parent)
    return str(output_path)


def run_batch(
    compositions: Iterable[Composition],
    process: Callable[[Composition, Optional[str]], bool],
    output_path: Optional[str] = None
) -> BatchResult:
    """
    Run a processing step on each composition, collecting failures.

    Args:
        compositions: Loaded compositions
        process: Called with a composition and its output folder (None for
            next to the essences), returns whether it succeeded
        output_path: Forced output location, see resolve_output_dir

    Returns:
        BatchResult listing the compositions that were processed
    """
    result = BatchResult()
    for composition in compositions:
        logger.info(f"[Batch] Processing {composition}...")
        try:
            target = resolve_output_dir(composition, output_path)
            succeeded = process(composition, target)
        except (DcpRipperError, OSError) as e:
            result.failures.append(f"{composition}: {e}")
            continue
        if succeeded:
            result.compositions.append(composition)
        else:
            result.failures.append(f"Conversion of {composition} failed.")
    logger.info("[Batch] Finished!")
    return result


def _same_picture(a: Composition, b: Composition) -> bool:
    # Multiple aspect ratios might be available, so framing is part of the match
    ma, mb = a.metadata, b.metadata
    return (ma.title == mb.title and ma.content_type == mb.content_type
            and ma.modifiers == mb.modifiers and ma.aspect_ratio == mb.aspect_ratio)


def group_languages(compositions: Iterable[Composition]) -> List[LanguageGroup]:
    """
    Group versions of the same content that only differ in language.

    The main entry of a group is the one whose picture should be kept:
    English original versions win, and an unsubtitled version ("XX" suffix)
    wins over a subtitled one.
    """
    remains = list(compositions)
    groups = []
    while remains:
        main = remains.pop(0)
        others = []
        for other in list(remains):
            if not _same_picture(main, other):
                continue
            remains.remove(other)
            language, other_language = main.metadata.language, other.metadata.language
            if other_language.startswith("EN-") or (
                    not language.endswith("XX") and other_language.endswith("XX")):
                others.append(main)
                main = other
            else:
                others.append(other)
        groups.append(LanguageGroup(main=main, others=others))
    return groups
