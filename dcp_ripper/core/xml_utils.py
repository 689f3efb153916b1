"""Streaming XML helpers shared by the DCP document parsers."""

import xml.etree.ElementTree as ET
from typing import Iterator, Tuple


def local_name(tag: str) -> str:
    """Strip the namespace from an ElementTree tag: "{ns}Reel" -> "Reel"."""
    return tag.rsplit("}", 1)[-1]


def iter_events(source) -> Iterator[Tuple[str, ET.Element, int]]:
    """
    Stream (event, element, depth) triples from an XML file object.

    Depth is 1 for the root element, and the same for an element's start and
    end events. Finished elements are cleared to keep memory flat.
    """
    depth = 0
    for event, elem in ET.iterparse(source, events=("start", "end")):
        if event == "start":
            depth += 1
            yield event, elem, depth
        else:
            yield event, elem, depth
            elem.clear()
            depth -= 1


def root_name(path) -> str:
    """Local name of a document's root element, skipping the XML declaration."""
    with open(path, "rb") as fh:
        for _, elem in ET.iterparse(fh, events=("start",)):
            return local_name(elem.tag)
    return ""
