"""Text node collection over a parsed HTML tree."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PageElement, PreformattedString


logger = logging.getLogger("domtranslate.dom")

IGNORE_TAGS = frozenset({"script", "style", "img"})

OccurrenceMap = dict[str, list[NavigableString]]


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML string into a document tree."""

    return BeautifulSoup(html, "html.parser")


def document_root(soup: BeautifulSoup) -> Tag:
    """Return the ``<body>`` element when present, else the whole document."""

    return soup.body or soup


def is_text_node(node: PageElement) -> bool:
    """True for plain character data; comments, doctypes and CDATA are excluded."""

    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def segment_key(text: str) -> Optional[str]:
    """Return the deduplication key for raw node text, or None if it is blank."""

    stripped = text.strip()
    return stripped or None


def collect_segments(root: PageElement, ignore_tags: Iterable[str] = IGNORE_TAGS) -> OccurrenceMap:
    """Map every distinct trimmed text under ``root`` to the nodes holding it.

    Keys are inserted in document order of their first occurrence. Elements whose
    tag is in ``ignore_tags`` are skipped together with their whole subtree. The tree
    is not modified.
    """

    ignored = {tag.lower() for tag in ignore_tags}
    occurrences: OccurrenceMap = {}
    stack: list[PageElement] = [root]
    while stack:
        node = stack.pop()
        if isinstance(node, Tag):
            if node.name and node.name.lower() in ignored:
                continue
            stack.extend(reversed(node.contents))
        elif is_text_node(node):
            key = segment_key(str(node))
            if key is None:
                continue
            occurrences.setdefault(key, []).append(node)

    logger.debug(
        "Collected %d distinct segments from %d text nodes",
        len(occurrences),
        sum(len(nodes) for nodes in occurrences.values()),
    )
    return occurrences
