"""Write translated text back onto collected text nodes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from bs4 import NavigableString

from .collector import OccurrenceMap


logger = logging.getLogger("domtranslate.dom")


@dataclass(slots=True)
class RewriteResult:
    """Counts of nodes written and nodes left alone."""

    rewritten: int = 0
    skipped: int = 0


def render_translation(translated: str, *, pad: bool = True) -> str:
    return f" {translated} " if pad else translated


def is_unchanged(node: NavigableString, segment: str) -> bool:
    """True while ``node`` is still attached and still holds ``segment``."""

    return node.parent is not None and node.strip() == segment


def apply_translations(
    occurrences: OccurrenceMap,
    segments: Sequence[str],
    translations: Sequence[str],
    *,
    pad: bool = True,
) -> RewriteResult:
    """Replace every occurrence of each segment with its positional translation.

    Nodes detached from the tree or whose text changed since collection are skipped.
    """

    if len(segments) != len(translations):
        raise ValueError(
            f"Got {len(translations)} translations for {len(segments)} segments"
        )

    result = RewriteResult()
    for segment, translated in zip(segments, translations):
        for node in occurrences.get(segment, ()):
            if not is_unchanged(node, segment):
                logger.debug("Skipping node no longer matching %r", segment[:40])
                result.skipped += 1
                continue
            node.replace_with(NavigableString(render_translation(translated, pad=pad)))
            result.rewritten += 1
    return result
