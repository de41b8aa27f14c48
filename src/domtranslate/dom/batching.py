"""Fixed-size batching of distinct text segments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence


DEFAULT_BATCH_SIZE = 20


@dataclass(slots=True, frozen=True)
class Batch:
    """An ordered, contiguous slice of segments sent in one inference call."""

    batch_id: int
    segments: tuple[str, ...]

    def __len__(self) -> int:
        return len(self.segments)


def make_batches(segments: Sequence[str], batch_size: int = DEFAULT_BATCH_SIZE) -> list[Batch]:
    """Slice ``segments`` into consecutive batches of at most ``batch_size`` items."""

    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    ordered = list(segments)
    return [
        Batch(batch_id=number, segments=tuple(ordered[start : start + batch_size]))
        for number, start in enumerate(range(0, len(ordered), batch_size), start=1)
    ]
