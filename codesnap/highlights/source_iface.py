"""
Annotation source seam.

Defines the minimal interface (`AnnotationSource`) the segment builder needs
to look up the annotations active at one buffer position, plus an in-memory
span-based implementation used by tests and by callers that already hold a
highlight map.

The builder never talks to an editor directly; it only calls this interface.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Protocol, Sequence

from ..domain import Annotation


class AnnotationSource(Protocol):
    """Returns zero or more annotations for a 0-based (row, col) position."""

    def annotations_at(self, row: int, col: int) -> Sequence[Annotation]: ...


@dataclass(frozen=True)
class AnnotationSpan:
    start_col: int
    end_col: int
    annotation: Annotation

    def covers(self, col: int) -> bool:
        return self.start_col <= col < self.end_col


class SpanAnnotationSource:
    """In-memory source built from column spans.

    Annotations are returned in insertion order, which is their discovery
    order for tie-breaking purposes.
    """

    def __init__(self) -> None:
        self._rows: Dict[int, List[AnnotationSpan]] = {}

    def add_span(
        self, row: int, start_col: int, end_col: int, annotation: Annotation
    ) -> None:
        if end_col < start_col:
            raise ValueError(f"Span end {end_col} is before start {start_col}")
        self._rows.setdefault(row, []).append(
            AnnotationSpan(start_col=start_col, end_col=end_col, annotation=annotation)
        )

    def annotations_at(self, row: int, col: int) -> List[Annotation]:
        return [span.annotation for span in self._rows.get(row, ()) if span.covers(col)]
