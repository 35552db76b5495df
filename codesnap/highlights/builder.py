"""
Line segmentation and cooperative code model construction.

Walks each line character by character, resolving one style per character
and coalescing runs that share the same visual attributes into `Segment`s.
Per-character lookups against the host can be slow, so the work is exposed
as a generator that pauses every ``slice_budget`` characters; the caller
decides what to do between slices. Slicing never changes the result.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..domain import (
    Annotation,
    CodeModel,
    FontSettings,
    Line,
    Segment,
    Style,
    Theme,
)
from .resolver import StyleCache, StyleResolver
from .source_iface import AnnotationSource

LOGGER = logging.getLogger(__name__)

DEFAULT_SLICE_BUDGET = 50

LineLookup = Callable[[int], Sequence[Annotation]]


def coalesce(segments: Iterable[Segment]) -> List[Segment]:
    """Merge adjacent segments whose visual attributes are identical.

    The first segment's style name is kept; empty segments are dropped.
    """
    out: List[Segment] = []
    for seg in segments:
        if not seg.text:
            continue
        if out and out[-1].style.key == seg.style.key:
            prev = out[-1]
            out[-1] = Segment(style=prev.style, style_name=prev.style_name, text=prev.text + seg.text)
        else:
            out.append(seg)
    return out


class SegmentBuilder:
    """Turn one line of text plus a per-column lookup into segments."""

    def __init__(self, resolver: StyleResolver, slice_budget: int = DEFAULT_SLICE_BUDGET):
        if slice_budget < 1:
            raise ValueError(f"slice_budget must be positive, got {slice_budget}")
        self.resolver = resolver
        self.slice_budget = slice_budget

    def iter_segments(self, line_text: str, lookup: LineLookup) -> Iterator[Optional[Segment]]:
        """Yield the segments of ``line_text`` lazily.

        ``None`` is yielded after every ``slice_budget`` characters to mark a
        slice boundary. The generator is finite and cannot be restarted.
        """
        run_style: Optional[Style] = None
        run_name = ""
        run_chars: List[str] = []
        in_slice = 0

        for col, ch in enumerate(line_text):
            if in_slice == self.slice_budget:
                yield None
                in_slice = 0
            resolved = self.resolver.resolve_or_default(lookup(col))
            if run_style is not None and resolved.style.key == run_style.key:
                run_chars.append(ch)
            else:
                if run_chars:
                    yield Segment(style=run_style, style_name=run_name, text="".join(run_chars))
                run_style = resolved.style
                run_name = resolved.style_name
                run_chars = [ch]
            in_slice += 1

        if run_chars:
            yield Segment(style=run_style, style_name=run_name, text="".join(run_chars))

    def build(self, line_text: str, lookup: LineLookup) -> List[Segment]:
        return [seg for seg in self.iter_segments(line_text, lookup) if seg is not None]


class CodeModelTask:
    """Resumable construction of a `CodeModel` from buffer lines.

    Each call to `step()` processes at most one slice of characters (or
    finishes one line) and returns ``True`` once the model is complete. The
    task owns its own `StyleCache`, so concurrent tasks never share state.
    """

    def __init__(
        self,
        lines: Sequence[str],
        source: AnnotationSource,
        *,
        theme: Optional[Theme] = None,
        font_settings: Optional[FontSettings] = None,
        line_range: Optional[Tuple[int, int]] = None,
        slice_budget: int = DEFAULT_SLICE_BUDGET,
    ):
        self.theme = theme or Theme()
        self.font_settings = font_settings or FontSettings()
        self.cache = StyleCache()
        self._builder = SegmentBuilder(StyleResolver(self.theme, self.cache), slice_budget)
        self._lines = lines
        self._source = source
        self._line_range = line_range
        self._out: List[Line] = []
        self._gen = self._run()
        self._done = False
        self._running = False
        self.slices = 0

    def _rows(self) -> Iterator[Tuple[int, str]]:
        for row, text in enumerate(self._lines):
            if self._line_range is not None:
                start, end = self._line_range
                # 1-based inclusive, like editor line numbers
                if not (start <= row + 1 <= end):
                    continue
            yield row, text

    def _run(self) -> Iterator[None]:
        for row, text in self._rows():
            segments: List[Segment] = []
            lookup = self._lookup_for(row)
            for item in self._builder.iter_segments(text, lookup):
                if item is None:
                    yield
                else:
                    segments.append(item)
            self._out.append(Line(segments=tuple(segments)))
            yield

    def _lookup_for(self, row: int) -> LineLookup:
        source = self._source

        def lookup(col: int) -> Sequence[Annotation]:
            return source.annotations_at(row, col)

        return lookup

    @property
    def done(self) -> bool:
        return self._done

    def step(self) -> bool:
        if self._done:
            return True
        if self._running:
            raise RuntimeError("CodeModelTask.step() is not re-entrant")
        self._running = True
        try:
            next(self._gen)
            self.slices += 1
        except StopIteration:
            self._done = True
            LOGGER.debug(
                "Built %d lines in %d slices (%d cached styles)",
                len(self._out),
                self.slices,
                len(self.cache),
            )
        finally:
            self._running = False
        return self._done

    def result(self) -> CodeModel:
        if not self._done:
            raise RuntimeError("CodeModelTask has not finished")
        return CodeModel(
            lines=tuple(self._out), theme=self.theme, font_settings=self.font_settings
        )

    def run(self) -> CodeModel:
        while not self.step():
            pass
        return self.result()


def build_code_model(
    lines: Sequence[str],
    source: AnnotationSource,
    *,
    theme: Optional[Theme] = None,
    font_settings: Optional[FontSettings] = None,
    line_range: Optional[Tuple[int, int]] = None,
    slice_budget: int = DEFAULT_SLICE_BUDGET,
) -> CodeModel:
    """Build a complete code model in one go."""
    return CodeModelTask(
        lines,
        source,
        theme=theme,
        font_settings=font_settings,
        line_range=line_range,
        slice_budget=slice_budget,
    ).run()
