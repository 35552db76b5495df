"""
Collection of raw per-position highlights into tagged annotations.

Each highlighting layer of the host editor (regex syntax, grammar captures,
LSP semantic tokens, ad-hoc markers) hands over its own list. The collector
tags every entry with its `AnnotationKind` so the resolver can rank layers by
a closed enum instead of matching namespace strings.
"""

from __future__ import annotations

import dataclasses
from typing import Dict, Iterable, List, Optional

from ..domain import Annotation, AnnotationKind

SYNTAX_PRIORITY = 50
GRAMMAR_PRIORITY = 100
PROMOTED_PRIORITY = 200

# Layers rank by band first, then by effective priority.
BAND_RANK: Dict[AnnotationKind, int] = {
    AnnotationKind.SYNTAX: 0,
    AnnotationKind.GRAMMAR_TOKEN: 1,
    AnnotationKind.SEMANTIC_TOKEN: 2,
    AnnotationKind.MARKER: 3,
}


def effective_priority(annotation: Annotation) -> int:
    kind = annotation.kind
    explicit = annotation.priority
    if kind is AnnotationKind.SYNTAX:
        return SYNTAX_PRIORITY if explicit is None else explicit
    if kind is AnnotationKind.GRAMMAR_TOKEN:
        return GRAMMAR_PRIORITY if explicit is None else explicit
    if kind is AnnotationKind.SEMANTIC_TOKEN:
        return PROMOTED_PRIORITY if explicit is None else explicit
    # Markers are presumed to intend override: anything at or below the
    # grammar default is lifted above it.
    if explicit is None or explicit <= GRAMMAR_PRIORITY:
        return PROMOTED_PRIORITY
    return explicit


def rank_key(annotation: Annotation, discovery_index: int) -> tuple:
    """Sort key; larger sorts first."""
    return (BAND_RANK[annotation.kind], effective_priority(annotation), discovery_index)


def _tag(annotation: Annotation, kind: AnnotationKind) -> Annotation:
    if annotation.kind is kind:
        return annotation
    return dataclasses.replace(annotation, kind=kind)


def _index_of(items: List[Annotation], name: str) -> Optional[int]:
    for idx, item in enumerate(items):
        if item.name == name:
            return idx
    return None


def collect_annotations(
    *,
    syntax: Iterable[Annotation] = (),
    grammar: Iterable[Annotation] = (),
    semantic: Iterable[Annotation] = (),
    markers: Iterable[Annotation] = (),
) -> List[Annotation]:
    """Merge the layers at one position into a discovery-ordered list.

    Layers are visited from generic to specific so later, more specific
    layers are discovered last:
      - syntax: only the innermost (last) syntax item is kept
      - grammar: appended unless an entry with the same name exists
      - semantic: replaces a same-named entry only when its priority is
        higher, otherwise appended
      - markers: always replace a same-named entry, otherwise appended
    """
    out: List[Annotation] = []

    syntax_items = list(syntax)
    if syntax_items:
        out.append(_tag(syntax_items[-1], AnnotationKind.SYNTAX))

    for ann in grammar:
        if _index_of(out, ann.name) is None:
            out.append(_tag(ann, AnnotationKind.GRAMMAR_TOKEN))

    for ann in semantic:
        tagged = _tag(ann, AnnotationKind.SEMANTIC_TOKEN)
        idx = _index_of(out, ann.name)
        if idx is None:
            out.append(tagged)
        elif effective_priority(tagged) > effective_priority(out[idx]):
            out[idx] = tagged

    for ann in markers:
        tagged = _tag(ann, AnnotationKind.MARKER)
        idx = _index_of(out, ann.name)
        if idx is None:
            out.append(tagged)
        else:
            out[idx] = tagged

    return out
