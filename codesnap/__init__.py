"""Public API for codesnap."""

from .domain import (
    Annotation,
    AnnotationKind,
    CodeModel,
    FontSettings,
    FontSpec,
    Line,
    Segment,
    Style,
    Theme,
)
from .exceptions import CodesnapError
from .highlights.builder import CodeModelTask, SegmentBuilder, build_code_model
from .highlights.collection import collect_annotations
from .highlights.resolver import StyleCache, StyleResolver
from .highlights.source_iface import AnnotationSource, SpanAnnotationSource
from .rendering.html import HtmlEmitter
from .rendering.image import ImageEmitter
from .rendering.options import ExportConfig
from .rendering.rtf import RtfEmitter

__all__ = [
    "Annotation",
    "AnnotationKind",
    "AnnotationSource",
    "CodeModel",
    "CodeModelTask",
    "CodesnapError",
    "ExportConfig",
    "FontSettings",
    "FontSpec",
    "HtmlEmitter",
    "ImageEmitter",
    "Line",
    "RtfEmitter",
    "Segment",
    "SegmentBuilder",
    "SpanAnnotationSource",
    "Style",
    "StyleCache",
    "StyleResolver",
    "Theme",
    "build_code_model",
    "collect_annotations",
]
