"""
Pure HTML emitter for a CodeModel.

Converts each line into a ``<div class="code-line">`` block of inline spans.
`HtmlEmitter.emit_page` wraps the fragment in a full page via templates.py.
"""

from __future__ import annotations

import html
from typing import Any, List, Mapping, Optional

from tinyhtml import h, raw

from ..domain import CodeModel, FontSettings, Line, Segment, Theme
from .fonts import font_face_declarations
from .options import ExportConfig
from .templates import render_page
from .units import min_width_hint

LINE_CLASS = "code-line"
BLANK_LINE_CONTENT = "&nbsp;"


def escape_text(text: str, *, escape_braces: bool = False) -> str:
    safe = html.escape(text, quote=False)
    if escape_braces:
        safe = safe.replace("{", "&#123;").replace("}", "&#125;")
    return safe


def render_segment(segment: Segment, *, escape_braces: bool = False) -> str:
    body = escape_text(segment.text, escape_braces=escape_braces)
    # Fixed nesting: <b> outermost, then <i>, then <u>
    if segment.underline:
        body = f"<u>{body}</u>"
    if segment.italic:
        body = f"<i>{body}</i>"
    if segment.bold:
        body = f"<b>{body}</b>"
    style_attr = f"color:{segment.fg};background-color:{segment.bg}"
    name = html.escape(segment.style_name, quote=True)
    return f'<span style="{style_attr}" data-style="{name}">{body}</span>'


def render_line(line: Line, *, escape_braces: bool = False) -> str:
    if line.is_blank:
        inner = BLANK_LINE_CONTENT
    else:
        inner = "".join(
            render_segment(seg, escape_braces=escape_braces) for seg in line.segments
        )
    return h("div", **{"class": LINE_CLASS})(raw(inner)).render()


def render_code_fragment(model: CodeModel, config: Optional[ExportConfig] = None) -> str:
    escape_braces = bool(config and config.escape_braces)
    rows: List[str] = [render_line(line, escape_braces=escape_braces) for line in model.lines]
    return "".join(rows)


class HtmlEmitter:
    """Class-based interface for HTML emission."""

    def __init__(self, config: Optional[ExportConfig] = None):
        self.config = config or ExportConfig()

    def emit(self, model: CodeModel) -> str:
        """Render the model to an HTML fragment string."""
        return render_code_fragment(model, self.config)

    def min_width_hint(self, model: CodeModel, font_settings: Optional[FontSettings] = None) -> int:
        fonts = font_settings or model.font_settings
        return min_width_hint(
            model.longest_line_chars,
            fonts.size,
            char_width_factor=self.config.char_width_factor,
            padding=self.config.width_padding,
        )

    def emit_page(
        self,
        model: CodeModel,
        theme: Optional[Theme] = None,
        font_settings: Optional[FontSettings] = None,
        *,
        transparent: bool = False,
        min_width: Optional[float] = None,
        template: Optional[str] = None,
        template_path: Optional[str] = None,
        data: Optional[Mapping[str, Any]] = None,
        tabstop: int = 4,
    ) -> str:
        """Render the model into a complete HTML page.

        A missing or zero ``min_width`` falls back to the width hint.
        """
        theme = theme or model.theme
        fonts = font_settings or model.font_settings
        if not min_width:
            min_width = self.min_width_hint(model, fonts)
        return render_page(
            self.emit(model),
            theme=theme,
            font_settings=fonts,
            min_width=min_width,
            font_faces=font_face_declarations(fonts),
            tabstop=tabstop,
            template=template or self.config.default_template,
            template_path=template_path,
            data=data,
            transparent=transparent,
        )
