"""
RTF emitter for a CodeModel.

Produces a single RTF document: a four-slot font table (regular, italic,
bold, bold-italic), a de-duplicated color table whose slot 0 is the reserved
"auto" entry, and one self-contained group per segment so styles never leak
from one segment into the next.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from ..domain import CodeModel, FontSettings, Line, Segment, Theme, color_to_hex
from .options import ExportConfig
from .units import (
    min_width_hint,
    pixels_to_half_points,
    pixels_to_points,
    pixels_to_twips,
    points_to_twips,
)

LOGGER = logging.getLogger(__name__)

# Font table slots, selected by (bold, italic)
FONT_SLOTS = ("default", "italic", "bold", "bold_italic")


def font_index(*, bold: bool, italic: bool) -> int:
    if bold and italic:
        return 3
    if bold:
        return 2
    if italic:
        return 1
    return 0


def escape_rtf(text: str) -> str:
    """Escape backslash and braces, then tabs and non-ASCII characters."""
    out: List[str] = []
    for ch in text:
        if ch in ("\\", "{", "}"):
            out.append("\\" + ch)
        elif ch == "\t":
            out.append("\\tab ")
        elif ord(ch) < 128:
            out.append(ch)
        else:
            out.extend(_unicode_escape(ch))
    return "".join(out)


def _unicode_escape(ch: str) -> List[str]:
    code = ord(ch)
    if code > 0xFFFF:
        code -= 0x10000
        units = [0xD800 + (code >> 10), 0xDC00 + (code & 0x3FF)]
    else:
        units = [code]
    # \uN takes a signed 16-bit value followed by one fallback character
    return [f"\\u{u - 0x10000 if u > 0x7FFF else u}?" for u in units]


def hex_to_rgb(color: str):
    value = color_to_hex(color).lstrip("#")
    num = int(value, 16)
    return (num >> 16) & 255, (num >> 8) & 255, num & 255


class ColorTable:
    """Ordered, de-duplicated colors; indices are 1-based."""

    def __init__(self, colors: Iterable[str] = ()):
        self._colors: List[str] = []
        self._index: Dict[str, int] = {}
        for color in colors:
            self.add(color)

    @classmethod
    def for_model(cls, model: CodeModel, theme: Theme) -> "ColorTable":
        table = cls([theme.fg_color, theme.bg_color])
        for seg in model.iter_segments():
            table.add(seg.fg)
            table.add(seg.bg)
        return table

    def add(self, color: str) -> int:
        key = color_to_hex(color)
        if key not in self._index:
            self._colors.append(key)
            self._index[key] = len(self._colors)
        return self._index[key]

    def index(self, color: str) -> int:
        return self._index[color_to_hex(color)]

    @property
    def colors(self) -> List[str]:
        return list(self._colors)

    def __len__(self) -> int:
        return len(self._colors)

    def render(self) -> str:
        parts = ["{\\colortbl ;"]
        for color in self._colors:
            r, g, b = hex_to_rgb(color)
            parts.append(f"\\red{r}\\green{g}\\blue{b};")
        parts.append("}")
        return "".join(parts)


def render_font_table(font_settings: FontSettings) -> str:
    slots = font_settings.slots()
    entries = "".join(
        f"{{\\f{idx} {escape_rtf(slots[slot].name)};}}"
        for idx, slot in enumerate(FONT_SLOTS)
    )
    return f"{{\\fonttbl{entries}}}"


def render_segment(segment: Segment, colors: ColorTable) -> str:
    parts = ["{", f"\\f{font_index(bold=segment.bold, italic=segment.italic)}"]
    parts.append(f"\\cf{colors.index(segment.fg)}")
    parts.append(f"\\highlight{colors.index(segment.bg)}")
    if segment.bold:
        parts.append("\\b")
    if segment.italic:
        parts.append("\\i")
    if segment.underline:
        parts.append("\\ul")
    parts.append(" ")
    parts.append(escape_rtf(segment.text))
    if segment.underline:
        parts.append("\\ul0")
    if segment.italic:
        parts.append("\\i0")
    if segment.bold:
        parts.append("\\b0")
    parts.append("}")
    return "".join(parts)


def render_line(line: Line, colors: ColorTable) -> str:
    return "".join(render_segment(seg, colors) for seg in line.segments)


class RtfEmitter:
    """Serialize a CodeModel into an RTF document string."""

    def __init__(self, config: Optional[ExportConfig] = None):
        self.config = config or ExportConfig()

    def emit(
        self,
        model: CodeModel,
        theme: Optional[Theme] = None,
        font_settings: Optional[FontSettings] = None,
        *,
        min_width: Optional[float] = None,
        tabstop: int = 4,
    ) -> str:
        theme = theme or model.theme
        fonts = font_settings or model.font_settings
        colors = ColorTable.for_model(model, theme)
        if not min_width:
            min_width = min_width_hint(
                model.longest_line_chars,
                fonts.size,
                char_width_factor=self.config.char_width_factor,
                padding=self.config.width_padding,
            )
        LOGGER.debug("RTF color table has %d colors", len(colors))

        fg_idx = colors.index(theme.fg_color)
        bg_idx = colors.index(theme.bg_color)
        header = f"\\paperw{pixels_to_twips(min_width)}\\margl0\\margr0\\viewkind4"
        line_twips = points_to_twips(pixels_to_points(fonts.size * fonts.line_height))
        tab_twips = pixels_to_twips(tabstop * fonts.size * self.config.char_width_factor)
        defaults = (
            f"\\deftab{tab_twips}\\f0\\fs{pixels_to_half_points(fonts.size)}"
            f"\\sl{line_twips}\\slmult0"
            f"\\cf{fg_idx}\\highlight{bg_idx}\\cbpat{bg_idx}"
        )
        body = "\\line\n".join(render_line(line, colors) for line in model.lines)
        return (
            "{\\rtf1\\ansi\\deff0\n"
            f"{header}\n"
            f"{render_font_table(fonts)}\n"
            f"{colors.render()}\n"
            f"{defaults}\n"
            f"{body}\\par\n"
            "}"
        )
