"""Render-target independent value types for styled code."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple, Union

DEFAULT_FG = "#ffffff"
DEFAULT_BG = "#000000"
DEFAULT_STYLE_NAME = "Normal"

ColorValue = Union[str, int]


def color_to_hex(color: ColorValue) -> str:
    """Normalize a color given as ``#rrggbb`` or a 24-bit integer."""
    if isinstance(color, bool):
        raise TypeError(f"Not a color: {color!r}")
    if isinstance(color, int):
        return f"#{color & 0xFFFFFF:06x}"
    value = color.strip().lower()
    if not value.startswith("#"):
        value = "#" + value
    if len(value) == 4:
        # #rgb shorthand
        value = "#" + "".join(ch * 2 for ch in value[1:])
    return value


class AnnotationKind(str, Enum):
    """Highlighting layer an annotation was collected from."""

    SYNTAX = "syntax"
    GRAMMAR_TOKEN = "grammar_token"
    SEMANTIC_TOKEN = "semantic_token"
    MARKER = "marker"


@dataclass(frozen=True)
class Annotation:
    """One named, partially specified style contribution at a position.

    ``None`` means "not set by this layer", which is different from ``False``.
    """

    name: str
    kind: AnnotationKind = AnnotationKind.SYNTAX
    priority: Optional[int] = None
    fg: Optional[ColorValue] = None
    bg: Optional[ColorValue] = None
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    underline: Optional[bool] = None

    def explicit_attrs(self) -> Dict[str, object]:
        out: Dict[str, object] = {}
        for attr in STYLE_ATTRS:
            value = getattr(self, attr)
            if value is not None:
                out[attr] = value
        return out


STYLE_ATTRS: Tuple[str, ...] = ("fg", "bg", "bold", "italic", "underline")

StyleKey = Tuple[str, str, bool, bool, bool]


@dataclass(frozen=True)
class Style:
    """Fully resolved visual attributes of one character."""

    fg: str
    bg: str
    bold: bool = False
    italic: bool = False
    underline: bool = False

    @property
    def key(self) -> StyleKey:
        return (self.fg, self.bg, self.bold, self.italic, self.underline)


@dataclass(frozen=True)
class Segment:
    """A maximal run of characters sharing one resolved style."""

    style: Style
    style_name: str
    text: str

    @property
    def fg(self) -> str:
        return self.style.fg

    @property
    def bg(self) -> str:
        return self.style.bg

    @property
    def bold(self) -> bool:
        return self.style.bold

    @property
    def italic(self) -> bool:
        return self.style.italic

    @property
    def underline(self) -> bool:
        return self.style.underline


@dataclass(frozen=True)
class Line:
    segments: Tuple[Segment, ...] = ()

    @property
    def text(self) -> str:
        return "".join(seg.text for seg in self.segments)

    @property
    def is_blank(self) -> bool:
        return self.text.strip() == ""


@dataclass(frozen=True)
class Theme:
    """Colors inherited where no annotation sets fg/bg."""

    fg_color: str = DEFAULT_FG
    bg_color: str = DEFAULT_BG

    def default_style(self) -> Style:
        return Style(fg=color_to_hex(self.fg_color), bg=color_to_hex(self.bg_color))


@dataclass(frozen=True)
class FontSpec:
    name: str
    file: Optional[str] = None


_DEFAULT_FONT = FontSpec(name="FiraCode Nerd Font")


@dataclass(frozen=True)
class FontSettings:
    """Font size (px), line height multiplier and the four font slots."""

    size: float = 14
    line_height: float = 0.8
    default: FontSpec = _DEFAULT_FONT
    bold: Optional[FontSpec] = None
    italic: Optional[FontSpec] = None
    bold_italic: Optional[FontSpec] = None

    def font_for(self, *, bold: bool, italic: bool) -> FontSpec:
        if bold and italic:
            return self.bold_italic or self.bold or self.italic or self.default
        if bold:
            return self.bold or self.default
        if italic:
            return self.italic or self.default
        return self.default

    def slots(self) -> Dict[str, FontSpec]:
        """Resolved font per slot, in font table order."""
        return {
            "default": self.default,
            "italic": self.font_for(bold=False, italic=True),
            "bold": self.font_for(bold=True, italic=False),
            "bold_italic": self.font_for(bold=True, italic=True),
        }


@dataclass(frozen=True)
class CodeModel:
    """Ordered lines of segments plus theme and font metadata."""

    lines: Tuple[Line, ...] = ()
    theme: Theme = field(default_factory=Theme)
    font_settings: FontSettings = field(default_factory=FontSettings)

    @property
    def longest_line_chars(self) -> int:
        return max((len(line.text) for line in self.lines), default=0)

    def iter_segments(self):
        for line in self.lines:
            yield from line.segments
