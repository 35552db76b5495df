"""
Wire models for the single-shot JSON request/response protocol.

Field names follow the JSON keys (camelCase) so payloads validate directly;
`to_code_model()` converts a validated request into domain types.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, Field, JsonValue, field_validator

from ..domain import (
    DEFAULT_BG,
    DEFAULT_FG,
    DEFAULT_STYLE_NAME,
    CodeModel,
    FontSettings,
    FontSpec,
    Line,
    Segment,
    Style,
    Theme,
    color_to_hex,
)
from ..highlights.builder import coalesce
from ._base import WireModel

REQUEST_TYPES = ("image", "html", "rtf")

RequestType = Literal["image", "html", "rtf"]

_HEX_RE = re.compile(r"^#[0-9a-f]{6}$")


def _hex_color(value: Any) -> str:
    if isinstance(value, (str, int)) and not isinstance(value, bool):
        color = color_to_hex(value)
        if _HEX_RE.match(color):
            return color
    raise ValueError(f"Expected a #rrggbb color, got {value!r}")


class ThemeModel(WireModel):
    fgColor: str = DEFAULT_FG
    bgColor: str = DEFAULT_BG

    @field_validator("fgColor", "bgColor", mode="before")
    @classmethod
    def _color(cls, v):
        return _hex_color(v)

    def to_domain(self) -> Theme:
        return Theme(fg_color=self.fgColor, bg_color=self.bgColor)


class FontModel(WireModel):
    name: str
    file: Optional[str] = None

    def to_domain(self) -> FontSpec:
        return FontSpec(name=self.name, file=self.file or None)


class FontsModel(WireModel):
    default: FontModel = Field(default_factory=lambda: FontModel(name="FiraCode Nerd Font"))
    bold: Optional[FontModel] = None
    italic: Optional[FontModel] = None
    bold_italic: Optional[FontModel] = None


class FontSettingsModel(WireModel):
    size: float = Field(default=14, gt=0)
    line_height: float = Field(default=0.8, gt=0)
    fonts: FontsModel = Field(default_factory=FontsModel)

    def to_domain(self) -> FontSettings:
        fonts = self.fonts
        return FontSettings(
            size=self.size,
            line_height=self.line_height,
            default=fonts.default.to_domain(),
            bold=fonts.bold.to_domain() if fonts.bold else None,
            italic=fonts.italic.to_domain() if fonts.italic else None,
            bold_italic=fonts.bold_italic.to_domain() if fonts.bold_italic else None,
        )


class SegmentModel(WireModel):
    text: str
    fg: Optional[str] = None
    bg: Optional[str] = None
    bold: bool = False
    italic: bool = False
    underline: bool = False
    styleName: str = Field(
        default=DEFAULT_STYLE_NAME,
        validation_alias=AliasChoices("styleName", "hl_name", "style_name"),
    )

    @field_validator("fg", "bg", mode="before")
    @classmethod
    def _color(cls, v):
        return None if v is None else _hex_color(v)

    @field_validator("bold", "italic", "underline", mode="before")
    @classmethod
    def _flag(cls, v):
        # null means "not set" on the wire
        return False if v is None else v

    def to_domain(self, theme: Theme) -> Segment:
        style = Style(
            fg=self.fg or color_to_hex(theme.fg_color),
            bg=self.bg or color_to_hex(theme.bg_color),
            bold=self.bold,
            italic=self.italic,
            underline=self.underline,
        )
        return Segment(style=style, style_name=self.styleName, text=self.text)


class ClipboardTargets(WireModel):
    image: bool = False
    html: bool = False
    rtf: bool = False


class ExportRequest(WireModel):
    type: RequestType
    theme: ThemeModel
    fontSettings: FontSettingsModel
    code: List[List[SegmentModel]]
    minWidth: float = Field(ge=0)
    filename: str
    filenamePattern: str
    transparent: bool
    toClipboard: ClipboardTargets
    outputDir: Optional[str] = None
    templateFilepath: Optional[str] = None
    additionalTemplateData: Dict[str, JsonValue] = Field(default_factory=dict)
    template: Literal["default", "linux", "macos"] = "default"
    outputImageFormat: Literal["png", "jpeg"] = "png"
    dpi: Optional[float] = None
    tabstop: int = Field(default=4, ge=1)
    debug: bool = False

    @field_validator("toClipboard", mode="before")
    @classmethod
    def _clipboard(cls, v):
        # A bare boolean switches every target on or off
        if isinstance(v, bool):
            return {"image": v, "html": v, "rtf": v}
        return v

    @field_validator("additionalTemplateData", mode="before")
    @classmethod
    def _template_data(cls, v):
        return {} if v is None else v

    def wants_clipboard(self) -> bool:
        return bool(getattr(self.toClipboard, self.type))

    def to_code_model(self) -> CodeModel:
        theme = self.theme.to_domain()
        lines = tuple(
            Line(segments=tuple(coalesce(seg.to_domain(theme) for seg in line)))
            for line in self.code
        )
        return CodeModel(lines=lines, theme=theme, font_settings=self.fontSettings.to_domain())


def success_response(
    data: Dict[str, Any], filepath: str, *, debug: bool = False, context: Any = None
) -> Dict[str, Any]:
    out: Dict[str, Any] = {"success": True, "debug": debug, "data": {**data, "filepath": filepath}}
    if context is not None:
        out["context"] = context
    return out


def error_response(error: Union[str, BaseException], context: Any = None) -> Dict[str, Any]:
    out: Dict[str, Any] = {"success": False, "error": str(error)}
    if context is not None:
        out["context"] = context
    return out


__all__ = [
    "ClipboardTargets",
    "ExportRequest",
    "FontModel",
    "FontSettingsModel",
    "FontsModel",
    "REQUEST_TYPES",
    "SegmentModel",
    "ThemeModel",
    "error_response",
    "success_response",
]
