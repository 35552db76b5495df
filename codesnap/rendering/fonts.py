"""
@font-face declarations for custom font files.

Font files referenced by the font settings are inlined as base64 data URIs
so the rendered page never depends on fonts installed in the browser.
"""

from __future__ import annotations

import base64
import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..domain import FontSettings, FontSpec
from ..exceptions import FontResolutionFailure

LOGGER = logging.getLogger(__name__)

# extension -> (media type, css format)
FONT_TYPES: Dict[str, Tuple[str, str]] = {
    ".svg": ("image/svg+xml", "svg"),
    ".ttf": ("font/truetype", "truetype"),
    ".otf": ("font/opentype", "opentype"),
    ".eot": ("application/vnd.ms-fontobject", "embedded-opentype"),
    ".woff2": ("font/woff2", "woff2"),
    ".woff": ("font/woff", "woff"),
}

# slot -> (font-weight, font-style)
SLOT_FACES: Dict[str, Tuple[str, str]] = {
    "default": ("normal", "normal"),
    "italic": ("normal", "italic"),
    "bold": ("bold", "normal"),
    "bold_italic": ("bold", "italic"),
}


def split_with_line_continuation(value: str, chunk_size: int = 76) -> str:
    """Break a long string into chunks joined by a CSS line continuation."""
    chunks = [value[i : i + chunk_size] for i in range(0, len(value), chunk_size)]
    return "\\\n".join(chunks)


@dataclass(frozen=True)
class FontFaceDeclaration:
    name: str
    src: str
    weight: str = "normal"
    style: str = "normal"

    def css(self) -> str:
        family = self.name.replace('"', '\\"')
        return (
            "@font-face {\n"
            f'  font-family: "{family}";\n'
            f"  src: {self.src};\n"
            f"  font-weight: {self.weight};\n"
            f"  font-style: {self.style};\n"
            "}"
        )


def load_font_face(
    font: FontSpec, *, weight: str = "normal", style: str = "normal"
) -> FontFaceDeclaration:
    """Read ``font.file`` and build its declaration.

    Raises FontResolutionFailure when the file is missing, unreadable, or
    has an extension that is not a known font format.
    """
    path = os.path.expanduser(font.file or "")
    ext = os.path.splitext(path)[1].lower()
    if ext not in FONT_TYPES:
        raise FontResolutionFailure(f"Unsupported font format: {font.file!r}", path=font.file)
    try:
        with open(path, "rb") as f:
            content = f.read()
    except OSError as e:
        raise FontResolutionFailure(f"Cannot read font file {font.file!r}: {e}", path=font.file) from e

    media_type, fmt = FONT_TYPES[ext]
    encoded = split_with_line_continuation(base64.b64encode(content).decode("ascii"))
    src = f'url("data:{media_type};base64,{encoded}") format("{fmt}")'
    return FontFaceDeclaration(name=font.name, src=src, weight=weight, style=style)


def font_face_declarations(font_settings: FontSettings) -> List[FontFaceDeclaration]:
    """Declarations for every explicitly set slot that carries a file.

    Unreadable fonts are skipped with a warning; the page then falls back to
    referencing the font by name.
    """
    out: List[FontFaceDeclaration] = []
    explicit: Dict[str, Optional[FontSpec]] = {
        "default": font_settings.default,
        "italic": font_settings.italic,
        "bold": font_settings.bold,
        "bold_italic": font_settings.bold_italic,
    }
    for slot, font in explicit.items():
        if font is None or not font.file:
            continue
        weight, style = SLOT_FACES[slot]
        try:
            out.append(load_font_face(font, weight=weight, style=style))
        except FontResolutionFailure as e:
            LOGGER.warning("Using font %r by name: %s", font.name, e)
    return out
