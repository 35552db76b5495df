"""
Export/render configuration.

Centralizes behavior flags so callers can tune defaults without touching
core logic. Every field has a default; environment variables only supply the
output directory fallback.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple

DEFAULT_RENDERER_COMMAND: Tuple[str, ...] = ("codesnap", "render")


@dataclass(frozen=True)
class ExportConfig:
    # Deadline for the renderer process and for each headless browser step
    timeout_ms: int = 5000

    # Minimum width hint: ceil(longest_line * font_size * factor) + padding
    char_width_factor: float = 0.6
    width_padding: int = 30

    # Added to the measured content box in each direction
    safety_margin: int = 1

    # Escape { and } in HTML text when a second templating pass follows
    escape_braces: bool = False

    # Built-in page template: "default", "linux" or "macos"
    default_template: str = "default"

    # "png" or "jpeg"
    image_format: str = "png"
    jpeg_quality: int = 90

    # Supports %t, %time, %date, %file_name, %file_extension, %unixtime
    filename_pattern: str = "codesnap_%t"

    # None → $CODESNAP_OUTPUT_DIR, then ~/Pictures/Screenshots
    output_dir: Optional[str] = None

    # Command that speaks the stdio JSON protocol
    renderer_command: Tuple[str, ...] = DEFAULT_RENDERER_COMMAND

    def resolved_output_dir(self) -> str:
        if self.output_dir:
            return self.output_dir
        env = os.getenv("CODESNAP_OUTPUT_DIR")
        if env:
            return env
        return os.path.join(os.path.expanduser("~"), "Pictures", "Screenshots")

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000.0
