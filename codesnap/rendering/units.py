"""Unit conversion helpers for RTF measurements (96 dpi screen assumption)."""

from __future__ import annotations

import math

TWIPS_PER_POINT = 20
TWIPS_PER_PIXEL = 15
POINTS_PER_PIXEL = 0.75


def points_to_twips(value: float) -> int:
    """Convert points to twips (1/20th of a point)."""
    return int(round(value * TWIPS_PER_POINT))


def pixels_to_twips(value: float) -> int:
    """Convert pixels to twips (1440 twips per inch / 96 pixels per inch)."""
    return int(round(value * TWIPS_PER_PIXEL))


def pixels_to_points(value: float) -> float:
    return value * POINTS_PER_PIXEL


def pixels_to_half_points(value: float) -> int:
    """RTF ``\\fs`` takes half-points."""
    return int(round(pixels_to_points(value) * 2))


def min_width_hint(
    longest_line_chars: int,
    font_size_px: float,
    *,
    char_width_factor: float = 0.6,
    padding: int = 30,
) -> int:
    """Estimated content width in pixels for a monospace block.

    Advisory only: renderers re-measure the laid-out content.
    """
    return int(math.ceil(longest_line_chars * font_size_px * char_width_factor)) + padding
