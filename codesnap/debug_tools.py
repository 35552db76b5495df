"""
Debug helpers for looking at a CodeModel segment by segment.

These utilities are intended for troubleshooting highlight resolution. They
do not perform any I/O and can be safely used in tests.
"""

from __future__ import annotations

from typing import Dict, List

from .domain import CodeModel


def _flags(bold: bool, italic: bool, underline: bool) -> str:
    return ("b" if bold else "-") + ("i" if italic else "-") + ("u" if underline else "-")


def map_segments(model: CodeModel) -> List[Dict[str, object]]:
    """Return one dict per segment with its line, column and style.

    Each dict contains:
      - line, index: 0-based line number and segment index within the line
      - col: 0-based column where the segment starts
      - text, style_name, fg, bg, bold, italic, underline
    """
    out: List[Dict[str, object]] = []
    for line_no, line in enumerate(model.lines):
        col = 0
        for idx, seg in enumerate(line.segments):
            out.append(
                {
                    "line": line_no,
                    "index": idx,
                    "col": col,
                    "text": seg.text,
                    "style_name": seg.style_name,
                    "fg": seg.fg,
                    "bg": seg.bg,
                    "bold": seg.bold,
                    "italic": seg.italic,
                    "underline": seg.underline,
                }
            )
            col += len(seg.text)
    return out


def dump_model_text(model: CodeModel) -> str:
    """Return a human-readable dump of segments with visible whitespace."""
    rows = []
    for row in map_segments(model):
        # Make tabs and spaces explicit to see segment boundaries clearly
        pretty = str(row["text"]).replace("\t", "→").replace(" ", "·")
        flags = _flags(bool(row["bold"]), bool(row["italic"]), bool(row["underline"]))
        rows.append(
            f"[{row['line']:03d}:{row['col']:<4}] {row['style_name']:<24} "
            f"fg={row['fg']} bg={row['bg']} {flags} text=“{pretty}”"
        )
    return "\n".join(rows)
