"""
Per-position style resolution.

Merges the overlapping annotations active at one character into one concrete
`Style`. Attributes are inherited individually: a high-ranked annotation that
only sets ``fg`` does not blank out a lower-ranked ``bold``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Hashable, Optional, Sequence, Tuple

from ..domain import (
    DEFAULT_STYLE_NAME,
    STYLE_ATTRS,
    Annotation,
    Style,
    Theme,
    color_to_hex,
)
from .collection import rank_key


@dataclass(frozen=True)
class ResolvedStyle:
    style: Style
    style_name: str


class StyleCache:
    """Memo of resolved styles keyed by an input signature.

    Create one per export request and pass it to the resolver; never share it
    between requests.
    """

    def __init__(self) -> None:
        self._entries: Dict[Hashable, Optional[ResolvedStyle]] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, signature: Hashable) -> bool:
        return signature in self._entries

    def get(self, signature: Hashable) -> Optional[ResolvedStyle]:
        self.hits += 1
        return self._entries[signature]

    def put(self, signature: Hashable, value: Optional[ResolvedStyle]) -> None:
        self.misses += 1
        self._entries[signature] = value


def _signature(theme: Theme, annotations: Sequence[Annotation]) -> Tuple:
    return (theme.fg_color, theme.bg_color, tuple(annotations))


class StyleResolver:
    """Resolve annotation lists against a theme."""

    def __init__(self, theme: Theme, cache: Optional[StyleCache] = None):
        self.theme = theme
        self.cache = cache

    def default(self) -> ResolvedStyle:
        """Style used where no annotation applies."""
        return ResolvedStyle(style=self.theme.default_style(), style_name=DEFAULT_STYLE_NAME)

    def resolve(self, annotations: Sequence[Annotation]) -> Optional[ResolvedStyle]:
        if not annotations:
            return None
        if self.cache is None:
            return self._resolve(annotations)
        sig = _signature(self.theme, annotations)
        if sig in self.cache:
            return self.cache.get(sig)
        result = self._resolve(annotations)
        self.cache.put(sig, result)
        return result

    def resolve_or_default(self, annotations: Sequence[Annotation]) -> ResolvedStyle:
        return self.resolve(annotations) or self.default()

    def _resolve(self, annotations: Sequence[Annotation]) -> ResolvedStyle:
        ranked = sorted(
            enumerate(annotations),
            key=lambda item: rank_key(item[1], item[0]),
            reverse=True,
        )
        top = ranked[0][1]
        merged = top.explicit_attrs()
        for _, ann in ranked[1:]:
            if len(merged) == len(STYLE_ATTRS):
                break
            for attr, value in ann.explicit_attrs().items():
                if attr not in merged:
                    merged[attr] = value

        base = self.theme.default_style()
        style = Style(
            fg=color_to_hex(merged["fg"]) if "fg" in merged else base.fg,
            bg=color_to_hex(merged["bg"]) if "bg" in merged else base.bg,
            bold=bool(merged.get("bold", False)),
            italic=bool(merged.get("italic", False)),
            underline=bool(merged.get("underline", False)),
        )
        return ResolvedStyle(style=style, style_name=top.name)
