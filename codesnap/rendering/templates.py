"""
Full-page templates wrapping the HTML code fragment.

Three built-in jinja2 templates ship with the package ("default", "linux",
"macos"). A user template file may be given instead; it receives the same
context:

    code                  the pre-escaped HTML fragment
    fontSettings          {"size", "line_height", "fonts": {slot: {"name", "file"}}}
    fontFaceDeclarations  list of FontFaceDeclaration (call .css())
    theme                 {"fgColor", "bgColor"}
    minWidth              minimum content width in px
    tabstop               tab width in characters
    data                  additionalTemplateData from the request
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Mapping, Optional, Sequence

from jinja2 import DictLoader, Environment, TemplateError

from ..domain import FontSettings, Theme
from ..exceptions import TemplateFailure
from .fonts import FontFaceDeclaration

LOGGER = logging.getLogger(__name__)

_BASE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>
{% for face in fontFaceDeclarations %}{{ face.css() }}
{% endfor %}
html, body { margin: 0; padding: 0; background: {{ page_background }}; }
body { display: inline-block; }
#snap {
  display: inline-block;
  min-width: {{ minWidth }}px;
  background-color: {{ theme.bgColor }};
  color: {{ theme.fgColor }};
  {% block frame_style %}{% endblock %}
}
#code {
  padding: {% block code_padding %}15px{% endblock %};
  font-family: "{{ fontSettings.fonts.default.name }}", monospace;
  font-size: {{ fontSettings.size }}px;
  line-height: {{ fontSettings.line_height }};
  tab-size: {{ tabstop }};
  white-space: pre;
}
#code .code-line { min-height: 1em; }
#code b { font-family: "{{ fontSettings.fonts.bold.name }}", monospace; }
#code i { font-family: "{{ fontSettings.fonts.italic.name }}", monospace; }
#code b i { font-family: "{{ fontSettings.fonts.bold_italic.name }}", monospace; }
{% block extra_style %}{% endblock %}
</style>
</head>
<body>
<div id="snap">{% block header %}{% endblock %}<div id="code">{{ code }}</div></div>
</body>
</html>
"""

_DEFAULT = """{% extends "base.html" %}"""

_LINUX = """{% extends "base.html" %}
{% block frame_style %}border: 1px solid #444; border-radius: 4px;{% endblock %}
{% block extra_style %}
.titlebar { display: flex; justify-content: flex-end; gap: 6px; padding: 6px 10px; background: #2d2d2d; }
.titlebar span { width: 12px; height: 12px; border-radius: 2px; background: #5a5a5a; }
{% endblock %}
{% block header %}<div class="titlebar"><span></span><span></span><span></span></div>{% endblock %}
"""

_MACOS = """{% extends "base.html" %}
{% block frame_style %}border-radius: 8px; overflow: hidden;{% endblock %}
{% block extra_style %}
.titlebar { display: flex; gap: 8px; padding: 10px 12px 0 12px; }
.titlebar span { width: 12px; height: 12px; border-radius: 50%; }
.titlebar .close { background: #ff5f56; }
.titlebar .minimize { background: #ffbd2e; }
.titlebar .zoom { background: #27c93f; }
{% endblock %}
{% block header %}<div class="titlebar"><span class="close"></span><span class="minimize"></span><span class="zoom"></span></div>{% endblock %}
"""

BUILTIN_TEMPLATES: Dict[str, str] = {
    "base.html": _BASE,
    "default": _DEFAULT,
    "linux": _LINUX,
    "macos": _MACOS,
}

TEMPLATE_NAMES = ("default", "linux", "macos")


def _environment() -> Environment:
    # The code fragment is already escaped by the HTML emitter
    return Environment(loader=DictLoader(BUILTIN_TEMPLATES), autoescape=False)


def font_settings_context(font_settings: FontSettings) -> Dict[str, Any]:
    return {
        "size": font_settings.size,
        "line_height": font_settings.line_height,
        "fonts": {
            slot: {"name": spec.name, "file": spec.file}
            for slot, spec in font_settings.slots().items()
        },
    }


def render_page(
    code: str,
    *,
    theme: Theme,
    font_settings: FontSettings,
    min_width: float,
    font_faces: Sequence[FontFaceDeclaration] = (),
    tabstop: int = 4,
    template: str = "default",
    template_path: Optional[str] = None,
    data: Optional[Mapping[str, Any]] = None,
    transparent: bool = False,
) -> str:
    """Render the full HTML page for one code fragment.

    Raises TemplateFailure when the template cannot be found, read or
    rendered.
    """
    env = _environment()
    try:
        if template_path:
            path = os.path.abspath(os.path.expanduser(template_path))
            with open(path, "r", encoding="utf-8") as f:
                tpl = env.from_string(f.read())
            LOGGER.debug("Using template file %s", path)
        else:
            if template not in TEMPLATE_NAMES:
                raise TemplateFailure(f"Unknown template: {template!r}")
            tpl = env.get_template(template)
        return tpl.render(
            code=code,
            fontSettings=font_settings_context(font_settings),
            fontFaceDeclarations=list(font_faces),
            theme={"fgColor": theme.fg_color, "bgColor": theme.bg_color},
            minWidth=min_width,
            tabstop=tabstop,
            data=dict(data or {}),
            page_background="transparent" if transparent else theme.bg_color,
        )
    except OSError as e:
        raise TemplateFailure(f"Cannot read template {template_path!r}: {e}") from e
    except TemplateError as e:
        raise TemplateFailure(f"Template error: {e}") from e
