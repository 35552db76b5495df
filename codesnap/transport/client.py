"""
Editor side of the stdio protocol.

`build_request` turns a CodeModel plus export options into the request
object; `RendererClient` runs the renderer process once per request and
returns its parsed success response.
"""

from __future__ import annotations

import json
import logging
import subprocess
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from ..domain import CodeModel, FontSettings, Segment
from ..exceptions import RenderTimeout, RendererError, UnsupportedRequestType
from ..rendering.options import ExportConfig
from ..rendering.units import min_width_hint
from .models import REQUEST_TYPES

LOGGER = logging.getLogger(__name__)


def segment_payload(segment: Segment) -> Dict[str, Any]:
    return {
        "text": segment.text,
        "fg": segment.fg,
        "bg": segment.bg,
        "bold": segment.bold,
        "italic": segment.italic,
        "underline": segment.underline,
        "styleName": segment.style_name,
    }


def font_settings_payload(font_settings: FontSettings) -> Dict[str, Any]:
    fonts: Dict[str, Any] = {}
    for slot in ("default", "bold", "italic", "bold_italic"):
        spec = getattr(font_settings, slot)
        if spec is None:
            continue
        entry: Dict[str, Any] = {"name": spec.name}
        if spec.file:
            entry["file"] = spec.file
        fonts[slot] = entry
    return {"size": font_settings.size, "line_height": font_settings.line_height, "fonts": fonts}


def build_request(
    model: CodeModel,
    request_type: str,
    *,
    config: Optional[ExportConfig] = None,
    filename: str = "",
    output_dir: Optional[str] = None,
    filename_pattern: Optional[str] = None,
    transparent: bool = False,
    to_clipboard: bool = False,
    template: Optional[str] = None,
    template_filepath: Optional[str] = None,
    additional_template_data: Optional[Mapping[str, Any]] = None,
    output_image_format: Optional[str] = None,
    tabstop: int = 4,
    debug: bool = False,
) -> Dict[str, Any]:
    """Serialize ``model`` into a renderer request object."""
    if request_type not in REQUEST_TYPES:
        raise UnsupportedRequestType(request_type)
    cfg = config or ExportConfig()
    request: Dict[str, Any] = {
        "type": request_type,
        "theme": {"fgColor": model.theme.fg_color, "bgColor": model.theme.bg_color},
        "fontSettings": font_settings_payload(model.font_settings),
        "code": [[segment_payload(seg) for seg in line.segments] for line in model.lines],
        "minWidth": min_width_hint(
            model.longest_line_chars,
            model.font_settings.size,
            char_width_factor=cfg.char_width_factor,
            padding=cfg.width_padding,
        ),
        "filename": filename,
        "filenamePattern": filename_pattern or cfg.filename_pattern,
        "transparent": transparent,
        "toClipboard": {target: to_clipboard and target == request_type for target in REQUEST_TYPES},
        "template": template or cfg.default_template,
        "outputImageFormat": output_image_format or cfg.image_format,
        "tabstop": tabstop,
        "debug": debug,
        "additionalTemplateData": dict(additional_template_data or {}),
    }
    if output_dir:
        request["outputDir"] = output_dir
    if template_filepath:
        request["templateFilepath"] = template_filepath
    return request


class RendererClient:
    """Runs the renderer command for one request at a time."""

    def __init__(
        self,
        command: Optional[Sequence[str]] = None,
        config: Optional[ExportConfig] = None,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        self.config = config or ExportConfig()
        self.command = list(command or self.config.renderer_command)
        self.runner = runner

    def export(self, request: Mapping[str, Any]) -> Dict[str, Any]:
        """Send ``request`` and return the ``data`` of a success response.

        Raises RenderTimeout when the process exceeds the configured deadline
        and RendererError when it answers ``success: false`` or garbage.
        """
        LOGGER.debug("Running %s for a %s request", self.command, request.get("type"))
        try:
            proc = self.runner(
                self.command,
                input=json.dumps(request),
                capture_output=True,
                text=True,
                timeout=self.config.timeout_s,
            )
        except subprocess.TimeoutExpired as e:
            raise RenderTimeout(
                f"Renderer did not answer within {self.config.timeout_ms} ms"
            ) from e
        except OSError as e:
            raise RendererError(f"Cannot start renderer {self.command[0]!r}: {e}") from e

        try:
            response = json.loads(proc.stdout or "")
        except ValueError as e:
            raise RendererError(
                f"Renderer returned invalid JSON (exit {proc.returncode})",
                context=(proc.stderr or "").strip() or None,
            ) from e
        if not isinstance(response, dict):
            raise RendererError("Renderer response must be a JSON object", context=response)

        if not response.get("success"):
            raise RendererError(str(response.get("error", "unknown error")), context=response.get("context"))
        if proc.returncode != 0:
            raise RendererError(f"Renderer exited with {proc.returncode}", context=response)
        if response.get("context"):
            LOGGER.warning("Renderer reported: %s", response["context"])
        return response.get("data", {})
