"""
Renderer side of the stdio protocol.

Reads one JSON request, produces one output file (plus an optional clipboard
copy) and answers with one JSON response. Exit code 0 on success, 1 on any
failure.

Requests are either the bare request object or the envelope
``{"success": true, "debug": ..., "data": {...request...}}``.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Callable, Dict, IO, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from ..domain import CodeModel
from ..exceptions import (
    ClipboardUnavailable,
    CodesnapError,
    MalformedInput,
    OutputWriteFailure,
    UnsupportedRequestType,
)
from ..rendering.clipboard import copy_to_clipboard
from ..rendering.exporter import full_output_path, write_atomic
from ..rendering.html import HtmlEmitter
from ..rendering.image import HeadlessRenderer, ImageEmitter
from ..rendering.options import ExportConfig
from ..rendering.rtf import RtfEmitter
from .models import REQUEST_TYPES, ExportRequest, error_response, success_response

LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1

ClipboardSink = Callable[[bytes, str], None]

# (content, mime type, file extension)
Rendered = Tuple[Union[str, bytes], str, str]


def decode_request(raw: Union[str, bytes]) -> Tuple[Dict[str, Any], bool]:
    """Parse raw stdin into the request object and the envelope debug flag."""
    try:
        payload = json.loads(raw)
    except ValueError as e:
        raise MalformedInput(f"Invalid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise MalformedInput("Request must be a JSON object", context=payload)
    debug = False
    if "type" not in payload and isinstance(payload.get("data"), dict):
        debug = bool(payload.get("debug", False))
        payload = payload["data"]
    return payload, debug


def parse_request(payload: Mapping[str, Any]) -> ExportRequest:
    """Validate a request object.

    The ``type`` is checked first so an unknown value is reported by name
    rather than as a generic validation error.
    """
    if "type" not in payload:
        raise MalformedInput("Request is missing 'type'")
    request_type = payload["type"]
    if request_type not in REQUEST_TYPES:
        raise UnsupportedRequestType(request_type)
    try:
        return ExportRequest.model_validate(payload)
    except ValidationError as e:
        details = json.loads(e.json(include_url=False))
        raise MalformedInput(f"Invalid {request_type} request: {e.error_count()} error(s)", context=details) from e


class RequestHandler:
    """Dispatches a validated request to its emitter and writes the result."""

    def __init__(
        self,
        config: Optional[ExportConfig] = None,
        *,
        renderer: Optional[HeadlessRenderer] = None,
        clipboard: ClipboardSink = copy_to_clipboard,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.config = config or ExportConfig()
        self.renderer = renderer
        self.clipboard = clipboard
        self.clock = clock
        self._dispatch: Dict[str, Callable[[ExportRequest, CodeModel], Rendered]] = {
            "image": self._render_image,
            "html": self._render_html,
            "rtf": self._render_rtf,
        }

    def _render_image(self, req: ExportRequest, model: CodeModel) -> Rendered:
        emitter = ImageEmitter(self.renderer, self.config)
        data = emitter.emit(
            model,
            transparent=req.transparent,
            min_width=req.minWidth,
            image_format=req.outputImageFormat,
            template=req.template,
            template_path=req.templateFilepath,
            data=req.additionalTemplateData,
            tabstop=req.tabstop,
        )
        ext = "jpg" if req.outputImageFormat == "jpeg" else "png"
        return data, f"image/{req.outputImageFormat}", ext

    def _render_html(self, req: ExportRequest, model: CodeModel) -> Rendered:
        page = HtmlEmitter(self.config).emit_page(
            model,
            transparent=req.transparent,
            min_width=req.minWidth,
            template=req.template,
            template_path=req.templateFilepath,
            data=req.additionalTemplateData,
            tabstop=req.tabstop,
        )
        return page, "text/html", "html"

    def _render_rtf(self, req: ExportRequest, model: CodeModel) -> Rendered:
        doc = RtfEmitter(self.config).emit(model, min_width=req.minWidth, tabstop=req.tabstop)
        return doc, "text/rtf", "rtf"

    def handle(self, req: ExportRequest, raw: Mapping[str, Any], *, debug: bool = False) -> Dict[str, Any]:
        """Run one export and build its success response.

        Raises CodesnapError subclasses on failure; nothing is written unless
        rendering completed.
        """
        model = req.to_code_model()
        LOGGER.debug("Exporting %s: %d lines", req.type, len(model.lines))
        content, mime, ext = self._dispatch[req.type](req, model)

        target = req.outputDir or self.config.resolved_output_dir()
        try:
            path = full_output_path(
                req.type,
                filename=req.filename,
                pattern=req.filenamePattern,
                output_dir=req.outputDir,
                config=self.config,
                extension=ext,
                now=self.clock(),
            )
            write_atomic(path, content)
        except OSError as e:
            raise OutputWriteFailure(f"Cannot write output to {target!r}: {e}", path=target) from e

        context = None
        if req.wants_clipboard():
            payload = content.encode("utf-8") if isinstance(content, str) else content
            try:
                self.clipboard(payload, mime)
            except ClipboardUnavailable as e:
                LOGGER.warning("Clipboard copy skipped: %s", e)
                context = {"clipboard": str(e)}
        return success_response(dict(raw), path, debug=debug or req.debug, context=context)


def handle_payload(
    raw: Union[str, bytes],
    *,
    handler: Optional[RequestHandler] = None,
) -> Tuple[Dict[str, Any], int]:
    """Decode, validate and run one request; returns (response, exit code)."""
    handler = handler or RequestHandler()
    try:
        payload, debug = decode_request(raw)
        req = parse_request(payload)
        return handler.handle(req, payload, debug=debug), EXIT_OK
    except MalformedInput as e:
        LOGGER.error("Malformed request: %s", e)
        return error_response(e, e.context), EXIT_FAILURE
    except UnsupportedRequestType as e:
        LOGGER.error("%s", e)
        return error_response(e, {"type": e.request_type}), EXIT_FAILURE
    except CodesnapError as e:
        LOGGER.error("Export failed: %s", e)
        return error_response(e, {"kind": type(e).__name__}), EXIT_FAILURE
    except Exception as e:
        # Any failure still answers with one JSON response
        LOGGER.exception("Unexpected error while exporting")
        return error_response(e, {"kind": type(e).__name__}), EXIT_FAILURE


def serve(stdin: IO[str], stdout: IO[str], *, handler: Optional[RequestHandler] = None) -> int:
    """Answer the single request on ``stdin``; returns the exit code."""
    response, code = handle_payload(stdin.read(), handler=handler)
    stdout.write(json.dumps(response))
    stdout.flush()
    return code
