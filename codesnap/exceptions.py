"""Library exceptions."""

from __future__ import annotations

from typing import Any, Optional


class CodesnapError(Exception):
    """Base codesnap error."""


class MalformedInput(CodesnapError):
    """Request JSON is missing fields or has fields of the wrong shape."""

    def __init__(self, message: str, context: Optional[Any] = None):
        super().__init__(message)
        self.context = context


class UnsupportedRequestType(CodesnapError):
    """Request `type` is not one of image/html/rtf."""

    def __init__(self, request_type: Any):
        super().__init__(f"Unknown request type: {request_type!r}")
        self.request_type = request_type


class RenderTimeout(CodesnapError):
    """The renderer process or headless browser exceeded its deadline."""


class RenderFailure(CodesnapError):
    """The headless renderer failed or returned an inconsistent result."""


class FontResolutionFailure(CodesnapError):
    """A custom font file could not be read or has an unsupported format."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class ClipboardUnavailable(CodesnapError):
    """No supported clipboard tool was found, or the tool failed."""


class TemplateFailure(CodesnapError):
    """A page template could not be loaded or rendered."""


class RendererError(CodesnapError):
    """The renderer process answered with ``success: false``."""

    def __init__(self, message: str, context: Optional[Any] = None):
        super().__init__(message)
        self.context = context


class OutputWriteFailure(CodesnapError):
    """The output directory or file could not be created or written."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path
