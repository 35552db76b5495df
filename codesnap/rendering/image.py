"""
Image emitter.

Renders the model into a full HTML page and hands it to a headless
renderer. The renderer re-measures the laid-out content; the width hint
computed here only sets the page's minimum width.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Protocol

from ..domain import CodeModel, FontSettings, Theme
from ..exceptions import RenderFailure, RenderTimeout
from .html import HtmlEmitter
from .options import ExportConfig

LOGGER = logging.getLogger(__name__)

IMAGE_FORMATS = ("png", "jpeg")

_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]


class Deadline:
    """One time budget shared by consecutive blocking steps."""

    def __init__(self, timeout_ms: int, clock: Callable[[], float] = time.monotonic):
        self.timeout_ms = timeout_ms
        self._clock = clock
        self._end = clock() + timeout_ms / 1000.0

    def remaining_ms(self) -> int:
        """Milliseconds left; raises RenderTimeout once the budget is spent."""
        left = int((self._end - self._clock()) * 1000)
        if left <= 0:
            raise RenderTimeout(f"Headless renderer timed out after {self.timeout_ms} ms")
        return left


@dataclass(frozen=True)
class RenderedImage:
    data: bytes
    width: int
    height: int
    content_width: int
    content_height: int


class HeadlessRenderer(Protocol):
    """Lays out a full HTML page and rasterizes its content box."""

    def render(
        self,
        page_html: str,
        *,
        min_width: float,
        transparent: bool,
        image_format: str,
        quality: int,
        timeout_ms: int,
        margin: int,
    ) -> RenderedImage: ...


class PlaywrightRenderer:
    """Chromium via Playwright's sync API.

    Playwright is an optional dependency (the ``image`` extra) and is only
    imported when a render is requested.
    """

    def __init__(self, executable_path: Optional[str] = None):
        self.executable_path = executable_path

    def render(
        self,
        page_html: str,
        *,
        min_width: float,
        transparent: bool,
        image_format: str,
        quality: int,
        timeout_ms: int,
        margin: int,
    ) -> RenderedImage:
        try:
            from playwright.sync_api import Error as PlaywrightError
            from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
            from playwright.sync_api import sync_playwright
        except ImportError as e:
            raise RenderFailure(
                "playwright is not installed; install the 'image' extra"
            ) from e

        deadline = Deadline(timeout_ms)
        launch: dict = {"headless": True, "args": _LAUNCH_ARGS, "timeout": deadline.remaining_ms()}
        if self.executable_path:
            launch["executable_path"] = self.executable_path

        try:
            with sync_playwright() as pw:
                browser = pw.chromium.launch(**launch)
                try:
                    page = browser.new_page(
                        viewport={"width": int(min_width) + 2 * margin, "height": 100}
                    )
                    page.set_content(page_html, wait_until="load", timeout=deadline.remaining_ms())
                    # wait_for_function takes a timeout where evaluate does not
                    box = page.wait_for_function(
                        """() => {
                            const r = document.body.getBoundingClientRect();
                            return {
                                width: Math.ceil(r.width),
                                height: Math.ceil(r.top + r.height),
                            };
                        }""",
                        timeout=deadline.remaining_ms(),
                    ).json_value()
                    content_w, content_h = int(box["width"]), int(box["height"])
                    width, height = content_w + margin, content_h + margin
                    LOGGER.debug("Measured content box %dx%d", content_w, content_h)
                    page.set_viewport_size({"width": width, "height": height})
                    shot: dict = {
                        "type": image_format,
                        "omit_background": transparent,
                        "clip": {"x": 0, "y": 0, "width": width, "height": height},
                        "timeout": deadline.remaining_ms(),
                    }
                    if image_format == "jpeg":
                        shot["quality"] = quality
                    data = page.screenshot(**shot)
                finally:
                    browser.close()
        except PlaywrightTimeoutError as e:
            raise RenderTimeout(f"Headless renderer timed out after {timeout_ms} ms") from e
        except PlaywrightError as e:
            raise RenderFailure(f"Headless renderer failed: {e}") from e

        return RenderedImage(
            data=data,
            width=width,
            height=height,
            content_width=content_w,
            content_height=content_h,
        )


class ImageEmitter:
    """CodeModel -> HTML page -> raster image bytes."""

    def __init__(
        self,
        renderer: Optional[HeadlessRenderer] = None,
        config: Optional[ExportConfig] = None,
    ):
        self.renderer = renderer or PlaywrightRenderer()
        self.config = config or ExportConfig()
        self.html = HtmlEmitter(self.config)

    def render(
        self,
        model: CodeModel,
        theme: Optional[Theme] = None,
        font_settings: Optional[FontSettings] = None,
        transparent: bool = False,
        *,
        min_width: Optional[float] = None,
        image_format: Optional[str] = None,
        template: Optional[str] = None,
        template_path: Optional[str] = None,
        data: Optional[Mapping[str, Any]] = None,
        tabstop: int = 4,
    ) -> RenderedImage:
        fonts = font_settings or model.font_settings
        if not min_width:
            min_width = self.html.min_width_hint(model, fonts)
        image_format = image_format or self.config.image_format
        if image_format not in IMAGE_FORMATS:
            raise RenderFailure(f"Unsupported image format: {image_format!r}")

        page = self.html.emit_page(
            model,
            theme,
            fonts,
            transparent=transparent,
            min_width=min_width,
            template=template,
            template_path=template_path,
            data=data,
            tabstop=tabstop,
        )
        LOGGER.debug("Rendering %s image, width hint %spx", image_format, min_width)
        margin = self.config.safety_margin
        image = self.renderer.render(
            page,
            min_width=min_width,
            transparent=transparent,
            image_format=image_format,
            quality=self.config.jpeg_quality,
            timeout_ms=self.config.timeout_ms,
            margin=margin,
        )
        if (
            image.width != image.content_width + margin
            or image.height != image.content_height + margin
        ):
            raise RenderFailure(
                f"Image is {image.width}x{image.height}, expected measured box "
                f"{image.content_width}x{image.content_height} plus {margin}px"
            )
        return image

    def emit(
        self,
        model: CodeModel,
        theme: Optional[Theme] = None,
        font_settings: Optional[FontSettings] = None,
        transparent: bool = False,
        **kwargs: Any,
    ) -> bytes:
        """Render ``model`` and return the encoded image bytes."""
        return self.render(model, theme, font_settings, transparent, **kwargs).data
