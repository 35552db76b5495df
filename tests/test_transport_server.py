import io
import json
import os
import tempfile
import unittest
from datetime import datetime
from unittest.mock import Mock, patch

from codesnap.exceptions import ClipboardUnavailable, RenderTimeout
from codesnap.rendering.image import RenderedImage
from codesnap.rendering.options import ExportConfig
from codesnap.transport.server import (
    EXIT_FAILURE,
    EXIT_OK,
    RequestHandler,
    handle_payload,
    parse_request,
    serve,
)

FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5)


def _request(request_type="html", **extra):
    req = {
        "type": request_type,
        "theme": {"fgColor": "#ffffff", "bgColor": "#000000"},
        "fontSettings": {
            "size": 14,
            "line_height": 0.8,
            "fonts": {"default": {"name": "FiraCode Nerd Font"}},
        },
        "code": [
            [
                {"text": "let", "fg": "#ff0000", "bg": "#000000", "bold": True, "hl_name": "Keyword"},
                {"text": " x = 1", "fg": "#ffffff", "bg": "#000000", "styleName": "Normal"},
            ],
            [],
        ],
        "minWidth": 0,
        "filename": "main.lua",
        "filenamePattern": "%file_name_%t",
        "transparent": False,
        "toClipboard": {"image": False, "html": False, "rtf": False},
    }
    req.update(extra)
    return req


class ImageRenderer:
    def __init__(self, error=None):
        self.error = error

    def render(self, page_html, *, min_width, transparent, image_format, quality, timeout_ms, margin):
        if self.error:
            raise self.error
        return RenderedImage(b"PNGDATA", 11, 21, 10, 20)


class TestParseRequest(unittest.TestCase):
    def test_hl_name_alias_and_coalescing(self):
        req = parse_request(
            _request(
                code=[
                    [
                        {"text": "a", "fg": "#FF0000", "hl_name": "A"},
                        {"text": "b", "fg": "#ff0000", "hl_name": "B"},
                    ]
                ]
            )
        )
        model = req.to_code_model()
        self.assertEqual(len(model.lines[0].segments), 1)
        seg = model.lines[0].segments[0]
        self.assertEqual((seg.text, seg.style_name, seg.fg, seg.bg), ("ab", "A", "#ff0000", "#000000"))

    def test_boolean_clipboard_expands(self):
        req = parse_request(_request(toClipboard=True))
        self.assertTrue(req.toClipboard.image and req.toClipboard.html and req.toClipboard.rtf)

    def test_invalid_color_is_malformed(self):
        from codesnap.exceptions import MalformedInput

        with self.assertRaises(MalformedInput) as ctx:
            parse_request(_request(theme={"fgColor": "red", "bgColor": "#000000"}))
        self.assertTrue(ctx.exception.context)


class TestExtraMode(unittest.TestCase):
    def test_env_values(self):
        from codesnap.transport._base import _env_extra_mode

        for raw, expected in (("forbid", "forbid"), ("strict", "forbid"), ("off", "allow"), ("bogus", "allow"), ("", "allow")):
            with patch.dict(os.environ, {"CODESNAP_EXTRA": raw}):
                self.assertEqual(_env_extra_mode(), expected, raw)


class TestHandlePayload(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.clipboard = Mock()
        self.handler = RequestHandler(
            ExportConfig(output_dir=self.tmp.name),
            renderer=ImageRenderer(),
            clipboard=self.clipboard,
            clock=lambda: FIXED_NOW,
        )

    def _run(self, payload):
        raw = payload if isinstance(payload, str) else json.dumps(payload)
        return handle_payload(raw, handler=self.handler)

    def test_malformed_json(self):
        response, code = self._run("{not json")
        self.assertEqual(code, EXIT_FAILURE)
        self.assertFalse(response["success"])
        self.assertIn("Invalid JSON", response["error"])
        self.assertEqual(os.listdir(self.tmp.name), [])

    def test_missing_fields_are_malformed(self):
        response, code = self._run({"type": "html", "code": "nope"})
        self.assertEqual(code, EXIT_FAILURE)
        self.assertFalse(response["success"])
        self.assertIn("context", response)

    def test_request_with_only_type_is_malformed(self):
        response, code = self._run({"type": "rtf"})
        self.assertEqual(code, EXIT_FAILURE)
        self.assertFalse(response["success"])
        missing = {err["loc"][0] for err in response["context"]}
        self.assertTrue(
            {"theme", "fontSettings", "code", "minWidth", "filename", "filenamePattern", "transparent", "toClipboard"}
            <= missing
        )
        self.assertEqual(os.listdir(self.tmp.name), [])

    def test_unwritable_output_dir_answers_with_failure(self):
        blocker = os.path.join(self.tmp.name, "afile")
        with open(blocker, "w", encoding="utf-8") as f:
            f.write("x")
        response, code = self._run(_request("html", outputDir=blocker))
        self.assertEqual(code, EXIT_FAILURE)
        self.assertFalse(response["success"])
        self.assertEqual(response["context"], {"kind": "OutputWriteFailure"})
        self.assertIn(blocker, response["error"])
        self.assertEqual(os.listdir(self.tmp.name), ["afile"])

    def test_unexpected_error_still_answers(self):
        self.clipboard.side_effect = RuntimeError("boom")
        stdout = io.StringIO()
        code = serve(io.StringIO(json.dumps(_request("rtf", toClipboard=True))), stdout, handler=self.handler)
        self.assertEqual(code, EXIT_FAILURE)
        response = json.loads(stdout.getvalue())
        self.assertEqual(response, {"success": False, "error": "boom", "context": {"kind": "RuntimeError"}})

    def test_unknown_type_is_named(self):
        response, code = self._run(_request("pdf"))
        self.assertEqual(code, EXIT_FAILURE)
        self.assertIn("'pdf'", response["error"])

    def test_html_export_writes_file_and_echoes_request(self):
        response, code = self._run(_request("html", additionalTemplateData={"k": "v"}))
        self.assertEqual(code, EXIT_OK)
        self.assertTrue(response["success"])
        path = response["data"]["filepath"]
        self.assertEqual(path, os.path.join(self.tmp.name, "main_20240102_030405.html"))
        self.assertEqual(response["data"]["filename"], "main.lua")
        self.assertEqual(response["data"]["additionalTemplateData"], {"k": "v"})
        with open(path, encoding="utf-8") as f:
            page = f.read()
        self.assertIn("<b>let</b>", page)
        self.assertIn('<div class="code-line">&nbsp;</div>', page)
        self.clipboard.assert_not_called()

    def test_rtf_export(self):
        response, code = self._run(_request("rtf", toClipboard={"rtf": True}))
        self.assertEqual(code, EXIT_OK)
        self.assertTrue(response["data"]["filepath"].endswith(".rtf"))
        data, mime = self.clipboard.call_args[0]
        self.assertEqual(mime, "text/rtf")
        self.assertTrue(data.startswith(b"{\\rtf1"))

    def test_image_export(self):
        response, code = self._run(_request("image", outputImageFormat="jpeg"))
        self.assertEqual(code, EXIT_OK)
        path = response["data"]["filepath"]
        self.assertTrue(path.endswith(".jpg"))
        with open(path, "rb") as f:
            self.assertEqual(f.read(), b"PNGDATA")

    def test_enveloped_request(self):
        response, code = self._run({"success": True, "debug": True, "data": _request("html")})
        self.assertEqual(code, EXIT_OK)
        self.assertTrue(response["debug"])

    def test_clipboard_failure_is_soft(self):
        self.clipboard.side_effect = ClipboardUnavailable("No clipboard tool available for text/html")
        response, code = self._run(_request("html", toClipboard=True))
        self.assertEqual(code, EXIT_OK)
        self.assertTrue(response["success"])
        self.assertIn("No clipboard tool", response["context"]["clipboard"])
        self.assertTrue(os.path.exists(response["data"]["filepath"]))

    def test_timeout_leaves_no_file_and_no_clipboard(self):
        self.handler.renderer = ImageRenderer(error=RenderTimeout("timed out"))
        response, code = self._run(_request("image", toClipboard=True))
        self.assertEqual(code, EXIT_FAILURE)
        self.assertEqual(response["error"], "timed out")
        self.assertEqual(os.listdir(self.tmp.name), [])
        self.clipboard.assert_not_called()

    def test_serve_writes_one_response(self):
        stdin = io.StringIO(json.dumps(_request("html")))
        stdout = io.StringIO()
        code = serve(stdin, stdout, handler=self.handler)
        self.assertEqual(code, EXIT_OK)
        self.assertTrue(json.loads(stdout.getvalue())["success"])


if __name__ == "__main__":
    unittest.main()
