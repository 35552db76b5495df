import re
import unittest

from codesnap.domain import CodeModel, Line, Segment, Style, Theme
from codesnap.rendering.html import HtmlEmitter, escape_text, render_segment
from codesnap.rendering.options import ExportConfig

SPAN_RE = re.compile(
    r'<span style="color:(?P<fg>#[0-9a-f]{6});background-color:(?P<bg>#[0-9a-f]{6})" '
    r'data-style="(?P<name>[^"]*)">(?P<body>.*?)</span>'
)


def _seg(text, fg="#ffffff", bg="#000000", name="Normal", **flags):
    return Segment(style=Style(fg=fg, bg=bg, **flags), style_name=name, text=text)


class TestHtmlEmitter(unittest.TestCase):
    def test_segment_span(self):
        html = render_segment(_seg("let", fg="#ff0000", name="Keyword"))
        self.assertEqual(
            html,
            '<span style="color:#ff0000;background-color:#000000" data-style="Keyword">let</span>',
        )

    def test_tag_order_bold_italic_underline(self):
        html = render_segment(_seg("x", bold=True, italic=True, underline=True))
        self.assertIn("<b><i><u>x</u></i></b>", html)
        self.assertIn("<i>y</i>", render_segment(_seg("y", italic=True)))

    def test_text_is_escaped_before_wrapping(self):
        html = render_segment(_seg("a < b && c > d", bold=True))
        self.assertIn("<b>a &lt; b &amp;&amp; c &gt; d</b>", html)

    def test_braces_only_escaped_on_request(self):
        self.assertEqual(escape_text("{x}"), "{x}")
        self.assertEqual(escape_text("{x}", escape_braces=True), "&#123;x&#125;")
        model = CodeModel(lines=(Line((_seg("{{ y }}"),)),))
        html = HtmlEmitter(ExportConfig(escape_braces=True)).emit(model)
        self.assertNotIn("{", html)

    def test_lines_are_blocks_without_separators(self):
        model = CodeModel(lines=(Line((_seg("a"),)), Line((_seg("b"),))))
        html = HtmlEmitter().emit(model)
        self.assertEqual(html.count('<div class="code-line">'), 2)
        self.assertIn("</div><div", html)
        self.assertNotIn("\n", html)

    def test_blank_lines_get_placeholder(self):
        model = CodeModel(lines=(Line(()), Line((_seg("   "),))))
        html = HtmlEmitter().emit(model)
        self.assertEqual(html.count('<div class="code-line">&nbsp;</div>'), 2)

    def test_empty_model(self):
        self.assertEqual(HtmlEmitter().emit(CodeModel()), "")

    def test_style_attributes_round_trip(self):
        segments = (
            _seg("def", fg="#c678dd", name="Keyword", bold=True),
            _seg(" ", name="Normal"),
            _seg("main", fg="#61afef", bg="#282c34", name="Function", italic=True, underline=True),
        )
        html = HtmlEmitter().emit(CodeModel(lines=(Line(segments),), theme=Theme()))
        parsed = []
        for m in SPAN_RE.finditer(html):
            body = m.group("body")
            flags = {
                "bold": "<b>" in body,
                "italic": "<i>" in body,
                "underline": "<u>" in body,
            }
            text = re.sub(r"</?[biu]>", "", body)
            parsed.append((m.group("fg"), m.group("bg"), m.group("name"), text, flags))
        self.assertEqual(
            parsed,
            [
                (s.fg, s.bg, s.style_name, s.text, {"bold": s.bold, "italic": s.italic, "underline": s.underline})
                for s in segments
            ],
        )


if __name__ == "__main__":
    unittest.main()
