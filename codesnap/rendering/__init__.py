"""Emitters and output helpers for a CodeModel.

Contains:
- html: pure HTML fragment emitter
- rtf: RTF document emitter with color and font tables
- image: page rendering and the headless renderer seam
- templates: jinja2 page templates
- fonts: @font-face data URIs for custom font files
- exporter: filename patterns and atomic file writes
- clipboard: platform clipboard sink
"""
