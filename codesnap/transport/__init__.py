"""Single-shot JSON protocol between the editor side and the renderer.

Contains:
- models: pydantic wire models and response helpers
- server: renderer-side request handling over stdio
- client: editor-side request builder and subprocess client
"""
