"""Render command: answer one JSON request from stdin on stdout."""

import sys
from typing import Optional

import typer

from codesnap.rendering.options import ExportConfig
from codesnap.transport.server import RequestHandler, serve


def main(
    timeout_ms: int = typer.Option(
        5000, "--timeout-ms", help="Deadline for each headless browser step"
    ),
    output_dir: Optional[str] = typer.Option(
        None, "--output-dir", help="Directory used when the request has no outputDir"
    ),
):
    """Read one export request from stdin and write the JSON response to stdout."""
    config = ExportConfig(timeout_ms=timeout_ms, output_dir=output_dir)
    code = serve(sys.stdin, sys.stdout, handler=RequestHandler(config))
    if code:
        raise typer.Exit(code)
