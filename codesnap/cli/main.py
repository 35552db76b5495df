#!/usr/bin/env python
"""Command line interface for codesnap."""

import logging
import sys

import typer

from codesnap.cli.commands import inspect, render

app = typer.Typer(help="Export highlighted code as HTML, RTF or an image")

app.command("render")(render.main)
app.command("inspect")(inspect.main)


@app.callback()
def callback(
    debug: bool = typer.Option(False, "--debug", help="Log debug output to stderr"),
):
    """Render styled code snapshots over a JSON stdio protocol."""
    # stdout is reserved for the JSON response
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
