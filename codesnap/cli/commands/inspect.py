"""Inspect command: show the segments of a saved request."""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from codesnap.debug_tools import dump_model_text, map_segments
from codesnap.exceptions import CodesnapError
from codesnap.transport.server import decode_request, parse_request

console = Console()


def main(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Request JSON file"),
    plain: bool = typer.Option(False, "--plain", help="Print a plain text dump instead of a table"),
):
    """Print the segments of a request file as a table."""
    try:
        payload, _ = decode_request(path.read_text(encoding="utf-8"))
        model = parse_request(payload).to_code_model()
    except CodesnapError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if plain:
        typer.echo(dump_model_text(model))
        return

    rows = map_segments(model)
    if not rows:
        console.print("No segments found")
        return

    table = Table("Line", "Col", "Style", "fg", "bg", "Flags", "Text")
    for row in rows:
        flags = "".join(
            flag for flag, on in (("b", row["bold"]), ("i", row["italic"]), ("u", row["underline"])) if on
        )
        table.add_row(
            str(row["line"]),
            str(row["col"]),
            str(row["style_name"]),
            str(row["fg"]),
            str(row["bg"]),
            flags,
            repr(row["text"]),
        )
    console.print(table)
