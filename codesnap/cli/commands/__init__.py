"""Command modules for the codesnap CLI."""

from codesnap.cli.commands import inspect, render

__all__ = ["inspect", "render"]
