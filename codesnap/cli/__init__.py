"""Command line interface for codesnap."""
