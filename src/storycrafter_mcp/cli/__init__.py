"""Command-line interface for StoryCrafter MCP."""

import typer

from .commands import registry, server

app = typer.Typer(help="StoryCrafter MCP: AI backlog generation for VISHKAR consensus")
app.add_typer(server.app, name="server")
app.add_typer(registry.app, name="registry")


def main():
    """Console script entry point."""
    app()


__all__ = ["app", "main"]
