"""Server commands: start, tools, config."""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from storycrafter_mcp.config import StoryCrafterConfig
from storycrafter_mcp.logging_setup import configure_logging
from storycrafter_mcp.server import MCPServer
from storycrafter_mcp.tools.schemas import TOOL_DESCRIPTORS

app = typer.Typer(help="StoryCrafter MCP server")
console = Console(stderr=True)


@app.command()
def start(
    host: str = typer.Option(None, help="Server host (network transports, overrides config)"),
    port: int = typer.Option(None, help="Server port (network transports, overrides config)"),
    transport: str = typer.Option(None, help="Transport: http, sse or stdio (overrides config)"),
    auth: bool = typer.Option(None, help="Require bearer tokens and resolve credentials (overrides config)"),
    service_url: str = typer.Option(None, help="StoryCrafter backend URL (overrides config)"),
    log_level: str = typer.Option(None, help="Logging level (overrides config)"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="Path to storycrafter.yaml"),
):
    """
    Start the MCP server.

    Configuration is loaded from storycrafter.yaml if it exists.
    Environment variables override the config file; command-line options
    override both.

    Examples:
        # Serve the JSON /mcp endpoint
        storycrafter-mcp server start --host 0.0.0.0 --port 8000

        # Serve native MCP over stdio
        storycrafter-mcp server start --transport stdio

        # Require bearer tokens and resolve credentials from the registry
        storycrafter-mcp server start --auth
    """
    try:
        config = StoryCrafterConfig.load(config_file)

        if host is not None:
            config.host = host
        if port is not None:
            config.port = port
        if transport is not None:
            config.transport = transport
        if auth is not None:
            config.auth_required = auth
        if service_url is not None:
            config.service_url = service_url
        if log_level is not None:
            config.log_level = log_level

        # Re-run validation on the overridden values
        config = StoryCrafterConfig(**vars(config))

        configure_logging(config.log_level)
        server = MCPServer(config=config)

        console.print("[green]Starting StoryCrafter MCP server...[/green]")
        console.print(f"Transport: {config.transport}")
        if config.transport != "stdio":
            console.print(f"Listening on {config.host}:{config.port}")
        console.print(f"Backend: {config.service_url}")
        if config.auth_required:
            console.print("[yellow]Bearer token required[/yellow]")

        console.print("\n[dim]Press Ctrl+C to stop server[/dim]\n")

        server.start()
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)
    except RuntimeError as e:
        console.print(f"[red]Error starting server:[/red] {e}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped by user[/yellow]")
        raise typer.Exit(0)


@app.command()
def tools(
    as_json: bool = typer.Option(False, "--json", help="Print full descriptors as JSON"),
):
    """List the tools this server exposes."""
    if as_json:
        typer.echo(json.dumps(TOOL_DESCRIPTORS, indent=2))
        return

    table = Table(title="StoryCrafter Tools")
    table.add_column("Tool", style="cyan")
    table.add_column("Required arguments")
    table.add_column("Description")

    for tool in TOOL_DESCRIPTORS:
        required = ", ".join(tool["inputSchema"].get("required", []))
        table.add_row(tool["name"], required, tool["description"])

    Console().print(table)


@app.command()
def config(
    config_file: Optional[Path] = typer.Option(None, "--config", help="Path to storycrafter.yaml"),
):
    """Show the effective configuration with secrets redacted."""
    try:
        loaded = StoryCrafterConfig.load(config_file)
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)

    table = Table(title="StoryCrafter MCP Configuration", show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    for key, value in loaded.redacted().items():
        if isinstance(value, dict):
            value = ", ".join(f"{k}={v:g}s" for k, v in value.items())
        table.add_row(key, str(value))

    Console().print(table)
