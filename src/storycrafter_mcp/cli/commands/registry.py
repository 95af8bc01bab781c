"""MCP registry commands."""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from storycrafter_mcp.config import StoryCrafterConfig
from storycrafter_mcp.registry_update import (
    RegistryUpdateError,
    build_service_descriptor,
    publish_service,
)

app = typer.Typer(help="MCP registry publishing")
console = Console()


@app.command()
def publish(
    public_url: str = typer.Option(None, help="Public service URL (overrides config)"),
    config_file: Optional[Path] = typer.Option(None, "--config", help="Path to storycrafter.yaml"),
):
    """
    Publish this service to the central MCP registry.

    Requires REGISTRY_UPDATE_TOKEN. The public URL defaults to
    https://$VERCEL_URL when running in a Vercel build.

    Examples:
        REGISTRY_UPDATE_TOKEN=... storycrafter-mcp registry publish
    """
    try:
        config = StoryCrafterConfig.load(config_file)
    except ValueError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)

    if public_url is not None:
        config.public_url = public_url

    descriptor = build_service_descriptor(config)
    console.print(f"Updating MCP Registry for {descriptor['serviceName']}")
    console.print("━" * 50)
    console.print(f"Service: {descriptor['serviceName']}")
    console.print(f"URL: {descriptor['url']}")
    console.print(f"Tools: {len(descriptor['tools'])}")
    for tool in descriptor["tools"]:
        console.print(f"  - {tool['name']}")
    console.print()

    try:
        response = publish_service(config)
    except RegistryUpdateError as e:
        console.print(f"[red]{e.message}[/red]")
        if e.status_code is not None:
            console.print(f"Status: {e.status_code}")
        raise typer.Exit(1)

    console.print("[green]Registry updated successfully![/green]")
    if "toolsCount" in response:
        console.print(f"Tools registered: {response['toolsCount']}")
    if "timestamp" in response:
        console.print(f"Timestamp: {response['timestamp']}")
    if response.get("commitUrl"):
        console.print(f"Commit: {response['commitUrl']}")
