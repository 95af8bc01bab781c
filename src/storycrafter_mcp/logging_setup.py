"""Logging configuration for the server process."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging once at process start.

    Logs go to stderr; stdout carries MCP messages on the stdio transport.

    Args:
        level: Logging level name (e.g. "INFO", "DEBUG")

    Raises:
        ValueError: If ``level`` is not a logging level name
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Invalid log level: {level}")

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    logging.basicConfig(
        level=numeric,
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    # httpx logs every request at INFO; keep it at WARNING
    logging.getLogger("httpx").setLevel(logging.WARNING)
