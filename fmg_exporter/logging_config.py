"""
Logging configuration.

Every module logs through ``logging.getLogger(__name__)``; this module
installs one rich handler on the root logger. Output always goes to stderr
because stdout carries the stdio tool protocol.

Usage:
    from fmg_exporter.logging_config import configure_logging

    configure_logging("DEBUG")
"""

import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

NOISY_LOGGERS = ("asyncio", "aiohttp.access", "mcp", "httpx", "uvicorn.access")


def configure_logging(level: Union[str, int] = "INFO", console: Optional[Console] = None) -> None:
    """
    Configure root logging.

    Safe to call more than once: previously installed handlers are replaced.

    Args:
        level: Level name or number for the package loggers
        console: Console to write to (defaults to a stderr console)
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s", datefmt="[%X]"))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    # Third-party chatter only at WARNING unless we are debugging
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING if level > logging.DEBUG else level)
