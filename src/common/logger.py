"""Logging utilities with rich console output.

Every module gets its logger the same way:

    from common.logger import get_logger

    logger = get_logger(__name__)
    logger.debug("Fetching branches for octo/demo")
    logger.warning("Contributors fetch failed, keeping previous data")

Console helpers (``progress``, ``success``, ``warning``, ``error``) print
directly to the shared rich console and are meant for CLI feedback only.
"""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

# Shared console so log records and CLI output interleave correctly
console = Console()
error_console = Console(stderr=True)

# Names of loggers configured by get_logger
_configured: set[str] = set()


def _rich_handler(show_time: bool = False, show_path: bool = False) -> RichHandler:
    handler = RichHandler(
        console=console,
        show_time=show_time,
        show_path=show_path,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
    return handler


def get_logger(
    name: str,
    level: str | None = None,
    show_time: bool = False,
    show_path: bool = False,
) -> logging.Logger:
    """Get a configured logger with rich output.

    Args:
        name: Logger name (typically __name__ of the module)
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               If None, uses environment variable LOG_LEVEL or defaults to INFO.
        show_time: Show timestamp in log output
        show_path: Show source path in log output

    Returns:
        Configured logger instance

    Example:
        >>> logger = get_logger("explore.explorer", level="DEBUG")
        >>> logger.debug("Cache hit for branch main")
        DEBUG    Cache hit for branch main
    """
    logger = logging.getLogger(name)

    # Avoid stacking handlers when the same module asks twice
    if name in _configured:
        return logger
    _configured.add(name)

    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")

    logger.setLevel(level.upper())
    logger.addHandler(_rich_handler(show_time=show_time, show_path=show_path))

    # Propagate so pytest caplog can capture records
    logger.propagate = True

    return logger


def setup_logging(level: str | None = None, log_file: str | None = None) -> None:
    """Configure the root logger once at the CLI entry point.

    Loggers already handed out by get_logger drop their own handler and take
    the new level, so every record is printed once, by the root handler.

    Args:
        level: Level for all modules (default: LOG_LEVEL, then INFO)
        log_file: Optional file path to also write records to
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(_rich_handler())

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root_logger.addHandler(file_handler)

    for name in _configured:
        module_logger = logging.getLogger(name)
        module_logger.handlers.clear()
        module_logger.setLevel(level)


def progress(message: str) -> None:
    """Print a plain progress line."""
    console.print(message)


def success(message: str) -> None:
    """Print a success line with a green check mark.

    Example:
        >>> success("Switched to branch develop")
        ✓ Switched to branch develop
    """
    console.print(f"[green]✓[/green] {message}")


def warning(message: str) -> None:
    """Print a warning line with a yellow marker."""
    console.print(f"[yellow]⚠[/yellow] {message}")


def error(message: str) -> None:
    """Print an error line with a red cross to stderr."""
    error_console.print(f"[red]✗[/red] {message}")
