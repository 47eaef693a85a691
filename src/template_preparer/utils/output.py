"""Rich console output and logging utilities."""

import logging

from rich.console import Console
from rich.logging import RichHandler


console = Console()
err_console = Console(stderr=True)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]✗[/red] {message}", style="red")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]ℹ[/blue] {message}")


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Route the package logger through a Rich handler on stderr.

    Args:
        level: Log level name (e.g. "INFO", "DEBUG")

    Returns:
        The configured ``template_preparer`` logger
    """
    logger = logging.getLogger("template_preparer")
    logger.setLevel(level.upper())
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=err_console, show_path=False, markup=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    logger.propagate = False
    return logger
