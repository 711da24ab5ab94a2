"""
Logging utilities for page capture.

Provides colorful CLI logging using the rich library.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn


# Global console instance
console = Console()

# Logger instances cache
_loggers: dict = {}

# Level applied to loggers created after setup_logger() was called
_default_level = logging.INFO

# File handler shared by every logger when a log file is configured
_file_handler: Optional[logging.FileHandler] = None

ROOT_LOGGER = "page_capture"


def _configure(logger: logging.Logger, level: int) -> None:
    """Attach the console handler and the shared file handler to a logger."""
    logger.setLevel(level)
    logger.handlers.clear()

    console_handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True
    )
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    if _file_handler:
        logger.addHandler(_file_handler)


def setup_logger(
    name: str = ROOT_LOGGER,
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up logging for the whole application.

    The level and log file apply to every logger handed out by
    get_logger(), including ones created earlier.
    
    Args:
        name: Logger name
        level: Logging level (default: INFO)
        log_file: Optional file path to write logs; None disables the file
        
    Returns:
        Configured logger instance
    """
    global _default_level, _file_handler
    _default_level = level

    if _file_handler:
        _file_handler.close()
        _file_handler = None

    if log_file:
        _file_handler = logging.FileHandler(log_file, encoding="utf-8")
        _file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        _file_handler.setLevel(level)

    _loggers[name] = logging.getLogger(name)

    for cached in _loggers.values():
        _configure(cached, level)

    return _loggers[name]


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """
    Get or create a logger instance.
    
    Args:
        name: Logger name
        
    Returns:
        Logger instance
    """
    if name not in _loggers:
        logger = logging.getLogger(name)
        _configure(logger, _default_level)
        _loggers[name] = logger
    return _loggers[name]


def create_progress() -> Progress:
    """Create a rich progress bar bound to the shared console."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True
    )


def print_status(message: str, style: str = "bold blue") -> None:
    """
    Print a styled status message.
    
    Args:
        message: Message to print
        style: Rich style string
    """
    console.print(f"[{style}]{message}[/{style}]")


def print_error(message: str) -> None:
    """Print an error message."""
    print_status(f"❌ {message}", "bold red")


def print_success(message: str) -> None:
    """Print a success message."""
    print_status(f"✅ {message}", "bold green")


def print_warning(message: str) -> None:
    """Print a warning message."""
    print_status(f"⚠️ {message}", "bold yellow")


def print_info(message: str) -> None:
    """Print an info message."""
    print_status(f"ℹ️ {message}", "bold cyan")
