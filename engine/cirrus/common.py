"""Shared utilities — console output, prompts, logging, secret redaction.

CLI commands and services should import from here rather than
building their own consoles or log handlers.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.prompt import Prompt

# ---------------------------------------------------------------------------
# Console singleton
# ---------------------------------------------------------------------------
console = Console()

# ---------------------------------------------------------------------------
# Timestamp for log file naming
# ---------------------------------------------------------------------------
TIMESTAMP = datetime.now().strftime("%Y-%m-%d-%H%M%S")

REDACTED = "***"

# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------


def print_info(msg: str) -> None:
    console.print(f"[blue]ℹ {msg}[/blue]")


def print_success(msg: str) -> None:
    console.print(f"[bold green]✔ {msg}[/bold green]")


def print_warning(msg: str) -> None:
    console.print(f"[bold yellow]⚠ {msg}[/bold yellow]")


def print_error(msg: str) -> None:
    console.print(f"[bold red]✖ {msg}[/bold red]")


def print_detail(msg: str) -> None:
    console.print(f"  {msg}")


def die(msg: str, code: int = 1) -> None:
    print_error(msg)
    sys.exit(code)


# ---------------------------------------------------------------------------
# Prompt helpers
# ---------------------------------------------------------------------------


def prompt_password(msg: str) -> str:
    return Prompt.ask(f"[bold]{msg}[/bold]", password=True) or ""


# ---------------------------------------------------------------------------
# File-based logging
# ---------------------------------------------------------------------------

_log_file: Optional[Path] = None


def init_logging(
    prefix: str = "cirrus",
    log_dir: Optional[Path] = None,
    level: str | int = logging.DEBUG,
) -> Path:
    """Initialise file-based logging for the ``cirrus`` logger tree. Returns the log file path."""
    global _log_file

    if log_dir is None:
        from .config import settings
        log_dir = settings.log_dir

    log_dir.mkdir(parents=True, exist_ok=True)
    _log_file = log_dir / f"{prefix}-{TIMESTAMP}.log"

    logger = logging.getLogger("cirrus")
    logger.setLevel(level)
    fh = logging.FileHandler(_log_file)
    fh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logger.addHandler(fh)
    return _log_file


# ---------------------------------------------------------------------------
# Redaction
# ---------------------------------------------------------------------------


def redact(text: str, *secrets: str | None) -> str:
    """Replace every occurrence of each non-empty secret in *text*."""
    for secret in secrets:
        if secret:
            text = text.replace(secret, REDACTED)
    return text
