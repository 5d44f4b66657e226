"""
Logging setup for the status bar shell.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional

from loguru import logger as _logger

_LOG_INITIALISED = False


def _default_log_dir() -> Path:
    override = os.environ.get("STATUSBAR_SHELL_LOG_DIR")
    if override:
        return Path(override)
    state_home = os.environ.get("XDG_STATE_HOME")
    base = Path(state_home) if state_home else Path.home() / ".local" / "state"
    return base / "statusbar-shell"


def configure(log_path: Optional[Path] = None) -> None:
    """
    Configure loguru for the shell.

    Runs only once per process; later calls are ignored so every module can
    call ``get_logger()`` at import time.
    """
    global _LOG_INITIALISED
    if _LOG_INITIALISED:
        return
    target = log_path or (_default_log_dir() / "shell.log")

    _logger.remove()
    if sys.stderr is not None:
        _logger.add(sys.stderr, level="INFO", enqueue=True)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        _logger.add(
            target,
            level="DEBUG",
            rotation="10 MB",
            retention=5,
            encoding="utf-8",
            enqueue=True,
            backtrace=True,
            diagnose=False,
        )
    except OSError as exc:
        _logger.warning("File logging disabled; cannot use {}: {}", target, exc)
    _LOG_INITIALISED = True


def get_logger():
    """Return the shared logger instance."""
    configure()
    return _logger
