"""
Entry point for the statusbar_shell application.
"""

from __future__ import annotations

import fcntl
import os
import sys
import time
from pathlib import Path
from typing import IO, Iterable, Optional, Tuple

from PySide6.QtWidgets import QApplication

from core.app import AppCoordinator
from statusbar_shell.statusbar_shell import logger as app_logger

_LOGGER = app_logger.get_logger()
_LOCK_NAME = "statusbar-shell.lock"
_INITIAL_BACKOFF_SECONDS = 2
_MAX_BACKOFF_SECONDS = 30


def _default_lock_path() -> Path:
    runtime_dir = os.environ.get("XDG_RUNTIME_DIR") or "/tmp"
    return Path(runtime_dir) / _LOCK_NAME


class _InstanceGuard:
    """Advisory file lock guard to prevent concurrent instances."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._handle: Optional[IO[str]] = None

    def acquire(self) -> bool:
        try:
            handle = open(self._path, "w", encoding="utf-8")
        except OSError as exc:
            _LOGGER.warning("Cannot open lock file {}: {}; continuing without guard.", self._path, exc)
            return True
        try:
            fcntl.flock(handle, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            handle.close()
            return False
        handle.write(str(os.getpid()))
        handle.flush()
        self._handle = handle
        return True

    def release(self) -> None:
        if self._handle is None:
            return
        fcntl.flock(self._handle, fcntl.LOCK_UN)
        self._handle.close()
        self._handle = None


def _run_application_once(argv: Iterable[str]) -> Tuple[int, bool]:
    """Start the Qt application once and report whether shutdown was intentional."""
    app = QApplication.instance() or QApplication(list(argv))
    app.setQuitOnLastWindowClosed(False)
    coordinator = AppCoordinator()
    coordinator.start()
    exit_code = app.exec()
    return exit_code, coordinator.manual_shutdown_requested


def main() -> int:
    """Launch the shell with single-instance + recovery safeguards."""
    guard = _InstanceGuard(_default_lock_path())
    if not guard.acquire():
        _LOGGER.debug("Status bar shell instance already running; exiting silently.")
        return 0

    backoff_seconds = _INITIAL_BACKOFF_SECONDS

    try:
        while True:
            try:
                exit_code, manual = _run_application_once(sys.argv)
            except Exception:  # pragma: no cover - crash guard
                _LOGGER.exception("Shell crashed; attempting automatic recovery.")
                exit_code = 1
                manual = False

            if manual:
                return exit_code

            _LOGGER.warning(
                "Shell exited unexpectedly (code={}). Restarting in {} seconds.",
                exit_code,
                backoff_seconds,
            )
            time.sleep(backoff_seconds)
            backoff_seconds = min(backoff_seconds * 2, _MAX_BACKOFF_SECONDS)
    finally:
        guard.release()


if __name__ == "__main__":
    raise SystemExit(main())
