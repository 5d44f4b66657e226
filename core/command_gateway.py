"""
Execution of external command lines (nmcli, bluetoothctl, helper scripts).
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Callable

from statusbar_shell.statusbar_shell import logger as app_logger

DEFAULT_TIMEOUT_SECONDS = 10.0


def shell_quote(value: str) -> str:
    """
    Quote ``value`` as a single shell word.

    The value is wrapped in single quotes and every embedded ``'`` becomes
    ``'\\''``, so nothing inside it is expanded by the shell. Every SSID,
    password, MAC address or path interpolated into a command goes through
    here.
    """
    return "'" + value.replace("'", "'\\''") + "'"


@dataclass(frozen=True, slots=True)
class CommandResult:
    success: bool
    stdout: bytes = b""

    @property
    def text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")


FAILED = CommandResult(success=False, stdout=b"")


class CommandGateway:
    """
    Runs shell command lines either blocking (state queries) or detached
    (mutating actions whose outcome is checked later by polling).

    Failures are never raised: a command that cannot be spawned, times out,
    or exits non-zero produces ``FAILED`` and callers treat it as "no data".
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
        spawner: Callable[..., subprocess.Popen] = subprocess.Popen,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._runner = runner
        self._spawner = spawner
        self._logger = app_logger.get_logger()

    def run_sync(self, command: str) -> CommandResult:
        self._logger.debug("run_sync: {}", command)
        try:
            completed = self._runner(
                command,
                shell=True,
                capture_output=True,
                timeout=self._timeout_seconds,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            self._logger.warning("Command failed to run ({}): {}", exc.__class__.__name__, command)
            return FAILED
        if completed.returncode != 0:
            self._logger.debug("Command exited with code {}: {}", completed.returncode, command)
            return FAILED
        return CommandResult(success=True, stdout=completed.stdout or b"")

    def run_text(self, command: str) -> str:
        """Decoded stdout of ``run_sync``; empty on any failure."""
        result = self.run_sync(command)
        return result.text if result.success else ""

    def run_async(self, command: str) -> None:
        self._logger.debug("run_async: {}", command)
        try:
            self._spawner(
                command,
                shell=True,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            self._logger.warning("Command failed to spawn ({}): {}", exc.__class__.__name__, command)
