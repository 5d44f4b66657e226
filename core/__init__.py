"""
Core services for the status bar shell: command execution, scheduling and popup state.
"""

from .command_gateway import CommandGateway, CommandResult, shell_quote  # noqa: F401
from .popup_controller import PopupController  # noqa: F401
from .scheduler import PollUntil, QtTimerScheduler, Repeat, Scheduler  # noqa: F401
