"""
Periodic and delayed callbacks on the Qt event loop.

All timers fire on the one thread that runs the Qt event loop, so callbacks
never overlap and managers need no locking.
"""

from __future__ import annotations

import itertools
from enum import Enum
from typing import Callable, Dict, Optional

from PySide6.QtCore import QObject, QTimer

from statusbar_shell.statusbar_shell import logger as app_logger


class Repeat(Enum):
    CONTINUE = "continue"
    STOP = "stop"


TaskCallback = Callable[[], Optional[Repeat]]


class PollHandle:
    """Opaque token for a registered timer; owned by whoever registered it."""

    __slots__ = ("task_id", "repeating", "_active")

    def __init__(self, task_id: int, repeating: bool) -> None:
        self.task_id = task_id
        self.repeating = repeating
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def _finish(self) -> None:
        self._active = False

    def __repr__(self) -> str:
        kind = "every" if self.repeating else "after"
        state = "active" if self._active else "done"
        return f"<PollHandle #{self.task_id} {kind} {state}>"


class Scheduler:
    """
    Interface shared by timer backends.

    ``every`` repeats until the callback returns ``Repeat.STOP`` or the handle
    is cancelled; ``after`` fires once. ``cancel`` is idempotent.
    """

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self._logger = app_logger.get_logger()

    def every(self, interval_ms: int, callback: TaskCallback) -> PollHandle:
        raise NotImplementedError

    def after(self, delay_ms: int, callback: TaskCallback) -> PollHandle:
        raise NotImplementedError

    def cancel(self, handle: Optional[PollHandle]) -> None:
        raise NotImplementedError

    def _new_handle(self, repeating: bool) -> PollHandle:
        return PollHandle(next(self._ids), repeating)

    def _invoke(self, handle: PollHandle, callback: TaskCallback) -> bool:
        """Run one firing of ``handle``; return whether it stays scheduled."""
        if not handle.active:
            return False
        try:
            result = callback()
        except Exception:
            self._logger.exception("Scheduled task #{} raised an exception.", handle.task_id)
            result = None
        if not handle.active:
            return False
        if not handle.repeating or result is Repeat.STOP:
            handle._finish()
            return False
        return True


class QtTimerScheduler(Scheduler):
    """Scheduler backed by ``QTimer`` instances parented to one owner object."""

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__()
        self._owner = QObject(parent)
        self._timers: Dict[int, QTimer] = {}

    def every(self, interval_ms: int, callback: TaskCallback) -> PollHandle:
        return self._start(interval_ms, callback, repeating=True)

    def after(self, delay_ms: int, callback: TaskCallback) -> PollHandle:
        return self._start(delay_ms, callback, repeating=False)

    def cancel(self, handle: Optional[PollHandle]) -> None:
        if handle is None:
            return
        handle._finish()
        self._discard(handle)

    @property
    def pending(self) -> int:
        return len(self._timers)

    def _start(self, interval_ms: int, callback: TaskCallback, *, repeating: bool) -> PollHandle:
        handle = self._new_handle(repeating)
        timer = QTimer(self._owner)
        timer.setSingleShot(not repeating)
        timer.setInterval(max(0, int(interval_ms)))
        timer.timeout.connect(lambda: self._on_timeout(handle, callback))  # type: ignore[arg-type]
        self._timers[handle.task_id] = timer
        timer.start()
        return handle

    def _on_timeout(self, handle: PollHandle, callback: TaskCallback) -> None:
        if not self._invoke(handle, callback):
            self._discard(handle)

    def _discard(self, handle: PollHandle) -> None:
        timer = self._timers.pop(handle.task_id, None)
        if timer is None:
            return
        timer.stop()
        timer.deleteLater()


class PollUntil:
    """
    Bounded retry loop: check ``predicate`` every ``interval_ms`` up to
    ``max_attempts`` times.

    The first check that returns True calls ``on_success``; if every attempt
    fails ``on_exhausted`` is called. Either way the loop ends. ``on_attempt``
    receives the attempt number before each check.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        *,
        interval_ms: int,
        max_attempts: int,
        predicate: Callable[[], bool],
        on_success: Callable[[], None],
        on_exhausted: Callable[[], None],
        on_attempt: Optional[Callable[[int], None]] = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._scheduler = scheduler
        self.interval_ms = interval_ms
        self.max_attempts = max_attempts
        self._predicate = predicate
        self._on_success = on_success
        self._on_exhausted = on_exhausted
        self._on_attempt = on_attempt
        self._attempts = 0
        self._handle: Optional[PollHandle] = None

    @property
    def attempts(self) -> int:
        return self._attempts

    @property
    def running(self) -> bool:
        return self._handle is not None and self._handle.active

    def start(self) -> PollHandle:
        if self._handle is not None and self._handle.active:
            return self._handle
        self._attempts = 0
        self._handle = self._scheduler.every(self.interval_ms, self._tick)
        return self._handle

    def cancel(self) -> None:
        self._scheduler.cancel(self._handle)
        self._handle = None

    def _tick(self) -> Repeat:
        self._attempts += 1
        if self._on_attempt is not None:
            self._on_attempt(self._attempts)
        if self._predicate():
            self._handle = None
            self._on_success()
            return Repeat.STOP
        if self._attempts >= self.max_attempts:
            self._handle = None
            self._on_exhausted()
            return Repeat.STOP
        return Repeat.CONTINUE
