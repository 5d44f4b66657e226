"""
Visibility bookkeeping for the shell's popups and their shared backdrop.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Tuple

from PySide6.QtCore import QObject, Signal

from statusbar_shell.statusbar_shell import logger as app_logger

BACKDROP = "popup-backdrop"
AUDIO_POPUP = "audio-popup"
BRIGHTNESS_POPUP = "brightness-popup"
WIFI_POPUP = "wifi-popup"
BLUETOOTH_POPUP = "bluetooth-popup"
POPUP_NAMES: Tuple[str, ...] = (AUDIO_POPUP, BRIGHTNESS_POPUP, WIFI_POPUP, BLUETOOTH_POPUP)


class PopupController(QObject):
    """
    Owns the popup registry and keeps at most one popup visible.

    The backdrop is visible exactly when some popup is. There is no
    "current popup" field; the open popup is derived from the flags.
    ``visibilityChanged`` is emitted only for real transitions.
    """

    visibilityChanged = Signal(str, bool)

    def __init__(self, names: Iterable[str] = POPUP_NAMES) -> None:
        super().__init__()
        self._logger = app_logger.get_logger()
        self._names: Tuple[str, ...] = tuple(names)
        if BACKDROP in self._names:
            raise ValueError(f"{BACKDROP!r} is reserved for the backdrop")
        self._visible: Dict[str, bool] = {name: False for name in self._names}
        self._visible[BACKDROP] = False

    @property
    def names(self) -> Tuple[str, ...]:
        return self._names

    def is_visible(self, name: str) -> bool:
        return self._visible.get(name, False)

    def visible_popup(self) -> Optional[str]:
        for name in self._names:
            if self._visible[name]:
                return name
        return None

    def snapshot(self) -> Dict[str, bool]:
        return dict(self._visible)

    def toggle(self, name: str) -> None:
        if name not in self._names:
            self._logger.warning("Ignoring toggle for unknown popup {}.", name)
            return
        was_visible = self._visible[name]
        self.close_all()
        if not was_visible:
            self._set(name, True)
            self._set(BACKDROP, True)
            self._logger.debug("Popup {} opened.", name)

    def close_all(self) -> None:
        for name in self._names:
            self._set(name, False)
        self._set(BACKDROP, False)

    def _set(self, name: str, visible: bool) -> None:
        if self._visible[name] == visible:
            return
        self._visible[name] = visible
        self.visibilityChanged.emit(name, visible)
