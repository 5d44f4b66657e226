"""
Frameless popup card anchored to the top-right corner, plus the transparent
backdrop that catches clicks outside it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional

from PySide6.QtCore import QPoint, Qt, Signal
from PySide6.QtGui import QColor, QKeyEvent, QMouseEvent
from PySide6.QtWidgets import (
    QApplication,
    QGraphicsDropShadowEffect,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)


@dataclass
class PopupRow:
    text: str
    on_click: Optional[Callable[[], None]] = None
    on_secondary: Optional[Callable[[], None]] = None
    enabled: bool = True
    tooltip: str = ""


class _RowButton(QPushButton):
    """Push button that also reports right clicks."""

    secondaryClicked = Signal()

    def mousePressEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        if event.button() == Qt.MouseButton.RightButton:
            self.secondaryClicked.emit()
            return
        super().mousePressEvent(event)


class PopupWindow(QWidget):
    escapePressed = Signal()
    submitted = Signal(str)
    backRequested = Signal()

    def __init__(self, title: str, parent: QWidget | None = None) -> None:
        flags = Qt.WindowType.Tool | Qt.WindowType.FramelessWindowHint | Qt.WindowType.WindowStaysOnTopHint
        super().__init__(parent)
        self.setWindowFlags(flags)
        self.setObjectName("ShellPopup")
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground, True)

        self._container = QWidget(self)
        self._container.setObjectName("PopupCard")
        shadow = QGraphicsDropShadowEffect(self._container)
        shadow.setBlurRadius(24)
        shadow.setColor(QColor(0, 0, 0, 140))
        shadow.setOffset(0, 10)
        self._container.setGraphicsEffect(shadow)

        self._title_label = QLabel(title)
        self._title_label.setObjectName("PopupTitle")
        self._header_button = QPushButton()
        self._header_button.setCursor(Qt.CursorShape.PointingHandCursor)
        self._header_button.hide()
        self._header_action: Optional[Callable[[], None]] = None
        self._header_button.clicked.connect(self._on_header_clicked)  # type: ignore[arg-type]

        header = QHBoxLayout()
        header.addWidget(self._title_label)
        header.addStretch()
        header.addWidget(self._header_button)

        self._status_label = QLabel()
        self._status_label.setObjectName("PopupStatus")
        self._status_label.setWordWrap(True)

        self._rows_widget = QWidget()
        self._rows_layout = QVBoxLayout(self._rows_widget)
        self._rows_layout.setContentsMargins(0, 0, 0, 0)
        self._rows_layout.setSpacing(4)

        self._entry_widget = QWidget()
        entry_layout = QVBoxLayout(self._entry_widget)
        entry_layout.setContentsMargins(0, 0, 0, 0)
        entry_header = QHBoxLayout()
        self._entry_title = QLabel()
        back_button = QPushButton("✕")
        back_button.setFixedWidth(28)
        back_button.clicked.connect(self.backRequested)  # type: ignore[arg-type]
        entry_header.addWidget(self._entry_title)
        entry_header.addStretch()
        entry_header.addWidget(back_button)
        self._entry = QLineEdit()
        self._entry.setEchoMode(QLineEdit.EchoMode.Password)
        self._entry.setPlaceholderText("Enter WiFi password")
        self._entry.returnPressed.connect(self._emit_submitted)  # type: ignore[arg-type]
        self._submit_button = QPushButton("Connect")
        self._submit_button.clicked.connect(self._emit_submitted)  # type: ignore[arg-type]
        self._entry_message = QLabel()
        self._entry_message.setWordWrap(True)
        entry_layout.addLayout(entry_header)
        entry_layout.addWidget(self._entry)
        entry_layout.addWidget(self._submit_button)
        entry_layout.addWidget(self._entry_message)
        self._entry_widget.hide()

        layout = QVBoxLayout(self._container)
        layout.setContentsMargins(14, 12, 14, 14)
        layout.setSpacing(8)
        layout.addLayout(header)
        layout.addWidget(self._status_label)
        layout.addWidget(self._rows_widget)
        layout.addWidget(self._entry_widget)

        base_layout = QHBoxLayout(self)
        base_layout.setContentsMargins(0, 0, 0, 0)
        base_layout.addWidget(self._container)
        self.setMinimumWidth(320)
        self.setMaximumWidth(420)

        self.setStyleSheet(
            """
            QWidget#PopupCard {
                background-color: rgba(24, 24, 28, 0.92);
                color: white;
                border-radius: 12px;
                border: 1px solid rgba(255, 255, 255, 0.10);
            }
            QWidget#PopupCard QLabel {
                color: rgba(255, 255, 255, 0.85);
            }
            QWidget#PopupCard QLabel#PopupTitle {
                color: white;
                font-weight: bold;
                font-size: 14px;
            }
            QWidget#PopupCard QPushButton {
                text-align: left;
                padding: 6px 10px;
                border-radius: 8px;
                color: white;
                background-color: rgba(255, 255, 255, 0.08);
            }
            QWidget#PopupCard QPushButton:hover {
                background-color: rgba(255, 255, 255, 0.18);
            }
            """
        )

    def set_header_action(self, label: str, action: Optional[Callable[[], None]]) -> None:
        self._header_action = action
        self._header_button.setText(label)
        self._header_button.setVisible(action is not None)

    def set_status(self, text: str) -> None:
        self._status_label.setText(text)
        self._status_label.setVisible(bool(text))

    def set_rows(self, rows: List[PopupRow]) -> None:
        while self._rows_layout.count():
            item = self._rows_layout.takeAt(0)
            widget = item.widget()
            if widget is not None:
                widget.deleteLater()
        for row in rows:
            if row.on_click is None and row.on_secondary is None:
                widget: QWidget = QLabel(row.text)
            else:
                button = _RowButton(row.text)
                button.setEnabled(row.enabled)
                button.setCursor(Qt.CursorShape.PointingHandCursor)
                if row.on_click is not None:
                    button.clicked.connect(row.on_click)  # type: ignore[arg-type]
                if row.on_secondary is not None:
                    button.secondaryClicked.connect(row.on_secondary)  # type: ignore[arg-type]
                widget = button
            if row.tooltip:
                widget.setToolTip(row.tooltip)
            self._rows_layout.addWidget(widget)
        self.adjustSize()

    def show_entry(
        self,
        title: str,
        *,
        message: str,
        is_error: bool,
        submit_label: str,
        submit_enabled: bool,
    ) -> None:
        entering = self._entry_widget.isHidden()
        self._rows_widget.hide()
        self._entry_widget.show()
        self._entry_title.setText(title)
        self._entry_message.setText(message)
        self._entry_message.setVisible(bool(message))
        self._entry_message.setStyleSheet("color: #f87171;" if is_error else "")
        self._submit_button.setText(submit_label)
        self._submit_button.setEnabled(submit_enabled)
        if entering:
            self._entry.clear()
            self._entry.setFocus()

    def hide_entry(self) -> None:
        if not self._entry_widget.isHidden():
            self._entry.clear()
        self._entry_widget.hide()
        self._rows_widget.show()

    def present(self) -> None:
        self.adjustSize()
        self._position_top_right()
        self.show()
        self.activateWindow()

    def _position_top_right(self) -> None:
        screen = QApplication.primaryScreen()
        if screen is None:
            return
        geometry = screen.availableGeometry()
        x = geometry.right() - self.width() - 12
        y = geometry.top() + 12
        self.move(QPoint(x, y))

    def _on_header_clicked(self) -> None:
        if self._header_action is not None:
            self._header_action()

    def _emit_submitted(self) -> None:
        self.submitted.emit(self._entry.text())

    def keyPressEvent(self, event: QKeyEvent) -> None:  # noqa: N802
        if event.key() == Qt.Key.Key_Escape:
            self.escapePressed.emit()
            return
        super().keyPressEvent(event)


class PopupBackdrop(QWidget):
    """Full-screen, nearly transparent surface; any click dismisses popups."""

    clicked = Signal()

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setWindowFlags(Qt.WindowType.Tool | Qt.WindowType.FramelessWindowHint)
        self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground, True)
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        self.setStyleSheet("background-color: rgba(0, 0, 0, 1);")

    def present(self) -> None:
        screen = QApplication.primaryScreen()
        if screen is not None:
            self.setGeometry(screen.geometry())
        self.show()

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        super().mouseReleaseEvent(event)
        self.clicked.emit()
