"""Menu-bar / system-tray surface.

The tray icon doubles as the live-status surface (icon colour and
tooltip) and as the notification channel (balloon messages).  Its menu
drives the engine only through :class:`RemoteActions`.
"""

from __future__ import annotations

from PyQt6.QtCore import QObject, Qt, pyqtSignal
from PyQt6.QtGui import QColor, QIcon, QImage, QPainter, QPen, QPixmap
from PyQt6.QtWidgets import QMenu, QSystemTrayIcon

from ..live_status import LiveStatus
from ..notifications import ScheduledAlert
from ..timer.engine import TimerState
from ..timer.models import AlertLevel


# ── tray‑icon image generation ────────────────────────────────────────────


def make_tray_icon(level: AlertLevel | None, *, paused: bool = False) -> QIcon:
    """32×32 icon tinted with the alert level's glow colour.

    - idle (``level`` is None): thin grey circle outline
    - running:                  filled circle in the level colour
    - paused:                   two vertical bars in the level colour
    """
    size = 64  # draw at 2× for Retina
    img = QImage(size, size, QImage.Format.Format_ARGB32_Premultiplied)
    img.fill(Qt.GlobalColor.transparent)
    p = QPainter(img)
    p.setRenderHint(QPainter.RenderHint.Antialiasing)

    cx, cy, r = size // 2, size // 2, size // 2 - 4

    if level is None:
        p.setPen(QPen(QColor(0, 0, 0, 220), 4))
        p.setBrush(Qt.BrushStyle.NoBrush)
        p.drawEllipse(cx - r, cy - r, r * 2, r * 2)
    else:
        colour = QColor(level.glow_color)
        p.setPen(Qt.PenStyle.NoPen)
        p.setBrush(colour)
        if paused:
            bar_w, bar_h = 8, 28
            gap = 6
            y = cy - bar_h // 2
            p.drawRoundedRect(cx - gap - bar_w, y, bar_w, bar_h, 3, 3)
            p.drawRoundedRect(cx + gap, y, bar_w, bar_h, 3, 3)
        else:
            p.drawEllipse(cx - r, cy - r, r * 2, r * 2)

    p.end()
    img.setDevicePixelRatio(2.0)
    return QIcon(QPixmap.fromImage(img))


def tooltip_for(status: LiveStatus | None) -> str:
    if status is None:
        return "IntervalAlert — Ready"
    if status.is_complete:
        return "IntervalAlert — Complete"
    if status.is_paused:
        return f"IntervalAlert — Paused at {status.remaining_label}"
    return (
        f"IntervalAlert — {status.remaining_label} left "
        f"({status.alert_level.label})"
    )


class TrayController(QObject):
    """Owns the ``QSystemTrayIcon`` and its context menu."""

    quit_requested = pyqtSignal()

    def __init__(self, actions, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._actions = actions
        self._status: LiveStatus | None = None

        self._tray_icon = QSystemTrayIcon(self)
        self._tray_icon.setIcon(make_tray_icon(None))
        self._tray_icon.setToolTip(tooltip_for(None))
        self._build_menu()

    # ── public API ────────────────────────────────────────────────────

    @property
    def tooltip(self) -> str:
        return self._tray_icon.toolTip()

    def show(self) -> None:
        self._tray_icon.show()

    def show_status(self, status: LiveStatus) -> None:
        """Live-status sink."""
        self._status = status
        self._tray_icon.setToolTip(tooltip_for(status))
        self._tray_icon.setIcon(
            make_tray_icon(status.alert_level, paused=status.is_paused)
        )

    def show_notification(self, alert: ScheduledAlert) -> None:
        """Notification sink."""
        self._tray_icon.showMessage(alert.title, alert.body)

    def on_state_changed(self, state: TimerState) -> None:
        """Keep menu labels in step with the engine."""
        running = state in (TimerState.RUNNING, TimerState.PAUSED)
        self._toggle_action.setEnabled(running)
        self._toggle_action.setText("Resume" if state == TimerState.PAUSED else "Pause")
        self._stop_action.setEnabled(state != TimerState.IDLE)
        self._stop_action.setText("Dismiss" if state == TimerState.COMPLETED else "Cancel")
        if state == TimerState.IDLE:
            self._status = None
            self._tray_icon.setToolTip(tooltip_for(None))
            self._tray_icon.setIcon(make_tray_icon(None))

    # ── internal ──────────────────────────────────────────────────────

    def _build_menu(self) -> None:
        menu = QMenu()

        self._toggle_action = menu.addAction("Pause")
        self._toggle_action.triggered.connect(self._actions.toggle_pause)
        self._toggle_action.setEnabled(False)

        self._stop_action = menu.addAction("Cancel")
        self._stop_action.triggered.connect(self._on_stop)
        self._stop_action.setEnabled(False)

        menu.addSeparator()
        quit_action = menu.addAction("Quit IntervalAlert")
        quit_action.triggered.connect(self.quit_requested)

        self._menu = menu
        self._tray_icon.setContextMenu(menu)

    def _on_stop(self) -> None:
        if self._stop_action.text() == "Dismiss":
            self._actions.dismiss()
        else:
            self._actions.cancel()
