"""UI package."""

from .tray import TrayController, make_tray_icon, tooltip_for

__all__ = ["TrayController", "make_tray_icon", "tooltip_for"]
