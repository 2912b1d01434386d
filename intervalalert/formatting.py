"""Display formatting for countdowns and durations."""

from __future__ import annotations

import math


def format_time(seconds: float) -> str:
    """Countdown label: ``M:SS`` or ``H:MM:SS``.

    Rounds *up* so the label only shows ``0:00`` at the true zero.
    """
    total = max(int(math.ceil(seconds)), 0)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_duration(seconds: float) -> str:
    """Short human duration used in notification bodies: ``5 min`` / ``45s``."""
    mins = int(seconds) // 60
    if mins > 0:
        return f"{mins} min"
    return f"{int(seconds)}s"
