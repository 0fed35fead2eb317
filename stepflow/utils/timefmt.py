from __future__ import annotations


def format_duration(ms: float) -> str:
    """Render milliseconds as ``"1m 5s"`` or ``"42s"``."""
    seconds = int(ms // 1000)
    minutes = seconds // 60
    return f"{minutes}m {seconds % 60}s" if minutes > 0 else f"{seconds}s"
