"""General utility helper functions."""

from __future__ import annotations

__all__ = ["format_duration"]

_UNITS = (("d", 86400), ("h", 3600), ("m", 60))


def format_duration(total_seconds: int | float | None) -> str:
    """Return a compact duration such as ``1h 0m 5s`` for session uptime.

    Leading zero units are dropped; once a unit is shown every smaller one
    follows. ``None`` renders as ``unknown``.
    """
    if total_seconds is None:
        return "unknown"
    remaining = max(0, int(total_seconds))
    parts: list[str] = []
    for suffix, size in _UNITS:
        count, remaining = divmod(remaining, size)
        if count or parts:
            parts.append(f"{count}{suffix}")
    parts.append(f"{remaining}s")
    return " ".join(parts)
