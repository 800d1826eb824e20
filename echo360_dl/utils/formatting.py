"""
Helper functions for formatting numbers into human-readable strings.
"""

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_size(bytes_size: float) -> str:
    """Formats bytes into a size string such as '145.3 MB'."""
    if bytes_size <= 0:
        return "0 B"
    unit = 0
    while bytes_size >= 1024 and unit < len(_SIZE_UNITS) - 1:
        bytes_size /= 1024
        unit += 1
    return f"{bytes_size:.1f} {_SIZE_UNITS[unit]}"


def format_duration(seconds: float) -> str:
    """Formats seconds as e.g. '1h 5m 12s'; zero components are left out."""
    hours, remainder = divmod(int(seconds), 3600)
    minutes, secs = divmod(remainder, 60)
    parts = [f"{v}{u}" for v, u in ((hours, "h"), (minutes, "m")) if v]
    if secs or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)
