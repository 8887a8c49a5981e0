"""Human-readable formatting helpers."""

_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_file_size(size_bytes: int) -> str:
    """Format a byte count, e.g. 1536 -> '1.5 KB'."""
    size = float(size_bytes or 0)
    unit = 0
    while size >= 1024 and unit < len(_UNITS) - 1:
        size /= 1024
        unit += 1
    return f"{size:.1f} {_UNITS[unit]}"
