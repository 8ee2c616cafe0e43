"""Human-readable rendering of byte counts."""

from typing import Final

_UNITS: Final = ('B', 'KB', 'MB', 'GB', 'TB', 'PB')
_STEP: Final = 1024


def human_file_size(size_bytes: int) -> str:
    """Render a byte count for log and error messages.

    Example: 1536 -> '1.50 KB'

    Args:
        size_bytes: Size in bytes.

    Returns:
        Size with a binary unit suffix.
    """
    if size_bytes < 0:
        return 'unlimited'

    size = float(size_bytes)
    for unit in _UNITS[:-1]:
        if size < _STEP:
            return f'{size:.0f} {unit}' if unit == 'B' else f'{size:.2f} {unit}'
        size /= _STEP
    return f'{size:.2f} {_UNITS[-1]}'
