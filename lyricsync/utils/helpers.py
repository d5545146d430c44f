"""
Utility functions and helpers for LyricSync
Common functions for lyric file naming, search keywords and duration handling
"""

import re
import unicodedata
from pathlib import Path
from typing import Optional, Union


# Characters not allowed in Windows filenames plus control characters
INVALID_FILENAME_CHARS = r'[<>:"/\\|?*\x00-\x1f\x7f-\x9f]'

RESERVED_NAMES = {
    'CON', 'PRN', 'AUX', 'NUL',
    'COM1', 'COM2', 'COM3', 'COM4', 'COM5', 'COM6', 'COM7', 'COM8', 'COM9',
    'LPT1', 'LPT2', 'LPT3', 'LPT4', 'LPT5', 'LPT6', 'LPT7', 'LPT8', 'LPT9'
}


def sanitize_filename(filename: str, max_length: int = 200) -> str:
    """
    Sanitize a lyric file stem for cross-platform compatibility

    Unlike a generic filename cleaner this keeps non-ASCII letters intact,
    since artist and title names are frequently written in other scripts
    and two different songs must not collapse to the same file.

    Args:
        filename: Original name (typically "artist - title")
        max_length: Maximum length of the result

    Returns:
        Sanitized name, "unknown" if nothing usable remains
    """
    if not filename:
        return "unknown"

    filename = unicodedata.normalize('NFC', filename.strip())
    filename = re.sub(INVALID_FILENAME_CHARS, '', filename)
    filename = re.sub(r'\s+', ' ', filename)
    filename = filename.strip(' .')

    if filename.split('.')[0].upper() in RESERVED_NAMES:
        filename = f"_{filename}"

    if len(filename) > max_length:
        filename = filename[:max_length].rstrip(' .')

    if not filename:
        return "unknown"

    return filename


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure directory exists, create if necessary

    Args:
        path: Directory path (a leading "~" is expanded)

    Returns:
        Path object
    """
    path_obj = Path(path).expanduser()
    path_obj.mkdir(parents=True, exist_ok=True)
    return path_obj


def format_duration(seconds: Union[int, float]) -> str:
    """
    Format duration in seconds to human-readable string

    Args:
        seconds: Duration in seconds

    Returns:
        "m:ss" or "h:mm:ss"
    """
    if seconds < 0:
        return "0:00"

    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def parse_duration_string(duration_str: str) -> Optional[float]:
    """
    Parse a duration or position string to seconds

    Accepts plain seconds ("95", "95.5"), "m:ss" and "h:mm:ss", with an
    optional fractional part on the last field.

    Args:
        duration_str: Duration string

    Returns:
        Duration in seconds or None if invalid
    """
    if duration_str is None:
        return None

    parts = duration_str.strip().split(':')
    if not parts or len(parts) > 3:
        return None

    try:
        *whole, last = parts
        seconds = float(last)
        values = [int(part) for part in whole]
    except ValueError:
        return None

    if seconds < 0 or any(value < 0 for value in values):
        return None
    if whole and seconds >= 60:
        return None

    total = seconds
    for multiplier, value in zip((60, 3600), reversed(values)):
        total += value * multiplier
    return total


def create_search_keyword(artist: str, title: str) -> str:
    """
    Build the provider search keyword for a track

    The same text doubles as the fallback display line and as the local
    file stem, so it must stay stable for a given (artist, title).

    Args:
        artist: Artist name
        title: Track title

    Returns:
        "<artist> - <title>"
    """
    return f"{artist} - {title}"


def truncate_string(text: str, max_length: int, suffix: str = "...") -> str:
    """
    Truncate string to maximum length with suffix

    Args:
        text: Original text
        max_length: Maximum length including suffix
        suffix: Suffix to add when truncating

    Returns:
        Truncated string
    """
    if len(text) <= max_length:
        return text

    truncate_length = max_length - len(suffix)
    if truncate_length <= 0:
        return suffix[:max_length]

    return text[:truncate_length] + suffix
