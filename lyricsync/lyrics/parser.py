"""
LRC lyric text parser

Turns line-timed lyric text into an ordered LyricDocument.

Accepted grammar, one lyric line per input line:

    [mm:ss]text
    [mm:ss.x]text  [mm:ss.xx]text  [mm:ss.xxx]text
    [00:12.00][01:30.50]shared text      (one TimedLine per timestamp)

The fraction may also follow a colon ("[01:02:50]"). Fractions are decimal
fractions of a second. Input lines without a leading timestamp, ID tags such
as "[ar:Artist]" included, are ignored, as are timed lines with empty text.

A line that lands within the translation tolerance of the preceding primary
line is treated as that line's translation.

Parsing never raises: malformed input lines are skipped and unusable input
produces an empty document.
"""

import re
from typing import List, Optional, Tuple

from .models import LyricDocument, TimedLine
from ..utils.logger import get_logger


logger = get_logger(__name__)

DEFAULT_TRANSLATION_TOLERANCE = 0.05

TIMESTAMP_PATTERN = re.compile(r'\[(\d+):(\d{1,2})(?:[.:](\d{1,3}))?\]')


def _parse_timestamp(match: 're.Match') -> Optional[float]:
    minutes, seconds, fraction = match.groups()
    if int(seconds) >= 60:
        return None
    value = int(minutes) * 60 + int(seconds)
    if fraction:
        value += int(fraction) / (10 ** len(fraction))
    return float(value)


def _split_line(raw_line: str) -> Tuple[List[Optional[float]], str]:
    """Consume every leading timestamp of one line and return them with the remaining text"""
    timestamps: List[Optional[float]] = []
    position = 0
    while True:
        match = TIMESTAMP_PATTERN.match(raw_line, position)
        if not match:
            break
        timestamps.append(_parse_timestamp(match))
        position = match.end()
    return timestamps, raw_line[position:].strip()


def parse_lrc(raw_text: Optional[str],
              translation_tolerance: float = DEFAULT_TRANSLATION_TOLERANCE) -> LyricDocument:
    """
    Parse LRC text into a LyricDocument

    Args:
        raw_text: Line-timed lyric text, may be None or empty
        translation_tolerance: Maximum distance in seconds between a primary
                               line and a line flagged as its translation

    Returns:
        Document ordered by timestamp (ties keep input order), empty if
        nothing could be parsed
    """
    if not raw_text:
        return LyricDocument()

    entries: List[Tuple[float, str]] = []
    skipped = 0

    for raw_line in raw_text.splitlines():
        raw_line = raw_line.strip()
        if not raw_line:
            continue

        timestamps, text = _split_line(raw_line)
        if not timestamps:
            # ID tags and untimed text
            continue

        if not text or any(ts is None for ts in timestamps):
            skipped += 1
            continue

        for timestamp in timestamps:
            entries.append((timestamp, text))

    # sorted() is stable, so equal timestamps keep their input order
    entries.sort(key=lambda entry: entry[0])

    lines: List[TimedLine] = []
    last_primary: Optional[float] = None
    for index, (timestamp, text) in enumerate(entries):
        is_translation = (
            last_primary is not None
            and timestamp - last_primary <= translation_tolerance
        )
        if not is_translation:
            last_primary = timestamp
        lines.append(TimedLine(
            sequence_index=index,
            text=text,
            timestamp=timestamp,
            is_translation=is_translation,
        ))

    if skipped:
        logger.debug(f"Skipped {skipped} malformed or empty LRC lines")

    return LyricDocument(lines)


def has_timestamps(text: Optional[str]) -> bool:
    """
    Check whether text contains at least one timed LRC line

    Args:
        text: Candidate lyric text

    Returns:
        True if any line starts with a valid timestamp
    """
    if not text:
        return False
    return any(
        TIMESTAMP_PATTERN.match(line.strip()) for line in text.splitlines()
    )


def format_lrc_timestamp(seconds: float) -> str:
    """
    Format seconds as an LRC timestamp body

    Args:
        seconds: Position in seconds (negative values clamp to 0)

    Returns:
        "mm:ss.xx"
    """
    centis = int(round(max(seconds, 0.0) * 100))
    minutes, centis = divmod(centis, 6000)
    secs, centis = divmod(centis, 100)
    return f"{minutes:02d}:{secs:02d}.{centis:02d}"
