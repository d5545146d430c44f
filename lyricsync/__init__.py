"""
LyricSync: time-tagged lyrics that follow a live playback clock

LyricSync keeps a line-timed lyric document in step with whatever is playing
right now. It reads an external "now playing" position, applies a manual
calibration offset, and advances a cursor through the lyric timeline so the
current line can be mirrored to a status indicator.

## Core Architecture

**Lyrics (`lyricsync/lyrics/`)**
- LRC parser producing an ordered, immutable timeline of timed lines
- Translation line detection for bilingual lyric files
- Acquisition pipeline: local cache, online search, duration filter,
  per-candidate download and single-line fallback
- LRCLIB client and local lyric/override file stores

**Synchronization (`lyricsync/sync/`)**
- Timeline synchronizer with polling ticks plus precisely scheduled
  advancements between line boundaries
- Cancellable scheduler on top of the asyncio event loop
- Playback clock adapter with calibration offset

**Configuration (`lyricsync/config/`)**
- YAML configuration with environment variable overrides

**Utilities (`lyricsync/utils/`)**
- Colored console logging with file rotation
- Filename and duration helpers

## Quick Start
```bash
pip install -e .

# Follow a local LRC file from 42 seconds in
lyricsync play "Artist - Title.lrc" --position 42

# Look lyrics up online and follow them
lyricsync fetch "Artist" "Title" --duration 215 --position 10
```
"""

# Version information for the LyricSync package
__version__ = "0.4.0"

# Package author information
__author__ = "LyricSync Team"

# Concise description used by setup.py and the CLI
__description__ = "Follow time-tagged song lyrics along a live playback clock"

__all__ = [
    "__version__",
    "__author__",
    "__description__",
]
