"""
Data models for lyric timelines and lyric acquisition

This module defines the data structures shared by the parser, the timeline
synchronizer and the acquisition pipeline.

Model Overview:

1. **Timeline Layer**: what gets displayed
   - TimedLine: one displayable line with its timestamp and active flag
   - LyricDocument: ordered, immutable sequence of TimedLine
   - SyncPhase / SynchronizerState: cursor state owned by one synchronizer

2. **Acquisition Layer**: what gets looked up
   - NowPlaying: typed view of the media source's now-playing payload
   - TrackRequest: everything the pipeline needs to resolve one track
   - Candidate: one online search result
   - LyricsSource / LyricsResolution: outcome of one pipeline run

Factory methods (`from_payload`, `from_lrclib_data`, `fallback`) build models
from external data with safe defaults, so that malformed input never leaks
past this layer.
"""

from bisect import bisect_left
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Sequence, Tuple

from ..utils.helpers import create_search_keyword


@dataclass
class TimedLine:
    """
    A single displayable lyric line

    Attributes:
        sequence_index: Position in the ordered document (0-based, stable)
        text: Line text, never empty
        timestamp: Seconds from track start
        is_translation: True for a secondary line sharing its primary's time
        is_active: Display flag, at most one line per document is active
    """
    sequence_index: int
    text: str
    timestamp: float
    is_translation: bool = False
    is_active: bool = False


class LyricDocument:
    """
    Ordered, immutable sequence of timed lines

    The line tuple never changes after construction; only the per-line
    `is_active` flags are mutated, and only by the owning synchronizer.
    Documents are replaced wholesale on track change, never merged.
    """

    def __init__(self, lines: Sequence[TimedLine] = ()):
        self._lines: Tuple[TimedLine, ...] = tuple(lines)
        self._timestamps: Tuple[float, ...] = tuple(line.timestamp for line in self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __getitem__(self, index: int) -> TimedLine:
        return self._lines[index]

    def __iter__(self) -> Iterator[TimedLine]:
        return iter(self._lines)

    def __repr__(self) -> str:
        return f"LyricDocument({len(self._lines)} lines)"

    @property
    def lines(self) -> Tuple[TimedLine, ...]:
        return self._lines

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def index_at_or_after(self, position: float) -> int:
        """
        Find the first line whose timestamp is at or after a position

        Args:
            position: Playback position in seconds

        Returns:
            Smallest index with timestamp >= position, or len(document)
        """
        return bisect_left(self._timestamps, position)

    @property
    def active_index(self) -> Optional[int]:
        """Index of the active line, None when no line is active"""
        for line in self._lines:
            if line.is_active:
                return line.sequence_index
        return None

    def clear_active(self) -> None:
        for line in self._lines:
            line.is_active = False

    def activate(self, index: int) -> bool:
        """
        Make one line the only active line

        Out-of-range indexes deactivate everything instead of raising.

        Args:
            index: Line index to activate

        Returns:
            True if a line was activated
        """
        self.clear_active()
        if 0 <= index < len(self._lines):
            self._lines[index].is_active = True
            return True
        return False

    @classmethod
    def fallback(cls, artist: str, title: str) -> 'LyricDocument':
        """
        Build the single-line document shown when no lyrics are available

        Args:
            artist: Artist name
            title: Track title

        Returns:
            Document with one "<artist> - <title>" line at timestamp 0
        """
        return cls([TimedLine(sequence_index=0, text=create_search_keyword(artist, title), timestamp=0.0)])


class SyncPhase(Enum):
    """
    Synchronizer state machine

    State Transitions:
    IDLE -> RUNNING (resynchronize)
    RUNNING -> FINISHED (cursor passed the last line)
    RUNNING/FINISHED -> IDLE (stop)
    any -> RUNNING (resynchronize)
    """
    IDLE = "idle"
    RUNNING = "running"
    FINISHED = "finished"


@dataclass
class SynchronizerState:
    """
    Cursor state owned by exactly one TimelineSynchronizer

    `current_index` is -1 before any document is loaded. It may equal
    len(document), which means the timeline is finished. `reference_start`
    is the clock reading at which the document's time 0 played, so
    `now - reference_start` is the current position in document time.
    """
    document: LyricDocument = field(default_factory=LyricDocument)
    current_index: int = -1
    reference_start: float = 0.0
    disabled_for_track: bool = False
    generation: int = 0
    phase: SyncPhase = SyncPhase.IDLE
    playback_progress: float = 0.0


def _as_seconds(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _as_text(value: Any) -> Optional[str]:
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


@dataclass
class NowPlaying:
    """
    Typed snapshot of the media source's now-playing information

    Any field may be missing; a snapshot is only usable for lyric
    resolution when `is_available` is true.
    """
    elapsed_seconds: Optional[float] = None
    artist: Optional[str] = None
    title: Optional[str] = None
    album: Optional[str] = None

    @property
    def is_available(self) -> bool:
        return self.elapsed_seconds is not None and bool(self.artist) and bool(self.title)

    @classmethod
    def from_payload(cls, payload: Optional[Dict[str, Any]]) -> 'NowPlaying':
        """
        Factory method to construct NowPlaying from a media-remote payload

        Recognized keys are ElapsedTime, Artist, Title and Album. Values of
        the wrong type, and blank strings, are treated as missing.

        Args:
            payload: Raw now-playing dictionary, may be None

        Returns:
            NowPlaying instance, possibly unavailable
        """
        payload = payload or {}
        return cls(
            elapsed_seconds=_as_seconds(payload.get('ElapsedTime')),
            artist=_as_text(payload.get('Artist')),
            title=_as_text(payload.get('Title')),
            album=_as_text(payload.get('Album')),
        )


@dataclass
class TrackRequest:
    """
    Input to one acquisition pipeline run

    Attributes:
        artist: Artist name
        title: Track title
        album: Album name, may be empty
        duration_seconds: Length of the playing track
        playback_position: Position at request time, in seconds
        cue_start_offset: Start of the current song inside a long
                          compilation track, in seconds
    """
    artist: str
    title: str
    album: str = ""
    duration_seconds: float = 0.0
    playback_position: float = 0.0
    cue_start_offset: float = 0.0

    @property
    def keyword(self) -> str:
        return create_search_keyword(self.artist, self.title)

    @property
    def label(self) -> str:
        """Text shown when the track has no lyrics"""
        return create_search_keyword(self.artist, self.title)

    def is_cue_track(self, threshold: float = 600.0) -> bool:
        return self.duration_seconds >= threshold


@dataclass
class Candidate:
    """
    One search result from an online lyrics provider

    Transient: produced per acquisition attempt and never persisted.
    """
    id: int
    title: str
    artists: Tuple[str, ...] = ()
    album: str = ""
    duration_millis: int = 0

    @property
    def duration_seconds(self) -> float:
        return self.duration_millis / 1000.0

    @property
    def primary_artist(self) -> str:
        return self.artists[0] if self.artists else ""

    @classmethod
    def from_lrclib_data(cls, data: Dict[str, Any]) -> 'Candidate':
        """
        Factory method to construct Candidate from an LRCLIB search record

        LRCLIB reports a single artist string and the duration in seconds;
        the artist string is split on commas and the duration converted to
        milliseconds.

        Args:
            data: One element of the /api/search response array

        Returns:
            Candidate instance
        """
        artist_field = data.get('artistName') or ''
        artists = tuple(name.strip() for name in artist_field.split(',') if name.strip())
        duration = _as_seconds(data.get('duration')) or 0.0
        return cls(
            id=data['id'],
            title=data.get('trackName') or '',
            artists=artists,
            album=data.get('albumName') or '',
            duration_millis=int(round(duration * 1000)),
        )


class LyricsSource(Enum):
    """
    Where a resolved document came from

    Values:
        LOCAL: Cached lyric file
        ONLINE: Downloaded from the provider
        FALLBACK: Nothing found, "<artist> - <title>" shown
        DISABLED: Lyrics disabled for this track, fallback shown
    """
    LOCAL = "local"
    ONLINE = "online"
    FALLBACK = "fallback"
    DISABLED = "disabled"


@dataclass
class LyricsResolution:
    """
    Outcome of one acquisition pipeline run

    Attributes:
        document: The document handed to the synchronizer
        source: Where the document came from
        candidate: Candidate whose lyrics were used (ONLINE only)
        attempts: Number of download attempts made
        search_calls: Number of search requests made
        error_message: Last failure description, if any
    """
    document: LyricDocument
    source: LyricsSource
    candidate: Optional[Candidate] = None
    attempts: int = 0
    search_calls: int = 0
    error_message: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.source in (LyricsSource.LOCAL, LyricsSource.ONLINE)
