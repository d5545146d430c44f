"""
Playback clock adapter

Converts the media source's elapsed time plus the user's calibration offset
into the synchronizer's time domain, and provides a manual now-playing source
for driving the engine without an OS media session.
"""

import time
from typing import Callable, Optional

from ..lyrics.models import NowPlaying


class PlaybackClock:
    """
    Monotonic clock with a signed calibration offset

    A positive offset shows lyrics earlier, a negative one later. The offset
    is applied uniformly to every timestamp comparison through
    `TimelineSynchronizer.resynchronize`.
    """

    ADJUST_STEP = 1.0

    def __init__(self, offset: float = 0.0, time_source: Callable[[], float] = time.monotonic):
        self._offset = float(offset)
        self._time_source = time_source

    def now(self) -> float:
        return self._time_source()

    @property
    def offset(self) -> float:
        return self._offset

    def set_offset(self, value: float) -> None:
        self._offset = float(value)

    def adjust(self, delta: float) -> float:
        """
        Shift the calibration offset

        Args:
            delta: Seconds to add (use +/-ADJUST_STEP for faster/slower)

        Returns:
            New offset
        """
        self._offset += delta
        return self._offset

    def position_of(self, now_playing: Optional[NowPlaying]) -> float:
        """
        Playback position reported by a now-playing snapshot

        Args:
            now_playing: Snapshot from the now-playing source

        Returns:
            Elapsed seconds, 0.0 when unknown
        """
        if now_playing is None or now_playing.elapsed_seconds is None:
            return 0.0
        return max(now_playing.elapsed_seconds, 0.0)


class ManualPlaybackSource:
    """
    Now-playing and duration source driven by the caller

    Stands in for an OS media session: the elapsed time advances with the
    clock from the given start position until paused.
    """

    def __init__(self, artist: str, title: str, album: str = "",
                 duration: Optional[float] = None, position: float = 0.0,
                 clock: Optional[PlaybackClock] = None):
        self.artist = artist
        self.title = title
        self.album = album
        self.duration = duration
        self._clock = clock or PlaybackClock()
        self._position = position
        self._started_at: Optional[float] = self._clock.now()

    @property
    def position(self) -> float:
        if self._started_at is None:
            return self._position
        return self._position + (self._clock.now() - self._started_at)

    @property
    def is_playing(self) -> bool:
        return self._started_at is not None

    def pause(self) -> None:
        self._position = self.position
        self._started_at = None

    def resume(self) -> None:
        if self._started_at is None:
            self._started_at = self._clock.now()

    def seek(self, position: float) -> None:
        self._position = max(position, 0.0)
        if self._started_at is not None:
            self._started_at = self._clock.now()

    def get_current_playback(self) -> Optional[NowPlaying]:
        return NowPlaying(
            elapsed_seconds=self.position,
            artist=self.artist,
            title=self.title,
            album=self.album,
        )

    def get_duration(self, now_playing: NowPlaying) -> Optional[float]:
        return self.duration
