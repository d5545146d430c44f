"""
Lyrics session

Composes the engine for one running application: it reads the now-playing
source, builds track requests, runs the acquisition pipeline and exposes the
user actions (disable/enable lyrics for a track, calibration).

The session owns at most one in-flight resolution. Starting a new one cancels
the previous task, so a slow download for an old track can never replace the
document of the track that is playing now.
"""

import asyncio
from concurrent.futures import Executor
from pathlib import Path
from typing import Callable, Optional, Tuple

from .config.settings import get_settings
from .exceptions import SourceUnavailableError
from .lyrics.lrclib import get_lrclib_client
from .lyrics.models import LyricsResolution, LyricsSource, NowPlaying, TrackRequest
from .lyrics.pipeline import AcquisitionPipeline
from .lyrics.store import LyricsFileStore, OverrideStore
from .sync.clock import PlaybackClock
from .sync.scheduler import EventLoopScheduler
from .sync.synchronizer import TimelineSynchronizer
from .utils.logger import get_logger


class LyricsSession:
    """One running lyric display: current track, resolution task and user actions"""

    def __init__(self, now_playing_source, duration_source, pipeline, synchronizer,
                 override_store, lyrics_store, clock, executor: Optional[Executor] = None):
        """
        Initialize session

        Args:
            now_playing_source: Object with get_current_playback() -> Optional[NowPlaying]
            duration_source: Object with get_duration(now_playing) -> Optional[float]
            pipeline: AcquisitionPipeline
            synchronizer: TimelineSynchronizer fed by the pipeline
            override_store: Disabled-track markers
            lyrics_store: Local lyric files
            clock: PlaybackClock holding the calibration offset
            executor: Executor for source reads, None for the loop default
        """
        self.logger = get_logger(__name__)
        self.now_playing_source = now_playing_source
        self.duration_source = duration_source
        self.pipeline = pipeline
        self.synchronizer = synchronizer
        self.override_store = override_store
        self.lyrics_store = lyrics_store
        self.clock = clock
        self.executor = executor

        self.current_request: Optional[TrackRequest] = None
        self.last_resolution: Optional[LyricsResolution] = None
        self._resolve_task: Optional[asyncio.Task] = None

    async def _run_blocking(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, func, *args)

    async def _read_source(self) -> Tuple[NowPlaying, float]:
        """
        Read now-playing information and the track duration

        Raises:
            SourceUnavailableError: If either is missing
        """
        now_playing = await self._run_blocking(self.now_playing_source.get_current_playback)
        if now_playing is None or not now_playing.is_available:
            raise SourceUnavailableError("Now-playing information is unavailable")

        duration = await self._run_blocking(self.duration_source.get_duration, now_playing)
        if duration is None:
            raise SourceUnavailableError(
                "Track duration is unavailable",
                details={'artist': now_playing.artist, 'title': now_playing.title}
            )
        return now_playing, duration

    def _cancel_resolution(self) -> None:
        if self._resolve_task is not None and not self._resolve_task.done():
            self.logger.debug("Cancelling in-flight lyrics resolution")
            self._resolve_task.cancel()
        self._resolve_task = None

    async def start_lyrics(self, cue_start_offset: float = 0.0) -> Optional[LyricsResolution]:
        """
        Resolve and display lyrics for whatever is playing now

        Args:
            cue_start_offset: Start of the current song inside a CUE track

        Returns:
            The resolution, or None when the source is unavailable or this
            resolution was superseded by a newer one
        """
        try:
            now_playing, duration = await self._read_source()
        except SourceUnavailableError as e:
            self.logger.info(f"Not starting lyrics: {e}")
            return None

        self._cancel_resolution()
        self.synchronizer.mark_disabled(False)

        request = TrackRequest(
            artist=now_playing.artist,
            title=now_playing.title,
            album=now_playing.album or "",
            duration_seconds=duration,
            playback_position=self.clock.position_of(now_playing),
            cue_start_offset=cue_start_offset,
        )
        self.current_request = request

        task = asyncio.ensure_future(self.pipeline.resolve(request))
        self._resolve_task = task
        try:
            resolution = await task
        except asyncio.CancelledError:
            if self._resolve_task is task:
                raise
            self.logger.debug(f"Resolution for {request.label} was superseded")
            return None

        if self._resolve_task is task:
            self._resolve_task = None
        self.last_resolution = resolution
        if resolution.source is LyricsSource.DISABLED:
            self.synchronizer.mark_disabled(True)
        return resolution

    def disable_current_track(self) -> bool:
        """
        Turn lyrics off for the current track and show the fallback line

        Returns:
            False if no track has been started
        """
        request = self.current_request
        if request is None:
            return False

        self._cancel_resolution()
        self.override_store.set_disabled(request.artist, request.title, True)
        self.synchronizer.mark_disabled(True)
        self.last_resolution = self.pipeline.show_fallback(request, LyricsSource.DISABLED)
        return True

    async def enable_current_track(self) -> Optional[LyricsResolution]:
        """
        Turn lyrics back on for the current track

        Lyrics are reloaded only if the track actually had a marker.

        Returns:
            The new resolution, None if nothing was reloaded
        """
        request = self.current_request
        if request is None:
            return None

        resolution = None
        if self.override_store.set_disabled(request.artist, request.title, False):
            resolution = await self.start_lyrics(request.cue_start_offset)
        self.synchronizer.mark_disabled(False)
        return resolution

    async def recalibrate(self) -> bool:
        """
        Re-align the current document with the player's position

        If a different track is playing, lyrics for it are resolved instead.

        Returns:
            True if the timeline was realigned or reloaded
        """
        try:
            now_playing, _ = await self._read_source()
        except SourceUnavailableError as e:
            self.logger.info(f"Cannot recalibrate: {e}")
            return False

        request = self.current_request
        if request is None or (now_playing.artist, now_playing.title) != (request.artist, request.title):
            return await self.start_lyrics() is not None

        if self.synchronizer.state.disabled_for_track:
            return False
        if self.last_resolution is None or not self.last_resolution.success:
            return False

        position = self.clock.position_of(now_playing)
        self.synchronizer.resynchronize(self.synchronizer.document, position, self.clock.offset)
        self.logger.debug(f"Recalibrated at {position:.2f}s with offset {self.clock.offset:+.2f}s")
        return True

    async def faster(self) -> float:
        """Show lyrics one second earlier"""
        offset = self.clock.adjust(self.clock.ADJUST_STEP)
        await self.recalibrate()
        return offset

    async def slower(self) -> float:
        """Show lyrics one second later"""
        offset = self.clock.adjust(-self.clock.ADJUST_STEP)
        await self.recalibrate()
        return offset

    async def set_offset(self, value: float) -> float:
        self.clock.set_offset(value)
        await self.recalibrate()
        return self.clock.offset

    def lyrics_file_path(self) -> Optional[Path]:
        """
        Path of the current track's lyric file

        Returns:
            Path if the file exists, otherwise None
        """
        request = self.current_request
        if request is None:
            return None
        path = self.lyrics_store.path_for(request.artist, request.title)
        return path if path.is_file() else None

    def close(self) -> None:
        self._cancel_resolution()
        self.synchronizer.shutdown()
        self.pipeline.close()


def create_session(source, status_sink: Optional[Callable[[str], None]] = None,
                   clock: Optional[PlaybackClock] = None, provider=None) -> LyricsSession:
    """
    Build a session wired from the application settings

    Args:
        source: Object acting as both now-playing and duration source
        status_sink: Receives displayed lines and resolution notifications
        clock: Clock to use, defaults to a monotonic clock seeded with the
               configured calibration offset
        provider: Search/download provider, defaults to the LRCLIB client

    Returns:
        Ready-to-use LyricsSession
    """
    settings = get_settings()
    clock = clock or PlaybackClock(offset=settings.lyrics.calibration_offset)
    provider = provider or get_lrclib_client()
    lyrics_directory = settings.get_lyrics_directory()

    lyrics_store = LyricsFileStore(lyrics_directory)
    override_store = OverrideStore(lyrics_directory)
    synchronizer = TimelineSynchronizer(
        clock, EventLoopScheduler(), status_sink, tick_interval=settings.sync.tick_interval
    )
    pipeline = AcquisitionPipeline(
        provider, provider, lyrics_store, override_store, synchronizer, status_sink, clock
    )
    return LyricsSession(source, source, pipeline, synchronizer, override_store, lyrics_store, clock)
