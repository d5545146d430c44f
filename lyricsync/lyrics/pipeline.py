"""
Lyrics acquisition pipeline

Resolves a LyricDocument for one track and hands it to the synchronizer,
following a fixed precedence:

1. Track disabled by the user      -> fallback document, no network
2. Cached .lrc file parses         -> local document
3. Provider search (retried once)  -> duration-filtered candidates
4. Candidates downloaded in order  -> first one that parses wins
5. Anything else                   -> fallback document

Every failure is absorbed here. The synchronizer receives exactly one
document per resolution (through `resynchronize` for real lyrics or `present`
for the fallback) and the status sink receives exactly one notification
carrying the "<artist> - <title>" label.

Blocking provider and store calls run in a thread pool; the coroutine resumes
on the event loop, which is where the synchronizer is touched.
"""

import asyncio
import functools
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Callable, List, Optional, Tuple

from .models import Candidate, LyricDocument, LyricsResolution, LyricsSource, TrackRequest
from .parser import parse_lrc
from ..config.settings import get_settings
from ..exceptions import (
    CandidatesExhaustedError,
    LyricSyncError,
    ParseEmptyError,
    SearchEmptyError,
    SearchFailedError,
)
from ..utils.logger import create_operation_logger, get_logger


def filter_candidates(candidates: List[Candidate], duration_seconds: float,
                      tolerance: float = 3.0, cue_threshold: float = 600.0) -> List[Candidate]:
    """
    Keep the candidates whose duration matches the playing track

    Tracks at least `cue_threshold` long are compilations indexed by a CUE
    sheet; their duration says nothing about the song, so nothing is removed.

    Args:
        candidates: Search results in provider order
        duration_seconds: Duration of the playing track
        tolerance: Allowed difference in seconds (inclusive)
        cue_threshold: Duration from which filtering is skipped

    Returns:
        Matching candidates in their original order
    """
    if duration_seconds >= cue_threshold:
        return list(candidates)
    return [
        candidate for candidate in candidates
        if abs(candidate.duration_seconds - duration_seconds) <= tolerance
    ]


class AcquisitionPipeline:
    """Local-then-online lyric resolution with retry and fallback"""

    def __init__(self, search_provider, download_provider, lyrics_store, override_store,
                 synchronizer, status_sink: Optional[Callable[[str], None]], clock,
                 duration_tolerance: Optional[float] = None,
                 cue_track_threshold: Optional[float] = None,
                 search_retries: Optional[int] = None,
                 cache_downloads: Optional[bool] = None,
                 apply_cue_delta: Optional[bool] = None,
                 translation_tolerance: Optional[float] = None,
                 executor: Optional[Executor] = None):
        """
        Initialize acquisition pipeline

        Option arguments left as None are read from the lyrics settings.

        Args:
            search_provider: Object with search(keyword) -> List[Candidate]
            download_provider: Object with download(id, artist, title, album)
            lyrics_store: Local .lrc store (read / write)
            override_store: Disabled-track markers (is_disabled)
            synchronizer: TimelineSynchronizer receiving the document
            status_sink: Receives one notification per resolution
            clock: PlaybackClock providing now() and the calibration offset
            duration_tolerance: Candidate duration tolerance in seconds
            cue_track_threshold: Duration from which a track counts as CUE
            search_retries: Extra search attempts after a failed one
            cache_downloads: Write downloaded lyrics to the local store
            apply_cue_delta: Subtract the CUE start offset from the position
            translation_tolerance: Passed to the parser
            executor: Executor for blocking calls
        """
        self.settings = get_settings()
        self.logger = get_logger(__name__)

        self.search_provider = search_provider
        self.download_provider = download_provider
        self.lyrics_store = lyrics_store
        self.override_store = override_store
        self.synchronizer = synchronizer
        self.status_sink = status_sink
        self.clock = clock

        lyrics = self.settings.lyrics
        self.duration_tolerance = lyrics.duration_tolerance if duration_tolerance is None else duration_tolerance
        self.cue_track_threshold = lyrics.cue_track_threshold if cue_track_threshold is None else cue_track_threshold
        self.search_retries = lyrics.search_retries if search_retries is None else search_retries
        self.cache_downloads = lyrics.cache_downloads if cache_downloads is None else cache_downloads
        self.apply_cue_delta = lyrics.apply_cue_delta if apply_cue_delta is None else apply_cue_delta
        self.translation_tolerance = (
            lyrics.translation_tolerance if translation_tolerance is None else translation_tolerance
        )

        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(
            max_workers=self.settings.network.max_workers,
            thread_name_prefix='lyricsync'
        )

    async def _run_blocking(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, functools.partial(func, *args))

    def _notify(self, text: str) -> None:
        if self.status_sink is not None:
            self.status_sink(text)

    def _parse(self, text: Optional[str]) -> LyricDocument:
        return parse_lrc(text, translation_tolerance=self.translation_tolerance)

    async def resolve(self, request: TrackRequest) -> LyricsResolution:
        """
        Resolve and display lyrics for one track

        Args:
            request: Track metadata and playback position

        Returns:
            LyricsResolution describing the document that was loaded
        """
        operation = create_operation_logger(__name__, f"Lyrics for {request.label}")
        operation.start()
        started_at = self.clock.now()

        if await self._run_blocking(self.override_store.is_disabled, request.artist, request.title):
            operation.complete()
            return self.show_fallback(request, LyricsSource.DISABLED)

        resolution = await self._resolve_local(request, started_at)
        if resolution is not None:
            operation.complete()
            return resolution

        candidates, search_calls, search_error = await self._search(request)
        if search_error is not None:
            operation.warning(str(search_error))
            return self.show_fallback(request, LyricsSource.FALLBACK,
                                      search_calls=search_calls, error=search_error)

        if request.is_cue_track(self.cue_track_threshold):
            delta = request.cue_start_offset
            self.logger.debug(f"CUE track ({request.duration_seconds:.0f}s), delta {delta:.2f}s")
        else:
            delta = 0.0
        filtered = filter_candidates(candidates, request.duration_seconds,
                                     self.duration_tolerance, self.cue_track_threshold)
        operation.progress(f"{len(filtered)} of {len(candidates)} candidates kept")

        resolution = await self._download_first(request, filtered, delta, started_at)
        resolution.search_calls = search_calls
        if resolution.success:
            operation.complete()
        else:
            operation.warning(resolution.error_message or "no lyrics")
        return resolution

    async def _resolve_local(self, request: TrackRequest, started_at: float) -> Optional[LyricsResolution]:
        text = await self._run_blocking(self.lyrics_store.read, request.artist, request.title)
        if text is None:
            return None

        document = self._parse(text)
        if document.is_empty:
            self.logger.info(f"Local lyrics for {request.label} contain no timed lines, searching online")
            return None

        self._load(request, document, 0.0, started_at)
        self.logger.info(f"Using local lyrics for {request.label}")
        return LyricsResolution(document=document, source=LyricsSource.LOCAL)

    async def _search(self, request: TrackRequest) -> Tuple[List[Candidate], int, Optional[LyricSyncError]]:
        """Search with the bounded retry; the retry keyword is the same as the first"""
        keyword = request.keyword
        calls = 0
        error: Optional[LyricSyncError] = None

        for attempt in range(1 + max(self.search_retries, 0)):
            calls += 1
            try:
                candidates = await self._run_blocking(self.search_provider.search, keyword)
            except SearchFailedError as e:
                error = e
            except Exception as e:
                self.logger.error(f"Unexpected search error for '{keyword}': {e}", exc_info=True)
                error = SearchFailedError(str(e), details={'keyword': keyword})
            else:
                if candidates:
                    return list(candidates), calls, None
                error = SearchEmptyError(f"No results for '{keyword}'", details={'keyword': keyword})

            self.logger.info(f"Search attempt {attempt + 1} for '{keyword}' failed: {error}")

        return [], calls, error

    async def _download_first(self, request: TrackRequest, candidates: List[Candidate],
                              delta: float, started_at: float) -> LyricsResolution:
        attempts = 0
        last_error: Optional[LyricSyncError] = None

        for candidate in candidates:
            attempts += 1
            try:
                text = await self._run_blocking(
                    self.download_provider.download,
                    candidate.id, request.artist, request.title, request.album
                )
            except LyricSyncError as e:
                last_error = e
                self.logger.info(f"Candidate {candidate.id} failed: {e}")
                continue
            except Exception as e:
                self.logger.error(f"Unexpected download error for candidate {candidate.id}: {e}", exc_info=True)
                last_error = LyricSyncError(str(e), details={'id': candidate.id})
                continue

            document = self._parse(text)
            if document.is_empty:
                last_error = ParseEmptyError(
                    f"Candidate {candidate.id} has no timed lyrics", details={'id': candidate.id}
                )
                self.logger.debug(last_error.message)
                continue

            if self.cache_downloads:
                await self._cache(request, text)

            self._load(request, document, delta, started_at)
            self.logger.info(f"Downloaded lyrics for {request.label} (candidate {candidate.id})")
            return LyricsResolution(
                document=document,
                source=LyricsSource.ONLINE,
                candidate=candidate,
                attempts=attempts,
            )

        exhausted = CandidatesExhaustedError(
            f"No usable lyrics among {len(candidates)} candidates",
            details={'last_error': str(last_error) if last_error else None}
        )
        return self.show_fallback(request, LyricsSource.FALLBACK, attempts=attempts, error=exhausted)

    async def _cache(self, request: TrackRequest, text: str) -> None:
        try:
            await self._run_blocking(self.lyrics_store.write, request.artist, request.title, text)
        except OSError as e:
            self.logger.warning(f"Could not cache lyrics for {request.label}: {e}")

    def _load(self, request: TrackRequest, document: LyricDocument, delta: float, started_at: float) -> None:
        # Account for the time spent resolving
        position = request.playback_position + (self.clock.now() - started_at)
        if self.apply_cue_delta:
            position -= delta
        self.synchronizer.resynchronize(document, position, self.clock.offset)
        self._notify(request.label)

    def show_fallback(self, request: TrackRequest, source: LyricsSource, attempts: int = 0,
                      search_calls: int = 0, error: Optional[LyricSyncError] = None) -> LyricsResolution:
        """
        Display the "<artist> - <title>" line and notify once

        Args:
            request: Track the fallback is shown for
            source: FALLBACK or DISABLED
            attempts: Download attempts made before giving up
            search_calls: Search requests made before giving up
            error: Failure that led here

        Returns:
            LyricsResolution for the fallback document
        """
        document = LyricDocument.fallback(request.artist, request.title)
        self.synchronizer.present(document)
        self._notify(request.label)
        if source is LyricsSource.DISABLED:
            self.logger.info(f"Lyrics disabled for {request.label}")
        else:
            self.logger.info(f"No lyrics for {request.label}: {error}")
        return LyricsResolution(
            document=document,
            source=source,
            attempts=attempts,
            search_calls=search_calls,
            error_message=str(error) if error else None,
        )

    def close(self) -> None:
        if self._owns_executor:
            self.executor.shutdown(wait=False)
