"""Test configuration and fixtures"""

import pytest
import tempfile
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from lyricsync.config.settings import reload_settings
from lyricsync.exceptions import SearchFailedError
from lyricsync.lyrics.models import Candidate
from lyricsync.lyrics.pipeline import AcquisitionPipeline
from lyricsync.lyrics.store import LyricsFileStore, OverrideStore
from lyricsync.sync.clock import PlaybackClock
from lyricsync.sync.scheduler import ScheduledTask
from lyricsync.sync.synchronizer import TimelineSynchronizer


SAMPLE_LRC = "[00:01.00]Hello\n[00:01.00]Hola\n[00:05.00]World"


class FakeClock(PlaybackClock):
    """Clock that only moves when told to"""

    def __init__(self, start: float = 100.0, offset: float = 0.0):
        self.current = start
        super().__init__(offset=offset, time_source=lambda: self.current)

    def advance(self, seconds: float) -> None:
        self.current += seconds


class ManualTask(ScheduledTask):

    def __init__(self, due: float, delay: float, callback, interval=None):
        super().__init__()
        self.due = due
        self.delay = delay
        self.callback = callback
        self.interval = interval
        self.fired = False

    def run(self):
        if self.interval is None:
            self.fired = True
        else:
            self.due += self.interval
        self.callback()


class ManualScheduler:
    """Scheduler whose tasks fire only when the test advances time"""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.tasks = []

    def call_later(self, delay, callback):
        task = ManualTask(self.clock.now() + delay, delay, callback)
        self.tasks.append(task)
        return task

    def call_every(self, interval, callback):
        task = ManualTask(self.clock.now() + interval, interval, callback, interval=interval)
        self.tasks.append(task)
        return task

    @property
    def pending(self):
        return [task for task in self.tasks if not task.cancelled and not task.fired]

    @property
    def pending_one_shots(self):
        return [task for task in self.pending if task.interval is None]

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due tasks at their due times"""
        target = self.clock.current + seconds
        while True:
            due = [task for task in self.pending if task.due <= target]
            if not due:
                break
            task = min(due, key=lambda t: t.due)
            self.clock.current = max(self.clock.current, task.due)
            task.run()
        self.clock.current = target


class RecordingSink(list):
    """Status sink that remembers every text it receives"""

    def __call__(self, text: str) -> None:
        self.append(text)


class FakeProvider:
    """
    In-memory search and download provider

    Args:
        candidates: Search results
        lyrics: Mapping of candidate id to LRC text, None or an exception
        search_failures: Number of leading search calls that raise
    """

    def __init__(self, candidates=None, lyrics=None, search_failures=0):
        self.candidates = list(candidates or [])
        self.lyrics = dict(lyrics or {})
        self.search_failures = search_failures
        self.search_calls = []
        self.download_calls = []

    def search(self, keyword):
        self.search_calls.append(keyword)
        if self.search_failures > 0:
            self.search_failures -= 1
            raise SearchFailedError("search unavailable")
        return list(self.candidates)

    def download(self, candidate_id, artist, title, album):
        self.download_calls.append(candidate_id)
        value = self.lyrics.get(candidate_id)
        if isinstance(value, Exception):
            raise value
        return value


def make_candidate(candidate_id, duration_seconds, title="Title", artist="Artist"):
    return Candidate(
        id=candidate_id,
        title=title,
        artists=(artist,),
        album="Album",
        duration_millis=int(duration_seconds * 1000),
    )


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def isolated_settings(temp_dir, monkeypatch):
    """Settings whose home, config and lyrics directories live in temp_dir"""
    monkeypatch.setenv("HOME", str(temp_dir))
    monkeypatch.setenv("LYRICSYNC_LYRICS_DIR", str(temp_dir / "lyrics"))
    monkeypatch.delenv("LYRICSYNC_CALIBRATION_OFFSET", raising=False)
    monkeypatch.chdir(temp_dir)
    yield reload_settings()
    monkeypatch.undo()
    reload_settings()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler(clock):
    return ManualScheduler(clock)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def synchronizer(clock, scheduler, sink):
    return TimelineSynchronizer(clock, scheduler, sink, tick_interval=1.0)


@pytest.fixture
def lyrics_store(temp_dir):
    return LyricsFileStore(temp_dir / "lyrics")


@pytest.fixture
def override_store(temp_dir):
    return OverrideStore(temp_dir / "lyrics")


@pytest.fixture
def executor():
    pool = ThreadPoolExecutor(max_workers=2)
    yield pool
    pool.shutdown(wait=True)


@pytest.fixture
def make_pipeline(synchronizer, sink, clock, lyrics_store, override_store, executor):
    """Factory building a pipeline around a provider with explicit options"""

    def factory(provider, **options):
        params = dict(
            duration_tolerance=3.0,
            cue_track_threshold=600.0,
            search_retries=1,
            cache_downloads=True,
            apply_cue_delta=False,
            translation_tolerance=0.05,
        )
        params.update(options)
        return AcquisitionPipeline(
            provider, provider, lyrics_store, override_store,
            synchronizer, sink, clock, executor=executor, **params
        )

    return factory
