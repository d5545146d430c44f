# tests/test_clock.py
"""Test the playback clock, manual source and event loop scheduler"""

import asyncio
import pytest

from lyricsync.lyrics.models import NowPlaying
from lyricsync.sync.clock import ManualPlaybackSource, PlaybackClock
from lyricsync.sync.scheduler import EventLoopScheduler


class TestPlaybackClock:

    def test_offset_adjustment(self, clock):
        assert clock.adjust(PlaybackClock.ADJUST_STEP) == 1.0
        assert clock.adjust(-2 * PlaybackClock.ADJUST_STEP) == -1.0

        clock.set_offset(0.25)

        assert clock.offset == 0.25

    def test_position_of(self, clock):
        assert clock.position_of(NowPlaying(elapsed_seconds=12.5, artist="A", title="B")) == 12.5
        assert clock.position_of(NowPlaying(elapsed_seconds=-3, artist="A", title="B")) == 0.0
        assert clock.position_of(None) == 0.0


class TestManualPlaybackSource:
    """Test ManualPlaybackSource"""

    def test_position_follows_clock(self, clock):
        source = ManualPlaybackSource("A", "B", position=10.0, clock=clock)

        clock.advance(2.5)

        assert source.position == pytest.approx(12.5)
        assert source.get_current_playback().elapsed_seconds == pytest.approx(12.5)

    def test_pause_and_resume(self, clock):
        source = ManualPlaybackSource("A", "B", clock=clock)
        clock.advance(3)
        source.pause()
        clock.advance(10)

        assert not source.is_playing
        assert source.position == pytest.approx(3.0)

        source.resume()
        clock.advance(1)
        assert source.position == pytest.approx(4.0)

    def test_seek(self, clock):
        source = ManualPlaybackSource("A", "B", position=50.0, clock=clock)
        clock.advance(5)

        source.seek(20.0)

        assert source.position == pytest.approx(20.0)

    def test_snapshot_and_duration(self, clock):
        source = ManualPlaybackSource("A", "B", "C", duration=180.0, clock=clock)

        now_playing = source.get_current_playback()

        assert now_playing.is_available
        assert (now_playing.artist, now_playing.title, now_playing.album) == ("A", "B", "C")
        assert source.get_duration(now_playing) == 180.0


class TestEventLoopScheduler:
    """Test EventLoopScheduler on a running loop"""

    @pytest.mark.asyncio
    async def test_call_later_runs_once(self):
        scheduler = EventLoopScheduler()
        fired = asyncio.Event()

        task = scheduler.call_later(0.01, fired.set)

        await asyncio.wait_for(fired.wait(), timeout=1)
        assert not task.cancelled

    @pytest.mark.asyncio
    async def test_cancelled_one_shot_never_runs(self):
        scheduler = EventLoopScheduler()
        calls = []

        task = scheduler.call_later(0.01, lambda: calls.append(1))
        task.cancel()
        await asyncio.sleep(0.05)

        assert task.cancelled
        assert calls == []

    @pytest.mark.asyncio
    async def test_call_every_repeats_until_cancelled(self):
        scheduler = EventLoopScheduler()
        calls = []
        done = asyncio.Event()

        def callback():
            calls.append(1)
            if len(calls) == 3:
                done.set()

        task = scheduler.call_every(0.01, callback)
        await asyncio.wait_for(done.wait(), timeout=1)
        task.cancel()
        count = len(calls)
        await asyncio.sleep(0.05)

        assert count >= 3
        assert len(calls) == count

    @pytest.mark.asyncio
    async def test_failing_repeating_callback_keeps_running(self):
        scheduler = EventLoopScheduler()
        calls = []
        done = asyncio.Event()

        def callback():
            calls.append(1)
            if len(calls) == 2:
                done.set()
            raise RuntimeError("tick failed")

        task = scheduler.call_every(0.01, callback)
        await asyncio.wait_for(done.wait(), timeout=1)
        task.cancel()

        assert len(calls) >= 2
