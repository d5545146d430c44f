"""
Timeline synchronizer

Drives a cursor through a LyricDocument in lockstep with playback time and
reports the active line.

Advancement is hybrid: a fixed-cadence polling tick detects due lines, and
once a line boundary has been crossed the next advancement is scheduled at
exactly the gap between the two lines instead of waiting for the next poll.
Every scheduled advancement carries the document generation it was created
under and becomes a no-op once a newer document has been loaded.

All methods must be called from the scheduler's thread (the event loop).
"""

from typing import Callable, Optional

from ..lyrics.models import LyricDocument, SynchronizerState, SyncPhase, TimedLine
from ..utils.logger import get_logger
from .clock import PlaybackClock
from .scheduler import ScheduledTask


logger = get_logger(__name__)

StatusSink = Callable[[str], None]


class TimelineSynchronizer:
    """
    Owner of one SynchronizerState

    The synchronizer is the only component that mutates the cursor and the
    documents' active flags. Documents arrive through `resynchronize` (real
    lyrics) or `present` (static fallback display).
    """

    def __init__(self, clock: PlaybackClock, scheduler, status_sink: Optional[StatusSink] = None,
                 tick_interval: float = 1.0):
        """
        Initialize synchronizer

        Args:
            clock: Clock used for every elapsed-time computation
            scheduler: Object providing call_later / call_every
            status_sink: Receives the text of each newly displayed primary line
            tick_interval: Seconds between polling ticks
        """
        self.clock = clock
        self.scheduler = scheduler
        self.status_sink = status_sink
        self.tick_interval = tick_interval
        self.on_finished: Optional[Callable[[], None]] = None

        self._state = SynchronizerState()
        self._pending: Optional[ScheduledTask] = None
        self._poller: Optional[ScheduledTask] = None

    # Observable state

    @property
    def state(self) -> SynchronizerState:
        return self._state

    @property
    def phase(self) -> SyncPhase:
        return self._state.phase

    @property
    def document(self) -> LyricDocument:
        return self._state.document

    @property
    def current_index(self) -> int:
        return self._state.current_index

    @property
    def playback_progress(self) -> float:
        return self._state.playback_progress

    @property
    def is_running(self) -> bool:
        return self._state.phase is SyncPhase.RUNNING

    @property
    def active_line(self) -> Optional[TimedLine]:
        index = self._state.document.active_index
        if index is None:
            return None
        return self._state.document[index]

    @property
    def has_pending_advance(self) -> bool:
        return self._pending is not None and not self._pending.cancelled

    # Polling lifecycle

    def start(self) -> None:
        """Begin the fixed-cadence polling tick"""
        if self._poller is None:
            self._poller = self.scheduler.call_every(self.tick_interval, self.tick)
            logger.debug(f"Polling started every {self.tick_interval}s")

    def shutdown(self) -> None:
        """Stop polling and any pending advancement"""
        if self._poller is not None:
            self._poller.cancel()
            self._poller = None
        self.stop()

    # Document swaps

    def _swap_document(self, document: LyricDocument) -> None:
        self._cancel_pending()
        self._state.document.clear_active()
        self._state.generation += 1
        self._state.document = document

    def resynchronize(self, document: LyricDocument, playback_position: float,
                      calibration_offset: float = 0.0) -> None:
        """
        Load a document and align it with the playback position

        Legal from any phase; always ends in RUNNING. Pending advancements
        scheduled for an earlier document are cancelled.

        Args:
            document: Document to display (may be the same one again)
            playback_position: Current playback position in seconds
            calibration_offset: Signed seconds added to the position
        """
        self._swap_document(document)
        state = self._state
        state.reference_start = self.clock.now() - (playback_position + calibration_offset)
        state.current_index = document.index_at_or_after(playback_position)
        document.activate(state.current_index)
        state.playback_progress = playback_position + calibration_offset
        state.phase = SyncPhase.RUNNING

        logger.debug(
            f"Resynchronized at {playback_position:.2f}s (offset {calibration_offset:+.2f}s), "
            f"index {state.current_index}/{len(document)}, generation {state.generation}"
        )

    def present(self, document: LyricDocument) -> None:
        """
        Show a document statically

        Used for the fallback and disabled-track documents: the first line
        is active, the cursor is parked past the end and nothing is emitted
        to the status sink.

        Args:
            document: Document to display
        """
        self._swap_document(document)
        state = self._state
        document.activate(0)
        state.current_index = len(document)
        state.playback_progress = 0.0
        state.phase = SyncPhase.IDLE

    # Advancement

    def tick(self) -> None:
        """
        Consume every line that is due and schedule the next advancement

        No-op unless RUNNING. Safe to call at any time and any rate.
        """
        state = self._state
        if state.phase is not SyncPhase.RUNNING:
            return

        document = state.document
        if not 0 <= state.current_index < len(document):
            self._finish()
            return

        elapsed = self.clock.now() - state.reference_start
        state.playback_progress = elapsed

        consumed: Optional[TimedLine] = None
        while state.current_index < len(document) and elapsed >= document[state.current_index].timestamp:
            line = document[state.current_index]
            document.activate(state.current_index)
            if not line.is_translation:
                self._emit(line.text)
            consumed = line
            state.current_index += 1

        if state.current_index >= len(document):
            self._finish()
            return

        if consumed is not None:
            delay = max(document[state.current_index].timestamp - consumed.timestamp, 0.0)
            self._schedule_advance(delay)

    def _schedule_advance(self, delay: float) -> None:
        self._cancel_pending()
        generation = self._state.generation

        def advance():
            if generation != self._state.generation:
                logger.debug(f"Dropped stale advancement from generation {generation}")
                return
            self._pending = None
            self.tick()

        self._pending = self.scheduler.call_later(delay, advance)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _emit(self, text: str) -> None:
        if self.status_sink is not None:
            self.status_sink(text)

    def _finish(self) -> None:
        logger.debug("Playback finished")
        self._cancel_pending()
        self._state.phase = SyncPhase.FINISHED
        if self.on_finished is not None:
            self.on_finished()

    def stop(self) -> None:
        """
        Freeze the cursor and clear running state

        Idempotent; lands in IDLE. The current document and its active line
        stay in place.
        """
        self._cancel_pending()
        self._state.playback_progress = 0.0
        self._state.phase = SyncPhase.IDLE

    def mark_disabled(self, disabled: bool) -> None:
        self._state.disabled_for_track = disabled
