"""
Synchronization package: playback clock, scheduling and the timeline synchronizer
"""

from .clock import PlaybackClock, ManualPlaybackSource
from .scheduler import EventLoopScheduler, ScheduledTask
from .synchronizer import TimelineSynchronizer

__all__ = [
    'PlaybackClock',
    'ManualPlaybackSource',
    'EventLoopScheduler',
    'ScheduledTask',
    'TimelineSynchronizer',
]
