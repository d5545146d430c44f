"""
Lyrics package: timeline models, LRC parsing and lyric acquisition

Key components:
- parse_lrc: LRC text to LyricDocument
- LyricsFileStore / OverrideStore: local .lrc files and disabled-track markers
- LrcLibClient: online search and download through LRCLIB
- AcquisitionPipeline: local file, then online search, then fallback

Usage:
    pipeline = AcquisitionPipeline(client, client, file_store, override_store,
                                   synchronizer, status_sink, clock)
    resolution = await pipeline.resolve(request)
"""

from .models import (
    TimedLine,
    LyricDocument,
    SyncPhase,
    SynchronizerState,
    NowPlaying,
    TrackRequest,
    Candidate,
    LyricsSource,
    LyricsResolution,
)
from .parser import parse_lrc, has_timestamps, format_lrc_timestamp
from .store import LyricsFileStore, OverrideStore
from .lrclib import LrcLibClient, get_lrclib_client, reset_lrclib_client
from .pipeline import AcquisitionPipeline, filter_candidates

__all__ = [
    # Models
    'TimedLine',
    'LyricDocument',
    'SyncPhase',
    'SynchronizerState',
    'NowPlaying',
    'TrackRequest',
    'Candidate',
    'LyricsSource',
    'LyricsResolution',

    # Parsing
    'parse_lrc',
    'has_timestamps',
    'format_lrc_timestamp',

    # Storage and providers
    'LyricsFileStore',
    'OverrideStore',
    'LrcLibClient',
    'get_lrclib_client',
    'reset_lrclib_client',

    # Acquisition
    'AcquisitionPipeline',
    'filter_candidates',
]
