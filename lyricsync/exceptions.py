"""
Exception classes for LyricSync.

Each exception distinguishes one failure mode of lyric acquisition. None of
them reaches the timeline synchronizer: the acquisition pipeline absorbs them
and always ends with a valid document, falling back to the single-line
"artist - title" document when nothing better is available.

Exception Hierarchy:
    LyricSyncError (base)
        ConfigError - configuration file issues
        ParseEmptyError - lyric text produced no timed lines
        SearchFailedError - search request failed
            SearchEmptyError - search succeeded but matched nothing
        DownloadFailedError - a single candidate could not be downloaded
        CandidatesExhaustedError - every candidate failed
        SourceUnavailableError - no now-playing information or duration
"""


class LyricSyncError(Exception):
    """
    Base exception for all LyricSync errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (artist, title,
                 candidate id, original error).
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(LyricSyncError):
    """Raised when the configuration file cannot be read or written."""
    pass


class ParseEmptyError(LyricSyncError):
    """
    Raised when lyric text yields a zero-length document.

    Not fatal: a local file that parses empty sends the pipeline online, a
    downloaded text that parses empty moves on to the next candidate.
    """
    pass


class SearchFailedError(LyricSyncError):
    """
    Raised when the search provider cannot be queried.

    Triggers one retry with the identical keyword, then the fallback document.
    """
    pass


class SearchEmptyError(SearchFailedError):
    """Raised when a search succeeds but returns no candidates."""
    pass


class DownloadFailedError(LyricSyncError):
    """
    Raised when lyrics for one candidate cannot be downloaded.

    The pipeline advances to the next candidate; the same candidate is never
    retried.
    """
    pass


class CandidatesExhaustedError(LyricSyncError):
    """Raised when every filtered candidate failed to produce lyrics."""
    pass


class SourceUnavailableError(LyricSyncError):
    """
    Raised when now-playing information or the song duration is missing.

    Resolution is aborted silently: there is no track to label, so no
    fallback document is shown.
    """
    pass
