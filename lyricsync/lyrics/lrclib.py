"""
LRCLIB lyrics provider

Implements both provider contracts used by the acquisition pipeline on top of
the public LRCLIB HTTP API (https://lrclib.net):

    search(keyword) -> List[Candidate]          GET /api/search?q=<keyword>
    download(id, artist, title, album) -> text  GET /api/get/<id>

Calls are blocking and are run in the pipeline's thread pool. Transport and
HTTP errors are raised as SearchFailedError / DownloadFailedError so that the
pipeline can apply its retry and next-candidate rules; a track that exists
but has no synced lyrics is simply None.
"""

from typing import Any, Dict, List, Optional

import requests

from .models import Candidate
from ..config.settings import get_settings
from ..exceptions import DownloadFailedError, SearchFailedError
from ..utils.logger import get_logger


class LrcLibClient:
    """LRCLIB search and download client"""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 user_agent: Optional[str] = None, search_limit: Optional[int] = None,
                 session: Optional[requests.Session] = None):
        """
        Initialize LRCLIB client

        Unset arguments are taken from the provider and network settings.

        Args:
            base_url: API root, e.g. "https://lrclib.net"
            timeout: Per-request timeout in seconds
            user_agent: User-Agent header value
            search_limit: Maximum number of candidates returned by search
            session: Preconfigured HTTP session
        """
        self.settings = get_settings()
        self.logger = get_logger(__name__)

        self.base_url = (base_url or self.settings.provider.base_url).rstrip('/')
        self.timeout = timeout if timeout is not None else self.settings.network.request_timeout
        self.search_limit = search_limit if search_limit is not None else self.settings.provider.search_limit

        # HTTP session
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': user_agent or self.settings.network.user_agent
        })

    def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        url = f"{self.base_url}/api/{endpoint}"
        return self.session.get(url, params=params, timeout=self.timeout)

    def search(self, keyword: str) -> List[Candidate]:
        """
        Search LRCLIB for tracks matching a keyword

        Args:
            keyword: Free-text query, normally "<artist> - <title>"

        Returns:
            Candidates in the order returned by the API, possibly empty

        Raises:
            SearchFailedError: On transport errors, HTTP errors or an
                               unreadable response body
        """
        try:
            response = self._get('search', params={'q': keyword})
            response.raise_for_status()
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise SearchFailedError(f"LRCLIB search failed: {e}", details={'keyword': keyword})

        if not isinstance(data, list):
            raise SearchFailedError("Unexpected LRCLIB search response", details={'keyword': keyword})

        candidates = []
        for record in data:
            try:
                candidates.append(Candidate.from_lrclib_data(record))
            except (KeyError, TypeError, AttributeError) as e:
                self.logger.debug(f"Skipping malformed search record: {e}")

        if self.search_limit:
            candidates = candidates[:self.search_limit]

        self.logger.debug(f"LRCLIB search '{keyword}' returned {len(candidates)} candidates")
        return candidates

    def download(self, candidate_id: int, artist: str = "", title: str = "",
                 album: str = "") -> Optional[str]:
        """
        Download the synced lyrics of one LRCLIB record

        Args:
            candidate_id: LRCLIB record id from search
            artist: Artist name (used for logging only)
            title: Track title (used for logging only)
            album: Album name (used for logging only)

        Returns:
            LRC text, None if the record is missing or has no synced lyrics

        Raises:
            DownloadFailedError: On transport errors or HTTP errors other
                                 than 404
        """
        details = {'id': candidate_id, 'artist': artist, 'title': title, 'album': album}
        try:
            response = self._get(f'get/{candidate_id}')
            if response.status_code == 404:
                self.logger.debug(f"LRCLIB record {candidate_id} not found")
                return None
            response.raise_for_status()
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise DownloadFailedError(f"LRCLIB download failed: {e}", details=details)

        synced = data.get('syncedLyrics') if isinstance(data, dict) else None
        if not synced:
            self.logger.debug(f"LRCLIB record {candidate_id} has no synced lyrics")
            return None
        return synced

    def close(self) -> None:
        self.session.close()


# Global LRCLIB client instance
_lrclib_client: Optional[LrcLibClient] = None


def get_lrclib_client() -> LrcLibClient:
    """Get global LRCLIB client instance"""
    global _lrclib_client
    if not _lrclib_client:
        _lrclib_client = LrcLibClient()
    return _lrclib_client


def reset_lrclib_client() -> None:
    """Reset global LRCLIB client instance"""
    global _lrclib_client
    if _lrclib_client:
        _lrclib_client.close()
    _lrclib_client = None
