"""
Local lyric storage

Two small file-backed stores keyed by (artist, title):

- LyricsFileStore keeps one .lrc file per track
- OverrideStore keeps an empty .disabled marker per track whose lyrics the
  user turned off

Both derive the file stem from the sanitized "<artist> - <title>" text, so a
track always maps to the same files.
"""

from pathlib import Path
from typing import Optional, Union

from ..utils.helpers import sanitize_filename, create_search_keyword, ensure_directory
from ..utils.logger import get_logger


logger = get_logger(__name__)


def track_stem(artist: str, title: str) -> str:
    """File stem shared by a track's lyric file and its marker"""
    return sanitize_filename(create_search_keyword(artist, title))


class LyricsFileStore:
    """Cached LRC files, one per track"""

    EXTENSION = ".lrc"

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory).expanduser()

    def path_for(self, artist: str, title: str) -> Path:
        return self.directory / f"{track_stem(artist, title)}{self.EXTENSION}"

    def exists(self, artist: str, title: str) -> bool:
        return self.path_for(artist, title).is_file()

    def read(self, artist: str, title: str) -> Optional[str]:
        """
        Read cached lyric text

        Args:
            artist: Artist name
            title: Track title

        Returns:
            File content, None if the file is missing or unreadable
        """
        path = self.path_for(artist, title)
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to read lyrics file {path}: {e}")
            return None

    def write(self, artist: str, title: str, text: str) -> Path:
        """
        Store lyric text, replacing any existing file

        Args:
            artist: Artist name
            title: Track title
            text: LRC text

        Returns:
            Path of the written file

        Raises:
            OSError: If the file cannot be written
        """
        ensure_directory(self.directory)
        path = self.path_for(artist, title)
        path.write_text(text, encoding='utf-8')
        logger.debug(f"Saved lyrics to {path}")
        return path


class OverrideStore:
    """Per-track "lyrics disabled" markers"""

    EXTENSION = ".disabled"

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory).expanduser()

    def marker_path(self, artist: str, title: str) -> Path:
        return self.directory / f"{track_stem(artist, title)}{self.EXTENSION}"

    def is_disabled(self, artist: str, title: str) -> bool:
        return self.marker_path(artist, title).exists()

    def set_disabled(self, artist: str, title: str, disabled: bool) -> bool:
        """
        Create or remove the marker for a track

        Args:
            artist: Artist name
            title: Track title
            disabled: True to disable lyrics, False to enable them again

        Returns:
            True if the marker state changed
        """
        path = self.marker_path(artist, title)
        if disabled:
            if path.exists():
                return False
            ensure_directory(self.directory)
            path.touch()
            logger.info(f"Disabled lyrics for {artist} - {title}")
            return True

        if not path.exists():
            logger.debug(f"No marker to remove for {artist} - {title}")
            return False
        path.unlink()
        logger.info(f"Enabled lyrics for {artist} - {title}")
        return True
