"""
Configuration management package for LyricSync

Settings are loaded from YAML files and environment variables into dataclass
sections (lyrics, sync, provider, network, logging, security) and shared
through a singleton accessor:

    from lyricsync.config import get_settings

    settings = get_settings()
    offset = settings.lyrics.calibration_offset

Configuration sources in order of precedence:
1. Environment variables (LYRICSYNC_*)
2. YAML configuration file
3. Default values
"""

from .settings import get_settings, reload_settings, Settings

__all__ = [
    'get_settings',      # Factory function for singleton settings access
    'reload_settings',   # Function to hot-reload settings from files
    'Settings',          # Settings class for direct instantiation
]
