"""
Configuration management for LyricSync

This module handles loading, validation, and management of application settings
from YAML files and environment variables. It provides a centralized
configuration system shared by the lyrics pipeline, the synchronizer and the CLI.

The configuration is organized into logical sections using dataclasses:
- Lyrics settings (storage directory, calibration, candidate filtering)
- Synchronizer settings (polling cadence)
- Provider settings (LRCLIB endpoint and search size)
- Network, logging and storage settings

Environment variables take precedence over the YAML file so that a single
machine can override the lyric directory or offset without editing files.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List
from dataclasses import dataclass
from dotenv import load_dotenv

from ..exceptions import ConfigError

# Load environment variables from .env file if present
load_dotenv()


@dataclass
class LyricsConfig:
    """
    Lyrics storage, calibration and acquisition settings

    Controls where lyric files and disabled-track markers live, the manual
    calibration offset applied to every timestamp comparison, and the rules
    used to pick online candidates.
    """
    directory: str = "~/.lyricsync/lyrics"
    calibration_offset: float = 0.0      # signed seconds
    duration_tolerance: float = 3.0      # seconds between track and candidate
    cue_track_threshold: float = 600.0   # tracks at least this long skip filtering
    search_retries: int = 1
    cache_downloads: bool = True
    apply_cue_delta: bool = False
    translation_tolerance: float = 0.05


@dataclass
class SyncConfig:
    """
    Timeline synchronizer settings

    The tick interval is the fixed polling cadence. Line boundaries found
    during a tick are followed by precisely scheduled advancements, so this
    value only bounds how late the first line after a seek can appear.
    """
    tick_interval: float = 1.0


@dataclass
class ProviderConfig:
    """Online lyrics provider endpoint settings"""
    base_url: str = "https://lrclib.net"
    search_limit: int = 20


@dataclass
class NetworkConfig:
    """
    Network and HTTP configuration settings

    Controls the user agent, request timeout and the size of the worker pool
    that runs blocking provider calls off the event loop.
    """
    user_agent: str = "LyricSync/0.4"
    request_timeout: int = 30
    max_workers: int = 4


@dataclass
class LoggingConfig:
    """
    Logging configuration and output settings

    Controls application logging behavior including log levels, file output,
    rotation, and console formatting.
    """
    level: str = "INFO"
    file: str = ""
    max_size: str = "10MB"
    backup_count: int = 3
    console_output: bool = True
    colored_output: bool = True


@dataclass
class SecurityConfig:
    """Storage location for configuration files"""
    config_directory: str = "~/.lyricsync/"


class Settings:
    """
    Main settings class that manages all configuration

    This class serves as the central configuration manager, loading settings
    from a YAML file and environment variables and providing a unified
    interface for accessing configuration throughout the application.

    The class handles:
    - Loading configuration from YAML files
    - Overriding with environment variables
    - Creating necessary directories
    - Validating configuration values
    - Saving configuration back to files
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize settings from config file or environment variables

        Args:
            config_path: Path to custom config file, if None uses default locations
        """
        self.config_path = config_path
        self.config_dir = Path.home() / ".lyricsync"

        # Initialize all configuration objects with default values
        self.lyrics = LyricsConfig()
        self.sync = SyncConfig()
        self.provider = ProviderConfig()
        self.network = NetworkConfig()
        self.logging = LoggingConfig()
        self.security = SecurityConfig()

        # Load configuration from various sources in order of precedence
        self._load_config()
        self._load_environment_variables()
        self._create_directories()

    def _sections(self) -> Dict[str, Any]:
        return {
            'lyrics': self.lyrics,
            'sync': self.sync,
            'provider': self.provider,
            'network': self.network,
            'logging': self.logging,
            'security': self.security,
        }

    def _load_config(self) -> None:
        """
        Load configuration from YAML file

        Searches for configuration files in multiple locations in order of
        precedence. The first file found will be used.
        """
        config_paths = [
            self.config_path,
            self.config_dir / "config.yaml",
            Path("config/config.yaml"),
            Path("config.yaml")
        ]

        config_data = {}
        for path in config_paths:
            if path and Path(path).exists():
                try:
                    with open(path, 'r', encoding='utf-8') as f:
                        config_data = yaml.safe_load(f) or {}
                    break
                except (OSError, yaml.YAMLError) as e:
                    print(f"Warning: Failed to load config from {path}: {e}")

        self._apply_config(config_data)

    def _apply_config(self, config_data: Dict[str, Any]) -> None:
        """
        Apply configuration data to dataclass instances

        Maps configuration sections from the YAML file to the appropriate
        dataclass instances, updating only the attributes that exist in
        both the config file and the dataclass definition.

        Args:
            config_data: Dictionary containing configuration sections
        """
        config_mapping = self._sections()

        for section_name, section_data in config_data.items():
            if section_name in config_mapping and isinstance(section_data, dict):
                config_obj = config_mapping[section_name]
                for key, value in section_data.items():
                    if hasattr(config_obj, key):
                        setattr(config_obj, key, value)

    def _load_environment_variables(self) -> None:
        """
        Load overrides from environment variables

        Environment variables take precedence over file-based configuration.
        Malformed numeric values are reported and ignored.
        """
        def set_offset(value: str) -> None:
            try:
                self.lyrics.calibration_offset = float(value)
            except ValueError:
                print(f"Warning: Ignoring invalid LYRICSYNC_CALIBRATION_OFFSET: {value}")

        env_mappings = {
            'LYRICSYNC_LYRICS_DIR': lambda v: setattr(self.lyrics, 'directory', v),
            'LYRICSYNC_CALIBRATION_OFFSET': set_offset,
            'LYRICSYNC_PROVIDER_URL': lambda v: setattr(self.provider, 'base_url', v),
            'LYRICSYNC_LOG_LEVEL': lambda v: setattr(self.logging, 'level', v),
        }

        for env_var, setter in env_mappings.items():
            value = os.getenv(env_var)
            if value:
                setter(value)

    def _create_directories(self) -> None:
        """
        Create the configuration and lyrics directories

        Handles permission errors gracefully with warnings so that read-only
        commands still work.
        """
        directories = [
            self.get_config_directory(),
            self.get_lyrics_directory(),
        ]

        for directory in directories:
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                print(f"Warning: Failed to create directory {directory}: {e}")

    def get_lyrics_directory(self) -> Path:
        """
        Get the expanded lyrics directory path

        Returns:
            Path object for the directory holding .lrc files and markers
        """
        return Path(self.lyrics.directory).expanduser()

    def get_config_directory(self) -> Path:
        """
        Get the expanded config directory path

        Returns:
            Path object for the configuration directory
        """
        return Path(self.security.config_directory).expanduser()

    def save_config(self, path: Optional[str] = None) -> Path:
        """
        Save current configuration to file

        Args:
            path: Custom path to save config, defaults to user config directory

        Returns:
            Path of the written file

        Raises:
            ConfigError: If the configuration cannot be saved
        """
        if not path:
            target = self.get_config_directory() / "config.yaml"
        else:
            target = Path(path)

        config_data = {
            name: self._dataclass_to_dict(section)
            for name, section in self._sections().items()
        }

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, 'w', encoding='utf-8') as f:
                yaml.dump(config_data, f, default_flow_style=False, indent=2)
        except OSError as e:
            raise ConfigError(f"Failed to save config to {target}: {e}", details={'path': str(target)})
        return target

    def _dataclass_to_dict(self, obj) -> Dict[str, Any]:
        """Convert a configuration section to a plain dictionary"""
        result = {}
        for key, value in obj.__dict__.items():
            result[key] = value
        return result

    def validation_errors(self) -> List[str]:
        """
        Collect configuration problems

        Returns:
            List of human-readable error messages, empty when valid
        """
        errors = []

        if self.lyrics.duration_tolerance < 0:
            errors.append(f"Invalid duration tolerance: {self.lyrics.duration_tolerance}")

        if self.lyrics.cue_track_threshold <= 0:
            errors.append(f"Invalid CUE track threshold: {self.lyrics.cue_track_threshold}")

        if self.lyrics.search_retries < 0:
            errors.append(f"Invalid search retry count: {self.lyrics.search_retries}")

        if self.lyrics.translation_tolerance < 0:
            errors.append(f"Invalid translation tolerance: {self.lyrics.translation_tolerance}")

        if self.sync.tick_interval <= 0:
            errors.append(f"Invalid tick interval: {self.sync.tick_interval}")

        if self.logging.level.upper() not in ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']:
            errors.append(f"Invalid log level: {self.logging.level}")

        return errors

    def validate(self) -> bool:
        """
        Validate current configuration

        Returns:
            True if configuration is valid, False otherwise
        """
        errors = self.validation_errors()

        if errors:
            print("Configuration validation errors:")
            for error in errors:
                print(f"  - {error}")
            return False

        return True

    def __str__(self) -> str:
        sections = [
            f"Lyrics: {self.lyrics.directory}",
            f"Offset: {self.lyrics.calibration_offset:+.2f}s",
            f"Provider: {self.provider.base_url}",
            f"Tick: {self.sync.tick_interval}s",
        ]
        return f"Settings({', '.join(sections)})"


# Global settings instance for singleton pattern
settings = Settings()


def get_settings() -> Settings:
    """
    Get the global settings instance

    Returns:
        The global Settings instance
    """
    return settings


def reload_settings(config_path: Optional[str] = None) -> Settings:
    """
    Reload settings from configuration files

    Creates a new settings instance with updated configuration from files
    and environment variables.

    Args:
        config_path: Optional path to specific config file

    Returns:
        New Settings instance with reloaded configuration
    """
    global settings
    settings = Settings(config_path)
    return settings
