# tests/test_settings.py
"""Test configuration loading"""

import pytest
import yaml

from lyricsync.config.settings import Settings
from lyricsync.exceptions import ConfigError


@pytest.fixture
def clean_env(temp_dir, monkeypatch):
    """Keep user files and LYRICSYNC_* variables out of the way"""
    monkeypatch.setenv("HOME", str(temp_dir))
    monkeypatch.chdir(temp_dir)
    for name in ("LYRICSYNC_LYRICS_DIR", "LYRICSYNC_CALIBRATION_OFFSET",
                 "LYRICSYNC_PROVIDER_URL", "LYRICSYNC_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return temp_dir


class TestSettings:
    """Test Settings"""

    def test_defaults(self, clean_env):
        settings = Settings()

        assert settings.lyrics.calibration_offset == 0.0
        assert settings.lyrics.duration_tolerance == 3.0
        assert settings.lyrics.cue_track_threshold == 600.0
        assert settings.lyrics.search_retries == 1
        assert settings.lyrics.apply_cue_delta is False
        assert settings.sync.tick_interval == 1.0
        assert settings.provider.base_url == "https://lrclib.net"
        assert settings.validate()

    def test_directories_created(self, clean_env):
        settings = Settings()

        assert settings.get_lyrics_directory() == clean_env / ".lyricsync" / "lyrics"
        assert settings.get_lyrics_directory().is_dir()

    def test_yaml_file(self, clean_env):
        config_path = clean_env / "custom.yaml"
        config_path.write_text(yaml.safe_dump({
            'lyrics': {'calibration_offset': -1.5, 'duration_tolerance': 2, 'unknown_key': 1},
            'sync': {'tick_interval': 0.5},
            'not_a_section': {'x': 1},
        }))

        settings = Settings(str(config_path))

        assert settings.lyrics.calibration_offset == -1.5
        assert settings.lyrics.duration_tolerance == 2
        assert settings.sync.tick_interval == 0.5
        assert not hasattr(settings.lyrics, 'unknown_key')

    def test_environment_overrides_file(self, clean_env, monkeypatch):
        config_path = clean_env / "custom.yaml"
        config_path.write_text(yaml.safe_dump({'lyrics': {'calibration_offset': 1.0}}))
        monkeypatch.setenv("LYRICSYNC_CALIBRATION_OFFSET", "2.25")
        monkeypatch.setenv("LYRICSYNC_LYRICS_DIR", str(clean_env / "elsewhere"))
        monkeypatch.setenv("LYRICSYNC_PROVIDER_URL", "http://localhost:3000")

        settings = Settings(str(config_path))

        assert settings.lyrics.calibration_offset == 2.25
        assert settings.get_lyrics_directory() == clean_env / "elsewhere"
        assert settings.provider.base_url == "http://localhost:3000"

    def test_invalid_offset_ignored(self, clean_env, monkeypatch):
        monkeypatch.setenv("LYRICSYNC_CALIBRATION_OFFSET", "fast")

        assert Settings().lyrics.calibration_offset == 0.0

    def test_validation_errors(self, clean_env):
        settings = Settings()
        settings.lyrics.duration_tolerance = -1
        settings.sync.tick_interval = 0
        settings.logging.level = "LOUD"

        errors = settings.validation_errors()

        assert len(errors) == 3
        assert not settings.validate()

    def test_save_and_reload(self, clean_env):
        settings = Settings()
        settings.lyrics.calibration_offset = 0.75

        saved = settings.save_config(str(clean_env / "out" / "config.yaml"))
        reloaded = Settings(str(saved))

        assert reloaded.lyrics.calibration_offset == 0.75

    def test_save_failure(self, clean_env):
        blocker = clean_env / "blocker"
        blocker.write_text("file, not a directory")
        settings = Settings()

        with pytest.raises(ConfigError):
            settings.save_config(str(blocker / "config.yaml"))
