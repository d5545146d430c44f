# tests/test_cli.py
"""Test the command-line interface"""

import pytest
import yaml
from click.testing import CliRunner
from unittest.mock import patch

from lyricsync import __version__
from lyricsync.main import cli
from conftest import FakeProvider, SAMPLE_LRC, make_candidate


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def lrc_file(temp_dir):
    path = temp_dir / "song.lrc"
    path.write_text(SAMPLE_LRC, encoding='utf-8')
    return path


class TestBasics:

    def test_version(self, runner):
        result = runner.invoke(cli, ['--version'])

        assert result.exit_code == 0
        assert f"LyricSync v{__version__}" in result.output

    def test_help_without_command(self, runner):
        result = runner.invoke(cli, [])

        assert result.exit_code == 0
        assert "fetch" in result.output


class TestParseAndPlay:
    """Test parse and play commands"""

    def test_parse_lists_lines(self, runner, isolated_settings, lrc_file):
        result = runner.invoke(cli, ['parse', str(lrc_file)])

        assert result.exit_code == 0
        assert "[00:01.00] Hello" in result.output
        assert "[00:01.00]     Hola" in result.output
        assert "3 lines (1 translations)" in result.output

    def test_parse_without_timestamps(self, runner, isolated_settings, temp_dir):
        plain = temp_dir / "plain.lrc"
        plain.write_text("just words\nno tags", encoding='utf-8')

        result = runner.invoke(cli, ['parse', str(plain)])

        assert result.exit_code == 1
        assert "No timed lines found" in result.output

    def test_play_single_line(self, runner, isolated_settings, temp_dir):
        single = temp_dir / "single.lrc"
        single.write_text("[00:00.00]Only line", encoding='utf-8')

        result = runner.invoke(cli, ['play', str(single)])

        assert result.exit_code == 0
        assert "Only line" in result.output
        assert "Playback finished" in result.output

    def test_play_invalid_position(self, runner, isolated_settings, lrc_file):
        result = runner.invoke(cli, ['play', str(lrc_file), '--position', 'soon'])

        assert result.exit_code == 1
        assert "Invalid position" in result.output


class TestFetch:
    """Test the fetch command"""

    def test_fetch_downloads_and_caches(self, runner, isolated_settings, temp_dir):
        provider = FakeProvider(candidates=[make_candidate(1, 200)], lyrics={1: SAMPLE_LRC})

        with patch('lyricsync.session.get_lrclib_client', return_value=provider):
            result = runner.invoke(cli, ['fetch', 'A', 'B', '--duration', '3:20', '--no-play'])

        assert result.exit_code == 0
        assert "Source: LRCLIB #1" in result.output
        assert provider.search_calls == ["A - B"]
        assert (temp_dir / "lyrics" / "A - B.lrc").read_text(encoding='utf-8') == SAMPLE_LRC

    def test_fetch_prefers_local_file(self, runner, isolated_settings, temp_dir):
        (temp_dir / "lyrics").mkdir(exist_ok=True)
        (temp_dir / "lyrics" / "A - B.lrc").write_text(SAMPLE_LRC, encoding='utf-8')
        provider = FakeProvider()

        with patch('lyricsync.session.get_lrclib_client', return_value=provider):
            result = runner.invoke(cli, ['fetch', 'A', 'B', '-d', '200', '--no-play'])

        assert result.exit_code == 0
        assert "Source: local lyrics file" in result.output
        assert provider.search_calls == []

    def test_fetch_nothing_found(self, runner, isolated_settings):
        provider = FakeProvider()

        with patch('lyricsync.session.get_lrclib_client', return_value=provider):
            result = runner.invoke(cli, ['fetch', 'A', 'B', '-d', '200'])

        assert result.exit_code == 0
        assert "A - B" in result.output
        assert "No lyrics found" in result.output

    def test_fetch_requires_duration(self, runner, isolated_settings):
        with patch('lyricsync.session.get_lrclib_client', return_value=FakeProvider()):
            result = runner.invoke(cli, ['fetch', 'A', 'B'])

        assert result.exit_code == 1
        assert "Track duration is required" in result.output


class TestTrackCommands:
    """Test disable, enable and path"""

    def test_disable_enable_cycle(self, runner, isolated_settings, temp_dir):
        marker = temp_dir / "lyrics" / "A - B.disabled"

        result = runner.invoke(cli, ['disable', 'A', 'B'])
        assert "Lyrics disabled for A - B" in result.output
        assert marker.exists()

        result = runner.invoke(cli, ['disable', 'A', 'B'])
        assert "Lyrics already disabled" in result.output

        result = runner.invoke(cli, ['enable', 'A', 'B'])
        assert "Lyrics enabled for A - B" in result.output
        assert not marker.exists()

        result = runner.invoke(cli, ['enable', 'A', 'B'])
        assert "Lyrics were not disabled" in result.output

    def test_disabled_track_is_reported_by_fetch(self, runner, isolated_settings):
        runner.invoke(cli, ['disable', 'A', 'B'])
        provider = FakeProvider(candidates=[make_candidate(1, 200)], lyrics={1: SAMPLE_LRC})

        with patch('lyricsync.session.get_lrclib_client', return_value=provider):
            result = runner.invoke(cli, ['fetch', 'A', 'B', '-d', '200', '--no-play'])

        assert "Lyrics are disabled for this track" in result.output
        assert provider.search_calls == []

    def test_path(self, runner, isolated_settings, temp_dir):
        result = runner.invoke(cli, ['path', 'AC/DC', 'Thunderstruck'])

        assert result.exit_code == 0
        assert str(temp_dir / "lyrics" / "ACDC - Thunderstruck.lrc") in result.output
        assert "(no lyrics file yet)" in result.output


class TestConfigCommands:
    """Test config show and config set"""

    def test_show(self, runner, isolated_settings):
        result = runner.invoke(cli, ['config', 'show'])

        assert result.exit_code == 0
        assert "Calibration offset: +0.00s" in result.output
        assert "https://lrclib.net" in result.output

    def test_set_writes_user_config(self, runner, isolated_settings, temp_dir):
        result = runner.invoke(cli, ['config', 'set', '--offset', '1.5', '--tolerance', '2'])

        assert result.exit_code == 0
        assert "Configuration updated" in result.output

        saved = yaml.safe_load((temp_dir / ".lyricsync" / "config.yaml").read_text(encoding='utf-8'))
        assert saved['lyrics']['calibration_offset'] == 1.5
        assert saved['lyrics']['duration_tolerance'] == 2.0

    def test_set_nothing(self, runner, isolated_settings):
        result = runner.invoke(cli, ['config', 'set'])

        assert "No changes specified" in result.output

    def test_set_negative_tolerance(self, runner, isolated_settings):
        result = runner.invoke(cli, ['config', 'set', '--tolerance', '-1'])

        assert result.exit_code == 1
        assert "must not be negative" in result.output
