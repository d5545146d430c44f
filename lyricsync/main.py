"""
Main CLI interface for LyricSync

This module provides the command-line interface for following lyrics along a
playback clock, looking lyrics up online and managing per-track settings.

The CLI is built using Click framework and provides:
- Lyric file inspection and playback (parse, play)
- Online lookup with the full acquisition pipeline (fetch)
- Per-track lyric switches and file locations (disable, enable, path)
- Configuration management (config show, config set)
"""

import sys
import asyncio
import click
import functools
from pathlib import Path

from . import __version__
from .config.settings import get_settings, reload_settings
from .lyrics.models import LyricsSource
from .lyrics.parser import parse_lrc, format_lrc_timestamp
from .lyrics.store import LyricsFileStore, OverrideStore
from .sync.clock import PlaybackClock, ManualPlaybackSource
from .sync.scheduler import EventLoopScheduler
from .sync.synchronizer import TimelineSynchronizer
from .session import create_session
from .utils.logger import configure_from_settings, get_logger
from .utils.helpers import format_duration, parse_duration_string, truncate_string


# Initialize logging system from configuration settings
configure_from_settings()
logger = get_logger(__name__)


def handle_error(func):
    """
    Decorator to handle common CLI errors gracefully

    Wraps CLI command functions to provide consistent error handling across
    all commands. Catches common exceptions and provides user-friendly error
    messages while ensuring proper logging and exit codes.

    Args:
        func: The CLI command function to wrap

    Returns:
        Wrapped function with error handling
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo(click.style("\n\nOperation cancelled by user", fg='yellow'))
            sys.exit(130)  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Command failed: {e}")
            click.echo(click.style(f"Error: {e}", fg='red'), err=True)
            sys.exit(1)
    return wrapper


def parse_seconds(value, name: str):
    """Convert a CLI time argument ("95", "1:35", "1:35.5") to seconds or exit"""
    if value is None:
        return None
    seconds = parse_duration_string(value)
    if seconds is None:
        click.echo(click.style(f"Invalid {name}: {value}", fg='red'), err=True)
        sys.exit(1)
    return seconds


def echo_line(text: str) -> None:
    click.echo(click.style(text, fg='cyan', bold=True))


async def follow(synchronizer: TimelineSynchronizer) -> None:
    """Run the synchronizer's polling tick until the timeline finishes"""
    if not synchronizer.is_running:
        return
    finished = asyncio.Event()
    synchronizer.on_finished = finished.set
    synchronizer.start()
    synchronizer.tick()
    try:
        if synchronizer.is_running:
            await finished.wait()
    finally:
        synchronizer.shutdown()


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--config', type=click.Path(), help='Path to config file')
@click.pass_context
def cli(ctx, version, verbose, config):
    """
    LyricSync - Follow time-tagged lyrics along a playback clock

    Parses LRC lyric files, looks lyrics up on LRCLIB when no local file
    exists, and prints each line as playback reaches it.
    """
    ctx.ensure_object(dict)

    if version:
        click.echo(f"LyricSync v{__version__}")
        return

    if config:
        reload_settings(config)
        configure_from_settings()
        click.echo(f"Loaded config: {config}")

    if verbose:
        ctx.obj['verbose'] = True
        logger.info("Verbose mode enabled")

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@handle_error
def parse(file):
    """
    Show the timed lines of an LRC file

    Translation lines are indented under the line they translate.
    """
    settings = get_settings()
    text = Path(file).read_text(encoding='utf-8')
    document = parse_lrc(text, translation_tolerance=settings.lyrics.translation_tolerance)

    if document.is_empty:
        click.echo(click.style(f"No timed lines found in {file}", fg='yellow'))
        sys.exit(1)

    for line in document:
        prefix = "    " if line.is_translation else ""
        click.echo(f"[{format_lrc_timestamp(line.timestamp)}] {prefix}{line.text}")

    translations = sum(1 for line in document if line.is_translation)
    click.echo(f"\n{len(document)} lines ({translations} translations), "
               f"last at {format_duration(document[-1].timestamp)}")


@cli.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False))
@click.option('--position', '-p', default='0', help='Start position (seconds or m:ss)')
@click.option('--offset', type=float, help='Calibration offset in seconds')
@handle_error
def play(file, position, offset):
    """
    Follow an LRC file in real time

    Lines are printed as the clock reaches them, starting from --position.
    """
    settings = get_settings()
    start = parse_seconds(position, 'position')
    offset = settings.lyrics.calibration_offset if offset is None else offset

    document = parse_lrc(Path(file).read_text(encoding='utf-8'),
                         translation_tolerance=settings.lyrics.translation_tolerance)
    if document.is_empty:
        click.echo(click.style(f"No timed lines found in {file}", fg='yellow'))
        sys.exit(1)

    async def run():
        clock = PlaybackClock(offset=offset)
        synchronizer = TimelineSynchronizer(
            clock, EventLoopScheduler(), echo_line, tick_interval=settings.sync.tick_interval
        )
        synchronizer.resynchronize(document, start, clock.offset)
        await follow(synchronizer)

    click.echo(f"Playing {Path(file).name} from {format_duration(start)} (offset {offset:+.1f}s)\n")
    asyncio.run(run())
    click.echo(click.style("\nPlayback finished", fg='green'))


@cli.command()
@click.argument('artist')
@click.argument('title')
@click.option('--album', default='', help='Album name')
@click.option('--duration', '-d', help='Track duration (seconds or m:ss)')
@click.option('--position', '-p', default='0', help='Current position (seconds or m:ss)')
@click.option('--no-play', is_flag=True, help='Resolve lyrics without following them')
@handle_error
def fetch(artist, title, album, duration, position, no_play):
    """
    Resolve lyrics for a track and follow them

    Uses the local lyrics directory first, then LRCLIB. Downloaded lyrics
    are cached for next time.
    """
    track_duration = parse_seconds(duration, 'duration')
    start = parse_seconds(position, 'position')

    async def run():
        clock = PlaybackClock(offset=get_settings().lyrics.calibration_offset)
        source = ManualPlaybackSource(artist, title, album, duration=track_duration,
                                      position=start, clock=clock)
        session = create_session(source, status_sink=echo_line, clock=clock)
        try:
            resolution = await session.start_lyrics()
            if resolution is not None and resolution.success and not no_play:
                await follow(session.synchronizer)
            return resolution
        finally:
            session.close()

    resolution = asyncio.run(run())

    if resolution is None:
        click.echo(click.style("Track duration is required (--duration)", fg='red'), err=True)
        sys.exit(1)

    if resolution.source is LyricsSource.LOCAL:
        click.echo("Source: local lyrics file")
    elif resolution.source is LyricsSource.ONLINE:
        candidate = resolution.candidate
        click.echo(f"Source: LRCLIB #{candidate.id} "
                   f"({truncate_string(candidate.title, 40)}, {format_duration(candidate.duration_seconds)})")
    elif resolution.source is LyricsSource.DISABLED:
        click.echo(click.style("Lyrics are disabled for this track", fg='yellow'))
    else:
        click.echo(click.style(f"No lyrics found: {resolution.error_message}", fg='yellow'))


@cli.command()
@click.argument('artist')
@click.argument('title')
@handle_error
def disable(artist, title):
    """Disable lyrics for a track"""
    store = OverrideStore(get_settings().get_lyrics_directory())
    if store.set_disabled(artist, title, True):
        click.echo(f"Lyrics disabled for {artist} - {title}")
    else:
        click.echo(f"Lyrics already disabled for {artist} - {title}")


@cli.command()
@click.argument('artist')
@click.argument('title')
@handle_error
def enable(artist, title):
    """Enable lyrics for a track again"""
    store = OverrideStore(get_settings().get_lyrics_directory())
    if store.set_disabled(artist, title, False):
        click.echo(f"Lyrics enabled for {artist} - {title}")
    else:
        click.echo(f"Lyrics were not disabled for {artist} - {title}")


@cli.command()
@click.argument('artist')
@click.argument('title')
@handle_error
def path(artist, title):
    """Show where a track's lyric file is stored"""
    store = LyricsFileStore(get_settings().get_lyrics_directory())
    lyrics_path = store.path_for(artist, title)
    click.echo(str(lyrics_path))
    if not lyrics_path.is_file():
        click.echo(click.style("(no lyrics file yet)", fg='yellow'))


# Configuration commands group
@cli.group()
def config():
    """
    Configuration management

    Command group for viewing and modifying calibration, storage and
    candidate filtering settings.
    """
    pass


@config.command()
@handle_error
def show():
    """Show current configuration"""
    settings = get_settings()

    click.echo("Current Configuration:\n")

    click.echo("Lyrics:")
    click.echo(f"   Directory: {settings.get_lyrics_directory()}")
    click.echo(f"   Calibration offset: {settings.lyrics.calibration_offset:+.2f}s")
    click.echo(f"   Duration tolerance: {settings.lyrics.duration_tolerance}s")
    click.echo(f"   CUE track threshold: {settings.lyrics.cue_track_threshold}s")
    click.echo(f"   Search retries: {settings.lyrics.search_retries}")
    click.echo(f"   Cache downloads: {settings.lyrics.cache_downloads}")

    click.echo("\nSync:")
    click.echo(f"   Tick interval: {settings.sync.tick_interval}s")

    click.echo("\nProvider:")
    click.echo(f"   URL: {settings.provider.base_url}")
    click.echo(f"   Timeout: {settings.network.request_timeout}s")

    errors = settings.validation_errors()
    if errors:
        click.echo(click.style("\nProblems:", fg='yellow'))
        for error in errors:
            click.echo(f"   • {error}")


@config.command(name='set')
@click.option('--offset', type=float, help='Set calibration offset in seconds')
@click.option('--lyrics-dir', type=click.Path(file_okay=False), help='Set lyrics directory')
@click.option('--tolerance', type=float, help='Set candidate duration tolerance in seconds')
@handle_error
def set_config(offset, lyrics_dir, tolerance):
    """
    Update configuration settings

    Changes are written to the user configuration file and persist across
    runs.
    """
    settings = get_settings()
    changes = []

    if offset is not None:
        settings.lyrics.calibration_offset = offset
        changes.append(f"Calibration offset: {offset:+.2f}s")

    if lyrics_dir:
        settings.lyrics.directory = lyrics_dir
        changes.append(f"Lyrics directory: {lyrics_dir}")

    if tolerance is not None:
        if tolerance < 0:
            click.echo(click.style("Tolerance must not be negative", fg='red'), err=True)
            sys.exit(1)
        settings.lyrics.duration_tolerance = tolerance
        changes.append(f"Duration tolerance: {tolerance}s")

    if changes:
        saved = settings.save_config()
        click.echo(f"Configuration updated ({saved}):")
        for change in changes:
            click.echo(f"   • {change}")
    else:
        click.echo("No changes specified")


# Entry point for module execution
if __name__ == '__main__':
    cli()
