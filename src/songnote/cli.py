#!/usr/bin/env python3
"""Command-line interface for songnote.

Resolve song links and post clipped video notes to Telegram.
"""

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from songnote import create_pipeline, create_resolver
from songnote.config import ClipConfig
from songnote.exceptions import SongNoteError
from songnote.models.metadata import PresentationStrings, Resolution
from songnote.services.presentation import build_presentation, format_link_message
from songnote.settings import DEFAULT_CONFIG_PATH, load_settings

logger = logging.getLogger("songnote")

ffmpeg_logger = logging.getLogger("songnote.ffmpeg")


def setup_logging(
    verbose: bool = False, console: Console | None = None, level: str = "INFO"
) -> None:
    """Configure logging with Rich handler.

    Existing root handlers are cleared so the function can be called again
    with a different console.

    Args:
        verbose: If True, log songnote at DEBUG (ffmpeg output included).
            Otherwise songnote logs at ``level`` and everything else at
            WARNING.
        console: Optional Console instance to use for RichHandler.
        level: songnote log level when not verbose.
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = RichHandler(
        rich_tracebacks=True,
        show_path=False,
        console=console,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    root_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root_logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else level)


def validate_custom_names(song_name: str | None, author_name: str | None) -> None:
    """Require both custom names or neither."""
    if bool(song_name) != bool(author_name):
        raise click.UsageError(
            "Both --songname and --authorname must be provided together"
        )


def _cell(value: str | None) -> str:
    return escape(value) if value else "[dim]-[/dim]"


def print_resolution(
    console: Console,
    resolution: Resolution,
    presentation: PresentationStrings,
    message_text: str,
) -> None:
    """Print resolved metadata, presentation strings and the stage trace."""
    metadata = resolution.metadata

    table = Table(title="Resolution", show_header=False, title_justify="left")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Link", escape(resolution.source_link))
    table.add_row("Title", _cell(metadata.title))
    table.add_row("Artist", _cell(metadata.artist))
    table.add_row("Video URL", _cell(metadata.video_url))
    table.add_row("Download", escape(resolution.download_target))
    table.add_row("File stem", escape(presentation.file_stem))
    table.add_row("Message", escape(message_text), style="green")
    console.print(table)

    trace = Table(title="Stages", title_justify="left")
    trace.add_column("Stage", style="cyan")
    trace.add_column("Status")
    trace.add_column("Detail", style="dim")
    for outcome in resolution.trace:
        if outcome.ok:
            fragment = outcome.fragment
            detail = (
                f"title={fragment.title!r} artist={fragment.artist!r} "
                f"video_url={fragment.video_url!r}"
                if fragment
                else ""
            )
            trace.add_row(outcome.stage, "[green]ok[/green]", escape(detail))
        else:
            trace.add_row(
                outcome.stage, "[red]failed[/red]", escape(outcome.error or "")
            )
    console.print(trace)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """Turn song links into Telegram video notes."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose=verbose)


@main.command(name="resolve")
@click.argument("url", metavar="URL")
@click.option("--songname", "song_name", help="Custom song name.")
@click.option("--authorname", "author_name", help="Custom author name.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def resolve_cmd(
    url: str, song_name: str | None, author_name: str | None, as_json: bool
) -> None:
    """Resolve title, artist and video URL for a song link.

    Nothing is downloaded or sent.

    \b
    Examples:
      songnote resolve "https://song.link/s/TRACK_ID"
      songnote resolve "https://album.link/i/ID" --json
    """
    validate_custom_names(song_name, author_name)
    console = Console()

    try:
        with create_resolver() as resolver:
            resolution = resolver.resolve(url)
        presentation = build_presentation(
            resolution.metadata,
            resolution.source_link,
            song_name=song_name,
            author_name=author_name,
        )
        message_text = format_link_message(presentation, resolution.source_link)

        if as_json:
            data = {
                "resolution": resolution.model_dump(),
                "presentation": presentation.model_dump(),
                "download_target": resolution.download_target,
                "message": message_text,
            }
            json.dump(data, sys.stdout, indent=2, ensure_ascii=False, default=str)
        else:
            print_resolution(console, resolution, presentation, message_text)

    except SongNoteError as e:
        logger.error(str(e))
        raise click.ClickException(str(e)) from e
    except Exception as e:
        logger.exception("Unexpected error")
        raise click.ClickException(f"Unexpected error: {e}") from e


@main.command(name="send")
@click.option("--url", required=True, help="Song link (song.link / album.link).")
@click.option(
    "--start", type=int, required=True, help="Clip start time in seconds."
)
@click.option(
    "--duration",
    type=int,
    required=True,
    help="Clip duration in seconds (10-60).",
)
@click.option("--songname", "song_name", help="Custom song name.")
@click.option("--authorname", "author_name", help="Custom author name.")
@click.option(
    "--cookies",
    type=click.Path(exists=True, path_type=Path),
    help="Path to cookies.txt for YouTube authentication.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Path to the JSON config file.",
)
@click.option(
    "-t",
    "--test",
    "use_test_channel",
    is_flag=True,
    help="Post to the test channel (chat_id_test).",
)
@click.option(
    "--keep/--remove",
    "keep_files",
    default=False,
    help="Keep or remove the working directory afterwards.",
)
@click.option(
    "--normalize",
    is_flag=True,
    help="Re-time the downloaded video before cutting.",
)
@click.pass_context
def send_cmd(
    ctx: click.Context,
    url: str,
    start: int,
    duration: int,
    song_name: str | None,
    author_name: str | None,
    cookies: Path | None,
    config_path: Path,
    use_test_channel: bool,
    keep_files: bool,
    normalize: bool,
) -> None:
    """Download a song's video, cut a square clip and post it.

    Posts a MarkdownV2 link message followed by the clip as a round
    video note.

    \b
    Examples:
      songnote send --url "https://song.link/s/ID" --start 42 --duration 30
      songnote send --url URL --start 0 --duration 15 -t --keep
      songnote send --url URL --start 60 --duration 20 \\
        --songname "Anthem" --authorname "Band"
    """
    validate_custom_names(song_name, author_name)
    console = Console()

    try:
        clip = ClipConfig.create(
            start, duration, keep_files=keep_files, normalize=normalize
        )
        settings = load_settings(config_path)
        setup_logging(verbose=ctx.obj["verbose"], level=settings.log_level)
        if cookies is not None:
            settings = settings.model_copy(update={"cookies_file": cookies})

        with create_pipeline(
            settings,
            use_test_channel=use_test_channel,
            on_ffmpeg_output=ffmpeg_logger.debug,
        ) as pipeline:
            result = pipeline.run(
                url, clip, song_name=song_name, author_name=author_name
            )

        console.print(f"[green]Sent:[/green] {escape(result.message_text)}")
        if not result.cleaned_up:
            console.print(f"[dim]Files kept in {result.clip_path.parent}[/dim]")

    except SongNoteError as e:
        logger.error(str(e))
        raise click.ClickException(str(e)) from e
    except Exception as e:
        logger.exception("Unexpected error")
        raise click.ClickException(f"Unexpected error: {e}") from e


if __name__ == "__main__":
    main()
