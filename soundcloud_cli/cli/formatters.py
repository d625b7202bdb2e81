"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from soundcloud_cli.models.config import DEFAULT_OUTPUT_TEMPLATE, DownloadConfig
from soundcloud_cli.models.stats import DownloadStats
from soundcloud_cli.utils.formatting import format_duration, format_size


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "InvalidInputError": [
            "• Use a track URL like https://soundcloud.com/<artist>/<track>.",
            "• Use a playlist URL like https://soundcloud.com/<artist>/sets/<name>.",
        ],
        "TrackUnavailableError": [
            "• The track may be blocked in your country.",
            "• The track may only offer Go+ (high quality) transcodings.",
        ],
        "ClientIdError": [
            "• SoundCloud may have changed its web app.",
            "• Pass a client_id explicitly: `soundcloud-cli init --client-id <ID>`.",
        ],
        "RetriesExhaustedError": [
            "• SoundCloud did not answer after several attempts.",
            "• Check your internet connection and try again later.",
        ],
        "ClientResponseError": [
            "• Your client_id may have expired. Run `soundcloud-cli init --force`.",
            "• The SoundCloud API might be temporarily unavailable.",
        ],
        "ConfigurationError": [
            "• Run `soundcloud-cli init` to create a configuration file.",
            "• Run `soundcloud-cli validate` to check your settings.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration, partially hiding the client_id."""
    console = Console()
    lines = []
    for key, value in config_data.items():
        if key == "client_id" and value:
            value = f"{value[:6]}…"
        lines.append(f"{key} = {value}")

    console.print(
        Panel(
            "\n".join(lines),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_validation_table(config: DownloadConfig):
    """Displays a summary of the current settings."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    client_id = (
        "[green]✓ Configured[/green]"
        if config.client_id
        else "[yellow]Bootstrapped on each run[/yellow]"
    )
    table.add_row("Client ID:", client_id)
    table.add_row("Max Workers:", str(config.max_workers))
    table.add_row(
        "Retries:", f"{config.max_attempts} attempts, {config.retry_delay}s apart"
    )
    table.add_row("M3U Playlists:", "✗ Disabled" if config.no_m3u else "✓ Enabled")
    table.add_row("Output Template:", f"[dim]{config.output_template}[/dim]")

    console.print(
        Panel(
            table,
            title="[bold green]✓ Validated Settings[/bold green]",
            border_style="green",
        )
    )


def print_summary_panel(stats: DownloadStats, progress_stats: dict | None = None):
    """Displays the final summary of the download session."""
    console = Console()
    duration_s = stats.elapsed

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=20)
    stats_table.add_column(style="white", justify="left")

    stats_table.add_row(
        "✓ Downloaded:", f"[bold green]{stats.tracks_downloaded}[/bold green]"
    )
    if stats.tracks_skipped_exists > 0:
        stats_table.add_row(
            "○ Skipped:", f"[yellow]{stats.tracks_skipped_exists} (exists)[/yellow]"
        )
    if stats.tracks_unavailable > 0:
        stats_table.add_row(
            "⚠ Unavailable:", f"[yellow]{stats.tracks_unavailable}[/yellow]"
        )
    if stats.tracks_cancelled > 0:
        stats_table.add_row(
            "■ Cancelled:", f"[yellow]{stats.tracks_cancelled}[/yellow]"
        )
    if stats.tracks_failed > 0:
        stats_table.add_row("✗ Failed:", f"[bold red]{stats.tracks_failed}[/bold red]")

    stats_table.add_row("", "")
    stats_table.add_row(
        "Total Size:", f"[cyan]{format_size(stats.total_size_downloaded)}[/cyan]"
    )
    avg_speed = stats.total_size_downloaded / duration_s if duration_s > 0 else 0
    stats_table.add_row("Avg. Speed:", f"[magenta]{format_size(avg_speed)}/s[/magenta]")
    stats_table.add_row("Time Elapsed:", f"[blue]{format_duration(duration_s)}[/blue]")

    if progress_stats:
        stats_table.add_row(
            "Peak Concurrent:",
            f"[green]{progress_stats.get('peak_concurrent', 0)}[/green]",
        )

    if stats.tracks_cancelled:
        title, border_color = "■ [bold]Download Cancelled[/bold]", "yellow"
    else:
        title, border_color = "🎵 [bold]Download Complete![/bold]", "green"

    console.print()
    console.print(
        Panel(
            stats_table,
            title=title,
            border_style=border_color,
            box=box.DOUBLE,
            expand=False,
            padding=(1, 2),
        )
    )
    console.print()


def print_output_template_help():
    """Displays a help panel for output path templates."""
    console = Console()

    ph_table = Table(
        box=box.ROUNDED,
        title="[bold]Output Path Placeholders[/bold]",
        title_style="",
    )
    ph_table.add_column("Placeholder", style="bold magenta", no_wrap=True)
    ph_table.add_column("Description")
    ph_table.add_column("Example")

    ph_table.add_row("{artist}", "Username of the uploader.", "'Some Producer'")
    ph_table.add_row("{title}", "Title of the track.", "'Night Drive (VIP)'")
    ph_table.add_row("{track_id}", "Numeric SoundCloud track id.", "'123456789'")
    ph_table.add_row(
        "{ext}", "Extension of the selected transcoding.", "'mp3' or 'opus'"
    )

    console.print(ph_table)
    console.print(
        Panel(
            Text.from_markup(
                f"[bold]Default Template:[/bold] `{DEFAULT_OUTPUT_TEMPLATE}`\n"
                "Playlist tracks are saved in a folder named after the playlist."
            ),
            border_style="yellow",
            padding=(1, 2),
        )
    )
