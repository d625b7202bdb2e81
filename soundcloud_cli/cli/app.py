"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import contextlib
import logging
import os
import signal
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from soundcloud_cli import __version__
from soundcloud_cli.api.client_id import ClientIdFetcher
from soundcloud_cli.client import SoundCloudClient
from soundcloud_cli.core.download_manager import DownloadManager
from soundcloud_cli.exceptions import ClientIdError, SoundCloudCliError
from soundcloud_cli.models.config import ClientConfig
from soundcloud_cli.models.results import ResolvedMedia
from soundcloud_cli.storage.config_manager import ConfigManager
from soundcloud_cli.utils.path import parse_soundcloud_url

from .formatters import (
    print_config,
    print_output_template_help,
    print_summary_panel,
    print_validation_table,
)
from .progress_manager import ProgressManager

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("soundcloud_cli")

app = typer.Typer(
    name="soundcloud-cli",
    help=(
        "Download tracks, albums and playlists from SoundCloud. Use 'soundcloud-cli"
        " <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "soundcloud-cli"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
    output_help: bool = typer.Option(
        False,
        "--output-help",
        help="Show detailed help for formatting the output path and exit.",
        is_eager=True,
    ),
):
    """SoundCloud Downloader CLI"""
    if output_help:
        print_output_template_help()
        raise typer.Exit()

    if version:
        console.print(f"[bold]soundcloud-cli[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("soundcloud_cli").setLevel(log_level)

    if show_config:
        if not CONFIG_FILE.is_file():
            console.print(
                "[red]✗ Config file not found.[/] Run [cyan]soundcloud-cli init[/cyan]"
                " first."
            )
            raise typer.Exit(code=1)
        config_manager = ConfigManager(CONFIG_FILE)
        config_manager.load_config()
        print_config(CONFIG_FILE, config_manager.get_config_as_dict())
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    client_id: str | None = typer.Option(
        None,
        "--client-id",
        help="Use this client_id instead of fetching one from soundcloud.com.",
    ),
    workers: int | None = typer.Option(
        None, "-w", "--workers", help="Default number of simultaneous downloads."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration."
    ),
):
    """Initialize the configuration, fetching a client_id if none is given."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    async def _init_async():
        settings = {}
        if client_id:
            settings["client_id"] = client_id
            console.print("[green]✓ Using the provided client_id.[/green]")
        else:
            console.print("\n[cyan]Fetching a client_id from soundcloud.com...[/cyan]")
            try:
                settings["client_id"] = await ClientIdFetcher().fetch()
            except ClientIdError as e:
                console.print(f"[red]✗ Failed to fetch a client_id: {e}[/red]")
                raise typer.Exit(code=1) from e
            console.print("[green]✓ client_id fetched successfully.[/green]")
        if workers is not None:
            settings["max_workers"] = workers

        ConfigManager(CONFIG_FILE).save_new_config(settings)
        console.print(
            f"\n[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]"
        )
        console.print(
            "Ready to download! Try: [cyan]soundcloud-cli download <URL>[/cyan]"
        )

    asyncio.run(_init_async())


def _read_urls_from_stdin() -> list[str]:
    """Reads URLs from stdin, one per line."""
    if sys.stdin.isatty():
        console.print(
            "[yellow]⚠️  No input detected on stdin. Please pipe URLs or redirect"
            " a file.[/yellow]"
        )
        console.print(
            "[dim]Examples:[/dim]\n"
            "  [cyan]cat urls.txt | soundcloud-cli download --stdin[/cyan]\n"
            "  [cyan]soundcloud-cli download --stdin < urls.txt[/cyan]"
        )
        raise typer.Exit(code=1)

    urls = [
        line.strip()
        for line in sys.stdin
        if line.strip() and not line.startswith("#")
    ]
    if not urls:
        console.print("[yellow]⚠️  No valid URLs found in stdin.[/yellow]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ Read {len(urls)} URLs from stdin.[/green]")
    return urls


async def _ensure_client_id(client: SoundCloudClient) -> None:
    """Bootstraps a client_id when the configuration does not carry one."""
    if client.client_id:
        return
    console.print("[dim]No client_id configured, fetching one...[/dim]")
    await client.set_client_id()


def _install_cancel_handler(manager: DownloadManager) -> None:
    """Turns Ctrl+C into a cooperative cancellation of the download session."""
    loop = asyncio.get_running_loop()
    with contextlib.suppress(NotImplementedError):
        loop.add_signal_handler(signal.SIGINT, manager.cancel)


@app.command(name="download")
def download_command(
    urls: list[str] | None = typer.Argument(  # noqa: B008
        None, help="One or more SoundCloud URLs or paths to files containing URLs."
    ),
    output_template: str | None = typer.Option(
        None,
        "-o",
        "--output",
        help="File name template. Use soundcloud-cli --output-help for placeholders.",
    ),
    output_dir: Path = typer.Option(  # noqa: B008
        Path("."), "-d", "--dir", help="Directory to download into."
    ),
    workers: int | None = typer.Option(
        None,
        "-w",
        "--workers",
        help="Number of simultaneous downloads (overrides the config default).",
    ),
    offset: int = typer.Option(
        0, "--offset", help="Skip this many tracks at the start of a playlist."
    ),
    limit: int = typer.Option(
        0, "--limit", help="Download at most this many playlist tracks (0 = all)."
    ),
    no_m3u: bool | None = typer.Option(
        None,
        "--no-m3u/--m3u",
        help="Do not create a .m3u file when downloading a playlist.",
    ),
    stdin: bool = typer.Option(
        False, "--stdin", help="Read URLs from standard input, one URL per line."
    ),
):
    """Download tracks and playlists from SoundCloud."""
    if stdin:
        urls = _read_urls_from_stdin()
    elif not urls:
        console.print(
            "[red]✗ No URLs provided.[/red] "
            "Use: [cyan]soundcloud-cli download <URL>[/cyan] or [cyan]--stdin[/cyan]"
        )
        raise typer.Exit(code=1)

    cli_options = {
        key: value
        for key, value in {
            "source_urls": urls,
            "output_template": output_template,
            "output_dir": str(output_dir),
            "max_workers": workers,
            "offset": offset,
            "limit": limit,
            "no_m3u": no_m3u,
        }.items()
        if value is not None
    }

    config = ConfigManager(CONFIG_FILE).load_config(cli_options)

    async def _download_async():
        manager = None
        progress_stats = None

        async with SoundCloudClient(config.client_config()) as client:
            await _ensure_client_id(client)
            async with ProgressManager(console=console) as progress_manager:
                manager = DownloadManager(config, client, progress_manager)
                _install_cancel_handler(manager)
                console.print("[bold cyan]🎵 Starting download session...[/bold cyan]")
                await manager.execute_downloads()
                progress_stats = progress_manager.get_statistics()

        if manager:
            print_summary_panel(manager.stats, progress_stats)

    asyncio.run(_download_async())


@app.command()
def resolve(
    url: str = typer.Argument(..., help="A SoundCloud track or playlist URL."),
    offset: int = typer.Option(0, "--offset", help="Playlist tracks to skip."),
    limit: int = typer.Option(0, "--limit", help="Playlist tracks to resolve."),
):
    """Print the direct media URL of a track or of every playlist track."""
    url_info = parse_soundcloud_url(url)
    if not url_info:
        console.print(f"[red]✗ Invalid or unsupported URL: {escape(url)}[/red]")
        raise typer.Exit(code=1)

    if CONFIG_FILE.is_file():
        client_config = ConfigManager(CONFIG_FILE).load_config().client_config()
    else:
        client_config = ClientConfig()

    async def _resolve_async():
        async with SoundCloudClient(client_config) as client:
            await _ensure_client_id(client)
            if url_info[0] == "playlist":
                tracks = [
                    t async for t in client.playlists.get_tracks(url, offset, limit)
                ]
            else:
                tracks = [await client.tracks.get(url)]

            table = Table(show_header=True, header_style="bold cyan")
            table.add_column("ID", style="dim", no_wrap=True)
            table.add_column("Title")
            table.add_column("Media URL / Reason", overflow="fold")
            for track in tracks:
                result = await client.get_download_url(track)
                if isinstance(result, ResolvedMedia):
                    outcome = escape(result.url)
                else:
                    outcome = f"[yellow]{escape(str(result))}[/yellow]"
                table.add_row(str(track.id), escape(track.title), outcome)
            console.print(table)

    asyncio.run(_resolve_async())


@app.command()
def validate():
    """Validate the current configuration."""
    try:
        config_manager = ConfigManager(CONFIG_FILE)
        config = config_manager.load_config()
        print_validation_table(config)
    except SoundCloudCliError as e:
        console.print(f"[red]✗ Configuration is invalid: {e}[/red]")
        raise typer.Exit(code=1) from e
