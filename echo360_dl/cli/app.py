"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import importlib.util
import logging
import os
from contextlib import AsyncExitStack
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from echo360_dl import __version__
from echo360_dl.api.channel import AuthenticatedChannel
from echo360_dl.core import (
    FFmpegMuxer,
    ManifestResolver,
    PipelineOrchestrator,
    SegmentFetcher,
    StreamAssembler,
    VariantSelector,
)
from echo360_dl.exceptions import Echo360Error
from echo360_dl.models.config import DownloadConfig
from echo360_dl.models.media import BatchJob
from echo360_dl.models.stats import RunSummary
from echo360_dl.storage.config_manager import ConfigManager
from echo360_dl.utils.url_list import filter_source_urls, read_url_file
from echo360_dl.web import EmbeddedSourceDiscoverer

from .formatters import (
    format_error_with_suggestions,
    print_config,
    print_manifest_table,
    print_summary_panel,
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
log = logging.getLogger("echo360_dl")

app = typer.Typer(
    name="echo360-dl",
    help=(
        "Download Echo360 lecture captures in their best quality. Use 'echo360-dl"
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
    return base_dir.expanduser() / "echo360-dl"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _load_config(cli_options: dict | None = None) -> DownloadConfig:
    try:
        return ConfigManager(CONFIG_FILE).load_config(cli_options)
    except Echo360Error as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e


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
):
    """Echo360 Video Downloader"""
    if version:
        console.print(f"[bold]echo360-dl[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    logging.getLogger("echo360_dl").setLevel("DEBUG" if verbose >= 2 else "INFO")

    if show_config:
        config = _load_config()
        print_config(
            CONFIG_FILE,
            config.model_dump(include=DownloadConfig.get_ini_keys()),
        )
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing config without asking."
    ),
):
    """Write a configuration file with the default settings."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    try:
        ConfigManager(CONFIG_FILE).save_new_config()
    except Echo360Error as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1) from e
    console.print(f"[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")
    console.print(
        "Put your media URLs in [cyan]urls.txt[/cyan] and run "
        "[cyan]echo360-dl download[/cyan]."
    )


@app.command(name="download")
def download_command(
    urls: list[str] | None = typer.Argument(  # noqa: B008
        None,
        help="Echo360 media URLs. When omitted, URLs are read from the input file.",
    ),
    input_file: Path | None = typer.Option(  # noqa: B008
        None, "-i", "--input", help="File with one media URL per line."
    ),
    output_dir: str | None = typer.Option(
        None, "-o", "--output", help="Folder to save the videos in."
    ),
    container: str | None = typer.Option(
        None, "--format", help="Output container: mp4, mkv or mov."
    ),
    discovery: str | None = typer.Option(
        None,
        "--discovery",
        help="How to find videos on a page: 'network' (browser) or 'embedded'.",
    ),
    cookies: str | None = typer.Option(
        None, "--cookies", help="Netscape cookies.txt with your Echo360 session."
    ),
    overwrite: bool | None = typer.Option(
        None, "--overwrite/--skip-existing", help="Re-download existing videos."
    ),
    fail_fast: bool | None = typer.Option(
        None,
        "--fail-fast/--keep-going",
        help="Stop the whole batch at the first failed video.",
    ),
    headed: bool = typer.Option(
        False, "--headed", help="Show the browser window during discovery."
    ),
):
    """Download videos from Echo360."""
    cli_options = {
        key: value
        for key, value in {
            "urls_file": str(input_file) if input_file else None,
            "output_dir": output_dir,
            "container_ext": container,
            "discovery": discovery,
            "cookies_file": cookies,
            "overwrite": overwrite,
            "fail_fast": fail_fast,
            "headless": False if headed else None,
        }.items()
        if value is not None
    }
    config = _load_config(cli_options)

    try:
        if urls:
            source_urls = filter_source_urls(urls)
        else:
            source_urls = read_url_file(Path(config.urls_file))
    except Echo360Error as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e

    summary, progress_stats = asyncio.run(_run_batch(config, BatchJob(source_urls)))
    print_summary_panel(summary, progress_stats)
    if not summary.succeeded:
        raise typer.Exit(code=1)


async def _run_batch(config: DownloadConfig, batch: BatchJob) -> tuple[RunSummary, dict]:
    async with AsyncExitStack() as stack:
        progress_manager = await stack.enter_async_context(ProgressManager(console))
        channel = await stack.enter_async_context(
            AuthenticatedChannel(
                connect_timeout=config.connect_timeout,
                read_timeout=config.read_timeout,
                cookies_file=config.cookies_file or None,
            )
        )

        if config.discovery == "network":
            from echo360_dl.web.network import NetworkSourceDiscoverer

            discoverer = await stack.enter_async_context(
                NetworkSourceDiscoverer(
                    channel,
                    discovery_timeout=config.discovery_timeout,
                    quiet_period=config.quiet_period,
                    headless=config.headless,
                )
            )
        else:
            discoverer = EmbeddedSourceDiscoverer(channel)

        orchestrator = PipelineOrchestrator(
            config,
            discoverer,
            ManifestResolver(channel),
            VariantSelector(),
            SegmentFetcher(channel, progress_manager),
            StreamAssembler(
                FFmpegMuxer(config.ffmpeg_path, timeout=config.mux_timeout)
            ),
        )
        summary = await orchestrator.run(batch)
        return summary, progress_manager.get_statistics()


@app.command()
def inspect(
    manifest_url: str = typer.Argument(..., help="URL of an s<n>_*.m3u8 manifest."),
    cookies: str | None = typer.Option(
        None, "--cookies", help="Netscape cookies.txt with your Echo360 session."
    ),
):
    """Show the variants of a manifest and which ones would be downloaded."""
    config = _load_config({"cookies_file": cookies} if cookies else None)

    async def _inspect():
        async with AuthenticatedChannel(
            connect_timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
            cookies_file=config.cookies_file or None,
        ) as channel:
            manifest = await ManifestResolver(channel).resolve(manifest_url)
        return manifest, VariantSelector().select(manifest)

    try:
        manifest, selected = asyncio.run(_inspect())
    except Echo360Error as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e
    print_manifest_table(manifest, selected)


@app.command()
def diagnose():
    """Diagnose common configuration and environment issues."""
    console.print("\n[bold cyan]Running diagnostics...[/bold cyan]\n")
    issues_found = False

    if CONFIG_FILE.is_file():
        console.print(f"[green]✓[/] Config file exists at: [dim]{CONFIG_FILE}[/dim]")
    else:
        console.print("[yellow]○[/] No config file; defaults are used.")

    try:
        config = ConfigManager(CONFIG_FILE).load_config()
        console.print("[green]✓[/] Configuration is valid.")
    except Echo360Error as e:
        console.print(f"[red]✗ Configuration validation failed: {e}[/red]")
        raise typer.Exit(code=1) from e

    try:
        binary = FFmpegMuxer(config.ffmpeg_path).resolve_binary()
        console.print(f"[green]✓[/] FFmpeg found: [dim]{binary}[/dim]")
    except Echo360Error as e:
        console.print(f"[red]✗ {e}[/red]")
        issues_found = True

    if config.discovery == "network":
        if importlib.util.find_spec("playwright") is not None:
            console.print("[green]✓[/] Playwright is installed.")
        else:
            console.print(
                "[red]✗ Playwright is missing.[/] Run [cyan]pip install playwright[/cyan]"
                " and [cyan]playwright install firefox[/cyan]."
            )
            issues_found = True

    urls_path = Path(config.urls_file)
    if urls_path.is_file():
        try:
            count = len(read_url_file(urls_path))
            console.print(f"[green]✓[/] {count} valid URLs in [dim]{urls_path}[/dim]")
        except Echo360Error as e:
            console.print(f"[red]✗ {e}[/red]")
            issues_found = True
    else:
        console.print(f"[yellow]○[/] URL file [dim]{urls_path}[/dim] does not exist yet.")

    console.print()
    if not issues_found:
        console.print("[bold green]✓ All checks passed! Your setup looks good.[/bold green]\n")
    else:
        console.print(
            "[bold red]✗ Some issues were found. "
            "Please review the messages above.[/bold red]\n"
        )
        raise typer.Exit(code=1)
