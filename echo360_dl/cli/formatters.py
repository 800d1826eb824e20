"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from echo360_dl.models.media import Manifest, SelectedStream
from echo360_dl.models.stats import RunSummary
from echo360_dl.utils.formatting import format_duration, format_size


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    stage = getattr(error, "stage", None)

    suggestions_map = {
        "ConfigurationError": [
            "• Check the URL file: one https://echo360<TLD>/media/<ID>/public per line.",
            "• Run `echo360-dl --show-config` to review your settings.",
        ],
        "DiscoveryError": [
            "• The page may require signing in; try `--cookies cookies.txt`.",
            "• Use `--headed` to watch the browser load the page.",
            "• Try `--discovery embedded` for public pages.",
        ],
        "ManifestFetchError": [
            "• The manifest link may have expired. Run the download again.",
            "• Check your internet connection.",
        ],
        "ManifestParseError": [
            "• Echo360 may have changed its stream layout.",
            "• Run `echo360-dl inspect <MANIFEST_URL>` to see what was returned.",
        ],
        "SegmentFetchError": [
            "• Your session cookies may have expired.",
            "• Check your internet connection and try again.",
        ],
        "SegmentWriteError": [
            "• Check free disk space and permissions on the output folder.",
        ],
        "MuxingError": [
            "• Make sure FFmpeg is installed (`echo360-dl diagnose`).",
            "• Set `ffmpeg_path` in the config if FFmpeg is not on your PATH.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    if stage:
        error_text.append(f"{stage} failed. ", style="red")
    error_text.append(str(error))

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
    """Displays the current configuration."""
    console = Console()
    content = "\n".join(
        f"{key} = {value}" for key, value in sorted(config_data.items())
    )
    console.print(
        Panel(
            escape(content) or "[dim](defaults)[/dim]",
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_manifest_table(manifest: Manifest, selected: list[SelectedStream]):
    """Shows every variant of a manifest and marks the selected ones."""
    console = Console()
    chosen = {s.uri for s in selected}

    table = Table(title=f"[bold]{escape(manifest.base_uri)}[/bold]", box=box.ROUNDED)
    table.add_column("Track", justify="right", style="cyan")
    table.add_column("Quality", justify="right")
    table.add_column("URI", style="dim")
    table.add_column("Selected", justify="center")

    for variant in manifest.variants:
        mark = "[bold green]✓[/bold green]" if variant.uri in chosen else ""
        table.add_row(
            str(variant.track_index), str(variant.quality), escape(variant.uri), mark
        )
    console.print(table)


def print_summary_panel(summary: RunSummary, progress_stats: dict | None = None):
    """Displays the final summary of the download run."""
    console = Console()

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=20)
    stats_table.add_column(style="white", justify="left")

    stats_table.add_row(
        "Sources:", f"{summary.sources_processed} of {summary.sources_total}"
    )
    stats_table.add_row(
        "✓ Downloaded:", f"[bold green]{summary.videos_downloaded}[/bold green]"
    )
    if summary.videos_skipped_exists > 0:
        stats_table.add_row(
            "○ Skipped:", f"[yellow]{summary.videos_skipped_exists} (exists)[/yellow]"
        )
    if summary.failures:
        stats_table.add_row(
            "✗ Failed:", f"[bold red]{len(summary.failures)}[/bold red]"
        )

    stats_table.add_row("", "")
    stats_table.add_row(
        "Total Size:", f"[cyan]{format_size(summary.bytes_downloaded)}[/cyan]"
    )
    elapsed = summary.elapsed
    if elapsed > 0 and summary.bytes_downloaded:
        stats_table.add_row(
            "Avg. Speed:",
            f"[magenta]{format_size(summary.bytes_downloaded / elapsed)}/s[/magenta]",
        )
    stats_table.add_row("Time Elapsed:", f"[blue]{format_duration(elapsed)}[/blue]")
    if progress_stats and progress_stats.get("streams_finished"):
        stats_table.add_row(
            "Streams:", f"[green]{progress_stats['streams_finished']}[/green]"
        )

    if summary.failures:
        stats_table.add_row("", "")
        for failure in summary.failures:
            stats_table.add_row(
                f"[red]{escape(failure.stage)}[/red]",
                f"{escape(failure.label)} [dim]({escape(failure.message)})[/dim]",
            )

    if summary.aborted:
        title = "⛔ [bold]Batch Aborted[/bold]"
        border_color = "red"
    elif summary.failures:
        title = "⚠ [bold]Finished With Errors[/bold]"
        border_color = "yellow"
    else:
        title = "🎬 [bold]Download Complete![/bold]"
        border_color = "green"

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
