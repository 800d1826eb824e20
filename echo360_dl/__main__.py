"""
Entry point for ``echo360-dl`` and ``python -m echo360_dl``.

Runs the Typer app and maps whatever escapes it to an exit code: 130 when the
user interrupts a batch, 1 for any error that reached the top level.
"""

import asyncio
import logging
import sys

import typer
from rich.console import Console

from echo360_dl.cli.app import app
from echo360_dl.cli.formatters import format_error_with_suggestions
from echo360_dl.exceptions import Echo360Error

EXIT_INTERRUPTED = 130


def main() -> None:
    # Lecture titles are often non-ASCII.
    for stream in (sys.stdout, sys.stderr):
        if hasattr(stream, "reconfigure") and (stream.encoding or "").lower() != "utf-8":
            stream.reconfigure(encoding="utf-8", errors="replace")

    console = Console(stderr=True)

    try:
        app()
    except (typer.Exit, typer.Abort):
        pass
    except (KeyboardInterrupt, asyncio.CancelledError):
        console.print(
            "\n[yellow]Operation cancelled.[/yellow] "
            "Partially downloaded streams were discarded."
        )
        sys.exit(EXIT_INTERRUPTED)
    except Echo360Error as e:
        console.print(format_error_with_suggestions(e))
        sys.exit(1)
    except ModuleNotFoundError as e:
        if e.name != "playwright":
            raise
        console.print(
            "[red]✗ Browser discovery needs Playwright.[/red] Install it with "
            "[cyan]pip install playwright && playwright install firefox[/cyan], "
            "or use [cyan]--discovery embedded[/cyan]."
        )
        sys.exit(1)
    except Exception as e:
        console.print(format_error_with_suggestions(e, {"type": "Unexpected"}))
        logging.getLogger("echo360_dl").debug("Full traceback:", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
