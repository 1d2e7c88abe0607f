"""SUBSWEEP command-line interface built on Typer and Rich."""

from __future__ import annotations

import asyncio
import sys
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from subsweep import __version__
from subsweep.core.config import load_config
from subsweep.core.errors import ConfigurationError, SubsweepError, WildcardDetected
from subsweep.core.models import PipelineStats, ResolveResult
from subsweep.core.options import BUILTIN_DICTIONARY, ScanOptions
from subsweep.utils.logger import configure_logging

app = typer.Typer(
    name="subsweep",
    help="[bold cyan]SUBSWEEP[/] — concurrent subdomain enumeration",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

_DICT_FLAGS = ("-d", "--dict")


def _print_banner() -> None:
    """Print the SUBSWEEP banner."""
    console.print(
        Panel(
            Text("SUBSWEEP", style="bold cyan", justify="center"),
            subtitle=f"[dim]v{__version__} — subdomain enumeration[/]",
            border_style="cyan",
            expand=False,
        )
    )


# ---------------------------------------------------------------------------
# scan command
# ---------------------------------------------------------------------------


@app.command()
def scan(
    target: str = typer.Argument(..., help="Domain to enumerate, e.g. example.com"),
    dict_path: Optional[str] = typer.Option(
        None, "--dict", "-d",
        help="Dictionary file; give -d without a path to use the built-in dictionary",
    ),
    length: Optional[str] = typer.Option(
        None, "--length", "-l", help="Brute-force label length: N or A-B"
    ),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Result file (default: <target>.txt)"
    ),
    task_count: Optional[int] = typer.Option(
        None, "--task-count", "-c", help="Number of resolution workers (default: 25)"
    ),
    nameserver: Optional[str] = typer.Option(
        None, "--nameserver", "-n", help="Comma-separated resolver IPs (default: Google DNS)"
    ),
    no_wildcard: bool = typer.Option(False, "--no-wildcard", help="Skip the wildcard DNS check"),
    no_title: bool = typer.Option(False, "--no-title", help="Skip HTTP status/title probing"),
    silent: bool = typer.Option(False, "--silent", help="Minimal output"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also write logs to this file"),
    config_file: Optional[str] = typer.Option(None, "--config", help="Custom config file"),
) -> None:
    """[bold]Enumerate subdomains of TARGET.[/]

    Examples:

        subsweep scan example.com -d

        subsweep scan example.com -d words.txt -c 50 -o found.txt

        subsweep scan example.com -l 1-3 --no-title
    """
    configure_logging(verbose=verbose, silent=silent, log_file=log_file)
    cfg = load_config(config_file)

    try:
        options = ScanOptions.build(
            target,
            dict_path=dict_path,
            length=length,
            output=output,
            task_count=task_count,
            nameserver=nameserver,
            check_wildcard=False if no_wildcard else None,
            fetch_title=False if no_title else None,
            config=cfg,
        )
    except ConfigurationError as exc:
        err_console.print(f"[red]Error:[/] {exc}")
        raise typer.Exit(2)

    if not silent:
        _print_banner()
        console.print(
            f"[bold green]►[/] Enumerating [bold]{options.target}[/] "
            f"(workers={options.task_count}, output={options.output_path})"
        )

    try:
        stats = asyncio.run(_run_scan(options, silent))
    except WildcardDetected as exc:
        err_console.print(
            f"[red]Wildcard DNS detected:[/] {exc.probe} resolves to {exc.addresses}"
        )
        raise typer.Exit(1)
    except SubsweepError as exc:
        err_console.print(f"[red]Error:[/] {exc}")
        raise typer.Exit(1)

    if not silent:
        _display_stats(options, stats)


async def _run_scan(options: ScanOptions, silent: bool) -> PipelineStats:
    """Internal async wrapper for the pipeline."""
    from subsweep.core.pipeline import ScanPipeline

    pipeline = ScanPipeline(options)

    def on_event(event: dict) -> None:  # type: ignore[type-arg]
        if silent or event.get("event") != "result_found":
            return
        result: ResolveResult = event["result"]
        code = f" [dim]{result.http_code}[/]" if result.http_code else ""
        title = f" {result.title}" if result.title else ""
        console.print(f"  [green]✓[/] [bold]{result.domain}[/]{code}{title}", markup=True)

    pipeline.on_event(on_event)

    if options.check_wildcard:
        await pipeline.check_wildcard()
    return await pipeline.run()


def _display_stats(options: ScanOptions, stats: PipelineStats) -> None:
    """Render a Rich summary table of the run."""
    console.print()
    table = Table(
        title=f"Enumeration Results — {options.target}",
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
    )
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right", style="bold")
    table.add_row("Candidates", str(stats.candidates))
    table.add_row("Resolved", str(stats.resolved))
    table.add_row("Written", str(stats.written))
    if stats.dropped or stats.write_failures:
        table.add_row("Dropped", str(stats.dropped + stats.write_failures))
    table.add_row("Duration", f"{stats.duration:.1f}s")
    console.print(table)
    console.print(f"\n[bold green]✓[/] Results saved to [bold]{options.output_path}[/]")


# ---------------------------------------------------------------------------
# config command
# ---------------------------------------------------------------------------


@app.command()
def config(
    config_file: Optional[str] = typer.Option(None, "--config", help="Config file path"),
) -> None:
    """[bold]Print the effective configuration.[/]"""
    cfg = load_config(config_file)
    console.print_json(cfg.model_dump_json(indent=2))


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@app.command()
def version() -> None:
    """[bold]Show SUBSWEEP version information.[/]"""
    console.print(f"[bold cyan]SUBSWEEP[/] version [bold]{__version__}[/]")


def normalize_argv(argv: List[str]) -> List[str]:
    """Give a bare ``-d``/``--dict`` the built-in dictionary value.

    ``-d`` followed by nothing or by another option means "use the built-in
    dictionary"; click options cannot take an optional value, so the empty
    path is inserted explicitly.
    """
    normalized: List[str] = []
    for i, arg in enumerate(argv):
        normalized.append(arg)
        if arg not in _DICT_FLAGS:
            continue
        following = argv[i + 1] if i + 1 < len(argv) else None
        if following is None or (following.startswith("-") and following != "-"):
            normalized.append(BUILTIN_DICTIONARY)
    return normalized


def main() -> None:
    """Entry point registered in pyproject.toml."""
    app(args=normalize_argv(sys.argv[1:]), prog_name="subsweep")


if __name__ == "__main__":
    main()
