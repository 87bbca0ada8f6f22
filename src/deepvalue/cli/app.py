"""Root CLI application for the deep value screener."""

from __future__ import annotations

import logging
from typing import Annotated, Optional

import typer

from deepvalue import __version__
from deepvalue.cli.formatters import (
    console,
    output_error,
    output_json,
    print_connection_report,
    print_results_table,
    print_scan_summary,
)
from deepvalue.cli.history_cmds import app as history_app
from deepvalue.cli.watchlist_cmds import app as watchlist_app
from deepvalue.config import ScreenerConfig
from deepvalue.data.factory import build_source
from deepvalue.data.symbols import category_symbols, default_symbols
from deepvalue.engine.pool import FetchPool
from deepvalue.screener.engine import ScreeningEngine
from deepvalue.screener.models import FilterCriteria
from deepvalue.storage.history import HistoryStore
from deepvalue.storage.watchlist import WatchlistStore

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="deepvalue",
    help="Deep value stock screener - oversold, cheap on book, under Graham value",
    no_args_is_help=True,
)

app.add_typer(watchlist_app, name="watchlist")
app.add_typer(history_app, name="history")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Deep value stock screener CLI."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s | %(name)s | %(message)s",
    )


@app.command("scan")
def scan(
    symbols: Annotated[
        Optional[list[str]], typer.Argument(help="Symbols to scan (default universe if omitted)")
    ] = None,
    category: Annotated[
        Optional[str], typer.Option("--category", "-c", help="Scan one default category")
    ] = None,
    workers: Annotated[
        Optional[int], typer.Option("--workers", "-w", help="Concurrent fetch workers")
    ] = None,
    min_score: Annotated[
        Optional[float], typer.Option("--min-score", help="Minimum confluence score")
    ] = None,
    relaxed: Annotated[
        bool, typer.Option("--relaxed", help="Show every scored symbol, no filter")
    ] = False,
    output: Annotated[Optional[str], typer.Option("--output", help="Output format (json)")] = None,
    save: Annotated[bool, typer.Option("--save", help="Save the results to scan history")] = False,
) -> None:
    """Fetch, score and rank symbols, pinned watchlist symbols first."""
    from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn

    config = ScreenerConfig()

    if symbols:
        universe = symbols
    elif category:
        try:
            universe = category_symbols(category)
        except KeyError as e:
            output_error(str(e))
            return
    else:
        universe = default_symbols()

    criteria = FilterCriteria.relaxed() if relaxed else FilterCriteria()
    if min_score is not None:
        criteria = criteria.model_copy(update={"min_confluence": min_score})

    source = build_source(config)
    pool = FetchPool(
        source,
        workers=workers or config.workers,
        fetch_timeout=config.fetch_timeout,
    )
    engine = ScreeningEngine(pool, WatchlistStore(config.watchlist_path), criteria)

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
        transient=True,
        disable=output == "json",
    )

    try:
        with progress:
            task = progress.add_task("[cyan]Scanning...", total=len(universe))
            for snapshot in engine.iter_scan(universe):
                progress.update(
                    task,
                    completed=snapshot.completed,
                    description=f"[cyan]Scanning {snapshot.current}",
                )
    except KeyboardInterrupt:
        engine.stop()
        engine.finalize()
        console.print("[yellow]Scan interrupted, showing partial results.[/yellow]")
    finally:
        close = getattr(source, "close", None)
        if close:
            close()

    results = engine.results()

    if save:
        record = HistoryStore(config.history_dir).save(results, len(universe))
        logger.info("Saved scan %s", record.id)

    if output == "json":
        output_json(results)
        return

    print_results_table(results)
    print_scan_summary(engine.progress(), len(results))


@app.command("debug")
def debug() -> None:
    """Check connectivity to the Yahoo Finance chart API."""
    from deepvalue.data.yahoo import YahooChartSource

    config = ScreenerConfig()
    client = YahooChartSource(config)
    try:
        console.print("Running connection diagnostics...")
        report = client.check_connection()
        print_connection_report(report, client.market_status())
    finally:
        client.close()

    if not report.connected:
        output_error(report.error or "Connection failed")
    console.print("[green]Result: SUCCESS - Connection verified[/green]")


@app.command("version")
def version() -> None:
    """Print the version number."""
    console.print(f"deepvalue v{__version__}")


if __name__ == "__main__":
    app()
