"""Output formatters for the CLI - JSON and rich table output."""

from __future__ import annotations

import json
import sys
from typing import Any

from rich.console import Console
from rich.table import Table

from deepvalue.data.yahoo import ConnectionReport
from deepvalue.screener.models import ScanProgress, ScreenResult
from deepvalue.storage.history import ScanRecord, format_timestamp

console = Console()
err_console = Console(stderr=True)


def output_json(data: Any, file=sys.stdout) -> None:
    """Write JSON output to stdout."""
    if hasattr(data, "model_dump"):
        data = data.model_dump()
    elif isinstance(data, list) and data and hasattr(data[0], "model_dump"):
        data = [item.model_dump() for item in data]
    print(json.dumps(data, indent=2, default=str), file=file)


def output_error(message: str, code: int = 1) -> None:
    """Write JSON error to stderr and exit."""
    output_json({"error": message, "code": code}, file=sys.stderr)
    raise SystemExit(code)


def _grade_color(score: float) -> str:
    if score >= 70:
        return "green"
    if score >= 50:
        return "yellow"
    return "red"


def _rsi_cell(rsi: float) -> str:
    if rsi <= 0:
        return "[dim]-[/dim]"
    if rsi < 30:
        return f"[green]{rsi:.1f}[/green]"
    if rsi > 70:
        return f"[red]{rsi:.1f}[/red]"
    return f"{rsi:.1f}"


def print_results_table(results: list[ScreenResult], title: str = "Deep Value Scan") -> None:
    """Print ranked screen results; pinned rows are marked with a star."""
    if not results:
        console.print("[dim]No stocks matched the filter.[/dim]")
        return

    table = Table(title=title)
    table.add_column("", style="yellow")
    table.add_column("Symbol", style="cyan")
    table.add_column("Price", justify="right")
    table.add_column("Chg %", justify="right")
    table.add_column("RSI", justify="right")
    table.add_column("P/B", justify="right")
    table.add_column("Graham %", justify="right")
    table.add_column("SL / TP", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Grade", justify="center")

    for r in results:
        pin = "★" if r.is_pinned else ""
        if r.has_error:
            table.add_row(pin, r.symbol, f"[red]{r.error_message}[/red]", "", "", "", "", "", "", "")
            continue
        if r.is_placeholder:
            table.add_row(pin, r.symbol, "[dim]no data[/dim]", "", "", "", "", "", "", "")
            continue

        chg_color = "green" if r.change_percent >= 0 else "red"
        color = _grade_color(r.confluence_score)
        table.add_row(
            pin,
            r.symbol,
            f"${r.price:,.2f}",
            f"[{chg_color}]{r.change_percent:+.2f}%[/{chg_color}]",
            _rsi_cell(r.rsi),
            f"{r.pbv:.2f}" if r.pbv > 0 else "[dim]-[/dim]",
            f"{r.graham_upside:+.1f}%" if r.graham_number > 0 else "[dim]-[/dim]",
            f"{r.stop_loss:,.2f} / {r.take_profit:,.2f}",
            f"[{color}]{r.confluence_score:.1f}[/{color}]",
            f"[{color}]{r.grade}[/{color}]",
        )

    console.print(table)


def print_scan_summary(progress: ScanProgress, found: int) -> None:
    console.print(
        f"  Scanned {progress.completed}/{progress.total}: "
        f"[green]{progress.success_count} ok[/green], "
        f"[red]{progress.error_count} errors[/red], {found} shown"
    )
    if progress.last_error:
        console.print(f"  [dim]Last error ({progress.error_symbol}): {progress.last_error}[/dim]")


def print_watchlist(symbols: list[str]) -> None:
    if not symbols:
        console.print("[dim]Watchlist is empty.[/dim]")
        return
    table = Table(title=f"Watchlist ({len(symbols)})")
    table.add_column("Symbol", style="cyan")
    for sym in symbols:
        table.add_row(sym)
    console.print(table)


def print_history_list(records: list[ScanRecord]) -> None:
    if not records:
        console.print("[dim]No scan history.[/dim]")
        return

    table = Table(title="Scan History")
    table.add_column("ID", style="cyan")
    table.add_column("When")
    table.add_column("Scanned", justify="right")
    table.add_column("Found", justify="right")

    for rec in records:
        table.add_row(
            rec.id,
            format_timestamp(rec.timestamp),
            str(rec.total_scanned),
            str(rec.total_found),
        )

    console.print(table)


def print_connection_report(report: ConnectionReport, market_state: str) -> None:
    for line in report.details:
        if line.startswith("OK"):
            console.print(f"  [green]{line}[/green]")
        elif line.startswith("FAIL"):
            console.print(f"  [red]{line}[/red]")
        else:
            console.print(f"  {line}")
    console.print(f"  Market state: {market_state}")
    if report.error:
        err_console.print(f"[red]{report.error}[/red]")
