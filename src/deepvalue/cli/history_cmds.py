"""CLI commands for browsing saved scans."""

from __future__ import annotations

from typing import Annotated, Optional

import typer

from deepvalue.cli.formatters import (
    console,
    output_error,
    output_json,
    print_history_list,
    print_results_table,
)
from deepvalue.config import ScreenerConfig
from deepvalue.storage.history import HistoryStore, format_timestamp

app = typer.Typer(name="history", help="Saved scan results")


def _store() -> HistoryStore:
    return HistoryStore(ScreenerConfig().history_dir)


@app.command("list")
def history_list(
    limit: Annotated[Optional[int], typer.Option("--limit", "-n", help="Max records")] = None,
    output: Annotated[Optional[str], typer.Option("--output", help="Output format (json)")] = None,
) -> None:
    """List saved scans, newest first."""
    records = _store().list_records(limit=limit)
    if output == "json":
        output_json(records)
    else:
        print_history_list(records)


@app.command("show")
def history_show(
    scan_id: Annotated[
        Optional[str], typer.Argument(help="Scan id (latest if omitted)")
    ] = None,
    output: Annotated[Optional[str], typer.Option("--output", help="Output format (json)")] = None,
) -> None:
    """Show the results of one saved scan."""
    store = _store()
    try:
        record = store.load(scan_id) if scan_id else store.latest()
    except FileNotFoundError as e:
        output_error(str(e))
        return

    if output == "json":
        output_json(record)
        return

    title = f"Scan {record.id} ({format_timestamp(record.timestamp)})"
    print_results_table(record.results, title=title)
    console.print(f"  {record.total_found} shown of {record.total_scanned} scanned")


@app.command("delete")
def history_delete(
    scan_id: Annotated[Optional[str], typer.Argument(help="Scan id to delete")] = None,
    all_: Annotated[bool, typer.Option("--all", help="Delete every saved scan")] = False,
) -> None:
    """Delete one saved scan, or all of them with --all."""
    store = _store()
    if all_:
        removed = store.delete_all()
        console.print(f"Deleted {removed} scans.")
        return
    if not scan_id:
        output_error("Give a scan id or --all")
        return
    if not store.delete(scan_id):
        output_error(f"Scan not found: {scan_id}")
        return
    console.print(f"Deleted scan {scan_id}.")
