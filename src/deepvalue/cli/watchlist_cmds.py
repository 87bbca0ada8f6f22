"""CLI commands for managing pinned symbols."""

from __future__ import annotations

from typing import Annotated, Optional

import typer

from deepvalue.cli.formatters import console, output_json, print_watchlist
from deepvalue.config import ScreenerConfig
from deepvalue.storage.watchlist import WatchlistStore

app = typer.Typer(name="watchlist", help="Pinned symbols, always shown first in scans")


def _store() -> WatchlistStore:
    return WatchlistStore(ScreenerConfig().watchlist_path)


@app.command("list")
def watchlist_list(
    output: Annotated[Optional[str], typer.Option("--output", help="Output format (json)")] = None,
) -> None:
    """Show pinned symbols."""
    symbols = _store().get_all()
    if output == "json":
        output_json({"symbols": symbols})
    else:
        print_watchlist(symbols)


@app.command("add")
def watchlist_add(
    symbols: Annotated[list[str], typer.Argument(help="Symbols to pin")],
) -> None:
    """Pin one or more symbols."""
    store = _store()
    for sym in symbols:
        store.add(sym)
    console.print(f"Pinned: {', '.join(s.upper() for s in symbols)} ({store.count()} total)")


@app.command("remove")
def watchlist_remove(
    symbols: Annotated[list[str], typer.Argument(help="Symbols to unpin")],
) -> None:
    """Unpin one or more symbols."""
    store = _store()
    for sym in symbols:
        store.remove(sym)
    console.print(f"Unpinned: {', '.join(s.upper() for s in symbols)} ({store.count()} total)")


@app.command("clear")
def watchlist_clear(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Remove every pinned symbol."""
    if not yes:
        typer.confirm("Clear the whole watchlist?", abort=True)
    _store().clear()
    console.print("Watchlist cleared.")
