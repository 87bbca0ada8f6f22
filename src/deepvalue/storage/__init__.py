"""JSON persistence for the watchlist and scan history."""
