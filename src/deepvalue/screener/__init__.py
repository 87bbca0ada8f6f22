"""Scoring and screening of fetched market data."""
