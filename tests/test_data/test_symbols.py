"""Tests for the default symbol universe and raw data model."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from deepvalue.data.models import RawMarketData
from deepvalue.data.symbols import DEFAULT_CATEGORIES, category_symbols, default_symbols


def test_default_symbols_cover_every_category():
    symbols = default_symbols()
    assert len(symbols) == sum(len(v) for v in DEFAULT_CATEGORIES.values())
    assert "AAPL" in symbols
    assert "GDX" in symbols


def test_category_lookup_is_case_insensitive():
    assert category_symbols("technology") == DEFAULT_CATEGORIES["Technology"]
    assert category_symbols("  ETFs (metals) ") == DEFAULT_CATEGORIES["ETFs (Metals)"]


def test_category_lookup_returns_copy():
    category_symbols("Energy").append("ZZZ")
    assert "ZZZ" not in DEFAULT_CATEGORIES["Energy"]


def test_unknown_category():
    with pytest.raises(KeyError):
        category_symbols("Crypto")


class TestRawMarketData:
    def test_failed_helper(self):
        data = RawMarketData.failed("AAPL", "HTTP 500", fetch_duration=1.5)
        assert not data.ok
        assert data.error == "HTTP 500"
        assert data.fetch_duration == 1.5
        assert data.closes == []

    def test_failed_without_message(self):
        assert RawMarketData.failed("AAPL", "").error == "unknown error"

    def test_frozen(self):
        data = RawMarketData(symbol="AAPL", price=1.0)
        with pytest.raises(ValidationError):
            data.price = 2.0
