"""Tests for risk metrics."""

from __future__ import annotations

import math

import pytest

from deepvalue.analysis import risk


class TestCalculateSLTP:
    def test_atr_levels(self):
        levels = risk.calculate_sltp(100, 2, 2, 3)
        assert levels.stop_loss == 96.00
        assert levels.take_profit == 106.00
        assert levels.risk_percent == 4.00
        assert levels.reward_percent == 6.00
        assert levels.risk_ratio == 1.5

    def test_missing_atr_falls_back_to_two_percent(self):
        assert risk.calculate_sltp(100, 0) == risk.calculate_sltp(100, 2)

    def test_values_are_rounded(self):
        levels = risk.calculate_sltp(33.333, 0.777)
        assert levels.stop_loss == round(33.333 - 2 * 0.777, 2)

    def test_zero_price(self):
        levels = risk.calculate_sltp(0, 0)
        assert levels.risk_ratio == 0.0
        assert levels.risk_percent == 0.0


def test_support_stop_uses_nearest_support():
    assert risk.calculate_support_sl(100, [90, 95, 105], 0.01) == pytest.approx(94.05)


def test_support_stop_without_support():
    assert risk.calculate_support_sl(100, [105], 0.01) == pytest.approx(95.0)


def test_position_size():
    assert risk.position_size(10_000, 1, 50, 48) == 50
    assert risk.position_size(10_000, 1, 50, 50) == 0


def test_max_drawdown():
    assert risk.max_drawdown([100, 120, 60, 90]) == pytest.approx(50.0)
    assert risk.max_drawdown([1, 2, 3]) == 0.0
    assert risk.max_drawdown([5]) == 0.0


def test_volatility():
    assert risk.volatility([100, 100, 100]) == 0.0
    assert risk.volatility([100, 110, 99]) == pytest.approx(10 * math.sqrt(252))
    assert risk.volatility([100]) == 0.0


class TestRiskScore:
    def test_extremes(self):
        assert risk.risk_score(70, 60, 2.5) == 100
        assert risk.risk_score(10, 5, 0.2) == 0

    def test_middle_buckets(self):
        assert risk.risk_score(30, 25, 1.2) == 20 + 20 + 10
