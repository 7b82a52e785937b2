"""Tests for the Sharpe/Sortino calculator."""

import math
from statistics import fmean, pstdev

import pytest

from egx_advisor.analysis.metrics import (
    NO_DOWNSIDE_SORTINO,
    calculate_returns,
    calculate_risk_metrics,
    calculate_sharpe_ratio,
    calculate_sortino_ratio,
    price_change_percent,
)


class TestReturns:
    def test_simple_returns(self) -> None:
        returns = calculate_returns([10, 11, 9, 12])

        assert returns == pytest.approx([0.1, -0.181818, 0.333333], abs=1e-6)

    def test_non_positive_base_is_skipped(self) -> None:
        assert calculate_returns([0, 10, 11]) == pytest.approx([0.1])

    def test_short_series(self) -> None:
        assert calculate_returns([10]) == []
        assert calculate_returns([]) == []


class TestRatios:
    def test_reference_series_gives_finite_ratios(self) -> None:
        returns = calculate_returns([10, 11, 9, 12])
        expected_sharpe = (fmean(returns) * 252 - 0.10) / (pstdev(returns) * math.sqrt(252))

        sharpe = calculate_sharpe_ratio(returns, 0.10)
        sortino = calculate_sortino_ratio(returns, 0.10)

        assert sharpe == pytest.approx(expected_sharpe)
        assert sortino is not None and math.isfinite(sortino)
        assert sortino != NO_DOWNSIDE_SORTINO

    def test_reference_series_without_risk_free_rate(self) -> None:
        returns = calculate_returns([10, 11, 9, 12])

        assert calculate_sharpe_ratio(returns, 0.0) == pytest.approx(6.319, rel=1e-3)
        assert calculate_sortino_ratio(returns, 0.0) == pytest.approx(12.678, rel=1e-3)

    def test_sortino_uses_all_periods_for_downside(self) -> None:
        returns = calculate_returns([10, 11, 9, 12])
        downside = math.sqrt(returns[1] ** 2 / 3)
        expected = (fmean(returns) * 252 - 0.10) / (downside * math.sqrt(252))

        assert calculate_sortino_ratio(returns, 0.10) == pytest.approx(expected)

    def test_flat_series_has_no_ratios(self) -> None:
        metrics = calculate_risk_metrics([50.0] * 30)

        assert metrics.sharpe_ratio is None
        assert metrics.sortino_ratio is None

    def test_no_down_days_reports_sentinel_sortino(self) -> None:
        metrics = calculate_risk_metrics([10, 11, 12, 14, 15])

        assert metrics.sortino_ratio == NO_DOWNSIDE_SORTINO
        assert metrics.sharpe_ratio is not None

    def test_steady_compounding_reports_sentinel_sortino(self) -> None:
        metrics = calculate_risk_metrics([10.0, 20.0, 40.0, 80.0])

        assert metrics.sortino_ratio == NO_DOWNSIDE_SORTINO
        assert metrics.sharpe_ratio is None

    def test_steady_decline_has_finite_sortino(self) -> None:
        sortino = calculate_sortino_ratio(calculate_returns([100.0, 90.0, 81.0]), 0.0)

        assert sortino is not None and sortino < 0

    def test_single_return_is_not_enough(self) -> None:
        metrics = calculate_risk_metrics([10, 11])

        assert metrics.sharpe_ratio is None
        assert metrics.sortino_ratio is None

    def test_risk_free_rate_lowers_sharpe(self) -> None:
        returns = calculate_returns([10, 11, 9, 12])

        assert calculate_sharpe_ratio(returns, 0.25) < calculate_sharpe_ratio(returns, 0.0)


class TestPriceChange:
    def test_change_against_lookback_close(self) -> None:
        prices = [100.0] + [110.0] * 30

        assert price_change_percent(prices, 121.0, 30) == pytest.approx(10.0)

    def test_not_enough_history(self) -> None:
        assert price_change_percent([100.0] * 30, 110.0, 30) is None

    def test_missing_price(self) -> None:
        assert price_change_percent([100.0] * 40, None, 30) is None
