"""Annualised risk ratios from a daily closing-price series."""

import math
from dataclasses import dataclass
from statistics import fmean, pstdev

TRADING_DAYS_PER_YEAR = 252
DEFAULT_RISK_FREE_RATE = 0.10
# Reported when the series moves but never has a down day.
NO_DOWNSIDE_SORTINO = 999.0


@dataclass(frozen=True)
class RiskMetrics:
    sharpe_ratio: float | None
    sortino_ratio: float | None


def calculate_returns(prices: list[float]) -> list[float]:
    """Simple period returns, skipping any step whose base price is not positive."""
    return [
        (current - previous) / previous
        for previous, current in zip(prices, prices[1:])
        if previous > 0
    ]


def calculate_sharpe_ratio(
    returns: list[float], risk_free_rate: float = DEFAULT_RISK_FREE_RATE
) -> float | None:
    if len(returns) < 2:
        return None

    std_dev = pstdev(returns)
    if std_dev == 0:
        return None

    annualized_return = fmean(returns) * TRADING_DAYS_PER_YEAR
    annualized_std_dev = std_dev * math.sqrt(TRADING_DAYS_PER_YEAR)
    return (annualized_return - risk_free_rate) / annualized_std_dev


def calculate_sortino_ratio(
    returns: list[float], risk_free_rate: float = DEFAULT_RISK_FREE_RATE
) -> float | None:
    if len(returns) < 2 or all(r == 0 for r in returns):
        return None

    downside = [r for r in returns if r < 0]
    if not downside:
        return NO_DOWNSIDE_SORTINO

    # Squared losses are averaged over every period, not just the losing ones.
    downside_deviation = math.sqrt(sum(r * r for r in downside) / len(returns))
    annualized_return = fmean(returns) * TRADING_DAYS_PER_YEAR
    annualized_downside = downside_deviation * math.sqrt(TRADING_DAYS_PER_YEAR)
    return (annualized_return - risk_free_rate) / annualized_downside


def calculate_risk_metrics(
    prices: list[float], risk_free_rate: float = DEFAULT_RISK_FREE_RATE
) -> RiskMetrics:
    returns = calculate_returns(prices)
    return RiskMetrics(
        sharpe_ratio=calculate_sharpe_ratio(returns, risk_free_rate),
        sortino_ratio=calculate_sortino_ratio(returns, risk_free_rate),
    )


def price_change_percent(
    prices: list[float], current_price: float | None, lookback: int
) -> float | None:
    """Percent move from ``lookback`` sessions ago to ``current_price``."""
    if current_price is None or len(prices) <= lookback:
        return None
    reference = prices[-lookback]
    if reference <= 0:
        return None
    return (current_price - reference) / reference * 100
