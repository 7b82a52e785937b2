"""Deterministic valuation used when the LLM is unavailable.

Fair value is the mean of an industry-P/E estimate and the Graham number.
Zones and targets are fixed multiples of that fair value.
"""

import math

from egx_advisor.analysis.schemas import PriceZone, Valuation

INDUSTRY_PE = 15.0
GRAHAM_MULTIPLIER = 22.5

# (zone name, lower multiple, upper multiple) in ascending price order.
ZONE_BANDS = (
    ("strong_buy_zone", 0.0, 0.7),
    ("buy_zone", 0.7, 0.85),
    ("hold_zone", 0.85, 1.15),
    ("sell_zone", 1.15, 1.3),
    ("strong_sell_zone", 1.3, 2.0),
)
TARGET_MULTIPLES = (1.0, 1.15, 1.3)
ZONE_NAMES = tuple(name for name, _, _ in ZONE_BANDS)


def fair_value_pe(eps: float | None) -> float | None:
    return eps * INDUSTRY_PE if eps and eps > 0 else None


def fair_value_graham(eps: float | None, book_value: float | None) -> float | None:
    if not eps or not book_value or eps <= 0 or book_value <= 0:
        return None
    return math.sqrt(GRAHAM_MULTIPLIER * eps * book_value)


def zones_from_fair_value(fair_value: float) -> dict[str, PriceZone]:
    return {
        name: PriceZone(min=fair_value * low, max=fair_value * high)
        for name, low, high in ZONE_BANDS
    }


def targets_from_fair_value(fair_value: float) -> dict[str, float]:
    names = ("first_target", "second_target", "third_target")
    return {
        name: fair_value * multiple
        for name, multiple in zip(names, TARGET_MULTIPLES, strict=True)
    }


def zones_are_contiguous(valuation: Valuation) -> bool:
    """True when all five zones exist and each starts where the previous one ended."""
    zones = valuation.zones()
    if any(zone is None for zone in zones):
        return False
    previous_max = None
    for zone in zones:
        if zone.min > zone.max:
            return False
        if previous_max is not None and not math.isclose(zone.min, previous_max):
            return False
        previous_max = zone.max
    return True


def recommendation_for(current_price: float, fair_value: float) -> str:
    ratio = current_price / fair_value
    if ratio < 0.7:
        return "Strong Buy"
    if ratio < 0.85:
        return "Buy"
    if ratio < 1.15:
        return "Hold"
    if ratio < 1.3:
        return "Sell"
    return "Strong Sell"


def valuation_status_for(current_price: float, fair_value: float) -> str:
    ratio = current_price / fair_value
    if ratio < 0.85:
        return "Undervalued"
    if ratio > 1.15:
        return "Overvalued"
    return "Fair"


def risk_level_for(sharpe_ratio: float | None) -> str:
    if sharpe_ratio is not None and sharpe_ratio > 1.5:
        return "Low"
    if sharpe_ratio is not None and sharpe_ratio > 0.5:
        return "Medium"
    return "High"


def build_formula_valuation(
    current_price: float,
    eps: float | None,
    pe_ratio: float | None,
    book_value: float | None,
    dividend_yield: float | None,
    sharpe_ratio: float | None,
) -> Valuation:
    fair_value = None
    pe_value = fair_value_pe(eps)
    graham_value = fair_value_graham(eps, book_value)
    if pe_ratio and pe_value is not None and graham_value is not None:
        fair_value = (pe_value + graham_value) / 2

    zones: dict[str, PriceZone] = {}
    targets: dict[str, float] = {}
    recommendation = "Hold"
    valuation_status = "Fair"
    # Without a live price the bands are still useful but no verdict can be drawn.
    priced = bool(fair_value) and current_price > 0
    if fair_value:
        zones = zones_from_fair_value(fair_value)
        targets = targets_from_fair_value(fair_value)
    if priced:
        recommendation = recommendation_for(current_price, fair_value)
        valuation_status = valuation_status_for(current_price, fair_value)
    elif sharpe_ratio is not None and sharpe_ratio > 1:
        recommendation = "Buy"

    simple_explanation: list[str] = []
    if priced:
        gap = abs(current_price / fair_value - 1) * 100
        side = "above" if current_price > fair_value else "below"
        simple_explanation.append(
            f"Stock trading {gap:.0f}% {side} fair value of {fair_value:.2f} EGP"
        )
    if dividend_yield:
        simple_explanation.append(f"Dividend yield: {dividend_yield:.2f}%")
    if sharpe_ratio:
        simple_explanation.append(f"Risk-adjusted return (Sharpe): {sharpe_ratio:.2f}")
    if not simple_explanation:
        simple_explanation.append("Limited data available for analysis")

    risk_signals: list[str] = []
    if pe_ratio and pe_ratio > 30:
        risk_signals.append("High P/E ratio")
    if sharpe_ratio is not None and sharpe_ratio < 0:
        risk_signals.append("Negative risk-adjusted returns")
    if valuation_status == "Overvalued":
        risk_signals.append("Trading above fair value")
    if not dividend_yield or dividend_yield < 1:
        risk_signals.append("Low or no dividend")

    if priced:
        gap = (current_price / fair_value - 1) * 100
        side = "above" if current_price > fair_value else "below"
        reasoning = (
            f"Based on fundamental analysis with fair value of {fair_value:.2f} EGP. "
            f"Stock is trading at {gap:.1f}% {side} fair value."
        )
    else:
        reasoning = (
            "Limited fundamental data available. "
            "Recommendation based on risk-adjusted returns and price trends."
        )

    return Valuation(
        fair_value_estimate=fair_value,
        fair_value_range=(
            PriceZone(min=fair_value * 0.9, max=fair_value * 1.1) if fair_value else None
        ),
        **zones,
        **targets,
        recommendation=recommendation,
        confidence="Medium" if fair_value else "Low",
        reasoning=reasoning,
        risk_level=risk_level_for(sharpe_ratio),
        key_points=[
            f"Fair value: {fair_value:.2f} EGP" if fair_value else "Fair value not calculable",
            f"Sharpe ratio: {sharpe_ratio:.2f}" if sharpe_ratio else "Risk metrics unavailable",
            f"P/E: {pe_ratio:.2f}" if pe_ratio else "P/E ratio not available",
        ],
        analysis_method="Formula-based (fallback)",
        valuation_status=valuation_status,
        simple_explanation=simple_explanation,
        risk_signals=risk_signals,
    )


def with_contiguous_zones(valuation: Valuation) -> Valuation:
    """Rebuild zones and targets from the fair value when the supplied bands are unusable."""
    if zones_are_contiguous(valuation):
        return valuation
    if not valuation.fair_value_estimate or valuation.fair_value_estimate <= 0:
        return valuation.model_copy(update=dict.fromkeys(ZONE_NAMES))
    fair_value = valuation.fair_value_estimate
    update: dict = {**zones_from_fair_value(fair_value)}
    if valuation.first_target is None:
        update.update(targets_from_fair_value(fair_value))
    return valuation.model_copy(update=update)
