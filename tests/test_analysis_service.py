"""Tests for the analysis composer."""

import json

import pytest

from egx_advisor.analysis.service import AI_ANALYSIS_METHOD, AnalysisService, derive_eps
from egx_advisor.llm.client import LLMClient
from egx_advisor.market.providers.base import (
    FundamentalsProvider,
    HistoryProvider,
    PriceProvider,
)
from egx_advisor.market.schemas import FundamentalsSnapshot, PriceQuote
from egx_advisor.market.service import MarketService

FORMULA_METHOD = "Formula-based (fallback)"

LLM_VALUATION = {
    "fairValueEstimate": 100.0,
    "fairValueRange": {"min": 90.0, "max": 110.0},
    "strongBuyZone": {"min": 0, "max": 70.0},
    "buyZone": {"min": 70.0, "max": 85.0},
    "holdZone": {"min": 85.0, "max": 115.0},
    "sellZone": {"min": 115.0, "max": 130.0},
    "strongSellZone": {"min": 130.0, "max": 200.0},
    "firstTarget": 100.0,
    "secondTarget": 115.0,
    "thirdTarget": 130.0,
    "recommendation": "Buy",
    "confidence": "High",
    "reasoning": "Trading below a conservative fair value.",
    "riskLevel": "Medium",
    "keyPoints": ["Cheap on earnings"],
    "analysisMethod": "P/E and Graham",
    "valuationStatus": "Undervalued",
    "simpleExplanation": ["Price is below fair value"],
    "riskSignals": [],
}


class StaticPrice(PriceProvider):
    name = "Static"

    def __init__(self, price: float | None) -> None:
        self._price = price

    async def fetch(self, symbol: str) -> PriceQuote | None:
        if self._price is None:
            return None
        return PriceQuote(symbol=symbol, price=self._price, volume=1000, source=self.name)


class StaticFundamentalsTier(FundamentalsProvider):
    name = "Fixture"

    def __init__(self, snapshot: FundamentalsSnapshot) -> None:
        self._snapshot = snapshot

    async def fetch(self, symbol: str) -> FundamentalsSnapshot | None:
        return self._snapshot


class StaticHistory(HistoryProvider):
    name = "Fixture"

    def __init__(self, closes: list[float]) -> None:
        self._closes = closes

    async def fetch(self, symbol: str, days: int) -> list[float] | None:
        return self._closes


def market(price: float | None = 80.0, **fundamentals) -> MarketService:
    snapshot = FundamentalsSnapshot(source="Fixture", **fundamentals)
    closes = [70.0 + (i % 7) - (i % 3) for i in range(260)]
    return MarketService(
        [StaticPrice(price)],
        [StaticFundamentalsTier(snapshot)],
        [StaticHistory(closes)],
    )


@pytest.fixture
def build_service(cache, reference):
    def build(llm: LLMClient, **market_kwargs) -> AnalysisService:
        return AnalysisService(market(**market_kwargs), llm, cache, reference)

    return build


class TestDeriveEps:
    def test_reported_eps_wins(self) -> None:
        assert derive_eps(80.0, FundamentalsSnapshot(eps=4.0, pe_ratio=10.0)) == 4.0

    def test_falls_back_to_price_over_pe(self) -> None:
        assert derive_eps(80.0, FundamentalsSnapshot(pe_ratio=10.0)) == 8.0

    def test_nothing_to_derive_from(self) -> None:
        assert derive_eps(None, FundamentalsSnapshot(pe_ratio=10.0)) is None


class TestAnalysisService:
    @pytest.mark.asyncio
    async def test_llm_valuation_is_used_and_cached(
        self, build_service, stub_chat_model, cache
    ) -> None:
        model = stub_chat_model(json.dumps(LLM_VALUATION))
        service = build_service(LLMClient(model), pe_ratio=10.0, book_value=40.0)

        result = await service.analyze("comi")

        assert result.symbol == "COMI"
        assert result.analysis_method == AI_ANALYSIS_METHOD
        assert result.recommendation == "Buy"
        assert result.fair_value_avg == 100.0
        assert result.eps == 8.0
        assert result.price_to_book == pytest.approx(2.0)
        assert result.data_available is True
        assert cache.get("analysis_COMI")["recommendation"] == "Buy"

        again = await service.analyze("COMI")
        assert again.recommendation == "Buy"
        assert len(model.calls) == 1

    @pytest.mark.asyncio
    async def test_refresh_bypasses_cached_analysis(
        self, build_service, stub_chat_model
    ) -> None:
        second = {**LLM_VALUATION, "recommendation": "Hold"}
        model = stub_chat_model(json.dumps(LLM_VALUATION), json.dumps(second))
        service = build_service(LLMClient(model), pe_ratio=10.0)

        await service.analyze("COMI")
        refreshed = await service.analyze("COMI", refresh=True)

        assert refreshed.recommendation == "Hold"
        assert len(model.calls) == 2

    @pytest.mark.asyncio
    async def test_llm_failure_replays_stale_analysis(
        self, build_service, stub_chat_model, status_error, clock
    ) -> None:
        model = stub_chat_model(json.dumps(LLM_VALUATION), status_error(400))
        service = build_service(LLMClient(model), pe_ratio=10.0)
        await service.analyze("COMI")
        clock.advance(30 * 3600)

        result = await service.analyze("COMI")

        assert result.recommendation == "Buy"
        assert result.analysis_method == AI_ANALYSIS_METHOD

    @pytest.mark.asyncio
    async def test_unparseable_reply_without_cache_uses_formula(
        self, build_service, stub_chat_model
    ) -> None:
        service = build_service(
            LLMClient(stub_chat_model("I cannot help with that")),
            eps=5.0,
            pe_ratio=20.0,
            book_value=40.0,
        )

        result = await service.analyze("COMI")

        assert result.analysis_method == FORMULA_METHOD
        assert result.fair_value_avg is not None

    @pytest.mark.asyncio
    async def test_missing_llm_uses_formula(self, build_service) -> None:
        service = build_service(LLMClient(None), eps=5.0, pe_ratio=20.0, book_value=40.0)

        result = await service.analyze("COMI")

        assert result.analysis_method == FORMULA_METHOD
        assert result.fair_value_pe == 75.0
        assert result.strong_buy_zone.max == result.buy_zone.min
        assert result.sell_zone.max == result.strong_sell_zone.min

    @pytest.mark.asyncio
    async def test_reply_missing_required_fields_falls_back(
        self, build_service, stub_chat_model
    ) -> None:
        incomplete = {k: v for k, v in LLM_VALUATION.items() if k != "reasoning"}
        service = build_service(LLMClient(stub_chat_model(json.dumps(incomplete))), pe_ratio=10.0)

        result = await service.analyze("COMI")

        assert result.analysis_method == FORMULA_METHOD

    @pytest.mark.asyncio
    async def test_broken_llm_zones_are_rebuilt(self, build_service, stub_chat_model) -> None:
        broken = {**LLM_VALUATION, "buyZone": {"min": 75.0, "max": 85.0}}
        service = build_service(LLMClient(stub_chat_model(json.dumps(broken))), pe_ratio=10.0)

        result = await service.analyze("COMI")

        assert result.buy_zone.min == pytest.approx(70.0)
        assert result.strong_buy_zone.max == pytest.approx(70.0)

    @pytest.mark.asyncio
    async def test_history_derived_figures(self, build_service) -> None:
        result = await build_service(LLMClient(None), pe_ratio=10.0).analyze("COMI")

        assert result.fifty_two_week_high is not None
        assert result.fifty_two_week_low <= result.fifty_two_week_high
        assert result.fifty_day_avg is not None
        assert result.two_hundred_day_avg is not None
        assert result.sharpe_ratio is not None

    @pytest.mark.asyncio
    async def test_unavailable_price_is_reported(self, build_service) -> None:
        result = await build_service(LLMClient(None), price=None, pe_ratio=10.0).analyze("COMI")

        assert result.current_price is None
        assert result.error == "Price not available for this stock"
        assert result.eps is None
        assert result.data_available is True
