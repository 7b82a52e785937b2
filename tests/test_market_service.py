"""Tests for the provider fallback chains."""

import pytest

from egx_advisor.cache.disk_cache import DiskCache
from egx_advisor.exceptions import ValidationError
from egx_advisor.market.providers.base import (
    FundamentalsProvider,
    HistoryProvider,
    PriceProvider,
)
from egx_advisor.market.providers.eodhd import EODHDHistoryProvider, EODHDPriceProvider
from egx_advisor.market.providers.static_table import StaticFundamentalsProvider
from egx_advisor.market.schemas import PRICE_UNAVAILABLE, FundamentalsSnapshot, PriceQuote
from egx_advisor.market.service import MarketService


class FixedPrice(PriceProvider):
    def __init__(self, name: str, prices: dict[str, float], fail_on: set[str] = frozenset()):
        self.name = name
        self._prices = prices
        self._fail_on = fail_on
        self.calls: list[str] = []

    async def fetch(self, symbol: str) -> PriceQuote | None:
        self.calls.append(symbol)
        if symbol in self._fail_on:
            raise RuntimeError(f"{self.name} exploded")
        price = self._prices.get(symbol)
        if price is None:
            return None
        return PriceQuote(symbol=symbol, price=price, source=self.name)


class FixedFundamentals(FundamentalsProvider):
    def __init__(self, name: str, snapshot: FundamentalsSnapshot | None):
        self.name = name
        self._snapshot = snapshot
        self.calls = 0

    async def fetch(self, symbol: str) -> FundamentalsSnapshot | None:
        self.calls += 1
        return self._snapshot


class FixedHistory(HistoryProvider):
    def __init__(self, name: str, closes: list[float] | None):
        self.name = name
        self._closes = closes

    async def fetch(self, symbol: str, days: int) -> list[float] | None:
        return self._closes


class UnreachableEODHD(EODHDPriceProvider):
    """EODHD tier whose network call always fails, leaving only its cache logic."""

    def __init__(self, cache: DiskCache) -> None:
        super().__init__(client=None, cache=cache, api_token="token")

    async def _get(self, path: str, **params: str) -> object | None:
        return None


class UnreachableEODHDHistory(EODHDHistoryProvider):
    def __init__(self, cache: DiskCache) -> None:
        super().__init__(client=None, cache=cache, api_token="token")

    async def _get(self, path: str, **params: str) -> object | None:
        return None


def service(price=(), fundamentals=(), history=(), batch_limit: int = 20) -> MarketService:
    return MarketService(price, fundamentals, history, batch_limit=batch_limit)


class TestQuoteChain:
    @pytest.mark.asyncio
    async def test_first_usable_quote_wins(self) -> None:
        primary = FixedPrice("Primary", {"COMI": 80.0})
        secondary = FixedPrice("Secondary", {"COMI": 99.0})

        quote = await service(price=[primary, secondary]).get_quote("comi ")

        assert quote.price == 80.0
        assert quote.source == "Primary"
        assert secondary.calls == []

    @pytest.mark.asyncio
    async def test_secondary_success_leaves_cache_untouched(self, cache: DiskCache) -> None:
        secondary = FixedPrice("TradingView", {"COMI": 81.0})

        quote = await service(price=[UnreachableEODHD(cache), secondary]).get_quote("COMI")

        assert quote.source == "TradingView"
        assert quote.price == 81.0
        assert cache.get_stale("price_COMI") is None

    @pytest.mark.asyncio
    async def test_exhausted_chain_returns_error_record(self) -> None:
        quote = await service(price=[FixedPrice("A", {}), FixedPrice("B", {})]).get_quote("XYZ")

        assert quote.price is None
        assert quote.error == PRICE_UNAVAILABLE
        assert quote.symbol == "XYZ"

    @pytest.mark.asyncio
    async def test_raising_provider_counts_as_absent(self) -> None:
        broken = FixedPrice("Broken", {}, fail_on={"COMI"})
        backup = FixedPrice("Backup", {"COMI": 10.0})

        quote = await service(price=[broken, backup]).get_quote("COMI")

        assert quote.source == "Backup"


class TestBatch:
    @pytest.mark.asyncio
    async def test_order_and_independent_failures(self) -> None:
        symbols = [f"S{i:02d}" for i in range(20)]
        prices = {s: float(i + 1) for i, s in enumerate(symbols) if i % 3}
        provider = FixedPrice("Only", prices, fail_on={"S05"})

        quotes = await service(price=[provider]).get_quotes(symbols)

        assert [q.symbol for q in quotes] == symbols
        for i, quote in enumerate(quotes):
            if i % 3 and symbols[i] != "S05":
                assert quote.price == float(i + 1)
            else:
                assert quote.price is None
                assert quote.error == PRICE_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_truncates_to_limit(self) -> None:
        symbols = [f"S{i:02d}" for i in range(25)]
        provider = FixedPrice("Only", {s: 1.0 for s in symbols})

        quotes = await service(price=[provider]).get_quotes(symbols)

        assert len(quotes) == 20
        assert quotes[-1].symbol == "S19"

    @pytest.mark.asyncio
    async def test_empty_request_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            await service(price=[FixedPrice("Only", {})]).get_quotes([])

    @pytest.mark.asyncio
    async def test_price_map_skips_unpriced(self) -> None:
        provider = FixedPrice("Only", {"COMI": 80.0})

        prices = await service(price=[provider]).get_price_map(["COMI", "NOPE", "comi"])

        assert prices == {"COMI": 80.0}
        assert provider.calls.count("COMI") == 1


class TestFundamentalsMerge:
    @pytest.mark.asyncio
    async def test_later_tier_fills_only_missing_fields(self, reference) -> None:
        symbol, row = next(
            (s, r) for s, r in reference.static_fundamentals.items() if r.pe_ratio > 0
        )
        tier1 = FixedFundamentals("EODHD", None)
        tier2 = FixedFundamentals(
            "TradingView (Live)",
            FundamentalsSnapshot(dividend_yield=5.1, source="TradingView (Live)"),
        )
        tier3 = FixedFundamentals("Mubasher", None)
        tier4 = StaticFundamentalsProvider(reference)

        result = await service(fundamentals=[tier1, tier2, tier3, tier4]).get_fundamentals(symbol)

        assert result.dividend_yield == 5.1
        assert result.pe_ratio == row.pe_ratio
        assert result.source == "TradingView (Live) + EGX (Static)"

    @pytest.mark.asyncio
    async def test_stops_once_every_field_is_filled(self) -> None:
        complete = FundamentalsSnapshot(
            eps=1.0, pe_ratio=2.0, book_value=3.0, dividend_yield=4.0, recommendation=0.5,
            source="Full",
        )
        later = FixedFundamentals("Later", FundamentalsSnapshot(eps=9.0, source="Later"))

        result = await service(
            fundamentals=[FixedFundamentals("Full", complete), later]
        ).get_fundamentals("COMI")

        assert result.eps == 1.0
        assert result.source == "Full"
        assert later.calls == 0

    @pytest.mark.asyncio
    async def test_nothing_found(self) -> None:
        result = await service(fundamentals=[FixedFundamentals("A", None)]).get_fundamentals("X")

        assert result.source is None
        assert result.missing_fields() == [
            "eps", "pe_ratio", "book_value", "dividend_yield", "recommendation"
        ]


class TestHistory:
    @pytest.mark.asyncio
    async def test_first_non_empty_series_trimmed(self) -> None:
        history = [FixedHistory("Empty", []), FixedHistory("Yahoo", [float(i) for i in range(300)])]

        closes = await service(history=history).get_history("COMI", 252)

        assert len(closes) == 252
        assert closes[-1] == 299.0

    @pytest.mark.asyncio
    async def test_no_history(self) -> None:
        assert await service(history=[FixedHistory("None", None)]).get_history("COMI") == []

    @pytest.mark.asyncio
    async def test_malformed_cached_series_moves_to_next_tier(self, cache: DiskCache) -> None:
        cache.set("historical_COMI_252", {"not": "a list"})
        history = [UnreachableEODHDHistory(cache), FixedHistory("Yahoo", [10.0, 11.0])]

        assert await service(history=history).get_history("COMI", 252) == [10.0, 11.0]

    @pytest.mark.asyncio
    async def test_malformed_cached_series_alone_means_no_history(self, cache: DiskCache) -> None:
        cache.set("historical_COMI_252", {"not": "a list"})
        history = [UnreachableEODHDHistory(cache)]

        assert await service(history=history).get_history("COMI", 252) == []
