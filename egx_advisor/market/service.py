import asyncio
from collections.abc import Sequence

import structlog

from egx_advisor.exceptions import ValidationError
from egx_advisor.market.providers.base import (
    FundamentalsProvider,
    HistoryProvider,
    PriceProvider,
)
from egx_advisor.market.schemas import FUNDAMENTAL_FIELDS, FundamentalsSnapshot, PriceQuote

logger = structlog.get_logger()

DEFAULT_LOOKBACK_DAYS = 252
DEFAULT_BATCH_LIMIT = 20


def normalize_symbol(symbol: str) -> str:
    return symbol.upper().strip()


class MarketService:
    """Runs the provider chains in priority order.

    Prices short-circuit on the first usable quote. Fundamentals keep going and
    let each later tier fill only the fields still missing.
    """

    def __init__(
        self,
        price_providers: Sequence[PriceProvider],
        fundamentals_providers: Sequence[FundamentalsProvider],
        history_providers: Sequence[HistoryProvider],
        batch_limit: int = DEFAULT_BATCH_LIMIT,
    ) -> None:
        self._price_providers = list(price_providers)
        self._fundamentals_providers = list(fundamentals_providers)
        self._history_providers = list(history_providers)
        self._batch_limit = batch_limit

    async def get_quote(self, symbol: str) -> PriceQuote:
        symbol = normalize_symbol(symbol)
        for provider in self._price_providers:
            quote = await self._attempt(provider, symbol)
            if quote is not None:
                logger.info("market_quote", symbol=symbol, source=quote.source, price=quote.price)
                return quote

        logger.warning("market_quote_unavailable", symbol=symbol)
        return PriceQuote.unavailable(symbol)

    async def get_quotes(self, symbols: list[str]) -> list[PriceQuote]:
        if not symbols:
            raise ValidationError("symbols array required")

        requested = [normalize_symbol(s) for s in symbols[: self._batch_limit]]
        logger.info(
            "market_get_quotes", count=len(requested), truncated=len(symbols) > len(requested)
        )

        results = await asyncio.gather(
            *(self.get_quote(symbol) for symbol in requested), return_exceptions=True
        )

        quotes: list[PriceQuote] = []
        for symbol, result in zip(requested, results, strict=True):
            if isinstance(result, Exception):
                logger.error("market_quote_failed", symbol=symbol, error=str(result))
                quotes.append(PriceQuote.unavailable(symbol))
                continue
            quotes.append(result)
        return quotes

    async def get_price_map(self, symbols: list[str]) -> dict[str, float]:
        """Fetch every symbol at once and keep only the ones with a price."""
        unique = list(dict.fromkeys(normalize_symbol(s) for s in symbols))
        quotes = await asyncio.gather(*(self.get_quote(symbol) for symbol in unique))
        return {quote.symbol: quote.price for quote in quotes if quote.price is not None}

    async def get_fundamentals(self, symbol: str) -> FundamentalsSnapshot:
        symbol = normalize_symbol(symbol)
        merged: dict[str, float] = {}
        sources: list[str] = []

        for provider in self._fundamentals_providers:
            snapshot = await self._attempt(provider, symbol)
            if snapshot is None:
                continue

            filled = {
                name: getattr(snapshot, name)
                for name in FUNDAMENTAL_FIELDS
                if name not in merged and getattr(snapshot, name) is not None
            }
            if not filled:
                continue

            merged.update(filled)
            sources.append(snapshot.source or provider.name)
            logger.debug(
                "fundamentals_tier_used", symbol=symbol, provider=provider.name, fields=list(filled)
            )
            if len(merged) == len(FUNDAMENTAL_FIELDS):
                break

        result = FundamentalsSnapshot(**merged, source=" + ".join(sources) or None)
        logger.info(
            "market_fundamentals",
            symbol=symbol,
            source=result.source,
            eps=result.eps,
            pe_ratio=result.pe_ratio,
            dividend_yield=result.dividend_yield,
        )
        return result

    async def get_history(self, symbol: str, days: int = DEFAULT_LOOKBACK_DAYS) -> list[float]:
        symbol = normalize_symbol(symbol)
        for provider in self._history_providers:
            closes = await self._attempt(provider, symbol, days)
            if closes:
                logger.info(
                    "market_history", symbol=symbol, source=provider.name, points=len(closes)
                )
                return list(closes[-days:])

        logger.warning("market_history_unavailable", symbol=symbol)
        return []

    @staticmethod
    async def _attempt(provider, *args):
        """Call one tier; any escaped exception counts as "nothing from this source"."""
        try:
            return await provider.fetch(*args)
        except Exception as exc:
            logger.error("provider_unexpected_error", provider=provider.name, error=str(exc))
            return None
