"""EODHD adapters: the only tier that reads and writes the disk cache.

A fresh cache entry short-circuits the network call. When the live call fails,
the stale entry for the same key is replayed before giving up.
"""

from datetime import date, timedelta
from typing import TypeVar

import httpx
import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from egx_advisor.cache.disk_cache import DiskCache, build_key
from egx_advisor.market.providers.base import (
    FundamentalsProvider,
    HistoryProvider,
    HttpSource,
    PriceProvider,
    parse_number,
    positive,
)
from egx_advisor.market.schemas import FundamentalsSnapshot, PriceQuote

logger = structlog.get_logger()

EXCHANGE_SUFFIX = "EGX"
HISTORY_BUFFER_DAYS = 30
FUNDAMENTALS_FILTER = (
    "Highlights::EarningsShare,Highlights::PERatio,"
    "Highlights::BookValue,Highlights::DividendYield"
)

ModelT = TypeVar("ModelT", bound=BaseModel)


class _EODHDSource(HttpSource):
    name = "EODHD"

    def __init__(
        self,
        client: httpx.AsyncClient,
        cache: DiskCache,
        api_token: str,
        base_url: str = "https://eodhd.com/api",
    ) -> None:
        super().__init__(client)
        self._cache = cache
        self._api_token = api_token
        self._base_url = base_url.rstrip("/")

    async def _get(self, path: str, **params: str) -> object | None:
        if not self._api_token:
            logger.warning("eodhd_token_missing")
            return None
        url = f"{self._base_url}/{path}"
        return await self._request_json(
            "GET", url, params={"api_token": self._api_token, "fmt": "json", **params}
        )


def _cached_model(model: type[ModelT], payload: object, key: str) -> ModelT | None:
    """Validate a cached payload; a payload that no longer fits the model is a miss."""
    if payload is None:
        return None
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        logger.warning("eodhd_cache_invalid", key=key, error=str(exc))
        return None


def _cached_closes(payload: object, key: str) -> list[float] | None:
    if payload is None:
        return None
    valid = isinstance(payload, list) and all(
        isinstance(close, int | float) and not isinstance(close, bool) and close > 0
        for close in payload
    )
    if not valid or not payload:
        logger.warning("eodhd_cache_invalid", key=key)
        return None
    return [float(close) for close in payload]


def _sorted_bars(data: object) -> list[dict]:
    """Return EOD bars in ascending date order whatever order upstream used."""
    if not isinstance(data, list):
        return []
    bars = [bar for bar in data if isinstance(bar, dict) and bar.get("date")]
    return sorted(bars, key=lambda bar: str(bar["date"]))


class EODHDPriceProvider(_EODHDSource, PriceProvider):
    async def fetch(self, symbol: str) -> PriceQuote | None:
        key = build_key("price", symbol)

        quote = _cached_model(PriceQuote, self._cache.get(key), key)
        if quote is not None and quote.price is not None:
            return quote.model_copy(update={"source": f"{quote.source} (Cached)"})

        logger.info("eodhd_price_fetch", symbol=symbol)
        data = await self._get(f"eod/{symbol}.{EXCHANGE_SUFFIX}", period="d", order="d")
        quote = self._parse(symbol, data)
        if quote is None:
            return self._stale(key)

        self._cache.set(key, quote.model_dump(mode="json"))
        return quote

    def _parse(self, symbol: str, data: object) -> PriceQuote | None:
        bars = _sorted_bars(data)
        if not bars:
            return None

        latest = bars[-1]
        price = positive(latest.get("close"))
        if price is None:
            return None

        previous_close = positive(bars[-2].get("close")) if len(bars) > 1 else None
        change = change_percent = None
        if previous_close:
            change = price - previous_close
            change_percent = change / previous_close * 100

        return PriceQuote(
            symbol=symbol,
            price=price,
            change=change,
            change_percent=change_percent,
            previous_close=previous_close,
            open=positive(latest.get("open")),
            high=positive(latest.get("high")),
            low=positive(latest.get("low")),
            volume=parse_number(latest.get("volume")),
            source=self.name,
        )

    def _stale(self, key: str) -> PriceQuote | None:
        quote = _cached_model(PriceQuote, self._cache.get_stale(key), key)
        if quote is None or quote.price is None:
            return None
        return quote.model_copy(update={"source": f"{quote.source} (Stale)"})


class EODHDFundamentalsProvider(_EODHDSource, FundamentalsProvider):
    """Fundamentals need a paid EODHD plan, so live fetching is opt-in."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        cache: DiskCache,
        api_token: str,
        base_url: str = "https://eodhd.com/api",
        enabled: bool = False,
    ) -> None:
        super().__init__(client, cache, api_token, base_url)
        self._enabled = enabled

    async def fetch(self, symbol: str) -> FundamentalsSnapshot | None:
        key = build_key("fundamentals", symbol)

        snapshot = _cached_model(FundamentalsSnapshot, self._cache.get(key), key)
        if snapshot is not None:
            return snapshot.model_copy(update={"source": f"{snapshot.source} (Cached)"})

        if not self._enabled:
            logger.debug("eodhd_fundamentals_disabled", symbol=symbol)
            return None

        logger.info("eodhd_fundamentals_fetch", symbol=symbol)
        data = await self._get(
            f"fundamentals/{symbol}.{EXCHANGE_SUFFIX}", filter=FUNDAMENTALS_FILTER
        )
        snapshot = self._parse(data)
        if snapshot is None:
            return _cached_model(FundamentalsSnapshot, self._cache.get_stale(key), key)

        self._cache.set(key, snapshot.model_dump(mode="json"))
        return snapshot

    def _parse(self, data: object) -> FundamentalsSnapshot | None:
        if not isinstance(data, dict):
            return None
        # With a filter EODHD returns the flattened keys; without one, nested Highlights.
        highlights = data.get("Highlights", data)
        if not isinstance(highlights, dict):
            return None

        eps = positive(_highlight(highlights, "EarningsShare"))
        pe_ratio = positive(_highlight(highlights, "PERatio"))
        if eps is None and pe_ratio is None:
            return None

        dividend = parse_number(_highlight(highlights, "DividendYield"))
        return FundamentalsSnapshot(
            eps=eps,
            pe_ratio=pe_ratio,
            book_value=positive(_highlight(highlights, "BookValue")),
            dividend_yield=dividend * 100 if dividend else None,
            source=self.name,
        )


def _highlight(highlights: dict, field: str) -> object:
    value = highlights.get(field)
    return value if value is not None else highlights.get(f"Highlights::{field}")


class EODHDHistoryProvider(_EODHDSource, HistoryProvider):
    async def fetch(self, symbol: str, days: int) -> list[float] | None:
        key = build_key("historical", symbol, days)

        cached = _cached_closes(self._cache.get(key), key)
        if cached:
            logger.debug("eodhd_history_cached", symbol=symbol, points=len(cached))
            return cached

        to_date = date.today()
        from_date = to_date - timedelta(days=days + HISTORY_BUFFER_DAYS)
        logger.info("eodhd_history_fetch", symbol=symbol, days=days)
        data = await self._get(
            f"eod/{symbol}.{EXCHANGE_SUFFIX}",
            **{"from": from_date.isoformat(), "to": to_date.isoformat()},
        )

        closes = [
            close
            for close in (positive(bar.get("close")) for bar in _sorted_bars(data))
            if close is not None
        ]
        if not closes:
            return _cached_closes(self._cache.get_stale(key), key)

        self._cache.set(key, closes)
        logger.info("eodhd_history_cached_new", symbol=symbol, points=len(closes))
        return closes
