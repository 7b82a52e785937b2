import httpx
import structlog

from egx_advisor.market.providers.base import (
    FundamentalsProvider,
    HttpSource,
    PriceProvider,
    parse_number,
    positive,
)
from egx_advisor.market.schemas import FundamentalsSnapshot, PriceQuote

logger = structlog.get_logger()

SCANNER_URL = "https://scanner.tradingview.com/egypt/scan"

PRICE_COLUMNS = ["close", "change", "volume", "open", "high", "low", "Perf.W", "Perf.1M"]
FUNDAMENTAL_COLUMNS = [
    "name",
    "close",
    "earnings_per_share_basic_ttm",
    "price_earnings_ttm",
    "dividend_yield_recent",
    "price_book_ratio",
    "market_cap_basic",
    "Recommend.All",
]


class _TradingViewScanner(HttpSource):
    name = "TradingView"

    def __init__(self, client: httpx.AsyncClient, url: str = SCANNER_URL) -> None:
        super().__init__(client)
        self._url = url

    async def _scan(self, symbol: str, columns: list[str]) -> dict | None:
        """Return ``{column: value}`` for the first row of the scan, or None."""
        body = {
            "symbols": {"tickers": [f"EGX:{symbol}"], "query": {"types": []}},
            "columns": columns,
        }
        data = await self._request_json("POST", self._url, json=body)
        if not isinstance(data, dict):
            return None

        rows = data.get("data") or []
        if not rows or not isinstance(rows[0], dict):
            return None
        values = rows[0].get("d")
        if not isinstance(values, list) or len(values) < len(columns):
            return None
        return dict(zip(columns, values, strict=False))


class TradingViewPriceProvider(_TradingViewScanner, PriceProvider):
    async def fetch(self, symbol: str) -> PriceQuote | None:
        row = await self._scan(symbol, PRICE_COLUMNS)
        if row is None:
            return None

        price = positive(row["close"])
        if price is None:
            return None

        # The scanner's "change" column is the absolute move since the previous close.
        change = parse_number(row["change"]) or None
        previous_close = price - change if change is not None else None
        if previous_close is not None and previous_close <= 0:
            previous_close = None
        change_percent = change / previous_close * 100 if previous_close is not None else None

        return PriceQuote(
            symbol=symbol,
            price=price,
            change=change,
            change_percent=change_percent,
            previous_close=previous_close,
            open=positive(row["open"]),
            high=positive(row["high"]),
            low=positive(row["low"]),
            volume=positive(row["volume"]),
            source=self.name,
        )


class TradingViewFundamentalsProvider(_TradingViewScanner, FundamentalsProvider):
    name = "TradingView (Live)"

    async def fetch(self, symbol: str) -> FundamentalsSnapshot | None:
        row = await self._scan(symbol, FUNDAMENTAL_COLUMNS)
        if row is None:
            return None

        close = positive(row["close"])
        pb_ratio = positive(row["price_book_ratio"])
        book_value = close / pb_ratio if close and pb_ratio else None

        snapshot = FundamentalsSnapshot(
            eps=parse_number(row["earnings_per_share_basic_ttm"]) or None,
            pe_ratio=parse_number(row["price_earnings_ttm"]) or None,
            book_value=book_value,
            dividend_yield=parse_number(row["dividend_yield_recent"]) or None,
            recommendation=parse_number(row["Recommend.All"]) or None,
            source=self.name,
        )
        logger.info(
            "tradingview_fundamentals",
            symbol=symbol,
            eps=snapshot.eps,
            pe_ratio=snapshot.pe_ratio,
            dividend_yield=snapshot.dividend_yield,
        )
        return snapshot
