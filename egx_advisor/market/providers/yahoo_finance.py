import asyncio
from datetime import date, timedelta

import structlog
import yfinance as yf

from egx_advisor.market.providers.base import HistoryProvider

logger = structlog.get_logger()

# Yahoo lists EGX equities under the Cairo suffix.
YAHOO_SUFFIX = ".CA"


def _fetch_closes(ticker: str, start: date, end: date) -> list[float]:
    """Fetch daily closes synchronously (to be run in a thread)."""
    t = yf.Ticker(ticker)
    hist = t.history(start=start.isoformat(), end=end.isoformat(), auto_adjust=False)
    if hist.empty or "Close" not in hist:
        return []
    hist = hist.sort_index()
    return [float(close) for close in hist["Close"].dropna().tolist() if close > 0]


class YahooFinanceHistoryProvider(HistoryProvider):
    name = "Yahoo Finance"

    async def fetch(self, symbol: str, days: int) -> list[float] | None:
        end = date.today() + timedelta(days=1)
        start = end - timedelta(days=days + 31)
        ticker = f"{symbol}{YAHOO_SUFFIX}"
        try:
            closes = await asyncio.to_thread(_fetch_closes, ticker, start, end)
        except Exception as exc:
            logger.warning("yfinance_history_error", ticker=ticker, error=str(exc))
            return None

        if not closes:
            logger.info("yfinance_history_empty", ticker=ticker)
            return None
        return closes
