import time

import httpx

from egx_advisor.market.providers.base import HttpSource, PriceProvider, parse_number, positive
from egx_advisor.market.schemas import PriceQuote

QUOTE_URL = "https://quote.cnbc.com/quote-html-webservice/restQuote/symbolType/symbol"


class CNBCPriceProvider(HttpSource, PriceProvider):
    name = "CNBC"

    def __init__(self, client: httpx.AsyncClient, url: str = QUOTE_URL) -> None:
        super().__init__(client)
        self._url = url

    async def fetch(self, symbol: str) -> PriceQuote | None:
        params = {
            "symbols": f"{symbol}-EG",
            "requestMethod": "itv",
            "noCache": str(int(time.time() * 1000)),
            "partnerId": "2",
            "fund": "1",
            "exthrs": "1",
            "output": "json",
        }
        data = await self._request_json("GET", self._url, params=params)
        if not isinstance(data, dict):
            return None

        quotes = (data.get("FormattedQuoteResult") or {}).get("FormattedQuote") or []
        if not quotes or not isinstance(quotes[0], dict):
            return None
        quote = quotes[0]

        price = positive(quote.get("last"))
        if price is None:
            return None

        return PriceQuote(
            symbol=symbol,
            price=price,
            change=parse_number(quote.get("change")),
            change_percent=parse_number(str(quote.get("change_pct", "")).rstrip("%")),
            previous_close=positive(quote.get("previous_day_closing")),
            open=positive(quote.get("open")),
            high=positive(quote.get("high")),
            low=positive(quote.get("low")),
            volume=positive(quote.get("volume")),
            source=self.name,
        )
