import httpx

from egx_advisor.market.providers.base import FundamentalsProvider, HttpSource, positive
from egx_advisor.market.schemas import FundamentalsSnapshot

OVERVIEW_URL = "https://english.mubasher.info/api/1/listed-company/{symbol}/overview"


class MubasherFundamentalsProvider(HttpSource, FundamentalsProvider):
    name = "Mubasher"

    def __init__(self, client: httpx.AsyncClient, url: str = OVERVIEW_URL) -> None:
        super().__init__(client)
        self._url = url

    async def fetch(self, symbol: str) -> FundamentalsSnapshot | None:
        data = await self._request_json(
            "GET", self._url.format(symbol=symbol), params={"country": "eg"}
        )
        if not isinstance(data, dict):
            return None

        eps = positive(data.get("eps") or data.get("earningsPerShare"))
        pe_ratio = positive(data.get("pe") or data.get("priceEarnings"))
        book_value = positive(data.get("bookValue") or data.get("bookValuePerShare"))
        if eps is None and pe_ratio is None and book_value is None:
            return None

        return FundamentalsSnapshot(
            eps=eps,
            pe_ratio=pe_ratio,
            book_value=book_value,
            source=self.name,
        )
