from egx_advisor.market.providers.base import FundamentalsProvider
from egx_advisor.market.reference import MarketReference
from egx_advisor.market.schemas import FundamentalsSnapshot


class StaticFundamentalsProvider(FundamentalsProvider):
    """Last tier: the published EGX P/E and dividend-yield table."""

    name = "EGX (Static)"

    def __init__(self, reference: MarketReference) -> None:
        self._reference = reference

    async def fetch(self, symbol: str) -> FundamentalsSnapshot | None:
        row = self._reference.static_fundamentals.get(symbol)
        if row is None:
            return None

        pe_ratio = row.pe_ratio if row.pe_ratio and row.pe_ratio > 0 else None
        eps = row.eps if row.eps and row.eps > 0 else None
        # A published yield of 0 is a real value, unlike a zero P/E.
        return FundamentalsSnapshot(
            eps=eps,
            pe_ratio=pe_ratio,
            dividend_yield=row.dividend_yield,
            source=self.name,
        )
