from pydantic import Field, model_validator

from egx_advisor.schemas import CamelModel

PRICE_UNAVAILABLE = "Price not available for this stock"


class PriceQuote(CamelModel):
    symbol: str
    price: float | None = None
    change: float | None = None
    change_percent: float | None = None
    previous_close: float | None = None
    open: float | None = None
    high: float | None = None
    low: float | None = None
    volume: float | None = None
    source: str | None = None
    error: str | None = None

    @model_validator(mode="after")
    def _error_means_no_price(self) -> "PriceQuote":
        if self.error is not None and self.price is not None:
            raise ValueError("a quote carrying an error cannot carry a price")
        return self

    @classmethod
    def unavailable(cls, symbol: str) -> "PriceQuote":
        return cls(symbol=symbol, error=PRICE_UNAVAILABLE)


class FundamentalsSnapshot(CamelModel):
    eps: float | None = None
    pe_ratio: float | None = None
    book_value: float | None = None
    dividend_yield: float | None = None
    recommendation: float | None = None
    source: str | None = None

    def missing_fields(self) -> list[str]:
        return [name for name in FUNDAMENTAL_FIELDS if getattr(self, name) is None]


FUNDAMENTAL_FIELDS = ("eps", "pe_ratio", "book_value", "dividend_yield", "recommendation")


class BatchPriceRequest(CamelModel):
    symbols: list[str] = Field(default_factory=list)


class BatchPriceResponse(CamelModel):
    prices: list[PriceQuote]
