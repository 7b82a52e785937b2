from pydantic import Field

from egx_advisor.schemas import CamelModel


class PriceZone(CamelModel):
    min: float
    max: float


class Valuation(CamelModel):
    """Valuation narrative and price bands, from the LLM or the formula fallback."""

    fair_value_estimate: float | None = None
    fair_value_range: PriceZone | None = None

    strong_buy_zone: PriceZone | None = None
    buy_zone: PriceZone | None = None
    hold_zone: PriceZone | None = None
    sell_zone: PriceZone | None = None
    strong_sell_zone: PriceZone | None = None

    first_target: float | None = None
    second_target: float | None = None
    third_target: float | None = None

    recommendation: str = Field(min_length=1)
    confidence: str = "Low"
    reasoning: str = Field(min_length=1)
    risk_level: str = "High"
    key_points: list[str] = Field(default_factory=list)
    analysis_method: str = ""

    valuation_status: str = "Fair"
    simple_explanation: list[str] = Field(default_factory=list)
    risk_signals: list[str] = Field(default_factory=list)

    def zones(self) -> list[PriceZone | None]:
        return [
            self.strong_buy_zone,
            self.buy_zone,
            self.hold_zone,
            self.sell_zone,
            self.strong_sell_zone,
        ]


class StockContext(CamelModel):
    """Everything the valuation step sees about one stock."""

    symbol: str
    company_name: str
    current_price: float
    volume: float | None = None
    eps: float | None = None
    pe_ratio: float | None = None
    book_value: float | None = None
    price_to_book: float | None = None
    dividend_yield: float | None = None
    fifty_two_week_high: float | None = None
    fifty_two_week_low: float | None = None
    fifty_day_avg: float | None = None
    two_hundred_day_avg: float | None = None
    sharpe_ratio: float | None = None
    sortino_ratio: float | None = None
    historical_prices: list[float] = Field(default_factory=list)
    price_change_30d: float | None = None
    price_change_90d: float | None = None
    price_source: str | None = None
    fundamentals_source: str | None = None


class AnalysisResult(CamelModel):
    symbol: str
    current_price: float | None
    eps: float | None
    pe_ratio: float | None
    book_value: float | None
    price_to_book: float | None
    dividend_yield: float | None
    fifty_two_week_low: float | None = None
    fifty_two_week_high: float | None = None
    fifty_day_avg: float | None = None
    two_hundred_day_avg: float | None = None

    fair_value_pe: float | None = None
    fair_value_graham: float | None = None
    fair_value_avg: float | None = None

    strong_buy_zone: PriceZone | None = None
    buy_zone: PriceZone | None = None
    hold_zone: PriceZone | None = None
    sell_zone: PriceZone | None = None
    strong_sell_zone: PriceZone | None = None
    first_target: float | None = None
    second_target: float | None = None
    third_target: float | None = None

    recommendation: str
    sharpe_ratio: float | None
    sortino_ratio: float | None
    data_available: bool
    price_source: str | None = None
    financials_source: str | None = None

    reasoning: str
    confidence: str
    risk_level: str
    key_points: list[str]
    analysis_method: str
    valuation_status: str
    simple_explanation: list[str]
    risk_signals: list[str]
    error: str | None = None
