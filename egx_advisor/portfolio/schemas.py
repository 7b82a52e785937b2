from typing import Literal

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from egx_advisor.schemas import CamelModel


class Holding(CamelModel):
    """A position as the client tracks it; unknown client fields pass through to the LLM."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    symbol: str
    name_en: str = ""
    sector: str = ""
    shares: float = 0
    average_cost: float = 0
    current_price: float = 0
    role: str = ""
    market_value: float = 0
    total_cost: float = 0
    profit_loss: float = 0
    profit_loss_percent: float = 0
    weight: float = 0
    eps: float | None = None
    pe_ratio: float | None = None
    book_value: float | None = None
    dividend_yield: float | None = None


class Portfolio(CamelModel):
    holdings: list[Holding] = Field(default_factory=list)
    total_value: float = 0
    total_cost: float = 0
    total_pl: float = Field(default=0, alias="totalPL")
    total_pl_percent: float = Field(default=0, alias="totalPLPercent")


class PortfolioAnalysisResult(CamelModel):
    overall_health: str
    summary: str
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    diversification_score: str = ""
    risk_level: str = ""
    sector_breakdown: str = ""
    top_performers: list[str] = Field(default_factory=list)
    underperformers: list[str] = Field(default_factory=list)


class DeployCapitalRequest(CamelModel):
    portfolio: Portfolio | None = None
    amount_to_deploy_egp: float | None = Field(default=None, alias="amountToDeployEGP")


class BuyZone(CamelModel):
    low: float
    high: float


class CapitalAllocation(CamelModel):
    symbol: str
    name_en: str = ""
    amount_egp: float = Field(alias="amountEGP")
    percentage: float
    reason: str = ""
    is_new_position: bool = False
    buy_zone: BuyZone | None = None


class DeployCapitalResult(CamelModel):
    strategy: str
    allocations: list[CapitalAllocation] = Field(default_factory=list)
    reasoning: str = ""
    risk_note: str = ""


class CompareStocksRequest(CamelModel):
    symbols: list[str] = Field(default_factory=list)
    portfolio: Portfolio | None = None
    amount_egp: float | None = Field(default=None, alias="amountEGP")


class ComparedStock(CamelModel):
    symbol: str
    name_en: str
    current_price: float
    pe_ratio: float | None = None
    eps: float | None = None
    dividend_yield: float | None = None
    book_value: float | None = None


class StockRanking(CamelModel):
    symbol: str
    name_en: str = ""
    growth_score: float
    long_term_score: float
    buy_urgency: Literal["Buy Now", "Can Wait", "Avoid"]
    summary: str = ""


class ComparisonAllocation(CamelModel):
    symbol: str
    name_en: str = ""
    amount_egp: float = Field(default=0, alias="amountEGP")
    percentage: float
    is_from_compared: bool = False


class CompareStocksResult(CamelModel):
    verdict: str
    action: Literal["buy_one", "split", "existing_stock", "dry_powder", "mixed"]
    rankings: list[StockRanking] = Field(default_factory=list)
    allocation: list[ComparisonAllocation] | None = None
    reasoning: str = ""
    risk_note: str = ""


class HoldingSnapshot(CamelModel):
    symbol: str
    name_en: str = ""
    shares: float = 0
    average_cost: float = 0
    current_price: float = 0
    weight: float = 0
    sector: str = ""
    role: str = ""


class HistoryEntry(CamelModel):
    id: str
    date: str
    amount_to_deploy_egp: float = Field(alias="amountToDeployEGP")
    result: DeployCapitalResult
    portfolio_snapshot: list[HoldingSnapshot] = Field(default_factory=list)


class SuccessResponse(CamelModel):
    success: bool = True
    message: str | None = None
