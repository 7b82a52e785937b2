import asyncio
from typing import TypeVar

import structlog
from pydantic import BaseModel

from egx_advisor.analysis.service import derive_eps
from egx_advisor.exceptions import ServiceUnavailableError, ValidationError
from egx_advisor.llm.client import LLMClient
from egx_advisor.market.reference import MarketReference
from egx_advisor.market.service import MarketService, normalize_symbol
from egx_advisor.portfolio.history import HistoryRepository
from egx_advisor.portfolio.prompts import (
    AMOUNT_SECTION,
    COMPARE_STOCKS_PROMPT,
    DEPLOY_CAPITAL_PROMPT,
    MARKET_PRICES_SECTION,
    PORTFOLIO_ANALYSIS_PROMPT,
)
from egx_advisor.portfolio.schemas import (
    CompareStocksRequest,
    CompareStocksResult,
    ComparedStock,
    DeployCapitalRequest,
    DeployCapitalResult,
    Portfolio,
    PortfolioAnalysisResult,
)

logger = structlog.get_logger()

AI_UNAVAILABLE = "AI analysis unavailable. Check the LLM API key."
MIN_COMPARED = 2
MAX_COMPARED = 3

ResultT = TypeVar("ResultT", bound=BaseModel)


def _to_json(model: BaseModel) -> str:
    return model.model_dump_json(by_alias=True, indent=2)


class PortfolioService:
    """Portfolio-level advice: health check, capital deployment and stock comparison."""

    def __init__(
        self,
        market_service: MarketService,
        llm: LLMClient,
        reference: MarketReference,
        history: HistoryRepository,
    ) -> None:
        self._market = market_service
        self._llm = llm
        self._reference = reference
        self._history = history

    async def analyze_portfolio(self, portfolio: Portfolio | None) -> PortfolioAnalysisResult:
        if portfolio is None or not portfolio.holdings:
            raise ValidationError("Portfolio holdings data required")

        logger.info("portfolio_analysis_started", holdings=len(portfolio.holdings))
        prompt = PORTFOLIO_ANALYSIS_PROMPT.format(portfolio_data=_to_json(portfolio))
        return await self._ask(prompt, PortfolioAnalysisResult, "portfolio_analysis")

    async def deploy_capital(self, request: DeployCapitalRequest) -> DeployCapitalResult:
        portfolio = request.portfolio
        amount = request.amount_to_deploy_egp
        if portfolio is None or not amount:
            raise ValidationError("Portfolio data and amount required")

        symbols = self._reference.symbols() + [h.symbol for h in portfolio.holdings]
        prices = await self._market.get_price_map(symbols)
        logger.info("deploy_capital_started", amount=amount, priced_symbols=len(prices))

        market_prices_section = ""
        if prices:
            lines = "\n".join(f"{symbol}: {price:.2f} EGP" for symbol, price in prices.items())
            market_prices_section = MARKET_PRICES_SECTION.format(prices=lines)

        prompt = DEPLOY_CAPITAL_PROMPT.format(
            amount=f"{amount:g}",
            portfolio_data=_to_json(portfolio),
            market_prices_section=market_prices_section,
        )
        result = await self._ask(prompt, DeployCapitalResult, "deploy_capital")

        try:
            await self._history.add(amount, result, portfolio)
        except OSError as exc:
            logger.error("history_save_failed", error=str(exc))
        return result

    async def compare_stocks(self, request: CompareStocksRequest) -> CompareStocksResult:
        if not MIN_COMPARED <= len(request.symbols) <= MAX_COMPARED:
            raise ValidationError(f"Provide {MIN_COMPARED}-{MAX_COMPARED} stock symbols to compare")
        if request.portfolio is None:
            raise ValidationError("Portfolio data required")

        symbols = [normalize_symbol(s) for s in request.symbols]
        logger.info("compare_stocks_started", symbols=symbols)
        stocks = await asyncio.gather(*(self._compared_stock(s) for s in symbols))

        amount_section = ""
        if request.amount_egp:
            amount_section = AMOUNT_SECTION.format(amount=f"{request.amount_egp:g}")

        prompt = COMPARE_STOCKS_PROMPT.format(
            stock_data="[\n" + ",\n".join(_to_json(stock) for stock in stocks) + "\n]",
            portfolio_data=_to_json(request.portfolio),
            amount_section=amount_section,
        )
        return await self._ask(prompt, CompareStocksResult, "compare_stocks")

    async def _compared_stock(self, symbol: str) -> ComparedStock:
        quote, fundamentals = await asyncio.gather(
            self._market.get_quote(symbol),
            self._market.get_fundamentals(symbol),
        )
        return ComparedStock(
            symbol=symbol,
            name_en=self._reference.company_name(symbol),
            current_price=quote.price or 0.0,
            pe_ratio=fundamentals.pe_ratio,
            eps=derive_eps(quote.price, fundamentals),
            dividend_yield=fundamentals.dividend_yield,
            book_value=fundamentals.book_value,
        )

    async def _ask(self, prompt: str, result_type: type[ResultT], task: str) -> ResultT:
        """Run one LLM call; any failure surfaces as a 503 for the caller."""
        if not self._llm.is_configured:
            logger.warning("llm_not_configured", task=task)
            raise ServiceUnavailableError(AI_UNAVAILABLE)

        try:
            data = await self._llm.complete_json(prompt)
            result = result_type.model_validate(data)
        except Exception as exc:
            logger.error("llm_task_failed", task=task, error=str(exc))
            raise ServiceUnavailableError(AI_UNAVAILABLE) from exc

        logger.info("llm_task_completed", task=task)
        return result
