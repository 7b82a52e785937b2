import asyncio
from statistics import fmean

import structlog
from pydantic import ValidationError as PydanticValidationError

from egx_advisor.analysis.metrics import (
    DEFAULT_RISK_FREE_RATE,
    calculate_risk_metrics,
    price_change_percent,
)
from egx_advisor.analysis.prompts import STOCK_ANALYSIS_PROMPT
from egx_advisor.analysis.schemas import AnalysisResult, StockContext, Valuation
from egx_advisor.analysis.valuation import (
    build_formula_valuation,
    fair_value_graham,
    fair_value_pe,
    with_contiguous_zones,
)
from egx_advisor.cache.disk_cache import DiskCache, build_key
from egx_advisor.llm.client import LLMClient
from egx_advisor.market.reference import MarketReference
from egx_advisor.market.schemas import FundamentalsSnapshot, PriceQuote
from egx_advisor.market.service import DEFAULT_LOOKBACK_DAYS, MarketService, normalize_symbol

logger = structlog.get_logger()

AI_ANALYSIS_METHOD = "AI Analysis"
# Closes handed to the LLM as recent price context.
CONTEXT_PRICE_POINTS = 60


def _moving_average(prices: list[float], window: int) -> float | None:
    if len(prices) < window:
        return None
    return fmean(prices[-window:])


def derive_eps(price: float | None, fundamentals: FundamentalsSnapshot) -> float | None:
    """Reported EPS, or price / P/E when only the ratio is known."""
    if fundamentals.eps:
        return fundamentals.eps
    pe_ratio = fundamentals.pe_ratio
    if pe_ratio and pe_ratio > 0 and price:
        return price / pe_ratio
    return None


class AnalysisService:
    """Combines market data, risk metrics and a valuation into one report."""

    def __init__(
        self,
        market_service: MarketService,
        llm: LLMClient,
        cache: DiskCache,
        reference: MarketReference,
        risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
    ) -> None:
        self._market = market_service
        self._llm = llm
        self._cache = cache
        self._reference = reference
        self._risk_free_rate = risk_free_rate

    async def analyze(self, symbol: str, refresh: bool = False) -> AnalysisResult:
        symbol = normalize_symbol(symbol)
        logger.info("analysis_started", symbol=symbol, refresh=refresh)

        quote, fundamentals = await asyncio.gather(
            self._market.get_quote(symbol),
            self._market.get_fundamentals(symbol),
        )
        history = await self._market.get_history(symbol, DEFAULT_LOOKBACK_DAYS)
        context = self._build_context(symbol, quote, fundamentals, history)

        valuation = await self._llm_valuation(context, refresh)
        if valuation is None:
            logger.info("analysis_formula_fallback", symbol=symbol)
            valuation = build_formula_valuation(
                current_price=context.current_price,
                eps=context.eps,
                pe_ratio=context.pe_ratio,
                book_value=context.book_value,
                dividend_yield=context.dividend_yield,
                sharpe_ratio=context.sharpe_ratio,
            )
        valuation = with_contiguous_zones(valuation)

        result = AnalysisResult(
            symbol=symbol,
            current_price=quote.price,
            eps=context.eps,
            pe_ratio=context.pe_ratio,
            book_value=context.book_value,
            price_to_book=context.price_to_book,
            dividend_yield=context.dividend_yield,
            fifty_two_week_low=context.fifty_two_week_low,
            fifty_two_week_high=context.fifty_two_week_high,
            fifty_day_avg=context.fifty_day_avg,
            two_hundred_day_avg=context.two_hundred_day_avg,
            fair_value_pe=fair_value_pe(context.eps),
            fair_value_graham=fair_value_graham(context.eps, context.book_value),
            fair_value_avg=valuation.fair_value_estimate,
            strong_buy_zone=valuation.strong_buy_zone,
            buy_zone=valuation.buy_zone,
            hold_zone=valuation.hold_zone,
            sell_zone=valuation.sell_zone,
            strong_sell_zone=valuation.strong_sell_zone,
            first_target=valuation.first_target,
            second_target=valuation.second_target,
            third_target=valuation.third_target,
            recommendation=valuation.recommendation,
            sharpe_ratio=context.sharpe_ratio,
            sortino_ratio=context.sortino_ratio,
            data_available=(
                quote.price is not None or context.eps is not None or context.pe_ratio is not None
            ),
            price_source=quote.source,
            financials_source=fundamentals.source,
            reasoning=valuation.reasoning,
            confidence=valuation.confidence,
            risk_level=valuation.risk_level,
            key_points=valuation.key_points,
            analysis_method=valuation.analysis_method,
            valuation_status=valuation.valuation_status,
            simple_explanation=valuation.simple_explanation,
            risk_signals=valuation.risk_signals,
            error=quote.error,
        )
        logger.info(
            "analysis_completed",
            symbol=symbol,
            recommendation=result.recommendation,
            method=result.analysis_method,
        )
        return result

    def _build_context(
        self,
        symbol: str,
        quote: PriceQuote,
        fundamentals: FundamentalsSnapshot,
        history: list[float],
    ) -> StockContext:
        price = quote.price
        eps = derive_eps(price, fundamentals)
        book_value = fundamentals.book_value
        metrics = calculate_risk_metrics(history, self._risk_free_rate)

        return StockContext(
            symbol=symbol,
            company_name=self._reference.company_name(symbol),
            current_price=price or 0.0,
            volume=quote.volume,
            eps=eps,
            pe_ratio=fundamentals.pe_ratio,
            book_value=book_value,
            price_to_book=price / book_value if price and book_value else None,
            dividend_yield=fundamentals.dividend_yield or None,
            fifty_two_week_high=max(history) if history else None,
            fifty_two_week_low=min(history) if history else None,
            fifty_day_avg=_moving_average(history, 50),
            two_hundred_day_avg=_moving_average(history, 200),
            sharpe_ratio=metrics.sharpe_ratio,
            sortino_ratio=metrics.sortino_ratio,
            historical_prices=history[-CONTEXT_PRICE_POINTS:],
            price_change_30d=price_change_percent(history, price, 30),
            price_change_90d=price_change_percent(history, price, 90),
            price_source=quote.source,
            fundamentals_source=fundamentals.source,
        )

    async def _llm_valuation(self, context: StockContext, refresh: bool) -> Valuation | None:
        """LLM valuation backed by a day-long cache; None means use the formula."""
        key = build_key("analysis", context.symbol)
        if refresh:
            logger.info("analysis_cache_skipped", symbol=context.symbol)
        else:
            cached = self._load(self._cache.get(key))
            if cached is not None:
                logger.info("analysis_cache_hit", symbol=context.symbol)
                return cached

        if not self._llm.is_configured:
            logger.warning("analysis_llm_not_configured", symbol=context.symbol)
            return None

        prompt = STOCK_ANALYSIS_PROMPT.format(
            stock_data=context.model_dump_json(by_alias=True, indent=2)
        )
        try:
            data = await self._llm.complete_json(prompt)
            valuation = Valuation.model_validate(data).model_copy(
                update={"analysis_method": AI_ANALYSIS_METHOD}
            )
        except PydanticValidationError as exc:
            logger.error("analysis_llm_invalid", symbol=context.symbol, error=str(exc))
            return self._load(self._cache.get_stale(key))
        except Exception as exc:
            logger.error("analysis_llm_failed", symbol=context.symbol, error=str(exc))
            return self._load(self._cache.get_stale(key))

        self._cache.set(key, valuation.model_dump(mode="json", by_alias=True))
        logger.info(
            "analysis_llm_completed",
            symbol=context.symbol,
            recommendation=valuation.recommendation,
        )
        return valuation

    @staticmethod
    def _load(payload: object) -> Valuation | None:
        if payload is None:
            return None
        try:
            return Valuation.model_validate(payload)
        except PydanticValidationError:
            logger.warning("analysis_cache_invalid")
            return None
