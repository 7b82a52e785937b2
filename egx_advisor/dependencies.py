from functools import lru_cache
from typing import Annotated

import structlog
from fastapi import Depends

from egx_advisor.analysis.service import AnalysisService
from egx_advisor.cache.disk_cache import DiskCache
from egx_advisor.config import settings
from egx_advisor.exceptions import LLMUnavailableError
from egx_advisor.http_client import get_http_client
from egx_advisor.llm.client import LLMClient
from egx_advisor.llm.factory import LLMFactory
from egx_advisor.market.providers.cnbc import CNBCPriceProvider
from egx_advisor.market.providers.eodhd import (
    EODHDFundamentalsProvider,
    EODHDHistoryProvider,
    EODHDPriceProvider,
)
from egx_advisor.market.providers.mubasher import MubasherFundamentalsProvider
from egx_advisor.market.providers.static_table import StaticFundamentalsProvider
from egx_advisor.market.providers.tradingview import (
    TradingViewFundamentalsProvider,
    TradingViewPriceProvider,
)
from egx_advisor.market.providers.yahoo_finance import YahooFinanceHistoryProvider
from egx_advisor.market.reference import MarketReference, load_market_reference
from egx_advisor.market.service import MarketService
from egx_advisor.portfolio.history import HistoryRepository
from egx_advisor.portfolio.service import PortfolioService
from egx_advisor.transactions.extractor import TransactionExtractor

logger = structlog.get_logger()


@lru_cache
def get_disk_cache() -> DiskCache:
    return DiskCache(settings.cache_dir, ttl_seconds=settings.cache_ttl_hours * 3600)


@lru_cache
def get_history_repository() -> HistoryRepository:
    return HistoryRepository(settings.history_path)


def get_market_reference() -> MarketReference:
    return load_market_reference()


DiskCacheDep = Annotated[DiskCache, Depends(get_disk_cache)]
HistoryRepositoryDep = Annotated[HistoryRepository, Depends(get_history_repository)]
MarketReferenceDep = Annotated[MarketReference, Depends(get_market_reference)]


def get_market_service() -> MarketService:
    client = get_http_client()
    cache = get_disk_cache()
    reference = get_market_reference()
    eodhd = {
        "client": client,
        "cache": cache,
        "api_token": settings.eodhd_api_token,
        "base_url": settings.eodhd_base_url,
    }
    return MarketService(
        price_providers=[
            EODHDPriceProvider(**eodhd),
            TradingViewPriceProvider(client),
            CNBCPriceProvider(client),
        ],
        fundamentals_providers=[
            EODHDFundamentalsProvider(**eodhd, enabled=settings.eodhd_fundamentals_enabled),
            TradingViewFundamentalsProvider(client),
            MubasherFundamentalsProvider(client),
            StaticFundamentalsProvider(reference),
        ],
        history_providers=[
            EODHDHistoryProvider(**eodhd),
            YahooFinanceHistoryProvider(),
        ],
        batch_limit=settings.batch_limit,
    )


def get_llm_client() -> LLMClient:
    try:
        llm = LLMFactory.create(
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
            max_retries=0,
        )
    except LLMUnavailableError as exc:
        logger.warning("llm_not_configured", reason=exc.message)
        return LLMClient(None)
    return LLMClient(llm)


MarketServiceDep = Annotated[MarketService, Depends(get_market_service)]
LLMClientDep = Annotated[LLMClient, Depends(get_llm_client)]


def get_analysis_service(
    market_service: MarketServiceDep,
    llm: LLMClientDep,
    cache: DiskCacheDep,
    reference: MarketReferenceDep,
) -> AnalysisService:
    return AnalysisService(
        market_service, llm, cache, reference, risk_free_rate=settings.risk_free_rate
    )


def get_portfolio_service(
    market_service: MarketServiceDep,
    llm: LLMClientDep,
    reference: MarketReferenceDep,
    history: HistoryRepositoryDep,
) -> PortfolioService:
    return PortfolioService(market_service, llm, reference, history)


def get_transaction_extractor(llm: LLMClientDep) -> TransactionExtractor:
    return TransactionExtractor(llm)


AnalysisServiceDep = Annotated[AnalysisService, Depends(get_analysis_service)]
PortfolioServiceDep = Annotated[PortfolioService, Depends(get_portfolio_service)]
TransactionExtractorDep = Annotated[TransactionExtractor, Depends(get_transaction_extractor)]
