from fastapi import APIRouter

from egx_advisor.dependencies import HistoryRepositoryDep, PortfolioServiceDep
from egx_advisor.portfolio.schemas import (
    CompareStocksRequest,
    CompareStocksResult,
    DeployCapitalRequest,
    DeployCapitalResult,
    HistoryEntry,
    Portfolio,
    PortfolioAnalysisResult,
    SuccessResponse,
)

router = APIRouter()


@router.post("/portfolio-analysis", response_model=PortfolioAnalysisResult)
async def analyze_portfolio(
    portfolio: Portfolio,
    service: PortfolioServiceDep,
) -> PortfolioAnalysisResult:
    return await service.analyze_portfolio(portfolio)


@router.post("/deploy-capital", response_model=DeployCapitalResult)
async def deploy_capital(
    request: DeployCapitalRequest,
    service: PortfolioServiceDep,
) -> DeployCapitalResult:
    return await service.deploy_capital(request)


@router.post("/compare-stocks", response_model=CompareStocksResult)
async def compare_stocks(
    request: CompareStocksRequest,
    service: PortfolioServiceDep,
) -> CompareStocksResult:
    return await service.compare_stocks(request)


@router.get("/recommendation-history", response_model=list[HistoryEntry])
async def list_history(repository: HistoryRepositoryDep) -> list[HistoryEntry]:
    return await repository.list_all()


@router.delete(
    "/recommendation-history/{entry_id}",
    response_model=SuccessResponse,
    response_model_exclude_none=True,
)
async def delete_history_entry(
    entry_id: str,
    repository: HistoryRepositoryDep,
) -> SuccessResponse:
    await repository.delete(entry_id)
    return SuccessResponse()


@router.post("/reset-portfolio", response_model=SuccessResponse)
async def reset_portfolio() -> SuccessResponse:
    # Holdings live on the client; the server only acknowledges the reset.
    return SuccessResponse(message="Portfolio reset triggered on client")
