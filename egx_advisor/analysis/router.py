from fastapi import APIRouter

from egx_advisor.analysis.schemas import AnalysisResult
from egx_advisor.dependencies import AnalysisServiceDep

router = APIRouter()


@router.get("/{symbol}", response_model=AnalysisResult)
async def get_analysis(
    symbol: str,
    service: AnalysisServiceDep,
    refresh: bool = False,
) -> AnalysisResult:
    return await service.analyze(symbol, refresh=refresh)
