from fastapi import APIRouter

from egx_advisor.dependencies import MarketServiceDep
from egx_advisor.market.schemas import BatchPriceRequest, BatchPriceResponse, PriceQuote

router = APIRouter()


@router.get("/{symbol}", response_model=PriceQuote)
async def get_price(symbol: str, service: MarketServiceDep) -> PriceQuote:
    return await service.get_quote(symbol)


@router.post("/batch", response_model=BatchPriceResponse)
async def get_prices(request: BatchPriceRequest, service: MarketServiceDep) -> BatchPriceResponse:
    prices = await service.get_quotes(request.symbols)
    return BatchPriceResponse(prices=prices)
