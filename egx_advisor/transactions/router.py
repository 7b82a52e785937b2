from fastapi import APIRouter

from egx_advisor.dependencies import TransactionExtractorDep
from egx_advisor.transactions.schemas import (
    ExtractTransactionsRequest,
    ExtractTransactionsResponse,
)

router = APIRouter()


@router.post("/extract-transactions", response_model=ExtractTransactionsResponse)
async def extract_transactions(
    request: ExtractTransactionsRequest,
    extractor: TransactionExtractorDep,
) -> ExtractTransactionsResponse:
    transactions = await extractor.extract(request.image)
    return ExtractTransactionsResponse(transactions=transactions)
