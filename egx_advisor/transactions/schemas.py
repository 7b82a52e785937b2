from typing import Literal

from pydantic import Field

from egx_advisor.schemas import CamelModel


class ExtractedTransaction(CamelModel):
    """One broker order line read off a trading-app screenshot."""

    type: Literal["buy", "sell"]
    shares: float = Field(gt=0)
    price: float = Field(gt=0)
    date: str
    time: str
    status: Literal["Fulfilled", "Cancelled"] = "Fulfilled"


class ExtractTransactionsRequest(CamelModel):
    image: str = ""


class ExtractTransactionsResponse(CamelModel):
    transactions: list[ExtractedTransaction]
