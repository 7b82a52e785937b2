import math
from abc import ABC, abstractmethod
from typing import Any

import httpx
import structlog

from egx_advisor.market.schemas import FundamentalsSnapshot, PriceQuote

logger = structlog.get_logger()

BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Accept": "application/json",
}


class PriceProvider(ABC):
    name: str

    @abstractmethod
    async def fetch(self, symbol: str) -> PriceQuote | None:
        """Return a quote, or None when this source has nothing usable."""
        ...


class FundamentalsProvider(ABC):
    name: str

    @abstractmethod
    async def fetch(self, symbol: str) -> FundamentalsSnapshot | None: ...


class HistoryProvider(ABC):
    name: str

    @abstractmethod
    async def fetch(self, symbol: str, days: int) -> list[float] | None:
        """Return ascending closing prices, or None when unavailable."""
        ...


class HttpSource:
    """Shared request plumbing: every failure is logged and becomes None."""

    name = "http"

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def _request_json(self, method: str, url: str, **kwargs: Any) -> Any | None:
        headers = {**BROWSER_HEADERS, **kwargs.pop("headers", {})}
        try:
            response = await self._client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("provider_request_error", provider=self.name, error=str(exc))
            return None

        if not response.is_success:
            logger.warning(
                "provider_bad_status", provider=self.name, status=response.status_code
            )
            return None

        try:
            return response.json()
        except ValueError as exc:
            logger.warning("provider_malformed_body", provider=self.name, error=str(exc))
            return None


def parse_number(value: Any) -> float | None:
    """Coerce upstream numbers ("1,234.5", 12, None, "N/A") to float or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        cleaned = value.replace(",", "").strip()
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def positive(value: Any) -> float | None:
    """Like :func:`parse_number` but treats zero and negatives as missing."""
    number = parse_number(value)
    return number if number is not None and number > 0 else None
