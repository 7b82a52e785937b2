import httpx
import structlog

from egx_advisor.config import settings

logger = structlog.get_logger()

_client: httpx.AsyncClient | None = None


async def init_http_client() -> None:
    global _client
    _client = httpx.AsyncClient(timeout=settings.http_timeout, follow_redirects=True)
    logger.info("http_client_initialized", timeout=settings.http_timeout)


async def close_http_client() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
        logger.info("http_client_closed")


def get_http_client() -> httpx.AsyncClient:
    if _client is None:
        raise RuntimeError("HTTP client not initialized. Call init_http_client() first.")
    return _client
