from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from egx_advisor.analysis.router import router as analysis_router
from egx_advisor.cache.router import router as cache_router
from egx_advisor.config import settings
from egx_advisor.exception_handlers import register_exception_handlers
from egx_advisor.http_client import close_http_client, init_http_client
from egx_advisor.logging_config import setup_logging
from egx_advisor.market.router import router as market_router
from egx_advisor.portfolio.router import router as portfolio_router
from egx_advisor.transactions.router import router as transactions_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await init_http_client()
    yield
    await close_http_client()


app = FastAPI(
    title="EGX Advisor",
    description="Egyptian Exchange price aggregation and AI-assisted stock analysis",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(market_router, prefix="/api/prices", tags=["prices"])
app.include_router(analysis_router, prefix="/api/analysis", tags=["analysis"])
app.include_router(portfolio_router, prefix="/api", tags=["portfolio"])
app.include_router(transactions_router, prefix="/api", tags=["transactions"])
app.include_router(cache_router, prefix="/api/cache", tags=["cache"])


@app.get("/api/health")
async def health():
    return {"status": "healthy"}
