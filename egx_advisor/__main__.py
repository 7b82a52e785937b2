import uvicorn

from egx_advisor.config import settings


def run() -> None:
    uvicorn.run(
        "egx_advisor.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=not settings.is_production,
    )


if __name__ == "__main__":
    run()
