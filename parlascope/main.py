"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from parlascope import __version__
from parlascope.config import get_settings
from parlascope.database import init_db
from parlascope.exceptions import ParlascopeError
from parlascope.routers import (
    admin,
    analytics,
    ballots,
    groups,
    health,
    legislators,
    lobbying,
    simulator,
)

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    await init_db()
    logger.info("Parlascope started (%s)", settings.environment)
    yield


app = FastAPI(
    title="Parlascope",
    description="Track French deputies and senators, their votes, and match citizens to 2027 candidates",
    version=__version__,
    lifespan=lifespan,
    docs_url=None if settings.is_production else "/docs",
)


@app.exception_handler(ParlascopeError)
async def parlascope_error_handler(request: Request, exc: ParlascopeError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


for module in (legislators, groups, ballots, lobbying, analytics, simulator, admin):
    app.include_router(module.router, prefix=settings.api_prefix)
app.include_router(health.router)
