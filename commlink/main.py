"""
CommLink link-budget API.

Wires the versioned link, jamming and environment routes into a FastAPI app,
together with request logging and the mapping from model errors to HTTP codes.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from commlink.api.v1.api import api_router
from commlink.core.config import settings
from commlink.core.errors import CommLinkError, ErrorCode
from commlink.core.logging import log_request, setup_logging

setup_logging()
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorCode.INVALID_PARAMETER: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.CALCULATION_FAILED: status.HTTP_400_BAD_REQUEST,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        f"{settings.PROJECT_NAME} v{settings.VERSION} starting ({settings.ENVIRONMENT}, "
        f"default scenario {settings.DEFAULT_SCENARIO})"
    )
    yield
    logger.info("Link budget API stopped")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
    Radio link budget under jamming and anti-jam countermeasures.

    - Link status: signal, SNR, BER, throughput, latency, packet loss and quality
    - Performance summary and parameter optimisation
    - Frequency, power and distance sweeps
    - Jammer effect and countermeasure analysis
    """,
    version=settings.VERSION,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url=None,
    openapi_url="/api/openapi.json" if settings.DEBUG else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    log_request(request)
    try:
        response = await call_next(request)
    except Exception as e:
        log_request(request, error=e)
        raise
    response.headers["X-Request-ID"] = request.state.request_id
    log_request(request, response=response)
    return response


@app.exception_handler(CommLinkError)
async def commlink_error_handler(request: Request, exc: CommLinkError):
    code = ERROR_STATUS.get(exc.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if exc.code != ErrorCode.INVALID_PARAMETER:
        logger.warning(f"{request.url.path}: {exc}")
    return JSONResponse(status_code=code, content={"detail": str(exc), "code": exc.code.value})


app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/health", include_in_schema=False)
async def health_check():
    return {
        "status": "healthy",
        "version": settings.VERSION,
        "time_utc": datetime.now(timezone.utc).isoformat(),
    }


if __name__ == "__main__":
    uvicorn.run(
        "commlink.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
