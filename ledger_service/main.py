"""
Main FastAPI application entry point.
Sets up the API, middleware, error handling and routes.
"""

import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ledger_service.api import accounts, owners, statements, transactions
from ledger_service.core.config import settings
from ledger_service.core.errors import LedgerError
from ledger_service.core.logging_config import setup_logging
from ledger_service.database import Base, engine

setup_logging(level=settings.LOG_LEVEL, fmt=settings.LOG_FORMAT)
logger = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

# Initialize FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.DESCRIPTION,
    docs_url="/docs",  # Swagger UI
    redoc_url="/redoc"  # ReDoc UI
)

# CORS middleware (allows frontend to call API)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log every request with its duration and tag the response with a request id.
    """
    request_id = str(uuid.uuid4())
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

    response.headers["X-Request-Id"] = request_id
    logger.info(
        "HTTP %s %s completed with status %s", request.method, request.url.path, response.status_code,
        extra={"request_id": request_id, "duration_ms": elapsed_ms, "status_code": response.status_code},
    )
    return response


@app.exception_handler(LedgerError)
def ledger_error_handler(request: Request, exc: LedgerError):
    """
    Map typed ledger errors onto HTTP responses.
    """
    if exc.status_code >= 500:
        logger.error("Request failed: %s", exc.message, extra={"code": exc.code, "path": request.url.path})
    else:
        logger.info("Request rejected: %s", exc.message, extra={"code": exc.code, "path": request.url.path})

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "code": exc.code,
            "detail": exc.message,
            "transient": exc.transient,
        },
    )


@app.get("/")
def root():
    """
    Root endpoint - health check.
    """
    return {
        "message": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "status": "running",
        "docs": "/docs",
        "endpoints": {
            "owners": f"{settings.API_V1_PREFIX}/owners",
            "accounts": f"{settings.API_V1_PREFIX}/accounts",
            "transactions": f"{settings.API_V1_PREFIX}/transactions",
            "statements": f"{settings.API_V1_PREFIX}/statements"
        }
    }


@app.get("/health")
def health_check():
    """
    Health check endpoint for monitoring.
    """
    return {
        "status": "healthy",
        "database": "connected"
    }


# Include API routers
app.include_router(owners.router, prefix=settings.API_V1_PREFIX)
app.include_router(accounts.router, prefix=settings.API_V1_PREFIX)
app.include_router(transactions.router, prefix=settings.API_V1_PREFIX)
app.include_router(statements.router, prefix=settings.API_V1_PREFIX)
