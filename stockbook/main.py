# stockbook/main.py
#
# FastAPI entrypoint: wires config, logging, CORS, rate limiting and the
# domain error handler around the auth, profile, product, sale and report
# routers. Run with `uvicorn stockbook.main:app`.

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from stockbook.core.rate_limiter import limiter
from stockbook.core.config import settings
from stockbook.core.errors import StockbookError, Unauthorized
from stockbook.routers import (
    auth,
    profile,
    products,
    sales,
    reports,
)


# LOGGING CONFIGURATION

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s | %(levelname)s | %(message)s",
)

logger = logging.getLogger("stockbook")


# APP INIT

app = FastAPI(
    title="Stockbook",
    description="Track purchased stock, record sales against it and follow profit",
    version="1.0.0",
    debug=settings.DEBUG,
)


# CORS (Token-based auth)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)


# RATE LIMITING

app.state.limiter = limiter
app.add_exception_handler(
    RateLimitExceeded,
    _rate_limit_exceeded_handler
)


# DOMAIN ERRORS

@app.exception_handler(StockbookError)
async def stockbook_error_handler(request: Request, exc: StockbookError):
    headers = None
    if isinstance(exc, Unauthorized):
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
        headers=headers,
    )


# REQUEST LOGGING MIDDLEWARE

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    response = await call_next(request)

    duration = round((time.time() - start_time) * 1000, 2)

    logger.info(
        "%s %s Status: %s Time: %sms",
        request.method, request.url.path, response.status_code, duration,
    )

    return response


# ROUTERS

app.include_router(auth.router)
app.include_router(profile.router)
app.include_router(products.router)
app.include_router(sales.router)
app.include_router(reports.router)


# ROOT

@app.get("/")
def root():
    logger.info("Health check endpoint called")
    return {"message": "Stockbook API is running"}
