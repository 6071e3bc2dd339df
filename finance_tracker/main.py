import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from finance_tracker.core.config import settings
from finance_tracker.core.exceptions import FinanceTrackerError, StoreUnavailable
from finance_tracker.core.logging_config import configure_logging
from finance_tracker.core.rate_limit import limiter, rate_limit_exceeded_handler
from finance_tracker.db.dynamo import get_storage
from finance_tracker.db.seed import seed_default_categories, seed_demo_users
from finance_tracker.routers import admin, analytics, auth, categories, health, transactions

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.SEED_DEFAULT_DATA:
        logger.info("Seeding default categories and demo users...")
        store = app.dependency_overrides.get(get_storage, get_storage)()
        try:
            seed_default_categories(store)
            seed_demo_users(store)
        except StoreUnavailable as e:
            # /api/status reports the store as degraded; requests fail with 503 until it is back.
            logger.error(f"Seeding skipped: {e.message}")
    yield
    logger.info("Shutting down")


app = FastAPI(
    title=settings.PROJECT_NAME,
    debug=settings.DEBUG,
    lifespan=lifespan,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,
)


@app.exception_handler(FinanceTrackerError)
async def finance_tracker_error_handler(request: Request, exc: FinanceTrackerError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid input data", "errors": jsonable_encoder(exc.errors())},
    )


# Root endpoint
@app.get("/")
def root():
    return {"message": f"Welcome to {settings.PROJECT_NAME} API"}


# Register routers
app.include_router(health.router, prefix=f"{settings.API_PREFIX}", tags=["Health"])  # /api/health
app.include_router(auth.router, prefix=f"{settings.API_PREFIX}/auth", tags=["Auth"])
app.include_router(categories.router, prefix=f"{settings.API_PREFIX}/categories", tags=["Categories"])
app.include_router(transactions.router, prefix=f"{settings.API_PREFIX}/transactions", tags=["Transactions"])
app.include_router(analytics.router, prefix=f"{settings.API_PREFIX}/analytics", tags=["Analytics"])
app.include_router(admin.router, prefix=f"{settings.API_PREFIX}/admin", tags=["Admin"])
