"""
FastAPI Application Entry Point
"""
import os
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from leadgen.api.v1.routes import api_router
from leadgen.core.config import get_settings
from leadgen.core.exceptions import (
    ApiError,
    api_error_handler,
    unhandled_error_handler,
    validation_error_handler,
)
from leadgen.core.tenant_middleware import TenantMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan - startup and shutdown events.

    Startup:
    - Validates data store and phone configuration
      (fatal in production, warnings elsewhere)
    """
    logger.info("Starting Lead Collection API...")

    environment = os.getenv("ENVIRONMENT", "development")
    strict_validation = environment == "production"

    try:
        from leadgen.core.validation import validate_config_on_startup
        validate_config_on_startup(strict=strict_validation)
    except RuntimeError as e:
        if strict_validation:
            logger.error(f"Startup failed: {e}")
            raise
        else:
            logger.warning(f"Configuration warnings (non-fatal in {environment}): {e}")

    logger.info("Lead Collection API started successfully")

    yield  # Application is running

    logger.info("Lead Collection API shutdown complete")


settings = get_settings()

app = FastAPI(
    title="Lead Collection API",
    description="Field lead collection with dealer-scoped access",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# MULTI-TENANT: identity header -> request.state.tenant_id
app.add_middleware(TenantMiddleware, header_name=settings.tenant_header)

app.add_exception_handler(ApiError, api_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

# Include API routes
app.include_router(api_router, prefix=settings.api_prefix)


@app.get("/")
async def root():
    return {"message": "Lead Collection API", "status": "running"}


@app.get("/health")
async def health_check():
    """
    Health check endpoint.

    Reports whether the data store is configured; it does not query it.
    """
    health = {"status": "healthy"}
    health["supabase_configured"] = bool(
        os.getenv("SUPABASE_URL") and os.getenv("SUPABASE_SERVICE_KEY")
    )
    return health


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
