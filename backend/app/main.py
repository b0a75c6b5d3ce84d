"""
Claude Relay Gateway Application Entry Point

FastAPI application main entry, including router registration and application configuration.
"""

import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.proxy import messages_router
from app.common.errors import AppError
from app.config import get_settings
from app.logging_config import setup_logging
from app.providers import supported_provider_types

logger = logging.getLogger(__name__)

# Initialize logging configuration
setup_logging()


# Application Lifecycle Management
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application Lifecycle Management

    Logs the active configuration on startup.
    """
    settings = get_settings()
    logger.info(
        "Gateway started: providers=%s token_estimator=%s prefer_upstream_usage=%s",
        ",".join(supported_provider_types()),
        settings.TOKEN_ESTIMATOR,
        settings.PREFER_UPSTREAM_USAGE,
    )
    yield
    logger.info("Gateway stopped")


# Create FastAPI application
settings = get_settings()

app = FastAPI(
    title=settings.APP_NAME,
    description="Claude Messages API gateway for OpenAI-compatible and Gemini upstreams",
    version="0.1.0",
    lifespan=lifespan,
)


# Configure CORS
def parse_allowed_origins(value: str) -> list[str]:
    """Split the comma-separated ALLOWED_ORIGINS setting; empty means CORS is disabled."""
    return [origin.strip() for origin in value.split(",") if origin.strip()]


app.add_middleware(
    CORSMiddleware,
    allow_origins=parse_allowed_origins(settings.ALLOWED_ORIGINS),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global Exception Handler
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """
    Handle application custom exceptions

    In production mode, error details are hidden to prevent information leakage.
    """
    settings = get_settings()
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(include_details=settings.DEBUG),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle uncaught exceptions

    Stack traces are logged but never returned to clients.
    """
    logger.error(
        "Uncaught exception: %s\nPath: %s\nTraceback:\n%s",
        str(exc),
        request.url.path,
        traceback.format_exc(),
    )
    return JSONResponse(
        status_code=500,
        content={
            "type": "error",
            "error": {
                "type": "api_error",
                "message": "Internal server error",
            },
        },
    )


# Health Check Endpoint (registered before the catch-all gateway route)
@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health Check

    Used for service liveness probe.
    """
    return {"status": "healthy"}


# Register Gateway Router
app.include_router(messages_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
