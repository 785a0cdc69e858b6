"""FastAPI application entry point for the academy portal."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from academy_portal import __version__
from academy_portal.api.routes import router
from academy_portal.config import get_settings
from academy_portal.exceptions import PortalError, RateLimitedError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info(f"Starting UC Investment Academy portal v{__version__}")
    settings = get_settings()
    logger.info(f"Debug mode: {settings.debug}")
    if not settings.resend_api_key:
        logger.warning("Email provider not configured; notifications will only be logged")

    yield

    logger.info("Shutting down UC Investment Academy portal")


async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    """Render domain errors as ``{"error": message}``."""
    if exc.status_code >= 500:
        logger.error(f"{request.url.path} failed: {exc.message}")
    headers = None
    if isinstance(exc, RateLimitedError):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message},
        headers=headers,
    )


async def request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Render malformed request bodies as 400s."""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())[1:])
        problems.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return JSONResponse(
        status_code=400,
        content={"error": "; ".join(problems) or "Invalid request"},
    )


async def catch_unhandled_errors(request: Request, call_next) -> Response:
    """Last-resort 500 for unexpected failures.

    Runs as middleware inside CORSMiddleware so the error body stays
    readable by browser callers.
    """
    try:
        return await call_next(request)
    except Exception:
        logger.exception(f"Unhandled error in {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
        )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="UC Investment Academy Portal",
        description="Applications, learner accounts, events and RSVPs",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    # Registered first so CORSMiddleware wraps it
    app.middleware("http")(catch_unhandled_errors)

    # Browser front-end calls from any origin; tokens travel in body/header
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PortalError, portal_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Include routes
    app.include_router(router)

    return app


# Create app instance for uvicorn
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "academy_portal.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
