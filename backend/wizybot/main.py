import logging
import traceback
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from wizybot.core.config import settings
from wizybot.api import api_router
from wizybot.core.logging_config import (
    REQUEST_ID_HEADER,
    RequestLoggingMiddleware,
    generate_request_id,
    request_id_var,
    setup_logging,
)
from wizybot.services.ai.llm_client import LLMClient
from wizybot.services.ai.search_service import ItemSearchService
from wizybot.services.currency_service import CurrencyService
from wizybot.services.product_service import ProductService, ProductCatalogError

# Configure logging (JSON in production, colored in development)
setup_logging()
logger = logging.getLogger("wizybot")

BACKEND_DIR = Path(__file__).resolve().parents[1]


class ErrorResponse(BaseModel):
    """Standardized error response format."""
    error: str
    detail: str | None = None
    timestamp: str
    path: str | None = None


class HealthResponse(BaseModel):
    """Health check response format."""
    status: str
    service: str
    version: str
    environment: str
    checks: dict[str, bool]


def resolve_products_path(products_path: str) -> Path:
    path = Path(products_path)
    return path if path.is_absolute() else BACKEND_DIR / path


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the process-wide collaborators once and share them across requests."""
    logger.info("Application starting up...")

    llm_client = LLMClient.from_settings(settings)
    product_service = ProductService(
        products_path=str(resolve_products_path(settings.PRODUCTS_PATH)),
        search_service=ItemSearchService(llm_client),
        constraints=settings.PRODUCT_SEARCH_CONSTRAINTS,
    )

    try:
        product_service.load_products()
    except ProductCatalogError as e:
        logger.error(f"Product catalog unavailable: {e}")
        if settings.ENVIRONMENT.lower() == "production":
            raise SystemExit("Product catalog could not be loaded")

    if not llm_client.is_configured:
        logger.warning("OPENAI_API_KEY is not set; chatbot requests will fail")

    app.state.llm_client = llm_client
    app.state.product_service = product_service
    app.state.currency_service = CurrencyService.from_settings(settings)

    logger.info("Application startup complete")
    try:
        yield
    finally:
        logger.info("Application shutting down...")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    docs_url="/api",
    openapi_url="/api-json",
    redoc_url=None,
    lifespan=lifespan,
)


# Global exception handler - catches all unhandled exceptions
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Return a consistent 500 response carrying the request's X-Request-ID.

    This handler runs outside RequestLoggingMiddleware, so the header is set
    here. In production, error details are replaced by the request ID.
    """
    error_id = (
        request_id_var.get()
        or getattr(request.state, "request_id", None)
        or generate_request_id()
    )
    headers = {REQUEST_ID_HEADER: error_id}

    logger.error(
        f"Unhandled exception [{error_id}]: {exc}\n"
        f"Path: {request.url.path}\n"
        f"Method: {request.method}\n"
        f"Traceback: {traceback.format_exc()}"
    )

    if settings.ENVIRONMENT.lower() == "production":
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(
                error="Internal server error",
                detail=f"An unexpected error occurred. Reference ID: {error_id}",
                timestamp=datetime.utcnow().isoformat(),
                path=request.url.path,
            ).model_dump(),
            headers=headers,
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error=exc.__class__.__name__,
            detail=str(exc),
            timestamp=datetime.utcnow().isoformat(),
            path=request.url.path,
        ).model_dump(),
        headers=headers,
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request logging middleware with timing and request IDs
app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router)


@app.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """
    Report whether the catalog is loaded and the LLM provider is configured.
    Returns 503 when either is missing.
    """
    product_service = getattr(request.app.state, "product_service", None)
    llm_client = getattr(request.app.state, "llm_client", None)

    checks = {
        "product_catalog": bool(product_service and product_service.is_loaded),
        "llm_configured": bool(llm_client and llm_client.is_configured),
    }
    healthy = all(checks.values())

    response = HealthResponse(
        status="healthy" if healthy else "degraded",
        service="wizybot",
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
        checks=checks,
    )

    if not healthy:
        logger.warning(f"Health check degraded: {checks}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=response.model_dump(),
        )

    return response


@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.PROJECT_NAME}"}
