"""
FastAPI Application - Main Entry Point

Read-only REST API over the quote engine: pair listings, aggregated order
book depth and market order quotes.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from tokenx_quote.config import get_settings
from tokenx_quote.services.market_data_service import MarketDataService
from tokenx_quote.services.pair_service import PairService
from tokenx_quote.services.quote_service import QuoteService
from tokenx_quote.services.snapshot_source import InMemorySnapshotSource, OrderSnapshotSource
from tokenx_quote.utils.exceptions import (
    BaseQuoteEngineException,
    InvalidQuantityException,
    PairNotFoundException,
    PriceOutOfBoundsException,
    ValidationException,
)
from tokenx_quote.utils.logger import get_logger

from tokenx_quote.api.routes import market_data, pairs, quotes
from tokenx_quote.api.models import HealthResponse, ErrorResponse

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Global instances
snapshot_source: OrderSnapshotSource = None
pair_service: PairService = None
quote_service: QuoteService = None
market_data_service: MarketDataService = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    Builds the services over the configured snapshot source. An in-memory
    source is used when none has been installed.
    """
    logger.info("=" * 80)
    logger.info("Starting Quote Engine API")
    logger.info("=" * 80)

    global snapshot_source, pair_service, quote_service, market_data_service

    get_logger(
        log_level=settings.log_level,
        log_dir=settings.log_dir,
        use_json=settings.use_json_logs,
    )

    if snapshot_source is None:
        logger.info("No snapshot source installed, using an empty in-memory source")
        snapshot_source = InMemorySnapshotSource()

    logger.info("Initializing services...")
    pair_service = PairService(snapshot_source)
    quote_service = QuoteService(snapshot_source, pair_service)
    market_data_service = MarketDataService(snapshot_source, pair_service)

    pairs.set_pair_service(pair_service)
    quotes.set_quote_service(quote_service)
    market_data.set_market_data_service(market_data_service)

    logger.info("API startup complete!")

    yield

    logger.info("Quote Engine API shut down")


app = FastAPI(
    title="Quote Engine API",
    description="""
    Read-only pricing API for a token exchange.

    ## Endpoints
    * **POST /api/v1/quotes**: Quote a market order against the current book
    * **GET /api/v1/orderbook/{pair_code}**: Aggregated order book depth
    * **GET /api/v1/orderbook/{pair_code}/{side}**: Aggregated depth of one side
    * **GET /api/v1/pairs**: Pairs available on the exchange
    * **GET /api/v1/tokens**: Tokens and the pairs they appear in
    """,
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add unique request ID to each request for tracking."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    logger.info(f"Request [{request_id}]: {request.method} {request.url.path}")
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    logger.info(f"Response [{request_id}]: {response.status_code}")

    return response


def _error_response(request: Request, status_code: int, error: str, message: str, detail: str = None):
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=error,
            message=message,
            detail=detail,
            timestamp=datetime.now(timezone.utc)
        ).model_dump(mode='json')
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.warning(f"Validation error [{request_id}]: {exc.errors()}")
    return _error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "ValidationError",
        "Request validation failed",
        str(exc.errors()),
    )


@app.exception_handler(ValidationException)
async def custom_validation_exception_handler(request: Request, exc: ValidationException):
    """Handle entity validation exceptions."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.warning(f"Validation error [{request_id}]: {exc.message}")
    return _error_response(
        request, status.HTTP_422_UNPROCESSABLE_ENTITY, "ValidationError", exc.message, exc.field
    )


@app.exception_handler(InvalidQuantityException)
@app.exception_handler(PriceOutOfBoundsException)
async def bad_request_exception_handler(request: Request, exc: BaseQuoteEngineException):
    """Handle out-of-range amounts and prices."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.warning(f"Bad request [{request_id}]: {exc.message}")
    return _error_response(
        request, status.HTTP_400_BAD_REQUEST, type(exc).__name__, exc.message
    )


@app.exception_handler(PairNotFoundException)
async def pair_not_found_exception_handler(request: Request, exc: PairNotFoundException):
    """Handle unknown pairs."""
    request_id = getattr(request.state, "request_id", "unknown")
    logger.warning(f"Pair not found [{request_id}]: {exc.message}")
    return _error_response(
        request, status.HTTP_404_NOT_FOUND, "PairNotFoundException", exc.message
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions."""
    request_id = getattr(request.state, "request_id", "unknown")
    get_logger().log_error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc}",
        exception=exc,
        request_id=request_id,
    )
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "InternalServerError",
        "An internal error occurred",
        "Contact support with request ID: " + request_id,
    )


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    known_pairs = len(pair_service.get_pairs_map()) if pair_service else 0
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version="1.0.0",
        pairs=known_pairs,
    )


app.include_router(quotes.router)
app.include_router(market_data.router)
app.include_router(pairs.router)


@app.get("/", tags=["root"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Quote Engine API",
        "version": "1.0.0",
        "status": "operational",
        "docs": "/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "tokenx_quote.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower()
    )
