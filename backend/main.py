"""
Restaurant Payments API — FastAPI Application

Records payments against restaurant orders, lists and looks them up, and
serves the payment statistics shown on the back-office dashboard.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import settings
from domain.errors import DomainError, InternalError, ValidationError
from domain.responses import error_response
from routes import health, payments

# ── Logging ─────────────────────────────────────────────────────────

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: validate settings, create DB tables."""
    # Ensure data/ directory exists for SQLite
    os.makedirs("data", exist_ok=True)

    settings.validate_production_settings()

    from database import init_db, engine
    await init_db()
    logger.info("Database initialized")

    yield  # app runs here

    await engine.dispose()
    logger.info("Shutting down")


# ── App Factory ─────────────────────────────────────────────────────

app = FastAPI(
    title="Restaurant Payments API",
    description="Payment recording, listing and statistics for restaurant orders",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routes ──────────────────────────────────────────────────────────

app.include_router(health.router)
app.include_router(payments.router)


# ── Exception Handlers ──────────────────────────────────────────────


@app.exception_handler(DomainError)
async def domain_exception_handler(request, exc: DomainError):
    """Render domain errors in the standard failure envelope, keeping their status code."""
    if isinstance(exc, InternalError):
        error = exc.error if settings.expose_error_details else None
    else:
        error = exc.error
    if isinstance(exc, ValidationError):
        logger.info(f"Validation failed on {request.url.path}: {exc.fields}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.message, error=error, errors=exc.errors),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request, exc: RequestValidationError):
    """
    Report malformed bodies/queries as 400 with one entry per failing field.

    Same shape as service-level ValidationError so clients handle one format.
    """
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        errors.append({
            "field": loc[-1] if loc else "body",
            "message": err.get("msg", "Invalid value"),
            "location": loc[0] if loc else "body",
        })
    logger.info(f"Validation failed on {request.url.path}: {[e['field'] for e in errors]}")
    return JSONResponse(
        status_code=400,
        content=error_response("Validation failed", errors=errors),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc: StarletteHTTPException):
    """Wrap plain HTTPExceptions (unknown routes, 405s) in the same envelope."""
    detail = exc.detail
    message = detail if isinstance(detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(message),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Catch-all for unhandled exceptions. The traceback is logged server-side."""
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=error_response(
            "Internal server error",
            error=str(exc) if settings.expose_error_details else None,
        ),
    )


# ── Entrypoint ──────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")
