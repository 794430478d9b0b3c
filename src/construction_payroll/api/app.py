"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from construction_payroll import __version__
from construction_payroll.api.routes import (
    employees_router,
    health_router,
    office_payrolls_router,
    site_payrolls_router,
)
from construction_payroll.database import create_schema, dispose_db, init_db
from construction_payroll.errors import (
    ConflictError,
    NotFoundError,
    PayrollError,
    PersistenceFault,
    ValidationError,
)
from construction_payroll.logging_config import configure_logging

logger = logging.getLogger(__name__)

# Conflicts are reported like validation failures: the client must change
# its request (e.g. drop the new advance) before retrying.
STATUS_BY_ERROR: dict[type[PayrollError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_400_BAD_REQUEST,
    PersistenceFault: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(exc: PayrollError) -> int:
    for error_type, code in STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    configure_logging()
    engine, _ = init_db()
    await create_schema(engine)
    logger.info("Construction payroll API %s started", __version__)
    yield
    # Shutdown
    await dispose_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Construction Payroll API",
        description="Site and office payroll with emergency cash advance tracking",
        version=__version__,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(PayrollError)
    async def payroll_error_handler(request: Request, exc: PayrollError) -> JSONResponse:
        """Map domain errors onto status codes with a stable error body."""
        code = status_for(exc)
        if code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=code,
            content={"detail": exc.message, "code": exc.code, "context": exc.context},
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Report malformed payloads with field-level detail."""
        errors = [
            {
                "field": ".".join(str(part) for part in err["loc"][1:]) or str(err["loc"][0]),
                "message": err["msg"],
                "type": err["type"],
            }
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=422,
            content={
                "detail": "Request validation failed",
                "code": "VALIDATION_ERROR",
                "context": {"errors": errors},
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(employees_router, prefix="/api/v1")
    app.include_router(site_payrolls_router, prefix="/api/v1")
    app.include_router(office_payrolls_router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
