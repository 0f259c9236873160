"""
FastAPI Application
==================

Main FastAPI application with REST endpoints for SVG to PNG conversion.
Maps pipeline errors to HTTP status codes: caller faults become 400,
server faults become 500.
"""

from contextlib import asynccontextmanager
import shutil
import uuid
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
import uvicorn

from svg2png.config.settings import get_settings
from svg2png.config.logging import get_logger
from svg2png.core.conversion import classify_error
from svg2png.core.errors import ConversionPipelineError, Fault
from svg2png.api.routes.convert import router as convert_router
from svg2png.api.routes.health import router as health_router
from svg2png.models.schemas import ErrorResponse, ServiceInfo

logger = get_logger(__name__)

FAULT_STATUS_CODES = {
    Fault.CALLER: 400,
    Fault.SERVER: 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "Initializing server",
        name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    settings.temp_path.mkdir(parents=True, exist_ok=True)

    if shutil.which(settings.transparency_executable) is None:
        logger.warning(
            "Transparency executable not found, transparent conversions will fail",
            executable=settings.transparency_executable,
        )

    try:
        yield
    finally:
        logger.info("Server shut down gracefully")


def status_code_for(error: BaseException) -> int:
    """HTTP status for a pipeline failure."""
    return FAULT_STATUS_CODES[classify_error(error)]


async def pipeline_exception_handler(
    request: Request, exc: ConversionPipelineError
) -> JSONResponse:
    """Render a pipeline error as a structured JSON error."""
    status_code = status_code_for(exc)
    error_response = ErrorResponse(
        error=exc.message,
        error_code=exc.error_code,
        details=exc.details or None,
        request_id=getattr(request.state, "request_id", None),
    )

    log = logger.warning if status_code < 500 else logger.error
    log(
        "Conversion failed",
        status_code=status_code,
        error_code=exc.error_code,
        error=exc.message,
        request_id=error_response.request_id,
    )

    return JSONResponse(status_code=status_code, content=error_response.model_dump(mode="json"))


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """HTTP exception handler with structured error response."""
    error_response = ErrorResponse(
        error=str(exc.detail),
        error_code=str(exc.status_code),
        details=None,
        request_id=getattr(request.state, "request_id", None),
    )

    logger.info(
        "HTTP exception",
        status_code=exc.status_code,
        detail=exc.detail,
        request_id=error_response.request_id,
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response.model_dump(mode="json"),
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """General exception handler for unexpected errors."""
    error_response = ErrorResponse(
        error="Internal server error",
        error_code="INTERNAL_ERROR",
        details={"exception": str(exc)} if get_settings().debug else None,
        request_id=getattr(request.state, "request_id", None),
    )

    logger.error(
        "Unhandled exception",
        exception=str(exc),
        request_id=error_response.request_id,
        exc_info=True,
    )

    return JSONResponse(status_code=500, content=error_response.model_dump(mode="json"))


async def add_request_id(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Add request ID to all requests."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    return response


def create_app() -> FastAPI:
    """
    Application factory function for creating FastAPI app instance.

    Returns:
        FastAPI application instance
    """
    settings = get_settings()
    application = FastAPI(
        title="svg2png",
        description="Convert SVG images to PNG with DPI-accurate physical resolution",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.enable_docs else None,
        redoc_url="/redoc" if settings.enable_docs else None,
    )

    application.middleware("http")(add_request_id)

    application.add_exception_handler(ConversionPipelineError, pipeline_exception_handler)  # type: ignore[arg-type]
    application.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
    application.add_exception_handler(Exception, general_exception_handler)

    application.include_router(convert_router)
    application.include_router(health_router)

    @application.get("/", response_model=ServiceInfo, tags=["General"])
    async def root() -> ServiceInfo:
        """Root endpoint with basic API information."""
        return ServiceInfo(
            name=settings.app_name,
            version=settings.app_version,
            description="Convert SVG images to PNG with DPI-accurate physical resolution",
            docs_url="/docs" if settings.enable_docs else None,
            endpoints={
                "svg_to_png": "POST /svg-to-png?dpi=<dpi>",
                "svg_to_png_transparent": "POST /svg-to-png/transparent",
                "health": "GET /health",
            },
        )

    return application


app = create_app()


def run_server() -> None:
    """Run the server on the configured host and port."""
    settings = get_settings()
    uvicorn.run(
        "svg2png.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        log_config=None,
        access_log=True,
    )


if __name__ == "__main__":
    run_server()
