"""Main FastAPI application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from .core.config import settings
from .core.exceptions import EngineError
from .utils.logging import setup_logging, LoggingMiddleware
from .utils.loguru_config import get_logger
from .api.routes import credentials, engine, health
from .services.credential_store import CredentialError
from .services.engine import get_engine_service

# Setup logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""

    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    engine_service = get_engine_service()
    try:
        health_status = await engine_service.health()
        if health_status.ollama_available:
            logger.info(
                f"Ollama is available, active pack: {health_status.active_pack_id}, "
                f"missing models: {health_status.missing_models or 'none'}"
            )
        else:
            logger.warning("Ollama is not available")
    except EngineError as e:
        # Continue startup, every request re-reads the config
        logger.error(f"Startup health check failed: {e}")

    yield

    logger.info("Shutting down application")
    await engine_service.close()
    logger.info("Application shutdown completed")


app = FastAPI(
    title=settings.app_name,
    description="Local model orchestration for Data Confessional, powered by Ollama",
    version=settings.app_version,
    debug=settings.debug,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.debug else ["tauri://localhost", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(LoggingMiddleware)

if settings.enable_metrics:
    instrumentator = Instrumentator()
    instrumentator.instrument(app)
    instrumentator.expose(app, endpoint="/metrics")
    logger.info("Metrics enabled at /metrics")

app.include_router(health.router)
app.include_router(engine.router)
app.include_router(credentials.router)


@app.exception_handler(EngineError)
async def engine_exception_handler(request: Request, exc: EngineError):
    """Surface engine errors verbatim."""
    logger.warning(f"{exc.kind} on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


@app.exception_handler(CredentialError)
async def credential_exception_handler(request: Request, exc: CredentialError):
    """Handle credential vault errors."""
    return JSONResponse(
        status_code=404 if exc.not_found else 500,
        content={"error": "credential_error", "message": str(exc)},
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "health": "/health",
        "engine": "/engine",
        "credentials": "/credentials",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "confessional_engine.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=False,
    )
