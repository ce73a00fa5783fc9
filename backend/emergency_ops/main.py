"""
Emergency Operations - FastAPI application
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.v1 import router as v1_router
from .core.config import Config, get_config
from .core.exceptions import AppException, ValidationError
from .core.logging_config import setup_logging
from .core.security import TokenManager
from .db.session import build_engine, build_session_factory, create_tables
from .services.dashboard import EmergencyService

logger = logging.getLogger(__name__)


def create_app(config: Optional[Config] = None) -> FastAPI:
    """Build the API application around one ``EmergencyService``."""
    config = config or get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(config.logging)
        engine = build_engine(config.database)
        create_tables(engine)
        service = EmergencyService.from_config(config, session_factory=build_session_factory(engine))
        app.state.service = service
        app.state.token_manager = TokenManager(config.security)
        await service.start(live_updates=config.live_updates.enabled)
        logger.info(f"{config.app_name} started in {config.environment.value} environment")
        yield
        await service.stop()
        engine.dispose()
        logger.info("Shutting down, connection pool disposed")

    app = FastAPI(
        title=config.app_name,
        description="Incident verification and dispatch dashboard",
        version=__version__,
        debug=config.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        else:
            logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
        return JSONResponse(status_code=int(exc.status_code), content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        field_errors = {}
        for error in exc.errors():
            location = ".".join(str(part) for part in error["loc"])
            field_errors.setdefault(location, []).append(error["msg"])
        error = ValidationError("Invalid request", field_errors=field_errors)
        return JSONResponse(status_code=int(error.status_code), content=error.to_dict())

    @app.get("/health", tags=["ops"])
    async def health():
        return {"status": "ok", "service": config.app_name, "version": __version__}

    app.include_router(v1_router, prefix="/api")
    return app


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    config = get_config()
    uvicorn.run(create_app(config), host=config.host, port=config.port, log_config=None)


if __name__ == "__main__":
    run()
