from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from . import __version__
from .env import Settings
from .logger import get_logger
from .service import SearchFn, new_search_breaker, resolve_barcode

SERVICE_NAME = "medicate-barcode"

logger = get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{SERVICE_NAME} starting", has_search_credentials=app.state.settings.has_search_credentials)
    yield
    logger.info(f"{SERVICE_NAME} shutting down")
    logger.log_metrics_summary()


def create_app(search: Optional[SearchFn] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the HTTP app.

    ``search`` replaces the Google client (tests, alternative providers).
    """
    settings = settings or Settings.from_env()
    breaker = new_search_breaker()

    app = FastAPI(title="Medicate Barcode Resolver", version=__version__, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.search_breaker = breaker

    @app.get("/")
    def root():
        return {"ok": True, "service": SERVICE_NAME}

    @app.get("/metrics")
    def metrics():
        body = logger.get_metrics()
        body["search_circuit"] = breaker.state
        return body

    @app.get("/api/barcode/resolve")
    def resolve(code: str = Query(default="")):
        outcome = resolve_barcode(code, search=search, settings=settings, breaker=breaker)
        return JSONResponse(status_code=outcome.status_code, content=outcome.body)

    return app


def serve(host: str = "0.0.0.0", port: Optional[int] = None, settings: Optional[Settings] = None) -> None:
    settings = settings or Settings.from_env()
    port = port or settings.port
    logger.configure(settings.log_level, settings.log_dir)
    logger.info(f"Medicate barcode server listening on port {port}")
    uvicorn.run(create_app(settings=settings), host=host, port=port, log_level=settings.log_level.lower())
