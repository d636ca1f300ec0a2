"""
FastAPI server. create_app(ctx) builds the app; the database is opened on startup
and closed on shutdown through the lifespan. Per-plugin routes are mounted from
athan_service.plugins.<package>.api (get_router(ctx)) under /api/<PREFIX or package>.
Docs: http://<host>:<port>/docs
"""
import importlib
import logging
import pkgutil
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from athan_service.core.context import ServiceContext
from athan_service.core.errors import AthanServiceError

logger = logging.getLogger(__name__)


def create_app(ctx: ServiceContext) -> FastAPI:
    """Create FastAPI app with routes that use the given ServiceContext."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        ctx.startup()
        try:
            yield
        finally:
            ctx.shutdown()

    app = FastAPI(
        title="Athan Service API",
        description="Prayer times, calculation methods, and the official Hijri calendar",
        lifespan=lifespan,
    )
    app.state.ctx = ctx

    @app.exception_handler(AthanServiceError)
    async def handle_service_error(request: Request, exc: AthanServiceError) -> JSONResponse:
        logger.warning(f"{request.method} {request.url.path} failed: {exc.__class__.__name__}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.get("/api/health")
    def health() -> Dict[str, Any]:
        """Service and storage status."""
        return {"status": "ok", "database": ctx.database.is_ready}

    # Mount per-plugin API routers from athan_service.plugins.<name>.api (get_router(ctx))
    plugins_pkg = importlib.import_module("athan_service.plugins")
    for _mod, name, is_pkg in pkgutil.iter_modules(plugins_pkg.__path__):
        if not is_pkg:
            continue
        try:
            api_module = importlib.import_module(f"athan_service.plugins.{name}.api")
        except ModuleNotFoundError:
            continue
        if not hasattr(api_module, "get_router") or not callable(api_module.get_router):
            continue
        router = api_module.get_router(ctx)
        if router is not None:
            prefix = getattr(api_module, "PREFIX", f"/{name}")
            app.include_router(router, prefix=f"/api{prefix}")
            logger.debug(f"Mounted API router for plugin {name} at /api{prefix}")

    return app


def run_api_server(ctx: ServiceContext, host: str, port: int) -> None:
    """Serve the API with uvicorn in the foreground."""
    import uvicorn

    fastapi_app = create_app(ctx)
    logger.info(f"API server listening at http://{host}:{port} (docs at /docs)")
    uvicorn.run(fastapi_app, host=host, port=port, log_config=None)
