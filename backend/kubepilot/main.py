import uuid
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from kubepilot import __version__
from kubepilot.api.router import api_router
from kubepilot.config import get_settings
from kubepilot.core.logging import setup_logging
from kubepilot.core.request_context import request_id_var
from kubepilot.exceptions import register_exception_handlers


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = structlog.get_logger(__name__)
    settings = get_settings()
    logger.info(
        "app.startup",
        env=settings.app_env,
        field_manager=settings.field_manager,
        apply_timeout=settings.apply_timeout_seconds,
    )
    yield
    logger.info("app.shutdown")


def create_app() -> FastAPI:
    setup_logging()
    settings = get_settings()

    app = FastAPI(
        title="kubepilot",
        description="Forward kubeconfig-authenticated operations and YAML manifests to a Kubernetes API server",
        version=__version__,
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers["X-Request-ID"] = request_id
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(api_router)

    @app.get("/")
    async def root():
        return {"message": "kubepilot API"}

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return app


app = create_app()
