"""FastAPI application.

Endpoints:
- GET /hello            - greeting
- GET /actuator/health  - liveness
- GET /actuator/info    - build and generation metadata

Run with:
    graphql-client-generation serve --reload
"""

import time

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import PlainTextResponse
from loguru import logger

from ..config import Settings, get_settings

router = APIRouter()


@router.get("/hello", response_class=PlainTextResponse)
async def hello() -> str:
    return "Hello, World"


actuator = APIRouter(prefix="/actuator", tags=["actuator"])


@actuator.get("/health")
async def health() -> dict:
    """Liveness check for load balancers and monitors."""
    return {"status": "UP"}


@actuator.get("/info")
async def info(request: Request) -> dict:
    """Application metadata and the configured generation target."""
    settings: Settings = request.app.state.settings
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "description": settings.app_description,
        },
        "generation": {
            "schema_file_folder": settings.schema_file_folder,
            "schema_file_pattern": settings.schema_file_pattern,
            "package_name": settings.package_name,
        },
        "server": {"host": settings.host, "port": settings.port},
    }


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application; settings are loaded from the environment if omitted."""
    settings = settings or get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=settings.app_description,
    )
    app.state.settings = settings

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)"
        )
        return response

    app.include_router(router)
    app.include_router(actuator)
    return app
