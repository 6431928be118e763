from fastapi import FastAPI
from localify.core.config import Settings, get_settings
from localify.api.middleware import RequestGuardMiddleware
from localify.api.routers import preview as r_preview
from localify.services.metrics import PerformanceMonitor


def create_app(
    settings: Settings | None = None, monitor: PerformanceMonitor | None = None
) -> FastAPI:
    settings = settings or get_settings()
    monitor = monitor or PerformanceMonitor()

    app = FastAPI(
        title=settings.APP_NAME, docs_url=None, redoc_url=None, openapi_url=None
    )
    app.state.settings = settings
    app.state.monitor = monitor
    app.add_middleware(RequestGuardMiddleware, settings=settings, monitor=monitor)
    app.include_router(r_preview.router)
    return app
