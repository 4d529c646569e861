from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from metrics_sample.api import router as api_router
from metrics_sample.core.config import settings
from metrics_sample.core.logging_config import get_logger
from metrics_sample.middleware.metrics_middleware import MetricsMiddleware
from metrics_sample.services.metrics import MeterRegistry, bind_runtime_metrics

logger = get_logger("app")


def create_app(
    registry: Optional[MeterRegistry] = None,
    runtime_name: Optional[str] = None,
    bind_runtime: Optional[bool] = None,
    type_comments: Optional[bool] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        registry: Registry to serve. When omitted, the lifespan creates one at
            startup and closes it at shutdown; an injected registry is left
            open for its owner to close.
        runtime_name: Name reported by GET /health (default settings.RUNTIME_NAME)
        bind_runtime: Bind runtime/host gauges at startup
            (default settings.METRICS_BIND_RUNTIME)
        type_comments: Emit '# TYPE' lines on /metrics
            (default settings.METRICS_TYPE_COMMENTS)
    """
    if bind_runtime is None:
        bind_runtime = settings.METRICS_BIND_RUNTIME

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        owned = registry is None
        active = MeterRegistry() if owned else registry
        app.state.registry = active

        if bind_runtime:
            bind_runtime_metrics(active)

        logger.info(f"Metrics registry ready ({len(active)} instruments, runtime={app.state.runtime_name})")

        yield

        # Shutdown
        if owned:
            active.close()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Health and Prometheus metrics sample",
        version=settings.VERSION,
        lifespan=lifespan,
    )

    app.state.runtime_name = runtime_name or settings.RUNTIME_NAME
    app.state.metrics_type_comments = (
        settings.METRICS_TYPE_COMMENTS if type_comments is None else type_comments
    )
    if registry is not None:
        app.state.registry = registry

    app.add_middleware(MetricsMiddleware)
    app.include_router(api_router)

    return app


app = create_app()
