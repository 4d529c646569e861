"""Health endpoint.

Returns a static UP status naming the hosting runtime. Every call is counted
and timed on the injected registry.
"""

from fastapi import APIRouter, Depends, Request

from metrics_sample.services.metrics import MeterRegistry
from metrics_sample.services.metrics.models import HealthModel
from .deps import get_registry

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthModel)
def get_health(request: Request, registry: MeterRegistry = Depends(get_registry)):
    """Always returns 200 with {"status": "UP", "runtime": "<name>"}."""
    labels = {"endpoint": "health"}
    request_counter = registry.register_counter("app_requests_total", labels)
    response_timer = registry.register_timer("app_response_time_seconds", labels)

    with response_timer.time():
        request_counter.increment()
        return HealthModel(status="UP", runtime=request.app.state.runtime_name)
