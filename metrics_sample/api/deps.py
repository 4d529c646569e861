from fastapi import Request

from metrics_sample.services.metrics import MeterRegistry


def get_registry(request: Request) -> MeterRegistry:
    """FastAPI dependency returning the registry owned by the running app."""
    return request.app.state.registry
