"""Prometheus scrape endpoint."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from metrics_sample.services.metrics import CONTENT_TYPE, MeterRegistry, render
from .deps import get_registry

router = APIRouter(tags=["metrics"])


@router.get("/metrics", response_class=Response)
def get_metrics(request: Request, registry: MeterRegistry = Depends(get_registry)):
    """Render the current registry state in Prometheus text format.

    Every call reflects live state; nothing is cached between scrapes.
    """
    body = render(
        registry.snapshot(),
        include_type_comments=request.app.state.metrics_type_comments,
    )
    return Response(content=body, media_type=CONTENT_TYPE)
