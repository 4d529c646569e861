import pytest
from fastapi.testclient import TestClient

from metrics_sample.services.metrics import MeterRegistry


@pytest.fixture
def registry():
    with MeterRegistry() as reg:
        yield reg


@pytest.fixture
def client(registry):
    """Test client over an app serving an isolated registry without runtime gauges."""
    from metrics_sample.app import create_app

    app = create_app(registry=registry, runtime_name="test", bind_runtime=False, type_comments=False)

    with TestClient(app) as test_client:
        yield test_client
