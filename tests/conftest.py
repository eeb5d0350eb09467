import httpx
import pytest
from fastapi.testclient import TestClient

from unified_checkout.app_setup.factory import create_app
from unified_checkout.checkout.models import CheckoutTimings

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/tests/unit/" in nodeid or nodeid.startswith("tests/unit/") or nodeid.startswith("unit/"):
            item.add_marker(pytest.mark.unit)
        elif "/tests/integration/" in nodeid or nodeid.startswith("tests/integration/") or nodeid.startswith("integration/"):
            item.add_marker(pytest.mark.integration)

# Pas de Redis en tests: le lifespan désactive le limiter
@pytest.fixture(autouse=True)
def _disable_rate_limiter(monkeypatch):
    monkeypatch.setenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")
    monkeypatch.delenv("LOCAL_RATE_LIMIT_FALLBACK", raising=False)

@pytest.fixture
def fast_timings():
    return CheckoutTimings(library_grace=0, ready_fallback=0, auto_reset=0.01)

@pytest.fixture
def app():
    return create_app()

@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c

@pytest.fixture
def sandbox_http(app):
    """httpx.AsyncClient branché en ASGI sur le backend sandbox (sans lifespan)."""
    app.state.rate_limit_enabled = False
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://sandbox.test")
