"""
Pytest configuration and fixtures for devfolio tests
"""

import os
import sys

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH120

from devfolio.services.tracking_service import ViewTracker  # noqa: E402
from devfolio.services.view_gate import ViewGate  # noqa: E402
from devfolio.services.visitor import SessionIdentity  # noqa: E402
from devfolio.utils.kv_store import MemoryStore  # noqa: E402
from main import create_app  # noqa: E402
from utils.mocks import ADMIN_TOKEN, FakeBackend, fixed_ip  # noqa: E402


@pytest.fixture
def backend():
    """In-memory hosted backend"""
    return FakeBackend()


@pytest.fixture
def browser_store():
    return MemoryStore()


@pytest.fixture
def tab_store():
    return MemoryStore()


@pytest.fixture
def gate(browser_store):
    return ViewGate(browser_store)


@pytest.fixture
def identity(tab_store):
    return SessionIdentity(tab_store)


@pytest.fixture
def tracker(backend):
    """View tracker that never performs a real IP lookup"""
    return ViewTracker(backend, ip_resolver=fixed_ip)


@pytest.fixture
def client(backend, browser_store, tab_store):
    """Test client wired to the fake backend and memory stores"""
    app = create_app(backend=backend, browser_store=browser_store, tab_store=tab_store, ip_resolver=fixed_ip)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}
