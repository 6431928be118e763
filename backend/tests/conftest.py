"""
Shared fixtures: every test gets its own Projects root under tmp_path.
"""

import pytest
from fastapi.testclient import TestClient
from localify.core.config import Settings
from localify.main import create_app
from localify.services.metrics import PerformanceMonitor
from localify.services.store import ProjectStore


@pytest.fixture
def settings(tmp_path):
    return Settings(
        PROJECTS_DIR=tmp_path / "Projects",
        HOST="127.0.0.1",
        PORT=0,
        _env_file=None,
    )


@pytest.fixture
def store(settings):
    return ProjectStore(settings.PROJECTS_DIR)


@pytest.fixture
def monitor():
    return PerformanceMonitor()


@pytest.fixture
def client(settings, monitor):
    return TestClient(create_app(settings, monitor))
