"""Shared fixtures for mind map tests."""

import random

import pytest
from fastapi.testclient import TestClient

from mindmap_backend.config import Settings
from mindmap_backend.main import create_app
from mindmap_backend.mindmap_manager import MindMapManager


@pytest.fixture
def manager():
    """A fresh manager with deterministic node placement."""
    return MindMapManager(rng=random.Random(1234))


@pytest.fixture
def client(manager):
    """API client bound to the manager fixture, with the lifespan running."""
    app = create_app(manager=manager, config=Settings())
    with TestClient(app) as test_client:
        yield test_client
