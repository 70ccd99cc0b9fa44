"""Fixtures for API tests: a real app with the scheduler and browser off."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from toolkit.api import create_app


@pytest.fixture()
def app(settings):
    return create_app(settings=settings)


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def auth(make_token):
    """Headers for the default user in the allowed project."""
    return {"firebase-auth": make_token()}
