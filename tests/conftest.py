"""
Shared pytest fixtures for toolkit tests.

- ``db_url`` / ``conn``: a migrated SQLite file under ``tmp_path``
- ``make_token``: unsigned Firebase-style ID tokens (decoded with
  ``verify_id_tokens=False``)
- ``settings``: service settings with the scheduler and browser off
"""

from __future__ import annotations

import base64
import json
from collections.abc import Callable
from typing import Any

import pytest

from toolkit.api.settings import ToolkitSettings
from toolkit.core.database import connect, setup_database
from toolkit.ops.context import OperationContext

PROJECT = "demo-project"
USER = "user-1"
OTHER_USER = "user-2"


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def unsigned_token(claims: dict[str, Any]) -> str:
    """A JWT with a bogus signature; only ``verify=False`` accepts it."""
    header = {"alg": "RS256", "typ": "JWT", "kid": "test"}
    return ".".join(
        [
            _b64(json.dumps(header).encode()),
            _b64(json.dumps(claims).encode()),
            _b64(b"not-a-signature"),
        ]
    )


@pytest.fixture()
def raw_token() -> Callable[[dict[str, Any]], str]:
    """Factory: claims dict -> unsigned JWT (no "Bearer " prefix)."""
    return unsigned_token


@pytest.fixture()
def make_token() -> Callable[..., str]:
    """Factory: ``make_token(user_id="u", aud="p")`` -> ``"Bearer <jwt>"``."""

    def _make(user_id: str = USER, aud: str = PROJECT, **extra: Any) -> str:
        claims = {
            "iss": f"https://securetoken.google.com/{aud}",
            "aud": aud,
            "user_id": user_id,
            "sub": user_id,
            **extra,
        }
        return f"Bearer {unsigned_token(claims)}"

    return _make


@pytest.fixture()
def db_url(tmp_path) -> str:
    """URL of a freshly migrated database file."""
    url = f"sqlite:{tmp_path / 'db' / 'toolkit.db'}"
    setup_database(url)
    return url


@pytest.fixture()
def conn(db_url):
    connection = connect(db_url)
    yield connection
    connection.close()


@pytest.fixture()
def ctx(conn) -> OperationContext:
    """OperationContext for USER in PROJECT."""
    return OperationContext(conn=conn, caller="test", user=USER, project=PROJECT)


@pytest.fixture()
def settings(tmp_path, db_url) -> ToolkitSettings:
    return ToolkitSettings(
        database_url=db_url,
        service_accounts_dir=str(tmp_path / "service_accounts"),
        firebase_projects=[PROJECT],
        verify_id_tokens=False,
        scheduler_enabled=False,
        browser_enabled=False,
        log_json=True,
        log_level="WARNING",
    )
