"""Firebase service accounts.

The deployment mounts a directory of Google service-account key files::

    service_accounts/
        my-app-prod.json      {"type": "service_account", "project_id": "my-app-prod", ...}
        my-app-staging.json

Each file contributes its ``project_id`` to the list of Firebase
projects whose users may register schedules, and the credentials used
to send FCM messages for that project.
"""

from __future__ import annotations

import json
import threading
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

import google.auth.transport.requests
from google.oauth2 import service_account

from toolkit.core.errors import ConfigError
from toolkit.core.logging import get_logger

logger = get_logger(__name__)

FCM_SCOPE = "https://www.googleapis.com/auth/firebase.messaging"


class ServiceAccount:
    """One service-account key, with a lazily refreshed OAuth2 access token."""

    def __init__(self, info: dict[str, Any], *, source: str | None = None) -> None:
        project_id = info.get("project_id")
        if not project_id:
            raise ConfigError("Service account has no project_id", context={"source": source})
        self.project_id: str = project_id
        self.client_email: str | None = info.get("client_email")
        self.source = source
        self._info = info
        self._credentials: service_account.Credentials | None = None
        self._lock = threading.Lock()

    def access_token(self) -> str:
        """Return a valid access token, refreshing it when expired.

        Blocking: performs an HTTP request to Google's token endpoint on
        first use and on expiry.
        """
        with self._lock:
            if self._credentials is None:
                self._credentials = service_account.Credentials.from_service_account_info(
                    self._info, scopes=[FCM_SCOPE]
                )
            if not self._credentials.valid:
                self._credentials.refresh(google.auth.transport.requests.Request())
                logger.debug("service_account_token_refreshed", project=self.project_id)
            return self._credentials.token

    def __repr__(self) -> str:
        return f"ServiceAccount(project_id={self.project_id!r}, client_email={self.client_email!r})"


class ServiceAccountRegistry:
    """Service accounts keyed by Firebase project id."""

    def __init__(self, accounts: Iterable[ServiceAccount] = (), extra_projects: Iterable[str] = ()) -> None:
        self._accounts: dict[str, ServiceAccount] = {}
        for account in accounts:
            if account.project_id in self._accounts:
                logger.warning(
                    "service_account_duplicate_project",
                    project=account.project_id,
                    source=account.source,
                )
            self._accounts[account.project_id] = account
        self._extra_projects = {p for p in extra_projects if p}

    @property
    def projects(self) -> list[str]:
        """Allowed Firebase project ids, sorted."""
        return sorted(set(self._accounts) | self._extra_projects)

    def get(self, project_id: str) -> ServiceAccount | None:
        return self._accounts.get(project_id)

    def __contains__(self, project_id: object) -> bool:
        return project_id in self._accounts or project_id in self._extra_projects

    def __iter__(self) -> Iterator[ServiceAccount]:
        return iter(self._accounts.values())

    def __len__(self) -> int:
        return len(self._accounts)


def load_service_accounts(
    directory: str | Path,
    extra_projects: Iterable[str] = (),
) -> ServiceAccountRegistry:
    """Load every ``*.json`` key file in *directory*.

    A missing directory yields an empty registry.  Files that cannot be
    read, are not JSON objects, or lack ``project_id`` are skipped with a
    warning.
    """
    path = Path(directory)
    if not path.is_dir():
        logger.warning("service_accounts_dir_missing", path=str(path))
        return ServiceAccountRegistry(extra_projects=extra_projects)

    accounts: list[ServiceAccount] = []
    for key_file in sorted(path.glob("*.json")):
        try:
            info = json.loads(key_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("service_account_unreadable", file=key_file.name, error=str(exc))
            continue
        if not isinstance(info, dict):
            logger.warning("service_account_invalid", file=key_file.name, error="not a JSON object")
            continue
        try:
            accounts.append(ServiceAccount(info, source=key_file.name))
        except ConfigError as exc:
            logger.warning("service_account_invalid", file=key_file.name, error=exc.message)

    registry = ServiceAccountRegistry(accounts, extra_projects=extra_projects)
    logger.info("service_accounts_loaded", count=len(registry), projects=registry.projects)
    return registry
