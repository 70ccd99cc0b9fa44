"""FCM HTTP v1 client.

Sends one message per call::

    POST {endpoint}/projects/{project_id}/messages:send
    Authorization: Bearer <service-account access token>

    {"message": {"token": "<push token>", ...payload}}

The stored schedule payload is merged into ``message`` as-is, so a
payload can carry ``notification``, ``data``, ``android``, ``apns`` or
``webpush`` blocks.  A ``token`` key in the payload is ignored: the
schedule's push token always wins.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from toolkit.core.errors import ConfigError, MessagingError
from toolkit.core.logging import get_logger
from toolkit.fcm.accounts import ServiceAccountRegistry

logger = get_logger(__name__)

DEFAULT_ENDPOINT = "https://fcm.googleapis.com/v1"


def build_message(push_token: str, payload: dict[str, Any]) -> dict[str, Any]:
    """Return the request body for ``messages:send``."""
    message = {k: v for k, v in payload.items() if k != "token"}
    message["token"] = push_token
    return {"message": message}


class FcmClient:
    """Async FCM sender backed by an ``httpx.AsyncClient``.

    Args:
        accounts: Service accounts used to authorise each project.
        endpoint: API base URL (override in tests / emulators).
        timeout_seconds: Per-request timeout.
        transport: Optional httpx transport (``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        accounts: ServiceAccountRegistry,
        *,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._accounts = accounts
        self._endpoint = endpoint.rstrip("/")
        self._timeout = timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def send(self, project_id: str, push_token: str, payload: dict[str, Any]) -> str:
        """Send one message and return the FCM message name.

        Raises:
            ConfigError: No service account for *project_id*.
            MessagingError: FCM returned a non-2xx status or the request failed.
        """
        account = self._accounts.get(project_id)
        if account is None:
            raise ConfigError(
                f"No service account for project {project_id!r}",
                context={"project": project_id},
            )

        try:
            token = await asyncio.to_thread(account.access_token)
        except Exception as exc:
            raise MessagingError(
                f"Could not obtain access token for {project_id!r}: {exc}", cause=exc
            ) from exc

        url = f"{self._endpoint}/projects/{project_id}/messages:send"
        body = build_message(push_token, payload)

        try:
            async with self._client() as client:
                response = await client.post(
                    url,
                    json=body,
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.HTTPError as exc:
            raise MessagingError(f"FCM request failed: {exc}", cause=exc) from exc

        if response.status_code >= 400:
            detail = _error_detail(response)
            raise MessagingError(
                f"FCM returned HTTP {response.status_code}: {detail}",
                status_code=response.status_code,
                context={"project": project_id},
            )

        try:
            name = response.json().get("name", "")
        except (ValueError, AttributeError):
            # already delivered; only the message name is lost
            logger.warning("fcm_unexpected_response_body", project=project_id, body=response.text[:200])
            name = ""
        logger.debug("fcm_message_sent", project=project_id, message=name)
        return name


def _error_detail(response: httpx.Response) -> str:
    try:
        error = response.json().get("error", {})
    except ValueError:
        return response.text[:200]
    if isinstance(error, dict):
        return str(error.get("status") or error.get("message") or error)[:200]
    return str(error)[:200]
