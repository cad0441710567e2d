"""LINE API clients on a shared httpx.AsyncClient.

LineMessagingClient sends replies and pushes; LineLoginClient verifies the
ID tokens that LIFF pages send as bearer credentials.
"""

import json
from contextlib import asynccontextmanager
from typing import Any

import httpx

from memberdir.infrastructure.exceptions import LineApiException
from memberdir.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

REPLY_PATH = "/bot/message/reply"
PUSH_PATH = "/bot/message/push"
VERIFY_ID_TOKEN_PATH = "/verify"

# A single request may carry at most five message objects.
MAX_MESSAGES_PER_REQUEST = 5


class _LineHttpClient:
    """Base URL, timeout and HTTP client handling shared by the LINE clients."""

    def __init__(
        self,
        base_url: str,
        http_client: httpx.AsyncClient | None,
        timeout_seconds: float,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._shared_http = http_client
        self._timeout = timeout_seconds

    @asynccontextmanager
    async def _http_cm(self):
        """Yield the shared HTTP client, or a short-lived one when none was given."""
        if self._shared_http is not None:
            yield self._shared_http
            return
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            yield client

    async def _send(self, path: str, **kwargs: Any) -> httpx.Response:
        try:
            async with self._http_cm() as client:
                return await client.post(
                    f"{self._base_url}{path}", timeout=self._timeout, **kwargs
                )
        except httpx.HTTPError as e:
            logger.warning("LINE API %s transport error: %s", path, e)
            raise LineApiException(path, None, str(e)) from e


class LineMessagingClient(_LineHttpClient):
    """Sends messages through the LINE Messaging API. One attempt per call."""

    def __init__(
        self,
        access_token: str,
        *,
        base_url: str = "https://api.line.me/v2",
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        super().__init__(base_url, http_client, timeout_seconds)
        self._access_token = access_token

    async def reply(self, reply_token: str, messages: list[dict[str, Any]]) -> None:
        """Reply to an event with its one-time reply token."""
        await self._post(REPLY_PATH, {"replyToken": reply_token, "messages": messages})

    async def push(self, user_id: str, messages: list[dict[str, Any]]) -> None:
        """Push messages to a user id."""
        await self._post(PUSH_PATH, {"to": user_id, "messages": messages})

    async def _post(self, path: str, body: dict[str, Any]) -> None:
        if not 1 <= len(body["messages"]) <= MAX_MESSAGES_PER_REQUEST:
            raise ValueError(
                f"LINE accepts 1-{MAX_MESSAGES_PER_REQUEST} messages per request"
            )
        # Serialized the same way message sizes are measured.
        content = json.dumps(body, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
        headers = {
            "Authorization": f"Bearer {self._access_token}",
            "Content-Type": "application/json",
        }
        response = await self._send(path, content=content, headers=headers)
        if response.status_code >= 300:
            raise LineApiException(path, response.status_code, response.text)
        logger.debug("LINE API %s ok (%d bytes)", path, len(content))


class LineLoginClient(_LineHttpClient):
    """Verifies LINE Login (LIFF) ID tokens issued for one login channel."""

    def __init__(
        self,
        channel_id: str,
        *,
        base_url: str = "https://api.line.me/oauth2/v2.1",
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        super().__init__(base_url, http_client, timeout_seconds)
        self._channel_id = channel_id

    async def verify_id_token(self, id_token: str) -> str | None:
        """Return the LINE user id (sub) of a valid ID token.

        LINE checks the signature, expiry and audience (client_id must be
        this channel). A token LINE rejects returns None.

        Raises:
            LineApiException: LINE could not be reached or failed (5xx).
        """
        if not id_token:
            return None
        response = await self._send(
            VERIFY_ID_TOKEN_PATH,
            data={"id_token": id_token, "client_id": self._channel_id},
        )
        if 400 <= response.status_code < 500:
            logger.info("LINE ID token rejected: status=%d", response.status_code)
            return None
        if response.status_code >= 300:
            raise LineApiException(
                VERIFY_ID_TOKEN_PATH, response.status_code, response.text
            )
        try:
            payload = response.json()
        except ValueError:
            raise LineApiException(
                VERIFY_ID_TOKEN_PATH, response.status_code, response.text
            ) from None
        subject = payload.get("sub") if isinstance(payload, dict) else None
        if not isinstance(subject, str) or not subject:
            logger.warning("LINE ID token verified without a subject")
            return None
        return subject
