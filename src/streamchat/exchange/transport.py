"""Transport collaborators that turn a submission into reply text."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any, Protocol, runtime_checkable

import httpx

from streamchat.conversation.models import FileAttachment
from streamchat.exceptions import TransportError
from streamchat.exchange.models import TransportReply

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 120.0

# Response fields that may carry the reply text, in order of preference.
REPLY_FIELDS = ("message", "response")


@runtime_checkable
class Transport(Protocol):
    """Sends one message with its attachments and returns the reply."""

    async def send(
        self,
        message: str,
        attachments: Sequence[FileAttachment] = (),
    ) -> TransportReply: ...


def build_form_parts(
    message: str,
    attachments: Sequence[FileAttachment],
    *,
    timestamp: datetime | None = None,
) -> list[tuple[str, tuple[Any, ...]]]:
    """Build the multipart body: text fields plus one binary part per file."""
    sent_at = timestamp or datetime.now(UTC)
    parts: list[tuple[str, tuple[Any, ...]]] = [
        ("message", (None, message)),
        ("timestamp", (None, sent_at.isoformat())),
    ]
    for index, attachment in enumerate(attachments):
        parts.append(
            (f"file{index}", (attachment.filename, attachment.data, attachment.media_type))
        )
    if attachments:
        parts.append(("fileCount", (None, str(len(attachments)))))
    return parts


def extract_reply(response: httpx.Response) -> str:
    """Pull the reply text out of a webhook response body."""
    try:
        data = response.json()
    except ValueError as exc:
        raise TransportError("Webhook returned a body that is not valid JSON") from exc
    if not isinstance(data, dict):
        raise TransportError("Webhook returned an unexpected JSON payload")
    for key in REPLY_FIELDS:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value
    raise TransportError("Webhook response did not include a reply")


class WebhookTransport:
    """Posts each submission to a webhook as ``multipart/form-data``."""

    def __init__(
        self,
        url: str,
        *,
        timeout: float = _DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._client = client

    @property
    def url(self) -> str:
        return self._url

    async def send(
        self,
        message: str,
        attachments: Sequence[FileAttachment] = (),
    ) -> TransportReply:
        parts = build_form_parts(message, attachments)
        logger.info(
            "POST %s (%d chars, %d attachment(s))", self._url, len(message), len(attachments)
        )
        try:
            if self._client is not None:
                resp = await self._client.post(self._url, files=parts, timeout=self._timeout)
            else:
                async with httpx.AsyncClient() as http:
                    resp = await http.post(self._url, files=parts, timeout=self._timeout)
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"Webhook request timed out after {self._timeout:g}s"
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Webhook request failed: {exc}") from exc
        except httpx.InvalidURL as exc:
            raise TransportError(f"Invalid webhook URL: {exc}") from exc

        if not resp.is_success:
            raise TransportError(
                f"Webhook request failed with status {resp.status_code}",
                status_code=resp.status_code,
            )
        return TransportReply(text=extract_reply(resp), status_code=resp.status_code)


class EchoTransport:
    """Offline responder that answers with the submitted text."""

    def __init__(self, *, delay: float = 0.0) -> None:
        self._delay = delay

    async def send(
        self,
        message: str,
        attachments: Sequence[FileAttachment] = (),
    ) -> TransportReply:
        if self._delay:
            await asyncio.sleep(self._delay)
        text = f"You said: {message}" if message else "You sent no text."
        if attachments:
            names = ", ".join(a.filename for a in attachments)
            text += f" Attached: {names}."
        return TransportReply(text=text)


def create_transport(
    kind: str = "webhook",
    *,
    url: str | None = None,
    timeout: float = _DEFAULT_TIMEOUT,
) -> Transport:
    """Create a transport.

    Parameters
    ----------
    kind:
        ``"webhook"`` (default) posts to *url*. ``"echo"`` answers locally
        without any network access.
    url:
        Webhook endpoint. Required for ``"webhook"``.
    timeout:
        Seconds before a webhook request is abandoned.
    """
    if kind == "echo":
        return EchoTransport()
    if kind == "webhook":
        if not url:
            raise ValueError("A webhook URL is required for the webhook transport")
        return WebhookTransport(url, timeout=timeout)
    raise ValueError(f"Unsupported transport: {kind}. Supported transports: webhook, echo")
