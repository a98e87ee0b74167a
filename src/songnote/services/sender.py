"""Telegram Bot API delivery."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

import httpx

from songnote.exceptions import SendError
from songnote.utils.http import create_http_client

logger = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"


class SenderProtocol(Protocol):
    """Protocol for message delivery backends."""

    def send_message(
        self,
        chat_id: str,
        text: str,
        *,
        parse_mode: str | None = "MarkdownV2",
        disable_preview: bool = True,
    ) -> None:
        """Post a text message."""
        ...

    def send_video_note(
        self, chat_id: str, video_path: Path, *, length: int, duration: int
    ) -> None:
        """Upload a square clip as a video note."""
        ...

    def close(self) -> None:
        """Release network resources."""
        ...


class TelegramSender:
    """Post messages and video notes through the Telegram Bot API."""

    def __init__(
        self,
        bot_token: str,
        *,
        client: httpx.Client | None = None,
        timeout: float = 60.0,
        api_base: str = TELEGRAM_API_BASE,
    ) -> None:
        """Initialize the sender.

        Args:
            bot_token: Bot API token.
            client: Optional HTTP client. When omitted, the sender creates
                and owns one.
            timeout: Timeout for the owned client; uploads can be slow.
            api_base: Bot API base URL.
        """
        self._bot_token = bot_token
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._http_client = client
        self._owns_client = client is None

    def _get_http_client(self) -> httpx.Client:
        if self._http_client is None:
            self._http_client = create_http_client(self._timeout)
        return self._http_client

    def close(self) -> None:
        """Close the HTTP client if this sender created it."""
        if self._owns_client and self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def __enter__(self) -> TelegramSender:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _method_url(self, method: str) -> str:
        return f"{self._api_base}/bot{self._bot_token}/{method}"

    def _post(self, method: str, **kwargs: Any) -> None:
        try:
            response = self._get_http_client().post(self._method_url(method), **kwargs)
        except httpx.HTTPError as e:
            # Never let the token-bearing URL leak into the message
            raise SendError(
                f"Telegram {method} request failed: {type(e).__name__}"
            ) from e

        if response.status_code != httpx.codes.OK:
            raise SendError(
                f"Telegram API error on {method}: {response.text} "
                f"(status code: {response.status_code})",
                upstream_status=response.status_code,
                body=response.text,
            )
        logger.debug("Telegram %s succeeded", method)

    def send_message(
        self,
        chat_id: str,
        text: str,
        *,
        parse_mode: str | None = "MarkdownV2",
        disable_preview: bool = True,
    ) -> None:
        """Post a text message.

        Raises:
            SendError: On transport failure or a non-200 response.
        """
        data = {"chat_id": chat_id, "text": text}
        if parse_mode:
            data["parse_mode"] = parse_mode
        if disable_preview:
            data["disable_web_page_preview"] = "true"
        self._post("sendMessage", data=data)

    def send_video_note(
        self, chat_id: str, video_path: Path, *, length: int, duration: int
    ) -> None:
        """Upload a square clip as a round video note.

        Args:
            chat_id: Target chat.
            video_path: Square mp4 clip.
            length: Video width and height in pixels.
            duration: Clip duration in seconds.

        Raises:
            SendError: If the file cannot be read or the request fails.
        """
        data = {
            "chat_id": chat_id,
            "length": str(length),
            "duration": str(duration),
        }
        try:
            with video_path.open("rb") as fh:
                files = {"video_note": (video_path.name, fh, "video/mp4")}
                self._post("sendVideoNote", data=data, files=files)
        except OSError as e:
            raise SendError(f"Failed to read video note {video_path}: {e}") from e
