from __future__ import annotations

"""
Telegram alerts via the Bot API `sendMessage` endpoint.
"""

from dataclasses import dataclass

import httpx

from seat_watcher.core.errors import NotificationError
from seat_watcher.core.types import NotificationMessage
from seat_watcher.monitoring.logger import get_logger


@dataclass(frozen=True)
class TelegramConfig:
    bot_token: str
    chat_id: str
    api_base: str = "https://api.telegram.org"
    timeout_sec: float = 10.0


class TelegramAlerter:
    def __init__(self, cfg: TelegramConfig, http: httpx.AsyncClient) -> None:
        self._cfg = cfg
        self._http = http
        self._log = get_logger("telegram")

    def _endpoint(self) -> str:
        return f"{self._cfg.api_base.rstrip('/')}/bot{self._cfg.bot_token}/sendMessage"

    async def send(self, text: str) -> None:
        payload = {"chat_id": self._cfg.chat_id, "text": text}
        try:
            r = await self._http.post(self._endpoint(), json=payload, timeout=self._cfg.timeout_sec)
        except httpx.HTTPError as e:
            # str(e) from httpx never carries the URL, so the token stays out of logs
            raise NotificationError(f"Telegram request failed: {type(e).__name__}: {e}") from e
        if not r.is_success:
            raise NotificationError(f"Telegram {r.status_code}: {r.text}")

    async def notify(self, message: NotificationMessage) -> None:
        await self.send(message.text)
        self._log.info("Sent %s notification to chat %s", message.kind, self._cfg.chat_id)
