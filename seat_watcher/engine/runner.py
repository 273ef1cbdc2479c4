from __future__ import annotations

import asyncio
from typing import NoReturn

import httpx

from seat_watcher.core.config import WatcherConfig
from seat_watcher.core.errors import NotificationError
from seat_watcher.core.types import (
    CheckResult,
    NotificationMessage,
    PassOutcome,
    Sleep,
    debug_message,
    seat_opened_message,
)
from seat_watcher.fetch.fetcher import ResilientFetcher
from seat_watcher.fetch.retry_policy import describe_error
from seat_watcher.monitoring.alerts.telegram import TelegramAlerter
from seat_watcher.monitoring.logger import get_logger


class PassRunner:
    """One check = fetch target page, look for the marker, maybe notify.

    Passes share no state: a seat that stays free triggers a notification on
    every pass.
    """

    def __init__(
        self,
        cfg: WatcherConfig,
        fetcher: ResilientFetcher,
        alerter: TelegramAlerter,
        *,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._cfg = cfg
        self._fetcher = fetcher
        self._alerter = alerter
        self._sleep = sleep
        self._log = get_logger("watcher")

    async def check(self) -> CheckResult:
        url = self._cfg.target_url
        try:
            r = await self._fetcher.get(url, headers={"User-Agent": self._cfg.fetch.user_agent})
        except (httpx.HTTPError, TimeoutError, asyncio.TimeoutError) as e:
            # retries exhausted: keep the loop alive, try again next pass
            err = describe_error(e)
            self._log.warning("Network error: %s", err)
            return CheckResult(url=url, free=None, error=err)

        if not r.is_success:
            self._log.info('HTTP %d %s - treating as "not free"', r.status_code, r.reason_phrase)
            return CheckResult(url=url, free=False, status_code=r.status_code)

        free = self._cfg.marker_text not in r.text
        self._log.info("HTTP %d, marker %s -> free=%s", r.status_code, "absent" if free else "present", free)
        return CheckResult(url=url, free=free, status_code=r.status_code)

    async def _deliver(self, message: NotificationMessage) -> bool:
        try:
            await self._alerter.notify(message)
        except NotificationError as e:
            self._log.error("Failed to send %s notification: %s", message.kind, e)
            return False
        return True

    async def single_pass(self) -> PassOutcome:
        result = await self.check()
        outbox: list[NotificationMessage] = []
        if self._cfg.debug:
            outbox.append(debug_message(result))
        if result.is_free:
            outbox.append(seat_opened_message(result.url))

        sent: list[str] = []
        failed: list[str] = []
        for message in outbox:
            (sent if await self._deliver(message) else failed).append(message.kind)

        return PassOutcome(
            result=result,
            sent=tuple(sent),
            failed=tuple(failed),
            seat_found=result.is_free,
        )

    async def loop_forever(self) -> NoReturn:
        interval = self._cfg.check_interval_sec
        self._log.info("Watching %s every %gs", self._cfg.target_url, interval)
        while True:
            await self.single_pass()
            self._log.info("Checked - sleeping %gs", interval)
            await self._sleep(interval)
