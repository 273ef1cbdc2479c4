from __future__ import annotations

import asyncio

import httpx

from seat_watcher.core.config import WatcherConfig
from seat_watcher.core.types import ExitCode, Sleep
from seat_watcher.engine.runner import PassRunner
from seat_watcher.fetch.fetcher import ResilientFetcher
from seat_watcher.monitoring.alerts.telegram import TelegramAlerter, TelegramConfig
from seat_watcher.monitoring.logger import get_logger


class Runtime:
    def __init__(
        self,
        cfg: WatcherConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._cfg = cfg
        self._transport = transport
        self._sleep = sleep
        self._log = get_logger("runtime")

    def _build_runner(self, http: httpx.AsyncClient) -> PassRunner:
        fetcher = ResilientFetcher(self._cfg.fetch, http, sleep=self._sleep)
        alerter = TelegramAlerter(
            TelegramConfig(
                bot_token=self._cfg.bot_token,
                chat_id=self._cfg.chat_id,
                api_base=self._cfg.telegram_api_base,
            ),
            http,
        )
        return PassRunner(self._cfg, fetcher, alerter, sleep=self._sleep)

    async def run(self, loop: bool = False) -> ExitCode:
        # one client for the whole process; closed on return or cancellation
        async with httpx.AsyncClient(transport=self._transport, follow_redirects=True) as http:
            runner = self._build_runner(http)
            if loop:
                await runner.loop_forever()
            outcome = await runner.single_pass()

        if outcome.seat_found:
            self._log.info("Seat found - exiting with code %d", int(ExitCode.SEAT_FOUND))
            return ExitCode.SEAT_FOUND
        return ExitCode.OK
