from __future__ import annotations

import asyncio

import httpx

from seat_watcher.core.config import FetchConfig
from seat_watcher.core.types import FetchAttempt, Sleep
from seat_watcher.fetch.retry_policy import backoff_retry
from seat_watcher.monitoring.logger import get_logger


class ResilientFetcher:
    """
    GET with a hard per-attempt deadline and exponential backoff.

    Any HTTP response (including 4xx/5xx) ends the retry loop and is handed
    back as-is; interpreting the status is the caller's job. Only transport
    failures and deadline aborts are retried, and the last one is re-raised
    once `max_retries` attempts have been made.
    """

    def __init__(
        self,
        cfg: FetchConfig,
        http: httpx.AsyncClient,
        *,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._cfg = cfg
        self._http = http
        self._sleep = sleep
        self._log = get_logger("fetch")
        self.attempts: list[FetchAttempt] = []

    async def get(self, url: str, headers: dict[str, str] | None = None) -> httpx.Response:
        self.attempts = []
        idle_before = 0.0
        async for attempt in backoff_retry(self._cfg, sleep=self._sleep, log=self._log):
            state = attempt.retry_state
            record = FetchAttempt(
                attempt=state.attempt_number,
                backoff_sec=state.idle_for - idle_before,
                timeout_sec=self._cfg.timeout_sec,
            )
            idle_before = state.idle_for
            self.attempts.append(record)
            self._log.debug("GET %s attempt %d/%d", url, record.attempt, self._cfg.max_retries)
            with attempt:
                # wait_for covers connect + headers + body; httpx's own
                # timeouts are per phase only.
                return await asyncio.wait_for(
                    self._http.get(url, headers=headers),
                    timeout=self._cfg.timeout_sec,
                )
        raise RuntimeError("unreachable: retry loop ended without result")
