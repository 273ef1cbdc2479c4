from __future__ import annotations

import asyncio
import logging

import httpx
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt, wait_exponential

from seat_watcher.core.config import FetchConfig
from seat_watcher.core.types import Sleep
from seat_watcher.monitoring.logger import get_logger

# Network/DNS/connection failures, httpx timeouts and our own per-attempt abort.
# HTTP status codes never show up here: a response is a success for the fetcher.
TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    httpx.TransportError,
    TimeoutError,
    asyncio.TimeoutError,
)


def describe_error(exc: BaseException | None) -> str:
    if exc is None:
        return "unknown error"
    msg = str(exc)
    return f"{type(exc).__name__}: {msg}" if msg else type(exc).__name__


def _log_before_sleep(log: logging.Logger, max_retries: int):
    def _hook(state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome else None
        wait_sec = state.next_action.sleep if state.next_action else 0.0
        log.warning(
            "Fetch failed (%s) - retry %d/%d in %gs",
            describe_error(exc),
            state.attempt_number,
            max_retries,
            wait_sec,
        )

    return _hook


def backoff_retry(cfg: FetchConfig, *, sleep: Sleep = asyncio.sleep, log: logging.Logger | None = None) -> AsyncRetrying:
    """Retry controller for one fetch: waits B, 2B, 4B, ... between attempts."""
    return AsyncRetrying(
        sleep=sleep,
        reraise=True,
        stop=stop_after_attempt(cfg.max_retries),
        wait=wait_exponential(multiplier=cfg.backoff_base_sec, exp_base=2),
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        before_sleep=_log_before_sleep(log or get_logger("fetch"), cfg.max_retries),
    )
