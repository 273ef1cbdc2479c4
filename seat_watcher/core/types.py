from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Awaitable, Callable

# Cooperative suspend primitive shared by retry backoff and the pass loop.
Sleep = Callable[[float], Awaitable[None]]


class ExitCode(IntEnum):
    OK = 0
    ERROR = 1
    CONFIG_ERROR = 2
    # Non-zero on purpose: a scheduler that alerts on failed runs (e.g. a CI
    # cron job emailing on failure) turns a found seat into an alert.
    SEAT_FOUND = 3
    INTERRUPTED = 130


@dataclass(frozen=True)
class FetchAttempt:
    attempt: int
    backoff_sec: float
    timeout_sec: float


@dataclass(frozen=True)
class CheckResult:
    url: str
    free: bool | None
    status_code: int | None = None
    error: str | None = None

    @property
    def is_free(self) -> bool:
        # None (check failed) counts as "not free"
        return self.free is True


@dataclass(frozen=True)
class NotificationMessage:
    kind: str
    text: str


def debug_message(result: CheckResult) -> NotificationMessage:
    text = f"Debug → free? {str(result.is_free).lower()}\n{result.url}"
    if result.error:
        text += f"\ncheck failed: {result.error}"
    return NotificationMessage(kind="debug", text=text)


def seat_opened_message(url: str) -> NotificationMessage:
    return NotificationMessage(kind="seat_opened", text=f"🎉 A seat just opened!\n{url}")


@dataclass(frozen=True)
class PassOutcome:
    result: CheckResult
    sent: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()
    seat_found: bool = False
