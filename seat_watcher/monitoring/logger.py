from __future__ import annotations

import logging

ROOT_LOGGER = "seat_watcher"


def setup_logging(level: str = "INFO") -> None:
    resolved = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logging.getLogger(ROOT_LOGGER).setLevel(resolved)
    # IMPORTANT: Bot API URLs embed the bot token (/bot<token>/sendMessage) and
    # httpx logs every request URL at INFO. Keep them quiet so the token never
    # lands in CI logs.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Component logger under the `seat_watcher` namespace (e.g. `seat_watcher.fetch`)."""
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
