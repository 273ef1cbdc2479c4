from __future__ import annotations


class ConfigError(ValueError):
    """Required setting missing or invalid; raised before any pass runs."""


class NotificationError(RuntimeError):
    """Telegram delivery failed (non-2xx answer or transport error)."""
