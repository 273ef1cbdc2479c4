from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import httpx
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from seat_watcher.core.errors import ConfigError


class LoggingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: str = "INFO"


class FetchConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    timeout_sec: float = Field(default=30.0, gt=0)
    max_retries: int = Field(default=5, ge=1)
    backoff_base_sec: float = Field(default=1.0, gt=0)
    user_agent: str = "seat-watcher/3.0"


class WatcherConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    bot_token: str = Field(min_length=1)
    chat_id: str = Field(min_length=1)
    target_url: str = Field(min_length=1)
    marker_text: str = Field(min_length=1)  # empty marker would never read as "free"
    debug: bool = False
    check_interval_sec: float = Field(default=60.0, gt=0)
    telegram_api_base: str = "https://api.telegram.org"
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)

    @field_validator("chat_id", mode="before")
    @classmethod
    def _chat_id_as_str(cls, v: Any) -> Any:
        # numeric chat ids are common in YAML
        return str(v) if isinstance(v, int) else v

    @field_validator("target_url", "telegram_api_base")
    @classmethod
    def _http_url(cls, v: str) -> str:
        # a bad URL has to fail here, not as httpx.InvalidURL inside the first pass
        try:
            url = httpx.URL(v.strip())
        except httpx.InvalidURL as e:
            raise ValueError(f"not a valid URL: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError("expected an http(s) URL with a host")
        return v.strip()


# field -> env keys, first non-empty wins; the second name of each pair is the
# legacy spelling still found in older .env files and CI secrets.
ENV_KEYS: dict[str, tuple[str, ...]] = {
    "bot_token": ("BOT_TOKEN", "TG_BOT_TOKEN"),
    "chat_id": ("CHAT_ID", "TG_CHAT_ID"),
    "target_url": ("TARGET_URL", "COURSE_URL"),
    "marker_text": ("MARKER_TEXT", "TEXT_TO_FIND"),
    "debug": ("DEBUG", "DEBUG_WATCHER"),
    "check_interval_sec": ("CHECK_INTERVAL_SECONDS", "INTERVAL_SEC"),
    "telegram_api_base": ("TELEGRAM_API_BASE",),
}
LOG_LEVEL_KEY = "LOG_LEVEL"

_TRUTHY = {"1", "true", "yes", "on"}


def env_flag(value: str) -> bool:
    return value.strip().lower() in _TRUTHY


def _from_env(environ: Mapping[str, str]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for field_name, keys in ENV_KEYS.items():
        for key in keys:
            raw = environ.get(key, "").strip()
            if raw:
                out[field_name] = env_flag(raw) if field_name == "debug" else raw
                break
    level = environ.get(LOG_LEVEL_KEY, "").strip()
    if level:
        out["logging"] = {"level": level}
    return out


def _describe(exc: ValidationError) -> str:
    problems: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"])
        name = ENV_KEYS.get(loc, (loc,))[0]
        if err["type"] == "missing":
            problems.append(f"missing {name}")
        else:
            problems.append(f"invalid {name}: {err['msg']}")
    return "; ".join(problems)


def load_config(path: str | None = None, environ: Mapping[str, str] | None = None) -> WatcherConfig:
    """Build the immutable watcher config.

    YAML (optional) provides the base values, environment variables override
    them. Raises ConfigError when required settings are absent or invalid.
    """
    data: dict[str, Any] = {}
    if path is not None:
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(path)
        data = yaml.safe_load(p.read_text()) or {}
        if not isinstance(data, dict):
            raise ConfigError(f"{path}: expected a mapping at top level")

    env = _from_env(os.environ if environ is None else environ)
    if "logging" in env and isinstance(data.get("logging"), dict):
        env["logging"] = {**data["logging"], **env["logging"]}
    data = {**data, **env}

    try:
        return WatcherConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(_describe(e)) from e
