from __future__ import annotations

import asyncio
from pathlib import Path

import httpx
import pytest

from seat_watcher.app import main as main_mod
from seat_watcher.core.config import ENV_KEYS, LOG_LEVEL_KEY, WatcherConfig
from seat_watcher.core.types import ExitCode
from seat_watcher.engine.runtime import Runtime


def _page(body: str, status: int = 200):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "api.telegram.org":
            return httpx.Response(200, json={"ok": True})
        return httpx.Response(status, text=body)

    return handler


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    for keys in ENV_KEYS.values():
        for key in keys:
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv(LOG_LEVEL_KEY, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _write_env(tmp_path: Path) -> Path:
    p = tmp_path / "watcher.env"
    p.write_text("BOT_TOKEN=123:abc\nCHAT_ID=42\nTARGET_URL=https://uni.example.test/c\nMARKER_TEXT=SOLD OUT\n")
    return p


def _patch_transport(monkeypatch: pytest.MonkeyPatch, handler) -> None:
    def build(cfg: WatcherConfig) -> Runtime:
        return Runtime(cfg, transport=httpx.MockTransport(handler))

    monkeypatch.setattr(main_mod, "build_runtime", build)


def _exit_code(argv: list[str]) -> int:
    with pytest.raises(SystemExit) as exc:
        main_mod.main(argv)
    return exc.value.code


def test_missing_config_exits_before_any_pass(clean_env, monkeypatch):
    calls: list[str] = []
    monkeypatch.setattr(main_mod, "build_runtime", lambda cfg: calls.append("built"))

    assert _exit_code(["--env-file", str(clean_env / "absent.env")]) == ExitCode.CONFIG_ERROR
    assert calls == []


def test_one_shot_no_seat_exits_zero(clean_env, monkeypatch):
    env_file = _write_env(clean_env)
    _patch_transport(monkeypatch, _page("<html>SOLD OUT</html>"))
    assert _exit_code(["--env-file", str(env_file)]) == ExitCode.OK


def test_one_shot_seat_found_exits_with_distinguished_code(clean_env, monkeypatch):
    env_file = _write_env(clean_env)
    _patch_transport(monkeypatch, _page("<html>Open</html>"))
    assert _exit_code(["--env-file", str(env_file)]) == ExitCode.SEAT_FOUND


def test_error_page_is_not_a_seat(clean_env, monkeypatch):
    env_file = _write_env(clean_env)
    _patch_transport(monkeypatch, _page("gateway timeout", status=504))
    assert _exit_code(["--env-file", str(env_file)]) == ExitCode.OK


def test_unexpected_error_exits_one(clean_env, monkeypatch):
    env_file = _write_env(clean_env)

    def boom(cfg: WatcherConfig) -> Runtime:
        raise RuntimeError("boom")

    monkeypatch.setattr(main_mod, "build_runtime", boom)
    assert _exit_code(["--env-file", str(env_file)]) == ExitCode.ERROR


def test_runtime_one_shot_without_seat_is_ok():
    cfg = WatcherConfig(bot_token="t", chat_id="1", target_url="https://x.test", marker_text="Full")
    runtime = Runtime(cfg, transport=httpx.MockTransport(_page("Full")))
    assert asyncio.run(runtime.run(loop=False)) is ExitCode.OK


class _StopLoop(Exception):
    pass


class StoppingSleep:
    def __init__(self, stop_after: int) -> None:
        self.calls: list[float] = []
        self._stop_after = stop_after

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        if len(self.calls) >= self._stop_after:
            raise _StopLoop()


def test_runtime_loop_sleeps_configured_interval_between_passes():
    hits = {"page": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        hits["page"] += 1
        return httpx.Response(200, text="SOLD OUT")

    cfg = WatcherConfig(
        bot_token="t", chat_id="1", target_url="https://x.test", marker_text="SOLD OUT", check_interval_sec=45
    )
    sleep = StoppingSleep(stop_after=2)
    runtime = Runtime(cfg, transport=httpx.MockTransport(handler), sleep=sleep)

    with pytest.raises(_StopLoop):
        asyncio.run(runtime.run(loop=True))

    assert sleep.calls == [cfg.check_interval_sec, cfg.check_interval_sec]
    assert hits["page"] == 2


class _RecordingRuntime:
    def __init__(self) -> None:
        self.loop_flags: list[bool] = []

    async def run(self, loop: bool = False) -> ExitCode:
        self.loop_flags.append(loop)
        return ExitCode.OK


@pytest.mark.parametrize("argv, expected", [(["--loop"], [True]), ([], [False])])
def test_loop_flag_selects_mode(clean_env, monkeypatch, argv, expected):
    env_file = _write_env(clean_env)
    runtime = _RecordingRuntime()
    monkeypatch.setattr(main_mod, "build_runtime", lambda cfg: runtime)

    assert _exit_code([*argv, "--env-file", str(env_file)]) == ExitCode.OK
    assert runtime.loop_flags == expected


def test_bad_target_url_exits_with_config_error_before_any_pass(clean_env, monkeypatch):
    env_file = clean_env / "bad.env"
    env_file.write_text("BOT_TOKEN=t\nCHAT_ID=1\nTARGET_URL=http://exa mple.com:notaport/\nMARKER_TEXT=Full\n")
    calls: list[str] = []
    monkeypatch.setattr(main_mod, "build_runtime", lambda cfg: calls.append("built"))

    assert _exit_code(["--loop", "--env-file", str(env_file)]) == ExitCode.CONFIG_ERROR
    assert calls == []
