from __future__ import annotations

import argparse
import asyncio
import sys

from seat_watcher.app.bootstrap import build_runtime
from seat_watcher.core.config import load_config
from seat_watcher.core.env import load_dotenv
from seat_watcher.core.errors import ConfigError
from seat_watcher.core.types import ExitCode
from seat_watcher.monitoring.logger import get_logger, setup_logging

log = get_logger("app")


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="seat-watcher",
        description=(
            "Poll a page and send a Telegram message when the marker text disappears. "
            f"Exit code {int(ExitCode.SEAT_FOUND)} means a seat was found (intentional, "
            "so schedulers that alert on failed runs escalate it)."
        ),
    )
    p.add_argument("--loop", action="store_true", help="Check forever instead of a single pass")
    p.add_argument("--config", default=None, help="Optional YAML config; env vars override it")
    p.add_argument("--env-file", default=".env", help="KEY=VALUE file loaded before config (default: .env)")
    p.add_argument("--log-level", default=None, help="Override LOG_LEVEL / logging.level")
    return p


async def _amain(argv: list[str]) -> int:
    args = _build_parser().parse_args(argv)
    load_dotenv(args.env_file)
    try:
        cfg = load_config(args.config)
    except (ConfigError, FileNotFoundError) as e:
        setup_logging(args.log_level or "INFO")
        log.error("Configuration error: %s", e)
        return ExitCode.CONFIG_ERROR
    setup_logging(args.log_level or cfg.logging.level)
    runtime = build_runtime(cfg)
    return await runtime.run(loop=args.loop)


def main(argv: list[str] | None = None) -> None:
    try:
        rc = asyncio.run(_amain(sys.argv[1:] if argv is None else argv))
    except KeyboardInterrupt:
        rc = ExitCode.INTERRUPTED
    except Exception:
        log.exception("Unhandled error")
        rc = ExitCode.ERROR
    raise SystemExit(int(rc))


if __name__ == "__main__":
    main()
