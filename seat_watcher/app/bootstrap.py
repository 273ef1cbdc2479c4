from __future__ import annotations

from seat_watcher.core.config import WatcherConfig
from seat_watcher.engine.runtime import Runtime


def build_runtime(cfg: WatcherConfig) -> Runtime:
    return Runtime(cfg)
