from __future__ import annotations

import os
from pathlib import Path
from typing import MutableMapping


def load_dotenv(path: str = ".env", environ: MutableMapping[str, str] | None = None) -> list[str]:
    """
    Minimal .env loader (KEY=VALUE lines, optional `export ` prefix).

    Never overrides variables already present, so CI secrets win over a stale
    local file. Returns the keys that were set.
    """
    env = os.environ if environ is None else environ
    p = Path(path)
    if not p.exists():
        return []
    loaded: list[str] = []
    for line in p.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :]
        if "=" not in line:
            continue
        k, v = line.split("=", 1)
        k = k.strip()
        v = v.strip()
        if len(v) >= 2 and v[0] == v[-1] and v[0] in ("'", '"'):
            v = v[1:-1]
        if k and k not in env:
            env[k] = v
            loaded.append(k)
    return loaded
