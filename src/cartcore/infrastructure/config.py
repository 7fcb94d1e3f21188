"""Runtime settings read from the environment.

A ``.env`` file at the project root is loaded first; variables already
set in the environment win over it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# When installed in editable mode the project root is the repo root.
ROOT_DIR = Path(__file__).resolve().parents[3]
load_dotenv(dotenv_path=ROOT_DIR / ".env")


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for k in keys:
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_float(*keys: str, default: float | None = None) -> float | None:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    try:
        return float(v)
    except ValueError:
        raise RuntimeError(f"{keys[0]} must be a number, got {v!r}") from None


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    api_url: str
    api_token: str | None
    sync_timeout: float | None
    log_level: str


def load_settings() -> Settings:
    timeout = _get_float("CARTCORE_SYNC_TIMEOUT", default=10.0)
    return Settings(
        data_dir=Path(_get_env("CARTCORE_DATA_DIR", default=str(ROOT_DIR / "data"))),
        api_url=_get_env("CARTCORE_API_URL", default="http://localhost:8000") or "",
        api_token=_get_env("CARTCORE_API_TOKEN"),
        # 0 disables the client-side timeout.
        sync_timeout=timeout if timeout else None,
        log_level=(_get_env("CARTCORE_LOG_LEVEL", default="WARNING") or "WARNING").upper(),
    )
