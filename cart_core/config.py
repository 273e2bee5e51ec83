from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ROOT_DIR = Path(__file__).resolve().parents[1]
load_dotenv(dotenv_path=ROOT_DIR / ".env")


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for k in keys:
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_int(*keys: str, default: int) -> int:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return int(v)


def _get_bool(*keys: str, default: bool = False) -> bool:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return v.lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    currency: str
    decimals: int
    log_level: str
    log_json: bool


def load_settings() -> Settings:
    """Читает настройки из окружения (и .env в корне проекта)"""
    return Settings(
        currency=_get_env("CART_CURRENCY", default="$") or "$",
        decimals=_get_int("CART_DECIMALS", default=2),
        log_level=(_get_env("CART_LOG_LEVEL", default="INFO") or "INFO").upper(),
        log_json=_get_bool("CART_LOG_JSON"),
    )


settings = load_settings()
