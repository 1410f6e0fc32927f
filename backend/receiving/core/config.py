# backend/receiving/core/config.py
import os
from dataclasses import dataclass
from typing import List

from dotenv import dotenv_values, load_dotenv, find_dotenv

# Project root and .env location
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
DEFAULT_DOTENV = os.path.join(BASE_DIR, ".env")

DEFAULT_DATABASE_URL = "sqlite:///./receiving.db"


def _norm_key(k: str) -> str:
    return k.replace("\ufeff", "").strip() if isinstance(k, str) else k


def load_env() -> str:
    """Load .env into os.environ without overriding values already set (CI)."""
    dotenv_path = DEFAULT_DOTENV if os.path.exists(DEFAULT_DOTENV) else find_dotenv(filename=".env", usecwd=True)
    if dotenv_path:
        cfg = dotenv_values(dotenv_path, encoding="utf-8-sig")
        for k, v in cfg.items():
            nk = _norm_key(k)
            if v is not None and (nk not in os.environ or not os.environ[nk].strip()):
                os.environ[nk] = v
        load_dotenv(dotenv_path, override=False)
    return dotenv_path or ""


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


def parse_origins(env_val: str | None) -> List[str]:
    if not env_val or env_val.strip() == "*":
        return ["*"]
    try:
        import json as _json
        parsed = _json.loads(env_val)
        if isinstance(parsed, list):
            return [str(x) for x in parsed]
    except ValueError:
        pass
    return [s.strip() for s in env_val.split(",") if s.strip()]


@dataclass(frozen=True)
class Settings:
    database_url: str
    photo_dir: str
    photo_base_url: str
    detail_slot_max_photos: int
    allow_acknowledged_discrepancy: bool
    log_level: str
    cors_allow_origins: List[str]


def get_settings() -> Settings:
    load_env()
    dsn = os.environ.get("DATABASE_URL") or os.environ.get("MSSQL_DSN") or DEFAULT_DATABASE_URL
    return Settings(
        database_url=dsn.strip(),
        photo_dir=os.getenv("RECEIVING_PHOTO_DIR", os.path.join(BASE_DIR, "photos")),
        photo_base_url=os.getenv("RECEIVING_PHOTO_BASE_URL", "/photos"),
        detail_slot_max_photos=_env_int("RECEIVING_DETAIL_SLOT_MAX_PHOTOS", 20),
        allow_acknowledged_discrepancy=_env_bool("RECEIVING_ALLOW_ACKNOWLEDGED_DISCREPANCY", True),
        log_level=os.getenv("RECEIVING_LOG_LEVEL", "INFO").upper(),
        cors_allow_origins=parse_origins(os.getenv("CORS_ALLOW_ORIGINS", "*")),
    )
