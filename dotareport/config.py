from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


OPENDOTA_BASE_URL = "https://api.opendota.com/api"
OPENAI_BASE_URL = "https://api.openai.com/v1"
DEFAULT_OPENAI_MODEL = "gpt-4.1"

DEFAULT_TIMEOUT_S = 30
DEFAULT_CACHE_TTL_S = 24 * 60 * 60

NOT_AVAILABLE = "N/A"


@dataclass(frozen=True)
class CacheConfig:
    enabled: bool
    base_dir: Path
    ttl_s: int = DEFAULT_CACHE_TTL_S


@dataclass(frozen=True)
class OpenDotaConfig:
    base_url: str
    timeout_s: int
    cache: CacheConfig


@dataclass(frozen=True)
class CompletionConfig:
    api_key: str
    model: str
    base_url: str
    timeout_s: int


def _env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).lower() in {"1", "true", "yes"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def cache_config_from_env() -> CacheConfig:
    return CacheConfig(
        enabled=_env_flag("OPENDOTA_CACHE"),
        base_dir=Path(os.environ.get("OPENDOTA_CACHE_DIR", ".cache/opendota")),
        ttl_s=_env_int("OPENDOTA_CACHE_TTL_S", DEFAULT_CACHE_TTL_S),
    )


def opendota_config_from_env() -> OpenDotaConfig:
    return OpenDotaConfig(
        base_url=os.environ.get("OPENDOTA_BASE_URL", OPENDOTA_BASE_URL).rstrip("/"),
        timeout_s=_env_int("OPENDOTA_TIMEOUT_S", DEFAULT_TIMEOUT_S),
        cache=cache_config_from_env(),
    )


def completion_config_from_env() -> CompletionConfig:
    return CompletionConfig(
        api_key=os.environ.get("OPENAI_API_KEY", ""),
        model=os.environ.get("OPENAI_MODEL") or DEFAULT_OPENAI_MODEL,
        base_url=os.environ.get("OPENAI_BASE_URL", OPENAI_BASE_URL).rstrip("/"),
        timeout_s=_env_int("OPENAI_TIMEOUT_S", 120),
    )
