from __future__ import annotations

import hashlib
import json
import logging
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import requests

from .config import OpenDotaConfig, opendota_config_from_env
from .ports import MatchDataPort, NameLookupPort

logger = logging.getLogger(__name__)

_MATCH_ID = re.compile(r"^[0-9]{8,20}$")

RETRY_STATUSES = (429, 500, 502, 503, 504)


class OpenDotaError(RuntimeError):
    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class MatchNotFoundError(OpenDotaError):
    pass


class RateLimitedError(OpenDotaError):
    pass


class ProviderUnavailableError(OpenDotaError):
    pass


def is_valid_match_id(value: Any) -> bool:
    return bool(_MATCH_ID.match(str(value).strip()))


def error_for_status(status: int) -> OpenDotaError:
    if status == 404:
        return MatchNotFoundError("Match no encontrado. Revisa el match_id.", status)
    if status == 429:
        return RateLimitedError("Rate limit alcanzado en OpenDota. Intenta luego.", status)
    if status >= 500:
        return ProviderUnavailableError("OpenDota no disponible temporalmente.", status)
    return OpenDotaError("No fue posible obtener la partida desde OpenDota.", status)


@dataclass
class OpenDotaClient(MatchDataPort, NameLookupPort):
    config: Optional[OpenDotaConfig] = None
    retries: int = 3
    backoff_s: float = 0.6
    session: Any = None

    def __post_init__(self) -> None:
        if self.config is None:
            self.config = opendota_config_from_env()
        if self.session is None:
            self.session = requests.Session()
            self.session.headers.update({"accept": "application/json"})

    def _cache_path(self, path: str) -> Path:
        assert self.config is not None
        digest = hashlib.sha1(f"{self.config.base_url}{path}".encode("utf-8")).hexdigest()
        return self.config.cache.base_dir / f"{digest}.json"

    def _read_cache(self, path: str) -> Optional[Any]:
        assert self.config is not None
        cache = self.config.cache
        if not cache.enabled:
            return None
        cache_path = self._cache_path(path)
        if not cache_path.exists():
            return None
        if time.time() - cache_path.stat().st_mtime > cache.ttl_s:
            logger.debug("Cache expired for %s", path)
            return None
        try:
            with cache_path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except ValueError:
            logger.warning("Discarding unreadable cache file %s", cache_path)
            return None

    def _write_cache(self, path: str, data: Any) -> None:
        assert self.config is not None
        if not self.config.cache.enabled:
            return
        cache_path = self._cache_path(path)
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        with cache_path.open("w", encoding="utf-8") as f:
            json.dump(data, f)

    def get_json(self, path: str, cached: bool = False) -> Any:
        assert self.config is not None
        if cached:
            hit = self._read_cache(path)
            if hit is not None:
                return hit

        url = f"{self.config.base_url}{path}"
        last_status: Optional[int] = None
        for attempt in range(self.retries):
            try:
                resp = self.session.get(url, timeout=self.config.timeout_s)
            except requests.RequestException as exc:
                logger.warning("OpenDota request failed (attempt %d): %s", attempt + 1, exc)
                last_status = 503
                time.sleep(self.backoff_s * (attempt + 1))
                continue

            if resp.status_code in RETRY_STATUSES:
                last_status = resp.status_code
                logger.info("OpenDota returned %d for %s, retrying", resp.status_code, path)
                time.sleep(self.backoff_s * (attempt + 1))
                continue
            if resp.status_code >= 400:
                raise error_for_status(resp.status_code)

            try:
                data = resp.json()
            except ValueError as exc:
                raise OpenDotaError("Respuesta inesperada de OpenDota.", 502) from exc
            if cached:
                self._write_cache(path, data)
            return data

        raise error_for_status(last_status or 503)

    def fetch_match(self, match_id: str) -> Dict[str, Any]:
        if not is_valid_match_id(match_id):
            raise OpenDotaError("match_id invalido. Debe ser numerico (8 a 20 digitos).", 400)
        data = self.get_json(f"/matches/{str(match_id).strip()}")
        if not isinstance(data, dict):
            raise OpenDotaError("Respuesta inesperada de OpenDota.", 502)
        return data

    def item_names(self) -> Dict[int, str]:
        data = self.get_json("/constants/items", cached=True) or {}
        names: Dict[int, str] = {}
        for key, item in data.items():
            if not isinstance(item, dict):
                continue
            item_id = item.get("id")
            if isinstance(item_id, int) and item_id > 0:
                names[item_id] = item.get("dname") or key
        return names

    def hero_names(self) -> Dict[int, str]:
        data = self.get_json("/constants/heroes", cached=True) or {}
        names: Dict[int, str] = {}
        for key, hero in data.items():
            if not isinstance(hero, dict):
                continue
            hero_id = hero.get("id")
            if not isinstance(hero_id, int):
                hero_id = int(key) if str(key).isdigit() else None
            name = hero.get("localized_name") or hero.get("name")
            if hero_id and name:
                names[hero_id] = name
        return names
