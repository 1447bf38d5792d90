from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Set


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_csv(name: str, default_csv: str = "") -> Set[str]:
    raw = os.getenv(name, default_csv)
    parts = [p.strip() for p in raw.split(",") if p.strip()]
    return set(parts)


@dataclass(frozen=True)
class Settings:
    # Client side: where result images live and how to reach the index
    assets_base_url: str = "http://localhost:8080/results/"
    remote_index_url: str = ""
    remote_index_timeout: float = 5.0

    # Search windows (days)
    fast_lookback_days: int = 7
    background_lookback_days: int = 30
    extended_lookback_days: int = 14

    # Probing
    fast_probe_timeout: float = 0.8
    probe_timeout: float = 1.0
    scan_batch_size: int = 8
    scan_batch_pause: float = 0.01

    # Refresh / display
    auto_refresh_seconds: float = 120.0
    upgrade_min_days: int = 1
    download_prefix: str = "Lottery-Result"

    # Server side
    images_dir: Path = Path("results")
    index_cache_seconds: float = 60.0
    allowed_origins: Set[str] = frozenset({"*"})  # type: ignore[assignment]

    # Contact form
    contact_webhook_url: str = ""
    contact_inbox: str = ""

    # General
    log_level: str = "INFO"
    environment: str = "stage"

    @property
    def remote_index_enabled(self) -> bool:
        return bool(self.remote_index_url)

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            assets_base_url=(os.getenv("ASSETS_BASE_URL") or "http://localhost:8080/results/").strip(),
            remote_index_url=(os.getenv("REMOTE_INDEX_URL") or "").strip(),
            remote_index_timeout=_get_float("REMOTE_INDEX_TIMEOUT", 5.0),
            fast_lookback_days=_get_int("FAST_LOOKBACK_DAYS", 7),
            background_lookback_days=_get_int("BACKGROUND_LOOKBACK_DAYS", 30),
            extended_lookback_days=_get_int("EXTENDED_LOOKBACK_DAYS", 14),
            fast_probe_timeout=_get_float("FAST_PROBE_TIMEOUT", 0.8),
            probe_timeout=_get_float("PROBE_TIMEOUT", 1.0),
            scan_batch_size=max(1, _get_int("SCAN_BATCH_SIZE", 8)),
            scan_batch_pause=_get_float("SCAN_BATCH_PAUSE", 0.01),
            auto_refresh_seconds=_get_float("AUTO_REFRESH_SECONDS", 120.0),
            upgrade_min_days=_get_int("UPGRADE_MIN_DAYS", 1),
            download_prefix=(os.getenv("DOWNLOAD_PREFIX") or "Lottery-Result").strip() or "Lottery-Result",
            images_dir=Path((os.getenv("IMAGES_DIR") or "results").strip() or "results"),
            index_cache_seconds=_get_float("INDEX_CACHE_SECONDS", 60.0),
            allowed_origins=_get_csv("ALLOWED_ORIGINS", "*"),
            contact_webhook_url=(os.getenv("CONTACT_WEBHOOK_URL") or "").strip(),
            contact_inbox=(os.getenv("CONTACT_INBOX") or "").strip(),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper() or "INFO",
            environment=(os.getenv("ENVIRONMENT") or os.getenv("ENV") or "stage").strip() or "stage",
        )
