"""
Application settings read from the environment.

All variables are optional; the defaults run the dashboard fully offline
against the bundled demo data.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from quickpay_dashboard.lib import paths

BACKENDS = ("demo", "live")
_TRUTHY = {"1", "true", "yes", "on"}


def _parse_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


def _parse_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc


@dataclass(frozen=True)
class Settings:
    backend: str = "demo"
    catalog_schema: str = "main.quickpay"
    attachment_volume: str = "/Volumes/main/quickpay/attachments"
    quickpay_username: str = "yourcompany"
    quickpay_host: str = "quickpay.to"
    persist_ui: bool = True
    cache_dir: str = ""
    app_port: int = 8000
    log_level: str = "INFO"
    app_title: str = "QuickPay"

    @property
    def is_live(self) -> bool:
        return self.backend == "live"

    @property
    def resolved_cache_dir(self) -> Path:
        if self.cache_dir:
            return Path(self.cache_dir)
        return paths.app_cache_dir()

    @classmethod
    def from_env(cls) -> "Settings":
        backend = os.getenv("QUICKPAY_BACKEND", "demo").strip().lower()
        if backend not in BACKENDS:
            raise ValueError(f"QUICKPAY_BACKEND must be one of: {', '.join(BACKENDS)}")

        catalog_schema = os.getenv("QUICKPAY_CATALOG_SCHEMA", "main.quickpay").strip()
        if backend == "live" and not catalog_schema:
            raise ValueError("QUICKPAY_CATALOG_SCHEMA is required when QUICKPAY_BACKEND=live")

        username = os.getenv("QUICKPAY_USERNAME", "yourcompany").strip()
        if not username:
            raise ValueError("QUICKPAY_USERNAME must not be empty")

        return cls(
            backend=backend,
            catalog_schema=catalog_schema,
            attachment_volume=os.getenv(
                "QUICKPAY_ATTACHMENT_VOLUME", "/Volumes/main/quickpay/attachments"
            ).strip(),
            quickpay_username=username,
            quickpay_host=os.getenv("QUICKPAY_QUICKPAY_HOST", "quickpay.to").strip(),
            persist_ui=_parse_bool(os.getenv("QUICKPAY_PERSIST_UI"), default=True),
            cache_dir=os.getenv("QUICKPAY_CACHE_DIR", "").strip(),
            app_port=_parse_int("DATABRICKS_APP_PORT", 8000),
            log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
            app_title=os.getenv("QUICKPAY_APP_TITLE", "QuickPay").strip() or "QuickPay",
        )
