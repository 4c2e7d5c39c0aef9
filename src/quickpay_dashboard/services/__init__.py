"""
Service factories for the QuickPay dashboard.

Returns the remote table, auth and attachment storage implementations for
a backend kind:

- demo: in-memory tables seeded from fixtures, mock auth, local files
- live: Databricks Delta tables, workspace identity, Unity Catalog Volume

Live implementations are imported lazily so demo mode runs without the
Databricks client libraries being configured.
"""

from typing import Callable, Dict

from quickpay_dashboard.config import Settings
from quickpay_dashboard.lib import logs
from quickpay_dashboard.services.auth import AuthProvider, DemoAuthProvider
from quickpay_dashboard.services.remote import RemoteTables
from quickpay_dashboard.services.remote_demo import DemoTables
from quickpay_dashboard.services.storage import (
    AttachmentStorage,
    LocalAttachmentStorage,
)

LOG = logs.logger(__file__)


def _live_tables(settings: Settings) -> RemoteTables:
    from quickpay_dashboard.services.remote_spark import SparkTables

    return SparkTables(settings.catalog_schema)


def _live_auth(settings: Settings) -> AuthProvider:
    from quickpay_dashboard.services.auth import WorkspaceAuthProvider

    return WorkspaceAuthProvider()


def _live_storage(settings: Settings) -> AttachmentStorage:
    from quickpay_dashboard.services.storage import VolumeAttachmentStorage

    return VolumeAttachmentStorage(settings.attachment_volume)


_TABLES_REGISTRY: Dict[str, Callable[[Settings], RemoteTables]] = {
    "demo": lambda settings: DemoTables(),
    "live": _live_tables,
}

_AUTH_REGISTRY: Dict[str, Callable[[Settings], AuthProvider]] = {
    "demo": lambda settings: DemoAuthProvider(),
    "live": _live_auth,
}

_STORAGE_REGISTRY: Dict[str, Callable[[Settings], AttachmentStorage]] = {
    "demo": lambda settings: LocalAttachmentStorage(
        settings.resolved_cache_dir / "attachments"
    ),
    "live": _live_storage,
}


def _lookup(registry: Dict[str, Callable], kind: str, what: str) -> Callable:
    try:
        return registry[kind]
    except KeyError as exc:
        raise ValueError(f"Unknown {what} kind: {kind}") from exc


def get_remote_tables(settings: Settings, kind: str | None = None) -> RemoteTables:
    """Return the remote table implementation for ``kind`` (default: settings.backend)."""
    resolved_kind = (kind or settings.backend).lower()
    LOG.info("get_remote_tables - kind:%s resolved_kind:%s", kind, resolved_kind)
    return _lookup(_TABLES_REGISTRY, resolved_kind, "remote tables")(settings)


def get_auth_provider(settings: Settings, kind: str | None = None) -> AuthProvider:
    resolved_kind = (kind or settings.backend).lower()
    return _lookup(_AUTH_REGISTRY, resolved_kind, "auth provider")(settings)


def get_attachment_storage(
    settings: Settings, kind: str | None = None
) -> AttachmentStorage:
    resolved_kind = (kind or settings.backend).lower()
    return _lookup(_STORAGE_REGISTRY, resolved_kind, "attachment storage")(settings)


__all__ = [
    "AttachmentStorage",
    "AuthProvider",
    "RemoteTables",
    "get_attachment_storage",
    "get_auth_provider",
    "get_remote_tables",
]
