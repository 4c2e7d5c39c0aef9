"""
Store factories.

The remote tables, auth provider and attachment storage are shared by the
whole process. Invoice stores hold one browser session's selection, modal,
filter and search state, so ``get_invoice_store`` keeps one per session key
(the Reflex client token), least recently used first out. Tests construct
``InvoiceStore`` and ``AuthStore`` directly with their own collaborators.
"""

from collections import OrderedDict
from functools import cache

from quickpay_dashboard.config import Settings
from quickpay_dashboard.lib import logs
from quickpay_dashboard.lib.caches import DiskCache, PreferenceCache
from quickpay_dashboard.services import (
    get_attachment_storage,
    get_auth_provider,
    get_remote_tables,
)
from quickpay_dashboard.services.auth import AuthProvider
from quickpay_dashboard.services.remote import RemoteTables
from quickpay_dashboard.services.storage import AttachmentStorage
from quickpay_dashboard.stores.auth_store import AuthStore
from quickpay_dashboard.stores.invoice_store import InvoiceStore
from quickpay_dashboard.stores.selectors import (
    compute_dashboard_stats,
    select_dashboard_stats,
    select_filtered_invoices,
)

LOG = logs.logger(__file__)

MAX_SESSION_STORES = 256

_invoice_stores: "OrderedDict[str, InvoiceStore]" = OrderedDict()


@cache
def get_settings() -> Settings:
    settings = Settings.from_env()
    logs.set_level(settings.log_level)
    return settings


@cache
def _auth_provider() -> AuthProvider:
    return get_auth_provider(get_settings())


@cache
def _remote_tables() -> RemoteTables:
    settings = get_settings()
    LOG.info("Building remote tables - backend:%s", settings.backend)
    return get_remote_tables(settings)


@cache
def _preference_cache() -> DiskCache:
    return DiskCache(get_settings().resolved_cache_dir / "preferences")


def _build_invoice_store(session_key: str) -> InvoiceStore:
    preferences = None
    if get_settings().persist_ui:
        preferences = PreferenceCache(
            _preference_cache(), namespace=f"ui-preferences:{session_key}"
        )
    return InvoiceStore(_remote_tables(), _auth_provider(), preferences=preferences)


def get_invoice_store(session_key: str) -> InvoiceStore:
    """
    Return the invoice store of one browser session, building it on first use.

    Args:
        session_key: Stable per-session id, normally the client token.
    """
    store = _invoice_stores.get(session_key)
    if store is not None:
        _invoice_stores.move_to_end(session_key)
        return store
    store = _build_invoice_store(session_key)
    _invoice_stores[session_key] = store
    while len(_invoice_stores) > MAX_SESSION_STORES:
        evicted, _ = _invoice_stores.popitem(last=False)
        LOG.info("Evicted invoice store of session %s", evicted)
    return store


def clear_invoice_stores() -> None:
    _invoice_stores.clear()


@cache
def get_auth_store() -> AuthStore:
    return AuthStore(_auth_provider())


@cache
def get_attachments() -> AttachmentStorage:
    return get_attachment_storage(get_settings())


__all__ = [
    "AuthStore",
    "InvoiceStore",
    "clear_invoice_stores",
    "compute_dashboard_stats",
    "get_attachments",
    "get_auth_store",
    "get_invoice_store",
    "get_settings",
    "select_dashboard_stats",
    "select_filtered_invoices",
]
