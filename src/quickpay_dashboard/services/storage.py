"""
Attachment storage for invoice files.

Uploads land under ``invoices/<invoice_id>-<epoch ms>.<ext>`` below the
storage root and are returned as ``{"path": ..., "url": ...}``.

Implementations:
- LocalAttachmentStorage: a directory on local disk (demo mode)
- VolumeAttachmentStorage: a Unity Catalog Volume via the Files API
"""

import asyncio
import io
import time
from abc import ABC, abstractmethod
from pathlib import Path

from quickpay_dashboard.errors import RemoteError
from quickpay_dashboard.lib import logs

LOG = logs.logger(__file__)


def attachment_path(filename: str, invoice_id: str, now_ms: int | None = None) -> str:
    """Return the relative storage path for an uploaded file."""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
    stamp = now_ms if now_ms is not None else time.time_ns() // 1_000_000
    return f"invoices/{invoice_id}-{stamp}.{ext}"


class AttachmentStorage(ABC):
    @abstractmethod
    async def upload(self, data: bytes, filename: str, invoice_id: str) -> dict[str, str]:
        """Store ``data`` and return its ``path`` and public ``url``."""


class LocalAttachmentStorage(AttachmentStorage):
    """Stores attachments in a local directory, refusing to overwrite."""

    def __init__(self, root: str | Path, url_prefix: str = "/attachments") -> None:
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")

    async def upload(self, data: bytes, filename: str, invoice_id: str) -> dict[str, str]:
        relative = attachment_path(filename, invoice_id)
        target = self.root / relative
        if target.exists():
            raise RemoteError("This record already exists", code="23505")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        LOG.info("Stored attachment %s (%d bytes)", target, len(data))
        return {"path": relative, "url": f"{self.url_prefix}/{relative}"}


class VolumeAttachmentStorage(AttachmentStorage):
    """
    Stores attachments in a Unity Catalog Volume.

    Args:
        volume_path: Volume root, e.g. ``/Volumes/main/quickpay/attachments``.
    """

    def __init__(self, volume_path: str) -> None:
        self.volume_path = volume_path.rstrip("/")

    def _upload_sync(self, full_path: str, data: bytes) -> None:
        from quickpay_dashboard.lib import clients

        clients.workspace_client().files.upload(
            full_path, io.BytesIO(data), overwrite=False
        )

    async def upload(self, data: bytes, filename: str, invoice_id: str) -> dict[str, str]:
        relative = attachment_path(filename, invoice_id)
        full_path = f"{self.volume_path}/{relative}"
        try:
            await asyncio.get_running_loop().run_in_executor(
                None, self._upload_sync, full_path, data
            )
        except Exception as exc:
            LOG.warning("Attachment upload failed: %s", full_path, exc_info=True)
            raise RemoteError.from_exception(exc) from exc
        LOG.info("Uploaded attachment %s (%d bytes)", full_path, len(data))
        return {
            "path": relative,
            "url": f"/api/2.0/fs/files{full_path}",
        }
