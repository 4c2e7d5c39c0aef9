"""Path helpers for cache and upload locations."""

import tempfile
from pathlib import Path


def temp_dir() -> Path:
    """Return the system temporary directory as a Path."""
    return Path(tempfile.gettempdir())


def app_cache_dir(name: str = "quickpay_dashboard") -> Path:
    """Return (and create) a per-application directory under the temp dir."""
    path = temp_dir() / name
    path.mkdir(parents=True, exist_ok=True)
    return path
