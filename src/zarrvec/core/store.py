"""Opening read-only zarr stores for multivec tilesets."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from zarr.abc.store import Store
from zarr.storage import FsspecStore, LocalStore

logger = logging.getLogger(__name__)


def _is_remote(url: str) -> bool:
    return "://" in url and not url.startswith("file://")


def open_store(
    url: str | Path | Store, storage_options: dict[str, Any] | None = None
) -> Store:
    """Open the store a multivec tileset lives in.

    Remote URLs (``http://``, ``s3://``, ...) go through fsspec; anything
    else is treated as a local ``.zarr`` directory. Store instances are
    returned unchanged.

    Raises:
        ValueError: If a URL or path does not name a ``.zarr`` store.
    """
    if isinstance(url, Store):
        return url

    location = str(url).rstrip("/")
    if not location.endswith(".zarr"):
        raise ValueError(f"Expected a .zarr store, got {location!r}")

    if _is_remote(location):
        logger.debug("Opening remote store %s", location)
        return FsspecStore.from_url(
            location, storage_options=storage_options or {}, read_only=True
        )

    path = Path(location.removeprefix("file://")).expanduser()
    logger.debug("Opening local store %s", path)
    return LocalStore(path, read_only=True)
