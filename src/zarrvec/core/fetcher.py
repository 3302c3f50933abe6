"""Concurrent chunk reads for one tile."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Sequence

import numpy as np
from zarr.abc.store import Store
from zarr.api.asynchronous import open_array

from zarrvec.config import CHUNK_PATH_TEMPLATE
from zarrvec.core.errors import ChunkFetchError
from zarrvec.core.types import ChunkDescriptor, RawChunk

logger = logging.getLogger(__name__)


def chunk_path(chrom: str, resolution: int) -> str:
    """Array path holding ``chrom`` at ``resolution``."""
    return CHUNK_PATH_TEMPLATE.format(chrom=chrom, resolution=resolution)


class ChunkFetcher:
    """Reads planned chunks from per-chromosome arrays.

    All reads of one call run concurrently. The call succeeds only if every
    read succeeds; the first failure cancels the rest.

    Args:
        store: Store holding the multivec hierarchy
    """

    def __init__(self, store: Store) -> None:
        self._store = store

    async def fetch_all(
        self, descriptors: Sequence[ChunkDescriptor], resolution: int
    ) -> list[RawChunk]:
        """Read every descriptor at ``resolution``.

        Returns:
            One RawChunk per descriptor, in descriptor order.

        Raises:
            ChunkFetchError: For the first read that fails.
        """
        start = time.perf_counter()
        tasks = [
            asyncio.ensure_future(self.fetch_one(descriptor, resolution))
            for descriptor in descriptors
        ]
        try:
            chunks = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

        logger.debug(
            "Fetched %d chunk(s) at resolution %d in %.1f ms",
            len(chunks), resolution, (time.perf_counter() - start) * 1000,
        )
        return list(chunks)

    async def fetch_one(self, descriptor: ChunkDescriptor, resolution: int) -> RawChunk:
        path = chunk_path(descriptor.chrom, resolution)
        try:
            array = await open_array(store=self._store, path=path)
            data = await array.getitem(
                (slice(None), slice(descriptor.bin_start, descriptor.bin_end))
            )
        except Exception as e:
            raise ChunkFetchError(
                descriptor,
                f"Failed to read {path}[:, {descriptor.bin_start}:{descriptor.bin_end}]: {e}",
            ) from e

        data = np.asarray(data)
        if data.ndim != 2:
            raise ChunkFetchError(
                descriptor, f"Expected a 2-D array at {path}, got shape {data.shape}"
            )
        return RawChunk(descriptor, data)
