"""Tile fetcher for multivec tilesets stored as zarr."""

from __future__ import annotations

import asyncio
import base64
import logging
import uuid
from typing import Any, Callable, Iterable

from zarr.abc.store import Store

from zarrvec.config import TILE_TIMEOUT_SECONDS
from zarrvec.core.assembler import assemble_tile
from zarrvec.core.errors import CoordinateOutOfRangeError, MetadataError, TileTimeoutError, ZarrVecError
from zarrvec.core.fetcher import ChunkFetcher
from zarrvec.core.metadata import MetadataResolver, TilesetInfo
from zarrvec.core.planner import plan_chunks
from zarrvec.core.store import open_store
from zarrvec.core.types import ChunkDescriptor, Tile, TileError, TileId, parse_tile_id

logger = logging.getLogger(__name__)

TileResult = Tile | TileError


def _slug() -> str:
    """Random URL-safe identifier (22 characters)."""
    return base64.urlsafe_b64encode(uuid.uuid4().bytes).decode("ascii").rstrip("=")


def plan_tile(
    info: TilesetInfo, zoom: int, column: int
) -> tuple[list[ChunkDescriptor], int]:
    """Plan the chunk reads for tile ``(zoom, column)``.

    A tile at ``zoom`` holds ``tile_size`` bins of ``resolutions[zoom]`` bases
    each. Its end is clamped to the genome length and mapped as the last base
    it covers, so a tile ending on a chromosome boundary stays on that
    chromosome.

    Returns:
        (descriptors, resolution)

    Raises:
        CoordinateOutOfRangeError: If the zoom level has no resolution or
            the column starts beyond the end of the genome.
    """
    if zoom < 0 or zoom >= len(info.resolutions):
        raise CoordinateOutOfRangeError(
            f"Zoom level {zoom} not available (tileset has {len(info.resolutions)})"
        )
    if column < 0:
        raise CoordinateOutOfRangeError(f"Invalid tile column {column}")

    resolution = info.resolutions[zoom]
    tile_width = info.tile_size * resolution
    genome = info.chromosomes

    start = info.min_pos[0] + column * tile_width
    end = min(start + tile_width, genome.total_length)
    if start >= end:
        raise CoordinateOutOfRangeError(
            f"Tile {zoom}.{column} starts at {start}, beyond genome length {genome.total_length}"
        )

    first = genome.to_genomic(start)
    last = genome.to_genomic(end - 1)
    descriptors = plan_chunks(
        info.chrom_sizes,
        first.chrom,
        first.position,
        last.chrom,
        last.position + 1,
        resolution,
        info.tile_size,
    )
    return descriptors, resolution


class ZarrMultivecDataFetcher:
    """Fetches multivec tiles from a zarr store.

    Tileset metadata is resolved once per fetcher and reused by every tile.
    Batches fan out one pipeline per tile; a failing tile yields a
    :class:`TileError` without affecting the rest of the batch.

    Args:
        data_config: ``{"type": "zarr-multivec", "url": ..., "storage_options": ...}``
        store: Open store to use instead of ``data_config["url"]``
        tile_timeout: Seconds before a tile is abandoned (0 = no timeout)
    """

    def __init__(
        self,
        data_config: dict[str, Any] | None = None,
        *,
        store: Store | None = None,
        tile_timeout: float | None = None,
    ) -> None:
        self.data_config = dict(data_config or {})
        self.track_uid = _slug()

        if store is None:
            url = self.data_config.get("url")
            if not url:
                raise ValueError("data_config must provide a 'url' or a store must be given")
            store = open_store(url, self.data_config.get("storage_options"))
        self.store = store

        self._resolver = MetadataResolver(store)
        self._chunks = ChunkFetcher(store)
        self._tile_timeout = TILE_TIMEOUT_SECONDS if tile_timeout is None else tile_timeout

    @property
    def resolver(self) -> MetadataResolver:
        return self._resolver

    async def tileset_info(
        self, callback: Callable[[dict], Any] | None = None
    ) -> dict:
        """Return the tileset info, or ``{"error": ...}`` if it cannot be read."""
        try:
            info = await self._resolver.resolve()
            result = info.to_dict()
        except MetadataError as e:
            logger.error("Error loading tileset info for %s: %s", self.track_uid, e)
            result = {"error": f"Error parsing zarr multivec: {e}"}

        if callback is not None:
            callback(result)
        return result

    async def tile(self, zoom: int, column: int, identifier: str | None = None) -> Tile:
        """Fetch and assemble one tile.

        Raises:
            MetadataError: If the tileset metadata cannot be resolved.
            CoordinateOutOfRangeError: If the tile lies outside the tileset.
            ChunkFetchError: If any chunk read fails.
        """
        info = await self._resolver.resolve()
        descriptors, resolution = plan_tile(info, zoom, column)
        chunks = await self._chunks.fetch_all(descriptors, resolution)
        return assemble_tile(
            chunks, info.shape, column, zoom, identifier or f"{zoom}.{column}"
        )

    async def fetch_tiles(
        self,
        tile_ids: Iterable[str],
        callback: Callable[[dict[str, TileResult]], Any] | None = None,
    ) -> dict[str, TileResult]:
        """Fetch a batch of tiles keyed by identifier.

        Malformed identifiers are logged and left out of the result.
        """
        valid: list[TileId] = []
        for identifier in dict.fromkeys(tile_ids):
            tile_id = parse_tile_id(identifier)
            if tile_id is None:
                logger.warning("Invalid tile zoom or position: %r", identifier)
                continue
            valid.append(tile_id)

        results = await asyncio.gather(*(self._isolated_tile(t) for t in valid))
        tiles = {tile_id.identifier: result for tile_id, result in zip(valid, results)}

        if callback is not None:
            callback(tiles)
        return tiles

    async def _isolated_tile(self, tile_id: TileId) -> TileResult:
        identifier = tile_id.identifier
        try:
            if self._tile_timeout > 0:
                return await asyncio.wait_for(
                    self.tile(tile_id.zoom, tile_id.column, identifier),
                    self._tile_timeout,
                )
            return await self.tile(tile_id.zoom, tile_id.column, identifier)
        except asyncio.TimeoutError:
            error = TileTimeoutError(
                f"Tile {identifier} timed out after {self._tile_timeout:.1f}s"
            )
            logger.error("%s", error)
            return TileError.from_exception(identifier, error)
        except ZarrVecError as e:
            logger.error("Failed to fetch tile %s: %s", identifier, e)
            return TileError.from_exception(identifier, e)
        except Exception as e:
            logger.exception("Unexpected error fetching tile %s", identifier)
            return TileError.from_exception(identifier, e)

    def close(self) -> None:
        """Close the underlying store."""
        self.store.close()
