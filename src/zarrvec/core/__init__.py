"""Core tile pipeline for zarr multivec tilesets."""

from .assembler import assemble_tile, compute_extrema
from .errors import (
    ChunkFetchError,
    CoordinateOutOfRangeError,
    MetadataError,
    MetadataFetchError,
    MetadataParseError,
    TileFetchError,
    TileTimeoutError,
    ZarrVecError,
)
from .fetcher import ChunkFetcher
from .genome import ChromosomeMap, map_to_genomic
from .metadata import MetadataResolver, TilesetInfo
from .planner import plan_chunks
from .store import open_store
from .types import ChunkDescriptor, Extrema, GenomicPosition, RawChunk, Tile, TileError, TileId, parse_tile_id

__all__ = [
    "assemble_tile",
    "compute_extrema",
    "ChunkFetchError",
    "CoordinateOutOfRangeError",
    "MetadataError",
    "MetadataFetchError",
    "MetadataParseError",
    "TileFetchError",
    "TileTimeoutError",
    "ZarrVecError",
    "ChunkFetcher",
    "ChromosomeMap",
    "map_to_genomic",
    "MetadataResolver",
    "TilesetInfo",
    "plan_chunks",
    "open_store",
    "ChunkDescriptor",
    "Extrema",
    "GenomicPosition",
    "RawChunk",
    "Tile",
    "TileError",
    "TileId",
    "parse_tile_id",
]
