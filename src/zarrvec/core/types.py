"""Shared type definitions for zarrvec core module."""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np


class TileId(NamedTuple):
    """A parsed tile identifier.

    Attributes:
        zoom: Zoom level (0 = whole genome in one tile)
        column: Tile column at that zoom level (0-based)
        identifier: The identifier string as received
    """

    zoom: int
    column: int
    identifier: str


def parse_tile_id(identifier: str) -> TileId | None:
    """Parse ``"zoom.column[.extra]"`` into a :class:`TileId`.

    Segments after the column are ignored. Returns None when zoom or column
    is not a non-negative integer written in ASCII digits.
    """
    parts = identifier.split(".")
    if len(parts) < 2:
        return None
    zoom_str, column_str = parts[0], parts[1]
    if not all(s.isascii() and s.isdigit() for s in (zoom_str, column_str)):
        return None
    return TileId(int(zoom_str), int(column_str), identifier)


class GenomicPosition(NamedTuple):
    """A chromosome-relative position."""

    chrom: str
    position: int


class ChunkDescriptor(NamedTuple):
    """Half-open bin range ``[bin_start, bin_end)`` within one chromosome."""

    chrom: str
    bin_start: int
    bin_end: int

    @property
    def width(self) -> int:
        return self.bin_end - self.bin_start


@dataclass
class RawChunk:
    """Data read for one chunk descriptor.

    Attributes:
        descriptor: The planned bin range
        data: Array of shape (num_samples, width)
    """

    descriptor: ChunkDescriptor
    data: np.ndarray

    @property
    def width(self) -> int:
        return int(self.data.shape[1])


@dataclass(frozen=True)
class Extrema:
    """Value range of an assembled tile, used for color-scale normalization.

    The non-zero fields only consider strictly positive values and are None
    when the tile has none.
    """

    min_value: float | None
    max_value: float | None
    min_non_zero: float | None
    max_non_zero: float | None


@dataclass
class Tile:
    """One assembled multivec tile.

    Attributes:
        dense: Flat float32 buffer, sample-major (row i = sample i)
        shape: (num_samples, width)
        extrema: Value range over the whole buffer
        zoom_level: Zoom level of the tile
        column: Tile column index
        tile_position_id: Identifier the tile was requested with
    """

    dense: np.ndarray
    shape: tuple[int, int]
    extrema: Extrema
    zoom_level: int
    column: int
    tile_position_id: str

    def to_dict(self) -> dict:
        return {
            "dense": base64.b64encode(
                np.ascontiguousarray(self.dense, dtype="<f4").tobytes()
            ).decode("ascii"),
            "dtype": "float32",
            "shape": list(self.shape),
            "min_value": self.extrema.min_value,
            "max_value": self.extrema.max_value,
            "minNonZero": self.extrema.min_non_zero,
            "maxNonZero": self.extrema.max_non_zero,
            "zoomLevel": self.zoom_level,
            "tilePos": [self.column],
            "tilePositionId": self.tile_position_id,
        }


@dataclass(frozen=True)
class TileError:
    """Placeholder returned for a tile whose pipeline failed.

    Attributes:
        tile_position_id: Identifier the tile was requested with
        kind: Exception class name (e.g. ``ChunkFetchError``)
        message: Human-readable failure description
    """

    tile_position_id: str
    kind: str
    message: str

    @classmethod
    def from_exception(cls, tile_position_id: str, exc: BaseException) -> TileError:
        return cls(
            tile_position_id=tile_position_id,
            kind=type(exc).__name__,
            message=str(exc) or type(exc).__name__,
        )

    def to_dict(self) -> dict:
        return {
            "error": self.message,
            "kind": self.kind,
            "tilePositionId": self.tile_position_id,
        }
