"""Assembly of fetched chunks into one dense tile."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from zarrvec.core.types import Extrema, RawChunk, Tile


def compute_extrema(values: np.ndarray) -> Extrema:
    """Compute min/max and the min/max of strictly positive values.

    NaNs are ignored. Fields are None when no value qualifies.
    """
    finite = values[~np.isnan(values)]
    if finite.size == 0:
        return Extrema(None, None, None, None)

    positive = finite[finite > 0]
    if positive.size == 0:
        min_non_zero = max_non_zero = None
    else:
        min_non_zero = float(positive.min())
        max_non_zero = float(positive.max())

    return Extrema(
        min_value=float(finite.min()),
        max_value=float(finite.max()),
        min_non_zero=min_non_zero,
        max_non_zero=max_non_zero,
    )


def assemble_tile(
    chunks: Sequence[RawChunk],
    shape: tuple[int, int],
    column: int,
    zoom_level: int,
    identifier: str,
) -> Tile:
    """Concatenate per-chromosome chunks into one sample-major tile.

    Chunks are placed side by side along the position axis in the given
    (planned) order, so each sample's row is one continuous genomic window.

    Args:
        chunks: Chunks in planned order
        shape: (num_samples, num_columns) of the tileset
        column: Tile column index
        zoom_level: Tile zoom level
        identifier: Identifier the tile was requested with

    Raises:
        ValueError: If a chunk's sample count differs from the tileset's.
    """
    num_samples = shape[0]
    for chunk in chunks:
        if chunk.data.shape[0] != num_samples:
            raise ValueError(
                f"Chunk {chunk.descriptor} has {chunk.data.shape[0]} samples, "
                f"expected {num_samples}"
            )

    width = sum(chunk.width for chunk in chunks)
    matrix = np.empty((num_samples, width), dtype=np.float32)
    offset = 0
    for chunk in chunks:
        matrix[:, offset:offset + chunk.width] = chunk.data
        offset += chunk.width

    dense = matrix.ravel()
    return Tile(
        dense=dense,
        shape=(num_samples, width),
        extrema=compute_extrema(dense),
        zoom_level=zoom_level,
        column=column,
        tile_position_id=identifier,
    )
