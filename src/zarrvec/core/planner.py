"""Split a tile's genomic range into per-chromosome bin ranges.

Storage is partitioned by chromosome while tiles are laid out along the
linear genome, so a tile may straddle any number of chromosome boundaries.
Each chromosome the tile touches contributes one :class:`ChunkDescriptor`;
together they never hold more than ``bin_capacity`` bins.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

from zarrvec.config import BIN_CAPACITY
from zarrvec.core.types import ChunkDescriptor

logger = logging.getLogger(__name__)


def _bin_range(start: int, end: int, bin_size: int, capacity: int) -> tuple[int, int]:
    """Bins covering genomic ``[start, end)``, truncated to ``capacity`` bins."""
    bin_start = start // bin_size
    bin_end = min(bin_start + capacity, math.ceil(end / bin_size))
    return bin_start, max(bin_start, bin_end)


def plan_chunks(
    chrom_sizes: Sequence[tuple[str, int]],
    chrom_start: str,
    pos_start: int,
    chrom_end: str,
    pos_end: int,
    bin_size: int,
    bin_capacity: int = BIN_CAPACITY,
) -> list[ChunkDescriptor]:
    """Plan the chunk reads for one tile.

    Args:
        chrom_sizes: Ordered ``(name, length)`` pairs defining the genome
        chrom_start: Chromosome containing the tile start
        pos_start: Tile start relative to ``chrom_start``
        chrom_end: Chromosome containing the tile end
        pos_end: Tile end (exclusive) relative to ``chrom_end``
        bin_size: Genomic length of one bin at the tile's resolution
        bin_capacity: Maximum total bins for the tile

    Returns:
        Descriptors in genome order; always at least one.

    Raises:
        ValueError: For unknown chromosomes, an end chromosome before the
            start chromosome, or non-positive bin size / capacity.
    """
    if bin_size <= 0:
        raise ValueError(f"bin_size must be positive, got {bin_size}")
    if bin_capacity <= 0:
        raise ValueError(f"bin_capacity must be positive, got {bin_capacity}")

    names = [name for name, _length in chrom_sizes]
    try:
        first = names.index(chrom_start)
        last = names.index(chrom_end)
    except ValueError as e:
        raise ValueError(f"Unknown chromosome in tile range: {e}") from None
    if last < first:
        raise ValueError(
            f"Tile range ends on {chrom_end} before it starts on {chrom_start}"
        )

    if first == last:
        bin_start, bin_end = _bin_range(pos_start, pos_end, bin_size, bin_capacity)
        return [ChunkDescriptor(chrom_start, bin_start, bin_end)]

    descriptors: list[ChunkDescriptor] = []
    remaining = bin_capacity
    for i in range(first, last + 1):
        name, length = chrom_sizes[i]
        start = pos_start if i == first else 0
        end = pos_end if i == last else int(length)

        bin_start, bin_end = _bin_range(start, end, bin_size, remaining)
        descriptors.append(ChunkDescriptor(name, bin_start, bin_end))
        remaining -= bin_end - bin_start
        if remaining <= 0:
            break

    logger.debug(
        "Planned %d chunk(s) for %s:%d-%s:%d at bin size %d",
        len(descriptors), chrom_start, pos_start, chrom_end, pos_end, bin_size,
    )
    return descriptors
