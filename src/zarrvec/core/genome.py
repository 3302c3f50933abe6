"""Mapping between the linear genome coordinate system and chromosomes."""

from __future__ import annotations

import bisect
from itertools import accumulate
from typing import Sequence

from zarrvec.core.errors import CoordinateOutOfRangeError
from zarrvec.core.types import GenomicPosition


class ChromosomeMap:
    """Cumulative offset table over an ordered list of chromosomes.

    The order of ``chrom_sizes`` defines the linear coordinate system:
    chromosome ``i`` starts at the summed length of chromosomes ``0..i-1``.

    Args:
        chrom_sizes: Ordered ``(name, length)`` pairs with unique names
    """

    def __init__(self, chrom_sizes: Sequence[tuple[str, int]]) -> None:
        self._names = [name for name, _length in chrom_sizes]
        self._lengths = [int(length) for _name, length in chrom_sizes]
        self._offsets = [0, *accumulate(self._lengths)][:-1]
        self._index = {name: i for i, name in enumerate(self._names)}
        if len(self._index) != len(self._names):
            raise ValueError("Chromosome names must be unique")

    @property
    def names(self) -> list[str]:
        return list(self._names)

    @property
    def total_length(self) -> int:
        if not self._lengths:
            return 0
        return self._offsets[-1] + self._lengths[-1]

    def index(self, chrom: str) -> int:
        try:
            return self._index[chrom]
        except KeyError:
            raise ValueError(f"Unknown chromosome: {chrom!r}") from None

    def length(self, chrom: str) -> int:
        return self._lengths[self.index(chrom)]

    def offset(self, chrom: str) -> int:
        return self._offsets[self.index(chrom)]

    def to_genomic(self, position: int) -> GenomicPosition:
        """Convert an absolute position into (chromosome, relative position).

        Raises:
            CoordinateOutOfRangeError: If position is negative or not below
                the total genome length.
        """
        if position < 0 or position >= self.total_length:
            raise CoordinateOutOfRangeError(
                f"Position {position} outside genome [0, {self.total_length})"
            )
        # bisect_right skips zero-length chromosomes sharing an offset
        i = bisect.bisect_right(self._offsets, position) - 1
        return GenomicPosition(self._names[i], int(position - self._offsets[i]))

    def to_absolute(self, chrom: str, position: int) -> int:
        """Convert a chromosome-relative position back to an absolute one."""
        i = self.index(chrom)
        if position < 0 or position > self._lengths[i]:
            raise CoordinateOutOfRangeError(
                f"Position {position} outside {chrom} [0, {self._lengths[i]}]"
            )
        return self._offsets[i] + position


def map_to_genomic(
    chrom_sizes: Sequence[tuple[str, int]], position: int
) -> GenomicPosition:
    """Map an absolute genome position onto the chromosome containing it."""
    return ChromosomeMap(chrom_sizes).to_genomic(position)
