"""Exception hierarchy for zarrvec."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from zarrvec.core.types import ChunkDescriptor


class ZarrVecError(Exception):
    """Base class for all zarrvec errors."""


class MetadataError(ZarrVecError):
    """Tileset metadata could not be resolved."""


class MetadataFetchError(MetadataError):
    """The store is unreachable or holds no metadata document."""


class MetadataParseError(MetadataError):
    """The metadata document is malformed or incomplete."""


class CoordinateOutOfRangeError(ZarrVecError, ValueError):
    """A genomic position, zoom level or tile column lies outside the tileset."""


class TileFetchError(ZarrVecError):
    """Data for a tile could not be retrieved."""


class ChunkFetchError(TileFetchError):
    """Reading one chunk from the store failed.

    Attributes:
        descriptor: The chunk whose read failed.
    """

    def __init__(self, descriptor: ChunkDescriptor, message: str) -> None:
        super().__init__(message)
        self.descriptor = descriptor


class TileTimeoutError(TileFetchError):
    """A tile did not complete within the configured timeout."""
