"""Tileset metadata for zarr multivec stores."""

from __future__ import annotations

import asyncio
import json
import logging
import math
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any

from zarr.abc.store import Store
from zarr.core.buffer import default_buffer_prototype

from zarrvec.config import METADATA_KEY
from zarrvec.core.errors import MetadataFetchError, MetadataParseError
from zarrvec.core.genome import ChromosomeMap

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("tile_size", "max_pos", "resolutions", "chromSizes", "shape")
_KNOWN_FIELDS = frozenset(_REQUIRED_FIELDS) | {"min_pos", "max_zoom", "max_width"}


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MetadataParseError(f"{name} must be numeric, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise MetadataParseError(f"{name} must be an integer, got {value!r}")
    return int(value)


def _as_sequence(value: Any, name: str) -> list:
    if not isinstance(value, (list, tuple)) or not value:
        raise MetadataParseError(f"{name} must be a non-empty list, got {value!r}")
    return list(value)


def _parse_chrom_sizes(value: Any) -> list[tuple[str, int]]:
    chrom_sizes = []
    for entry in _as_sequence(value, "chromSizes"):
        if not isinstance(entry, (list, tuple)) or len(entry) != 2:
            raise MetadataParseError(f"chromSizes entry must be [name, length], got {entry!r}")
        name, length = entry
        if not isinstance(name, str) or not name:
            raise MetadataParseError(f"Invalid chromosome name: {name!r}")
        length = _as_int(length, f"length of {name}")
        if length <= 0:
            raise MetadataParseError(f"Chromosome {name} has non-positive length {length}")
        chrom_sizes.append((name, length))

    names = [name for name, _ in chrom_sizes]
    if len(set(names)) != len(names):
        raise MetadataParseError("chromSizes contains duplicate chromosome names")
    return chrom_sizes


@dataclass(frozen=True)
class TilesetInfo:
    """Shape and resolution information for a multivec tileset.

    Attributes:
        chrom_sizes: Ordered (name, length) pairs; order defines the linear genome
        tile_size: Bins per tile
        resolutions: Bin size per zoom level (index = zoom), coarsest first
        shape: (num_samples, num_columns) of the signal matrix
        min_pos: Genome start of the tileset (first element used)
        max_pos: Genome end of the tileset (first element = total length)
        max_zoom: Deepest zoom level
        max_width: Genomic width of the zoom-0 tile
        extra: Any other attributes from the metadata document
    """

    chrom_sizes: list[tuple[str, int]]
    tile_size: int
    resolutions: list[int]
    shape: tuple[int, int]
    min_pos: list[int]
    max_pos: list[int]
    max_zoom: int
    max_width: int
    extra: dict[str, Any] = field(default_factory=dict)

    @cached_property
    def chromosomes(self) -> ChromosomeMap:
        return ChromosomeMap(self.chrom_sizes)

    @property
    def num_samples(self) -> int:
        return self.shape[0]

    @property
    def total_length(self) -> int:
        return self.max_pos[0]

    @classmethod
    def from_attrs(cls, attrs: Any) -> TilesetInfo:
        """Validate a decoded metadata document.

        Raises:
            MetadataParseError: On missing or malformed fields.
        """
        if not isinstance(attrs, dict):
            raise MetadataParseError(f"Metadata must be an object, got {type(attrs).__name__}")
        missing = [name for name in _REQUIRED_FIELDS if name not in attrs]
        if missing:
            raise MetadataParseError(f"Metadata is missing required field(s): {', '.join(missing)}")

        tile_size = _as_int(attrs["tile_size"], "tile_size")
        if tile_size <= 0:
            raise MetadataParseError(f"tile_size must be positive, got {tile_size}")

        max_pos = [_as_int(v, "max_pos") for v in _as_sequence(attrs["max_pos"], "max_pos")]
        if max_pos[0] <= 0:
            raise MetadataParseError(f"max_pos[0] must be positive, got {max_pos[0]}")
        min_pos = [_as_int(v, "min_pos") for v in _as_sequence(attrs.get("min_pos", [0]), "min_pos")]

        resolutions = [
            _as_int(v, "resolutions") for v in _as_sequence(attrs["resolutions"], "resolutions")
        ]
        if any(r <= 0 for r in resolutions):
            raise MetadataParseError(f"resolutions must be positive, got {resolutions}")
        resolutions = sorted(set(resolutions), reverse=True)

        shape = _as_sequence(attrs["shape"], "shape")
        if len(shape) < 2:
            raise MetadataParseError(f"shape must have two dimensions, got {shape!r}")
        num_samples = _as_int(shape[0], "shape[0]")
        num_columns = _as_int(shape[1], "shape[1]")
        if num_samples <= 0:
            raise MetadataParseError(f"shape[0] must be positive, got {num_samples}")

        chrom_sizes = _parse_chrom_sizes(attrs["chromSizes"])

        if "max_zoom" in attrs:
            max_zoom = _as_int(attrs["max_zoom"], "max_zoom")
        else:
            max_zoom = max(0, math.ceil(math.log2(max_pos[0] / tile_size)))
        if "max_width" in attrs:
            max_width = _as_int(attrs["max_width"], "max_width")
        else:
            max_width = tile_size * 2**max_zoom

        return cls(
            chrom_sizes=chrom_sizes,
            tile_size=tile_size,
            resolutions=resolutions,
            shape=(num_samples, num_columns),
            min_pos=min_pos,
            max_pos=max_pos,
            max_zoom=max_zoom,
            max_width=max_width,
            extra={k: v for k, v in attrs.items() if k not in _KNOWN_FIELDS},
        )

    @classmethod
    def from_bytes(cls, raw: bytes) -> TilesetInfo:
        """Decode a UTF-8 JSON metadata document."""
        try:
            attrs = json.loads(raw.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise MetadataParseError(f"Metadata is not valid UTF-8: {e}") from e
        except json.JSONDecodeError as e:
            raise MetadataParseError(f"Invalid JSON in metadata: {e}") from e
        return cls.from_attrs(attrs)

    def to_dict(self) -> dict:
        return {
            **self.extra,
            "tile_size": self.tile_size,
            "min_pos": list(self.min_pos),
            "max_pos": list(self.max_pos),
            "max_zoom": self.max_zoom,
            "max_width": self.max_width,
            "resolutions": list(self.resolutions),
            "chromSizes": [[name, length] for name, length in self.chrom_sizes],
            "shape": list(self.shape),
        }


class MetadataResolver:
    """Fetches the tileset metadata once and shares it.

    Concurrent callers of :meth:`resolve` during the first fetch wait on the
    same read. Failures are not cached; :meth:`reset` drops a cached value.

    Args:
        store: Store holding the multivec hierarchy
        key: Key of the metadata document
    """

    def __init__(self, store: Store, key: str = METADATA_KEY) -> None:
        self._store = store
        self._key = key
        self._info: TilesetInfo | None = None
        self._pending: asyncio.Future[TilesetInfo] | None = None

    @property
    def cached(self) -> TilesetInfo | None:
        return self._info

    def reset(self) -> None:
        """Forget the cached metadata; the next resolve() reads the store again."""
        self._info = None
        self._pending = None

    async def resolve(self) -> TilesetInfo:
        """Return the tileset metadata, reading the store on first use.

        Raises:
            MetadataFetchError: The store is unreachable or has no metadata.
            MetadataParseError: The metadata document is invalid.
        """
        if self._info is not None:
            return self._info

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._load())
            self._pending.add_done_callback(self._discard_failed)
        pending = self._pending
        try:
            info = await asyncio.shield(pending)
        except Exception:
            if self._pending is pending:
                self._pending = None
            raise

        if self._pending is pending:
            self._info = info
            self._pending = None
        return info

    def _discard_failed(self, future: asyncio.Future[TilesetInfo]) -> None:
        # Dropped here too, since every waiter may already have been cancelled
        if self._pending is future and (future.cancelled() or future.exception() is not None):
            self._pending = None

    async def _load(self) -> TilesetInfo:
        try:
            buffer = await self._store.get(self._key, prototype=default_buffer_prototype())
        except Exception as e:
            # fsspec backends raise their own exception types
            raise MetadataFetchError(f"Could not read {self._key} from {self._store}: {e}") from e

        if buffer is None:
            raise MetadataFetchError(f"No metadata at {self._key} in {self._store}")
        raw = buffer.to_bytes()
        if not raw:
            raise MetadataFetchError(f"Empty metadata at {self._key} in {self._store}")

        info = TilesetInfo.from_bytes(raw)
        logger.info(
            "Resolved tileset: %d chromosome(s), %d sample(s), max_zoom=%d",
            len(info.chrom_sizes), info.num_samples, info.max_zoom,
        )
        return info
