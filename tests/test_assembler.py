"""Tests for tile assembly and extrema."""

from __future__ import annotations

import numpy as np
import pytest

from zarrvec.core.assembler import assemble_tile, compute_extrema
from zarrvec.core.types import ChunkDescriptor, RawChunk


def _chunk(chrom: str, data: list[list[float]]) -> RawChunk:
    array = np.array(data, dtype=np.float32)
    return RawChunk(ChunkDescriptor(chrom, 0, array.shape[1]), array)


class TestAssembleTile:
    """Tests for assemble_tile."""

    def test_sample_major_concatenation(self):
        """Each sample's row is chr1 bins followed by chr2 bins."""
        chunks = [
            _chunk("chr1", [[1, 2], [10, 20]]),
            _chunk("chr2", [[3, 4, 5], [30, 40, 50]]),
        ]
        tile = assemble_tile(chunks, (2, 256), column=4, zoom_level=2, identifier="2.4")

        assert tile.shape == (2, 5)
        assert tile.dense.dtype == np.float32
        np.testing.assert_array_equal(tile.dense, [1, 2, 3, 4, 5, 10, 20, 30, 40, 50])
        assert tile.column == 4
        assert tile.zoom_level == 2
        assert tile.tile_position_id == "2.4"

    def test_buffer_length_is_samples_times_total_width(self):
        chunks = [_chunk("a", [[1], [2], [3]]), _chunk("b", [[0, 0], [0, 0], [0, 0]])]
        tile = assemble_tile(chunks, (3, 4), 0, 0, "0.0")
        assert tile.dense.size == 3 * 3

    def test_extrema_cover_whole_tile(self):
        """Extrema span all chunks, not just one."""
        chunks = [_chunk("chr1", [[0, 2]]), _chunk("chr2", [[9, 0.5]])]
        tile = assemble_tile(chunks, (1, 4), 0, 0, "0.0")

        assert tile.extrema.min_value == 0.0
        assert tile.extrema.max_value == 9.0
        assert tile.extrema.min_non_zero == 0.5
        assert tile.extrema.max_non_zero == 9.0
        assert all(tile.extrema.min_value <= v <= tile.extrema.max_value for v in tile.dense)

    def test_empty_chunks(self):
        chunks = [RawChunk(ChunkDescriptor("chr1", 5, 5), np.zeros((2, 0), dtype=np.float32))]
        tile = assemble_tile(chunks, (2, 4), 0, 0, "0.0")
        assert tile.shape == (2, 0)
        assert tile.extrema.min_value is None

    def test_sample_count_mismatch(self):
        with pytest.raises(ValueError, match="samples"):
            assemble_tile([_chunk("chr1", [[1, 2]])], (2, 4), 0, 0, "0.0")


class TestComputeExtrema:
    """Tests for compute_extrema."""

    def test_non_zero_ignores_zeros(self):
        extrema = compute_extrema(np.array([0, 0, 3, 7, 0], dtype=np.float32))
        assert extrema.min_value == 0.0
        assert extrema.max_value == 7.0
        assert extrema.min_non_zero == 3.0
        assert extrema.max_non_zero == 7.0

    def test_all_zero_has_no_non_zero_extrema(self):
        extrema = compute_extrema(np.zeros(8, dtype=np.float32))
        assert extrema.min_value == 0.0
        assert extrema.max_value == 0.0
        assert extrema.min_non_zero is None
        assert extrema.max_non_zero is None

    def test_negative_values_not_counted_as_non_zero(self):
        extrema = compute_extrema(np.array([-4, -1, 2], dtype=np.float32))
        assert extrema.min_value == -4.0
        assert extrema.min_non_zero == 2.0

    def test_nan_ignored(self):
        extrema = compute_extrema(np.array([np.nan, 1, 5], dtype=np.float32))
        assert extrema.min_value == 1.0
        assert extrema.max_value == 5.0

    def test_all_nan(self):
        extrema = compute_extrema(np.full(3, np.nan, dtype=np.float32))
        assert extrema.min_value is None
        assert extrema.max_non_zero is None
