"""Tests for the genome coordinate mapping."""

from __future__ import annotations

import pytest

from zarrvec.core.errors import CoordinateOutOfRangeError
from zarrvec.core.genome import ChromosomeMap, map_to_genomic
from zarrvec.core.types import GenomicPosition

CHROM_SIZES = [("chr1", 1000), ("chr2", 500), ("chrM", 17)]


class TestChromosomeMap:
    """Tests for ChromosomeMap."""

    def test_offsets_follow_input_order(self):
        genome = ChromosomeMap(CHROM_SIZES)
        assert genome.offset("chr1") == 0
        assert genome.offset("chr2") == 1000
        assert genome.offset("chrM") == 1500
        assert genome.total_length == 1517

    def test_every_position_maps_into_its_chromosome(self):
        """Each position lands in the chromosome whose interval contains it."""
        genome = ChromosomeMap(CHROM_SIZES)
        for position in range(genome.total_length):
            chrom, relative = genome.to_genomic(position)
            assert 0 <= relative < genome.length(chrom)
            assert relative == position - genome.offset(chrom)

    @pytest.mark.parametrize(
        "position,expected",
        [
            (0, GenomicPosition("chr1", 0)),
            (999, GenomicPosition("chr1", 999)),
            (1000, GenomicPosition("chr2", 0)),
            (1499, GenomicPosition("chr2", 499)),
            (1500, GenomicPosition("chrM", 0)),
            (1516, GenomicPosition("chrM", 16)),
        ],
    )
    def test_chromosome_boundaries(self, position, expected):
        assert map_to_genomic(CHROM_SIZES, position) == expected

    @pytest.mark.parametrize("position", [-1, 1517, 10_000])
    def test_out_of_range(self, position):
        with pytest.raises(CoordinateOutOfRangeError):
            map_to_genomic(CHROM_SIZES, position)

    def test_out_of_range_is_value_error(self):
        with pytest.raises(ValueError):
            ChromosomeMap(CHROM_SIZES).to_genomic(-5)

    def test_to_absolute_inverts_to_genomic(self):
        genome = ChromosomeMap(CHROM_SIZES)
        for position in (0, 999, 1000, 1234, 1516):
            chrom, relative = genome.to_genomic(position)
            assert genome.to_absolute(chrom, relative) == position

    def test_to_absolute_accepts_chromosome_end(self):
        genome = ChromosomeMap(CHROM_SIZES)
        assert genome.to_absolute("chr1", 1000) == 1000

    def test_to_absolute_rejects_positions_past_end(self):
        with pytest.raises(CoordinateOutOfRangeError):
            ChromosomeMap(CHROM_SIZES).to_absolute("chr2", 501)

    def test_unknown_chromosome(self):
        with pytest.raises(ValueError, match="chrX"):
            ChromosomeMap(CHROM_SIZES).offset("chrX")

    def test_duplicate_names_rejected(self):
        with pytest.raises(ValueError):
            ChromosomeMap([("chr1", 10), ("chr1", 20)])

    def test_empty_genome_has_no_positions(self):
        genome = ChromosomeMap([])
        assert genome.total_length == 0
        with pytest.raises(CoordinateOutOfRangeError):
            genome.to_genomic(0)
