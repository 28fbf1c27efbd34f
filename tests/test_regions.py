"""Tests for seqsieve.core.regions module."""

import random

import pytest
from seqsieve.core.models import Region
from seqsieve.core.regions import (
    RegionStrategy,
    complement_regions,
    find_lcs_regions,
    find_regions,
    find_window_regions,
    longest_region,
    round_half_up,
)


def random_qualities(seed, n=120, top=41):
    rng = random.Random(seed)
    return [rng.randint(0, top) for _ in range(n)]


class TestLcsRegions:
    """Test longest-contiguous-run region finding."""

    def test_low_quality_runs(self):
        """Test finding runs inside a low score band."""
        quality = [2, 2, 2, 8, 8, 8, 8, 2, 2, 2]
        regions = find_lcs_regions(quality, low=0, high=5, min_length=2)
        assert regions == [Region(0, 3), Region(7, 3)]

    def test_high_quality_run(self):
        """Test finding the single high-quality run."""
        quality = [2, 2, 2, 8, 8, 8, 8, 2, 2, 2]
        assert find_lcs_regions(quality, low=6, high=40) == [Region(3, 4)]

    def test_short_runs_discarded(self):
        """Test that runs shorter than min_length are dropped."""
        quality = [30, 30, 5, 30, 30, 30]
        assert find_lcs_regions(quality, 20, 40, min_length=3) == [Region(3, 3)]

    def test_run_ending_at_last_index(self):
        """Test that a run reaching the end includes the last position."""
        regions = find_lcs_regions([5, 30, 30], 20, 40)
        assert regions == [Region(1, 2)]
        assert regions[0].end == 3

    def test_empty_quality(self):
        """Test empty input returns no regions."""
        assert find_lcs_regions([], 0, 40) == []

    def test_no_zero_length_regions(self):
        """Test min_length of 0 never yields empty regions."""
        regions = find_lcs_regions([1, 30, 1], 20, 40, min_length=0)
        assert regions == [Region(1, 1)]

    @pytest.mark.parametrize("seed", range(5))
    def test_regions_and_gaps_tile_the_sequence(self, seed):
        """Test regions plus gaps cover every index exactly once."""
        quality = random_qualities(seed)
        regions = find_lcs_regions(quality, 20, 40, min_length=3)
        pieces = sorted(regions + complement_regions(regions, len(quality)), key=lambda r: r.offset)

        cursor = 0
        for piece in pieces:
            assert piece.offset == cursor
            assert piece.length > 0
            cursor = piece.end
        assert cursor == len(quality)


class TestWindowRegions:
    """Test window-mean region finding."""

    def test_round_half_up(self):
        """Test the integer mean rounding rule."""
        assert round_half_up(39, 2) == 20  # 19.5
        assert round_half_up(38, 4) == 10  # 9.5
        assert round_half_up(37, 4) == 9   # 9.25
        assert round_half_up(30, 3) == 10

    def test_all_high_quality(self):
        """Test a uniformly good read is one region, partial last window included."""
        regions = find_window_regions([30] * 25, soft=20, hard=10, window=10)
        assert regions == [Region(0, 25)]

    def test_hard_threshold_splits(self):
        """Test a position below hard splits the read with no gap recorded."""
        quality = [30] * 10 + [5] + [30] * 10
        regions = find_window_regions(quality, soft=20, hard=10, window=10)
        assert regions == [Region(0, 10), Region(11, 10)]

    def test_failing_window_ends_stretch(self):
        """Test a failing window closes the stretch at the last passing window."""
        quality = [30] * 10 + [10] * 10 + [30] * 10
        regions = find_window_regions(quality, soft=20, hard=0, window=10)
        assert regions == [Region(0, 10), Region(20, 10)]

    def test_low_edges_stripped(self):
        """Test regions never start or end on a position below soft."""
        quality = [12, 30, 30, 30, 12]  # mean 22.8 passes as one window
        regions = find_window_regions(quality, soft=20, hard=0, window=5)
        assert regions == [Region(1, 3)]

    def test_min_length(self):
        """Test stretches shorter than min_length are dropped."""
        assert find_window_regions([30] * 5, soft=20, hard=0, window=10, min_length=6) == []

    def test_invalid_window(self):
        """Test a zero window is rejected."""
        with pytest.raises(ValueError):
            find_window_regions([30], soft=20, window=0)

    @pytest.mark.parametrize("seed", range(8))
    def test_boundaries_respect_thresholds(self, seed):
        """Test no region holds a position below hard or starts/ends below soft."""
        quality = random_qualities(seed, n=200)
        for hard in (0, 5):
            regions = find_window_regions(quality, soft=10, hard=hard, window=10, min_length=10)
            for region in regions:
                assert region.length >= 10
                assert min(quality[region.offset:region.end]) >= hard
                assert quality[region.offset] >= 10
                assert quality[region.end - 1] >= 10

    @pytest.mark.parametrize("seed", range(3))
    def test_deterministic(self, seed):
        """Test identical input gives identical regions."""
        quality = random_qualities(seed)
        first = find_window_regions(quality, soft=20, hard=5, window=7)
        second = find_window_regions(list(quality), soft=20, hard=5, window=7)
        assert first == second

    @pytest.mark.parametrize("seed", range(3))
    def test_regions_ordered_and_disjoint(self, seed):
        """Test regions come out sorted and non-overlapping."""
        quality = random_qualities(seed, n=300)
        regions = find_window_regions(quality, soft=20, hard=3, window=5)
        for left, right in zip(regions, regions[1:]):
            assert left.end <= right.offset


class TestFindRegions:
    """Test strategy dispatch and helpers."""

    def test_lcs_dispatch(self):
        """Test LCS strategy uses per-position bounds."""
        quality = [2, 2, 2, 8, 8, 8, 8, 2, 2, 2]
        assert find_regions(quality, 0, 5, 2, RegionStrategy.LCS) == [Region(0, 3), Region(7, 3)]

    def test_lcs_unbounded_high(self):
        """Test a missing high bound means no upper limit."""
        assert find_regions([50, 60, 1], 20) == [Region(0, 2)]

    def test_window_dispatch(self):
        """Test WINDOW strategy treats low as the soft threshold."""
        quality = [30] * 10 + [5] + [30] * 10
        regions = find_regions(quality, 20, strategy=RegionStrategy.WINDOW, window=10, hard=10)
        assert regions == [Region(0, 10), Region(11, 10)]

    def test_longest_region_prefers_leftmost(self):
        """Test ties in length resolve to the leftmost region."""
        regions = [Region(0, 3), Region(5, 4), Region(12, 4)]
        assert longest_region(regions) == Region(5, 4)
        assert longest_region([]) is None

    def test_complement(self):
        """Test gaps around regions."""
        assert complement_regions([Region(2, 3)], 10) == [Region(0, 2), Region(5, 5)]
        assert complement_regions([], 4) == [Region(0, 4)]
        assert complement_regions([Region(0, 4)], 4) == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
