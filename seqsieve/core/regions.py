"""
Quality region finding.

Two strategies locate the stretches of a quality string that qualify:

- LCS: maximal runs of positions whose individual score lies in [low, high]
- WINDOW: stretches whose non-overlapping windows have a mean of at least
  ``soft``, with every position at least ``hard``

Both return non-overlapping regions in ascending order.
"""

from enum import Enum
from typing import List, Optional, Sequence

from .models import Region


class RegionStrategy(Enum):
    """Region finding strategy."""
    LCS = 'lcs'
    WINDOW = 'window'


def round_half_up(total: int, count: int) -> int:
    """Integer mean of ``total / count`` rounded half-up (floor(x + 0.5))."""
    return (2 * total + count) // (2 * count)


def find_lcs_regions(
    quality: Sequence[int],
    low: int,
    high: int,
    min_length: int = 1,
) -> List[Region]:
    """
    Find maximal runs of positions whose score lies within [low, high].

    Args:
        quality: Phred scores
        low: Lowest qualifying score (inclusive)
        high: Highest qualifying score (inclusive)
        min_length: Runs shorter than this are discarded

    Returns:
        Regions in ascending offset order
    """
    min_length = max(1, min_length)
    regions = []
    run_start = None

    for i, score in enumerate(quality):
        if low <= score <= high:
            if run_start is None:
                run_start = i
        elif run_start is not None:
            if i - run_start >= min_length:
                regions.append(Region.from_bounds(run_start, i))
            run_start = None

    # A run reaching the last position includes it
    if run_start is not None and len(quality) - run_start >= min_length:
        regions.append(Region.from_bounds(run_start, len(quality)))

    return regions


def find_window_regions(
    quality: Sequence[int],
    soft: int,
    hard: int = 0,
    window: int = 10,
    min_length: int = 1,
) -> List[Region]:
    """
    Find stretches that pass a windowed mean threshold.

    Positions scoring below ``hard`` split the quality string; no region
    spans them. Inside each remaining segment, windows of ``window``
    positions are evaluated back to back from the start of a stretch and
    every window whose rounded mean reaches ``soft`` extends it. The first
    failing window closes the stretch at the end of the last passing
    window, and the search resumes at the next position after the failing
    window's start that scores at least ``soft`` on its own.

    Stretches lose leading and trailing positions below ``soft``, then any
    shorter than ``min_length`` are dropped.

    Args:
        quality: Phred scores
        soft: Minimum rounded window mean
        hard: Minimum score for every position in a region
        window: Window size in positions
        min_length: Minimum region length

    Returns:
        Regions in ascending offset order
    """
    if window < 1:
        raise ValueError(f"Window size must be positive, got {window}")

    regions = []
    n = len(quality)
    i = 0

    while i < n:
        if quality[i] < hard:
            i += 1
            continue
        segment_start = i
        while i < n and quality[i] >= hard:
            i += 1
        regions.extend(
            _window_stretches(quality, segment_start, i, soft, window, min_length)
        )

    return regions


def _window_stretches(
    quality: Sequence[int],
    start: int,
    end: int,
    soft: int,
    window: int,
    min_length: int,
) -> List[Region]:
    """Window scan of one segment that contains no position below ``hard``."""
    stretches = []
    pos = start

    while pos < end:
        stretch_start = pos
        stretch_end = pos

        while pos < end:
            window_end = min(pos + window, end)
            mean = round_half_up(sum(quality[pos:window_end]), window_end - pos)
            if mean < soft:
                break
            stretch_end = window_end
            pos = window_end

        region = _strip_low_edges(quality, stretch_start, stretch_end, soft)
        if region is not None and region.length >= max(1, min_length):
            stretches.append(region)

        if pos >= end:
            break

        # pos is the first position of the failing window
        pos += 1
        while pos < end and quality[pos] < soft:
            pos += 1

    return stretches


def _strip_low_edges(
    quality: Sequence[int],
    start: int,
    end: int,
    soft: int,
) -> Optional[Region]:
    while start < end and quality[start] < soft:
        start += 1
    while end > start and quality[end - 1] < soft:
        end -= 1
    if end <= start:
        return None
    return Region.from_bounds(start, end)


def find_regions(
    quality: Sequence[int],
    low: int,
    high: Optional[int] = None,
    min_length: int = 1,
    strategy: RegionStrategy = RegionStrategy.LCS,
    window: int = 10,
    hard: int = 0,
) -> List[Region]:
    """
    Find qualifying regions with the selected strategy.

    For LCS, ``low`` and ``high`` bound each position's score (``high``
    defaults to unbounded). For WINDOW, ``low`` is the soft window-mean
    threshold, ``hard`` the per-position floor and ``high`` is ignored.
    """
    if strategy == RegionStrategy.LCS:
        upper = high if high is not None else float('inf')
        return find_lcs_regions(quality, low, upper, min_length)
    if strategy == RegionStrategy.WINDOW:
        return find_window_regions(quality, soft=low, hard=hard, window=window, min_length=min_length)
    raise ValueError(f"Unknown region strategy: {strategy}")


def longest_region(regions: Sequence[Region]) -> Optional[Region]:
    """Return the longest region, the leftmost one on ties; None if empty."""
    if not regions:
        return None
    return max(regions, key=lambda r: r.length)


def complement_regions(regions: Sequence[Region], seq_length: int) -> List[Region]:
    """Return the gaps between sorted non-overlapping regions over [0, seq_length)."""
    gaps = []
    cursor = 0
    for region in regions:
        if region.offset > cursor:
            gaps.append(Region.from_bounds(cursor, region.offset))
        cursor = max(cursor, region.end)
    if cursor < seq_length:
        gaps.append(Region.from_bounds(cursor, seq_length))
    return gaps
