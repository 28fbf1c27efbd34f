"""
Region merging for quality masking.

Takes the regions to keep unmasked and reshapes them so that neither the
kept stretches nor the masked gaps between them are too short. Everything
outside the returned regions is masked by the caller.
"""

import logging
from typing import List, Sequence, Set, Tuple

from .models import Region

logger = logging.getLogger(__name__)

Bounds = Tuple[int, int]


def merge_regions(
    regions: Sequence[Region],
    seq_length: int,
    min_mask_len: int = 0,
    min_unmask_len: int = 0,
    edge_trim: int = 0,
    end_ratio: float = 0.5,
) -> List[Region]:
    """
    Adjust unmasked regions under length and edge-ratio constraints.

    Steps:
        1. Shrink every region by ``edge_trim`` at both ends, dropping those
           that vanish.
        2. Head gap shorter than ``min_unmask_len``: if it is also shorter
           than ``end_ratio * min_unmask_len`` the first region's start moves
           inward by the shortfall, otherwise the region is extended to 0.
        3. The tail gap gets the mirrored treatment.
        4. Gaps between neighbours shorter than ``min_unmask_len`` are widened
           by splitting the shortfall across both regions, the smaller half
           going to the earlier region.
        5. Regions left shorter than ``min_mask_len`` are removed, only the
           shortest of any adjacent flagged regions per pass, and the pass
           is repeated on the survivors.

    Args:
        regions: Unmasked regions, sorted and non-overlapping
        seq_length: Length of the sequence
        min_mask_len: Minimum length of a surviving region
        min_unmask_len: Minimum length of a gap between regions
        edge_trim: Positions removed from both ends of every region
        end_ratio: Fraction of ``min_unmask_len`` below which a short
            sequence-end gap is widened instead of absorbed

    Returns:
        Surviving unmasked regions in ascending order. An empty list means
        the whole sequence is masked.
    """
    current: List[Bounds] = []
    for region in regions:
        start = region.offset + edge_trim
        end = region.end - edge_trim
        if end > start:
            current.append((start, end))

    min_kept = max(1, min_mask_len)

    # Every pass either commits or removes at least one region
    for pass_number in range(len(current) + 1):
        if not current:
            break
        proposed = _propose_bounds(current, seq_length, min_unmask_len, end_ratio)
        flagged = [i for i, (start, end) in enumerate(proposed) if end - start < min_kept]
        if not flagged:
            current = proposed
            break
        removed = _select_removals(flagged, proposed)
        logger.debug(f"Merge pass {pass_number}: removing {len(removed)} of {len(current)} regions")
        current = [bounds for i, bounds in enumerate(current) if i not in removed]

    return [Region.from_bounds(start, end) for start, end in current]


def _propose_bounds(
    current: List[Bounds],
    seq_length: int,
    min_unmask_len: int,
    end_ratio: float,
) -> List[Bounds]:
    """Apply the head, tail and pair rules to every region at once."""
    starts = [start for start, _ in current]
    ends = [end for _, end in current]
    edge_limit = end_ratio * min_unmask_len

    head_gap = current[0][0]
    if 0 < head_gap < min_unmask_len:
        if head_gap < edge_limit:
            starts[0] += min_unmask_len - head_gap
        else:
            starts[0] = 0

    tail_gap = seq_length - current[-1][1]
    if 0 < tail_gap < min_unmask_len:
        if tail_gap < edge_limit:
            ends[-1] -= min_unmask_len - tail_gap
        else:
            ends[-1] = seq_length

    for i in range(len(current) - 1):
        gap = current[i + 1][0] - current[i][1]
        if gap < min_unmask_len:
            shortfall = min_unmask_len - gap
            ends[i] -= shortfall // 2
            starts[i + 1] += shortfall - shortfall // 2

    return list(zip(starts, ends))


def _select_removals(flagged: List[int], proposed: List[Bounds]) -> Set[int]:
    """
    Pick which flagged regions to remove this pass.

    Shortest first (leftmost on ties); a flagged region whose neighbour was
    already picked is kept for re-evaluation in the next pass.
    """
    removed: Set[int] = set()
    order = sorted(flagged, key=lambda i: (proposed[i][1] - proposed[i][0], i))
    for i in order:
        if i - 1 in removed or i + 1 in removed:
            continue
        removed.add(i)
    return removed
