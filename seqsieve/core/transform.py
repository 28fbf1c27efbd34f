"""
Coordinate transformation of records.

Resolves substring directives against a record and produces one fragment
per directive. Every directive works on the original record; fragments
never feed into each other.
"""

import logging
from typing import Dict, List, Optional, Tuple

from ..errors import ConfigurationError, OutOfRangeDirective
from ..utils.sequence import reverse_complement_pair
from .models import WILDCARD, DirectiveMode, SequenceRecord, TransformDirective

logger = logging.getLogger(__name__)

DEFAULT_FILL_QUALITY = 40

DirectiveTable = Dict[str, List[TransformDirective]]


def resolve_span(directive: TransformDirective, seq_length: int) -> Tuple[int, int, bool]:
    """
    Resolve a directive to 0-based half-open coordinates.

    Args:
        directive: SPAN or SPLICE directive
        seq_length: Length of the target sequence

    Returns:
        Tuple of (start, end, reverse)

    Raises:
        OutOfRangeDirective: If the directive reaches outside the sequence.
            The exception carries the span clamped to [0, seq_length].
    """
    if directive.mode == DirectiveMode.SPAN:
        first, last = directive.start, directive.stop
        reverse = first > last
        if reverse:
            first, last = last, first
        start, end = first - 1, last
    else:
        start = directive.start
        if start < 0:
            start += seq_length
        if directive.stop is None:
            end = seq_length
        elif directive.stop < 0:
            end = seq_length + directive.stop
        else:
            end = start + directive.stop
        # A negative length that overshoots the offset leaves nothing
        end = max(end, start)
        reverse = False

    if start < 0 or end > seq_length or start > seq_length:
        clamped_start = min(max(start, 0), seq_length)
        clamped_end = min(max(end, clamped_start), seq_length)
        raise OutOfRangeDirective(
            f"Directive {directive.record_id}:{directive.start}:{directive.stop} "
            f"resolves to {start}-{end} outside sequence of length {seq_length}",
            clamped=(clamped_start, clamped_end, reverse),
        )

    return start, end, reverse


def apply_directive(
    record: SequenceRecord,
    directive: TransformDirective,
    fill_quality: int = DEFAULT_FILL_QUALITY,
) -> SequenceRecord:
    """Apply one directive to ``record`` and return the resulting fragment."""
    try:
        start, end, reverse = resolve_span(directive, len(record))
    except OutOfRangeDirective as e:
        logger.warning(f"{record.id}: {e}; clamping")
        start, end, reverse = e.clamped

    if directive.is_splice:
        return _splice(record, start, end, directive, fill_quality)

    fragment = record.slice(start, end)
    if reverse:
        fragment.sequence, fragment.quality = reverse_complement_pair(
            fragment.sequence, fragment.quality
        )
    return fragment


def _splice(
    record: SequenceRecord,
    start: int,
    end: int,
    directive: TransformDirective,
    fill_quality: int,
) -> SequenceRecord:
    """Delete [start, end) and insert the replacement at ``start``."""
    replacement = directive.replacement
    fragment = record.copy()
    fragment.sequence = record.sequence[:start] + replacement + record.sequence[end:]

    if record.quality is not None:
        inserted = directive.replacement_quality
        if inserted is None:
            inserted = [fill_quality] * len(replacement)
        elif len(inserted) != len(replacement):
            raise ConfigurationError(
                f"Replacement quality for {directive.record_id} has {len(inserted)} "
                f"scores for {len(replacement)} bases"
            )
        fragment.quality = record.quality[:start] + list(inserted) + record.quality[end:]

    return fragment


def directives_for(table: Optional[DirectiveTable], record_id: str) -> List[TransformDirective]:
    """Wildcard directives followed by the record's own directives."""
    if not table:
        return []
    return table.get(WILDCARD, []) + table.get(record_id, [])


def apply_directives(
    record: SequenceRecord,
    directives: List[TransformDirective],
    fill_quality: int = DEFAULT_FILL_QUALITY,
) -> List[SequenceRecord]:
    """
    Fan a record out into fragments.

    Args:
        record: Input record, left unmodified
        directives: Directives to apply, each to the original record
        fill_quality: Score given to inserted bases lacking a replacement quality

    Returns:
        One fragment per directive, or the record itself if there are none
    """
    if not directives:
        return [record]
    return [apply_directive(record, d, fill_quality) for d in directives]
