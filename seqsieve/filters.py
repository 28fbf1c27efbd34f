"""
Record selection predicates.

These are the thin identity and content checks that sit in front of the
quality engine: id allow/deny lists, mate numbers, id patterns, split
routing keys and length bounds.
"""

import re
from typing import List, Optional, Pattern, Set

from .core.models import SequenceRecord


def passes_identity(
    record: SequenceRecord,
    include_ids: Optional[Set[str]] = None,
    exclude_ids: Optional[Set[str]] = None,
    mate: Optional[int] = None,
) -> bool:
    """
    Check a record against id allow/deny lists and the mate filter.

    Args:
        record: Record to check
        include_ids: If given, only these ids pass
        exclude_ids: Ids that never pass
        mate: If given, only records with this mate number pass

    Returns:
        True if the record passes
    """
    if include_ids is not None and record.id not in include_ids:
        return False
    if exclude_ids and record.id in exclude_ids:
        return False
    if mate is not None and record.mate != mate:
        return False
    return True


def passes_patterns(
    record: SequenceRecord,
    patterns: List[Pattern],
    invert: bool = False,
) -> bool:
    """True if any pattern is found in the id (none found, when inverted)."""
    if not patterns:
        return True
    matched = any(p.search(record.id) for p in patterns)
    return matched != invert


def split_key(record_id: str, pattern: Pattern) -> Optional[str]:
    """
    Return the routing key for split output.

    The key is the first capture group of ``pattern`` searched in the id,
    or the whole match if the pattern has no groups. None if nothing
    matched or the group did not take part in the match.
    """
    match = pattern.search(record_id)
    if match is None:
        return None
    if pattern.groups:
        return match.group(1)
    return match.group(0)


def passes_length(length: int, min_length: Optional[int] = None, max_length: Optional[int] = None) -> bool:
    if min_length is not None and length < min_length:
        return False
    if max_length is not None and length > max_length:
        return False
    return True


def compile_patterns(patterns: List[str], ignore_case: bool = False) -> List[Pattern]:
    """Compile id patterns; raises re.error on an invalid one."""
    flags = re.IGNORECASE if ignore_case else 0
    return [re.compile(p, flags) for p in patterns]
