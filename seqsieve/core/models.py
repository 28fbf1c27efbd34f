"""
Data models for sequence records, regions and transform directives.
"""

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional

WILDCARD = '*'

# Mate suffix as written by Illumina/Picard style read names: READ/1, READ/2
_MATE_SUFFIX = re.compile(r'/([12])$')


def parse_mate(record_id: str) -> Optional[int]:
    """Return the mate number encoded as a /1 or /2 id suffix, or None."""
    match = _MATE_SUFFIX.search(record_id)
    return int(match.group(1)) if match else None


@dataclass
class SequenceRecord:
    """
    One sequence record as it moves through the pipeline.

    Attributes:
        id: Record identifier (first word of the header)
        description: Free text after the identifier, may be empty
        sequence: Nucleotide symbols, any case
        quality: Phred scores, one per symbol; None for FASTA input
        mate: Mate number from a /1 or /2 id suffix (quality records only)
    """
    id: str
    sequence: str
    description: str = ''
    quality: Optional[List[int]] = None
    mate: Optional[int] = None

    def __post_init__(self):
        if self.quality is not None and self.mate is None:
            self.mate = parse_mate(self.id)

    def __len__(self) -> int:
        return len(self.sequence)

    @property
    def has_quality(self) -> bool:
        return self.quality is not None

    def is_consistent(self) -> bool:
        """Check the quality/sequence length invariant."""
        return self.quality is None or len(self.quality) == len(self.sequence)

    def copy(self) -> 'SequenceRecord':
        """Return an independent copy (the quality list is not shared)."""
        quality = list(self.quality) if self.quality is not None else None
        return replace(self, quality=quality)

    def slice(self, start: int, end: int) -> 'SequenceRecord':
        """Return a copy restricted to the half-open range [start, end)."""
        quality = self.quality[start:end] if self.quality is not None else None
        return replace(self, sequence=self.sequence[start:end], quality=quality)

    def append_description(self, text: str):
        """Append an annotation to the description, space separated."""
        self.description = f"{self.description} {text}" if self.description else text


@dataclass(frozen=True)
class Region:
    """
    Half-open interval [offset, offset + length) over a sequence.

    ``reverse`` is only meaningful when the region comes from a transform
    directive; quality classification results leave it False.
    """
    offset: int
    length: int
    reverse: bool = False

    @property
    def end(self) -> int:
        return self.offset + self.length

    @classmethod
    def from_bounds(cls, start: int, end: int, reverse: bool = False) -> 'Region':
        return cls(offset=start, length=end - start, reverse=reverse)

    def __str__(self) -> str:
        return f"{self.offset}-{self.end}"


class DirectiveMode(Enum):
    """Which directive representation is active for a run."""
    SPAN = 'span'      # (from, to), 1-based inclusive, from > to means reverse strand
    SPLICE = 'splice'  # (offset, length, replacement, replacement quality)


@dataclass(frozen=True)
class TransformDirective:
    """
    One coordinate operation for a record id (or the ``*`` wildcard).

    SPAN directives use ``start``/``stop`` as 1-based inclusive coordinates.
    SPLICE directives use ``start`` as a 0-based offset (negative counts from
    the end), ``stop`` as the length (None for "to the end", negative to
    leave that many symbols off the end), and optionally a replacement.
    """
    record_id: str
    mode: DirectiveMode
    start: int
    stop: Optional[int] = None
    replacement: Optional[str] = None
    replacement_quality: Optional[List[int]] = field(default=None, compare=False, hash=False)

    @property
    def is_wildcard(self) -> bool:
        return self.record_id == WILDCARD

    @property
    def is_splice(self) -> bool:
        return self.mode == DirectiveMode.SPLICE and self.replacement is not None

    @classmethod
    def span(cls, record_id: str, first: int, last: int) -> 'TransformDirective':
        return cls(record_id=record_id, mode=DirectiveMode.SPAN, start=first, stop=last)

    @classmethod
    def splice(
        cls,
        record_id: str,
        offset: int,
        length: Optional[int] = None,
        replacement: Optional[str] = None,
        replacement_quality: Optional[List[int]] = None,
    ) -> 'TransformDirective':
        return cls(
            record_id=record_id,
            mode=DirectiveMode.SPLICE,
            start=offset,
            stop=length,
            replacement=replacement,
            replacement_quality=replacement_quality,
        )
