"""
Statistics accumulators for raw and filtered records.
"""

from collections import Counter
from dataclasses import dataclass, field

from ..utils.sequence import IUPAC_SYMBOLS

OTHER_LABEL = 'other'


@dataclass
class StatTable:
    """
    Length histogram and base composition of the records seen so far.

    Attributes:
        lengths: Sequence length -> number of records
        bases: Upper-case symbol -> count; non-IUPAC symbols are grouped
            under 'other'
    """
    lengths: Counter = field(default_factory=Counter)
    bases: Counter = field(default_factory=Counter)

    def add(self, sequence: str):
        """Record one sequence."""
        self.lengths[len(sequence)] += 1
        for symbol, count in Counter(sequence.upper()).items():
            label = symbol if symbol in IUPAC_SYMBOLS else OTHER_LABEL
            self.bases[label] += count

    @property
    def n_records(self) -> int:
        return sum(self.lengths.values())

    @property
    def n_bases(self) -> int:
        return sum(length * count for length, count in self.lengths.items())

    def merge(self, other: 'StatTable') -> 'StatTable':
        """Fold ``other`` into this table in place and return self."""
        self.lengths.update(other.lengths)
        self.bases.update(other.bases)
        return self

    def __add__(self, other: 'StatTable') -> 'StatTable':
        return StatTable(
            lengths=self.lengths + other.lengths,
            bases=self.bases + other.bases,
        )
