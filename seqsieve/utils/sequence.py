"""
Sequence manipulation utilities.

Provides the symbol-level operations the pipeline applies to records:
reverse complementation, case conversion and symbol normalization.
"""

import re
from typing import List, Optional, Tuple

# IUPAC complement table, both cases; anything unknown complements to N
_COMPLEMENT = str.maketrans(
    'ACGTUNRYSWKMBDHVacgtunryswkmbdhv',
    'TGCAANYRSWMKVHDBtgcaanyrswmkvhdb',
)

IUPAC_SYMBOLS = frozenset('ACGTUNRYSWKMBDHV')
MASK_SYMBOL = 'N'

_NON_STANDARD = re.compile(r'[^ACGTNacgtn]')


def reverse_complement(seq: str) -> str:
    """Return reverse complement of a nucleotide sequence, preserving case."""
    return seq.translate(_COMPLEMENT)[::-1]


# Alias kept for callers that prefer the short name
rev_comp = reverse_complement


def reverse_complement_pair(
    seq: str,
    quality: Optional[List[int]],
) -> Tuple[str, Optional[List[int]]]:
    """Reverse-complement a sequence and reverse its quality alongside it."""
    rc = reverse_complement(seq)
    if quality is None:
        return rc, None
    return rc, list(reversed(quality))


def normalize_symbols(seq: str, replacement: str = MASK_SYMBOL) -> str:
    """Replace every symbol outside ACGTN (either case) with ``replacement``."""
    return _NON_STANDARD.sub(replacement, seq)


def convert_case(seq: str, case: Optional[str]) -> str:
    """Convert sequence case: 'upper', 'lower', or None to leave unchanged."""
    if case is None:
        return seq
    if case == 'upper':
        return seq.upper()
    if case == 'lower':
        return seq.lower()
    raise ValueError(f"Unknown case conversion: {case}")


def mask_positions(seq: str, spans: List[Tuple[int, int]], symbol: str = MASK_SYMBOL) -> str:
    """Replace each half-open [start, end) span of ``seq`` with ``symbol``."""
    if not spans:
        return seq
    chars = list(seq)
    for start, end in spans:
        for i in range(max(0, start), min(len(chars), end)):
            chars[i] = symbol
    return ''.join(chars)

