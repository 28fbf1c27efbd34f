"""
Utility modules for seqsieve.
"""

from .sequence import (
    MASK_SYMBOL,
    convert_case,
    mask_positions,
    normalize_symbols,
    rev_comp,
    reverse_complement,
    reverse_complement_pair,
)

__all__ = [
    'reverse_complement',
    'rev_comp',
    'reverse_complement_pair',
    'normalize_symbols',
    'convert_case',
    'mask_positions',
    'MASK_SYMBOL',
]
