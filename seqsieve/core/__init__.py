"""
Quality region and coordinate transformation engine.
"""

from .merge import merge_regions
from .models import (
    WILDCARD,
    DirectiveMode,
    Region,
    SequenceRecord,
    TransformDirective,
    parse_mate,
)
from .regions import (
    RegionStrategy,
    complement_regions,
    find_lcs_regions,
    find_regions,
    find_window_regions,
    longest_region,
)
from .stats import StatTable
from .transform import (
    apply_directive,
    apply_directives,
    directives_for,
    resolve_span,
)

__all__ = [
    # Models
    'SequenceRecord',
    'Region',
    'TransformDirective',
    'DirectiveMode',
    'WILDCARD',
    'parse_mate',
    # Region finding
    'RegionStrategy',
    'find_regions',
    'find_lcs_regions',
    'find_window_regions',
    'longest_region',
    'complement_regions',
    # Merging
    'merge_regions',
    # Transforms
    'resolve_span',
    'apply_directive',
    'apply_directives',
    'directives_for',
    # Statistics
    'StatTable',
]
