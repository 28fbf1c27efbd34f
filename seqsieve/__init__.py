"""
seqsieve - streaming FASTA/FASTQ filtering, quality trimming and masking.
"""

__version__ = "0.3.0"

from .config import (
    MaskConfig,
    MergeConfig,
    RunConfig,
    SplitConfig,
    TrimConfig,
    WindowTrimConfig,
)
from .core.models import DirectiveMode, Region, SequenceRecord, TransformDirective
from .errors import (
    ConfigurationError,
    MalformedRecordError,
    OutOfRangeDirective,
    ResourceError,
    RewriteEvaluationError,
    SeqSieveError,
)

__all__ = [
    "RunConfig",
    "TrimConfig",
    "WindowTrimConfig",
    "MaskConfig",
    "MergeConfig",
    "SplitConfig",
    "SequenceRecord",
    "Region",
    "TransformDirective",
    "DirectiveMode",
    "SeqSieveError",
    "ConfigurationError",
    "MalformedRecordError",
    "OutOfRangeDirective",
    "RewriteEvaluationError",
    "ResourceError",
    "__version__",
]
