"""
Auto-detection of input format and quality offset.

Runs once per input before any record is processed, so the quality engine
always works on an already-resolved phred scale.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pysam

from ..errors import ConfigurationError, MalformedRecordError, ResourceError
from ..io.reader import open_text

logger = logging.getLogger(__name__)

# Lowest character seen in phred+64 data (Solexa scores start at ';')
PHRED64_MIN_CHAR = 59
DEFAULT_OFFSET = 33


@dataclass
class InputDetectionResult:
    """Result of format and quality offset detection."""
    path: Path
    fmt: str  # 'fasta' or 'fastq'
    quality_offset: Optional[int]  # None for FASTA
    reads_checked: int
    min_char: Optional[str] = None
    max_char: Optional[str] = None
    reason: str = ''

    @property
    def has_quality(self) -> bool:
        return self.fmt == 'fastq'

    def __str__(self) -> str:
        if not self.has_quality:
            return f"{self.path}: FASTA"
        return f"{self.path}: FASTQ, phred+{self.quality_offset} ({self.reason})"


def detect_format(path: Path) -> str:
    """
    Detect FASTA vs FASTQ from the first non-blank character.

    Raises:
        ConfigurationError: If the file is empty or neither format
    """
    with open_text(path) as f:
        for line in f:
            stripped = line.strip()
            if not stripped:
                continue
            if stripped.startswith('>'):
                return 'fasta'
            if stripped.startswith('@'):
                return 'fastq'
            raise ConfigurationError(f"{path}: not FASTA or FASTQ (starts with {stripped[:1]!r})")
    raise ConfigurationError(f"{path}: empty input, cannot detect format")


def detect_quality_offset(path: Path, n_reads: int = 1000) -> InputDetectionResult:
    """
    Guess the phred offset of a FASTQ file from its quality characters.

    Any character below ';' (59) can only come from phred+33 data; without
    one the data is taken as phred+64.

    Args:
        path: FASTQ path
        n_reads: Number of reads to sample

    Returns:
        InputDetectionResult with the detected offset
    """
    lowest = None
    highest = None
    reads_checked = 0

    try:
        with pysam.FastxFile(str(path)) as fx:
            for entry in fx:
                if reads_checked >= n_reads:
                    break
                reads_checked += 1
                if not entry.quality:
                    continue
                entry_min = min(entry.quality)
                entry_max = max(entry.quality)
                lowest = entry_min if lowest is None else min(lowest, entry_min)
                highest = entry_max if highest is None else max(highest, entry_max)
    except OSError as e:
        raise ResourceError(Path(path), e) from e
    except ValueError as e:
        raise MalformedRecordError(f"cannot sample qualities: {e}", Path(path)) from e

    if lowest is None:
        logger.warning(f"{path}: no quality characters sampled, assuming phred+{DEFAULT_OFFSET}")
        return InputDetectionResult(
            path=Path(path),
            fmt='fastq',
            quality_offset=DEFAULT_OFFSET,
            reads_checked=reads_checked,
            reason='no qualities sampled',
        )

    if ord(lowest) < PHRED64_MIN_CHAR:
        offset = 33
        reason = f"lowest character {lowest!r} is below {chr(PHRED64_MIN_CHAR)!r}"
    else:
        offset = 64
        reason = f"lowest character {lowest!r} over {reads_checked} reads"

    return InputDetectionResult(
        path=Path(path),
        fmt='fastq',
        quality_offset=offset,
        reads_checked=reads_checked,
        min_char=lowest,
        max_char=highest,
        reason=reason,
    )


def detect_input(path: Path, n_reads: int = 1000) -> InputDetectionResult:
    """Detect format and, for FASTQ, the quality offset of one input."""
    fmt = detect_format(path)
    if fmt == 'fasta':
        return InputDetectionResult(path=Path(path), fmt='fasta', quality_offset=None, reads_checked=0)
    return detect_quality_offset(path, n_reads)
