"""
FASTA/FASTQ serialization.
"""

from typing import List, Optional, TextIO

from ..core.models import SequenceRecord
from ..errors import ConfigurationError

# Highest printable character usable as an encoded quality
_MAX_QUALITY_CHAR = 126


def encode_quality(quality: List[int], quality_offset: int = 33) -> str:
    """Encode phred scores, clamping them to the printable range."""
    top = _MAX_QUALITY_CHAR - quality_offset
    return ''.join(chr(min(max(q, 0), top) + quality_offset) for q in quality)


def wrap(sequence: str, line_width: int) -> List[str]:
    """Split a sequence into lines of ``line_width`` symbols (0 = one line)."""
    if line_width <= 0 or len(sequence) <= line_width:
        return [sequence]
    return [sequence[i:i + line_width] for i in range(0, len(sequence), line_width)]


def format_header(record: SequenceRecord) -> str:
    if record.description:
        return f"{record.id} {record.description}"
    return record.id


def format_record(
    record: SequenceRecord,
    fmt: str,
    quality_offset: int = 33,
    line_width: int = 60,
) -> str:
    """
    Serialize one record.

    Args:
        record: Record to write
        fmt: 'fasta' or 'fastq'
        quality_offset: Offset added to each phred score for FASTQ
        line_width: FASTA line width, 0 for unwrapped

    Returns:
        Text of the record including the trailing newline
    """
    header = format_header(record)
    if fmt == 'fasta':
        lines = [f">{header}"] + wrap(record.sequence, line_width)
        return '\n'.join(lines) + '\n'
    if fmt == 'fastq':
        if record.quality is None:
            raise ConfigurationError(f"Cannot write {record.id} as FASTQ: no quality scores")
        return f"@{header}\n{record.sequence}\n+\n{encode_quality(record.quality, quality_offset)}\n"
    raise ValueError(f"Unknown output format: {fmt}")


class RecordWriter:
    """Writes records in one format to an open text handle."""

    def __init__(
        self,
        handle: TextIO,
        fmt: str,
        quality_offset: int = 33,
        line_width: int = 60,
    ):
        self.handle = handle
        self.fmt = fmt
        self.quality_offset = quality_offset
        self.line_width = line_width
        self.records_written = 0

    def write(self, record: SequenceRecord, handle: Optional[TextIO] = None):
        """Write a record to ``handle``, or to the writer's own handle."""
        target = handle if handle is not None else self.handle
        target.write(format_record(record, self.fmt, self.quality_offset, self.line_width))
        self.records_written += 1
