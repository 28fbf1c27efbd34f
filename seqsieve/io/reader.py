"""
FASTA/FASTQ record source.

Records are parsed one at a time from plain or gzipped text so memory use
does not depend on file size.
"""

import gzip
import logging
from pathlib import Path
from typing import Iterator, Optional, TextIO, Tuple

from ..core.models import SequenceRecord
from ..errors import MalformedRecordError, ResourceError

logger = logging.getLogger(__name__)


def open_text(path: Path, mode: str = 'rt') -> TextIO:
    """Open a plain or gzipped text file, raising ResourceError on failure."""
    open_func = gzip.open if str(path).endswith('.gz') else open
    try:
        return open_func(path, mode)
    except OSError as e:
        raise ResourceError(Path(path), e) from e


def split_header(header: str) -> Tuple[str, str]:
    """Split a header line (without its '>' or '@') into id and description."""
    parts = header.split(None, 1)
    if not parts:
        return '', ''
    return parts[0], parts[1].strip() if len(parts) > 1 else ''


def read_fastq(
    handle: TextIO,
    quality_offset: int = 33,
    strict: bool = True,
    path: Optional[Path] = None,
) -> Iterator[SequenceRecord]:
    """
    Parse four-line FASTQ records.

    Args:
        handle: Open text handle
        quality_offset: Offset subtracted from each quality character
        strict: Raise MalformedRecordError on structural problems;
            otherwise those checks are skipped
        path: Source path, only used in error messages

    Yields:
        SequenceRecord with phred scores
    """
    index = 0
    while True:
        header = handle.readline()
        if not header:
            break
        header = header.rstrip('\r\n')
        if not header.strip():
            continue
        seq = handle.readline().strip()
        plus = handle.readline().strip()
        qual = handle.readline().rstrip('\r\n')
        index += 1

        record_id, description = split_header(header[1:])

        if strict:
            if not header.startswith('@') or not record_id:
                raise MalformedRecordError(f"malformed FASTQ header {header!r}", path, index)
            if not plus.startswith('+'):
                raise MalformedRecordError(f"missing '+' separator for {record_id}", path, index)
            if len(qual) != len(seq):
                raise MalformedRecordError(
                    f"{record_id}: sequence length {len(seq)} != quality length {len(qual)}",
                    path, index,
                )
            if qual and ord(min(qual)) < quality_offset:
                raise MalformedRecordError(
                    f"{record_id}: quality character {min(qual)!r} below offset {quality_offset}",
                    path, index,
                )

        yield SequenceRecord(
            id=record_id,
            description=description,
            sequence=seq,
            quality=[ord(c) - quality_offset for c in qual],
        )


def read_fasta(
    handle: TextIO,
    strict: bool = True,
    path: Optional[Path] = None,
) -> Iterator[SequenceRecord]:
    """
    Parse FASTA records with sequences wrapped over any number of lines.

    Yields:
        SequenceRecord without quality
    """
    index = 0
    record_id = None
    description = ''
    chunks = []

    for line in handle:
        line = line.strip()
        if not line:
            continue
        if line.startswith('>'):
            if record_id is not None:
                yield SequenceRecord(id=record_id, description=description, sequence=''.join(chunks))
            index += 1
            record_id, description = split_header(line[1:])
            chunks = []
            if strict and not record_id:
                raise MalformedRecordError(f"malformed FASTA header {line!r}", path, index)
        elif record_id is None:
            if strict:
                raise MalformedRecordError("sequence data before the first header", path, index + 1)
        else:
            chunks.append(line)

    if record_id is not None:
        yield SequenceRecord(id=record_id, description=description, sequence=''.join(chunks))


def read_records(
    path: Path,
    fmt: str,
    quality_offset: int = 33,
    strict: bool = True,
) -> Iterator[SequenceRecord]:
    """
    Stream records from a FASTA or FASTQ file.

    Args:
        path: Input path (.gz is decompressed transparently)
        fmt: 'fasta' or 'fastq'
        quality_offset: FASTQ quality offset
        strict: Enforce structural validation

    Yields:
        SequenceRecord objects in file order
    """
    handle = open_text(path)
    with handle:
        if fmt == 'fastq':
            yield from read_fastq(handle, quality_offset, strict, path)
        elif fmt == 'fasta':
            yield from read_fasta(handle, strict, path)
        else:
            raise ValueError(f"Unknown input format: {fmt}")
