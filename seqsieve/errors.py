"""
Exception types raised by seqsieve.

Everything derives from SeqSieveError so the CLI can report any failure
with a single handler, while the secondary base classes keep the usual
``except ValueError`` / ``except OSError`` idioms working for callers.
"""

from pathlib import Path
from typing import Optional, Tuple


class SeqSieveError(Exception):
    """Base class for all seqsieve errors."""


class ConfigurationError(SeqSieveError, ValueError):
    """Contradictory or missing run parameters, reported before any record is read."""


class MalformedRecordError(SeqSieveError, ValueError):
    """A record violates the FASTA/FASTQ structure under strict validation."""

    def __init__(self, message: str, path: Optional[Path] = None, index: Optional[int] = None):
        self.path = path
        self.index = index
        location = []
        if path is not None:
            location.append(str(path))
        if index is not None:
            location.append(f"record {index}")
        if location:
            message = f"{', '.join(location)}: {message}"
        super().__init__(message)


class OutOfRangeDirective(SeqSieveError, IndexError):
    """A transform directive addresses coordinates outside the sequence.

    The clamped span is attached so the caller can recover locally.
    """

    def __init__(self, message: str, clamped: Tuple[int, int, bool]):
        self.clamped = clamped
        super().__init__(message)


class RewriteEvaluationError(SeqSieveError, RuntimeError):
    """A rename rule could not be evaluated for a record."""

    def __init__(self, rule: str, record_id: str, cause: Exception):
        self.rule = rule
        self.record_id = record_id
        self.cause = cause
        super().__init__(f"Rename rule {rule!r} failed for record {record_id!r}: {cause}")


class ResourceError(SeqSieveError, OSError):
    """An input, output or split file could not be opened."""

    def __init__(self, path: Path, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot open {path}: {cause}")
