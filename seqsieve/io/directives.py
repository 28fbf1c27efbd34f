"""
Line-oriented directive files.

All files share one layout: blank lines and lines starting with '#' are
ignored, fields are separated by whitespace and/or commas.

- id list:        one id per line (first field)
- pattern list:   one regular expression per line (whole line)
- rename map:     old_id new_id
- span file:      id from to [from to ...]        (1-based, inclusive)
- splice file:    id offset [length [replacement [quality]]]
                  ('-' for an absent length; quality encoded like FASTQ)
"""

import logging
import re
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Set, Tuple

from ..core.models import DirectiveMode, TransformDirective
from ..core.transform import DirectiveTable
from ..errors import ConfigurationError, ResourceError

logger = logging.getLogger(__name__)

_FIELD_SEP = re.compile(r'[\s,]+')
ABSENT = '-'


def _iter_lines(path: Path) -> Iterator[Tuple[int, str]]:
    """Yield (line number, stripped line) for every non-comment, non-blank line."""
    try:
        handle = open(path)
    except OSError as e:
        raise ResourceError(path, e) from e
    with handle:
        for line_number, line in enumerate(handle, start=1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            yield line_number, line


def iter_directive_fields(path: Path) -> Iterator[Tuple[int, List[str]]]:
    """Yield (line number, fields) for every directive line."""
    for line_number, line in _iter_lines(path):
        yield line_number, _FIELD_SEP.split(line)


def load_id_list(path: Path) -> Set[str]:
    """Load a set of record ids."""
    ids = {fields[0] for _, fields in iter_directive_fields(path)}
    logger.info(f"Loaded {len(ids)} ids from {path}")
    return ids


def load_patterns(path: Path) -> List[str]:
    """Load one regular expression per line."""
    return [line for _, line in _iter_lines(path)]


def load_rename_map(path: Path) -> Dict[str, str]:
    """Load an old_id -> new_id mapping."""
    mapping = {}
    for line_number, fields in iter_directive_fields(path):
        if len(fields) < 2:
            raise ConfigurationError(f"{path}:{line_number}: expected 'old_id new_id'")
        mapping[fields[0]] = fields[1]
    logger.info(f"Loaded {len(mapping)} rename entries from {path}")
    return mapping


def _parse_int(value: str, path: Path, line_number: int) -> int:
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{path}:{line_number}: expected an integer, got {value!r}")


def _parse_span_line(fields: List[str], path: Path, line_number: int) -> List[TransformDirective]:
    record_id, coords = fields[0], fields[1:]
    if not coords or len(coords) % 2:
        raise ConfigurationError(f"{path}:{line_number}: expected 'id from to [from to ...]'")
    directives = []
    for i in range(0, len(coords), 2):
        first = _parse_int(coords[i], path, line_number)
        last = _parse_int(coords[i + 1], path, line_number)
        directives.append(TransformDirective.span(record_id, first, last))
    return directives


def _parse_splice_line(
    fields: List[str],
    path: Path,
    line_number: int,
    quality_offset: int,
) -> TransformDirective:
    if len(fields) < 2 or len(fields) > 5:
        raise ConfigurationError(
            f"{path}:{line_number}: expected 'id offset [length [replacement [quality]]]'"
        )
    record_id = fields[0]
    offset = _parse_int(fields[1], path, line_number)

    length: Optional[int] = None
    if len(fields) > 2 and fields[2] != ABSENT:
        length = _parse_int(fields[2], path, line_number)

    replacement = fields[3] if len(fields) > 3 else None
    # An explicit empty replacement is written as '-': a pure deletion
    if replacement == ABSENT:
        replacement = ''

    replacement_quality = None
    if len(fields) > 4:
        replacement_quality = [ord(c) - quality_offset for c in fields[4]]
        if len(replacement_quality) != len(replacement):
            raise ConfigurationError(
                f"{path}:{line_number}: replacement has {len(replacement)} bases "
                f"but {len(replacement_quality)} quality scores"
            )

    return TransformDirective.splice(record_id, offset, length, replacement, replacement_quality)


def load_directives(
    path: Path,
    mode: DirectiveMode,
    quality_offset: int = 33,
) -> DirectiveTable:
    """
    Load substring directives into an id -> directives table.

    Args:
        path: Directive file
        mode: Which representation the file uses
        quality_offset: Offset used to decode replacement qualities

    Returns:
        Mapping from record id (or '*') to its directives in file order
    """
    table: Dict[str, List[TransformDirective]] = defaultdict(list)
    count = 0

    for line_number, fields in iter_directive_fields(path):
        if mode == DirectiveMode.SPAN:
            directives = _parse_span_line(fields, path, line_number)
        else:
            directives = [_parse_splice_line(fields, path, line_number, quality_offset)]
        table[fields[0]].extend(directives)
        count += len(directives)

    logger.info(f"Loaded {count} {mode.value} directives for {len(table)} ids from {path}")
    return dict(table)
