"""
Record filtering pipeline.

Every record passes through the same fixed sequence of stages:

    1. raw statistics
    2. identity filter (id lists, mate)
    3. pattern filter, then split routing
    4. coordinate transform fan-out
    5. quality trimming (LCS, then window)
    6. length filter
    7. rename, reverse complement, masking, case, symbol normalization
    8. write and filtered statistics

Any stage may drop a record or fragment; none runs out of order.
"""

import logging
import re
import sys
from collections import Counter
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from .config import Case, RunConfig
from .core.models import SequenceRecord
from .core.merge import merge_regions
from .core.regions import (
    complement_regions,
    find_lcs_regions,
    find_window_regions,
    longest_region,
)
from .core.transform import apply_directives, directives_for
from .filters import compile_patterns, passes_identity, passes_length, passes_patterns, split_key
from .io.reader import open_text, read_records
from .io.report import SourceStats, merge_sources, write_stats
from .io.split import SplitOutputPool
from .io.writer import RecordWriter
from .preprocessing.detection import InputDetectionResult, detect_format, detect_input
from .rename import apply_rename_rules
from .utils.sequence import (
    MASK_SYMBOL,
    convert_case,
    mask_positions,
    normalize_symbols,
    reverse_complement_pair,
)

logger = logging.getLogger(__name__)

# (split key or None for the default sink, fragment)
Routed = Tuple[Optional[str], SequenceRecord]


class RecordFilterPipeline:
    """Applies the configured stages to one record at a time."""

    def __init__(self, config: RunConfig):
        self.config = config
        self.patterns = compile_patterns(config.patterns, config.ignore_case)
        self.split_pattern = re.compile(config.split.pattern) if config.split else None
        self.dropped: Counter = Counter()

    def process(self, record: SequenceRecord, stats: SourceStats) -> List[Routed]:
        """
        Run one record through every stage.

        Args:
            record: Input record; it may be modified in place
            stats: Statistics of the current source

        Returns:
            Surviving fragments with their split keys, in output order

        Raises:
            RewriteEvaluationError: If a rename rule fails; nothing of the
                record has been returned for writing at that point
        """
        config = self.config

        # Stage 1: raw statistics
        stats.raw.add(record.sequence)

        # Stage 2: identity
        if not passes_identity(record, config.include_ids, config.exclude_ids, config.mate):
            self.dropped['identity'] += 1
            return []

        # Stage 3: pattern and split routing
        if not passes_patterns(record, self.patterns, config.invert_patterns):
            self.dropped['pattern'] += 1
            return []
        key = None
        if self.split_pattern is not None:
            key = split_key(record.id, self.split_pattern)
            if key is None and config.split.require_match:
                self.dropped['split'] += 1
                return []

        # Stage 4: coordinate transforms
        original_id = record.id
        fragments = apply_directives(
            record, directives_for(config.directives, original_id), config.fill_quality
        )

        routed = []
        for fragment in fragments:
            # Stage 5: quality trimming
            fragment = self.trim(fragment)
            if fragment is None:
                self.dropped['quality'] += 1
                continue

            # Stage 6: length
            if not passes_length(len(fragment), config.min_length, config.max_length):
                self.dropped['length'] += 1
                continue

            # Stage 7: rewriting
            self.rewrite(fragment, original_id)
            routed.append((key, fragment))

        # Stage 8: filtered statistics (the caller writes)
        for _, fragment in routed:
            stats.filtered.add(fragment.sequence)

        return routed

    def trim(self, fragment: SequenceRecord) -> Optional[SequenceRecord]:
        """Keep the longest qualifying region, LCS first, then window; None if none."""
        lcs = self.config.lcs_trim
        if lcs is not None:
            best = longest_region(
                find_lcs_regions(fragment.quality, lcs.low, lcs.high, lcs.min_length)
            )
            if best is None:
                return None
            fragment = fragment.slice(best.offset, best.end)

        window = self.config.window_trim
        if window is not None:
            best = longest_region(
                find_window_regions(
                    fragment.quality, window.soft, window.hard, window.window, window.min_length
                )
            )
            if best is None:
                return None
            fragment = fragment.slice(best.offset, best.end)

        return fragment

    def rewrite(self, fragment: SequenceRecord, original_id: str):
        """Rename, reverse-complement, mask, convert case and normalize in place."""
        config = self.config

        if config.rename_rules:
            fragment.id = apply_rename_rules(config.rename_rules, fragment.id)

        if config.reverse_complement or (config.reverse_ids and original_id in config.reverse_ids):
            fragment.sequence, fragment.quality = reverse_complement_pair(
                fragment.sequence, fragment.quality
            )

        if config.mask is not None:
            self.mask(fragment)

        case = config.case.value if config.case is not None else None
        fragment.sequence = convert_case(fragment.sequence, case)

        if config.normalize_symbols:
            symbol = MASK_SYMBOL.lower() if config.case == Case.LOWER else MASK_SYMBOL
            fragment.sequence = normalize_symbols(fragment.sequence, symbol)

    def mask(self, fragment: SequenceRecord):
        """Mask low-quality positions and annotate the header with their coordinates."""
        mask = self.config.mask
        length = len(fragment)
        low_quality = find_lcs_regions(fragment.quality, mask.low, mask.high, mask.min_length)
        keep = complement_regions(low_quality, length)

        merge = mask.merge
        if merge is not None:
            keep = merge_regions(
                keep,
                length,
                min_mask_len=merge.min_mask_len,
                min_unmask_len=merge.min_unmask_len,
                edge_trim=merge.edge_trim,
                end_ratio=merge.end_ratio,
            )

        masked = complement_regions(keep, length)
        if not masked:
            return
        fragment.sequence = mask_positions(fragment.sequence, [(r.offset, r.end) for r in masked])
        coords = ','.join(f"{r.offset + 1}-{r.end}" for r in masked)
        fragment.append_description(f"masked={coords}")


@dataclass
class RunResult:
    """Outcome of a complete run."""
    sources: List[SourceStats]
    total: SourceStats
    records_written: int = 0
    dropped: Dict[str, int] = field(default_factory=dict)
    split_paths: List[Path] = field(default_factory=list)
    stats_paths: Dict[str, Path] = field(default_factory=dict)


def source_label(path: Path) -> str:
    """Label for a source: file name without compression and format suffixes."""
    name = Path(path).name
    if name.endswith('.gz'):
        name = name[:-3]
    return name.rsplit('.', 1)[0] if '.' in name else name


def resolve_inputs(config: RunConfig, check_output: bool = True) -> List[InputDetectionResult]:
    """
    Detect every input up front so configuration errors precede any record.

    Args:
        config: Run configuration
        check_output: Also check every input against the resolved output
            format (skipped for statistics-only runs)

    Returns:
        One detection result per input, in input order
    """
    detections = []
    for path in config.inputs:
        if config.quality_offset is not None:
            # A configured offset skips sampling
            fmt = detect_format(path)
            detection = InputDetectionResult(
                path=Path(path),
                fmt=fmt,
                quality_offset=config.quality_offset if fmt == 'fastq' else None,
                reads_checked=0,
                reason='configured',
            )
        else:
            detection = detect_input(path)
        config.check_input(detection.has_quality, path)
        logger.info(f"Input {detection}")
        detections.append(detection)

    if check_output:
        # A FASTQ output that follows the first input must not meet a later FASTA input
        output_format = resolve_output_format(config, detections)
        for detection in detections:
            config.check_input(detection.has_quality, detection.path, output_format)
    return detections


def resolve_output_format(config: RunConfig, detections: List[InputDetectionResult]) -> str:
    """Configured output format, else the format of the first input."""
    if config.output_format:
        return config.output_format
    return detections[0].fmt if detections else 'fasta'


def run_pipeline(config: RunConfig, write: bool = True) -> RunResult:
    """
    Run the full pipeline over every input, one record at a time.

    Args:
        config: Run configuration
        write: If False, only statistics are collected

    Returns:
        RunResult with per-source and total statistics
    """
    config.validate()
    detections = resolve_inputs(config, check_output=write)
    if not detections:
        logger.warning("No inputs given")

    output_format = resolve_output_format(config, detections)
    output_offset = config.quality_offset or next(
        (d.quality_offset for d in detections if d.has_quality), 33
    )

    pipeline = RecordFilterPipeline(config)
    sources: List[SourceStats] = []
    records_written = 0
    split_paths: List[Path] = []

    with ExitStack() as stack:
        writer = None
        pool = None
        if write:
            if config.output is not None:
                handle = stack.enter_context(open_text(config.output, 'wt'))
            else:
                handle = sys.stdout
            writer = RecordWriter(handle, output_format, output_offset, config.line_width)
            if config.split is not None:
                pool = stack.enter_context(SplitOutputPool(
                    config.split.output_dir,
                    template=config.split.template,
                    ext=output_format,
                    max_open=config.split.max_open,
                ))

        for detection in detections:
            stats = SourceStats(label=source_label(detection.path))
            records = read_records(
                detection.path,
                detection.fmt,
                detection.quality_offset or 33,
                config.strict,
            )
            _consume(pipeline, records, stats, writer, pool)
            sources.append(stats)
            logger.info(
                f"{stats.label}: {stats.raw.n_records} records in, "
                f"{stats.filtered.n_records} fragments out"
            )

        if writer is not None:
            records_written = writer.records_written
        if pool is not None:
            split_paths = pool.paths

    total = merge_sources(sources)
    result = RunResult(
        sources=sources,
        total=total,
        records_written=records_written,
        dropped=dict(pipeline.dropped),
        split_paths=split_paths,
    )
    if config.stats_dir is not None:
        result.stats_paths = write_stats(sources, config.stats_dir, total)

    logger.info(
        f"Done: {total.raw.n_records} records read, {records_written} written, "
        f"dropped {dict(pipeline.dropped) or 'none'}"
    )
    return result


def _consume(
    pipeline: RecordFilterPipeline,
    records: Iterable[SequenceRecord],
    stats: SourceStats,
    writer: Optional[RecordWriter],
    pool: Optional[SplitOutputPool],
):
    for record in records:
        routed = pipeline.process(record, stats)
        if writer is None:
            continue
        for key, fragment in routed:
            if key is not None and pool is not None:
                writer.write(fragment, pool.get(key))
            else:
                writer.write(fragment)
