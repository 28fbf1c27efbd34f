"""
Statistics reporting.

Turns raw and filtered StatTables into pandas DataFrames and writes them
as TSV files: a per-source summary, the length histogram and the base
composition.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from ..core.stats import StatTable
from ..errors import ResourceError

logger = logging.getLogger(__name__)

TOTAL_LABEL = 'total'
NX_FRACTIONS = (0.5, 0.9)


@dataclass
class SourceStats:
    """Raw and filtered statistics for one input (or the run total)."""
    label: str
    raw: StatTable = field(default_factory=StatTable)
    filtered: StatTable = field(default_factory=StatTable)

    def stages(self) -> Dict[str, StatTable]:
        return {'raw': self.raw, 'filtered': self.filtered}


def merge_sources(sources: List[SourceStats], label: str = TOTAL_LABEL) -> SourceStats:
    """Sum per-source statistics into a run total."""
    total = SourceStats(label=label)
    for source in sources:
        total.raw.merge(source.raw)
        total.filtered.merge(source.filtered)
    return total


def nx_length(lengths: Dict[int, int], fraction: float = 0.5) -> int:
    """
    Length L such that records of length >= L hold ``fraction`` of all bases.

    Args:
        lengths: Length histogram
        fraction: 0.5 for N50, 0.9 for N90

    Returns:
        The Nx length, or 0 for an empty histogram
    """
    if not lengths:
        return 0
    sizes = np.array(sorted(lengths, reverse=True), dtype=np.int64)
    counts = np.array([lengths[s] for s in sizes], dtype=np.int64)
    cumulative = np.cumsum(sizes * counts)
    if cumulative[-1] == 0:
        return 0
    idx = int(np.searchsorted(cumulative, cumulative[-1] * fraction, side='left'))
    return int(sizes[min(idx, len(sizes) - 1)])


def summarize_table(table: StatTable) -> Dict[str, float]:
    """Summary numbers for one table."""
    n_records = table.n_records
    n_bases = table.n_bases
    gc = table.bases.get('G', 0) + table.bases.get('C', 0) + table.bases.get('S', 0)
    acgt = sum(table.bases.get(b, 0) for b in 'ACGT')
    summary = {
        'records': n_records,
        'bases': n_bases,
        'min_length': min(table.lengths) if n_records else 0,
        'max_length': max(table.lengths) if n_records else 0,
        'mean_length': round(n_bases / n_records, 2) if n_records else 0.0,
        'gc_fraction': round(gc / acgt, 4) if acgt else 0.0,
    }
    for fraction in NX_FRACTIONS:
        summary[f"N{int(fraction * 100)}"] = nx_length(table.lengths, fraction)
    return summary


def summary_frame(sources: List[SourceStats]) -> pd.DataFrame:
    rows = []
    for source in sources:
        for stage, table in source.stages().items():
            rows.append({'source': source.label, 'stage': stage, **summarize_table(table)})
    return pd.DataFrame(rows)


def length_frame(sources: List[SourceStats]) -> pd.DataFrame:
    rows = [
        {'source': source.label, 'stage': stage, 'length': length, 'count': count}
        for source in sources
        for stage, table in source.stages().items()
        for length, count in sorted(table.lengths.items())
    ]
    return pd.DataFrame(rows, columns=['source', 'stage', 'length', 'count'])


def composition_frame(sources: List[SourceStats]) -> pd.DataFrame:
    rows = []
    for source in sources:
        for stage, table in source.stages().items():
            total = sum(table.bases.values())
            for base, count in sorted(table.bases.items()):
                rows.append({
                    'source': source.label,
                    'stage': stage,
                    'base': base,
                    'count': count,
                    'fraction': round(count / total, 4) if total else 0.0,
                })
    return pd.DataFrame(rows, columns=['source', 'stage', 'base', 'count', 'fraction'])


def write_stats(
    sources: List[SourceStats],
    output_dir: Path,
    total: Optional[SourceStats] = None,
) -> Dict[str, Path]:
    """
    Write summary, length histogram and composition tables as TSV.

    Args:
        sources: Per-source statistics
        output_dir: Directory for the TSV files
        total: Run total, appended after the sources if given

    Returns:
        Mapping of table name to written path
    """
    output_dir = Path(output_dir)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ResourceError(output_dir, e) from e
    all_sources = list(sources) + ([total] if total is not None else [])

    frames = {
        'summary': summary_frame(all_sources),
        'lengths': length_frame(all_sources),
        'composition': composition_frame(all_sources),
    }
    written = {}
    for name, df in frames.items():
        path = output_dir / f"{name}.tsv"
        try:
            df.to_csv(path, sep='\t', index=False)
        except OSError as e:
            raise ResourceError(path, e) from e
        written[name] = path
        logger.info(f"Wrote {name} statistics to {path}")
    return written


def format_summary(sources: List[SourceStats]) -> str:
    """Human-readable summary table for the terminal."""
    df = summary_frame(sources)
    if df.empty:
        return "No records."
    return df.to_string(index=False)
