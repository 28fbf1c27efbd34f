"""Tests for statistics accumulation and reporting."""

import pandas as pd
import pytest
from seqsieve.core.stats import StatTable
from seqsieve.errors import ResourceError
from seqsieve.io.report import (
    SourceStats,
    format_summary,
    merge_sources,
    nx_length,
    summarize_table,
    write_stats,
)


class TestStatTable:
    """Test StatTable accumulation."""

    def test_add(self):
        """Test lengths and composition are counted case-insensitively."""
        table = StatTable()
        table.add('ACgtN')
        table.add('AC')
        assert table.n_records == 2
        assert table.n_bases == 7
        assert table.lengths == {5: 1, 2: 1}
        assert table.bases == {'A': 2, 'C': 2, 'G': 1, 'T': 1, 'N': 1}

    def test_other_symbols(self):
        """Test non-IUPAC symbols are grouped."""
        table = StatTable()
        table.add('A-*')
        assert table.bases['other'] == 2

    def test_empty_record(self):
        """Test empty sequences still count as records."""
        table = StatTable()
        table.add('')
        assert table.n_records == 1
        assert table.n_bases == 0

    def test_merge_and_add(self):
        """Test combining tables."""
        first, second = StatTable(), StatTable()
        first.add('AC')
        second.add('GG')
        combined = first + second
        assert combined.n_records == 2
        assert first.n_records == 1
        first.merge(second)
        assert first.bases == combined.bases


class TestSummaries:
    """Test summary numbers."""

    def test_nx_length(self):
        """Test N50 and N90 of a small histogram."""
        lengths = {10: 1, 20: 1, 30: 1}
        assert nx_length(lengths, 0.5) == 30
        assert nx_length(lengths, 0.9) == 10
        assert nx_length({}, 0.5) == 0

    def test_summarize(self):
        """Test the summary dictionary."""
        table = StatTable()
        table.add('GGCC')
        table.add('AATT')
        summary = summarize_table(table)
        assert summary['records'] == 2
        assert summary['bases'] == 8
        assert summary['mean_length'] == 4.0
        assert summary['gc_fraction'] == 0.5
        assert summary['N50'] == 4

    def test_merge_sources(self):
        """Test per-source tables sum to the total."""
        a, b = SourceStats('a'), SourceStats('b')
        a.raw.add('ACGT')
        b.raw.add('AC')
        b.filtered.add('AC')
        total = merge_sources([a, b])
        assert total.label == 'total'
        assert total.raw.n_bases == 6
        assert total.filtered.n_records == 1


class TestWriteStats:
    """Test TSV output."""

    def test_files_written(self, tmp_path):
        """Test the three tables are written and readable."""
        source = SourceStats('reads')
        source.raw.add('ACGT')
        source.raw.add('AC')
        source.filtered.add('AC')
        paths = write_stats([source], tmp_path / 'stats', merge_sources([source]))

        assert set(paths) == {'summary', 'lengths', 'composition'}
        summary = pd.read_csv(paths['summary'], sep='\t')
        assert list(summary['source']) == ['reads', 'reads', 'total', 'total']
        assert list(summary['stage']) == ['raw', 'filtered', 'raw', 'filtered']
        assert summary.loc[0, 'records'] == 2

        lengths = pd.read_csv(paths['lengths'], sep='\t')
        raw_lengths = lengths[(lengths['source'] == 'reads') & (lengths['stage'] == 'raw')]
        assert dict(zip(raw_lengths['length'], raw_lengths['count'])) == {2: 1, 4: 1}

    def test_unwritable_directory(self, tmp_path):
        """Test a stats directory that cannot be created raises ResourceError."""
        blocker = tmp_path / 'stats'
        blocker.write_text("not a directory")
        source = SourceStats('reads')
        source.raw.add('ACGT')
        with pytest.raises(ResourceError) as exc_info:
            write_stats([source], blocker)
        assert exc_info.value.path == blocker

    def test_format_summary(self):
        """Test the terminal summary."""
        assert format_summary([]) == "No records."
        source = SourceStats('reads')
        source.raw.add('ACGT')
        assert 'reads' in format_summary([source])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
