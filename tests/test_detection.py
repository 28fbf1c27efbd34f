"""Tests for seqsieve.preprocessing.detection module."""

import gzip

import pytest
from seqsieve.errors import ConfigurationError, ResourceError
from seqsieve.preprocessing.detection import (
    detect_format,
    detect_input,
    detect_quality_offset,
)


@pytest.fixture
def phred33_fastq(tmp_path):
    path = tmp_path / 'reads33.fastq'
    path.write_text("@r1\nACGT\n+\nII#I\n@r2\nACGT\n+\nIIII\n@r3\nAC\n+\n55\n")
    return path


class TestDetectFormat:
    """Test format detection."""

    def test_fasta(self, tmp_path):
        """Test '>' means FASTA, leading blank lines ignored."""
        path = tmp_path / 'a.fa'
        path.write_text("\n>r1\nACGT\n")
        assert detect_format(path) == 'fasta'

    def test_fastq_gzipped(self, tmp_path):
        """Test '@' means FASTQ, through gzip."""
        path = tmp_path / 'a.fq.gz'
        with gzip.open(path, 'wt') as f:
            f.write("@r1\nA\n+\nI\n")
        assert detect_format(path) == 'fastq'

    def test_unknown(self, tmp_path):
        """Test other content is rejected."""
        path = tmp_path / 'a.txt'
        path.write_text("hello\n")
        with pytest.raises(ConfigurationError):
            detect_format(path)

    def test_empty(self, tmp_path):
        """Test an empty file is rejected."""
        path = tmp_path / 'empty.fa'
        path.write_text("")
        with pytest.raises(ConfigurationError, match="empty"):
            detect_format(path)

    def test_missing(self, tmp_path):
        """Test a missing file raises ResourceError."""
        with pytest.raises(ResourceError):
            detect_format(tmp_path / 'missing.fa')


class TestDetectQualityOffset:
    """Test phred offset detection."""

    def test_phred33(self, phred33_fastq):
        """Test low characters mean phred+33."""
        result = detect_quality_offset(phred33_fastq)
        assert result.quality_offset == 33
        assert result.min_char == '#'
        assert result.max_char == 'I'
        assert result.reads_checked == 3

    def test_phred64(self, tmp_path):
        """Test only high characters mean phred+64."""
        path = tmp_path / 'reads64.fastq'
        path.write_text("@r1\nACGT\n+\nhhJh\n")
        result = detect_quality_offset(path)
        assert result.quality_offset == 64
        assert 'phred+64' in str(result)

    def test_sample_limit(self, phred33_fastq):
        """Test sampling stops after n_reads."""
        assert detect_quality_offset(phred33_fastq, n_reads=2).reads_checked == 2

    def test_detect_input_fasta(self, tmp_path):
        """Test FASTA input has no quality offset."""
        path = tmp_path / 'a.fa'
        path.write_text(">r1\nACGT\n")
        result = detect_input(path)
        assert result.fmt == 'fasta'
        assert result.quality_offset is None
        assert not result.has_quality

    def test_detect_input_fastq(self, phred33_fastq):
        """Test FASTQ input is sampled for its offset."""
        result = detect_input(phred33_fastq)
        assert result.has_quality
        assert result.quality_offset == 33


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
