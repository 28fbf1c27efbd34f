"""Tests for seqsieve.core.transform module."""

import logging

import pytest
from seqsieve.core.models import SequenceRecord, TransformDirective
from seqsieve.core.transform import (
    apply_directive,
    apply_directives,
    directives_for,
    resolve_span,
)
from seqsieve.errors import ConfigurationError, OutOfRangeDirective

SEQ_50 = 'ACGTACGTAC' * 5


@pytest.fixture
def record():
    return SequenceRecord(id='r1', sequence='ACGTACGT', quality=[30, 31, 32, 33, 34, 35, 36, 37])


class TestSplice:
    """Test offset/length directives."""

    def test_offset_to_end(self):
        """Test an offset with no length keeps the rest of the sequence."""
        fragment = apply_directive(SequenceRecord('r', SEQ_50), TransformDirective.splice('r', 10))
        assert len(fragment) == 40
        assert fragment.sequence == SEQ_50[10:]

    def test_negative_offset(self):
        """Test a negative offset counts from the end."""
        fragment = apply_directive(SequenceRecord('r', SEQ_50), TransformDirective.splice('r', -5))
        assert fragment.sequence == SEQ_50[-5:]

    def test_negative_length(self, record):
        """Test a negative length leaves symbols off the end."""
        fragment = apply_directive(record, TransformDirective.splice('r1', 1, -2))
        assert fragment.sequence == 'CGTAC'
        assert fragment.quality == [31, 32, 33, 34, 35]

    def test_substitution(self):
        """Test replacing one symbol at a 0-based offset."""
        # Offsets are 0-based (offset 10 on 50 symbols leaves 40), so the
        # ACNTACGT substitution sits at offset 2; see DESIGN.md decisions.
        rec = SequenceRecord('r', 'ACGTACGT')
        assert apply_directive(rec, TransformDirective.splice('r', 2, 1, 'N')).sequence == 'ACNTACGT'
        assert apply_directive(rec, TransformDirective.splice('r', 3, 1, 'N')).sequence == 'ACGNACGT'

    def test_insertion(self):
        """Test a zero length with a replacement inserts."""
        rec = SequenceRecord('r', 'ACGTACGT')
        assert apply_directive(rec, TransformDirective.splice('r', 4, 0, 'GG')).sequence == 'ACGTGGACGT'

    def test_deletion(self):
        """Test an empty replacement deletes the range."""
        rec = SequenceRecord('r', 'ACGTACGT')
        assert apply_directive(rec, TransformDirective.splice('r', 2, 3, '')).sequence == 'ACCGT'

    def test_replacement_quality(self, record):
        """Test replacement qualities are spliced into the quality list."""
        fragment = apply_directive(record, TransformDirective.splice('r1', 3, 1, 'NN', [2, 2]))
        assert fragment.sequence == 'ACGNNACGT'
        assert fragment.quality == [30, 31, 32, 2, 2, 34, 35, 36, 37]
        assert fragment.is_consistent()

    def test_fill_quality(self, record):
        """Test inserted bases without qualities get the fill score."""
        fragment = apply_directive(record, TransformDirective.splice('r1', 0, 0, 'TT'), fill_quality=25)
        assert fragment.quality[:3] == [25, 25, 30]

    def test_replacement_quality_length_mismatch(self, record):
        """Test mismatched replacement qualities are rejected."""
        with pytest.raises(ConfigurationError):
            apply_directive(record, TransformDirective.splice('r1', 0, 1, 'NN', [2]))


class TestSpan:
    """Test 1-based inclusive span directives."""

    def test_forward(self, record):
        """Test a forward span extracts an inclusive range."""
        fragment = apply_directive(record, TransformDirective.span('r1', 2, 5))
        assert fragment.sequence == 'CGTA'
        assert fragment.quality == [31, 32, 33, 34]

    def test_reverse(self, record):
        """Test from > to extracts the reverse complement."""
        fragment = apply_directive(record, TransformDirective.span('r1', 5, 2))
        assert fragment.sequence == 'TACG'
        assert fragment.quality == [34, 33, 32, 31]

    def test_resolve_reverse_flag(self):
        """Test the reverse flag in the resolved span."""
        assert resolve_span(TransformDirective.span('r', 5, 2), 8) == (1, 5, True)
        assert resolve_span(TransformDirective.span('r', 1, 8), 8) == (0, 8, False)


class TestOutOfRange:
    """Test directives that reach past the sequence."""

    def test_resolve_raises_with_clamped_span(self):
        """Test out-of-range spans raise carrying the clamped coordinates."""
        with pytest.raises(OutOfRangeDirective) as exc_info:
            resolve_span(TransformDirective.span('r', 5, 20), 8)
        assert exc_info.value.clamped == (4, 8, False)

    def test_apply_clamps_and_warns(self, record, caplog):
        """Test applying an out-of-range span clamps with a warning."""
        with caplog.at_level(logging.WARNING):
            fragment = apply_directive(record, TransformDirective.span('r1', 5, 20))
        assert fragment.sequence == 'ACGT'
        assert 'clamping' in caplog.text

    def test_offset_past_end(self, record):
        """Test an offset past the end yields an empty fragment."""
        fragment = apply_directive(record, TransformDirective.splice('r1', 20))
        assert fragment.sequence == ''
        assert fragment.quality == []


class TestFanOut:
    """Test directive lookup and fan-out."""

    def test_no_directives(self, record):
        """Test a record without directives passes through."""
        assert apply_directives(record, []) == [record]
        assert directives_for(None, 'r1') == []

    def test_wildcard_and_specific(self, record):
        """Test wildcard directives apply before record-specific ones."""
        table = {
            '*': [TransformDirective.splice('*', 0, 2)],
            'r1': [TransformDirective.splice('r1', -2)],
        }
        fragments = apply_directives(record, directives_for(table, 'r1'))
        assert [f.sequence for f in fragments] == ['AC', 'GT']
        assert len(directives_for(table, 'other')) == 1

    def test_fragments_do_not_chain(self, record):
        """Test every directive sees the original record."""
        directives = [
            TransformDirective.splice('r1', 0, 4),
            TransformDirective.splice('r1', 0, 4),
        ]
        fragments = apply_directives(record, directives)
        assert [f.sequence for f in fragments] == ['ACGT', 'ACGT']
        assert record.sequence == 'ACGTACGT'
        assert len(record.quality) == 8


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
