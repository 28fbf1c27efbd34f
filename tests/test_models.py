"""Tests for seqsieve.core.models and record selection predicates."""

import re

import pytest
from seqsieve.core.models import Region, SequenceRecord, TransformDirective, parse_mate
from seqsieve.filters import compile_patterns, passes_identity, passes_length, split_key


class TestSequenceRecord:
    """Test SequenceRecord behaviour."""

    def test_mate_parsed_for_quality_records(self):
        """Test /1 and /2 suffixes set the mate on FASTQ records."""
        assert SequenceRecord('r/2', 'A', quality=[30]).mate == 2
        assert SequenceRecord('r/2', 'A').mate is None
        assert parse_mate('r/3') is None

    def test_slice_and_copy_are_independent(self):
        """Test slices and copies do not share the quality list."""
        record = SequenceRecord('r', 'ACGT', quality=[1, 2, 3, 4])
        part = record.slice(1, 3)
        copy = record.copy()
        copy.quality[0] = 99
        assert part.sequence == 'CG'
        assert part.quality == [2, 3]
        assert record.quality[0] == 1

    def test_consistency(self):
        """Test the quality length invariant check."""
        assert SequenceRecord('r', 'AC', quality=[1, 2]).is_consistent()
        assert not SequenceRecord('r', 'AC', quality=[1]).is_consistent()
        assert SequenceRecord('r', 'AC').is_consistent()

    def test_append_description(self):
        """Test annotations are space separated."""
        record = SequenceRecord('r', 'A')
        record.append_description('a=1')
        record.append_description('b=2')
        assert record.description == 'a=1 b=2'


class TestRegionAndDirective:
    """Test Region and TransformDirective helpers."""

    def test_region_bounds(self):
        """Test half-open bounds."""
        region = Region.from_bounds(3, 7)
        assert region.length == 4
        assert region.end == 7
        assert str(region) == '3-7'

    def test_directive_kinds(self):
        """Test wildcard and splice detection."""
        assert TransformDirective.span('*', 1, 2).is_wildcard
        assert not TransformDirective.splice('r', 0, 2).is_splice
        assert TransformDirective.splice('r', 0, 2, '').is_splice


class TestFilters:
    """Test selection predicates."""

    def test_identity_without_lists(self):
        """Test everything passes without lists."""
        assert passes_identity(SequenceRecord('r', 'A'))

    def test_split_key_without_groups(self):
        """Test the whole match is the key when the pattern has no groups."""
        assert split_key('lib7_read', re.compile(r'lib\d')) == 'lib7'
        assert split_key('read', re.compile(r'lib\d')) is None

    def test_split_key_optional_group(self):
        """Test a group that did not take part in the match gives no key."""
        assert split_key('xy', re.compile(r'x(z)?')) is None

    def test_length_bounds(self):
        """Test inclusive length bounds."""
        assert passes_length(5, 5, 5)
        assert not passes_length(4, 5)
        assert not passes_length(6, None, 5)

    def test_compile_patterns(self):
        """Test case folding flag."""
        patterns = compile_patterns(['^abc'], ignore_case=True)
        assert patterns[0].search('ABCD')
        with pytest.raises(re.error):
            compile_patterns(['('])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
