"""
Input/output modules: record reading and writing, directive files,
split outputs and statistics reports.
"""

from .directives import (
    load_directives,
    load_id_list,
    load_patterns,
    load_rename_map,
)
from .reader import open_text, read_records
from .report import SourceStats, merge_sources, nx_length, write_stats
from .split import SplitOutputPool
from .writer import RecordWriter, format_record

__all__ = [
    'read_records',
    'open_text',
    'RecordWriter',
    'format_record',
    'load_directives',
    'load_id_list',
    'load_patterns',
    'load_rename_map',
    'SplitOutputPool',
    'SourceStats',
    'merge_sources',
    'nx_length',
    'write_stats',
]
