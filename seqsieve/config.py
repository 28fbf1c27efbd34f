"""
Run configuration for seqsieve.

A RunConfig is built once per run, from a YAML file and/or command-line
options, validated, and then passed explicitly to every pipeline stage.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

import yaml

from .core.models import DirectiveMode
from .core.transform import DEFAULT_FILL_QUALITY, DirectiveTable
from .errors import ConfigurationError, ResourceError
from .io.directives import load_directives, load_id_list, load_patterns, load_rename_map
from .rename import CounterRename, MapRename, RegexRename, RenameRule

SUPPORTED_FORMATS = ('fasta', 'fastq')
SUPPORTED_OFFSETS = (33, 64)


class Case(Enum):
    """Case conversion applied to output sequences."""
    UPPER = 'upper'
    LOWER = 'lower'


@dataclass
class TrimConfig:
    """Longest-contiguous-run trimming: keep the longest run scoring in [low, high]."""
    low: int = 20
    high: int = 93
    min_length: int = 1


@dataclass
class WindowTrimConfig:
    """Window trimming: keep the longest stretch passing the window mean test."""
    soft: int = 20
    hard: int = 10
    window: int = 10
    min_length: int = 1


@dataclass
class MergeConfig:
    """Region merging parameters applied to unmasked regions before masking."""
    min_mask_len: int = 0
    min_unmask_len: int = 0
    edge_trim: int = 0
    end_ratio: float = 0.5


@dataclass
class MaskConfig:
    """
    Quality masking.

    Runs of at least ``min_length`` positions scoring within [low, high]
    are masked; ``merge`` optionally reshapes the unmasked remainder.
    """
    low: int = 0
    high: int = 19
    min_length: int = 1
    merge: Optional[MergeConfig] = None


@dataclass
class SplitConfig:
    """
    Route records to per-key output files.

    The key is the first capture group of ``pattern`` in the record id.
    ``template`` names the file, with ``{key}`` and ``{ext}`` fields.
    """
    pattern: str
    output_dir: Path = Path('.')
    template: str = '{key}.{ext}'
    require_match: bool = True
    max_open: int = 64


@dataclass
class RunConfig:
    """Full run configuration."""
    inputs: List[Path] = field(default_factory=list)
    output: Optional[Path] = None  # None writes to stdout
    output_format: Optional[str] = None  # follows the input if None
    quality_offset: Optional[int] = None  # detected per input if None
    strict: bool = True
    line_width: int = 60
    stats_dir: Optional[Path] = None

    # Identity and content selection
    include_ids: Optional[Set[str]] = None
    exclude_ids: Optional[Set[str]] = None
    mate: Optional[int] = None
    patterns: List[str] = field(default_factory=list)
    invert_patterns: bool = False
    ignore_case: bool = False
    split: Optional[SplitConfig] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None

    # Coordinate transforms
    directive_mode: DirectiveMode = DirectiveMode.SPAN
    directives: DirectiveTable = field(default_factory=dict)
    fill_quality: int = DEFAULT_FILL_QUALITY

    # Quality trimming and masking
    lcs_trim: Optional[TrimConfig] = None
    window_trim: Optional[WindowTrimConfig] = None
    mask: Optional[MaskConfig] = None

    # Record rewriting
    rename_rules: List[RenameRule] = field(default_factory=list)
    reverse_complement: bool = False
    reverse_ids: Optional[Set[str]] = None
    case: Optional[Case] = None
    normalize_symbols: bool = False

    @property
    def needs_quality(self) -> bool:
        """True if any stage needs phred scores."""
        return any([self.lcs_trim, self.window_trim, self.mask])

    def validate(self) -> 'RunConfig':
        """
        Check the configuration for contradictions.

        Returns:
            self, so calls can be chained

        Raises:
            ConfigurationError: On the first problem found
        """
        if self.quality_offset is not None and self.quality_offset not in SUPPORTED_OFFSETS:
            raise ConfigurationError(
                f"Quality offset must be one of {SUPPORTED_OFFSETS}, got {self.quality_offset}"
            )
        if self.output_format is not None and self.output_format not in SUPPORTED_FORMATS:
            raise ConfigurationError(f"Unknown output format: {self.output_format}")
        if self.line_width < 0:
            raise ConfigurationError("Line width cannot be negative")
        if self.mate is not None and self.mate not in (1, 2):
            raise ConfigurationError(f"Mate must be 1 or 2, got {self.mate}")
        if (self.min_length is not None and self.max_length is not None
                and self.min_length > self.max_length):
            raise ConfigurationError(
                f"Minimum length {self.min_length} exceeds maximum length {self.max_length}"
            )

        for pattern in self.patterns + ([self.split.pattern] if self.split else []):
            try:
                re.compile(pattern)
            except re.error as e:
                raise ConfigurationError(f"Invalid pattern {pattern!r}: {e}") from e

        if self.split is not None and self.split.max_open < 1:
            raise ConfigurationError("Split output needs at least one open file handle")

        if self.lcs_trim and self.lcs_trim.low > self.lcs_trim.high:
            raise ConfigurationError("LCS trim low score exceeds high score")
        if self.window_trim and self.window_trim.window < 1:
            raise ConfigurationError("Trim window size must be positive")
        if self.mask:
            if self.mask.low > self.mask.high:
                raise ConfigurationError("Mask low score exceeds high score")
            merge = self.mask.merge
            if merge is not None:
                if min(merge.min_mask_len, merge.min_unmask_len, merge.edge_trim) < 0:
                    raise ConfigurationError("Merge lengths cannot be negative")
                if not 0.0 <= merge.end_ratio <= 1.0:
                    raise ConfigurationError(
                        f"Merge end ratio must be within [0, 1], got {merge.end_ratio}"
                    )
        return self

    def check_input(self, has_quality: bool, source: Any = None, output_format: Optional[str] = None):
        """
        Check the configuration against the format of one input.

        ``output_format`` is the resolved run output format when the
        configuration leaves it to follow the first input.
        """
        where = f" ({source})" if source is not None else ''
        if not has_quality:
            if self.needs_quality:
                raise ConfigurationError(
                    f"Quality trimming or masking requested but the input has no "
                    f"quality scores{where}"
                )
            if (output_format or self.output_format) == 'fastq':
                raise ConfigurationError(f"Cannot write FASTQ from FASTA input{where}")

    @classmethod
    def from_yaml(cls, path: Path, **overrides) -> 'RunConfig':
        """Load configuration from a YAML file; keyword overrides win."""
        return cls.from_dict(load_yaml(path), **overrides)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], **overrides) -> 'RunConfig':
        """Create from a (YAML-shaped) dictionary."""
        quality_offset = data.get('quality_offset')
        selection = data.get('filter', {}) or {}
        substring = data.get('substring', {}) or {}
        trim = data.get('trim', {}) or {}

        patterns = list(selection.get('patterns', []))
        if selection.get('patterns_file'):
            patterns.extend(load_patterns(Path(selection['patterns_file'])))

        mode = DirectiveMode(substring.get('mode', DirectiveMode.SPAN.value))
        directives = {}
        if substring.get('file'):
            directives = load_directives(
                Path(substring['file']), mode, quality_offset or SUPPORTED_OFFSETS[0]
            )

        mask = None
        if data.get('mask'):
            mask_data = dict(data['mask'])
            merge_data = mask_data.pop('merge', None)
            mask = MaskConfig(**mask_data)
            if merge_data:
                mask.merge = MergeConfig(**merge_data)

        split = None
        if data.get('split'):
            split_data = dict(data['split'])
            if 'output_dir' in split_data:
                split_data['output_dir'] = Path(split_data['output_dir'])
            split = SplitConfig(**split_data)

        reverse = data.get('reverse_complement', False)
        reverse_ids = None
        if isinstance(reverse, str):
            reverse_ids = load_id_list(Path(reverse))
            reverse = False

        kwargs = dict(
            inputs=[Path(p) for p in data.get('inputs', [])],
            output=Path(data['output']) if data.get('output') else None,
            output_format=data.get('output_format'),
            quality_offset=quality_offset,
            strict=data.get('strict', True),
            line_width=data.get('line_width', 60),
            stats_dir=Path(data['stats_dir']) if data.get('stats_dir') else None,
            include_ids=_optional_ids(selection.get('include_ids')),
            exclude_ids=_optional_ids(selection.get('exclude_ids')),
            mate=selection.get('mate'),
            patterns=patterns,
            invert_patterns=selection.get('invert_patterns', False),
            ignore_case=selection.get('ignore_case', False),
            split=split,
            min_length=selection.get('min_length'),
            max_length=selection.get('max_length'),
            directive_mode=mode,
            directives=directives,
            fill_quality=substring.get('fill_quality', DEFAULT_FILL_QUALITY),
            lcs_trim=TrimConfig(**trim['lcs']) if trim.get('lcs') else None,
            window_trim=WindowTrimConfig(**trim['window']) if trim.get('window') else None,
            mask=mask,
            rename_rules=build_rename_rules(data.get('rename') or {}),
            reverse_complement=bool(reverse),
            reverse_ids=reverse_ids,
            case=Case(data['case']) if data.get('case') else None,
            normalize_symbols=data.get('normalize_symbols', False),
        )
        kwargs.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**kwargs)


def load_yaml(path: Path) -> Dict[str, Any]:
    """
    Read a YAML configuration file into a dictionary.

    Raises:
        ResourceError: If the file cannot be opened
        ConfigurationError: If it is not valid YAML or not a mapping
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ResourceError(Path(path), e) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"{path}: invalid YAML: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: expected a mapping at the top level")
    return data


def _optional_ids(value) -> Optional[Set[str]]:
    """Ids given inline as a list, or as a path to an id list file."""
    if value is None:
        return None
    if isinstance(value, (list, tuple, set)):
        return {str(v) for v in value}
    return load_id_list(Path(value))


def build_rename_rules(data: Dict[str, Any]) -> List[RenameRule]:
    """
    Resolve the rename section into typed rules, applied in the order
    map, regex, template.
    """
    rules: List[RenameRule] = []
    if data.get('map'):
        rules.append(MapRename(load_rename_map(Path(data['map'])), text=f"map:{data['map']}"))
    if data.get('regex'):
        regex = data['regex']
        rules.append(RegexRename(regex['pattern'], regex['template']))
    if data.get('template'):
        rules.append(CounterRename(data['template'], start=data.get('start', 1)))
    return rules


CONFIG_TEMPLATE = '''# seqsieve configuration template
# Edit this file and run: seqsieve filter --config <this file>

inputs:
  - reads.fastq.gz
output: filtered.fastq
# output_format: fasta          # default: same as input
# quality_offset: 33            # default: detected per input
strict: true
line_width: 60
# stats_dir: stats/

filter:
  # include_ids: keep_ids.txt   # file, or an inline list
  # exclude_ids: [read1, read2]
  # mate: 1
  # patterns: ['^lib\\d+_']
  # invert_patterns: false
  min_length: 30
  # max_length: 500

# substring:
#   mode: span                  # span: id from to | splice: id offset [length [seq [qual]]]
#   file: directives.txt

trim:
  lcs:
    low: 20
    high: 93
    min_length: 30
  # window:
  #   soft: 20
  #   hard: 10
  #   window: 10
  #   min_length: 30

# mask:
#   low: 0
#   high: 19
#   min_length: 2
#   merge:
#     min_mask_len: 5
#     min_unmask_len: 5
#     edge_trim: 0
#     end_ratio: 0.5

# rename:
#   map: rename.txt
#   regex: {pattern: '^(\\w+)_', template: '\\1-'}
#   template: 'read_{n:06d}'

# reverse_complement: false     # or a file of ids to reverse-complement
# case: upper
# normalize_symbols: true

# split:
#   pattern: '^(\\w+?)_'
#   output_dir: split/
#   template: '{key}.{ext}'
#   require_match: true
#   max_open: 64
'''
