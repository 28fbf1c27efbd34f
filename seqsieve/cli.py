"""
Command-line interface for seqsieve.

seqsieve: streaming FASTA/FASTQ filtering, trimming and masking
"""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .config import (
    CONFIG_TEMPLATE,
    Case,
    MaskConfig,
    MergeConfig,
    RunConfig,
    SplitConfig,
    TrimConfig,
    WindowTrimConfig,
    build_rename_rules,
    load_yaml,
)
from .errors import SeqSieveError


def _setup_logging(verbose: bool, quiet: bool):
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )


@click.group()
@click.version_option(version=__version__)
def cli():
    """seqsieve: stream, filter, trim and mask FASTA/FASTQ records."""
    pass


@cli.command('filter')
@click.argument('inputs', type=click.Path(exists=True), nargs=-1)
@click.option('--config', '-c', 'config_path', type=click.Path(exists=True),
              help='YAML configuration file (command-line options override it)')
@click.option('--output', '-o', type=click.Path(),
              help='Output file (default: stdout; .gz is compressed)')
@click.option('--output-format', type=click.Choice(['fasta', 'fastq']),
              help='Output format (default: same as the first input)')
@click.option('--quality-offset', type=click.Choice(['33', '64']),
              help='Quality offset (default: detected per input)')
@click.option('--lenient', is_flag=True,
              help='Skip structural validation of records')
@click.option('--line-width', type=int,
              help='FASTA line width, 0 for unwrapped (default: 60)')
@click.option('--stats-dir', type=click.Path(),
              help='Write raw/filtered statistics TSVs to this directory')
@click.option('--include-ids', type=click.Path(exists=True),
              help='Keep only ids listed in this file')
@click.option('--exclude-ids', type=click.Path(exists=True),
              help='Drop ids listed in this file')
@click.option('--mate', type=click.IntRange(1, 2),
              help='Keep only mate 1 or mate 2 (/1, /2 id suffix)')
@click.option('--pattern', '-p', 'patterns', multiple=True,
              help='Keep ids matching this regex (repeatable)')
@click.option('--patterns-file', type=click.Path(exists=True),
              help='File of id regexes, one per line')
@click.option('--invert-patterns', is_flag=True,
              help='Keep ids matching none of the patterns')
@click.option('--ignore-case', is_flag=True,
              help='Case-insensitive id patterns')
@click.option('--split-pattern', type=str,
              help='Route records to files named by the first capture group of this regex')
@click.option('--split-dir', type=click.Path(),
              help='Directory for split outputs (default: current directory)')
@click.option('--split-template', type=str,
              help="Split file name template with {key} and {ext} (default: '{key}.{ext}')")
@click.option('--split-keep-unmatched', is_flag=True,
              help='Write records the split pattern does not match to the main output')
@click.option('--max-open', type=int,
              help='Maximum simultaneously open split files (default: 64)')
@click.option('--substring', type=click.Path(exists=True),
              help='Substring directive file')
@click.option('--substring-mode', type=click.Choice(['span', 'splice']),
              help="Directive layout: 'span' (id from to) or 'splice' (id offset [length [seq [qual]]])")
@click.option('--lcs-trim', type=int, nargs=3, metavar='LOW HIGH MIN_LEN',
              help='Trim to the longest run scoring within [LOW, HIGH]')
@click.option('--window-trim', type=int, nargs=4, metavar='SOFT HARD WINDOW MIN_LEN',
              help='Trim to the longest stretch passing a window mean test')
@click.option('--mask', 'mask_opts', type=int, nargs=3, metavar='LOW HIGH MIN_LEN',
              help='Mask runs scoring within [LOW, HIGH] with N')
@click.option('--mask-merge', type=(int, int, int, float),
              metavar='MIN_MASK MIN_UNMASK EDGE_TRIM END_RATIO',
              help='Reshape unmasked regions before masking')
@click.option('--min-length', type=int, help='Minimum output length')
@click.option('--max-length', type=int, help='Maximum output length')
@click.option('--rename-map', type=click.Path(exists=True),
              help="File of 'old_id new_id' pairs")
@click.option('--rename-regex', type=(str, str), metavar='PATTERN TEMPLATE',
              help='Rename ids by regex substitution (\\1 group references)')
@click.option('--rename-template', type=str,
              help="Rename ids with a counter template, e.g. 'read_{n:06d}'")
@click.option('--revcomp', is_flag=True, help='Reverse-complement every record')
@click.option('--revcomp-ids', type=click.Path(exists=True),
              help='Reverse-complement only ids listed in this file')
@click.option('--case', type=click.Choice(['upper', 'lower']),
              help='Convert sequence case')
@click.option('--normalize', is_flag=True,
              help='Replace symbols other than ACGTN with N')
@click.option('--verbose', '-v', is_flag=True, help='Debug logging')
@click.option('--quiet', '-q', is_flag=True, help='Warnings and errors only')
def filter_cmd(inputs, config_path, output, output_format, quality_offset, lenient,
               line_width, stats_dir, include_ids, exclude_ids, mate, patterns,
               patterns_file, invert_patterns, ignore_case, split_pattern, split_dir,
               split_template, split_keep_unmatched, max_open, substring,
               substring_mode, lcs_trim, window_trim, mask_opts, mask_merge,
               min_length, max_length, rename_map, rename_regex, rename_template,
               revcomp, revcomp_ids, case, normalize, verbose, quiet):
    """
    Filter, transform, trim and mask FASTA/FASTQ records.

    \b
    Example:
      seqsieve filter reads.fastq.gz --lcs-trim 20 93 30 --min-length 30 \\
               --mask 0 19 2 -o clean.fastq --stats-dir stats/

    \b
    Example with a configuration file:
      seqsieve filter --config seqsieve.yaml
    """
    from .io.directives import load_id_list, load_patterns
    from .pipeline import run_pipeline

    _setup_logging(verbose, quiet)

    try:
        data = load_yaml(Path(config_path)) if config_path else {}

        overrides = {
            'inputs': [Path(p) for p in inputs] or None,
            'output': Path(output) if output else None,
            'output_format': output_format,
            'quality_offset': int(quality_offset) if quality_offset else None,
            'line_width': line_width,
            'stats_dir': Path(stats_dir) if stats_dir else None,
            'include_ids': load_id_list(Path(include_ids)) if include_ids else None,
            'exclude_ids': load_id_list(Path(exclude_ids)) if exclude_ids else None,
            'mate': mate,
            'min_length': min_length,
            'max_length': max_length,
            'reverse_ids': load_id_list(Path(revcomp_ids)) if revcomp_ids else None,
            'case': Case(case) if case else None,
            'lcs_trim': TrimConfig(*lcs_trim) if lcs_trim else None,
            'window_trim': WindowTrimConfig(*window_trim) if window_trim else None,
        }
        if lenient:
            overrides['strict'] = False
        if invert_patterns:
            overrides['invert_patterns'] = True
        if ignore_case:
            overrides['ignore_case'] = True
        if revcomp:
            overrides['reverse_complement'] = True
        if normalize:
            overrides['normalize_symbols'] = True

        extra_patterns = list(patterns)
        if patterns_file:
            extra_patterns.extend(load_patterns(Path(patterns_file)))

        if mask_opts:
            overrides['mask'] = MaskConfig(*mask_opts)
        if mask_merge:
            mask = overrides.get('mask') or MaskConfig()
            mask.merge = MergeConfig(*mask_merge)
            overrides['mask'] = mask

        if split_pattern:
            overrides['split'] = SplitConfig(
                pattern=split_pattern,
                output_dir=Path(split_dir) if split_dir else Path('.'),
                template=split_template or '{key}.{ext}',
                require_match=not split_keep_unmatched,
                max_open=max_open or 64,
            )

        if substring:
            substring_data = dict(data.get('substring') or {})
            substring_data['file'] = substring
            if substring_mode:
                substring_data['mode'] = substring_mode
            data['substring'] = substring_data
        if quality_offset:
            data['quality_offset'] = int(quality_offset)

        rename_data = dict(data.get('rename') or {})
        if rename_map:
            rename_data['map'] = rename_map
        if rename_regex:
            rename_data['regex'] = {'pattern': rename_regex[0], 'template': rename_regex[1]}
        if rename_template:
            rename_data['template'] = rename_template
        if rename_data:
            overrides['rename_rules'] = build_rename_rules(rename_data)

        config = RunConfig.from_dict(data, **overrides)
        config.patterns.extend(extra_patterns)
        if not config.inputs:
            click.echo("Error: no inputs given (arguments or 'inputs' in --config)", err=True)
            sys.exit(1)

        result = run_pipeline(config)

    except SeqSieveError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(
        f"Read {result.total.raw.n_records} records, wrote {result.records_written}",
        err=True,
    )
    for reason, count in sorted(result.dropped.items()):
        click.echo(f"  dropped ({reason}): {count}", err=True)
    if result.split_paths:
        click.echo(f"  split outputs: {len(result.split_paths)} files", err=True)


@cli.command()
@click.argument('inputs', type=click.Path(exists=True), nargs=-1, required=True)
@click.option('--quality-offset', type=click.Choice(['33', '64']),
              help='Quality offset (default: detected per input)')
@click.option('--stats-dir', type=click.Path(),
              help='Also write the statistics TSVs to this directory')
@click.option('--lenient', is_flag=True, help='Skip structural validation of records')
def stats(inputs, quality_offset, stats_dir, lenient):
    """Report length and composition statistics without writing records."""
    from .io.report import format_summary
    from .pipeline import run_pipeline

    _setup_logging(False, True)

    config = RunConfig(
        inputs=[Path(p) for p in inputs],
        quality_offset=int(quality_offset) if quality_offset else None,
        stats_dir=Path(stats_dir) if stats_dir else None,
        strict=not lenient,
    )
    try:
        result = run_pipeline(config, write=False)
    except SeqSieveError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    sources = result.sources + ([result.total] if len(result.sources) > 1 else [])
    click.echo(format_summary(sources))


@cli.command()
@click.argument('inputs', type=click.Path(exists=True), nargs=-1, required=True)
@click.option('--n-reads', type=int, default=1000,
              help='Number of reads to sample (default: 1000)')
def detect(inputs, n_reads):
    """Detect the format and quality offset of each input."""
    from .preprocessing.detection import detect_input

    for path in inputs:
        try:
            click.echo(str(detect_input(Path(path), n_reads=n_reads)))
        except SeqSieveError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)


@cli.command()
@click.option('--output', '-o', type=click.Path(), default='seqsieve.yaml',
              help='Output config file path')
def init(output):
    """Generate a template configuration file."""
    with open(output, 'w') as f:
        f.write(CONFIG_TEMPLATE)

    click.echo(f"Generated configuration template: {output}")
    click.echo("\nEdit this file and run:")
    click.echo(f"  seqsieve filter --config {output}")


if __name__ == '__main__':
    cli()
