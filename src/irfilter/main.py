#!python
import logging
import platform
import sys
import time
from collections import Counter
from typing import IO, Dict, List, Optional

from . import __version__
from . import util as _util
from .config import create_parser
from .consensus import Resolution, normalize_fragment, resolve_fragment
from .constants import EXIT_ERROR, EXIT_OK, TABLE
from .error import SinkError, SourceError
from .source import FragmentSource, open_source
from .writer import FragmentWriter, emit_fragment


class FilterSummary:
    """
    counts of what was written by a single run
    """

    def __init__(self):
        self.fragments: Dict[str, int] = {table: 0 for table in TABLE.values()}
        self.rows: Dict[str, int] = {table: 0 for table in TABLE.values()}
        self.reasons: Counter = Counter()
        self.skipped = 0

    def add(self, resolution: Resolution) -> None:
        self.fragments[resolution.table] += 1
        self.rows[resolution.table] += len(resolution.fragment.detail)
        self.reasons[resolution.reason] += 1

    def log(self) -> None:
        for table in TABLE.values():
            _util.logger.info(
                f'{table}: {self.fragments[table]} fragments ({self.rows[table]} rows)'
            )
        for reason, count in sorted(self.reasons.items()):
            _util.logger.info(f'{reason}: {count} fragments')
        if self.skipped:
            _util.logger.info(f'skipped {self.skipped} empty fragments')


def report_progress(stream: IO, message: str) -> None:
    """
    write a progress line. Progress is best effort and failing to write it never stops the run
    """
    try:
        stream.write(message + '\n')
        stream.flush()
    except (OSError, ValueError):
        pass


def filter_fragments(
    source: FragmentSource, writer: FragmentWriter, progress: Optional[IO] = None
) -> FilterSummary:
    """
    read every fragment of the source, resolve it and write it to the kept or discarded table

    Args:
        source: where the raw fragments are read from
        writer: the open output destination
        progress: stream for progress lines, defaults to stderr

    Returns:
        the counts of fragments and rows written
    """
    if progress is None:
        progress = sys.stderr
    first, last = source.row_range()
    total = last - first
    next_report = 1
    summary = FilterSummary()

    _util.logger.info(f'processing {total} records')
    row = first
    while row < last:
        raw, consumed = source.read(row, last)
        if consumed < 1:
            raise SourceError('source did not consume any rows', row)
        row += consumed
        fragment = normalize_fragment(raw)
        if not fragment.detail:
            summary.skipped += 1
        else:
            resolution = resolve_fragment(fragment)
            emit_fragment(writer, resolution.table, resolution.fragment)
            summary.add(resolution)
        while next_report <= 100 and next_report * total <= (row - first) * 100:
            report_progress(progress, f'prog: processed {next_report}%')
            next_report += 1
    report_progress(progress, 'prog: Done')
    return summary


def main(argv: Optional[List[str]] = None) -> int:
    """
    sets up the parser and checks the validity of command line args then filters the input

    Args:
        argv: List of arguments, defaults to command line arguments
    """
    if argv is None:  # need to do at run time or patching will not behave as expected
        argv = sys.argv[1:]
    start_time = int(time.time())
    parser = create_parser()
    args = parser.parse_args(argv)

    log_conf = {
        'format': '{asctime} [{levelname}] {message}',
        'style': '{',
        'level': args.log_level,
    }

    original_logging_handlers = logging.root.handlers[:]
    for handler in original_logging_handlers:
        logging.root.removeHandler(handler)
    if args.log:  # redirect stdout AND stderr to a log file
        log_conf['filename'] = args.log
    logging.basicConfig(**log_conf)

    _util.logger.info(f'irfilter: {__version__}')
    _util.logger.info(f'hostname: {platform.node()}')
    _util.log_arguments(args)

    try:
        with open_source(args.input, args.input_format) as source:
            with FragmentWriter(args.output, start_time) as writer:
                summary = filter_fragments(source, writer)
        summary.log()

        duration = int(time.time()) - start_time
        _util.logger.info(f'run time (hh/mm/ss): {_util.format_duration(duration)}')
        _util.logger.info(f'run time (s): {duration}')
    except (SourceError, SinkError) as err:
        _util.logger.error(f'{err.__class__.__name__}: {" ".join([str(a) for a in err.args])}')
        return EXIT_ERROR
    finally:
        for handler in logging.root.handlers[:]:
            logging.root.removeHandler(handler)
            handler.close()
        for handler in original_logging_handlers:
            logging.root.addHandler(handler)
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
