"""
sources of raw fragments. A source exposes a range of rows and reads one fragment (one or more consecutive
rows) at a time
"""
import csv
import io
import os
from typing import List, Optional, Tuple

import pandas as pd
import pysam

from .constants import COLUMNS, INTEGER_COLUMNS, STRAND, Namespace, reverse_complement
from .error import SourceError
from .fragment import Alignment, Fragment
from .types import RowRange
from .util import logger


class INPUT_FORMAT(Namespace):
    """
    Attributes:
        AUTO: choose the format from the file extension
        IR: tab-delimited raw IR table
        BAM: name collated SAM/BAM/CRAM alignment file
    """

    AUTO: str = 'auto'
    IR: str = 'ir'
    BAM: str = 'bam'


ALIGNMENT_FILE_EXTENSIONS = {'.bam', '.sam', '.cram'}


def _check_alignment(algn: Alignment, fragment_name: str) -> Alignment:
    problems = algn.problems()
    if problems:
        logger.debug(f'{fragment_name} read {algn.read_no}: {"; ".join(problems)}')
        algn.bad = True
    return algn


class FragmentSource:
    """
    base class for fragment sources
    """

    def row_range(self) -> RowRange:
        """
        Returns:
            the first row and one past the last row of the source
        """
        raise NotImplementedError('abstract method')

    def read(self, row_start: int, row_limit: int) -> Tuple[Fragment, int]:
        """
        read the fragment starting at a given row, never reading past row_limit

        Returns:
            the fragment and the number of rows it was built from
        """
        raise NotImplementedError('abstract method')

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, *pos):
        self.close()


class IrTableSource(FragmentSource):
    """
    reads fragments from a tab-delimited raw IR table. Rows of the same fragment must be consecutive

    An entry is aligned when both its reference and cigar are given
    """

    def __init__(self, filename: str):
        self.filename = filename
        logger.info(f'loading: {filename}')
        try:
            with open(filename, 'r') as fh:
                # only whole lines are comments, names may contain a #
                content = ''.join([line for line in fh if not line.startswith('#')])
            df = pd.read_csv(
                io.StringIO(content),
                sep='\t',
                dtype=str,
                quoting=csv.QUOTE_NONE,
                keep_default_na=False,
                na_filter=False,
            )
        except pd.errors.EmptyDataError:
            df = pd.DataFrame(columns=COLUMNS.values())
        except (OSError, UnicodeDecodeError, pd.errors.ParserError) as err:
            raise SourceError('unable to read the input table', filename, err)

        missing = [col for col in COLUMNS.values() if col not in df]
        if missing:
            raise SourceError('missing required column(s)', filename, missing)
        df = df[COLUMNS.values()].copy()
        df[COLUMNS.POSITION] = df[COLUMNS.POSITION].replace('', '0')
        for col in sorted(INTEGER_COLUMNS):
            try:
                df[col] = df[col].astype(int)
            except ValueError as err:
                raise SourceError('expected integer values', filename, col, err)
        self.rows: List[Tuple] = list(df.itertuples(index=False, name=None))
        logger.info(f'loaded {len(self.rows)} rows')

    def row_range(self) -> RowRange:
        return 0, len(self.rows)

    def _alignment(self, row: Tuple) -> Alignment:
        group, name, read_no, sequence, reference, strand, position, cigar = row
        aligned = bool(reference and cigar)
        if aligned:
            algn = Alignment(read_no, sequence, True, reference, strand, position, cigar)
        else:
            algn = Alignment(read_no, sequence)
        return _check_alignment(algn, f'{group}/{name}')

    def read(self, row_start: int, row_limit: int) -> Tuple[Fragment, int]:
        first, last = self.row_range()
        if not first <= row_start < row_limit <= last:
            raise SourceError('row is outside the table', row_start, row_limit, (first, last))
        group, name = self.rows[row_start][:2]
        detail = []
        row = row_start
        while row < row_limit and self.rows[row][:2] == (group, name):
            detail.append(self._alignment(self.rows[row]))
            row += 1
        return Fragment(group, name, detail), row - row_start


class BamSource(FragmentSource):
    """
    reads fragments from a name collated SAM/BAM/CRAM file. Consecutive records sharing a query name and
    read group make up one fragment. Rows are the records of the file and must be read in order
    """

    def __init__(self, filename: str):
        self.filename = filename
        logger.info(f'loading: {filename}')
        count = 0
        try:
            with pysam.AlignmentFile(filename, 'r', check_sq=False) as fh:
                for _ in fh:
                    count += 1
            self._fh = pysam.AlignmentFile(filename, 'r', check_sq=False)
        except (OSError, ValueError) as err:
            raise SourceError('unable to read the alignment file', filename, err)
        logger.info(f'loaded {count} records')
        self._count = count
        self._records = iter(self._fh)
        self._pending: Optional[pysam.AlignedSegment] = None
        self._cursor = 0

    def row_range(self) -> RowRange:
        return 0, self._count

    def close(self) -> None:
        self._fh.close()

    def _next_record(self) -> Optional[pysam.AlignedSegment]:
        if self._pending is not None:
            record, self._pending = self._pending, None
            return record
        try:
            return next(self._records)
        except StopIteration:
            return None
        except (OSError, ValueError) as err:
            raise SourceError('unable to read the alignment file', self.filename, err)

    @staticmethod
    def fragment_key(record: pysam.AlignedSegment) -> Tuple[str, str]:
        group = record.get_tag('RG') if record.has_tag('RG') else ''
        return str(group), record.query_name

    @staticmethod
    def _alignment(record: pysam.AlignedSegment) -> Alignment:
        read_no = 2 if record.is_read2 else 1
        sequence = record.query_sequence or ''
        if record.is_unmapped:
            return Alignment(read_no, sequence, bad=record.is_qcfail)
        if record.is_reverse:
            sequence = reverse_complement(sequence)
        return Alignment(
            read_no,
            sequence,
            True,
            record.reference_name,
            STRAND.NEG if record.is_reverse else STRAND.POS,
            record.reference_start,
            record.cigarstring or '',
            bad=record.is_qcfail,
        )

    def read(self, row_start: int, row_limit: int) -> Tuple[Fragment, int]:
        if row_start != self._cursor:
            raise SourceError('alignment records must be read in order', row_start, self._cursor)
        if not row_start < row_limit <= self._count:
            raise SourceError('row is outside the file', row_start, row_limit, self._count)
        record = self._next_record()
        if record is None:
            raise SourceError('alignment file ended early', self.filename, row_start)
        key = self.fragment_key(record)
        detail = [self._alignment(record)]
        consumed = 1
        while row_start + consumed < row_limit:
            record = self._next_record()
            if record is None:
                break
            if self.fragment_key(record) != key:
                self._pending = record
                break
            detail.append(self._alignment(record))
            consumed += 1
        self._cursor += consumed

        # secondary records often omit the sequence
        for algn in detail:
            if algn.sequence:
                continue
            for other in detail:
                if other.read_no == algn.read_no and other.sequence:
                    algn.sequence = other.sequence
                    break
        name = '{}/{}'.format(*key)
        detail = [_check_alignment(algn, name) for algn in detail]
        return Fragment(key[0], key[1], detail), consumed


def open_source(filename: str, input_format: str = INPUT_FORMAT.AUTO) -> FragmentSource:
    """
    open the fragment source for a given input file

    Raises:
        SourceError: the input could not be opened
    """
    input_format = INPUT_FORMAT.enforce(input_format)
    if input_format == INPUT_FORMAT.AUTO:
        extension = os.path.splitext(filename)[1].lower()
        input_format = INPUT_FORMAT.BAM if extension in ALIGNMENT_FILE_EXTENSIONS else INPUT_FORMAT.IR
    if input_format == INPUT_FORMAT.BAM:
        return BamSource(filename)
    return IrTableSource(filename)
