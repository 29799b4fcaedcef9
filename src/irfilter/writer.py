"""
the output destination: a kept and a discarded table written as tab-delimited files
"""
import os
import time
from typing import Dict, IO, Optional

from .constants import COLUMN_DEFAULTS, COLUMNS, TABLE
from .error import SinkError
from .fragment import Fragment
from .util import generate_complete_stamp, logger, mkdirp

PARTIAL_SUFFIX = '.partial'


def table_filename(output_dir: str, table: str) -> str:
    return os.path.join(output_dir, '{}.tab'.format(TABLE.enforce(table)))


class FragmentWriter:
    """
    writes rows to the kept and discarded tables. Rows are written to partial files which are only moved into
    place when the writer is finalized

    Example:
        >>> with FragmentWriter('output') as writer:
        ...     writer.write_row(TABLE.KEPT, {COLUMNS.READ_GROUP: 'A', ...})
    """

    def __init__(self, output_dir: str, start_time: Optional[int] = None):
        self.output_dir = output_dir
        self.start_time = int(time.time()) if start_time is None else start_time
        self.counts: Dict[str, int] = {table: 0 for table in TABLE.values()}
        self._handles: Dict[str, IO] = {}
        self._finalized = False

    def open(self) -> 'FragmentWriter':
        """
        create the output directory and open the partial table files

        Raises:
            SinkError: the output files could not be created
        """
        if self._handles or self._finalized:
            raise SinkError('output destination has already been opened', self.output_dir)
        try:
            mkdirp(self.output_dir)
            for table in TABLE.values():
                filename = table_filename(self.output_dir, table) + PARTIAL_SUFFIX
                logger.info(f'writing: {filename}')
                self._handles[table] = open(filename, 'w')
                self._handles[table].write('\t'.join(COLUMNS.values()) + '\n')
        except OSError as err:
            self.close()
            raise SinkError('unable to open the output destination', self.output_dir, err)
        return self

    def write_row(self, table: str, values: Dict) -> None:
        """
        write a single row. Columns missing from values are filled with their default

        Raises:
            KeyError: the table or a column is not part of the output
            SinkError: the row could not be written
        """
        handle = self._handles[TABLE.enforce(table)]
        for col in values:
            COLUMNS.enforce(col)
        row = []
        for col in COLUMNS.values():
            value = values.get(col, COLUMN_DEFAULTS.get(col))
            if value is None:
                raise KeyError('missing required column', col)
            row.append(str(value))
        try:
            handle.write('\t'.join(row) + '\n')
        except OSError as err:
            raise SinkError('unable to write to the output destination', table, err)
        self.counts[table] += 1

    def close(self) -> None:
        """
        close any open table files without finalizing them
        """
        handles, self._handles = self._handles, {}
        for handle in handles.values():
            handle.close()

    def finalize(self) -> str:
        """
        flush and close the tables, move them into place and write the complete stamp. May only be called once

        Returns:
            path to the complete stamp
        """
        if self._finalized:
            raise SinkError('output destination has already been finalized', self.output_dir)
        if not self._handles:
            raise SinkError('output destination was never opened', self.output_dir)
        self._finalized = True
        try:
            self.close()
            for table in TABLE.values():
                filename = table_filename(self.output_dir, table)
                os.replace(filename + PARTIAL_SUFFIX, filename)
                logger.info(f'wrote {self.counts[table]} rows: {filename}')
            return generate_complete_stamp(self.output_dir, self.counts, self.start_time)
        except OSError as err:
            raise SinkError('unable to finalize the output destination', self.output_dir, err)

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc_value, traceback):
        if exc_type is None:
            self.finalize()
        else:
            self.close()


def emit_fragment(writer: FragmentWriter, table: str, fragment: Fragment) -> None:
    """
    write one row per record of the fragment. The alignment columns of unaligned records are left to the table defaults
    """
    for algn in fragment.detail:
        row = {COLUMNS.READ_GROUP: fragment.group, COLUMNS.FRAGMENT: fragment.name}
        row.update(algn.to_dict())
        writer.write_row(table, row)
