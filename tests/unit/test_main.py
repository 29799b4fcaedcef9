import io

import pytest
from irfilter.constants import REASON, TABLE
from irfilter.error import SourceError
from irfilter.main import FilterSummary, filter_fragments, report_progress
from irfilter.source import FragmentSource, IrTableSource
from irfilter.writer import FragmentWriter, table_filename

from ..util import RAW_IR_TABLE, aligned, fragment, read_table, unaligned


class ListSource(FragmentSource):
    """
    fragment source over a list of fragments where each fragment is built from one row per record
    """

    def __init__(self, fragments, consumed=None):
        self.fragments = fragments
        self.consumed = consumed
        self.offsets = []
        total = 0
        for frag in fragments:
            self.offsets.append(total)
            total += self._size(frag)
        self.total = total

    def _size(self, frag):
        if self.consumed is not None:
            return self.consumed
        return max(1, len(frag.detail))

    def row_range(self):
        return 0, self.total

    def read(self, row_start, row_limit):
        index = self.offsets.index(row_start)
        frag = self.fragments[index]
        return frag, self._size(frag)


class BrokenStream:
    def write(self, content):
        raise OSError('stream closed')

    def flush(self):
        raise OSError('stream closed')


@pytest.fixture
def writer(tmp_path):
    with FragmentWriter(str(tmp_path)) as writer:
        yield writer


class TestFilterFragments:
    def test_raw_ir_table(self, tmp_path):
        output_dir = str(tmp_path)
        with FragmentWriter(output_dir) as writer:
            summary = filter_fragments(IrTableSource(RAW_IR_TABLE), writer, progress=io.StringIO())
        kept = read_table(table_filename(output_dir, TABLE.KEPT))
        discarded = read_table(table_filename(output_dir, TABLE.DISCARDED))
        assert kept[1:] == [
            ['grp1', 'frag1', '1', 'ACGTACGTAC', 'chr1', '+', '100', '10M'],
            ['grp1', 'frag1', '2', 'TTGGCCAATT', 'chr1', '-', '300', '10M'],
            ['grp1', 'frag3', '1', 'ACGTACGTAC', 'chr1', '+', '100', '10M'],
            ['grp1', 'frag3', '1', 'ACGTACGTAC', 'chr2', '+', '500', '10M'],
            ['grp1', 'frag3', '1', 'ACGTACGTNN', 'chr3', '+', '900', '8M2S'],
        ]
        assert discarded[1:] == [
            ['grp1', 'frag2', '1', 'ACGTACGTAC', '', '', '0', ''],
            ['grp1', 'frag4', '1', 'ACGTACGTAC', 'chr1', '+', '100', '10M'],
            ['grp1', 'frag4', '2', 'TTGGCCAATT', '', '', '0', ''],
            ['grp1', 'frag5', '1', 'ACGTACGTAC', 'chr1', '+', '100', '12M'],
            ['grp2', 'frag6', '1', 'ACGTACGTAC', 'chr1', '+', '100', '10M'],
            ['grp2', 'frag6', '1', 'TTTTACGTAC', 'chr2', '+', '700', '10M'],
        ]
        assert summary.fragments == {TABLE.KEPT: 2, TABLE.DISCARDED: 4}
        assert summary.rows == {TABLE.KEPT: 5, TABLE.DISCARDED: 6}
        assert summary.reasons == {
            REASON.CONSISTENT: 1,
            REASON.MERGED: 1,
            REASON.UNALIGNED: 1,
            REASON.PARTIAL: 1,
            REASON.BAD: 1,
            REASON.CONFLICT: 1,
        }

    def test_progress(self, writer):
        source = ListSource([fragment(aligned(1)) for i in range(7)])
        progress = io.StringIO()
        filter_fragments(source, writer, progress=progress)
        lines = progress.getvalue().strip().split('\n')
        assert len(lines) == 101
        assert lines[0] == 'prog: processed 1%'
        assert lines[-2] == 'prog: processed 100%'
        assert lines[-1] == 'prog: Done'

    def test_progress_every_percent(self, writer):
        source = ListSource([fragment(aligned(1)) for i in range(200)])
        progress = io.StringIO()
        filter_fragments(source, writer, progress=progress)
        lines = progress.getvalue().strip().split('\n')
        assert lines[:-1] == ['prog: processed {}%'.format(i) for i in range(1, 101)]

    def test_progress_failure_ignored(self, writer):
        source = ListSource([fragment(aligned(1)), fragment(unaligned(1))])
        summary = filter_fragments(source, writer, progress=BrokenStream())
        assert summary.fragments == {TABLE.KEPT: 1, TABLE.DISCARDED: 1}

    def test_empty_fragment_skipped(self, writer):
        source = ListSource([fragment(), fragment(aligned(1))])
        summary = filter_fragments(source, writer, progress=io.StringIO())
        assert summary.skipped == 1
        assert summary.fragments == {TABLE.KEPT: 1, TABLE.DISCARDED: 0}
        assert writer.counts == {TABLE.KEPT: 1, TABLE.DISCARDED: 0}

    def test_empty_source(self, writer):
        progress = io.StringIO()
        summary = filter_fragments(ListSource([]), writer, progress=progress)
        assert progress.getvalue() == 'prog: Done\n'
        assert summary.fragments == {TABLE.KEPT: 0, TABLE.DISCARDED: 0}

    def test_source_must_advance(self, writer):
        source = ListSource([fragment(aligned(1))], consumed=0)
        source.total = 1
        with pytest.raises(SourceError):
            filter_fragments(source, writer, progress=io.StringIO())

    def test_discard_keeps_normalized_order(self, tmp_path):
        source = ListSource([fragment(aligned(2, bad=True), aligned(1))])
        with FragmentWriter(str(tmp_path)) as writer:
            filter_fragments(source, writer, progress=io.StringIO())
        rows = read_table(table_filename(str(tmp_path), TABLE.DISCARDED))
        assert [r[2] for r in rows[1:]] == ['1', '2']


class TestReportProgress:
    def test_writes_line(self):
        stream = io.StringIO()
        report_progress(stream, 'prog: processed 1%')
        assert stream.getvalue() == 'prog: processed 1%\n'

    def test_closed_stream(self):
        stream = io.StringIO()
        stream.close()
        report_progress(stream, 'prog: processed 1%')


class TestFilterSummary:
    def test_log(self, caplog):
        summary = FilterSummary()
        summary.skipped = 2
        with caplog.at_level('INFO', logger='irfilter'):
            summary.log()
        assert 'skipped 2 empty fragments' in caplog.text
