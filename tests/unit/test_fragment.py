from irfilter.constants import COLUMNS, STRAND
from irfilter.fragment import Alignment, Fragment

from ..util import aligned, fragment, unaligned


class TestAlignment:
    def test_sequence_is_upper_case(self):
        assert Alignment(1, 'acgt').sequence == 'ACGT'

    def test_equality(self):
        assert aligned(1) == aligned(1)
        assert aligned(1) != aligned(1, position=3)
        assert aligned(1) != unaligned(1)
        assert len({aligned(1), aligned(1)}) == 1

    def test_order_by_read_first(self):
        assert aligned(1, position=999) < aligned(2, position=1)
        assert unaligned(1) < aligned(2)

    def test_order_aligned_before_unaligned(self):
        assert aligned(1, reference='chrZ') < unaligned(1)

    def test_order_unambiguous_before_ambiguous(self):
        assert aligned(1, reference='chrZ') < aligned(1, 'ACGTACGTNN', reference='chr1')

    def test_unaligned_placement_ignored_in_order(self):
        first = Alignment(1, 'ACGT', False, 'chr9', '+', 5, '4M')
        second = Alignment(1, 'ACGT')
        assert not first < second
        assert not second < first

    def test_to_dict_aligned(self):
        row = aligned(2, position=7, strand=STRAND.NEG).to_dict()
        assert row == {
            COLUMNS.READNO: 2,
            COLUMNS.SEQUENCE: 'ACGTACGTAC',
            COLUMNS.REFERENCE: 'chr1',
            COLUMNS.STRAND: STRAND.NEG,
            COLUMNS.POSITION: 7,
            COLUMNS.CIGAR: '10M',
        }

    def test_to_dict_unaligned(self):
        row = unaligned(1).to_dict()
        assert row == {COLUMNS.READNO: 1, COLUMNS.SEQUENCE: 'ACGTACGTAC'}


class TestProblems:
    def test_consistent(self):
        assert aligned(1).problems() == []
        assert unaligned(1).problems() == []

    def test_invalid_cigar(self):
        assert len(aligned(1, cigar='10Q').problems()) == 1

    def test_cigar_length_mismatch(self):
        assert len(aligned(1, cigar='12M').problems()) == 1

    def test_soft_clipped_cigar(self):
        assert aligned(1, cigar='2S8M').problems() == []

    def test_hard_clips_not_counted(self):
        assert aligned(1, cigar='5H10M').problems() == []

    def test_invalid_strand(self):
        assert len(aligned(1, strand='?').problems()) == 1

    def test_negative_position(self):
        assert len(aligned(1, position=-1).problems()) == 1

    def test_missing_reference(self):
        assert len(aligned(1, reference='').problems()) == 1

    def test_invalid_sequence(self):
        assert len(unaligned(1, 'AC!T').problems()) == 1


class TestTruncated:
    def test_trailing_ambiguous(self):
        original = aligned(1, 'ACGTACGTNN', position=900)
        result = original.truncated()
        assert result.is_truncated
        assert result.cigar == '8M2S'
        assert result.position == 900
        assert result.read_no == 1
        assert result.aligned
        assert result.sequence == original.sequence
        assert result.reference == original.reference
        assert result.strand == original.strand

    def test_leading_ambiguous(self):
        result = aligned(1, 'NNACGTACGT', position=100).truncated()
        assert result.cigar == '2S8M'
        assert result.position == 102

    def test_reverse_strand(self):
        result = aligned(1, 'NNACGTACGT', position=100, strand=STRAND.NEG).truncated()
        assert result.cigar == '8M2S'
        assert result.position == 100

    def test_internal_ambiguous(self):
        result = aligned(1, 'ACGNACGTAC', position=10).truncated()
        assert result.cigar == '4S6M'
        assert result.position == 14

    def test_deletion_before_window(self):
        result = aligned(1, 'NNNNACGTAC', position=10, cigar='2M3D8M').truncated()
        assert result.cigar == '4S6M'
        assert result.position == 17

    def test_existing_soft_clip(self):
        result = aligned(1, 'NNACGTACGT', position=10, cigar='2S8M').truncated()
        assert result.cigar == '2S8M'
        assert result.position == 10
        assert result.is_truncated

    def test_all_ambiguous(self):
        result = aligned(1, 'NNNN', position=10).truncated()
        assert result.cigar == '4M'
        assert result.position == 10
        assert result.is_truncated

    def test_unaligned(self):
        original = unaligned(2, 'ACGN')
        result = original.truncated()
        assert result.is_truncated
        assert not result.aligned
        assert result.read_no == 2
        assert result.sequence == original.sequence

    def test_original_unchanged(self):
        original = aligned(1, 'ACGTACGTNN', position=900)
        original.truncated()
        assert original.cigar == '10M'
        assert not original.is_truncated


class TestFragment:
    def test_with_detail(self):
        frag = fragment(aligned(1), group='g', name='n')
        other = frag.with_detail([])
        assert other.group == 'g'
        assert other.name == 'n'
        assert other.detail == []
        assert len(frag) == 1

    def test_detail_copied(self):
        detail = [aligned(1)]
        frag = Fragment('g', 'n', detail)
        detail.append(aligned(2))
        assert len(frag.detail) == 1
