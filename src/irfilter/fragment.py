from copy import copy as _copy
from typing import Dict, List, Optional

from . import cigar as _cigar
from .constants import COLUMNS, STRAND
from .sequence import ReadSequence


class Alignment:
    """
    a single record of a fragment: one read and, when aligned, one candidate placement of it on the reference

    the reference, strand, position and cigar are only meaningful when the alignment is aligned
    """

    read_no: int
    sequence: ReadSequence
    aligned: bool
    reference: str
    strand: str
    position: int
    cigar: str
    bad: bool
    is_truncated: bool

    def __init__(
        self,
        read_no: int,
        sequence: str,
        aligned: bool = False,
        reference: str = '',
        strand: str = '',
        position: int = 0,
        cigar: str = '',
        bad: bool = False,
        is_truncated: bool = False,
    ):
        """
        Args:
            read_no: which read of the fragment this is (1 for the first read)
            sequence: the read bases in sequencing orientation (not reverse complemented for the negative strand)
            aligned: True if the read has been placed on the reference
            reference: name of the reference sequence
            strand: the strand of the reference the read aligned to
            position: the 0-based start of the alignment on the reference
            cigar: the cigar string of the alignment
            bad: the record was flagged as unusable
            is_truncated: the record was produced by :meth:`truncated`

        Examples:
            >>> Alignment(1, 'ACGT')
            >>> Alignment(2, 'ACGT', True, 'chr1', '+', 100, '4M')
        """
        self.read_no = int(read_no)
        self.sequence = ReadSequence(sequence)
        self.aligned = bool(aligned)
        self.reference = reference
        self.strand = strand
        self.position = int(position)
        self.cigar = cigar
        self.bad = bool(bad)
        self.is_truncated = is_truncated

    @property
    def key(self):
        return (
            self.read_no,
            str(self.sequence),
            self.aligned,
            self.reference,
            self.strand,
            self.position,
            self.cigar,
            self.bad,
            self.is_truncated,
        )

    def order_key(self):
        """
        total order used to group the records of a fragment. Records are grouped by read number and then
        aligned records come before unaligned and unambiguous before ambiguous so that the first record of a
        group is the best candidate to represent it
        """
        if self.aligned:
            placement = (self.reference, self.position, self.strand, self.cigar)
        else:
            placement = ('', 0, '', '')
        return (self.read_no, not self.aligned, self.sequence.ambiguous(), placement, str(self.sequence))

    def __lt__(self, other):
        return self.order_key() < other.order_key()

    def __eq__(self, other):
        if not hasattr(other, 'key'):
            return False
        return self.key == other.key

    def __hash__(self):
        return hash(self.key)

    def __repr__(self):
        if self.aligned:
            placement = '{}:{}{}[{}]'.format(self.reference, self.position, self.strand, self.cigar)
        else:
            placement = 'unaligned'
        return '{}({}, {}, {}{}{})'.format(
            self.__class__.__name__,
            self.read_no,
            placement,
            self.sequence,
            ', bad' if self.bad else '',
            ', truncated' if self.is_truncated else '',
        )

    def copy(self):
        return _copy(self)

    def problems(self) -> List[str]:
        """
        checks the record is internally consistent

        Returns:
            descriptions of any inconsistencies found. Empty if the record is usable
        """
        result = []
        if not self.sequence.is_valid():
            result.append('sequence contains non-nucleotide characters')
        if not self.aligned:
            return result
        if not self.reference:
            result.append('aligned record has no reference')
        if self.strand not in STRAND.values():
            result.append('invalid strand: {}'.format(repr(self.strand)))
        if self.position < 0:
            result.append('negative position: {}'.format(self.position))
        try:
            cigar = _cigar.convert_string_to_cigar(self.cigar)
        except ValueError:
            result.append('invalid cigar: {}'.format(repr(self.cigar)))
        else:
            if _cigar.query_length(cigar) != len(self.sequence):
                result.append(
                    'cigar {} does not match the sequence length {}'.format(
                        self.cigar, len(self.sequence)
                    )
                )
        return result

    def truncated(self) -> 'Alignment':
        """
        a reduced confidence copy of this record. The alignment is clipped to the longest run of determinate
        bases: the read bases outside it are soft clipped and the position moves past the reference bases they
        covered. The read number and aligned flag are unchanged

        Returns:
            the truncated copy, flagged with is_truncated
        """
        result = self.copy()
        result.is_truncated = True
        if not self.aligned:
            return result
        runs = self.sequence.unambiguous_runs()
        if not runs:
            return result
        start, end = max(runs, key=lambda run: (run[1] - run[0], -run[0]))
        if self.strand == STRAND.NEG:
            # the sequence is stored as sequenced, the cigar follows the reference
            start, end = len(self.sequence) - end, len(self.sequence) - start
        cigar = _cigar.convert_string_to_cigar(self.cigar)
        aligned_positions = _cigar.aligned_query_positions(cigar)
        if not any(aligned_positions[start:end]):
            return result
        new_cigar, ref_shift = _cigar.clip_to_query_window(cigar, start, end)
        result.cigar = _cigar.convert_cigar_to_string(new_cigar)
        result.position = self.position + ref_shift
        return result

    def to_dict(self) -> Dict:
        """
        the output columns for this record. Alignment columns are only included for aligned records
        """
        row = {
            COLUMNS.READNO: self.read_no,
            COLUMNS.SEQUENCE: str(self.sequence),
        }
        if self.aligned:
            row.update(
                {
                    COLUMNS.REFERENCE: self.reference,
                    COLUMNS.STRAND: self.strand,
                    COLUMNS.POSITION: self.position,
                    COLUMNS.CIGAR: self.cigar,
                }
            )
        return row


class Fragment:
    """
    all the reads and candidate alignments sharing one physical template
    """

    group: str
    name: str
    detail: List[Alignment]

    def __init__(self, group: str, name: str, detail: Optional[List[Alignment]] = None):
        self.group = group
        self.name = name
        self.detail = list(detail) if detail else []

    def __repr__(self):
        return '{}({}/{}, {} records)'.format(
            self.__class__.__name__, self.group, self.name, len(self.detail)
        )

    def __eq__(self, other):
        for attr in ['group', 'name', 'detail']:
            if not hasattr(other, attr):
                return False
            elif getattr(self, attr) != getattr(other, attr):
                return False
        return True

    def __len__(self):
        return len(self.detail)

    def with_detail(self, detail: List[Alignment]) -> 'Fragment':
        """
        a new fragment with the same group and name but different records
        """
        return Fragment(self.group, self.name, detail)
