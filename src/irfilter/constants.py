"""
module holding the constants and controlled vocabulary used throughout the irfilter package
"""
from typing import Any, Dict, List, Tuple

from Bio.Data.IUPACData import ambiguous_dna_values, unambiguous_dna_letters
from Bio.Seq import Seq

PROGNAME: str = 'irfilter'
EXIT_OK: int = 0
EXIT_ERROR: int = 1


class Namespace:
    """
    Base for the class level controlled vocabularies. Members are the public, non-callable class attributes

    Example:
        >>> class THING(Namespace):
        ...     ONE = 1
        ...     TWO = 2
        >>> THING.values()
        [1, 2]
    """

    @classmethod
    def items(cls) -> List[Tuple[str, Any]]:
        result = []
        for klass in reversed(cls.__mro__):
            for attr, value in vars(klass).items():
                if attr.startswith('_') or callable(value) or isinstance(value, (classmethod, staticmethod)):
                    continue
                result.append((attr, value))
        return result

    @classmethod
    def keys(cls) -> List[str]:
        return [k for k, v in cls.items()]

    @classmethod
    def values(cls) -> List[Any]:
        return [v for k, v in cls.items()]

    @classmethod
    def to_dict(cls) -> Dict[str, Any]:
        return dict(cls.items())

    @classmethod
    def enforce(cls, value):
        """
        checks that the current namespace has a given value

        Returns:
            the input value

        Raises:
            KeyError: the value did not exist
        """
        if value not in cls.values():
            raise KeyError('value {0} is not a valid member of '.format(repr(value)), cls.values())
        return value

    @classmethod
    def reverse(cls, value) -> str:
        """
        for a given value, return the associated key

        Raises:
            KeyError: the value is not unique
            KeyError: the value is not assigned
        """
        result = [k for k, v in cls.items() if v == value]
        if len(result) > 1:
            raise KeyError('could not reverse, the mapping is not unique', value, result)
        elif not result:
            raise KeyError('input value is not assigned to a key', value)
        return result[0]


class TABLE(Namespace):
    """
    holds controlled vocabulary for the output partitions

    Attributes:
        KEPT: high-confidence fragments
        DISCARDED: low-confidence fragments
    """

    KEPT: str = 'KEPT'
    DISCARDED: str = 'DISCARDED'


class COLUMNS(Namespace):
    """
    column names of the raw IR table and of both output tables. Member order is the output column order
    """

    READ_GROUP: str = 'READ_GROUP'
    FRAGMENT: str = 'FRAGMENT'
    READNO: str = 'READNO'
    SEQUENCE: str = 'SEQUENCE'
    REFERENCE: str = 'REFERENCE'
    STRAND: str = 'STRAND'
    POSITION: str = 'POSITION'
    CIGAR: str = 'CIGAR'


COLUMN_DEFAULTS: Dict[str, Any] = {
    COLUMNS.REFERENCE: '',
    COLUMNS.STRAND: '',
    COLUMNS.POSITION: 0,
    COLUMNS.CIGAR: '',
}
"""values written for the alignment columns of unaligned entries"""

INTEGER_COLUMNS = {COLUMNS.READNO, COLUMNS.POSITION}


class STRAND(Namespace):
    """
    holds controlled vocabulary for allowed strand values

    Attributes:
        POS: the positive/forward strand
        NEG: the negative/reverse strand
    """

    POS: str = '+'
    NEG: str = '-'


class DISPOSITION(Namespace):
    """
    outcome of resolving a single fragment

    Attributes:
        ACCEPT: the fragment is written to the kept table
        DISCARD: the fragment is written to the discarded table
    """

    ACCEPT: str = 'accept'
    DISCARD: str = 'discard'

    @classmethod
    def table(cls, disposition: str) -> str:
        """
        Example:
            >>> DISPOSITION.table(DISPOSITION.ACCEPT)
            'KEPT'
        """
        return TABLE.KEPT if cls.enforce(disposition) == cls.ACCEPT else TABLE.DISCARDED


class REASON(Namespace):
    """
    why a fragment was given its disposition

    Attributes:
        CONSISTENT: one aligned record per read
        MERGED: multi-mapped reads were folded into a consensus set
        BAD: some record was flagged as bad
        UNALIGNED: no record was aligned
        PARTIAL: one record per read but some read is unaligned
        NO_GOOD: some read has no aligned unambiguous record
        CONFLICT: duplicate alignments of a read have different sequences
    """

    CONSISTENT: str = 'consistent'
    MERGED: str = 'merged'
    BAD: str = 'bad alignment'
    UNALIGNED: str = 'unaligned'
    PARTIAL: str = 'partially aligned'
    NO_GOOD: str = 'no good alignment'
    CONFLICT: str = 'conflicting sequence'


class CIGAR(Namespace):
    """
    Enum-like. For readable cigar values

    Attributes:
        M: alignment match (can be a sequence match or mismatch)
        I: insertion to the reference
        D: deletion from the reference
        N: skipped region from the reference
        S: soft clipping (clipped sequences present in SEQ)
        H: hard clipping (clipped sequences NOT present in SEQ)
        P: padding (silent deletion from padded reference)
        EQ: sequence match (=)
        X: sequence mismatch

    Note:
        descriptions are taken from the `samfile documentation <https://samtools.github.io/hts-specs/SAMv1.pdf>`_
    """

    M = 0
    I = 1
    D = 2
    N = 3
    S = 4
    H = 5
    P = 6
    X = 8
    EQ = 7


UNAMBIGUOUS_DNA: str = unambiguous_dna_letters
"""the bases which are not indeterminate"""

IUPAC_DNA: str = ''.join(sorted(ambiguous_dna_values.keys()))
"""all IUPAC nucleotide codes (ambiguous and unambiguous)"""

COMPLETE_STAMP: str = 'IRFILTER.COMPLETE'
"""Filename for the stamp written when the output is finalized"""


def match_ambiguous_dna(x: str, y: str) -> bool:
    """
    >>> match_ambiguous_dna('A', 'N')
    True
    >>> match_ambiguous_dna('A', 'T')
    False
    >>> match_ambiguous_dna('A', 'A')
    True
    """
    x = x.upper()
    y = y.upper()
    xset = set(ambiguous_dna_values.get(x, x))
    yset = set(ambiguous_dna_values.get(y, y))
    if not xset.intersection(yset):
        return False
    return True


def reverse_complement(s: str) -> str:
    """
    wrapper for the Bio.Seq reverse_complement method

    Args:
        s: the input DNA sequence

    Returns:
        str: the reverse complement of the input sequence

    Example:
        >>> reverse_complement('ATCCGGT')
        'ACCGGAT'
    """
    input_string = str(s)
    if not input_string.isalpha() and input_string:
        raise ValueError('unexpected sequence format. cannot reverse complement', input_string)
    return str(Seq(input_string).reverse_complement())
