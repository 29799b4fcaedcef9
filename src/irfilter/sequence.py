"""
nucleotide read sequences and the ambiguity aware comparisons used in resolving fragments
"""
from typing import Tuple

from .constants import IUPAC_DNA, UNAMBIGUOUS_DNA, match_ambiguous_dna


class ReadSequence(str):
    """
    the bases of a single read as they were sequenced. Bases are stored upper case

    Example:
        >>> ReadSequence('acgn')
        'ACGN'
    """

    def __new__(cls, seq=''):
        return str.__new__(cls, str(seq).upper())

    def ambiguous(self) -> bool:
        """
        Returns:
            True if the sequence contains any indeterminate base call

        Example:
            >>> ReadSequence('ACGT').ambiguous()
            False
            >>> ReadSequence('ACNT').ambiguous()
            True
        """
        return any([base not in UNAMBIGUOUS_DNA for base in self])

    def is_valid(self) -> bool:
        """
        Returns:
            True if every base is an IUPAC nucleotide code
        """
        return all([base in IUPAC_DNA for base in self])

    def is_equivalent_to(self, other) -> bool:
        """
        sequences are equivalent when they are the same length and the base calls at every position could
        resolve to the same base

        Example:
            >>> ReadSequence('ACGT').is_equivalent_to('ACNT')
            True
            >>> ReadSequence('ACGT').is_equivalent_to('ACCT')
            False
        """
        other = str(other)
        if len(self) != len(other):
            return False
        for x, y in zip(self, other):
            if x != y and not match_ambiguous_dna(x, y):
                return False
        return True

    def unambiguous_runs(self) -> Tuple[Tuple[int, int], ...]:
        """
        the half-open intervals of consecutive determinate bases

        Example:
            >>> ReadSequence('NACNNGTA').unambiguous_runs()
            ((1, 3), (5, 8))
        """
        runs = []
        start = None
        for pos, base in enumerate(self):
            if base in UNAMBIGUOUS_DNA:
                if start is None:
                    start = pos
            elif start is not None:
                runs.append((start, pos))
                start = None
        if start is not None:
            runs.append((start, len(self)))
        return tuple(runs)
