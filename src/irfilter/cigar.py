"""
holds methods related to processing cigar tuples. Cigar tuples are generally
an iterable list of tuples where the first element in each tuple is the
CIGAR value (i.e. 1 for an insertion), and the second value is the frequency
"""
import re
from typing import Tuple

from .constants import CIGAR
from .types import CigarTuples

ALIGNED_STATES = {CIGAR.M, CIGAR.X, CIGAR.EQ}
REFERENCE_ALIGNED_STATES = ALIGNED_STATES | {CIGAR.D, CIGAR.N}
QUERY_ALIGNED_STATES = ALIGNED_STATES | {CIGAR.I, CIGAR.S}

CIGAR_PATTERN = re.compile(r'^(\d+[MIDNSHP=X])+$')


def join(*pos) -> CigarTuples:
    """
    given a number of cigar lists, joins them and merges any consecutive tuples
    with the same cigar value. Zero length tuples are dropped

    Example:
        >>> join([(1, 1), (4, 7)], [(4, 3), (2, 4)])
        [(1, 1), (4, 10), (2, 4)]
    """
    result = []
    for cigar in pos:
        for v, f in cigar:
            if f == 0:
                continue
            if len(result) > 0 and result[-1][0] == v:
                result[-1] = (v, f + result[-1][1])
            else:
                result.append((v, f))
    return result


def convert_string_to_cigar(string: str) -> CigarTuples:
    """
    Given a cigar string, converts it to the appropriate cigar tuple

    Raises:
        ValueError: the string is not a valid cigar string

    Example:
        >>> convert_string_to_cigar('8M2I1D9X')
        [(CIGAR.M, 8), (CIGAR.I, 2), (CIGAR.D, 1), (CIGAR.X, 9)]
    """
    if not CIGAR_PATTERN.match(string):
        raise ValueError('invalid cigar string', string)
    cigar = [m[0] for m in re.findall(r'(\d+(\D))', string)]
    return [
        (getattr(CIGAR, match[-1]) if match[-1] != '=' else CIGAR.EQ, int(match[:-1]))
        for match in cigar
    ]


def convert_cigar_to_string(cigar: CigarTuples) -> str:
    return ''.join(
        ['{}{}'.format(f, CIGAR.reverse(s) if s != CIGAR.EQ else '=') for s, f in cigar]
    )


def query_length(cigar: CigarTuples) -> int:
    """
    number of bases of the read sequence described by the cigar (hard clipped bases are not counted)
    """
    return sum([f for v, f in cigar if v in QUERY_ALIGNED_STATES])


def aligned_query_positions(cigar: CigarTuples) -> Tuple[bool, ...]:
    """
    for every base of the read sequence, flags whether it is aligned to a reference base

    Example:
        >>> aligned_query_positions([(CIGAR.S, 2), (CIGAR.M, 2), (CIGAR.I, 1)])
        (False, False, True, True, False)
    """
    result = []
    for v, f in cigar:
        if v in QUERY_ALIGNED_STATES:
            result.extend([v in ALIGNED_STATES] * f)
    return tuple(result)


def clip_to_query_window(cigar: CigarTuples, start: int, end: int) -> Tuple[CigarTuples, int]:
    """
    soft clips every read base outside the query interval [start, end)

    Args:
        cigar: the cigar tuples of the alignment
        start: first read base to keep aligned (0-based)
        end: one past the last read base to keep aligned

    Returns:
        the new cigar tuples and the number of reference bases dropped from the start of the alignment

    Example:
        >>> clip_to_query_window([(CIGAR.M, 10)], 2, 8)
        ([(CIGAR.S, 2), (CIGAR.M, 6), (CIGAR.S, 2)], 2)
    """
    total = query_length(cigar)
    if not 0 <= start <= end <= total:
        raise ValueError('query window is outside the read', start, end, total)
    lead_hard = cigar[0][1] if cigar and cigar[0][0] == CIGAR.H else 0
    trail_hard = cigar[-1][1] if len(cigar) > 1 and cigar[-1][0] == CIGAR.H else 0

    inner = []
    ref_shift = 0
    qpos = 0
    for state, freq in cigar:
        if state == CIGAR.H:
            continue
        if state in QUERY_ALIGNED_STATES:
            seg_start, seg_end = qpos, qpos + freq
            qpos = seg_end
            before = max(0, min(seg_end, start) - seg_start)
            after = max(0, seg_end - max(seg_start, end))
            inside = freq - before - after
            if state in REFERENCE_ALIGNED_STATES:
                ref_shift += before
            if inside > 0:
                inner.append((state, inside))
        elif state in {CIGAR.D, CIGAR.N}:
            if qpos <= start:
                ref_shift += freq
            elif qpos < end:
                inner.append((state, freq))
        elif start < qpos < end:
            inner.append((state, freq))

    # events are not allowed to start or end the aligned portion
    while inner and inner[0][0] not in ALIGNED_STATES:
        state, freq = inner.pop(0)
        if state in {CIGAR.D, CIGAR.N}:
            ref_shift += freq
        elif state in QUERY_ALIGNED_STATES:
            start += freq
    while inner and inner[-1][0] not in ALIGNED_STATES:
        state, freq = inner.pop()
        if state in QUERY_ALIGNED_STATES:
            end -= freq

    result = join(
        [(CIGAR.H, lead_hard)],
        [(CIGAR.S, start)],
        inner,
        [(CIGAR.S, total - end)],
        [(CIGAR.H, trail_hard)],
    )
    return result, ref_shift
