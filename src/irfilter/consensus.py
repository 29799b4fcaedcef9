"""
per-fragment ordering and consensus resolution

A fragment is first normalized so that the records of each read are contiguous and then resolved: either
accepted, with the duplicate alignments of multi-mapped reads folded into a canonical set, or discarded with
its records untouched
"""
import itertools
import logging
from typing import List, Tuple

from .constants import DISPOSITION, REASON
from .fragment import Alignment, Fragment

logger = logging.getLogger('irfilter')


class Resolution:
    """
    the outcome of resolving a fragment

    Attributes:
        disposition: accept or discard
        fragment: the canonical fragment when accepted, the input fragment when discarded
        reason: why the disposition was chosen
    """

    def __init__(self, disposition: str, fragment: Fragment, reason: str):
        self.disposition = DISPOSITION.enforce(disposition)
        self.fragment = fragment
        self.reason = REASON.enforce(reason)

    @property
    def table(self) -> str:
        return DISPOSITION.table(self.disposition)

    def __repr__(self):
        return 'Resolution({}, {}, {})'.format(self.disposition, self.reason, self.fragment)

    @classmethod
    def discard(cls, fragment: Fragment, reason: str) -> 'Resolution':
        return cls(DISPOSITION.DISCARD, fragment, reason)

    @classmethod
    def accept(cls, fragment: Fragment, reason: str) -> 'Resolution':
        return cls(DISPOSITION.ACCEPT, fragment, reason)


def normalize_fragment(fragment: Fragment) -> Fragment:
    """
    group the records of the fragment by read number (ascending). Records are never added, removed or changed

    Args:
        fragment: the fragment as read from the source

    Returns:
        a fragment with the same records in normalized order
    """
    detail = fragment.detail
    if len(detail) < 2:
        return fragment
    if len(detail) == 2:
        first, second = detail
        if second < first:
            return fragment.with_detail([second, first])
        return fragment
    return fragment.with_detail(sorted(detail))


def group_by_read(detail: List[Alignment]) -> List[Tuple[int, List[Alignment]]]:
    """
    split normalized records into the contiguous runs sharing a read number
    """
    return [(read_no, list(group)) for read_no, group in itertools.groupby(detail, lambda a: a.read_no)]


def _resolve_group(group: List[Alignment]) -> Tuple[List[Alignment], str]:
    """
    pick the consensus records for all the records of a single read

    Returns:
        the canonical records and an empty string, or an empty list and the reason the fragment must be discarded
    """
    ambiguous = 0
    good = 0
    first_good = None
    for index, algn in enumerate(group):
        is_ambiguous = algn.sequence.ambiguous()
        if is_ambiguous:
            ambiguous += 1
        if algn.aligned and not is_ambiguous:
            if good == 0:
                first_good = index
            good += 1

    if good == 0:
        return [], REASON.NO_GOOD

    if len(group) == 1:
        return list(group), ''

    representative = group[first_good]
    result = [representative]
    for index, algn in enumerate(group):
        if index == first_good or not algn.aligned:
            continue
        if ambiguous > 0 and algn.sequence.ambiguous():
            result.append(algn.truncated())
        elif algn.sequence.is_equivalent_to(representative.sequence):
            result.append(algn)
        else:
            return [], REASON.CONFLICT
    return result, ''


def resolve_fragment(fragment: Fragment) -> Resolution:
    """
    classify a normalized fragment as accepted or discarded

    Args:
        fragment: the fragment with its records grouped by read number (see :func:`normalize_fragment`)

    Returns:
        the resolution. Discarded fragments always carry the input records unchanged
    """
    reads = 0
    aligned = 0
    ambiguous = 0
    last_read = None

    for algn in fragment.detail:
        if algn.bad:
            return Resolution.discard(fragment, REASON.BAD)
        if algn.aligned:
            aligned += 1
        if algn.sequence.ambiguous():
            ambiguous += 1
        if reads == 0 or algn.read_no != last_read:
            last_read = algn.read_no
            reads += 1
    logger.debug(
        f'{fragment.group}/{fragment.name}: {len(fragment.detail)} records, {reads} reads, '
        f'{aligned} aligned, {ambiguous} ambiguous'
    )

    if aligned == 0:
        return Resolution.discard(fragment, REASON.UNALIGNED)

    if len(fragment.detail) == reads:
        if aligned == reads:
            return Resolution.accept(fragment, REASON.CONSISTENT)
        return Resolution.discard(fragment, REASON.PARTIAL)

    detail = []
    for read_no, group in group_by_read(fragment.detail):
        canonical, reason = _resolve_group(group)
        if reason:
            logger.debug(f'{fragment.group}/{fragment.name} read {read_no}: {reason}')
            return Resolution.discard(fragment, reason)
        detail.extend(canonical)
    return Resolution.accept(fragment.with_detail(detail), REASON.MERGED)
