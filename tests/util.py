import os

from irfilter.constants import STRAND
from irfilter.fragment import Alignment, Fragment

DATA_DIR = os.path.join(os.path.dirname(__file__), 'data')

RAW_IR_TABLE = os.path.join(DATA_DIR, 'raw_ir.tab')
SAM_INPUT = os.path.join(DATA_DIR, 'fragments.sam')

SEQ = 'ACGTACGTAC'


def get_data(*paths):
    return os.path.join(DATA_DIR, *paths)


def aligned(read_no, sequence=SEQ, reference='chr1', position=100, strand=STRAND.POS, cigar=None, **kwargs):
    if cigar is None:
        cigar = '{}M'.format(len(sequence))
    return Alignment(read_no, sequence, True, reference, strand, position, cigar, **kwargs)


def unaligned(read_no, sequence=SEQ, **kwargs):
    return Alignment(read_no, sequence, **kwargs)


def fragment(*detail, group='grp1', name='frag1'):
    return Fragment(group, name, list(detail))


def read_table(filename):
    with open(filename, 'r') as fh:
        lines = fh.read().split('\n')
    return [line.split('\t') for line in lines if line]
