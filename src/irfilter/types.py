"""
Helper classes for type hints
"""

from typing import List, Tuple

CigarTuples = List[Tuple[int, int]]
RowRange = Tuple[int, int]
