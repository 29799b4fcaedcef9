"""
filters fragments from a raw IR table into kept (high-confidence) and discarded (low-confidence) partitions
"""
__version__ = '1.0.0'
