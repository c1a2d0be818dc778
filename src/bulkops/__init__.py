"""
bulkops - configure and execute bulk operations over listing selections.
"""

__version__ = "0.1.0"
