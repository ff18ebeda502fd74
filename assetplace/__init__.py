"""
Asset Place: personal wealth tracking and projections.
"""

__version__ = "0.1.0"
