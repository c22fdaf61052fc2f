"""
tripdb: a document store over a key-value blob backend, and the
travel-booking entities built on it.
"""

__version__ = "1.0.0"
