"""
StemHub - collaboration backend for shared music projects.
"""

__version__ = "1.0.0"
