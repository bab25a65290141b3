"""
Card Show Finder backend: radius search and show series detection.
"""

__version__ = "1.0.0"
