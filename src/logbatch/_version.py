"""
Package version.

Kept in its own module so the CLI and packaging can read it without
importing the rest of the library.
"""

__version__ = "0.1.0"
