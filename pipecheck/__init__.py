"""
pipecheck - static contract checks for CI workflow definitions.
"""

__version__ = "0.1.0"
