"""
Command line interface for specwright.
"""

from specwright.cli.main import cli

__all__ = ["cli"]
