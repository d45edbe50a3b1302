"""
CLI package for oobsetup

This package provides the command-line interface for
checking and converging controller settings.
"""

from .interface import main

__all__ = ['main']
