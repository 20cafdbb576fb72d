"""
Command-line interface for the benchhost package.
"""

from .main import main_cli

__all__ = [
    "main_cli",
]
