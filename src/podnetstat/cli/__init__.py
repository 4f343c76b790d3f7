"""
Command-line interface for the podnetstat package.
"""

from .main import main_cli

__all__ = [
    "main_cli",
]
