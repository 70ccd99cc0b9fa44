"""
CLI layer for toolkit.

Entry point::

    toolkit --help
"""

from toolkit.cli.app import app

__all__ = ["app"]
