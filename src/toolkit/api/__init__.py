"""
REST API layer for toolkit.

Quick start::

    from toolkit.api import create_app

    app = create_app()  # ready for uvicorn
"""

from toolkit.api.app import create_app

__all__ = ["create_app"]
