"""Web server package for taskchain."""

from .api import create_app

__all__ = ["create_app"]
