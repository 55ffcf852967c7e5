"""Provide the public `taskchain` package exports."""

from __future__ import annotations

from .service import TaskService

__version__ = "0.1.0"

__all__ = ["TaskService", "__version__"]
