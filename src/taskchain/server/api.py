"""FastAPI web server for the taskchain board."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..service import TaskService
from .task_api import create_todo_router


def create_app(
    project_dir: Optional[Path] = None,
    enable_cors: bool = True,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        project_dir: Default project directory.
        enable_cors: Whether to enable CORS.

    Returns:
        Configured FastAPI app.
    """
    app = FastAPI(
        title="taskchain",
        description="Task board with dependency tracking and critical path analysis",
        version=__version__,
    )

    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.state.default_project_dir = project_dir

    def _get_project_dir(project_dir_param: Optional[str] = None) -> Path:
        """Get project directory from parameter or default."""
        if project_dir_param:
            return Path(project_dir_param)
        if app.state.default_project_dir:
            return app.state.default_project_dir
        return Path.cwd()

    def _get_service(project_dir_param: Optional[str] = None) -> TaskService:
        # A fresh service per request; nothing is cached between requests.
        return TaskService.for_project(_get_project_dir(project_dir_param))

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": "taskchain",
            "version": __version__,
            "status": "running",
        }

    app.include_router(create_todo_router(_get_service))
    return app
