"""Todo and dependency API endpoints.

This module provides a FastAPI router with task CRUD, dependency management
and the critical-path view.  It is mounted under ``/api/todos`` by the
``create_app`` factory.
"""

from __future__ import annotations

from typing import Any, Callable, NoReturn, Optional

from fastapi import APIRouter, HTTPException, Query
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from ..dag.errors import (
    CycleWouldFormError,
    DataIntegrityError,
    InvalidArgumentError,
    NotFoundError,
    TaskGraphError,
    UnknownTaskError,
)
from ..service import TaskService
from ..store import StoreError


# ---------------------------------------------------------------------------
# Pydantic request / response models
# ---------------------------------------------------------------------------

class CreateTodoRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    due_date: Optional[str] = Field(None, alias="dueDate")
    image_url: Optional[str] = Field(None, alias="imageURL")


class DependencyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    dependency_id: Any = Field(None, alias="dependencyId")


class MessageResponse(BaseModel):
    message: str


class NeighborsResponse(BaseModel):
    dependencies: list[dict[str, Any]]
    dependents: list[dict[str, Any]]


class CriticalPathResponse(BaseModel):
    criticalPath: list[dict[str, Any]]
    earliestStartDates: dict[str, Optional[str]]


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------

_STATUS_BY_ERROR: list[tuple[type[Exception], int]] = [
    (InvalidArgumentError, 400),
    (CycleWouldFormError, 400),
    (UnknownTaskError, 404),
    (NotFoundError, 404),
    (DataIntegrityError, 500),
    (StoreError, 503),
]


def _raise_http(exc: Exception) -> NoReturn:
    for error_cls, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            if status >= 500:
                logger.error("{} failed: {}", error_cls.__name__, exc)
            raise HTTPException(status_code=status, detail=str(exc)) from exc
    raise exc


# ---------------------------------------------------------------------------
# Router factory
# ---------------------------------------------------------------------------

def create_todo_router(get_service: Callable[[Optional[str]], TaskService]) -> APIRouter:
    """Create the todo API router.

    Parameters
    ----------
    get_service:
        A callable ``(project_dir_param: str | None) -> TaskService`` that
        resolves the service for the current request's project directory.
    """
    router = APIRouter(prefix="/api/todos", tags=["todos"])

    # ------------------------------------------------------------------
    # Todos
    # ------------------------------------------------------------------

    @router.get("")
    async def list_todos(project_dir: Optional[str] = Query(None)) -> list[dict[str, Any]]:
        service = get_service(project_dir)
        try:
            return [t.to_dict() for t in service.list_tasks()]
        except StoreError as exc:
            _raise_http(exc)

    @router.post("", status_code=201)
    async def create_todo(
        body: CreateTodoRequest,
        project_dir: Optional[str] = Query(None),
    ) -> dict[str, Any]:
        service = get_service(project_dir)
        try:
            task = service.create_task(body.title, due_date=body.due_date, image_url=body.image_url)
        except (TaskGraphError, StoreError) as exc:
            _raise_http(exc)
        return task.to_dict()

    # Registered before "/{todo_id}" routes so the literal paths win.
    @router.get("/dependencies")
    async def list_dependencies(project_dir: Optional[str] = Query(None)) -> list[dict[str, int]]:
        service = get_service(project_dir)
        try:
            return [e.to_dict() for e in service.list_dependencies()]
        except StoreError as exc:
            _raise_http(exc)

    @router.get("/critical-path", response_model=CriticalPathResponse)
    async def get_critical_path(project_dir: Optional[str] = Query(None)) -> CriticalPathResponse:
        service = get_service(project_dir)
        try:
            path_tasks, result = service.critical_path()
        except (TaskGraphError, StoreError) as exc:
            _raise_http(exc)
        return CriticalPathResponse(
            criticalPath=[t.to_dict() for t in path_tasks],
            earliestStartDates=result.earliest_start_iso(),
        )

    @router.get("/{todo_id}")
    async def get_todo(todo_id: str, project_dir: Optional[str] = Query(None)) -> dict[str, Any]:
        service = get_service(project_dir)
        try:
            task = service.get_task(todo_id)
        except (TaskGraphError, StoreError) as exc:
            _raise_http(exc)
        return task.to_dict()

    @router.delete("/{todo_id}", response_model=MessageResponse)
    async def delete_todo(todo_id: str, project_dir: Optional[str] = Query(None)) -> MessageResponse:
        service = get_service(project_dir)
        try:
            service.delete_task(todo_id)
        except (TaskGraphError, StoreError) as exc:
            _raise_http(exc)
        return MessageResponse(message="Todo deleted")

    # ------------------------------------------------------------------
    # Dependencies of one todo
    # ------------------------------------------------------------------

    @router.get("/{todo_id}/dependencies", response_model=NeighborsResponse)
    async def get_todo_dependencies(
        todo_id: str,
        project_dir: Optional[str] = Query(None),
    ) -> NeighborsResponse:
        service = get_service(project_dir)
        try:
            neighbors = service.get_neighbors(todo_id)
        except (TaskGraphError, StoreError) as exc:
            _raise_http(exc)
        return NeighborsResponse(**neighbors.to_dict())

    @router.post("/{todo_id}/dependencies", response_model=MessageResponse, status_code=201)
    async def add_todo_dependency(
        todo_id: str,
        body: DependencyRequest,
        project_dir: Optional[str] = Query(None),
    ) -> MessageResponse:
        service = get_service(project_dir)
        try:
            service.add_dependency(todo_id, body.dependency_id)
        except (TaskGraphError, StoreError) as exc:
            _raise_http(exc)
        return MessageResponse(message="Dependency added")

    @router.delete("/{todo_id}/dependencies", response_model=MessageResponse)
    async def remove_todo_dependency(
        todo_id: str,
        body: DependencyRequest,
        project_dir: Optional[str] = Query(None),
    ) -> MessageResponse:
        service = get_service(project_dir)
        try:
            service.remove_dependency(todo_id, body.dependency_id)
        except (TaskGraphError, StoreError) as exc:
            _raise_http(exc)
        return MessageResponse(message="Dependency removed")

    return router
