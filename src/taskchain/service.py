"""Task service: CRUD for tasks and dependencies on top of the store.

This is the primary entry point for the CLI and the HTTP API.  It wraps
:class:`TaskStore` with validation and runs the dependency engine on fresh
snapshots.  Edge inserts are checked and committed inside one store
transaction.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from loguru import logger

from .config import get_lock_timeout, load_config, state_dir_for
from .dag import (
    CriticalPathResult,
    CycleWouldFormError,
    DataIntegrityError,
    DependencyEdge,
    Neighbors,
    Task,
    check_and_prepare_insert,
    compute_critical_path,
    list_dependencies_and_dependents,
)
from .dag.errors import InvalidArgumentError, NotFoundError
from .dag.model import coerce_task_id, parse_timestamp
from .store import TaskStore


class TaskService:
    """Manage tasks and their dependency edges for one project.

    Parameters
    ----------
    state_dir:
        Path to the ``.taskchain/`` directory.
    lock_timeout:
        Seconds to wait for the store lock.
    """

    def __init__(self, state_dir: Path, lock_timeout: Optional[float] = None) -> None:
        if lock_timeout is None:
            self.store = TaskStore(state_dir)
        else:
            self.store = TaskStore(state_dir, lock_timeout=lock_timeout)
        self._state_dir = state_dir

    @classmethod
    def for_project(cls, project_dir: Path) -> "TaskService":
        """Build a service for *project_dir*, honouring its config file."""
        config, err = load_config(project_dir)
        if err:
            logger.warning("Ignoring unreadable config: {}", err)
        return cls(state_dir_for(project_dir), lock_timeout=get_lock_timeout(config))

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def create_task(
        self,
        title: str,
        due_date: Any = None,
        image_url: Optional[str] = None,
    ) -> Task:
        """Create and persist a new task, returning it."""
        if not isinstance(title, str) or not title.strip():
            raise InvalidArgumentError("Title is required")
        due = parse_timestamp(due_date)
        with self.store.transaction() as tx:
            task = tx.add_task(title.strip(), due_date=due, image_url=image_url or None)
        logger.info("Created task {}: {}", task.id, task.title)
        return task

    def list_tasks(self) -> list[Task]:
        """All tasks, newest first."""
        tasks, _ = self.store.read_snapshot()
        return sorted(tasks, key=lambda t: (t.created_at, t.id), reverse=True)

    def get_task(self, task_id: Any) -> Task:
        tid = coerce_task_id(task_id)
        tasks, _ = self.store.read_snapshot()
        for task in tasks:
            if task.id == tid:
                return task
        raise NotFoundError(f"Task {tid} not found")

    def delete_task(self, task_id: Any) -> Task:
        """Delete a task and every dependency edge that references it."""
        tid = coerce_task_id(task_id)
        with self.store.transaction() as tx:
            task = tx.delete_task(tid)
        logger.info("Deleted task {}", tid)
        return task

    # ------------------------------------------------------------------
    # Dependencies
    # ------------------------------------------------------------------

    def list_dependencies(self) -> list[DependencyEdge]:
        _, edges = self.store.read_snapshot()
        return edges

    def add_dependency(self, task_id: Any, dependency_id: Any) -> DependencyEdge:
        """Record that *task_id* depends on *dependency_id*.

        The cycle check and the write happen under the same store lock.

        Raises :class:`InvalidArgumentError`, :class:`UnknownTaskError` or
        :class:`CycleWouldFormError`.
        """
        try:
            with self.store.transaction() as tx:
                edge = check_and_prepare_insert(task_id, dependency_id, tx.list_tasks(), tx.edges())
                added = tx.add_edge(edge)
        except CycleWouldFormError as exc:
            logger.warning("Rejected dependency: {}", exc)
            raise
        if added:
            logger.info("Task {} now depends on {}", edge.from_id, edge.to_id)
        return edge

    def remove_dependency(self, task_id: Any, dependency_id: Any) -> None:
        """Remove the edge; raises :class:`NotFoundError` if it does not exist."""
        tid = coerce_task_id(task_id, "task id")
        did = coerce_task_id(dependency_id, "dependency id")
        with self.store.transaction() as tx:
            tx.remove_edge(tid, did)
        logger.info("Removed dependency {} -> {}", tid, did)

    def get_neighbors(self, task_id: Any) -> Neighbors:
        tasks, edges = self.store.read_snapshot()
        return list_dependencies_and_dependents(task_id, tasks, edges)

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def critical_path(self) -> tuple[list[Task], CriticalPathResult]:
        """Critical path tasks plus the full analysis result.

        Raises :class:`DataIntegrityError` if the stored edges contain a cycle.
        """
        tasks, edges = self.store.read_snapshot()
        try:
            result = compute_critical_path(tasks, edges)
        except DataIntegrityError as exc:
            logger.error("Critical path failed: {}", exc)
            raise
        by_id = {t.id: t for t in tasks}
        return [by_id[tid] for tid in result.critical_path], result
