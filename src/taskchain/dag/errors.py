"""Error taxonomy for the dependency engine.

``CycleWouldFormError`` is the routine write-path rejection.
``DataIntegrityError`` means the stored edge set is already corrupt and must
never be degraded into an empty result.
"""

from __future__ import annotations

from typing import Iterable, Optional


class TaskGraphError(Exception):
    """Base class for all dependency engine errors."""


class InvalidArgumentError(TaskGraphError, ValueError):
    """A task id is missing or malformed, or an edge points at itself."""


class UnknownTaskError(TaskGraphError):
    """An edge endpoint does not reference an existing task."""

    def __init__(self, task_id: int, message: Optional[str] = None) -> None:
        self.task_id = task_id
        super().__init__(message or f"Task {task_id} does not exist")


class CycleWouldFormError(TaskGraphError):
    """Inserting the candidate edge would close a dependency cycle."""

    def __init__(self, from_id: int, to_id: int) -> None:
        self.from_id = from_id
        self.to_id = to_id
        super().__init__(
            f"Adding dependency {from_id} -> {to_id} would create a circular dependency"
        )


class DataIntegrityError(TaskGraphError):
    """The supplied edge set is not acyclic, or the analysis lost a node."""

    def __init__(self, message: str, task_ids: Iterable[int] = ()) -> None:
        self.task_ids = sorted(task_ids)
        super().__init__(message)


class NotFoundError(TaskGraphError):
    """The task or edge to delete does not exist."""
