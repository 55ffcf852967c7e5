"""Caller-facing operations of the dependency engine.

Every function here is a pure function of the task and edge collections it
is handed; nothing is cached between calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from loguru import logger

from .critical_path import CriticalPathResult, analyze
from .cycle import would_create_cycle
from .errors import CycleWouldFormError, InvalidArgumentError, NotFoundError, UnknownTaskError
from .graph import build_graph
from .model import DependencyEdge, Task, coerce_task_id
from .toposort import topological_sort


@dataclass
class Neighbors:
    """Direct (non-transitive) neighbours of one task."""

    dependencies: list[Task] = field(default_factory=list)
    dependents: list[Task] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "dependencies": [t.to_dict() for t in self.dependencies],
            "dependents": [t.to_dict() for t in self.dependents],
        }


def check_and_prepare_insert(
    from_id: Any,
    to_id: Any,
    tasks: Iterable[Task],
    edges: Iterable[DependencyEdge],
) -> DependencyEdge:
    """Validate the edge "``from_id`` depends on ``to_id``" and return it.

    Argument and existence checks run before any traversal.  Must be called
    with the edge set as it exists immediately before the insert, inside the
    same write transaction that commits the result.

    Raises:
        InvalidArgumentError: an id is missing or malformed, or the ids are equal.
        UnknownTaskError: an endpoint is not among *tasks*.
        CycleWouldFormError: ``to_id`` already depends on ``from_id``.
    """
    src = coerce_task_id(from_id, "task id")
    dst = coerce_task_id(to_id, "dependency id")
    if src == dst:
        raise InvalidArgumentError("A task cannot depend on itself")

    known = {t.id for t in tasks}
    for tid in (src, dst):
        if tid not in known:
            raise UnknownTaskError(tid)

    edge_list = list(edges)
    candidate = DependencyEdge(src, dst)
    if candidate in edge_list:
        return candidate
    if would_create_cycle(src, dst, edge_list):
        logger.debug("Rejected dependency {} -> {}: cycle", src, dst)
        raise CycleWouldFormError(src, dst)
    return candidate


def remove_edge(from_id: Any, to_id: Any, edges: Iterable[DependencyEdge]) -> set[DependencyEdge]:
    """Return *edges* without ``(from_id, to_id)``; raise NotFoundError if absent."""
    target = DependencyEdge(
        coerce_task_id(from_id, "task id"), coerce_task_id(to_id, "dependency id")
    )
    remaining = set(edges)
    if target not in remaining:
        raise NotFoundError(f"Dependency {target.from_id} -> {target.to_id} not found")
    remaining.discard(target)
    return remaining


def compute_critical_path(
    tasks: Iterable[Task], edges: Iterable[DependencyEdge]
) -> CriticalPathResult:
    """Longest dependency chain plus earliest start for every task.

    Raises :class:`~taskchain.dag.errors.DataIntegrityError` if the edge set
    is not acyclic; no partial result is ever returned.
    """
    graph = build_graph(tasks, edges)
    if not graph:
        return CriticalPathResult()
    order = topological_sort(graph)
    return analyze(graph, order)


def list_dependencies_and_dependents(
    task_id: Any, tasks: Iterable[Task], edges: Iterable[DependencyEdge]
) -> Neighbors:
    tid = coerce_task_id(task_id)
    graph = build_graph(tasks, edges)
    if tid not in graph:
        raise UnknownTaskError(tid)
    return Neighbors(
        dependencies=[graph[d].task for d in graph.dependencies_of(tid)],
        dependents=[graph[d].task for d in graph.dependents_of(tid)],
    )
