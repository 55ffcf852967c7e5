"""In-memory dependency graph, rebuilt from the store for every query."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Mapping

from loguru import logger

from .model import DependencyEdge, Task


@dataclass
class GraphNode:
    task: Task
    dependency_ids: set[int] = field(default_factory=set)
    dependent_ids: set[int] = field(default_factory=set)


class Graph(Mapping[int, GraphNode]):
    """Read-only arena of :class:`GraphNode` objects indexed by task id.

    ``dependency_ids`` holds the tasks a node depends on; ``dependent_ids``
    holds the tasks that depend on it.  Instances live for a single query.
    """

    def __init__(self, nodes: dict[int, GraphNode]) -> None:
        self._nodes = nodes

    def __getitem__(self, task_id: int) -> GraphNode:
        return self._nodes[task_id]

    def __iter__(self) -> Iterator[int]:
        return iter(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def dependencies_of(self, task_id: int) -> list[int]:
        """Direct dependencies of *task_id* in ascending id order."""
        return sorted(self._nodes[task_id].dependency_ids)

    def dependents_of(self, task_id: int) -> list[int]:
        """Direct dependents of *task_id* in ascending id order."""
        return sorted(self._nodes[task_id].dependent_ids)


def build_graph(tasks: Iterable[Task], edges: Iterable[DependencyEdge]) -> Graph:
    """Build a :class:`Graph` from the current task and edge collections.

    Edges that reference a task not present in *tasks* are stale (the task
    was deleted out of band) and are skipped rather than reported.
    """
    nodes: dict[int, GraphNode] = {}
    for task in tasks:
        nodes[task.id] = GraphNode(task=task)

    skipped = 0
    for edge in edges:
        src = nodes.get(edge.from_id)
        dst = nodes.get(edge.to_id)
        if src is None or dst is None:
            skipped += 1
            continue
        src.dependency_ids.add(edge.to_id)
        dst.dependent_ids.add(edge.from_id)

    if skipped:
        logger.debug("Skipped {} dependency edge(s) referencing missing tasks", skipped)
    return Graph(nodes)
