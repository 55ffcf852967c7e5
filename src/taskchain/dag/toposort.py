"""Topological ordering of the dependency graph (Kahn's algorithm)."""

from __future__ import annotations

import heapq

from loguru import logger

from .errors import DataIntegrityError
from .graph import Graph


def topological_sort(graph: Graph) -> list[int]:
    """Order task ids so every task comes after all of its dependencies.

    Among tasks that are eligible at the same time, the lowest id goes first,
    so the order is reproducible for a given input.

    Raises :class:`DataIntegrityError` if some tasks can never become eligible,
    i.e. the edge set contains a cycle.
    """
    in_degree: dict[int, int] = {tid: len(node.dependency_ids) for tid, node in graph.items()}
    ready: list[int] = [tid for tid, deg in in_degree.items() if deg == 0]
    heapq.heapify(ready)

    order: list[int] = []
    while ready:
        tid = heapq.heappop(ready)
        order.append(tid)
        for dependent in graph[tid].dependent_ids:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                heapq.heappush(ready, dependent)

    if len(order) != len(graph):
        remaining = [tid for tid, deg in in_degree.items() if deg > 0]
        logger.error("Dependency cycle detected among tasks: {}", sorted(remaining))
        raise DataIntegrityError(
            f"Dependency graph contains a cycle among tasks {sorted(remaining)}",
            task_ids=remaining,
        )

    logger.debug("Topological order: {}", order)
    return order
